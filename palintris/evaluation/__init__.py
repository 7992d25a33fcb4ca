"""
Evaluation Package
==================

Contains the date bank and evaluation harness for scoring agent submissions.
"""

from palintris.evaluation.run_eval import evaluate_agent, load_agent, load_date_bank

__all__ = ["evaluate_agent", "load_agent", "load_date_bank"]
