"""
Palintris Package
=================

Puzzle engine for Palintris: turn a sequence of symbols into a palindrome
with a limited set of editing operations.

- puzzle_core: sequence algebra, sessions, scoring and puzzle generation
- evaluation: runs an agent over a bank of daily-challenge dates

All balance constants live in game_config.yaml; the campaign lives in
levels.yaml.
"""
