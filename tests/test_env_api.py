"""
Tests for Gymnasium environment API.
"""

import json
from pathlib import Path

import pytest
import numpy as np

from contestants.baseline_hints.agent import PalindromeAgent
from palintris.evaluation.run_eval import (
    evaluate_agent,
    evaluate_single_date,
    load_agent,
    load_date_bank,
    save_results,
)
from palintris.puzzle_core.config_loader import load_config
from palintris.puzzle_core.env_gym import ActionCodec, PalindromeEnv, build_vocabulary
from palintris.puzzle_core.level import Difficulty, PuzzleConfig
from palintris.puzzle_core.operations import (
    Delete,
    Insert,
    Mirror,
    OperationType,
    Replace,
    Rotate,
    Swap,
)
from palintris.puzzle_core.palindrome import RotateDirection


SWAP, ROTATE, MIRROR, INSERT, DELETE, REPLACE = range(6)
# Non-adjacent swap, rejected on any sequence
INVALID_ACTION = np.array([SWAP, 0, 2, 0])
TEMPLATE_AGENT = Path(__file__).resolve().parent.parent / "contestants" / "team_template"


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def env():
    env = PalindromeEnv()
    yield env
    env.close()


class TestSpaces:
    """Test action and observation space definitions."""

    def test_action_space(self, env, config):
        vocabulary = build_vocabulary(config)

        assert list(env.action_space.nvec) == [6, 15, 15, len(vocabulary)]
        assert len(vocabulary) == len(set(vocabulary))
        assert env.vocabulary[:3] == ["A", "B", "C"]

    def test_observation_in_space(self, env):
        obs, _ = env.reset(seed=42)

        assert env.observation_space.contains(obs)

    def test_observation_structure(self, env):
        obs, _ = env.reset(options={"level_id": 1})

        assert obs["sequence"].shape == (15,)
        assert list(obs["sequence"][:4]) == [0, 0, 1, -1]
        assert list(obs["sequence_mask"][:4]) == [1, 1, 1, 0]
        assert int(obs["length"]) == 3
        assert int(obs["operations_remaining"]) == 3
        assert int(obs["time_remaining"]) == -1
        assert int(obs["has_target"]) == 0
        assert list(obs["allowed_operations"]) == [1, 0, 0, 0, 0, 0]
        assert int(obs["min_operations"]) == 1


class TestResetStep:
    """Test reset and step semantics."""

    def test_reset_returns_obs_and_info(self, env):
        result = env.reset(seed=42)

        assert isinstance(result, tuple)
        assert len(result) == 2
        obs, info = result
        assert isinstance(obs, dict)
        assert info["mode"] == "time_attack"
        assert info["status"] == "active"

    def test_step_returns_five_values(self, env):
        env.reset(seed=42)

        obs, reward, terminated, truncated, info = env.step(INVALID_ACTION)

        assert isinstance(obs, dict)
        assert reward == 0.0
        assert isinstance(terminated, bool)
        assert isinstance(truncated, bool)
        assert info["valid"] is False

    def test_step_before_reset(self, env):
        with pytest.raises(RuntimeError):
            env.step(INVALID_ACTION)

    def test_solve_level_one(self, env):
        env.reset(options={"level_id": 1})

        obs, reward, terminated, truncated, info = env.step(np.array([SWAP, 1, 2, 0]))

        assert info["valid"]
        assert terminated
        assert not truncated
        assert reward == 0.0
        assert info["status"] == "solved"
        assert info["score"] == 1400
        assert info["bonuses_achieved"] == ("perfect",)
        assert info["sequence"] == ["A", "B", "A"]

    def test_invalid_action_keeps_state(self, env):
        obs_before, _ = env.reset(options={"level_id": 1})

        obs, _, terminated, _, info = env.step(INVALID_ACTION)

        assert not info["valid"]
        assert not terminated
        assert np.array_equal(obs["sequence"], obs_before["sequence"])
        assert info["operations_remaining"] == 3

    def test_timed_level_expires(self, env):
        env.reset(options={"level_id": 36})

        for _ in range(19):
            _, _, terminated, _, _ = env.step(INVALID_ACTION)
            assert not terminated

        obs, _, terminated, _, info = env.step(INVALID_ACTION)
        assert terminated
        assert info["status"] == "expired"
        assert int(obs["time_remaining"]) == 0

    def test_out_of_moves_terminates(self, env):
        env.reset(options={"level_id": 2})

        # RACRA -> RARCA -> RACRA uses the whole budget of 2
        _, _, terminated, _, _ = env.step(np.array([SWAP, 2, 3, 0]))
        assert not terminated
        _, _, terminated, _, info = env.step(np.array([SWAP, 2, 3, 0]))
        assert terminated
        assert info["status"] == "active"
        assert info["operations_remaining"] == 0

    def test_truncation(self):
        env = PalindromeEnv(max_steps=3)
        env.reset(options={"level_id": 1})

        results = [env.step(INVALID_ACTION) for _ in range(3)]
        env.close()

        assert [r[3] for r in results] == [False, False, True]
        assert not any(r[2] for r in results)

    def test_unknown_level(self, env):
        with pytest.raises(ValueError):
            env.reset(options={"level_id": 17})

    def test_custom_puzzle_with_target(self, env):
        puzzle = PuzzleConfig(
            id=500,
            name="Kayak",
            sequence=("K", "A", "Y", "K"),
            allowed_operations=(OperationType.INSERT, OperationType.DELETE),
            max_operations=2,
            difficulty=Difficulty.HARD,
            target_palindrome=("K", "A", "Y", "A", "K")
        )
        obs, info = env.reset(options={"puzzle": puzzle})

        assert info["mode"] == "custom"
        assert int(obs["has_target"]) == 1
        assert int((obs["target"] >= 0).sum()) == 5

        action = env.encode_action(Insert(3, "A"))
        _, _, terminated, _, info = env.step(action)
        assert terminated
        assert info["status"] == "solved"

    def test_daily_reset_is_deterministic(self, env):
        obs_a, info_a = env.reset(options={"date": "2024-01-02"})
        obs_b, info_b = env.reset(options={"date": "2024-01-02"})

        assert info_a["mode"] == "daily"
        assert info_a["puzzle_id"] == 9999
        assert np.array_equal(obs_a["sequence"], obs_b["sequence"])
        assert int(obs_a["time_remaining"]) > 0


class TestActionCodec:
    """Test action decoding and encoding."""

    def test_decode_each_operation(self, env):
        assert env.decode_action([SWAP, 3, 4, 0]) == Swap(3, 4)
        assert env.decode_action([ROTATE, 1, 4, 0]) == Rotate(1, 4, RotateDirection.RIGHT)
        assert env.decode_action([ROTATE, 4, 1, 0]) == Rotate(1, 4, RotateDirection.LEFT)
        assert env.decode_action([MIRROR, 5, 2, 0]) == Mirror(2, 5)
        assert env.decode_action([INSERT, 2, 0, 1]) == Insert(2, "B")
        assert env.decode_action([DELETE, 2, 9, 9]) == Delete(2)
        assert env.decode_action([REPLACE, 0, 0, 26]) == Replace(0, "0")

    @pytest.mark.parametrize("op", [
        Swap(1, 2),
        Rotate(0, 3, RotateDirection.LEFT),
        Rotate(0, 3, RotateDirection.RIGHT),
        Mirror(1, 4),
        Insert(0, "Z"),
        Delete(6),
        Replace(2, "●"),
    ])
    def test_encode_inverts_decode(self, env, op):
        assert env.decode_action(env.encode_action(op)) == op

    def test_sequence_codes_skip_padding(self, config):
        codec = ActionCodec.from_config(config)

        encoded = codec.encode_sequence(["A", "?", "B"], 5)

        assert list(encoded) == [0, -1, 1, -1, -1]
        assert codec.decode_sequence(encoded) == ["A", "B"]


class TestTimeAttackMode:
    """Test the default procedural mode."""

    def test_seeded_resets_match(self):
        env_a, env_b = PalindromeEnv(), PalindromeEnv()

        obs_a, _ = env_a.reset(seed=123)
        obs_b, _ = env_b.reset(seed=123)

        assert np.array_equal(obs_a["sequence"], obs_b["sequence"])
        env_a.close()
        env_b.close()

    def test_score_reported_at_episode_end(self, env, config):
        agent = PalindromeAgent(config)
        obs, _ = env.reset(seed=7)

        infos = []
        done = False
        while not done:
            obs, _, terminated, truncated, info = env.step(agent.act(obs))
            infos.append(info)
            done = terminated or truncated

        assert ["time_attack_score" in i for i in infos] == [False] * (len(infos) - 1) + [True]
        assert infos[-1]["time_attack_score"] >= 0


class TestAgentsAndEvaluation:
    """Test the baseline agent and the evaluation harness."""

    def test_baseline_solves_level_one(self, env, config):
        agent = PalindromeAgent(config)
        obs, _ = env.reset(options={"level_id": 1})

        _, _, terminated, _, info = env.step(agent.act(obs))

        assert terminated
        assert info["status"] == "solved"

    def test_baseline_returns_valid_action(self, env, config):
        agent = PalindromeAgent(config)
        obs, _ = env.reset(options={"date": "2024-01-06"})

        assert env.action_space.contains(agent.act(obs))

    def test_date_bank(self):
        dates = load_date_bank()

        assert len(dates) >= 7
        assert "2024-01-01" in dates

    def test_date_bank_rejects_bad_dates(self, tmp_path):
        path = tmp_path / "bank.json"
        path.write_text(json.dumps({"dates": ["2024-13-01"]}))

        with pytest.raises(ValueError):
            load_date_bank(str(path))

    def test_evaluate_agent(self, config):
        agent = PalindromeAgent(config)

        summary = evaluate_agent(agent.act, dates=["2024-01-01", "2024-01-06"], verbose=False)

        assert len(summary.results) == 2
        assert 0.0 <= summary.solve_rate <= 1.0
        assert summary.min_score <= summary.mean_score <= summary.max_score
        assert all(r.status in ("solved", "expired", "active") for r in summary.results)

    def test_evaluate_empty_dates(self, config):
        with pytest.raises(ValueError):
            evaluate_agent(PalindromeAgent(config).act, dates=[], verbose=False)

    def test_recorded_actions_replay(self, config):
        agent = PalindromeAgent(config)
        result = evaluate_single_date(agent.act, "2024-01-03", record_actions=True)

        recorded = iter(result.actions)
        replay = evaluate_single_date(lambda obs: np.array(next(recorded)), "2024-01-03")

        assert replay.final_score == result.final_score
        assert replay.status == result.status

    def test_load_agent_and_save(self, tmp_path):
        act = load_agent(str(TEMPLATE_AGENT))
        summary = evaluate_agent(act, dates=["2024-01-07"], verbose=False)
        output = tmp_path / "results.json"

        save_results(summary, "team_template", str(output))

        data = json.loads(output.read_text())
        assert data["agent"] == "team_template"
