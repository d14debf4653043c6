import json
import os

import pytest

from evobots import BatchConfig, ConfigError, EvolutionConfig, RecipeStore, CircuitGenome, NaughtsGame
from evobots.cli import RunMode, build_parser, main, validate_args


def _mode(*argv):
    return validate_args(build_parser().parse_args(list(argv)))


def test_run_modes():
    assert _mode("circuit", "random") is RunMode.SINGLE
    assert _mode("circuit", "random", "--batch", "5") is RunMode.BATCH
    assert _mode("circuit", "oracle", "--magic") is RunMode.BATCH
    assert _mode("circuit", "random", "--batch", "5", "--genetic", "3") is RunMode.GENETIC
    assert _mode("circuit", "oracle", "--magic", "--genetic", "3", "--samples", "4") is RunMode.GENETIC


@pytest.mark.parametrize(
    "argv, message",
    [
        (["--genetic", "3"], "--genetic requires --batch"),
        (["--batch", "1", "--genetic", "3"], "--genetic requires --batch"),
        (["--keep", "2"], "--keep requires --batch"),
        (["--batch", "5", "--samples", "3"], "--samples requires --genetic"),
        (["--batch", "5", "--wild", "3"], "--wild requires --genetic"),
        (["--magic", "--batch", "3"], "Cannot specify --batch with --magic"),
        (["--botid", "abc"], "--botid requires --botdb"),
    ],
)
def test_inconsistent_options_are_rejected(argv, message):
    with pytest.raises(ConfigError, match=message):
        _mode("circuit", "oracle", *argv)


def test_config_validation():
    with pytest.raises(ConfigError):
        BatchConfig(game="chess").validate()
    with pytest.raises(ConfigError):
        BatchConfig(bot_names=("circuit", "wizard")).validate()
    with pytest.raises(ConfigError):
        BatchConfig(bot_names=("circuit", "random"), exhaustive=True).validate()
    with pytest.raises(ConfigError):
        BatchConfig(batch_size=0).validate()
    with pytest.raises(ConfigError):
        EvolutionConfig(keep_samples=0).validate()
    with pytest.raises(ConfigError):
        EvolutionConfig(threshold_smoothing=0.0).validate()
    BatchConfig(game="Connect4", bot_names=("Network", "oracle"), exhaustive=True).validate()


def test_bad_options_exit_with_usage_error(tmp_path):
    with pytest.raises(SystemExit) as exc:
        main(["circuit", "random", "--genetic", "2", "--log-dir", str(tmp_path)])
    assert exc.value.code == 2
    with pytest.raises(SystemExit) as exc:
        main(["chess-bot", "random", "--log-dir", str(tmp_path)])
    assert exc.value.code == 2


@pytest.mark.parametrize(
    "argv",
    [
        ["random", "oracle", "--recipe", "best.json"],
        ["oracle", "random", "--batch", "3", "--botdb", "--botid", "abc"],
    ],
)
def test_recipe_without_a_genetic_bot_is_rejected(tmp_path, argv, capsys):
    with pytest.raises(SystemExit) as exc:
        main(argv + ["--log-dir", str(tmp_path)])
    assert exc.value.code == 2
    assert "need a genetic bot" in capsys.readouterr().err


def test_single_match_prints_the_game(tmp_path, capsys):
    main(["oracle", "oracle", "--log-dir", str(tmp_path / "log")])
    out = capsys.readouterr().out
    assert "X plays 0" in out
    assert "X wins" in out


def test_batch_prints_a_summary(tmp_path, capsys):
    main(["circuit", "random", "--batch", "4", "--seed", "1", "--log-dir", str(tmp_path / "log")])
    out = capsys.readouterr().out
    assert "4 matches" in out


def test_genetic_run_saves_the_best_recipe(tmp_path):
    out_dir = tmp_path / "artifacts"
    main([
        "circuit", "random",
        "--batch", "2", "--genetic", "2", "--samples", "2", "--keep", "1",
        "--workers", "1", "--seed", "1", "--botdb", "--plot",
        "--output-dir", str(out_dir), "--log-dir", str(tmp_path / "log"),
    ])
    with open(out_dir / "best_recipe.json", "r", encoding="utf-8") as f:
        payload = json.load(f)
    assert payload["recipe"]["kind"] == "circuit"
    assert payload["meta"]["bots"] == ["circuit", "random"]
    assert os.path.exists(out_dir / "scores.jsonl")
    assert os.path.exists(out_dir / "botdb.json")
    assert os.path.exists(out_dir / "score_history.png")
    assert os.path.exists(out_dir / "best_circuit.png")


def test_recipe_from_the_bot_store(tmp_path, capsys):
    out_dir = tmp_path / "artifacts"
    recipe = CircuitGenome.random(NaughtsGame.info()).serialize()
    bot_id = RecipeStore(str(out_dir / "botdb.json")).save("circuit", recipe, 1.0)
    main(["circuit", "oracle", "--magic", "--botdb", "--botid", bot_id,
          "--output-dir", str(out_dir), "--log-dir", str(tmp_path / "log")])
    assert "matches" in capsys.readouterr().out


def test_unknown_bot_id_is_reported(tmp_path, capsys):
    with pytest.raises(SystemExit) as exc:
        main(["circuit", "oracle", "--magic", "--botdb", "--botid", "nope",
              "--output-dir", str(tmp_path), "--log-dir", str(tmp_path / "log")])
    assert exc.value.code == 1
    assert "ERROR: Bot not found: nope" in capsys.readouterr().err
