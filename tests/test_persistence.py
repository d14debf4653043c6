import json
import os
import random

import pytest

from evobots import (
    CircuitGenome,
    EvolutionHistory,
    NaughtsGame,
    NetworkGenome,
    RecipeStore,
    ScoreLog,
    StoreError,
    load_recipe_json,
    plot_history,
    save_recipe_json,
    setup_logger,
    visualize_circuit,
)


@pytest.mark.parametrize("genome_cls", [CircuitGenome, NetworkGenome])
def test_saved_recipe_loads_back_identical(tmp_path, genome_cls):
    recipe = genome_cls.random(NaughtsGame.info(), random.Random(1)).serialize()
    path = str(tmp_path / "out" / "best.json")
    save_recipe_json(recipe, path, meta={"score": 1.5})
    with open(path, "r", encoding="utf-8") as f:
        payload = json.load(f)
    assert payload["meta"] == {"score": 1.5}
    assert load_recipe_json(path) == recipe


def test_bare_recipe_file_loads(tmp_path):
    recipe = CircuitGenome.random(NaughtsGame.info(), random.Random(2)).serialize()
    path = tmp_path / "bare.json"
    path.write_text(recipe, encoding="utf-8")
    assert load_recipe_json(str(path)) == recipe


def test_score_log_only_appends(tmp_path):
    log = ScoreLog(str(tmp_path / "scores.jsonl"))
    assert log.read() == []
    log.append(0, -12.5, '{"kind":"circuit","recipe":""}')
    log.append(3, 4.0, '{"kind":"circuit","recipe":"INPUT"}')
    lines = log.read()
    assert [(l["generation"], l["score"]) for l in lines] == [(0, -12.5), (3, 4.0)]
    assert lines[1]["recipe"] == {"kind": "circuit", "recipe": "INPUT"}
    assert "created_utc" in lines[0]


def test_recipe_store_round_trip(tmp_path):
    store = RecipeStore(str(tmp_path / "db" / "botdb.json"))
    recipe = NetworkGenome.random(NaughtsGame.info(), random.Random(3)).serialize()
    first = store.save("network", recipe, 2.0)
    second = store.save("network", recipe, 3.0)
    assert first != second
    assert store.load(first) == recipe
    assert not os.path.exists(store.path + ".tmp")


def test_recipe_store_unknown_or_corrupt(tmp_path):
    path = tmp_path / "botdb.json"
    store = RecipeStore(str(path))
    with pytest.raises(StoreError):
        store.load("missing")
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(StoreError):
        store.load("missing")


def test_setup_logger_writes_a_log_file(tmp_path):
    log_file = setup_logger(str(tmp_path / "log"), level="WARNING", enable_colors=False)
    assert log_file is not None and os.path.exists(log_file)
    assert setup_logger(None) is None


def test_plots_are_written(tmp_path):
    history = EvolutionHistory(
        generations=[0, 1, 2],
        best_survivor=[1.0, 2.0, 2.0],
        gen_best=[1.0, 2.0, 1.5],
        avg=[-3.0, -1.0, 0.0],
        threshold=[-799.0, -638.8, -510.64],
        passed=[10, 4, 2],
    )
    history_path = str(tmp_path / "scores.png")
    plot_history(history, save_path=history_path)
    assert os.path.exists(history_path)

    circuit = CircuitGenome.random(NaughtsGame.info(), random.Random(4), num_gates=20, output_fan_in=5)
    circuit_path = str(tmp_path / "viz" / "circuit.png")
    visualize_circuit(circuit, circuit_path, title="circuit")
    assert os.path.exists(circuit_path)
