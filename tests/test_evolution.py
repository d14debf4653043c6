import math
import random

import pytest

from evobots import (
    BatchConfig,
    CircuitGenome,
    ConfigError,
    EvolutionConfig,
    InvariantError,
    NaughtsGame,
    ScoreLog,
    RecipeStore,
    run_evolution,
)
from evobots.evolution import (
    PopulationMember,
    generate_samples,
    mutate_recipe,
    raise_threshold,
    resolve_genetic_index,
    select_survivors,
)
from evobots import evolution
from evobots.fitness import dispatch
from evobots.players import BotKind


def _config(tmp_path, **overrides) -> EvolutionConfig:
    cfg = EvolutionConfig(
        num_generations=3,
        num_samples=3,
        keep_samples=2,
        workers=1,
        random_seed=3,
        scores_path=str(tmp_path / "scores.jsonl"),
        batch=BatchConfig(bot_names=("circuit", "random"), batch_size=2),
    )
    for key, value in overrides.items():
        setattr(cfg, key, value)
    return cfg


def test_threshold_moves_a_fifth_of_the_way_and_never_down():
    assert raise_threshold(-999.0, 1.0) == pytest.approx(-999.0 + 0.2 * 1000.0)
    assert raise_threshold(5.0, 1.0) == 5.0
    assert raise_threshold(0.0, 10.0, smoothing=1.0) == 10.0


def test_select_survivors_ranks_by_score_then_recipe():
    passed = [PopulationMember("b", 3.0), PopulationMember("a", 3.0), PopulationMember("c", 9.0)]
    survivors = select_survivors(passed, [], keep_samples=2)
    assert [m.recipe for m in survivors] == ["c", "a"]


def test_select_survivors_back_fills_from_previous_generation():
    previous = [PopulationMember("old-low", 1.0), PopulationMember("old-high", 4.0)]
    survivors = select_survivors([PopulationMember("new", 2.0)], previous, keep_samples=2)
    assert [m.recipe for m in survivors] == ["old-high", "new"]
    # a full pool is not topped up
    full = select_survivors([PopulationMember("x", 0.5), PopulationMember("y", 0.4)], previous, keep_samples=2)
    assert [m.recipe for m in full] == ["x", "y"]


def test_select_survivors_gives_one_slot_per_recipe():
    passed = [PopulationMember("same", 2.0), PopulationMember("same", 5.0), PopulationMember("other", 1.0)]
    survivors = select_survivors(passed, [], keep_samples=2)
    assert [(m.recipe, m.score) for m in survivors] == [("same", 5.0), ("other", 1.0)]


def test_completion_order_does_not_change_the_run(tmp_path, monkeypatch):
    forward_survivors, forward_history = run_evolution(_config(tmp_path / "a"))

    def reversed_dispatch(tasks, workers=1):
        return list(reversed(dispatch(tasks, workers)))

    monkeypatch.setattr(evolution, "dispatch", reversed_dispatch)
    reversed_survivors, reversed_history = run_evolution(_config(tmp_path / "b"))
    assert reversed_history == forward_history
    assert reversed_survivors == forward_survivors


def test_resolve_genetic_index():
    assert resolve_genetic_index((BotKind.CIRCUIT, BotKind.RANDOM)) == 0
    assert resolve_genetic_index((BotKind.ORACLE, BotKind.NETWORK)) == 1
    assert resolve_genetic_index((BotKind.NETWORK, BotKind.CIRCUIT)) == 0
    with pytest.raises(InvariantError):
        resolve_genetic_index((BotKind.RANDOM, BotKind.ORACLE))


def test_children_keep_their_parent_shape():
    rng = random.Random(4)
    parent = CircuitGenome.random(NaughtsGame.info(), rng)
    children = generate_samples(BotKind.CIRCUIT, [parent.serialize()], 5, rng)
    assert len(children) == 5
    for child in children:
        assert CircuitGenome.deserialize(child).arity() == parent.arity()


def test_mutate_recipe_rejects_non_canonical_parents():
    parent = CircuitGenome.random(NaughtsGame.info(), random.Random(1)).serialize()
    with pytest.raises(InvariantError):
        mutate_recipe(BotKind.CIRCUIT, parent.replace(",", ", ", 1), random.Random(1))


def test_evolution_threshold_never_decreases(tmp_path):
    survivors, history = run_evolution(_config(tmp_path, num_generations=4))
    assert history.generations == [0, 1, 2, 3]
    assert all(a <= b for a, b in zip(history.threshold, history.threshold[1:]))
    assert history.threshold[0] > -999.0
    assert 1 <= len(survivors) <= 2
    assert survivors == sorted(survivors, key=lambda m: (-m.score, m.recipe))
    assert all(not math.isnan(s) for s in history.gen_best)


def test_evolution_is_reproducible_with_a_seed(tmp_path):
    first, _ = run_evolution(_config(tmp_path / "a"))
    second, _ = run_evolution(_config(tmp_path / "b"))
    assert [(m.recipe, m.score) for m in first] == [(m.recipe, m.score) for m in second]


def test_evolution_logs_improving_generations(tmp_path):
    cfg = _config(tmp_path)
    store = RecipeStore(str(tmp_path / "botdb.json"))
    survivors, history = run_evolution(cfg, store=store)
    lines = ScoreLog(cfg.scores_path).read()
    assert lines
    assert [line["generation"] for line in lines] == sorted(line["generation"] for line in lines)
    saved = store._read()
    assert len(saved) == len(lines)
    assert all(entry["name"] == "circuit" for entry in saved.values())


def test_evolution_from_a_seed_recipe(tmp_path):
    seed = CircuitGenome.random(NaughtsGame.info(), random.Random(12)).serialize()
    cfg = _config(tmp_path, num_generations=1, num_samples=2)
    survivors, history = run_evolution(cfg, seed_recipe=seed)
    assert history.passed[0] <= 3
    for member in survivors:
        assert CircuitGenome.deserialize(member.recipe).arity() == CircuitGenome.deserialize(seed).arity()


def test_evolution_against_the_oracle_with_wild_samples(tmp_path):
    cfg = _config(
        tmp_path,
        num_generations=2,
        num_samples=2,
        wild_samples=2,
        batch=BatchConfig(bot_names=("oracle", "network"), exhaustive=True),
    )
    survivors, history = run_evolution(cfg)
    assert history.generations == [0, 1]
    assert survivors


def test_evolution_needs_a_genetic_bot(tmp_path):
    cfg = _config(tmp_path, batch=BatchConfig(bot_names=("random", "oracle")))
    with pytest.raises(ConfigError):
        run_evolution(cfg)
