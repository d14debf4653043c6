"""
This script provides an example of how to use the `evobots` library
to evolve a circuit bot for naughts and crosses without using the CLI.
"""
from datetime import datetime, timezone
import os

from evobots import (
    BatchConfig,
    EvolutionConfig,
    run_evolution,
    save_recipe_json,
    plot_history,
    setup_logger,
    visualize_circuit,
    evaluate_batch,
    CircuitGenome,
)

def main():
    setup_logger(log_dir="log", level="INFO")

    # --- 1. Define what one evaluation plays ---
    batch = BatchConfig(
        game="naughts",
        bot_names=("circuit", "oracle"),
        # Every line the oracle offers is played, so scores are exact.
        exhaustive=True,
    )

    # --- 2. Configure the evolution ---
    config = EvolutionConfig(
        num_generations=20,  # A lower number for a quick example run
        num_samples=10,
        keep_samples=3,
        wild_samples=2,
        workers=4,
        random_seed=42,
        scores_path="artifacts/naughts_scores.jsonl",
        batch=batch,
    )

    # --- 3. Run the evolution ---
    print("Starting evolution of a naughts circuit bot...")
    artifacts_dir = "artifacts"
    os.makedirs(artifacts_dir, exist_ok=True)

    survivors, history = run_evolution(config)

    if not survivors:
        print("\nEvolution did not produce a survivor.")
        return

    best = survivors[0]
    print(f"\nEvolution complete! Best score: {best.score:.4f}")

    # --- 4. Save the results ---
    recipe_path = os.path.join(artifacts_dir, "naughts_circuit.json")
    save_recipe_json(
        best.recipe,
        recipe_path,
        meta={
            "description": "Best circuit bot against the naughts oracle.",
            "game": batch.game,
            "source_script": os.path.basename(__file__),
            "created_utc": datetime.now(timezone.utc).isoformat(),
        }
    )

    history_path = os.path.join(artifacts_dir, "naughts_score_history.png")
    plot_history(history, save_path=history_path)

    circuit = CircuitGenome.deserialize(best.recipe)
    visualize_circuit(circuit, os.path.join("viz", "naughts_circuit.png"), title="Naughts Circuit")

    # --- 5. Show how the bot fares ---
    record = evaluate_batch(batch, (best.recipe, None))
    print(f"\nAgainst every oracle line: {record.summary()}")

if __name__ == "__main__":
    main()
