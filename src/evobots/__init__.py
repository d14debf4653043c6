"""
Evolves bots for two-player board games.
Genomes (boolean circuits or small neural networks) play matches against
fixed opponents and the best scoring mutants survive each generation.
"""
from .errors import EvobotsError, RecipeError, InvariantError, ConfigError, StoreError
from .game import Game, GameInfo, MatchResult, Outcome
from .games import GameKind, NaughtsGame, Connect4Game
from .genome import Genome
from .circuit import CircuitGenome, GateKind
from .network import NetworkGenome
from .players import Player, GenomePlayer, RandomPlayer, OraclePlayer, BotKind, create_player
from .match import Match
from .config import BatchConfig, EvolutionConfig
from .fitness import FitnessRecord, evaluate_batch, dispatch
from .history import EvolutionHistory
from .evolution import PopulationMember, run_evolution
from .persistence import save_recipe_json, load_recipe_json, ScoreLog, RecipeStore
from .log import setup_logger
from .visualization import visualize_circuit, plot_history

__all__ = [
    "EvobotsError",
    "RecipeError",
    "InvariantError",
    "ConfigError",
    "StoreError",
    "Game",
    "GameInfo",
    "MatchResult",
    "Outcome",
    "GameKind",
    "NaughtsGame",
    "Connect4Game",
    "Genome",
    "CircuitGenome",
    "GateKind",
    "NetworkGenome",
    "Player",
    "GenomePlayer",
    "RandomPlayer",
    "OraclePlayer",
    "BotKind",
    "create_player",
    "Match",
    "BatchConfig",
    "EvolutionConfig",
    "FitnessRecord",
    "evaluate_batch",
    "dispatch",
    "EvolutionHistory",
    "PopulationMember",
    "run_evolution",
    "save_recipe_json",
    "load_recipe_json",
    "ScoreLog",
    "RecipeStore",
    "setup_logger",
    "visualize_circuit",
    "plot_history",
]
