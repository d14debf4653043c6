from __future__ import annotations
from dataclasses import dataclass, field
import random
from typing import Any, Dict, List, Optional, Sequence

from .errors import InvariantError, RecipeError
from .game import GameInfo
from .genome import Genome, best_legal_move, check_inputs, logistic

DEFAULT_HIDDEN_LAYERS = 2
PERTURB_RANGE = 2.0


def random_value(rng: random.Random) -> float:
    return logistic(rng.uniform(-PERTURB_RANGE, PERTURB_RANGE))


@dataclass
class Neuron:
    weights: List[float] = field(default_factory=list)
    bias: float = 0.0

    @classmethod
    def generate(cls, num_parent_nodes: int, rng: random.Random) -> "Neuron":
        return cls([random_value(rng) for _ in range(num_parent_nodes)], random_value(rng))

    def process(self, values: Sequence[float]) -> float:
        return self.bias + sum(w * x for w, x in zip(self.weights, values))


# =========================
# Network Genome
# =========================
class NetworkGenome(Genome):
    """
    Fixed-topology feed-forward network. Every neuron is a plain weighted sum
    plus bias; the last layer's raw values rank the moves. Weights and biases
    stay within (0, 1) because they are only ever produced by the logistic
    function.
    """
    kind = "network"

    def __init__(self, layers: Optional[List[List[Neuron]]] = None):
        self.layers: List[List[Neuron]] = layers or []
        self._validate()

    def _validate(self) -> None:
        for n in range(1, len(self.layers)):
            expected = len(self.layers[n - 1])
            for j, neuron in enumerate(self.layers[n]):
                if len(neuron.weights) != expected:
                    raise InvariantError(
                        f"Layer {n} neuron {j} has {len(neuron.weights)} weights, previous layer has {expected} neurons"
                    )
        if self.layers:
            counts = {len(neuron.weights) for neuron in self.layers[0]}
            if len(counts) > 1:
                raise InvariantError(f"First layer neurons disagree on input count: {sorted(counts)}")

    @property
    def input_count(self) -> int:
        if not self.layers or not self.layers[0]:
            return 0
        return len(self.layers[0][0].weights)

    def arity(self) -> tuple:
        return (self.input_count,) + tuple(len(layer) for layer in self.layers)

    @classmethod
    def random(
        cls,
        game_info: GameInfo,
        rng: Optional[random.Random] = None,
        hidden_layers: int = DEFAULT_HIDDEN_LAYERS,
    ) -> "NetworkGenome":
        rng = rng or random.Random()
        layers: List[List[Neuron]] = []
        prev = game_info.input_count
        for _ in range(hidden_layers):
            layers.append([Neuron.generate(prev, rng) for _ in range(game_info.input_count)])
            prev = game_info.input_count
        layers.append([Neuron.generate(prev, rng) for _ in range(game_info.output_count)])
        return cls(layers)

    def evaluate(self, inputs: Sequence[float]) -> List[float]:
        values = list(inputs)
        for layer in self.layers:
            values = [neuron.process(values) for neuron in layer]
        return values

    def decide(self, inputs: Sequence[float], legal_moves: Sequence[int]) -> int:
        if not self.layers:
            return best_legal_move([], legal_moves)
        check_inputs(inputs, self.input_count)
        return best_legal_move(self.evaluate(inputs), legal_moves)

    def mutate(self, rng: Optional[random.Random] = None) -> None:
        rng = rng or random.Random()
        layers = [layer for layer in self.layers if layer]
        if not layers:
            return
        neuron = rng.choice(rng.choice(layers))
        delta = rng.uniform(-PERTURB_RANGE, PERTURB_RANGE)
        if neuron.weights and rng.random() < 0.5:
            i = rng.randrange(len(neuron.weights))
            neuron.weights[i] = logistic(neuron.weights[i] + delta)
        else:
            neuron.bias = logistic(neuron.bias + delta)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "layers": [
                [{"weights": list(n.weights), "bias": n.bias} for n in layer]
                for layer in self.layers
            ],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NetworkGenome":
        raw_layers = data.get("layers", [])
        if not isinstance(raw_layers, list):
            raise RecipeError("Network recipe 'layers' must be a list")
        layers: List[List[Neuron]] = []
        try:
            for raw_layer in raw_layers:
                layer = []
                for raw in raw_layer:
                    weights = [float(w) for w in raw["weights"]]
                    layer.append(Neuron(weights, float(raw["bias"])))
                layers.append(layer)
        except (KeyError, TypeError, ValueError) as e:
            raise RecipeError(f"Malformed network recipe: {e}") from e
        return cls(layers)
