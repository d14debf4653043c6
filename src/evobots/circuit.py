from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import random
from typing import Any, Dict, List, Optional, Sequence

from .errors import InvariantError, RecipeError
from .game import GameInfo
from .genome import Genome, best_legal_move, check_inputs, sample_indexes

DEFAULT_NUM_GATES = 100
DEFAULT_OUTPUT_FAN_IN = 20
OUTPUT_TAG = "OUTPUT"


# =========================
# Gates
# =========================
class GateKind(Enum):
    INPUT = "INPUT"
    NOT = "NOT"
    AND = "AND"
    OR = "OR"
    XOR = "XOR"
    NAND = "NAND"
    NOR = "NOR"
    XNOR = "XNOR"

    @property
    def arity(self) -> int:
        if self is GateKind.INPUT:
            return 0
        if self is GateKind.NOT:
            return 1
        return 2


GATE_POOL = [k for k in GateKind if k is not GateKind.INPUT]

GATE_FUNCTIONS = {
    GateKind.NOT: lambda a: not a[0],
    GateKind.AND: lambda a: a[0] and a[1],
    GateKind.OR: lambda a: a[0] or a[1],
    GateKind.XOR: lambda a: a[0] != a[1],
    GateKind.NAND: lambda a: not (a[0] and a[1]),
    GateKind.NOR: lambda a: not (a[0] or a[1]),
    GateKind.XNOR: lambda a: a[0] == a[1],
}


def random_gate_kind(rng: random.Random, max_arity: int) -> GateKind:
    return rng.choice([k for k in GATE_POOL if k.arity <= max_arity])


@dataclass
class CircuitNode:
    kind: GateKind
    inputs: List[int] = field(default_factory=list)
    output: bool = False

    def update(self, values: Sequence[bool]) -> bool:
        self.output = bool(GATE_FUNCTIONS[self.kind]([values[i] for i in self.inputs]))
        return self.output


@dataclass
class OutputNode:
    inputs: List[int] = field(default_factory=list)
    output: int = 0

    def update(self, values: Sequence[bool]) -> int:
        self.output = sum(1 for i in self.inputs if values[i])
        return self.output


# =========================
# Circuit Genome
# =========================
class CircuitGenome(Genome):
    """
    A directed acyclic graph of boolean gates. Node ``i`` may only read from
    nodes ``< i``, so evaluating in index order is always valid. Each output
    node counts how many of its referenced nodes are true; that count ranks
    the corresponding move.
    """
    kind = "circuit"

    def __init__(self, nodes: Optional[List[CircuitNode]] = None, outputs: Optional[List[OutputNode]] = None):
        self.nodes: List[CircuitNode] = nodes or []
        self.outputs: List[OutputNode] = outputs or []
        self._validate()

    def _validate(self) -> None:
        seen_gate = False
        for index, node in enumerate(self.nodes):
            if node.kind is GateKind.INPUT:
                if seen_gate:
                    raise InvariantError(f"Input node {index} follows a gate")
                if node.inputs:
                    raise InvariantError(f"Input node {index} has inputs")
                continue
            seen_gate = True
            if len(node.inputs) != node.kind.arity:
                raise InvariantError(
                    f"Node {index} ({node.kind.value}) needs {node.kind.arity} inputs, has {len(node.inputs)}"
                )
            for ref in node.inputs:
                if not 0 <= ref < index:
                    raise InvariantError(f"Node {index} references node {ref}, which is not earlier")
        for slot, out in enumerate(self.outputs):
            for ref in out.inputs:
                if not 0 <= ref < len(self.nodes):
                    raise InvariantError(f"Output {slot} references missing node {ref}")

    @property
    def input_count(self) -> int:
        return sum(1 for n in self.nodes if n.kind is GateKind.INPUT)

    def arity(self) -> tuple:
        return (len(self.nodes), self.input_count, len(self.outputs))

    @classmethod
    def random(
        cls,
        game_info: GameInfo,
        rng: Optional[random.Random] = None,
        num_gates: int = DEFAULT_NUM_GATES,
        output_fan_in: int = DEFAULT_OUTPUT_FAN_IN,
    ) -> "CircuitGenome":
        rng = rng or random.Random()
        nodes = [CircuitNode(GateKind.INPUT) for _ in range(game_info.input_count)]
        for _ in range(num_gates):
            available = len(nodes)
            if available == 0:
                break
            kind = random_gate_kind(rng, available)
            nodes.append(CircuitNode(kind, sample_indexes(rng, available, kind.arity)))
        outputs = [
            OutputNode(sample_indexes(rng, len(nodes), output_fan_in))
            for _ in range(game_info.output_count)
        ]
        return cls(nodes, outputs)

    # ----- decide -----
    def evaluate(self, inputs: Sequence[float]) -> List[int]:
        values = [x > 0.0 for x in inputs]
        for node in self.nodes[len(values):]:
            values.append(node.update(values))
        return [out.update(values) for out in self.outputs]

    def decide(self, inputs: Sequence[float], legal_moves: Sequence[int]) -> int:
        if not self.nodes:
            return best_legal_move([], legal_moves)
        check_inputs(inputs, self.input_count)
        return best_legal_move(self.evaluate(inputs), legal_moves)

    # ----- mutate -----
    def gate_indexes(self) -> List[int]:
        return [i for i, n in enumerate(self.nodes) if n.inputs]

    def mutate(self, rng: Optional[random.Random] = None) -> None:
        rng = rng or random.Random()
        gates = self.gate_indexes()
        if not gates and not self.outputs:
            return
        if self.outputs and (not gates or rng.random() < 0.5):
            self.mutate_output(rng)
        else:
            self.mutate_gate(rng)

    def mutate_output(self, rng: random.Random) -> None:
        out = rng.choice(self.outputs)
        if not out.inputs:
            return
        slot = rng.randrange(len(out.inputs))
        candidates = [i for i in self.gate_indexes() if i not in out.inputs]
        if not candidates:
            return
        out.inputs[slot] = rng.choice(candidates)

    def mutate_gate(self, rng: random.Random) -> None:
        index = rng.choice(self.gate_indexes())
        node = self.nodes[index]
        if rng.random() < 0.5:
            node.kind = random_gate_kind(rng, index)
        node.inputs = sample_indexes(rng, index, node.kind.arity)

    # ----- recipe -----
    def recipe_text(self) -> str:
        blocks = []
        for node in self.nodes:
            blocks.append(":".join([node.kind.value] + [str(i) for i in node.inputs]))
        for out in self.outputs:
            blocks.append(":".join([OUTPUT_TAG] + [str(i) for i in out.inputs]))
        return ",".join(blocks)

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "recipe": self.recipe_text()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CircuitGenome":
        text = data.get("recipe", "")
        if not isinstance(text, str):
            raise RecipeError("Circuit recipe must be a string")
        return cls.from_text(text)

    @classmethod
    def from_text(cls, text: str) -> "CircuitGenome":
        nodes: List[CircuitNode] = []
        outputs: List[OutputNode] = []
        if not text:
            return cls(nodes, outputs)
        for block in text.split(","):
            name, *fields = block.split(":")
            try:
                refs = [int(f) for f in fields]
            except ValueError as e:
                raise RecipeError(f"Bad node reference in {block!r}") from e
            if name == OUTPUT_TAG:
                outputs.append(OutputNode(refs))
                continue
            if outputs:
                raise RecipeError(f"Node {block!r} appears after the output blocks")
            try:
                kind = GateKind(name)
            except ValueError:
                raise RecipeError(f"Unknown node kind {name!r}") from None
            nodes.append(CircuitNode(kind, refs))
        return cls(nodes, outputs)
