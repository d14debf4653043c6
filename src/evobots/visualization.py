from __future__ import annotations
import os
from collections import defaultdict
from typing import Dict, List, Optional, Tuple

import matplotlib.pyplot as plt
from matplotlib.lines import Line2D
from matplotlib.patches import Patch
from loguru import logger

from .circuit import CircuitGenome, GateKind
from .history import EvolutionHistory

GATE_COLORS = {
    GateKind.INPUT: "tab:blue",
    GateKind.NOT:   "#8E8E8E",  # gray
    GateKind.AND:   "#59A14F",  # green
    GateKind.OR:    "#F28E2B",  # orange
    GateKind.XOR:   "#E45756",  # red/salmon
    GateKind.NAND:  "#4C78A8",  # steel blue
    GateKind.NOR:   "#B07AA1",  # purple
    GateKind.XNOR:  "#EDC948",  # yellow
}
OUTPUT_COLOR = "#FFFFFF"


def _compute_depths(genome: CircuitGenome) -> Dict[int, int]:
    """
    Node ids are node indexes, output slots follow as ``len(nodes) + slot``.
    Nodes only read from earlier indexes, so one forward pass suffices.
    """
    depths: Dict[int, int] = {}
    for nid, node in enumerate(genome.nodes):
        if not node.inputs:
            depths[nid] = 0
        else:
            depths[nid] = 1 + max(depths[p] for p in node.inputs)
    last = max(depths.values(), default=0) + 1
    for slot in range(len(genome.outputs)):
        depths[len(genome.nodes) + slot] = last
    return depths


def _edges(genome: CircuitGenome) -> List[Tuple[int, int]]:
    edges = [(src, nid) for nid, node in enumerate(genome.nodes) for src in node.inputs]
    for slot, out in enumerate(genome.outputs):
        edges += [(src, len(genome.nodes) + slot) for src in out.inputs]
    return edges


def visualize_circuit(
    genome: CircuitGenome,
    filename: str,
    title: Optional[str] = None,
    figsize=(12, 8),
    theme: str = "light",
    dpi: int = 150,
) -> None:
    """
    Draw a circuit genome left to right by depth.
    - Square markers are inputs, circles are gates, diamonds are move outputs.
    - Gate fill COLOR encodes the gate kind.
    """
    os.makedirs(os.path.dirname(filename) or ".", exist_ok=True)
    is_dark = (theme or "light").lower().startswith("d")
    bg = "#111111" if is_dark else "white"
    fg = "white" if is_dark else "black"
    edge_color = (1, 1, 1, 0.25) if is_dark else (0, 0, 0, 0.2)

    depths = _compute_depths(genome)
    max_depth = max(depths.values()) if depths else 1
    by_depth: Dict[int, List[int]] = defaultdict(list)
    for nid, d in depths.items():
        by_depth[d].append(nid)

    pos: Dict[int, Tuple[float, float]] = {}
    for d, ids in by_depth.items():
        ids.sort()
        n = len(ids)
        for i, nid in enumerate(ids):
            x = 0.04 + 0.92 * (d / max(1, max_depth))
            y = 0.5 if n == 1 else 0.04 + 0.92 * (i / (n - 1))
            pos[nid] = (x, y)

    fig, ax = plt.subplots(figsize=figsize)
    fig.patch.set_facecolor(bg)
    ax.set_facecolor(bg)
    ax.set_axis_off()
    ax.set_xlim(0, 1)
    ax.set_ylim(0, 1)

    for src, dst in _edges(genome):
        x1, y1 = pos[src]; x2, y2 = pos[dst]
        ax.plot([x1, x2], [y1, y2], color=edge_color, lw=0.6, zorder=1)

    for nid, node in enumerate(genome.nodes):
        x, y = pos[nid]
        marker = "s" if node.kind is GateKind.INPUT else "o"
        ax.scatter([x], [y], s=60, c=GATE_COLORS[node.kind], marker=marker,
                   edgecolors=fg, lw=0.6, zorder=3)

    for slot in range(len(genome.outputs)):
        x, y = pos[len(genome.nodes) + slot]
        ax.scatter([x], [y], s=160, c=OUTPUT_COLOR, marker="D", edgecolors=fg, lw=1.0, zorder=3)
        ax.text(x + 0.015, y, str(slot), fontsize=8, ha="left", va="center", color=fg, zorder=4)

    present = sorted({n.kind for n in genome.nodes}, key=lambda k: k.value)
    handles = [Patch(facecolor=GATE_COLORS[k], edgecolor=fg, label=k.value) for k in present]
    handles.append(Line2D([0], [0], marker="D", color="none", markerfacecolor=OUTPUT_COLOR,
                          markeredgecolor=fg, markersize=8, lw=0, label="move output"))
    leg = ax.legend(handles=handles, title="Gates", loc="upper right", frameon=True)
    for txt in leg.get_texts():
        txt.set_color(fg)
    leg.get_title().set_color(fg)
    leg.get_frame().set_facecolor(bg)

    if title:
        ax.set_title(title, color=fg)

    fig.tight_layout()
    plt.savefig(filename, dpi=dpi, bbox_inches="tight", facecolor=bg)
    plt.close(fig)
    logger.info(f"Saved circuit diagram to {filename}")


def plot_history(history: EvolutionHistory, save_path: str = "evobots_scores.png", show: bool = False) -> None:
    if not history.generations:
        logger.warning("No history to plot.")
        return
    fig, ax1 = plt.subplots(figsize=(9, 5.5))
    ax1.plot(history.generations, history.best_survivor, label="Best Survivor", color="tab:blue", linewidth=2)
    ax1.plot(history.generations, history.gen_best, label="Gen Best", color="tab:green", alpha=0.8)
    ax1.plot(history.generations, history.avg, label="Average", color="tab:orange", alpha=0.8)
    ax1.plot(history.generations, history.threshold, label="Threshold", color="tab:purple", linestyle=":")
    ax1.set_xlabel("Generation")
    ax1.set_ylabel("Score (higher is better)")
    ax1.grid(True, alpha=0.3)

    ax2 = ax1.twinx()
    ax2.plot(history.generations, history.passed, label="Passed threshold", color="tab:red", linestyle="--", alpha=0.7)
    ax2.set_ylabel("Samples passed")

    lines, labels = [], []
    for ax in (ax1, ax2):
        l, lab = ax.get_legend_handles_labels()
        lines += l; labels += lab
    ax1.legend(lines, labels, loc="lower right")

    fig.tight_layout()
    plt.savefig(save_path, dpi=150)
    if show:
        plt.show()
    plt.close(fig)
    logger.info(f"Saved score curves to {save_path}")
