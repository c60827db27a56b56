# --- Angular layout ----------------------------------------------------------
# AnglePath-style placement: every edge turns the heading by a fixed amount
# that depends only on the child's parity (left for even, right for odd).
#
# Coordinates: 0 degrees points along +x, angles grow counter-clockwise and
# +y is up. The root's children start heading straight up (90 degrees).
# After placement the whole figure is shifted so min x and min y sit at
# LAYOUT_MARGIN, which puts the root near the bottom-left.

import logging
import math
from typing import Iterator, List, Optional, Tuple

import numpy as np

from .config import AngularConfig
from .metrics import TreeMetrics, calculate_metrics
from .tree import CollatzNode

logger = logging.getLogger(__name__)

DEFAULT_NODE_WIDTH = 60.0
DEFAULT_NODE_HEIGHT = 30.0
INITIAL_HEADING = 90.0
BASE_EDGE_LENGTH = 200.0
FALLBACK_EDGE_LENGTH = 80.0
LAYOUT_MARGIN = 50.0


class LayoutNode:
    __slots__ = ("value", "x", "y", "width", "height", "children")

    def __init__(self, value: int, x: float = 0.0, y: float = 0.0,
                 width: float = DEFAULT_NODE_WIDTH, height: float = DEFAULT_NODE_HEIGHT):
        self.value = value
        self.x = x
        self.y = y
        self.width = width
        self.height = height
        self.children: List["LayoutNode"] = []

    @property
    def center(self) -> Tuple[float, float]:
        return self.x + self.width / 2.0, self.y + self.height / 2.0

    def iter_nodes(self) -> Iterator["LayoutNode"]:
        return iter_layout(self)

    def __repr__(self):
        return f"LayoutNode({self.value}, x={self.x:.2f}, y={self.y:.2f})"


def iter_layout(root: LayoutNode) -> Iterator[LayoutNode]:
    """Pre-order walk in child order."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def iter_edges(root: LayoutNode) -> Iterator[Tuple[LayoutNode, LayoutNode]]:
    for node in iter_layout(root):
        for child in node.children:
            yield node, child


def count_nodes(root: LayoutNode) -> int:
    return sum(1 for _ in iter_layout(root))


def bounds(root: LayoutNode) -> Tuple[float, float, float, float]:
    """(min_x, min_y, max_x, max_y); the max side includes node width/height."""
    nodes = list(iter_layout(root))
    xs = np.array([n.x for n in nodes], dtype=np.float64)
    ys = np.array([n.y for n in nodes], dtype=np.float64)
    ws = np.array([n.width for n in nodes], dtype=np.float64)
    hs = np.array([n.height for n in nodes], dtype=np.float64)
    return float(xs.min()), float(ys.min()), float((xs + ws).max()), float((ys + hs).max())


def mirror(root: CollatzNode) -> LayoutNode:
    """Fresh LayoutNode copy of a Collatz tree; the source is never touched."""
    layout_root = LayoutNode(root.value)
    stack = [(root, layout_root)]
    while stack:
        node, layout = stack.pop()
        for child in node.children:
            child_layout = LayoutNode(child.value)
            layout.children.append(child_layout)
            stack.append((child, child_layout))
    return layout_root


def edge_length(metrics: TreeMetrics) -> float:
    """Edge length shrinks as 1 / ln(furthest distance + 1)."""
    if metrics.furthest_distance <= 1:
        return FALLBACK_EDGE_LENGTH
    return BASE_EDGE_LENGTH / math.log(metrics.furthest_distance + 1)


class AngularLayoutEngine:
    def __init__(self, config: Optional[AngularConfig] = None):
        self.config = config or AngularConfig()

    def turn(self, value: int) -> float:
        return self.config.left_turn if value % 2 == 0 else self.config.right_turn

    def calculate_layout(self, root: CollatzNode, metrics: Optional[TreeMetrics] = None) -> LayoutNode:
        if metrics is None:
            metrics = calculate_metrics(root)
        layout_root = mirror(root)
        self.place(layout_root, edge_length(metrics))
        self.anchor(layout_root)
        logger.info("angular layout placed %d nodes", len(metrics))
        return layout_root

    def place(self, layout_root: LayoutNode, step: float) -> None:
        layout_root.x, layout_root.y = 0.0, 0.0
        stack = [(layout_root, INITIAL_HEADING)]
        while stack:
            parent, heading = stack.pop()
            for child in parent.children:
                angle = heading + self.turn(child.value)
                rad = math.radians(angle)
                child.x = parent.x + step * math.cos(rad)
                child.y = parent.y + step * math.sin(rad)
                stack.append((child, angle))

    @staticmethod
    def anchor(layout_root: LayoutNode, margin: float = LAYOUT_MARGIN) -> None:
        """Shift every node by one offset so min x and min y equal margin."""
        min_x, min_y, _, _ = bounds(layout_root)
        dx, dy = margin - min_x, margin - min_y
        for node in iter_layout(layout_root):
            node.x += dx
            node.y += dy
