# --- Path selection ----------------------------------------------------------
# Keeps the longest, most traversed, least traversed or random paths.
# A selected value keeps its whole path back to the root, so the pruned tree
# is the smallest connected piece spanning the root and every selected node.
# Returned metrics keep the full tree's furthest distance, so colours and
# widths stay on the scale of an unfiltered render.

import logging
import random
from typing import List, Optional, Set, Tuple

from .config import AngularConfig, SelectionPolicy
from .layout import LayoutNode
from .metrics import TreeMetrics

logger = logging.getLogger(__name__)


class PathSelector:
    def __init__(self, policy: SelectionPolicy, seed: Optional[int] = None):
        self.policy = policy
        self.seed = seed

    def candidates(self, metrics: TreeMetrics) -> List[int]:
        k = self.policy.count
        kind = self.policy.kind
        values = sorted(metrics.path_lengths)
        if kind == "longest":
            ranked = sorted(values, key=lambda v: (-metrics.path_lengths[v], v))
        elif kind == "most_traversed":
            ranked = sorted(values, key=lambda v: (-metrics.traversal_weights[v], v))
        elif kind == "least_traversed":
            ranked = sorted(values, key=lambda v: (metrics.traversal_weights[v], v))
        else:
            return random.Random(self.seed).sample(values, min(k, len(values)))
        return ranked[:k]

    def select(self, layout_root: LayoutNode, metrics: TreeMetrics) -> Tuple[LayoutNode, TreeMetrics]:
        selected = set(self.candidates(metrics))
        selected.add(layout_root.value)
        pruned = prune(layout_root, selected)
        kept = [n.value for n in pruned.iter_nodes()]
        logger.info("%s selection of %d kept %d of %d nodes",
                    self.policy.kind, self.policy.count, len(kept), len(metrics))
        return pruned, metrics.restrict(kept)


def prune(layout_root: LayoutNode, selected: Set[int]) -> LayoutNode:
    """Copy of the tree holding only selected nodes and their ancestors.

    The root must be in selected.
    """
    #Post-order: a node survives if it is selected or any child survived
    copies = {}
    stack = [(layout_root, False)]
    while stack:
        node, expanded = stack.pop()
        if not expanded:
            stack.append((node, True))
            stack.extend((c, False) for c in node.children)
            continue
        kept_children = [copies[id(c)] for c in node.children if id(c) in copies]
        if kept_children or node.value in selected:
            copy = LayoutNode(node.value, node.x, node.y, node.width, node.height)
            copy.children = kept_children
            copies[id(node)] = copy
    return copies[id(layout_root)]


def select_paths(layout_root: LayoutNode, metrics: TreeMetrics,
                 config: AngularConfig) -> Tuple[LayoutNode, TreeMetrics]:
    """Apply the config's selection policy, or pass the inputs through when none is set."""
    config.validate()
    policy = config.selection_policy()
    if policy is None:
        return layout_root, metrics
    return PathSelector(policy, seed=config.seed).select(layout_root, metrics)
