# --- Tree metrics ------------------------------------------------------------
# path_lengths[v] is the number of edges between the root and v.
# traversal_weights[v] is the number of leaves below v (a leaf counts itself),
# which stands in for how many starting values pass through v.
# Both passes walk an explicit stack, so deep trees are fine.

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, Iterable

from .tree import CollatzNode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TreeMetrics:
    furthest_distance: int
    path_lengths: Dict[int, int] = field(default_factory=dict)
    traversal_weights: Dict[int, int] = field(default_factory=dict)

    @property
    def longest_path(self) -> int:
        return self.furthest_distance

    @property
    def max_traversal_weight(self) -> int:
        return max(self.traversal_weights.values(), default=0)

    def __contains__(self, value) -> bool:
        return value in self.path_lengths

    def __len__(self) -> int:
        return len(self.path_lengths)

    def restrict(self, values: Iterable[int]) -> "TreeMetrics":
        """Metrics for a subset of values, keeping the full tree's furthest distance."""
        keep = [v for v in values if v in self.path_lengths]
        return TreeMetrics(
            furthest_distance=self.furthest_distance,
            path_lengths={v: self.path_lengths[v] for v in keep},
            traversal_weights={v: self.traversal_weights[v] for v in keep},
        )


def path_lengths(root: CollatzNode) -> Dict[int, int]:
    depths = {}
    stack = [(root, 0)]
    while stack:
        node, depth = stack.pop()
        #A tree reaches each node once, min() only guards malformed input
        depths[node.value] = min(depth, depths.get(node.value, depth))
        for child in node.children:
            stack.append((child, depth + 1))
    return depths


def traversal_weights(root: CollatzNode) -> Dict[int, int]:
    weights = {}
    stack = [(root, False)]
    while stack:
        node, expanded = stack.pop()
        children = node.children
        if not children:
            weights[node.value] = 1
        elif expanded:
            weights[node.value] = sum(weights[c.value] for c in children)
        else:
            stack.append((node, True))
            stack.extend((c, False) for c in children)
    return weights


def calculate_metrics(root: CollatzNode, parallel: bool = True) -> TreeMetrics:
    """Compute depth and leaf-weight for every node reachable from root."""
    if parallel:
        #Disjoint outputs, so the two passes can run side by side
        with ThreadPoolExecutor(max_workers=2) as pool:
            depths_job = pool.submit(path_lengths, root)
            weights_job = pool.submit(traversal_weights, root)
            depths, weights = depths_job.result(), weights_job.result()
    else:
        depths, weights = path_lengths(root), traversal_weights(root)

    metrics = TreeMetrics(
        furthest_distance=max(depths.values()),
        path_lengths=depths,
        traversal_weights=weights,
    )
    logger.info("metrics: %d nodes, furthest distance %d, root weight %d",
                len(depths), metrics.furthest_distance, weights[root.value])
    return metrics
