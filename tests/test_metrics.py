import pytest

from collatz_tree import CollatzTreeBuilder, TreeMetrics, calculate_metrics
from collatz_tree.tree import iter_tree


def build(*values):
    return CollatzTreeBuilder().add_many(values)


def test_chain_scenario():
    builder = build(2, 4)
    m = calculate_metrics(builder.root)
    assert m.path_lengths == {1: 0, 2: 1, 4: 2}
    assert m.traversal_weights == {1: 1, 2: 1, 4: 1}
    assert m.furthest_distance == 2
    assert m.longest_path == m.furthest_distance


def test_shared_suffix_has_single_leaf():
    m = calculate_metrics(build(4, 8, 16).root)
    assert m.traversal_weights[1] == 1
    assert m.traversal_weights[16] == 1
    assert m.path_lengths[16] == 4


def test_single_node_tree():
    m = calculate_metrics(CollatzTreeBuilder().root)
    assert m.path_lengths == {1: 0}
    assert m.traversal_weights == {1: 1}
    assert m.furthest_distance == 0
    assert len(m) == 1


@pytest.mark.parametrize("parallel", [True, False])
def test_depth_and_weight_relations(parallel):
    builder = build(*range(1, 400))
    m = calculate_metrics(builder.root, parallel=parallel)

    assert m.path_lengths[1] == 0
    leaves = 0
    for node in iter_tree(builder.root):
        children = node.children
        if not children:
            leaves += 1
            assert m.traversal_weights[node.value] == 1
        else:
            assert m.traversal_weights[node.value] == sum(m.traversal_weights[c.value] for c in children)
        for child in children:
            assert m.path_lengths[child.value] == m.path_lengths[node.value] + 1

    assert m.traversal_weights[1] == leaves
    assert m.max_traversal_weight == leaves
    assert m.furthest_distance == max(m.path_lengths.values())
    assert len(m) == len(builder)


def test_parallel_matches_sequential():
    root = build(*range(1, 250)).root
    assert calculate_metrics(root, parallel=True) == calculate_metrics(root, parallel=False)


def test_path_length_is_trajectory_length():
    m = calculate_metrics(build(27, 97).root)
    assert m.path_lengths[27] == 111
    assert m.path_lengths[97] == 118
    assert m.furthest_distance == 118


def test_deep_tree_does_not_recurse():
    n = 2 ** 2500
    m = calculate_metrics(build(n).root)
    assert m.path_lengths[n] == 2500
    assert m.traversal_weights[1] == 1


def test_restrict_keeps_global_scale():
    m = calculate_metrics(build(27, 9).root)
    sub = m.restrict([1, 2, 4, 999999])
    assert set(sub.path_lengths) == {1, 2, 4}
    assert sub.furthest_distance == m.furthest_distance
    assert sub.traversal_weights[1] == m.traversal_weights[1]
    assert 4 in sub and 27 not in sub


def test_metrics_are_frozen():
    m = TreeMetrics(furthest_distance=0, path_lengths={1: 0}, traversal_weights={1: 1})
    with pytest.raises(AttributeError):
        m.furthest_distance = 5
