# --- Canonical Collatz tree ------------------------------------------------
# Every value points at its forward successor, so the predecessor tree rooted
# at 1 is built by walking trajectories forward until they hit known values
# and hanging the new values off the merge point.

import json
import logging
import os
import tempfile
from typing import Dict, Iterable, Iterator, List, Optional

from .errors import StructuralInvariantViolation, TreeFormatError

logger = logging.getLogger(__name__)


def collatz_next(n: int) -> int:
    return n // 2 if n % 2 == 0 else 3 * n + 1


def trajectory(n: int, max_len: Optional[int] = None) -> List[int]:
    """Return the Collatz sequence from n down to 1 (inclusive), optionally capped by max_len."""
    out = [n]
    while n != 1 and (max_len is None or len(out) < max_len):
        n = collatz_next(n)
        out.append(n)
    return out


def predecessors(n: int) -> List[int]:
    """Values whose next step is n, excluding the root itself."""
    out = [2 * n]
    if n % 6 == 4 and n > 4:
        out.append((n - 1) // 3)
    return out


class CollatzNode:
    __slots__ = ("value", "left", "right")

    def __init__(self, value: int):
        self.value = value
        self.left: Optional["CollatzNode"] = None
        self.right: Optional["CollatzNode"] = None

    @property
    def children(self) -> List["CollatzNode"]:
        return [c for c in (self.left, self.right) if c is not None]

    @property
    def is_leaf(self) -> bool:
        return self.left is None and self.right is None

    def attach(self, child: "CollatzNode") -> None:
        if self.left is None:
            self.left = child
        elif self.right is None:
            self.right = child
        else:
            raise StructuralInvariantViolation(
                f"cannot add child {child.value} to parent {self.value}: both slots are "
                f"already occupied by {self.left.value} and {self.right.value}")

    def __repr__(self):
        return f"CollatzNode({self.value})"


def iter_tree(root: CollatzNode) -> Iterator[CollatzNode]:
    """Pre-order walk, left slot before right slot."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        if node.right is not None:
            stack.append(node.right)
        if node.left is not None:
            stack.append(node.left)


class CollatzTreeBuilder:
    """Owns the tree rooted at 1 and an index of every value in it."""

    def __init__(self, root: Optional[CollatzNode] = None):
        if root is None:
            root = CollatzNode(1)
        if root.value != 1:
            raise TreeFormatError(f"tree must be rooted at 1, got {root.value}")
        self.root = root
        self._nodes: Dict[int, CollatzNode] = {}
        for node in iter_tree(root):
            if node.value in self._nodes:
                raise TreeFormatError(f"value {node.value} appears more than once")
            self._nodes[node.value] = node

    @classmethod
    def from_root(cls, root: CollatzNode) -> "CollatzTreeBuilder":
        return cls(root)

    def __contains__(self, value) -> bool:
        return value in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def get(self, value: int) -> Optional[CollatzNode]:
        return self._nodes.get(value)

    def add(self, n: int) -> None:
        """Make sure n and its whole trajectory down to the tree are present."""
        if isinstance(n, bool) or not isinstance(n, int):
            raise ValueError(f"expected a positive integer, got {n!r}")
        if n < 1:
            raise ValueError(f"expected a positive integer, got {n}")

        #Walk forward until we reach something already indexed (1 always is)
        path = []
        current = n
        while current not in self._nodes:
            path.append(current)
            current = collatz_next(current)
        if not path:
            return

        known = self._nodes[current]
        for value in reversed(path):
            node = CollatzNode(value)
            known.attach(node)
            self._nodes[value] = node
            known = node
        logger.debug("added %d: %d new node(s), merged at %d", n, len(path), current)

    def add_many(self, values: Iterable[int]) -> "CollatzTreeBuilder":
        before = len(self._nodes)
        for n in values:
            self.add(n)
        logger.info("tree has %d nodes (%d new)", len(self._nodes), len(self._nodes) - before)
        return self

    # --- Persistence
    def to_dict(self) -> dict:
        return node_to_dict(self.root)

    @classmethod
    def from_dict(cls, data: dict) -> "CollatzTreeBuilder":
        return cls.from_root(node_from_dict(data))

    def save(self, path) -> None:
        """Write the tree as JSON, replacing ``path`` only once the document is complete."""
        directory = os.path.dirname(os.path.abspath(path))
        fd, tmp = tempfile.mkstemp(prefix=".collatz-", suffix=".json", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                for chunk in iter_json(self.root):
                    fh.write(chunk)
            os.replace(tmp, path)
        except BaseException:
            os.unlink(tmp)
            raise
        logger.info("saved %d nodes to %s", len(self), path)

    @classmethod
    def load(cls, path) -> "CollatzTreeBuilder":
        with open(path, "r", encoding="utf-8") as fh:
            try:
                data = json.load(fh)
            except json.JSONDecodeError as e:
                raise TreeFormatError(f"invalid JSON in {path}: {e}") from e
            except RecursionError as e:
                raise TreeFormatError(f"{path} is nested too deeply to decode") from e
        builder = cls.from_dict(data)
        logger.info("loaded %d nodes from %s", len(builder), path)
        return builder


# --- Nested value/leftChild/rightChild documents ---------------------------
def node_to_dict(root: CollatzNode) -> dict:
    """Encode a tree as nested dicts; values are strings so precision survives JSON."""
    out = {"value": str(root.value), "leftChild": None, "rightChild": None}
    stack = [(root, out)]
    while stack:
        node, doc = stack.pop()
        for slot, child in (("leftChild", node.left), ("rightChild", node.right)):
            if child is not None:
                child_doc = {"value": str(child.value), "leftChild": None, "rightChild": None}
                doc[slot] = child_doc
                stack.append((child, child_doc))
    return out


def iter_json(root: CollatzNode, indent: int = 2) -> Iterator[str]:
    """Yield the document ``json.dump(node_to_dict(root), indent=indent)`` writes, without recursing."""
    stack = [(root, 0)]
    while stack:
        item, depth = stack.pop()
        if isinstance(item, str):
            yield item
            continue
        pad = " " * (indent * (depth + 1))
        yield f'{{\n{pad}"value": {json.dumps(str(item.value))},\n{pad}"leftChild": '
        #Pushed in reverse so the left subtree is written first
        stack.append(("\n" + " " * (indent * depth) + "}", depth))
        stack.append((item.right if item.right is not None else "null", depth + 1))
        stack.append((f',\n{pad}"rightChild": ', depth))
        stack.append((item.left if item.left is not None else "null", depth + 1))


def _decode_value(raw) -> int:
    if isinstance(raw, bool):
        raise TreeFormatError(f"cannot convert {raw!r} to an integer value")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str):
        try:
            return int(raw)
        except ValueError:
            pass
    raise TreeFormatError(f"cannot convert {raw!r} to an integer value")


def node_from_dict(data: dict) -> CollatzNode:
    if not isinstance(data, dict) or "value" not in data:
        raise TreeFormatError("tree document must be an object with a 'value' key")
    root = CollatzNode(_decode_value(data["value"]))
    stack = [(data, root)]
    while stack:
        doc, node = stack.pop()
        for slot in ("leftChild", "rightChild"):
            child_doc = doc.get(slot)
            if child_doc is None:
                continue
            if not isinstance(child_doc, dict) or "value" not in child_doc:
                raise TreeFormatError(f"{slot} of {node.value} must be an object with a 'value' key")
            child = CollatzNode(_decode_value(child_doc["value"]))
            if slot == "leftChild":
                node.left = child
            else:
                node.right = child
            stack.append((child_doc, child))
    return root
