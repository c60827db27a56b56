# --- Settings for layout, selection and styling ---------------------------
from dataclasses import dataclass
from typing import Optional

from .errors import ConfigurationError

NODE_STYLES = ("circle", "rectangle")
DRAWING_ORDERS = ("tree", "least_to_most")

#Selection kinds, keyed by the AngularConfig field that enables them
SELECTION_FIELDS = {
    "render_longest": "longest",
    "render_most_traversed": "most_traversed",
    "render_least_traversed": "least_traversed",
    "render_random": "random",
}


@dataclass(frozen=True)
class SelectionPolicy:
    kind: str
    count: int

    def __post_init__(self):
        if self.kind not in SELECTION_FIELDS.values():
            raise ConfigurationError("kind", f"unknown selection kind {self.kind!r}")
        if isinstance(self.count, bool) or not isinstance(self.count, int) or self.count <= 0:
            raise ConfigurationError("count", "selection count must be a positive integer")


@dataclass
class AngularConfig:
    left_turn: float = -8.65          #Degrees added for even children
    right_turn: float = 16.0          #Degrees added for odd children
    thickness_impact: float = 1.0
    color_impact: float = 1.0
    max_line_width: float = 8.0
    cmap: str = "ColdHeart"
    node_style: str = "circle"
    drawing_order: str = "tree"
    seed: Optional[int] = None

    #Path filtering, at most one may be set
    render_longest: Optional[int] = None
    render_most_traversed: Optional[int] = None
    render_least_traversed: Optional[int] = None
    render_random: Optional[int] = None

    def validate(self) -> "AngularConfig":
        """Raise ConfigurationError naming the first offending field."""
        chosen = [name for name in SELECTION_FIELDS if getattr(self, name) is not None]
        if len(chosen) > 1:
            raise ConfigurationError(
                chosen[1],
                f"only one path filtering option can be set (got {', '.join(chosen)})")
        for name in chosen:
            count = getattr(self, name)
            if isinstance(count, bool) or not isinstance(count, int) or count <= 0:
                raise ConfigurationError(name, "must be a positive integer")

        if self.thickness_impact < 0:
            raise ConfigurationError("thickness_impact", "must be non-negative")
        if self.color_impact <= 0:
            raise ConfigurationError("color_impact", "must be positive")
        if self.max_line_width <= 0:
            raise ConfigurationError("max_line_width", "must be positive")
        if self.node_style not in NODE_STYLES:
            raise ConfigurationError("node_style", f"expected one of {', '.join(NODE_STYLES)}")
        if self.drawing_order not in DRAWING_ORDERS:
            raise ConfigurationError("drawing_order", f"expected one of {', '.join(DRAWING_ORDERS)}")
        return self

    def selection_policy(self) -> Optional[SelectionPolicy]:
        for name, kind in SELECTION_FIELDS.items():
            count = getattr(self, name)
            if count is not None:
                return SelectionPolicy(kind, count)
        return None
