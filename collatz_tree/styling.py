# --- Visual properties -------------------------------------------------------
# Colour follows log(path length), width and radius follow traversal weight.
# Each value's properties depend only on (value, metrics, config), so they are
# computed independently and memoised per value.

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple

import numpy as np
import matplotlib
import matplotlib.colors as mcolors

from .config import AngularConfig
from .errors import ConfigurationError
from .metrics import TreeMetrics

logger = logging.getLogger(__name__)

RGB = Tuple[int, int, int]

# --- Palettes ----------------------------------------------------------------
CMAPS = [
    "ColdHeart", "plasma", "viridis", "magma", "inferno", "turbo", "cividis",
    "SoftSunset", "EarthAndSky", "Seashore", "Forest", "HotAndCold", "Grayscale"]

DEFAULT_CMAP = "ColdHeart"

CUSTOM_STOPS = {
    "ColdHeart":   ["#0040ff", "#ff4000"],
    "SoftSunset":  ["#2b1055","#6a0572","#ff6f91","#ffc15e","#ffe29a"],
    "EarthAndSky": ["#1a2a6c","#28a0b0","#84ffc9","#f0f3bd","#ffd166"],
    "Seashore":    ["#001219","#005f73","#0a9396","#94d2bd","#e9d8a6"],
    "Forest":      ["#0b3d0b","#236e3c","#4caf50","#a8e6cf","#f1f8e9"],
    "HotAndCold":  ["#313695","#4575b4","#74add1","#abd9e9","#fee090","#f46d43","#d73027"],
    "Grayscale":   ["#0a0a0a","#2f2f2f","#5e5e5e","#9a9a9a","#cccccc","#f2f2f2"],
}
#Node fills use a greener ramp than edges
NODE_STOPS = {
    "ColdHeart": ["#0050ff", "#ff5000"],
}

DEFAULT_LINE_COLOR: RGB = (0x66, 0x66, 0x66)
DEFAULT_NODE_COLOR: RGB = (0x4a, 0x90, 0xe2)
BASE_LINE_WIDTH = 1.0
BASE_NODE_RADIUS = 3.0
MAX_NODE_RADIUS = 8.0
MIN_IMPACT = 0.1
ZERO_IMPACT_EPS = 1e-6


def _build_lut(stops, n=1024):
    cmap = mcolors.LinearSegmentedColormap.from_list("custom", stops, N=n)
    return (cmap(np.linspace(0,1,n))[:,:3]*255.0).round().astype(np.uint8)

_CUSTOM_LUTS = {name: _build_lut(stops) for name, stops in CUSTOM_STOPS.items()}
_NODE_LUTS = {name: _build_lut(stops) for name, stops in NODE_STOPS.items()}


def map_to_rgb(vals: np.ndarray, cmap_name: str, lo: float, hi: float, gamma: float = 1.0,
               luts: Optional[Dict[str, np.ndarray]] = None) -> np.ndarray:
    """Map a scalar field to RGB uint8 through a palette."""
    x = np.clip((vals - lo) / max(hi - lo, 1e-12), 0.0, 1.0)
    if gamma and gamma > 0:
        x = np.power(x, gamma)

    luts = _CUSTOM_LUTS if luts is None else luts
    if cmap_name in luts:
        lut = luts[cmap_name]
        idx = np.minimum((x * (len(lut)-1)).astype(np.int32), len(lut)-1)
        rgb = lut[idx]
    else:
        cmap = matplotlib.colormaps[cmap_name]
        rgb = (cmap(x)[..., :3] * 255.0).astype(np.uint8)
    return rgb


def palette_exists(name: str) -> bool:
    return name in _CUSTOM_LUTS or name in matplotlib.colormaps


@dataclass(frozen=True)
class VisualProperties:
    line_color: RGB
    node_color: RGB
    line_width: float
    node_radius: float


class VisualPropertyMapper:
    """Per-value colours, stroke widths and radii for one metrics snapshot."""

    def __init__(self, metrics: TreeMetrics, config: Optional[AngularConfig] = None):
        self.metrics = metrics
        self.config = config or AngularConfig()
        if not palette_exists(self.config.cmap):
            raise ConfigurationError("cmap", f"unknown colormap {self.config.cmap!r}")
        self._max_weight = metrics.max_traversal_weight
        self._cache: Dict[int, VisualProperties] = {}

    # --- Colour
    def _color_gamma(self) -> float:
        return 1.0 / max(self.config.color_impact, MIN_IMPACT)

    def _color(self, value: int, luts: Dict[str, np.ndarray], default: RGB) -> RGB:
        furthest = self.metrics.furthest_distance
        if furthest <= 1:
            return default
        path_length = self.metrics.path_lengths.get(value, 0)
        cmap = self.config.cmap
        if cmap not in luts:
            luts = _CUSTOM_LUTS
        rgb = map_to_rgb(np.array([math.log(path_length + 1)]), cmap,
                         0.0, math.log(furthest + 1), gamma=self._color_gamma(), luts=luts)
        return tuple(int(c) for c in rgb[0])

    def line_color(self, value: int) -> RGB:
        return self._color(value, _CUSTOM_LUTS, DEFAULT_LINE_COLOR)

    def node_color(self, value: int) -> RGB:
        return self._color(value, _NODE_LUTS, DEFAULT_NODE_COLOR)

    # --- Thickness
    def _weight_scale(self, value: int) -> Optional[float]:
        """Normalised weight raised to the thickness exponent, None for the flat case."""
        impact = self.config.thickness_impact
        if impact < ZERO_IMPACT_EPS or self._max_weight <= 1:
            return None
        weight = self.metrics.traversal_weights.get(value, 1)
        return (weight / self._max_weight) ** (1.0 / max(impact, MIN_IMPACT))

    def line_width(self, value: int) -> float:
        base = min(BASE_LINE_WIDTH, self.config.max_line_width)
        scale = self._weight_scale(value)
        if scale is None:
            return base
        return base + scale * (self.config.max_line_width - base)

    def node_radius(self, value: int) -> float:
        scale = self._weight_scale(value)
        if scale is None:
            return BASE_NODE_RADIUS
        return BASE_NODE_RADIUS + scale * (MAX_NODE_RADIUS - BASE_NODE_RADIUS)

    # --- Cache
    def compute(self, value: int) -> VisualProperties:
        return VisualProperties(
            line_color=self.line_color(value),
            node_color=self.node_color(value),
            line_width=self.line_width(value),
            node_radius=self.node_radius(value),
        )

    def properties(self, value: int) -> VisualProperties:
        cached = self._cache.get(value)
        if cached is None:
            cached = self._cache.setdefault(value, self.compute(value))
        return cached

    def precompute(self, values: Iterable[int], workers: Optional[int] = None) -> Dict[int, VisualProperties]:
        """Reset the cache and fill it for every value using a thread pool."""
        self._cache.clear()
        values = list(values)
        with ThreadPoolExecutor(max_workers=workers) as pool:
            for _ in pool.map(self.properties, values):
                pass
        logger.debug("precomputed visual properties for %d values", len(values))
        return dict(self._cache)

    def __len__(self) -> int:
        return len(self._cache)
