# --- Rasterization -----------------------------------------------------------
# Draws a positioned tree with Pillow: edges first so nodes sit on top.
# Layout space has +y up, image space has +y down, so y is flipped here and
# the root ends up near the bottom-left corner of the picture.

import logging
import math
from typing import Dict, Optional, Tuple

from PIL import Image, ImageDraw, ImageFont

from .config import AngularConfig
from .errors import RenderError
from .layout import LayoutNode, bounds, iter_edges, iter_layout
from .metrics import TreeMetrics
from .styling import VisualProperties, VisualPropertyMapper

logger = logging.getLogger(__name__)

MARGIN = 50.0
MAX_DIMENSION = 32767
MAX_PIXELS = 100_000_000
BACKGROUND = (255, 255, 255)
LABEL_COLOR = (0, 0, 0)
CORNER_RADIUS = 5
PROGRESS_EVERY = 500


def fit_scale(width: float, height: float) -> float:
    """Largest scale <= 1 that keeps the image inside the size limits."""
    scale = 1.0
    if width > MAX_DIMENSION:
        scale = min(scale, MAX_DIMENSION / width)
    if height > MAX_DIMENSION:
        scale = min(scale, MAX_DIMENSION / height)
    if width * height > MAX_PIXELS:
        scale = min(scale, math.sqrt(MAX_PIXELS / (width * height)))
    return scale


class PngRenderer:
    def __init__(self, config: Optional[AngularConfig] = None):
        self.config = config or AngularConfig()

    def render(self, layout_root: LayoutNode, metrics: TreeMetrics, path=None) -> Image.Image:
        """Draw the tree and optionally save it as PNG; returns the image."""
        self.config.validate()
        mapper = VisualPropertyMapper(metrics, self.config)
        props = mapper.precompute(n.value for n in iter_layout(layout_root))

        min_x, min_y, max_x, max_y = bounds(layout_root)
        full_w = (max_x - min_x) + 2 * MARGIN
        full_h = (max_y - min_y) + 2 * MARGIN
        scale = fit_scale(full_w, full_h)
        img_w, img_h = int(full_w * scale), int(full_h * scale)
        if img_w <= 0 or img_h <= 0:
            raise RenderError(f"invalid image dimensions after scaling: {img_w}x{img_h}")
        logger.info("rendering %dx%d image (scale %.3f)", img_w, img_h, scale)

        def to_px(x: float, y: float) -> Tuple[float, float]:
            return ((x - min_x + MARGIN) * scale,
                    img_h - (y - min_y + MARGIN) * scale)

        img = Image.new("RGB", (img_w, img_h), BACKGROUND)
        draw = ImageDraw.Draw(img, "RGBA")
        self._draw_edges(draw, layout_root, metrics, props, to_px, scale)
        if self.config.node_style == "rectangle":
            self._draw_rectangles(draw, layout_root, props, to_px, scale)
        else:
            self._draw_circles(draw, layout_root, props, to_px, scale)

        if path is not None:
            img.save(path, format="PNG", optimize=True)
            logger.info("saved %s", path)
        return img

    def _draw_edges(self, draw, root, metrics: TreeMetrics, props: Dict[int, VisualProperties], to_px, scale):
        edges = list(iter_edges(root))
        if self.config.drawing_order == "least_to_most":
            weights = metrics.traversal_weights
            edges.sort(key=lambda e: (weights.get(e[1].value, 1), e[1].value))
        for i, (parent, child) in enumerate(edges, 1):
            style = props[child.value]
            x0, y0 = to_px(*parent.center)
            x1, y1 = to_px(*child.center)
            draw.line((x0, y0, x1, y1), fill=style.line_color,
                      width=max(1, int(round(style.line_width * scale))))
            if i % PROGRESS_EVERY == 0 or i == len(edges):
                logger.debug("drawing connections... %d/%d", i, len(edges))

    def _draw_circles(self, draw, root, props, to_px, scale):
        for node in iter_layout(root):
            style = props[node.value]
            cx, cy = to_px(*node.center)
            r = max(0.5, style.node_radius * scale)
            draw.ellipse((cx - r, cy - r, cx + r, cy + r), fill=style.node_color,
                         outline=style.node_color + (180,))

    def _draw_rectangles(self, draw, root, props, to_px, scale):
        font = ImageFont.load_default()
        for node in iter_layout(root):
            style = props[node.value]
            left, bottom = to_px(node.x, node.y)
            right, top = to_px(node.x + node.width, node.y + node.height)
            draw.rounded_rectangle((left, top, right, bottom), radius=max(1, int(CORNER_RADIUS * scale)),
                                   fill=style.node_color + (100,), outline=style.node_color,
                                   width=max(1, int(round(2 * scale))))
            label = str(node.value)
            x0, y0, x1, y1 = font.getbbox(label)
            cx, cy = to_px(*node.center)
            draw.text((cx - (x1 + x0) / 2, cy - (y1 + y0) / 2), label, fill=LABEL_COLOR, font=font)
