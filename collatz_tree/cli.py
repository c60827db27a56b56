# --- Command line ------------------------------------------------------------
# Build or load a Collatz tree, save it as JSON and render it to PNG.

import argparse
import logging
import random
import sys
from typing import List, Optional

from .config import AngularConfig, DRAWING_ORDERS, NODE_STYLES
from .errors import CollatzTreeError, ConfigurationError
from .layout import AngularLayoutEngine
from .metrics import calculate_metrics
from .render import PngRenderer
from .selection import select_paths
from .styling import CMAPS, DEFAULT_CMAP, palette_exists
from .tree import CollatzTreeBuilder

logger = logging.getLogger("collatz_tree")

EXAMPLES = """\
examples:
    collatz-tree --count 1000 --png tree.png
    collatz-tree --random-starts 2000 --start-max 1000000 --png tree.png --render-longest 20
    collatz-tree --load tree.json --png tree.png --node-style rectangle
"""
MIN_START = 2


def generate_start_numbers(count: int, max_n: int = 1_000_000, seed: Optional[int] = None) -> List[int]:
    rng = random.Random(seed)
    return [rng.randint(MIN_START, max_n) for _ in range(count)]


def positive_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"{text!r} is not an integer")
    if value <= 0:
        raise argparse.ArgumentTypeError(f"{text!r} must be a positive integer")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="collatz-tree",
        description="Collatz predecessor tree generator with angular PNG rendering.",
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    src = parser.add_argument_group("tree")
    src.add_argument("--count", type=positive_int, default=1000,
                     help="add every start value below COUNT (default: 1000)")
    src.add_argument("--random-starts", type=positive_int, metavar="K",
                     help="add K random start values instead of a range")
    src.add_argument("--start-max", type=positive_int, default=1_000_000,
                     help="upper bound for random start values (default: 1000000)")
    src.add_argument("--load", metavar="FILE", help="load a saved tree instead of generating one")
    src.add_argument("--save", metavar="FILE", help="save the tree as JSON")

    out = parser.add_argument_group("rendering")
    out.add_argument("--png", metavar="FILE", help="render the angular layout to PNG")
    out.add_argument("--node-style", choices=NODE_STYLES, default="circle")
    out.add_argument("--left-turn", type=float, default=-8.65,
                     help="turn in degrees for even values (default: -8.65)")
    out.add_argument("--right-turn", type=float, default=16.0,
                     help="turn in degrees for odd values (default: 16.0)")
    out.add_argument("--thickness-impact", type=float, default=1.0,
                     help="effect of traversal weight on line width, 0 disables (default: 1.0)")
    out.add_argument("--color-impact", type=float, default=1.0,
                     help="effect of path length on colour, must be > 0 (default: 1.0)")
    out.add_argument("--max-line-width", type=float, default=8.0)
    out.add_argument("--cmap", default=DEFAULT_CMAP,
                     help=f"palette name, e.g. {', '.join(CMAPS[:6])} (default: {DEFAULT_CMAP})")
    out.add_argument("--drawing-order", choices=DRAWING_ORDERS, default="tree")

    sel = parser.add_argument_group("path selection (at most one)")
    sel.add_argument("--render-longest", type=positive_int, metavar="N")
    sel.add_argument("--render-most-traversed", type=positive_int, metavar="N")
    sel.add_argument("--render-least-traversed", type=positive_int, metavar="N")
    sel.add_argument("--render-random", type=positive_int, metavar="N")
    sel.add_argument("--seed", type=int, help="seed for random starts and random paths")

    parser.add_argument("-v", "--verbose", action="store_true", help="log debug output")
    return parser


def config_from_args(args: argparse.Namespace) -> AngularConfig:
    return AngularConfig(
        left_turn=args.left_turn,
        right_turn=args.right_turn,
        thickness_impact=args.thickness_impact,
        color_impact=args.color_impact,
        max_line_width=args.max_line_width,
        cmap=args.cmap,
        node_style=args.node_style,
        drawing_order=args.drawing_order,
        seed=args.seed,
        render_longest=args.render_longest,
        render_most_traversed=args.render_most_traversed,
        render_least_traversed=args.render_least_traversed,
        render_random=args.render_random,
    )


def run(args: argparse.Namespace) -> None:
    config = config_from_args(args).validate()
    if args.start_max < MIN_START:
        raise ConfigurationError("start_max", f"must be at least {MIN_START}")
    if not palette_exists(config.cmap):
        raise ConfigurationError("cmap", f"unknown colormap {config.cmap!r}")

    if args.load:
        builder = CollatzTreeBuilder.load(args.load)
    else:
        if args.random_starts:
            starts = generate_start_numbers(args.random_starts, args.start_max, seed=args.seed)
        else:
            starts = range(1, args.count)
        logger.info("generating tree for %d start value(s)", len(starts))
        builder = CollatzTreeBuilder().add_many(starts)

    if args.save:
        builder.save(args.save)

    if args.png:
        metrics = calculate_metrics(builder.root)
        layout = AngularLayoutEngine(config).calculate_layout(builder.root, metrics)
        layout, metrics = select_paths(layout, metrics, config)
        PngRenderer(config).render(layout, metrics, args.png)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(levelname)s %(name)s: %(message)s")
    try:
        run(args)
    except (CollatzTreeError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
