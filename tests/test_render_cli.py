import sys

import pytest
from PIL import Image

from collatz_tree import (AngularConfig, AngularLayoutEngine, CollatzTreeBuilder, ConfigurationError,
                          PngRenderer, calculate_metrics)
from collatz_tree.cli import generate_start_numbers, main
from collatz_tree.render import MAX_DIMENSION, MAX_PIXELS, fit_scale

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def prepared(*values):
    builder = CollatzTreeBuilder().add_many(values)
    metrics = calculate_metrics(builder.root)
    return AngularLayoutEngine().calculate_layout(builder.root, metrics), metrics


@pytest.mark.parametrize("style", ["circle", "rectangle"])
@pytest.mark.parametrize("order", ["tree", "least_to_most"])
def test_render_writes_png(tmp_path, style, order):
    layout, metrics = prepared(*range(1, 40))
    path = tmp_path / f"{style}-{order}.png"
    img = PngRenderer(AngularConfig(node_style=style, drawing_order=order)).render(layout, metrics, path)
    assert path.read_bytes()[:8] == PNG_SIGNATURE
    with Image.open(path) as saved:
        assert saved.size == img.size
    # white background in the margin
    assert img.getpixel((0, 0)) == (255, 255, 255)


def test_render_single_node():
    layout, metrics = prepared(1)
    img = PngRenderer().render(layout, metrics)
    assert img.size == (160, 130)


def test_render_rejects_bad_config():
    layout, metrics = prepared(2)
    with pytest.raises(ConfigurationError):
        PngRenderer(AngularConfig(max_line_width=-1)).render(layout, metrics)


def test_fit_scale_limits():
    assert fit_scale(800, 600) == 1.0
    assert fit_scale(MAX_DIMENSION * 2, 100) == pytest.approx(0.5)
    s = fit_scale(20000, 20000)
    assert 20000 * s * 20000 * s <= MAX_PIXELS * 1.0001


def test_generate_start_numbers():
    a = generate_start_numbers(50, 1000, seed=3)
    assert a == generate_start_numbers(50, 1000, seed=3)
    assert all(2 <= n <= 1000 for n in a)


def test_cli_generate_save_and_render(tmp_path):
    saved = tmp_path / "tree.json"
    png = tmp_path / "tree.png"
    assert main(["--count", "60", "--save", str(saved), "--png", str(png), "--render-longest", "3"]) == 0
    assert png.read_bytes()[:8] == PNG_SIGNATURE
    loaded = CollatzTreeBuilder.load(saved)
    assert 59 in loaded


def test_cli_load(tmp_path):
    saved = tmp_path / "tree.json"
    CollatzTreeBuilder().add_many([27, 31]).save(saved)
    png = tmp_path / "loaded.png"
    assert main(["--load", str(saved), "--png", str(png), "--node-style", "rectangle"]) == 0
    assert png.exists()


def test_cli_random_starts(tmp_path):
    saved = tmp_path / "tree.json"
    assert main(["--random-starts", "20", "--start-max", "500", "--seed", "1", "--save", str(saved)]) == 0
    assert len(CollatzTreeBuilder.load(saved)) > 1


def test_cli_rejects_two_selections(tmp_path, capsys):
    png = tmp_path / "x.png"
    code = main(["--count", "20", "--png", str(png), "--render-longest", "2", "--render-random", "2"])
    assert code == 1
    assert "Error" in capsys.readouterr().err
    assert not png.exists()


def test_cli_missing_load_file(tmp_path, capsys):
    assert main(["--load", str(tmp_path / "missing.json")]) == 1
    assert "Error" in capsys.readouterr().err


def test_cli_unknown_palette(capsys):
    assert main(["--count", "5", "--cmap", "NoSuchPalette"]) == 1
    assert "cmap" in capsys.readouterr().err


def test_cli_rejects_non_positive_counts():
    with pytest.raises(SystemExit):
        main(["--render-random", "0"])


def test_generate_start_numbers_with_single_value_range():
    assert generate_start_numbers(3, 2, seed=0) == [2, 2, 2]


def test_cli_rejects_start_max_below_two(tmp_path, capsys):
    saved = tmp_path / "tree.json"
    assert main(["--random-starts", "3", "--start-max", "1", "--save", str(saved)]) == 1
    assert "start_max" in capsys.readouterr().err
    assert not saved.exists()


def test_cli_handles_a_tree_deeper_than_the_recursion_limit(tmp_path, capsys):
    saved = tmp_path / "tree.json"
    builder = CollatzTreeBuilder()
    builder.add(2 ** (sys.getrecursionlimit() + 200))
    builder.save(saved)
    assert saved.read_text().startswith('{\n  "value": "1"')
    # decoding may hit the interpreter's nesting limit, which must surface as a clean error
    code = main(["--load", str(saved)])
    assert code in (0, 1)
    if code == 1:
        assert "nested too deeply" in capsys.readouterr().err
