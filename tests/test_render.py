import numpy as np
import pytest

from fractexpr.expr.errors import ExprError
from fractexpr.expr.parser import parse_source
from fractexpr.renderers.cpu_dual import partition, render_pixels

MANDELBROT_INIT = "(x / w * 3 - 2) + (y / h * 3 - 1.5) * i"

def render(init, first, iter_, width, height, **kwargs):
    return render_pixels(
        init=parse_source(init),
        first=parse_source(first),
        iter_=parse_source(iter_),
        width=width,
        height=height,
        **kwargs,
    )

def test_partition_folds_remainder_into_last_range():
    assert partition(10, 3) == [(0, 3), (3, 3), (6, 4)]
    assert partition(8, 4) == [(0, 2), (2, 2), (4, 2), (6, 2)]

def test_partition_single_range_when_chunk_is_empty():
    assert partition(2, 4) == [(0, 2)]
    assert partition(7, 1) == [(0, 7)]

def test_two_by_two_mandelbrot_renders_four_pixels():
    pixels = render("c", "c", "z*z + c", 2, 2, workers=1)
    assert pixels.shape == (4, 3)
    assert pixels.dtype == np.uint8
    # c = 0 everywhere: the orbit stays at 0 and ln(0) * 0 is NaN
    assert (pixels == 0).all()

def test_two_by_two_matches_across_workers():
    single = render("c", "c", "z*z + c", 2, 2, workers=1)
    multi = render("c", "c", "z*z + c", 2, 2, workers=2)
    assert single.tobytes() == multi.tobytes()

@pytest.mark.parametrize("coloring", ["distance", "escape"])
def test_parallel_matches_sequential(coloring):
    args = (MANDELBROT_INIT, "c", "z*z + c", 8, 6)
    single = render(*args, workers=1, coloring=coloring)
    multi = render(*args, workers=4, coloring=coloring)
    assert single.tobytes() == multi.tobytes()
    assert len(np.unique(single[:, 0])) > 1

def test_distance_pixels_are_gray():
    pixels = render(MANDELBROT_INIT, "c", "z*z + c", 9, 9, workers=1)
    assert (pixels[:, 0] == pixels[:, 1]).all()
    assert (pixels[:, 1] == pixels[:, 2]).all()

def test_escape_coloring_interior_is_black():
    pixels = render(MANDELBROT_INIT, "c", "z*z + c", 9, 9, workers=1, coloring="escape")
    # x = 6, y = 4 maps to c = 0 - 0.1667i, inside the set
    assert tuple(pixels[4 * 9 + 6]) == (0, 0, 0)

def test_escape_coloring_ramps_red():
    pixels = render("0.3", "c", "z*z + c", 1, 1, workers=1, coloring="escape")
    r, g, b = pixels[0]
    assert r > 0
    assert g == 0 and b == 0

def test_pixels_are_row_major():
    # z = n / 4 + (i + 1) / 4 reaches 2 at iteration i = 7 - n
    pixels = render("0", "(x + y * 3) * 0.25", "z + 0.25", 3, 2, workers=1, coloring="escape", iterations=8)
    assert list(pixels[:, 0]) == [223, 191, 159, 127, 95, 63]
    assert (pixels[:, 1:] == 0).all()

@pytest.mark.parametrize("workers", [1, 2])
def test_divide_by_zero_aborts_render(workers):
    with pytest.raises(ExprError) as exc:
        render("c", "c", "z / 0", 2, 2, workers=workers)
    assert exc.value.message == "Divide by zero"

@pytest.mark.parametrize("workers", [1, 2])
def test_first_error_in_range_order_is_reported(workers):
    # row 0 fails on z / y (position 5), row 1 on z / (y - 1) (position 19)
    with pytest.raises(ExprError) as exc:
        render("c", "c", "z / y + z / (y - 1)", 2, 2, workers=workers)
    assert exc.value.position == 5

def test_rejects_bad_arguments():
    with pytest.raises(ValueError):
        render("c", "c", "z", 0, 2)
    with pytest.raises(ValueError):
        render("c", "c", "z", 2, 2, coloring="rainbow")
    with pytest.raises(ValueError):
        render("c", "c", "z", 2, 2, iterations=0)

@pytest.mark.parametrize("workers", [1, 2])
def test_long_iter_formula_renders(workers):
    iter_ = "z*z + c" + " + 0" * 1200
    long_form = render(MANDELBROT_INIT, "c", iter_, 3, 2, workers=workers)
    short_form = render(MANDELBROT_INIT, "c", "z*z + c", 3, 2, workers=1)
    assert long_form.tobytes() == short_form.tobytes()
