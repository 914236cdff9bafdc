import io

from PIL import Image

from src.config import Settings
from src.services.edit_distance import compute
from src.services.share_renderer import query_string, render_preview_png, share_path, summarize
from src.utils.text_utils import display_char, truncate


def test_summarize():
    settings = Settings()
    summary = summarize("ab", "ba", compute("ab", "ba"), settings)
    assert summary.title == "the edit distance between ab and ba is 2"
    assert summary.description == "substitute, substitute | ab → bb → ba"


def test_summarize_without_inputs():
    settings = Settings()
    summary = summarize("", "", None, settings)
    assert summary.title == "Edit Distance Calculator | Luke Igel"


def test_share_path_skips_empty_inputs():
    assert share_path("", "") == "/"
    assert share_path("a b", "") == "/?source=a+b"
    assert query_string("x", "y") == "source=x&target=y"


def test_display_char():
    assert display_char(None) == "—"
    assert display_char("a") == "a"


def test_truncate():
    assert truncate("abc", 5) == "abc"
    assert truncate("abcdef", 4) == "abc…"


def test_render_preview_png():
    settings = Settings()
    png = render_preview_png("kitten", "sitting", compute("kitten", "sitting"), settings)
    image = Image.open(io.BytesIO(png))
    assert image.format == "PNG"
    assert image.size == (1200, 630)
    # Border is black, background white
    assert image.getpixel((0, 0)) == (0, 0, 0)
    assert image.getpixel((600, 20)) == (255, 255, 255)
