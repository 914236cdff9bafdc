"""Share page and social preview image rendering."""
import io
from dataclasses import dataclass
from html import escape
from typing import Optional
from urllib.parse import urlencode

from PIL import Image, ImageDraw, ImageFont

from ..config import Settings
from ..utils.text_utils import ARROW, ASCII_ARROW, quote_empty, truncate
from .edit_distance import EditDistanceResult, render_trace

DEFAULT_DESCRIPTION = "Compare two strings and see edit distance, operations, and transformation trace."

PREVIEW_WIDTH = 1200
PREVIEW_HEIGHT = 630
# Roughly what fits on one line of the preview at the trace font size
TRACE_MAX_CHARS = 90
WORD_MAX_CHARS = 24

WHITE = "#ffffff"
BLACK = "#000000"
GREY = "#666666"
LIGHT_GREY = "#999999"


@dataclass
class ShareSummary:
    """Title/description pair used for share pages and meta tags."""
    title: str
    description: str


def query_string(source: str, target: str) -> str:
    """Query string carrying only the non-empty inputs."""
    params = {}
    if source:
        params["source"] = source
    if target:
        params["target"] = target
    return urlencode(params)


def share_path(source: str, target: str) -> str:
    """Relative calculator link for a pair of inputs."""
    qs = query_string(source, target)
    return f"/?{qs}" if qs else "/"


def summarize(source: str, target: str, result: Optional[EditDistanceResult], settings: Settings) -> ShareSummary:
    """Build the share title and description."""
    if result is None or not (source or target):
        return ShareSummary(title=settings.default_social_title, description=DEFAULT_DESCRIPTION)

    title = f"the edit distance between {source} and {target} is {result.distance}"
    if result.operations:
        kinds = ", ".join(op.kind.value for op in result.operations)
        description = f"{kinds} | {render_trace(source, list(result.steps), ARROW)}"
    else:
        description = f"Distance: {result.distance}"
    return ShareSummary(title=title, description=description)


def render_share_page(source: str, target: str, result: Optional[EditDistanceResult], origin: str, settings: Settings) -> str:
    """
    Render the HTML returned to link-preview crawlers.

    Carries OG/Twitter tags pointing at the preview image and a meta refresh
    sending human visitors on to the calculator.
    """
    summary = summarize(source, target, result, settings)
    qs = query_string(source, target)
    app_url = escape(share_path(source, target))
    og_image_url = escape(f"{origin}/api/og?{qs}")
    title = escape(summary.title)
    description = escape(summary.description)

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1.0" />
  <title>{title}</title>
  <meta name="description" content="{description}" />
  <meta name="author" content="{escape(settings.site_author)}" />
  <meta name="theme-color" content="#ffffff" />
  <meta property="og:type" content="website" />
  <meta property="og:title" content="{title}" />
  <meta property="og:description" content="{description}" />
  <meta property="og:image" content="{og_image_url}" />
  <meta property="og:image:width" content="{PREVIEW_WIDTH}" />
  <meta property="og:image:height" content="{PREVIEW_HEIGHT}" />
  <meta name="twitter:card" content="summary_large_image" />
  <meta name="twitter:title" content="{title}" />
  <meta name="twitter:description" content="{description}" />
  <meta name="twitter:image" content="{og_image_url}" />
  <meta http-equiv="refresh" content="0;url={app_url}" />
  <style>body {{ font-family: "SF Mono", ui-monospace, monospace; margin: 2rem; }}</style>
</head>
<body>
  <h1>{title}</h1>
  <p>{description}</p>
  <p><a href="{app_url}">Open calculator</a></p>
</body>
</html>"""


def _font(size: int, settings: Settings, bold: bool = False) -> ImageFont.FreeTypeFont:
    path = (bold and settings.preview_bold_font_path) or settings.preview_font_path
    if path:
        return ImageFont.truetype(path, size)
    return ImageFont.load_default(size=size)


def _draw_text(draw: ImageDraw.ImageDraw, xy: tuple[float, float], text: str, size: int, settings: Settings,
               bold: bool = False, fill: str = BLACK, anchor: str = "ls") -> float:
    """Draw one run of text and return its advance width."""
    font = _font(size, settings, bold)
    # Without a bold face, bold runs are stroked
    stroke = max(1, size // 40) if bold and not settings.preview_bold_font_path else 0
    draw.text(xy, text, font=font, fill=fill, anchor=anchor, stroke_width=stroke, stroke_fill=fill)
    return draw.textlength(text, font=font)


def render_preview_png(source: str, target: str, result: EditDistanceResult, settings: Settings) -> bytes:
    """Render the 1200x630 preview card as PNG."""
    image = Image.new("RGB", (PREVIEW_WIDTH, PREVIEW_HEIGHT), WHITE)
    draw = ImageDraw.Draw(image)
    center = PREVIEW_WIDTH // 2
    right = PREVIEW_WIDTH - 80

    draw.rectangle([0, 0, PREVIEW_WIDTH - 1, PREVIEW_HEIGHT - 1], outline=BLACK, width=3)
    _draw_text(draw, (80, 76), "Edit Distance", 16, settings, bold=True)
    _draw_text(draw, (right, 76), settings.site_host, 12, settings, fill=LIGHT_GREY, anchor="rs")
    for x in range(80, right, 6):
        draw.line([(x, 92), (x + 2, 92)], fill=BLACK, width=2)

    _draw_text(draw, (center, 200), "the edit distance between", 22, settings, fill=GREY, anchor="ms")

    segments = [
        (truncate(quote_empty(source), WORD_MAX_CHARS), 42, True, BLACK),
        (" and ", 22, False, GREY),
        (truncate(quote_empty(target), WORD_MAX_CHARS), 42, True, BLACK),
        (" is", 22, False, GREY),
    ]
    total = sum(draw.textlength(text, font=_font(size, settings, bold)) for text, size, bold, _ in segments)
    x = center - total / 2
    for text, size, bold, fill in segments:
        x += _draw_text(draw, (x, 262), text, size, settings, bold=bold, fill=fill)

    _draw_text(draw, (center, 450), str(result.distance), 160, settings, bold=True, anchor="ms")

    if result.steps:
        # The bundled fallback font has no arrow glyph
        arrow = ARROW if settings.preview_font_path else ASCII_ARROW
        trace = truncate(render_trace(source, list(result.steps), arrow), TRACE_MAX_CHARS)
        _draw_text(draw, (center, 540), trace, 16, settings, fill=GREY, anchor="ms")

    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()
