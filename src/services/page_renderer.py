"""Server-rendered calculator and about pages."""
from html import escape
from typing import Optional

from ..config import Settings
from ..utils.text_utils import ASCII_ARROW, display_char
from .edit_distance import EditDistanceResult, render_trace
from .share_renderer import share_path

_STYLE = """
  body { font-family: "SF Mono", ui-monospace, monospace; max-width: 48rem; margin: 2rem auto; padding: 0 1rem; }
  header { display: flex; justify-content: space-between; border-bottom: 1px dotted #000; margin-bottom: 1.5rem; }
  label { display: inline-block; width: 5rem; }
  input { font: inherit; width: 70%; padding: 0.25rem; }
  table { border-collapse: collapse; width: 100%; font-size: 0.875rem; }
  th, td { border: 1px solid #000; padding: 0.25rem 0.75rem; text-align: left; }
  .distance { font-size: 2rem; font-weight: 700; }
  pre { background: #f4f4f4; padding: 1rem; overflow-x: auto; }
"""

RECURRENCE = """Let s = source (length m), t = target (length n)
D(i, 0) = i
D(0, j) = j
D(i, j) = min(
  D(i-1, j)   + 1,          delete
  D(i,   j-1) + 1,          insert
  D(i-1, j-1) + cost(i, j)  substitute/match
)
cost(i, j) = 0 when s[i-1] == t[j-1], else 1"""


def _layout(title: str, body: str, settings: Settings) -> str:
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1.0" />
  <title>{escape(title)}</title>
  <meta name="author" content="{escape(settings.site_author)}" />
  <style>{_STYLE}</style>
</head>
<body>
  <header><a href="/">{escape(settings.site_title)}</a><a href="/about">about</a></header>
{body}
</body>
</html>"""


def _result_section(source: str, target: str, result: EditDistanceResult) -> str:
    parts = [f'  <p>distance <span class="distance">{result.distance}</span></p>']

    if result.operations:
        rows = "\n".join(
            f"      <tr><td>{op.position}</td><td>{escape(display_char(op.source_char))}</td>"
            f"<td>{escape(display_char(op.target_char))}</td><td>{op.kind.value}</td></tr>"
            for op in result.operations
        )
        parts.append(f"""  <h2>Operations</h2>
  <table>
    <thead><tr><th>Pos</th><th>Source</th><th>Target</th><th>Op</th></tr></thead>
    <tbody>
{rows}
    </tbody>
  </table>""")

    if result.steps:
        trace = render_trace(source, list(result.steps), ASCII_ARROW)
        parts.append(f"  <h2>Trace</h2>\n  <p>{escape(trace)}</p>")

    parts.append(f'  <p><a href="{escape(share_path(source, target))}">share link</a></p>')
    return "\n".join(parts)


def render_calculator_page(source: str, target: str, result: Optional[EditDistanceResult], settings: Settings) -> str:
    """Render the calculator form, plus the result when inputs were given."""
    form = f"""  <form method="get" action="/">
    <p><label for="source">source</label><input id="source" name="source" value="{escape(source)}" spellcheck="false" /></p>
    <p><label for="target">target</label><input id="target" name="target" value="{escape(target)}" spellcheck="false" /></p>
    <p><button type="submit">compute</button></p>
  </form>"""
    body = form
    if result is not None:
        body = f"{form}\n{_result_section(source, target, result)}"
    return _layout(settings.site_title, body, settings)


def render_about_page(settings: Settings) -> str:
    """Render the static about page."""
    body = f"""  <p>Edit distance (Levenshtein distance) is the minimum number of single-character edits
  (insertions, deletions or substitutions) needed to transform one string into another.
  This implementation builds the full DP matrix and backtraces it to recover the edit sequence.</p>
  <h2>Recurrence</h2>
  <pre>{escape(RECURRENCE)}</pre>
  <h2>Complexity</h2>
  <p>Filling the matrix takes O(m&middot;n) time and space. The backtrace and the trace
  each take O(m + n). The distance alone needs only O(min(m, n)) space with two rolling rows.</p>"""
    return _layout(f"About Edit Distance | {settings.site_author}", body, settings)
