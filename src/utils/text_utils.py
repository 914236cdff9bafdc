"""Shared text utility functions."""
from typing import Optional

# Shown wherever an operation has no character on one side
PLACEHOLDER = "—"
ARROW = " → "
ASCII_ARROW = " -> "


def display_char(char: Optional[str]) -> str:
    """Render an optional character, using the placeholder for absent ones."""
    return PLACEHOLDER if char is None else char


def truncate(text: str, limit: int) -> str:
    """Cut text to ``limit`` characters, ending with an ellipsis if cut."""
    if len(text) <= limit:
        return text
    return text[:max(limit - 1, 0)] + "…"


def quote_empty(text: str) -> str:
    """Show empty strings as a pair of double quotes."""
    return text or '""'
