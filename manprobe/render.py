"""Markdown to ANSI terminal rendering."""

from typing import Optional

from rich.console import Console
from rich.markdown import Markdown


def render_markdown(text: str, width: Optional[int] = None) -> str:
    """
    Render markdown as ANSI-colored text.

    Args:
        text: Markdown source
        width: Output width in columns (default: the terminal width)

    Returns:
        Text with ANSI escape sequences
    """
    console = Console(width=width, force_terminal=True, color_system='standard')
    with console.capture() as capture:
        console.print(Markdown(text))
    return capture.get()
