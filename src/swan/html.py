"""Whitespace normalisation for HTML templates."""

from __future__ import annotations

import re

_RUN = re.compile(r"[ \r\n\t]+")


def remove_html_whitespace(text: str) -> str:
    """Collapse whitespace runs while keeping the HTML valid.

    A run of spaces, tabs and line breaks becomes one space. Runs of only
    tabs and line breaks at either end of the text are dropped.
    """

    def collapse(match: re.Match) -> str:
        run = match.group(0)
        at_edge = match.start() == 0 or match.end() == len(text)
        if at_edge and " " not in run:
            return ""
        return " "

    return _RUN.sub(collapse, text)
