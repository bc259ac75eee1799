"""Cleanup of the blank lines and trailing blanks left behind by deleted directives."""

import re

from remover_core.utils.line_endings import LineEnding

_EXCESS_NEWLINES = re.compile(r"(\r?\n){3,}")
_LINE_SPLIT = re.compile(r"\r?\n")


def normalize(content: str, line_ending: LineEnding) -> str:
    """
    Collapse runs of 3+ line breaks into a single blank line, strip trailing
    whitespace from every line and re-join with the file's line ending.
    """
    newline = line_ending.newline
    collapsed = _EXCESS_NEWLINES.sub(newline + newline, content)
    return newline.join(line.rstrip() for line in _LINE_SPLIT.split(collapsed))
