"""Lexical normalization and sanitization of query text.

Two views of the same query are produced here:

- The *analysis view* (``strip_comments``) replaces each comment with a single
  space so tokens on either side stay separated. Threat patterns, the table
  gatekeeper and the structural checks only ever look at this view.
- The *sanitized text* (``sanitize_query``) removes comments from the raw
  query and trims it. This is what an executor runs.

Known limitation: comment stripping does not track string-literal state, so a
``//`` inside a quoted value (``'http://host'``) is treated as the start of a
line comment. Callers rely on this behaviour; it is kept as-is.
"""

from __future__ import annotations

import re

BLOCK_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)
LINE_COMMENT = re.compile(r"//[^\r\n]*")
DASH_COMMENT = re.compile(r"--[^\r\n]*")
STRING_LITERAL = re.compile(r"'[^']*'")


def strip_comments(query: str) -> str:
    """Return the analysis view of a query.

    Block comments are removed before line comments, so ``/* // */`` is a
    single block comment.
    """
    without_blocks = BLOCK_COMMENT.sub(" ", query)
    return LINE_COMMENT.sub(" ", without_blocks)


def remove_string_literals(text: str) -> str:
    """Drop single-quoted spans (non-nesting, no escape handling)."""
    return STRING_LITERAL.sub("", text)


def sanitize_query(query: str, strip_dash_comments: bool = True) -> str:
    """Remove comments from the raw query and trim surrounding whitespace.

    Stripping repeats until nothing changes, so delimiters glued together by
    a removal (``/*/**/*/``) cannot survive into the output and
    ``sanitize_query(sanitize_query(q)) == sanitize_query(q)``.

    Args:
        query: Raw query text
        strip_dash_comments: Also remove ``--`` line-prefix comments

    Returns:
        Canonical query text for execution
    """
    previous = None
    sanitized = query
    while sanitized != previous:
        previous = sanitized
        sanitized = BLOCK_COMMENT.sub("", sanitized)
        sanitized = LINE_COMMENT.sub("", sanitized)
        if strip_dash_comments:
            sanitized = DASH_COMMENT.sub("", sanitized)
    return sanitized.strip()
