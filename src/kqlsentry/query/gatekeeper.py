"""Table and root-collection whitelist checks."""

from __future__ import annotations

import re
from collections.abc import Iterable

from kqlsentry.query.normalizer import DASH_COMMENT
from kqlsentry.query.patterns import BINDING_KEYWORD

# Bare identifier at the start of the query, followed by a pipe or the end of its line
FIRST_TABLE_PATTERN = re.compile(r"^\s*(\w+)\s*(?:\||$)", re.MULTILINE | re.ASCII)

# Leading word of the query, used when the first line is not a bare table name
LEADING_WORD_PATTERN = re.compile(r"\w+")


def extract_first_table(text: str) -> str | None:
    """Return the first table-like identifier of an analytics query.

    Args:
        text: Analysis view of the query

    Returns:
        The identifier, or None if the first line does not start with one
    """
    match = FIRST_TABLE_PATTERN.match(text.strip())
    return match.group(1) if match else None


def extract_first_token(text: str) -> str:
    """Return the first whitespace-delimited token ("" for blank text)."""
    tokens = text.split()
    return tokens[0] if tokens else ""


def check_kql_table(text: str, allowed_tables: Iterable[str]) -> str | None:
    """Check the first table of an analytics query against the whitelist.

    Identifiers starting with ``let`` are bindings, not table references, and
    are not checked. ``--`` comments are ignored, as in the sanitized text.
    When the first line is not a bare table name (``union T``,
    ``search ...``, ``(T) | ...``), the first word of the query is checked
    instead, so those forms are blocked unless that word is whitelisted.

    Returns:
        Error message, or None if the table is allowed (or the text has no words)
    """
    allowed = list(allowed_tables)
    text = DASH_COMMENT.sub(" ", text)
    table_name = extract_first_table(text)
    if table_name is None:
        leading = LEADING_WORD_PATTERN.search(text)
        if leading is None:
            return None
        table_name = leading.group(0)
    if table_name.lower().startswith(BINDING_KEYWORD):
        return None
    if table_name.lower() in {t.lower() for t in allowed}:
        return None
    return (
        f"Table '{table_name}' is not in the allowed list. "
        f"Allowed tables: {', '.join(allowed)}"
    )


def check_resource_graph_root(text: str, allowed_roots: Iterable[str]) -> str | None:
    """Check that a resource graph query starts with an allowed root collection.

    Returns:
        Error message, or None if the first token is an allowed root
    """
    allowed = list(allowed_roots)
    first_token = extract_first_token(text).lower()
    if first_token in {r.lower() for r in allowed}:
        return None
    return (
        "Query must start with a valid resource table. "
        f"Allowed tables: {', '.join(allowed)}"
    )
