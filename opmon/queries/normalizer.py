"""
Query normalization.

Turns one raw panel target into the canonical form the backend expects:
defaults filled in, variables resolved, sentinel selections cleared and
set notation compressed into alternation patterns.
"""

from typing import Optional

from ..schemas import Query, Scope
from ..static import DEFAULT_QUERY, FILTER_FIELDS, QueryMode
from .patterns import fixup_regex
from .variables import resolve_variables


def apply_defaults(query: Query) -> Query:
    """Copy of the query with every unset optional field set to its sentinel."""
    updates = {
        field: default
        for field, default in DEFAULT_QUERY.items()
        if getattr(query, field) is None
    }
    return query.model_copy(update=updates)


def normalize_query(query: Query, scope: Optional[Scope] = None) -> Query:
    """
    Build the canonical request target for a query.

    Filter fields are resolved against the scope first, then the clearing
    rules run in order (system mode, host, service, metric sentinels), then
    any set notation is compressed. The input query is left untouched.

    Args:
        query: Raw query as edited by the user
        scope: Variable snapshot used for substitution

    Returns:
        New Query instance with all fields populated
    """
    normalized = apply_defaults(query)

    values = {
        field: resolve_variables(getattr(normalized, field), scope)
        for field in FILTER_FIELDS
    }

    if normalized.mode == QueryMode.SYSTEM:
        values["host"] = ""
        values["service"] = ""

    if values["host"] == DEFAULT_QUERY["host"]:
        values["host"] = ""

    if values["service"] == DEFAULT_QUERY["service"]:
        values["service"] = ""

    if values["metric"] == DEFAULT_QUERY["metric"]:
        values["metric"] = ""

    for field in FILTER_FIELDS:
        values[field] = fixup_regex(values[field])

    if normalized.target:
        values["target"] = resolve_variables(normalized.target, scope)

    return normalized.model_copy(update=values)
