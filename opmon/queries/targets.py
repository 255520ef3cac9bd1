"""
Batch processing of panel targets.

Filters a request down to the targets worth executing, normalizes each of
them against a shared scope and attaches the ambient filter context.
"""

import logging
from typing import List, Optional

from ..schemas import Query, QueryRequest, Scope
from ..static import DEFAULT_QUERY, FILTER_FIELDS, QueryMode
from .normalizer import normalize_query
from .variables import variable_values

logger = logging.getLogger("opmon.targets")


def missing_fields(target: Query) -> List[str]:
    """Object fields absent from a target as submitted."""
    return [field for field in FILTER_FIELDS if getattr(target, field) is None]


def filter_targets(targets: List[Query]) -> List[Query]:
    """
    Drop targets that must never reach the backend.

    Hidden targets go first, then capacity targets that still carry the
    service sentinel (capacity needs an explicit service).
    """
    kept = []
    for target in targets:
        if target.disabled:
            logger.debug("skipping hidden target %s", target.ref_id)
            continue
        if target.mode == QueryMode.CAPACITY and target.service == DEFAULT_QUERY["service"]:
            logger.debug("skipping capacity target %s without service", target.ref_id)
            continue
        kept.append(target)
    return kept


def build_request(request: QueryRequest, scope: Optional[Scope] = None) -> QueryRequest:
    """
    Produce the outbound request for a batch of targets.

    Args:
        request: Request as issued by the panel; never modified
        scope: Variable snapshot and ad-hoc filters for this execution

    Returns:
        Copy of the request holding only executable, normalized targets,
        with adhocFilters and merged scopedVars attached
    """
    scope = scope or Scope()
    effective = scope.model_copy(
        update={"scoped_vars": {**scope.scoped_vars, **request.scoped_vars}}
    )

    targets = []
    for target in filter_targets(request.targets):
        missing = missing_fields(target)
        if missing:
            logger.debug("skipping target %s missing %s", target.ref_id, ", ".join(missing))
            continue
        targets.append(normalize_query(target, effective))

    return request.model_copy(update={
        "targets": targets,
        "adhoc_filters": list(scope.adhoc_filters),
        "scoped_vars": variable_values(effective),
    })
