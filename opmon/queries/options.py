"""
Option list dispatch for editor selectors.

Maps each selector to the backend resource that lists its choices, builds
the request payload for it and post-processes the returned rows.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from ..exceptions import UnknownFieldError
from ..schemas import Query, Scope, SelectableOption
from ..static import DEFAULT_QUERY, OptionField, QueryMode
from .patterns import fixup_regex
from .variables import resolve_variables, variable_placeholder

logger = logging.getLogger("opmon.options")

PayloadBuilder = Callable[[Query, Optional[Scope]], Dict[str, Any]]


def _resolved(value: Optional[str], scope: Optional[Scope]) -> Optional[str]:
    return fixup_regex(resolve_variables(value, scope))


def _query_payload(query: Query, scope: Optional[Scope]) -> Dict[str, Any]:
    return query.to_payload()


def _service_payload(query: Query, scope: Optional[Scope]) -> Dict[str, Any]:
    payload = query.to_payload()
    payload["host"] = _resolved(query.host, scope)
    return payload


def _metric_payload(query: Query, scope: Optional[Scope]) -> Dict[str, Any]:
    payload = query.to_payload()
    if query.mode == QueryMode.SYSTEM:
        payload["host"] = ""
        payload["service"] = ""
    else:
        payload["host"] = _resolved(query.host, scope)
        payload["service"] = _resolved(query.service, scope)

    payload["objecttype"] = _resolved(query.object_type, scope)
    payload["mode"] = None if query.mode is None else int(query.mode)
    return payload


@dataclass(frozen=True)
class ResourceDescriptor:
    resource: str
    payload: PayloadBuilder


RESOURCES: Dict[OptionField, ResourceDescriptor] = {
    OptionField.HOST: ResourceDescriptor("hosts", _query_payload),
    OptionField.SERVICE: ResourceDescriptor("services", _service_payload),
    OptionField.METRIC: ResourceDescriptor("metrics", _metric_payload),
    OptionField.LABEL: ResourceDescriptor("metrics", _metric_payload),
    OptionField.TIMECUT: ResourceDescriptor("timecuts", _query_payload),
    OptionField.HOSTGROUP: ResourceDescriptor("hostgroup", _query_payload),
    OptionField.SERVICEGROUP: ResourceDescriptor("servicegroup", _query_payload),
    OptionField.CATALOG: ResourceDescriptor("serviceCatalog", _query_payload),
}


def as_option_field(field: Union[OptionField, str]) -> OptionField:
    """Validate a selector identifier; unknown identifiers raise UnknownFieldError."""
    if isinstance(field, OptionField):
        return field
    try:
        return OptionField(field)
    except ValueError:
        raise UnknownFieldError(field) from None


def build_option_request(
    field: Union[OptionField, str],
    query: Optional[Query] = None,
    scope: Optional[Scope] = None,
) -> Tuple[str, Dict[str, Any]]:
    """
    Resolve the backend resource and POST body for a selector.

    Args:
        field: Selector identifier
        query: Current (possibly partial) query; never modified
        scope: Variable snapshot used to resolve host/service references

    Returns:
        Tuple of (resource name, payload dict)

    Raises:
        UnknownFieldError: If the field has no backend resource
    """
    descriptor = RESOURCES[as_option_field(field)]
    payload = descriptor.payload(query or Query(), scope)
    logger.debug("options for %s resolve to /%s", field, descriptor.resource)
    return descriptor.resource, payload


def map_to_label_value(rows: Any) -> List[SelectableOption]:
    """Turn backend rows ({text, value} dicts or scalars) into options."""
    if isinstance(rows, dict):
        rows = rows.get("data", [])
    if rows is None:
        return []
    if not isinstance(rows, (list, tuple)):
        logger.warning("ignoring malformed option rows of type %s", type(rows).__name__)
        return []

    options = []
    for row in rows:
        if isinstance(row, dict):
            text = row.get("text") or row.get("value")
            label = str(text) if text is not None else str(row)
            options.append(SelectableOption(label=label, value=label))
        else:
            options.append(SelectableOption(label=str(row), value=row))
    return options


def prepare_options(
    field: Union[OptionField, str],
    rows: Any,
    scope: Optional[Scope] = None,
    prepend_variables: bool = True,
) -> List[SelectableOption]:
    """
    Post-process a backend option list.

    Order: metric sentinel (metric selector only), one "$name" placeholder
    per defined variable in declaration order, then backend rows.
    """
    field = as_option_field(field)
    prefix = []

    if field == OptionField.METRIC:
        prefix.append(SelectableOption(label=DEFAULT_QUERY["metric"], value=DEFAULT_QUERY["metric"]))

    if prepend_variables:
        for variable in (scope.variables if scope is not None else []):
            placeholder = variable_placeholder(variable)
            prefix.append(SelectableOption(label=placeholder, value=placeholder))

    return prefix + map_to_label_value(rows)
