"""
Query editor session.

Holds the query being edited, decides which selector option lists must be
fetched, and keeps one result slot per selector. A slot only accepts the
result of the most recently issued fetch for that selector, so an older
request finishing late never overwrites newer options.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Set, Union

from .exceptions import UnknownFieldError
from .queries import apply_defaults, as_option_field
from .schemas import OptionsResult, Query, Scope, SelectableOption
from .static import (
    DEFAULT_QUERY,
    GROUP_BY,
    QUERY_MODE_LABELS,
    RESULT_FORMATS,
    ObjectType,
    OptionField,
    QueryMode,
)

logger = logging.getLogger("opmon.editor")

# Selector shown next to the host selector for each object type
OBJECT_TYPE_FIELDS: Dict[str, OptionField] = {
    ObjectType.SERVICE.value: OptionField.SERVICE,
    ObjectType.HOSTGROUP.value: OptionField.HOSTGROUP,
    ObjectType.SERVICEGROUP.value: OptionField.SERVICEGROUP,
    ObjectType.CATALOG.value: OptionField.CATALOG,
}


def object_types_for_mode(mode: Optional[int]) -> List[SelectableOption]:
    """Object types that make sense for a query mode."""
    allowed = []
    for object_type in ObjectType:
        if mode in (QueryMode.AVAILABILITY, QueryMode.STATUS):
            ok = object_type != ObjectType.SYSTEM
        elif mode == QueryMode.CAPACITY:
            ok = object_type in (ObjectType.SERVICE, ObjectType.HOSTGROUP, ObjectType.SERVICEGROUP)
        elif mode == QueryMode.SYSTEM:
            ok = object_type != ObjectType.CATALOG
        else:
            ok = False
        if ok:
            allowed.append(SelectableOption(label=object_type.value, value=object_type.value))
    return allowed


class OptionStore:
    """Per-selector option slots with last-issued-wins semantics."""

    def __init__(self):
        self._options: Dict[OptionField, List[SelectableOption]] = {}
        self._issued: Dict[OptionField, int] = {}
        self.loading: Set[OptionField] = set()

    def get(self, field: OptionField) -> List[SelectableOption]:
        return list(self._options.get(field, []))

    def begin(self, field: OptionField) -> int:
        """Register a new fetch for a selector and return its token."""
        token = self._issued.get(field, 0) + 1
        self._issued[field] = token
        self.loading.add(field)
        return token

    def is_current(self, field: OptionField, token: int) -> bool:
        return self._issued.get(field) == token

    def apply(self, field: OptionField, token: int, options: List[SelectableOption]) -> bool:
        """
        Store a fetch result if it is still the latest one for the selector.

        Returns:
            True if stored, False if the result was stale and dropped
        """
        if not self.is_current(field, token):
            logger.debug("dropping stale %s options (token %s)", field.value, token)
            return False
        self._options[field] = list(options)
        self.loading.discard(field)
        return True

    def finish(self, field: OptionField, token: int) -> None:
        """Mark a fetch as done without storing anything (failed fetch)."""
        if self.is_current(field, token):
            self.loading.discard(field)

    def clear(self, field: OptionField) -> None:
        """Empty a slot and invalidate fetches still in flight for it."""
        self._options[field] = []
        self._issued[field] = self._issued.get(field, 0) + 1
        self.loading.discard(field)


class QueryEditorSession:
    """
    Editing state for one panel query.

    Args:
        datasource: OpmonDataSource used for option fetches
        query: Query being edited; defaults are filled in on creation
        scope: Variable snapshot used for option payloads and placeholders
    """

    def __init__(self, datasource, query: Optional[Query] = None, scope: Optional[Scope] = None):
        self.datasource = datasource
        self.query = apply_defaults(query or Query())
        self.scope = scope or Scope()
        self.options = OptionStore()

    def initial_fields(self) -> List[OptionField]:
        """Selectors to populate when the editor opens."""
        fields = [OptionField.HOST]
        dependent = OBJECT_TYPE_FIELDS.get(self.query.object_type)
        if dependent is not None:
            fields.append(dependent)
        fields.append(OptionField.TIMECUT)
        return fields

    async def open(self) -> List[OptionsResult]:
        """Fetch the option lists needed by a freshly opened editor."""
        return await asyncio.gather(*(self.get_options(field) for field in self.initial_fields()))

    async def get_options(self, field: Union[OptionField, str]) -> OptionsResult:
        """Fetch options for a selector and store them in its slot."""
        try:
            key = as_option_field(field)
        except UnknownFieldError as e:
            logger.error(str(e))
            return OptionsResult(status="error", message=str(e))

        token = self.options.begin(key)
        result = await self.datasource.fetch_field_options(key, self.query, self.scope)
        if result.status == "success":
            self.options.apply(key, token, result.options)
        else:
            self.options.finish(key, token)
        return result

    def change(self, **updates: Any) -> Query:
        """
        Apply user edits to the query.

        Dependent selections are reset the way the editor expects:
        - switching to capacity mode with object type Host moves to Service
        - a new hostgroup or servicegroup resets host and service
        - a new host resets service
        Reset selectors have their option slots cleared.
        """
        current = self.query

        if "mode" in updates:
            updates["mode"] = QueryMode(updates["mode"])
            object_type = updates.get("object_type", current.object_type)
            if updates["mode"] == QueryMode.CAPACITY and object_type == ObjectType.HOST:
                updates["object_type"] = ObjectType.SERVICE.value

        if "hostgroup" in updates or "servicegroup" in updates:
            updates.setdefault("host", DEFAULT_QUERY["host"])
            updates.setdefault("service", DEFAULT_QUERY["service"])
            self.options.clear(OptionField.HOST)
            self.options.clear(OptionField.SERVICE)
        elif "host" in updates:
            updates.setdefault("service", DEFAULT_QUERY["service"])
            self.options.clear(OptionField.SERVICE)

        self.query = Query.model_validate({**current.model_dump(), **updates})
        return self.query

    def object_type_options(self) -> List[SelectableOption]:
        return object_types_for_mode(self.query.mode)

    @staticmethod
    def query_mode_options() -> List[SelectableOption]:
        return [SelectableOption(label=label, value=index) for index, label in enumerate(QUERY_MODE_LABELS)]

    @staticmethod
    def group_by_options() -> List[SelectableOption]:
        return [SelectableOption(label=value, value=value) for value in GROUP_BY]

    @staticmethod
    def result_format_options() -> List[SelectableOption]:
        return [SelectableOption(**option) for option in RESULT_FORMATS]
