"""
Template variable resolution.

Expands "$name", "${name}", "${name:format}" and "[[name]]" references using
the variable snapshot carried by a Scope. Multi-value selections become the
set-pattern "{a,b}" so that fixup_regex can compress them afterwards.
"""

import logging
import re
from typing import Any, Dict, List, Optional, Union

from ..schemas import ALL_VALUE, Scope, Variable, VariableKind, VariableOption

logger = logging.getLogger("opmon.variables")

VARIABLE_PATTERN = re.compile(
    r"\$(\w+)"
    r"|\$\{(\w+)(?::[^}]*)?\}"
    r"|\[\[(\w+)(?::[^\]]*)?\]\]"
)


def value_from_variable(variable: Variable) -> Union[str, List[str], None]:
    """Current value of a variable, with "All" expanded for multi-value kinds."""
    if not variable.substitutable:
        return None

    current = variable.current
    if variable.kind in (VariableKind.CUSTOM, VariableKind.QUERY):
        if current == ALL_VALUE or current == [ALL_VALUE]:
            if variable.all_value:
                return variable.all_value
            return [option for option in variable.options if option != ALL_VALUE]
        if isinstance(current, list) and not variable.multi and current:
            return current[0]
    return current


def format_value(value: Union[str, List[str], None]) -> Optional[str]:
    """Collapse a resolved value into a single field string."""
    if value is None:
        return None
    if isinstance(value, list):
        if not value:
            return ""
        if len(value) == 1:
            return str(value[0])
        return "{" + ",".join(str(item) for item in value) + "}"
    return str(value)


def lookup(name: str, scope: Scope) -> Optional[str]:
    """Find a variable's value; scoped_vars win over dashboard variables."""
    if name in scope.scoped_vars:
        scoped = scope.scoped_vars[name]
        if isinstance(scoped, dict):
            scoped = scoped.get("value")
        return format_value(scoped)

    for variable in scope.variables:
        if variable.name == name:
            return format_value(value_from_variable(variable))
    return None


def resolve_variables(value: Optional[str], scope: Optional[Scope]) -> Optional[str]:
    """
    Substitute variable references in a field value.

    Args:
        value: Raw field text, possibly containing references
        scope: Variable snapshot; None leaves the value untouched

    Returns:
        Text with known references replaced; unknown references kept literally
    """
    if not value or scope is None or ("$" not in value and "[[" not in value):
        return value

    def _replace(match: "re.Match[str]") -> str:
        name = match.group(1) or match.group(2) or match.group(3)
        resolved = lookup(name, scope)
        if resolved is None:
            logger.debug("variable %s not in scope, keeping literal", name)
            return match.group(0)
        return resolved

    return VARIABLE_PATTERN.sub(_replace, value)


def substitutable_variables(scope: Optional[Scope]) -> List[Variable]:
    """Variables that may appear inside field values, in declaration order."""
    if scope is None:
        return []
    return [variable for variable in scope.variables if variable.substitutable]


def variable_placeholder(variable: Variable) -> str:
    return f"${variable.name}"


def variable_values(scope: Scope) -> Dict[str, Any]:
    """
    Merged global variable values attached to an outbound request.

    Ad-hoc and system variables are skipped; ad-hoc filters travel in
    the request's adhocFilters instead.
    """
    values: Dict[str, Any] = {}
    for variable in substitutable_variables(scope):
        value = value_from_variable(variable)
        if value is None:
            continue
        values[variable.id] = VariableOption(text=variable.text, value=value).model_dump()

    values.update(scope.scoped_vars)
    return values
