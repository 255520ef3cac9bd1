"""
Set-pattern compression.

Users may type "{web01,web02}" to mean any of several objects; the backend
matcher only understands the alternation form "/^(web01|web02)$/".
"""

import re
from typing import Optional

SET_PATTERN = re.compile(r"^/?\^?\{(.*)\}\$?/?$")


def fixup_regex(value: Optional[str]) -> Optional[str]:
    """
    Rewrite a brace set into a backend alternation pattern.

    Args:
        value: Field value, possibly "{a,b}" or "/^{a,b}$/"

    Returns:
        "/^(a|b)$/" for set notation, otherwise the value unchanged
    """
    if not value:
        return value

    match = SET_PATTERN.match(value)
    if not match:
        return value

    values = [item.replace("/", "\\/") for item in match.group(1).split(",")]
    return "/^(" + "|".join(values) + ")$/"
