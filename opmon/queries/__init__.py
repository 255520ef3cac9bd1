"""
Query Pipeline Modules

Query processing split by concern:
- patterns.py: set-pattern to alternation compression
- variables.py: template variable resolution
- normalizer.py: single query normalization
- targets.py: batch filtering and request building
- options.py: selector option dispatch and post-processing
"""

from .patterns import fixup_regex
from .variables import resolve_variables, variable_values, value_from_variable
from .normalizer import apply_defaults, normalize_query
from .targets import build_request, filter_targets, missing_fields
from .options import (
    RESOURCES,
    ResourceDescriptor,
    as_option_field,
    build_option_request,
    map_to_label_value,
    prepare_options,
)

__all__ = [
    # Patterns
    'fixup_regex',

    # Variables
    'resolve_variables',
    'variable_values',
    'value_from_variable',

    # Normalization
    'apply_defaults',
    'normalize_query',

    # Batches
    'build_request',
    'filter_targets',
    'missing_fields',

    # Options
    'RESOURCES',
    'ResourceDescriptor',
    'as_option_field',
    'build_option_request',
    'map_to_label_value',
    'prepare_options',
]
