"""
OpMon Data Source Query Layer

Normalizes panel queries against a variable scope, dispatches selector
option fetches and executes requests against the OpMon connector.
"""

from .datasource import OpmonDataSource
from .editor import OptionStore, QueryEditorSession
from .exceptions import OpmonError, UnknownFieldError
from .queries import build_request, normalize_query
from .schemas import Query, QueryRequest, Scope, Variable

__all__ = [
    'OpmonDataSource',
    'OptionStore',
    'QueryEditorSession',
    'OpmonError',
    'UnknownFieldError',
    'build_request',
    'normalize_query',
    'Query',
    'QueryRequest',
    'Scope',
    'Variable',
]
