"""
OpMon data source

Async facade used by the editor and panels:
- query(): filter + normalize targets, POST <base>/query, parse frames
- fetch_field_options(): POST <base>/<resource> for one selector
- metric_find_query(), get_tag_keys(), get_tag_values(): variable support
- test_datasource(): connectivity check

Blocking HTTP calls run in the loop's default executor. Transport failures
on query/option calls are returned as error results, never raised.
"""

import asyncio
import functools
import json
import logging
from typing import Any, Dict, List, Optional, Union
from urllib.error import HTTPError, URLError

from .config import DatasourceConfig
from .exceptions import OpmonError, UnknownFieldError
from .http_client import OpmonHttpClient
from .queries import build_option_request, build_request, normalize_query, prepare_options
from .queries.variables import resolve_variables
from .response_parser import ResponseParser
from .schemas import (
    ConnectionStatus,
    MetricFindValue,
    OptionsResult,
    Query,
    QueryRequest,
    QueryResult,
    Scope,
    VariableQuery,
)
from .static import OptionField

logger = logging.getLogger("opmon.datasource")

ERROR_MESSAGE_BASE = "Data source is not working"

# Failures raised by OpmonHttpClient (JSONDecodeError is a ValueError)
TRANSPORT_ERRORS = (URLError, OSError, ValueError)

# Failures raised by ResponseParser on frames of an unexpected shape
PARSE_ERRORS = (KeyError, IndexError, TypeError, AttributeError, ValueError)


def describe_error(error: Exception, fallback: str = ERROR_MESSAGE_BASE) -> str:
    """Human-readable message for a transport failure."""
    if isinstance(error, HTTPError):
        message = str(error.reason) if error.reason else fallback
        try:
            body = json.loads(error.read().decode("utf-8") or "{}")
        except (AttributeError, OSError, ValueError):
            body = {}
        details = body.get("error") if isinstance(body, dict) else None
        if isinstance(details, dict) and details.get("code") is not None:
            message += f": {details['code']}. {details.get('message', '')}"
        return message

    if isinstance(error, URLError):
        return str(error.reason) or fallback

    return str(error) or fallback


def _data(payload: Any) -> List[Any]:
    if isinstance(payload, dict):
        return payload.get("data") or []
    return payload or []


class OpmonDataSource:
    """Query layer of the OpMon data source."""

    def __init__(
        self,
        config: Optional[DatasourceConfig] = None,
        http_client: Optional[OpmonHttpClient] = None,
        name: str = "OpMon",
    ):
        self.config = config or DatasourceConfig()
        self.name = name
        self.http = http_client or OpmonHttpClient(
            self.config.base_url, self.config.timeout, self.config.verify_tls
        )
        self.response_parser = ResponseParser()

    async def _run(self, func, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(func, *args))

    def normalize_query(self, query: Query, scope: Optional[Scope] = None) -> Query:
        return normalize_query(query, scope)

    def build_request(self, request: QueryRequest, scope: Optional[Scope] = None) -> QueryRequest:
        return build_request(request, scope)

    async def query(self, request: QueryRequest, scope: Optional[Scope] = None) -> QueryResult:
        """
        Execute a panel request.

        Returns:
            QueryResult with DataFrames, an empty success when no target
            qualifies (the backend is not contacted), or an error status on
            transport failures and malformed responses
        """
        outbound = build_request(request, scope)
        if not outbound.targets:
            logger.debug("no executable targets, skipping backend call")
            return QueryResult(data=[])

        try:
            payload = await self._run(self.http.post_json, "query", outbound.to_payload())
        except TRANSPORT_ERRORS as e:
            message = describe_error(e)
            logger.error("query failed: %s", message)
            return QueryResult(status="error", message=message)

        try:
            frames = self.response_parser.to_data_frames(payload)
        except PARSE_ERRORS as e:
            message = f"Invalid response from data source: {e}"
            logger.error("query failed: %s", message)
            return QueryResult(status="error", message=message)

        return QueryResult(data=frames)

    async def fetch_field_options(
        self,
        field: Union[OptionField, str],
        query: Optional[Query] = None,
        scope: Optional[Scope] = None,
        prepend_variables: bool = True,
    ) -> OptionsResult:
        """
        Fetch the option list for one editor selector.

        Unknown fields and transport failures come back as error results.
        """
        try:
            resource, payload = build_option_request(field, query, scope)
        except UnknownFieldError as e:
            logger.error(str(e))
            return OptionsResult(status="error", message=str(e))

        try:
            rows = await self._run(self.http.post_json, resource, payload)
        except TRANSPORT_ERRORS as e:
            message = describe_error(e)
            logger.error("fetching %s options failed: %s", resource, message)
            return OptionsResult(status="error", message=message)

        return OptionsResult(options=prepare_options(field, rows, scope, prepend_variables))

    async def metric_find_query(
        self,
        variable_query: VariableQuery,
        scope: Optional[Scope] = None,
        time_range: Optional[Dict[str, Any]] = None,
        range_raw: Optional[Dict[str, Any]] = None,
        query_type: Optional[str] = None,
    ) -> List[MetricFindValue]:
        """
        Run a template variable query against <base>/variable.

        Raises:
            OpmonError: On malformed JSON queries or transport failures
        """
        interpolated = resolve_variables(variable_query.query, scope)
        if variable_query.format == "json":
            try:
                payload: Any = json.loads(interpolated)
            except ValueError as e:
                raise OpmonError(f"invalid JSON variable query: {e}") from e
        else:
            payload = {"type": query_type, "target": interpolated}

        data = {"payload": payload, "range": time_range, "rangeRaw": range_raw}
        try:
            response = await self._run(self.http.post_json, "variable", data)
        except TRANSPORT_ERRORS as e:
            raise OpmonError(describe_error(e)) from e

        return self.response_parser.transform_metric_find_response(response)

    async def get_tag_keys(self, options: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Ad-hoc filter keys offered by the backend."""
        try:
            return _data(await self._run(self.http.post_json, "tag-keys", options or {}))
        except TRANSPORT_ERRORS as e:
            raise OpmonError(describe_error(e)) from e

    async def get_tag_values(self, options: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Values the backend knows for one ad-hoc filter key."""
        try:
            return _data(await self._run(self.http.post_json, "tag-values", options))
        except TRANSPORT_ERRORS as e:
            raise OpmonError(describe_error(e)) from e

    async def test_datasource(self) -> ConnectionStatus:
        """Check that the connector answers with HTTP 200."""
        try:
            status, reason = await self._run(self.http.get_status)
        except TRANSPORT_ERRORS as e:
            message = describe_error(e)
            logger.warning("connectivity test failed: %s", message)
            return ConnectionStatus(status="error", message=message, title="Error")

        if status == 200:
            return ConnectionStatus(status="success", message="Data source is working", title="Success")

        return ConnectionStatus(status="error", message=reason or ERROR_MESSAGE_BASE, title="Error")
