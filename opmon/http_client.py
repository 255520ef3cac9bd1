"""
HTTP client utilities for the OpMon data source.

Provides a small interface for talking to the OpMon datasource connector,
including SSL context handling and JSON serialization. All calls are
blocking; OpmonDataSource runs them in an executor.
"""

import json
import ssl
import urllib.request
from typing import Any, Dict, Optional, Tuple

from .static import JSON_HEADERS


class OpmonHttpClient:
    """HTTP client for the OpMon datasource connector."""

    def __init__(self, base_url: str, timeout: int = 10, verify_tls: bool = True):
        """
        Initialize HTTP client.

        Args:
            base_url: Connector URL including the endpoint path
                      (e.g., https://opmon/opmon/.../datasource?mod=OPVIEW&...&q=)
            timeout: Request timeout in seconds
            verify_tls: Verify server certificates on HTTPS
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._ssl_context = self._create_ssl_context(verify_tls)

    def _create_ssl_context(self, verify_tls: bool) -> ssl.SSLContext:
        ssl_context = ssl.create_default_context()
        if not verify_tls:
            ssl_context.check_hostname = False
            ssl_context.verify_mode = ssl.CERT_NONE
        return ssl_context

    def url_for(self, resource: str = "") -> str:
        return f"{self.base_url}/{resource}" if resource else self.base_url

    def _context_for(self, url: str) -> Optional[ssl.SSLContext]:
        return self._ssl_context if url.startswith("https://") else None

    def post_json(self, resource: str, data: Any, headers: Optional[Dict[str, str]] = None) -> Any:
        """
        POST JSON data to a connector resource.

        Args:
            resource: Resource name appended to the base URL (e.g., hosts)
            data: JSON-serializable request body
            headers: Optional additional headers

        Returns:
            Decoded JSON response (None for an empty body)

        Raises:
            HTTPError: On HTTP errors
            URLError: On connection errors
            JSONDecodeError: On a malformed response body
        """
        url = self.url_for(resource)
        body = json.dumps(data).encode("utf-8")
        hdrs = dict(JSON_HEADERS)
        hdrs.update(headers or {})
        req = urllib.request.Request(url, data=body, headers=hdrs, method="POST")

        with urllib.request.urlopen(req, timeout=self.timeout, context=self._context_for(url)) as resp:
            raw = resp.read().decode("utf-8")
            return json.loads(raw) if raw else None

    def get_status(self, resource: str = "") -> Tuple[int, str]:
        """
        GET a connector resource and report the HTTP status.

        Returns:
            Tuple of (status code, reason phrase)

        Raises:
            HTTPError: On HTTP errors
            URLError: On connection errors
        """
        url = self.url_for(resource)
        req = urllib.request.Request(url, headers=dict(JSON_HEADERS), method="GET")

        with urllib.request.urlopen(req, timeout=self.timeout, context=self._context_for(url)) as resp:
            return resp.status, getattr(resp, "reason", "") or ""
