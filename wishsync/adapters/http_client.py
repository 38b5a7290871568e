"""Default authenticated HTTP transport for the wishlist REST adapter.

This module provides a thin wrapper around ``requests.Session`` that attaches
a bearer token, applies the request timeout and retries timeouts or dropped
connections. Wishlist logic never retries on its own; any retry policy lives
here in the transport.

Dependencies:
    - ``requests`` for network I/O.
    - ``wishsync.adapters.api_errors.ApiTimeoutError`` for typed transport failures.

Call context:
    - Constructed by ``wishsync.app.composition.build_wishlist_vm``.
    - Used only by ``AuthenticatedWishlistAdapter``; hosts may inject any
      object satisfying ``HttpClientPort`` instead.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import requests
from requests import exceptions as req_exc

from wishsync.adapters.api_errors import ApiError, ApiTimeoutError

TokenProvider = Callable[[], Optional[str]]


@dataclass
class HttpConfig:
    """Timeout and retry configuration for wishlist HTTP calls.

    Attributes:
        request_timeout_s: Timeout in seconds for each JSON API call.
        retries: Number of retry attempts after the initial request.
    """

    request_timeout_s: int = 10
    retries: int = 2


class BearerSession:
    """Shared requests wrapper with bearer-token headers and retry loops.

    This class is transport-only. Callers provide endpoint URLs and decide
    how to map non-2xx responses into domain errors.
    """

    def __init__(
        self,
        token_provider: Optional[TokenProvider] = None,
        cfg: Optional[HttpConfig] = None,
    ) -> None:
        """Create a retry-enabled session.

        Args:
            token_provider: Callable returning the current access token, or
                ``None`` for anonymous calls. Called on every request so a
                refreshed token is picked up without rebuilding the session.
            cfg: Shared timeout and retry settings.
        """
        self.session = requests.Session()
        self.token_provider = token_provider
        self.cfg = cfg or HttpConfig()

    def _headers(self, json_body: bool = False) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        token = self.token_provider() if self.token_provider else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if json_body:
            headers["Content-Type"] = "application/json"
        return headers

    def get(self, url: str, *, params: Optional[Dict[str, Any]] = None) -> requests.Response:
        return self._send("GET", url, params=params)

    def post(self, url: str, *, json_body: Optional[Dict[str, Any]] = None) -> requests.Response:
        return self._send("POST", url, json_body=json_body)

    def delete(self, url: str) -> requests.Response:
        return self._send("DELETE", url)

    def _send(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> requests.Response:
        """Send one request with retries on timeout/connectivity failures.

        Raises:
            ApiTimeoutError: If all attempts fail with timeout/connection errors.
            ApiError: For any other ``requests`` failure (not retried).
        """
        context = f"{method} {url}"
        data = None if json_body is None else json.dumps(json_body)
        last_err = ApiTimeoutError(f"Timeout contacting {url}", context=context)
        for _ in range(max(self.cfg.retries, 0) + 1):
            try:
                return self.session.request(
                    method,
                    url,
                    params=params,
                    data=data,
                    headers=self._headers(json_body=json_body is not None),
                    timeout=self.cfg.request_timeout_s,
                )
            except (req_exc.Timeout, req_exc.ConnectionError):
                last_err = ApiTimeoutError(f"Timeout contacting {url}", context=context)
            except req_exc.RequestException as exc:
                raise ApiError(str(exc), context=context) from exc
        raise last_err


__all__ = ["BearerSession", "HttpConfig", "TokenProvider"]
