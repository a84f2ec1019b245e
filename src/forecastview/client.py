# Copyright (c) Syntropy Systems
"""HTTP client for the forecasting backend."""
from __future__ import annotations

import time
from typing import TYPE_CHECKING, cast

import httpx
from pydantic import ValidationError
from typing_extensions import Self

from forecastview.config import DEFAULT_API_URL
from forecastview.models.api import ErrorResponse, RunRequest, RunResponse

if TYPE_CHECKING:
    from collections.abc import Mapping
    from types import TracebackType

    from forecastview.models.base import JSONObject

SUMMARY_PATH = "/artifacts/summary.json"


class ForecastViewClientError(Exception):
    """Error from forecasting backend communication."""


def make_nonce() -> str:
    """Return a run-scoped cache-busting value (milliseconds since the epoch)."""
    return str(int(time.time() * 1000))


def _error_detail(error: httpx.HTTPStatusError) -> str:
    # Try to get error detail from response
    try:
        return ErrorResponse.model_validate(error.response.json()).detail
    except (ValidationError, ValueError):
        return str(error)


class RunClient:
    """HTTP client that starts runs and fetches the persisted summary.

    Returns raw payloads; interpreting them is left to the reconciler.
    """

    api_url: str
    timeout: float | None
    _client: httpx.Client

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_url: Base URL of the backend (e.g., "http://localhost:8000")
            timeout: Request timeout in seconds, None for no timeout
            transport: Optional httpx transport (used by tests)

        """
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._client = httpx.Client(timeout=timeout, transport=transport)

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> Self:
        """Enter the client context and return self."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit the client context and close the HTTP client."""
        self.close()

    def _request(
        self,
        method: str,
        path: str,
        json: Mapping[str, object] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> object:
        """Make an HTTP request to the backend and return the decoded JSON."""
        url = f"{self.api_url}{path}"
        try:
            response = self._client.request(
                method,
                url,
                json=json,
                params=params,
                headers={"Cache-Control": "no-store"},
            )
            _ = response.raise_for_status()
            return cast("object", response.json())
        except httpx.HTTPStatusError as e:
            msg = f"Server error: {_error_detail(e)}"
            raise ForecastViewClientError(msg) from e
        except httpx.RequestError as e:
            msg = f"Connection error: {e}"
            raise ForecastViewClientError(msg) from e
        except ValueError as e:
            msg = f"Invalid JSON from {path}: {e}"
            raise ForecastViewClientError(msg) from e

    def start_run(self, fast_mode: bool = True) -> RunResponse:
        """Trigger a forecasting run and wait for the backend to finish it.

        Args:
            fast_mode: Ask the backend to skip the slow training steps

        Returns:
            The backend's run response

        Raises:
            ForecastViewClientError: If the request fails or the status is
                not a success

        """
        data = self._request(
            "POST",
            "/run",
            json=RunRequest(fast_mode=fast_mode).model_dump(),
        )
        if not isinstance(data, dict):
            msg = "Invalid run response: expected a JSON object"
            raise ForecastViewClientError(msg)
        try:
            return RunResponse.model_validate(data)
        except ValidationError as e:
            msg = f"Invalid run response: {e}"
            raise ForecastViewClientError(msg) from e

    def fetch_summary(self, nonce: str | None = None) -> JSONObject:
        """Fetch the persisted summary.json artifact.

        Args:
            nonce: Cache-busting value appended as the ``t`` query parameter

        Returns:
            The summary object

        Raises:
            ForecastViewClientError: If the fetch fails or the body is not a
                JSON object

        """
        data = self._request(
            "GET",
            SUMMARY_PATH,
            params={"t": nonce or make_nonce()},
        )
        if not isinstance(data, dict):
            msg = "Invalid summary.json: expected a JSON object"
            raise ForecastViewClientError(msg)
        return cast("JSONObject", data)

    def ping(self) -> bool:
        """Return True if the backend answers at all."""
        try:
            _ = self._client.get(self.api_url + "/")
        except httpx.RequestError:
            return False
        return True


# Convenience function
def get_client(api_url: str = DEFAULT_API_URL, timeout: float | None = None) -> RunClient:
    """Create a RunClient instance.

    Args:
        api_url: Base URL of the backend
        timeout: Request timeout in seconds

    Returns:
        RunClient instance

    """
    return RunClient(api_url, timeout)
