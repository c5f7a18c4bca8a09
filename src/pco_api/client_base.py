from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry


logger = logging.getLogger(__name__)

UNKNOWN_ERROR_MESSAGE = "Unknown exception in HTTP request"


class APIClientError(RuntimeError):
    """Base error for API client failures."""

    def __init__(
        self,
        message: str = UNKNOWN_ERROR_MESSAGE,
        *,
        status_code: Optional[int] = None,
        body: Any = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        # Decoded error document when the server sent one, else the message.
        self.body = body if body is not None else message


class APIClientTimeout(APIClientError):
    """Raised when request times out."""


class APIClientConnectionError(APIClientError):
    """Raised when the request never got a response (DNS, TLS, refused...)."""


class APIClientHTTPError(APIClientError):
    """Raised for non-success HTTP responses."""


class ClientHTTPError(APIClientHTTPError):
    """4xx response."""


class ServerHTTPError(APIClientHTTPError):
    """5xx response."""


def decode_error_body(response: requests.Response) -> Any:
    """
    Return the error body as JSON when possible, raw text otherwise.
    PCO answers errors with {"errors": [...]} documents.
    """
    try:
        return response.json()
    except ValueError:
        text = (response.text or "").strip()
        return text or None


class BaseAPIClient:
    """
    Reusable base HTTP client for JSON APIs.

    Features:
    - Persistent session
    - Default headers
    - Retry with exponential backoff (idempotent verbs only)
    - Configurable timeout
    - Safe JSON parsing with typed errors
    """

    DEFAULT_TIMEOUT = 15  # seconds
    DEFAULT_RETRIES = 3
    DEFAULT_BACKOFF_FACTOR = 0.5

    def __init__(
        self,
        default_headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
        retries: Optional[int] = None,
        backoff_factor: Optional[float] = None,
    ) -> None:

        self.timeout = timeout or self.DEFAULT_TIMEOUT

        self.session = requests.Session()

        headers = {
            "User-Agent": "pco-api/1.0",
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

        if default_headers:
            headers.update(default_headers)

        self.session.headers.update(headers)

        # POST/PATCH are not retried: a replayed create is not harmless.
        retry_strategy = Retry(
            total=retries if retries is not None else self.DEFAULT_RETRIES,
            backoff_factor=backoff_factor if backoff_factor is not None else self.DEFAULT_BACKOFF_FACTOR,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["HEAD", "GET", "PUT", "DELETE", "OPTIONS"],
            raise_on_status=False,
        )

        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("https://", adapter)
        self.session.mount("http://", adapter)

    # ---------------------------------------------------
    # Core request method
    # ---------------------------------------------------
    def request_json(
        self,
        verb: str,
        url: str,
        body: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """
        Send a request to a fully formed URL and return parsed JSON.
        Raises clean, structured errors.
        """
        verb = verb.upper()
        logger.debug(f"{verb} {url}")

        try:
            response = self.session.request(
                verb,
                url,
                data=body,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            raise APIClientTimeout(
                f"Request timed out calling {url}"
            ) from e
        except requests.ConnectionError as e:
            raise APIClientConnectionError(
                f"Connection failed calling {url}"
            ) from e
        except requests.RequestException as e:
            raise APIClientError(
                f"Request failed calling {url}"
            ) from e

        status = response.status_code
        if status >= 400:
            error_cls = ServerHTTPError if status >= 500 else ClientHTTPError
            raise error_cls(
                f"HTTP {status} returned from {url}",
                status_code=status,
                body=decode_error_body(response),
            )

        if status == 204 or not response.content:
            return {}

        try:
            return response.json()
        except ValueError as e:
            raise APIClientError(
                f"Invalid JSON returned from {url}",
                status_code=status,
            ) from e

    def get_json(self, url: str) -> Any:
        return self.request_json("GET", url)

    def close(self) -> None:
        self.session.close()


def encode_body(payload: Any) -> str:
    """JSON-encode a write payload; strings are assumed to be encoded already."""
    if isinstance(payload, (str, bytes)):
        return payload.decode("utf-8") if isinstance(payload, bytes) else payload
    return json.dumps(payload)
