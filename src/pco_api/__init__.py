"""
pco_api - Planning Center Online REST client

Builds endpoint URLs through a fluent interface, authenticates with the
Personal Access Token pair (HTTP Basic), pages through result sets and
returns explicit results instead of raising on API failures.

Usage:
------
    from pco_api import PlanningCenterClient

    client = PlanningCenterClient()

    # All rows (paged transparently, 100 per request)
    result = client.people().table("people").includes("emails").get()

    # One record
    person = client.people().table("people").where("email", "=", "x@y.com").first()

    # Writes
    client.people().table("people").id(2345).association("emails").data(
        {"data": {"attributes": {"address": "x@y.com"}}}
    ).post()

Configuration:
--------------
    PCO_APPLICATION_ID  - Personal Access Token, application id (required)
    PCO_SECRET          - Personal Access Token, secret (required)
    PCO_API_HOST        - Override the API host
    PCO_TIMEOUT_SEC     - Request timeout (default: 15)
    PCO_MAX_RETRIES     - Retries for idempotent requests (default: 3)
"""

# -----------------------------------------------------------------------------
# HTTP layer and error taxonomy
# -----------------------------------------------------------------------------
from .client_base import (
    BaseAPIClient,
    APIClientError,
    APIClientConnectionError,
    APIClientHTTPError,
    APIClientTimeout,
    ClientHTTPError,
    ServerHTTPError,
)

# -----------------------------------------------------------------------------
# Configuration
# -----------------------------------------------------------------------------
from .config import PlanningCenterConfig, PlanningCenterConfigError

# -----------------------------------------------------------------------------
# Request building and pagination
# -----------------------------------------------------------------------------
from .modules import Module, UnknownModuleError
from .request_spec import (
    MissingTableError,
    RequestSpec,
    UnsupportedOperatorError,
    where_fragment,
)
from .pagination import PageWindow, initial_window, next_window, paginate

# -----------------------------------------------------------------------------
# Results
# -----------------------------------------------------------------------------
from .schema import Page, PagedResult
from .result import Result

# -----------------------------------------------------------------------------
# Client
# -----------------------------------------------------------------------------
from .client import PlanningCenterClient, Query


__all__ = [
    # HTTP layer
    "BaseAPIClient",
    "APIClientError",
    "APIClientConnectionError",
    "APIClientHTTPError",
    "APIClientTimeout",
    "ClientHTTPError",
    "ServerHTTPError",
    # Config
    "PlanningCenterConfig",
    "PlanningCenterConfigError",
    # Request building
    "Module",
    "UnknownModuleError",
    "MissingTableError",
    "RequestSpec",
    "UnsupportedOperatorError",
    "where_fragment",
    # Pagination
    "PageWindow",
    "initial_window",
    "next_window",
    "paginate",
    # Results
    "Page",
    "PagedResult",
    "Result",
    # Client
    "PlanningCenterClient",
    "Query",
]
