from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, TypeVar, Union

from pydantic import ValidationError

from .client_base import APIClientError, BaseAPIClient
from .config import PlanningCenterConfig
from .modules import Module
from .pagination import paginate
from .request_spec import Identifier, RequestSpec
from .result import Result
from .schema import Page, PagedResult


logger = logging.getLogger(__name__)

T = TypeVar("T")


class PlanningCenterClient(BaseAPIClient):
    """
    Client for the Planning Center Online REST API.

    Credentials come from PCO_APPLICATION_ID / PCO_SECRET (see ``config``)
    and are sent as one HTTP Basic ``Authorization`` header.

    Usage:
        client = PlanningCenterClient()
        result = (
            client.module("people")
            .table("people")
            .where("email", "=", "x@y.com")
            .includes("emails")
            .get()
        )
        if result.ok:
            people = result.value.data
        else:
            print(client.error_message())
    """

    def __init__(self, config: Optional[PlanningCenterConfig] = None) -> None:
        self.config = config or PlanningCenterConfig.from_env()
        self.last_error: Any = None

        super().__init__(
            # Never log the authorization value; just attach it to headers.
            default_headers={"Authorization": self.config.authorization},
            timeout=self.config.timeout_sec,
            retries=self.config.max_retries,
        )
        logger.info(f"PlanningCenterClient initialized for {self.config.api_host}.")

    # -------------------------------------------------
    # Builder entry points
    # -------------------------------------------------
    def module(self, module: Union[Module, str]) -> "Query":
        return Query(self, RequestSpec(module=Module.from_name(module)))

    def people(self) -> "Query":
        return self.module(Module.PEOPLE)

    def services(self) -> "Query":
        return self.module(Module.SERVICES)

    # -------------------------------------------------
    # Execution
    # -------------------------------------------------
    def _run(self, description: str, operation: Callable[[], T]) -> Result[T]:
        self.last_error = None
        try:
            value = operation()
        except APIClientError as e:
            logger.warning(f"{description} failed: {e}")
            self.last_error = e.body
            return Result.failure(e)
        return Result.success(value)

    def fetch(self, spec: RequestSpec, max_rows: Optional[int] = None) -> Result[PagedResult]:
        """Run a paginated GET for ``spec``; all pages or nothing."""
        self.last_error = None
        url = spec.build_url(self.config.api_host)
        return self._run(
            f"GET {url}",
            lambda: paginate(self.get_json, spec, max_rows, self.config.api_host),
        )

    def send(self, verb: str, spec: RequestSpec) -> Result[Any]:
        """Run a write (POST/PUT/PATCH/DELETE) for ``spec`` with its encoded body."""
        self.last_error = None
        url = spec.build_url(self.config.api_host)
        return self._run(
            f"{verb} {url}",
            lambda: self.request_json(verb, url, body=spec.body),
        )

    def raw(self, endpoint: str) -> Result[Any]:
        """GET a fully formed URL and return the whole decoded document."""
        return self._run(f"GET {endpoint}", lambda: self.get_json(endpoint))

    def url(self, endpoint: str) -> Result[List[Dict[str, Any]]]:
        """GET a fully formed URL and return its ``data`` records."""

        def _data() -> List[Dict[str, Any]]:
            payload = self.get_json(endpoint)
            try:
                return Page.model_validate(payload).data
            except ValidationError as e:
                raise APIClientError(f"Unexpected response shape from {endpoint}") from e

        return self._run(f"GET {endpoint}", _data)

    def error_message(self) -> Any:
        """Error body of the last failed operation (decoded JSON when possible)."""
        return self.last_error


class Query:
    """
    A ``RequestSpec`` bound to a client. Setters return new queries, so a
    query can be kept and reused as a template.
    """

    def __init__(self, client: PlanningCenterClient, spec: RequestSpec) -> None:
        self.client = client
        self.spec = spec

    def _with(self, spec: RequestSpec) -> "Query":
        return Query(self.client, spec)

    def __repr__(self) -> str:
        return f"Query({self.spec!r})"

    # ------------------------------
    # Setters
    # ------------------------------
    def table(self, table: str) -> "Query":
        return self._with(self.spec.table(table))

    def id(self, resource_id: Identifier) -> "Query":
        return self._with(self.spec.id(resource_id))

    def association(self, association: str) -> "Query":
        return self._with(self.spec.association(association))

    def id2(self, resource_id: Identifier) -> "Query":
        return self._with(self.spec.id2(resource_id))

    def association2(self, association: str) -> "Query":
        return self._with(self.spec.association2(association))

    def includes(self, includes: Union[str, Iterable[str]]) -> "Query":
        return self._with(self.spec.includes(includes))

    def where(self, field: str, operator: str, value: Any) -> "Query":
        return self._with(self.spec.where(field, operator, value))

    def offset(self, next_record: int) -> "Query":
        return self._with(self.spec.offset(next_record))

    def per_page(self, rows: int) -> "Query":
        return self._with(self.spec.per_page(rows))

    def order(self, order: str) -> "Query":
        return self._with(self.spec.order(order))

    def data(self, payload: Any) -> "Query":
        return self._with(self.spec.data(payload))

    def parameters(self, parameters: Mapping[str, Any]) -> "Query":
        return self._with(self.spec.parameters(parameters))

    # ------------------------------
    # Terminal operations
    # ------------------------------
    def build_url(self) -> str:
        return self.spec.build_url(self.client.config.api_host)

    def get(self, max_rows: Optional[int] = None) -> Result[PagedResult]:
        return self.client.fetch(self.spec, max_rows)

    def first(self) -> Result[Optional[Dict[str, Any]]]:
        result = self.get(max_rows=1)
        if not result.ok:
            return Result.failure(result.error)
        return Result.success(result.value.first())

    def post(self) -> Result[Any]:
        return self.client.send("POST", self.spec)

    def put(self) -> Result[Any]:
        return self.client.send("PUT", self.spec)

    def patch(self) -> Result[Any]:
        return self.client.send("PATCH", self.spec)

    def delete(self) -> Result[Any]:
        return self.client.send("DELETE", self.spec)
