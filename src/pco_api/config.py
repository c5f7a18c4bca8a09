"""
Runtime configuration for the Planning Center client.

Everything is read from the environment once, when the client is built:

    PCO_APPLICATION_ID  - Personal Access Token, application id (required)
    PCO_SECRET          - Personal Access Token, secret (required)
    PCO_API_HOST        - API host (default: https://api.planningcenteronline.com)
    PCO_TIMEOUT_SEC     - Request timeout in seconds (default: 15)
    PCO_MAX_RETRIES     - Retries for idempotent requests (default: 3)
"""

from __future__ import annotations

import base64
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

DEFAULT_API_HOST = "https://api.planningcenteronline.com"
DEFAULT_TIMEOUT_SEC = 15.0
DEFAULT_MAX_RETRIES = 3


class PlanningCenterConfigError(RuntimeError):
    """Raised when required environment configuration is missing or invalid."""


def basic_auth_header(application_id: str, secret: str) -> str:
    token = base64.b64encode(f"{application_id}:{secret}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


@dataclass(frozen=True)
class PlanningCenterConfig:
    application_id: str
    secret: str = field(repr=False)
    api_host: str = DEFAULT_API_HOST
    timeout_sec: float = DEFAULT_TIMEOUT_SEC
    max_retries: int = DEFAULT_MAX_RETRIES

    @property
    def authorization(self) -> str:
        return basic_auth_header(self.application_id, self.secret)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "PlanningCenterConfig":
        env = os.environ if environ is None else environ

        application_id = (env.get("PCO_APPLICATION_ID") or "").strip()
        secret = (env.get("PCO_SECRET") or "").strip()
        if not application_id or not secret:
            raise PlanningCenterConfigError(
                "PCO_APPLICATION_ID and PCO_SECRET must both be set."
            )

        api_host = (env.get("PCO_API_HOST") or DEFAULT_API_HOST).strip().rstrip("/")

        timeout_raw = (env.get("PCO_TIMEOUT_SEC") or str(DEFAULT_TIMEOUT_SEC)).strip()
        try:
            timeout_sec = float(timeout_raw)
        except ValueError as e:
            raise PlanningCenterConfigError(
                f"PCO_TIMEOUT_SEC must be a number, got '{timeout_raw}'."
            ) from e
        if timeout_sec <= 0:
            raise PlanningCenterConfigError(
                f"PCO_TIMEOUT_SEC must be positive, got '{timeout_raw}'."
            )

        retries_raw = (env.get("PCO_MAX_RETRIES") or str(DEFAULT_MAX_RETRIES)).strip()
        try:
            max_retries = int(retries_raw)
        except ValueError as e:
            raise PlanningCenterConfigError(
                f"PCO_MAX_RETRIES must be an integer, got '{retries_raw}'."
            ) from e
        if max_retries < 0:
            raise PlanningCenterConfigError(
                f"PCO_MAX_RETRIES must not be negative, got '{retries_raw}'."
            )

        return cls(
            application_id=application_id,
            secret=secret,
            api_host=api_host,
            timeout_sec=timeout_sec,
            max_retries=max_retries,
        )
