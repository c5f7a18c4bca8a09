from __future__ import annotations

from enum import Enum
from typing import Union

from .config import DEFAULT_API_HOST

API_VERSION = "v2"


class UnknownModuleError(ValueError):
    """Raised for a module name that has no known base URL."""


class Module(str, Enum):
    """Top-level API areas, each with its own base URL."""

    PEOPLE = "people"
    SERVICES = "services"

    @classmethod
    def from_name(cls, name: Union["Module", str]) -> "Module":
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            known = ", ".join(m.value for m in cls)
            raise UnknownModuleError(
                f"Unknown module '{name}'; expected one of: {known}"
            ) from None

    def base_url(self, api_host: str = DEFAULT_API_HOST) -> str:
        return f"{api_host.rstrip('/')}/{self.value}/{API_VERSION}"
