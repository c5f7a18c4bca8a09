from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


def _coerce_records(v: Any) -> List[Dict[str, Any]]:
    if v is None:
        return []
    # A single-resource GET (/people/123) answers with one object.
    if isinstance(v, dict):
        return [v]
    if isinstance(v, list):
        return [x for x in v if isinstance(x, dict)]
    return []


class Page(BaseModel):
    """
    One decoded JSON:API document as returned by Planning Center.

    Records are kept as plain dicts; no per-resource modelling.
    """

    data: List[Dict[str, Any]] = Field(default_factory=list, description="Primary records")
    included: List[Dict[str, Any]] = Field(
        default_factory=list, description="Side-loaded related records"
    )
    meta: Dict[str, Any] = Field(default_factory=dict)
    links: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("data", "included", mode="before")
    @classmethod
    def validate_records(cls, v):
        return _coerce_records(v)

    @field_validator("meta", "links", mode="before")
    @classmethod
    def validate_dict(cls, v):
        return v if isinstance(v, dict) else {}

    @property
    def num_rows(self) -> int:
        return len(self.data)


class PagedResult(BaseModel):
    """
    Accumulator for a paginated fetch. ``data`` and ``included`` grow one page
    at a time, in page order and in within-page order.
    """

    data: List[Dict[str, Any]] = Field(default_factory=list)
    included: List[Dict[str, Any]] = Field(default_factory=list)
    meta: Dict[str, Any] = Field(default_factory=dict, description="meta of the last page")
    pages: int = 0

    def extend(self, page: Page) -> None:
        self.data.extend(page.data)
        self.included.extend(page.included)
        self.meta = page.meta
        self.pages += 1

    def first(self) -> Optional[Dict[str, Any]]:
        return self.data[0] if self.data else None

    def __len__(self) -> int:
        return len(self.data)
