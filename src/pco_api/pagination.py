"""
Offset/per_page pagination.

The API returns at most 100 rows per response. ``paginate`` keeps asking for
the next window until a short page comes back or ``max_rows`` rows have been
collected. ``offset == 0`` after a window update means "no further pages".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Optional

from pydantic import ValidationError

from .client_base import APIClientError
from .config import DEFAULT_API_HOST
from .request_spec import MAX_PER_PAGE, RequestSpec, clamp_per_page
from .schema import Page, PagedResult

logger = logging.getLogger(__name__)

DEFAULT_MAX_ROWS = 100000


@dataclass(frozen=True)
class PageWindow:
    offset: int
    per_page: int
    max_rows: int

    def is_full(self, num_rows: int) -> bool:
        return num_rows == self.per_page

    @property
    def done(self) -> bool:
        return self.offset == 0


def initial_window(spec: RequestSpec, max_rows: Optional[int] = None) -> PageWindow:
    if max_rows is None:
        max_rows = DEFAULT_MAX_ROWS
    if max_rows < 1:
        raise ValueError(f"max_rows must be at least 1, got {max_rows}")

    per_page = clamp_per_page(spec.param("per_page") or MAX_PER_PAGE)
    offset = int(spec.param("offset") or 0)

    # A small cap fits in one page.
    if max_rows <= MAX_PER_PAGE:
        per_page = max_rows

    return PageWindow(offset=offset, per_page=per_page, max_rows=max_rows)


def next_window(window: PageWindow, num_rows: int) -> PageWindow:
    """Given the rows returned for ``window``, compute the window of the next request."""
    if window.is_full(num_rows) and window.offset + num_rows < window.max_rows:
        offset = window.offset + num_rows
        per_page = min(window.max_rows - offset, window.per_page)
        return replace(window, offset=offset, per_page=per_page)
    # Short page (end of data) or cap reached.
    return replace(window, offset=0)


def paginate(
    fetch_json: Callable[[str], Any],
    spec: RequestSpec,
    max_rows: Optional[int] = None,
    api_host: str = DEFAULT_API_HOST,
) -> PagedResult:
    """
    Fetch every page for ``spec`` and merge them.

    Any failure raises ``APIClientError``; partial results are discarded.
    """
    window = initial_window(spec, max_rows)
    results = PagedResult()

    while True:
        spec = spec.per_page(window.per_page).offset(window.offset)
        url = spec.build_url(api_host)

        payload = fetch_json(url)
        try:
            page = Page.model_validate(payload)
        except ValidationError as e:
            raise APIClientError(f"Unexpected response shape from {url}") from e

        results.extend(page)
        logger.debug(
            f"Page {results.pages}: {page.num_rows} rows "
            f"(offset={window.offset}, per_page={window.per_page}, total={len(results)})"
        )

        window = next_window(window, page.num_rows)
        if window.done:
            break

    return results
