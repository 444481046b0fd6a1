"""
Pagination computation for aggregate queries.

Reconciles the two addressing modes (page number and raw offset), derives
the page metadata from the total count, and assembles the result envelope
with the caller's labels applied.
"""

import logging
from enum import Enum
from typing import Any, Dict, List, Optional

from models.labels import Label, LabelSet
from models.result import PaginationMeta, RawQueryResult
from schemas.common import FrozenValue
from schemas.paginate import PaginationOptions
from utils.option_layers import resolve_call_labels

logger = logging.getLogger(__name__)


class AddressingMode(str, Enum):
    """How the caller addressed the requested window."""
    OFFSET = "offset"
    PAGE = "page"
    DEFAULT = "default"


class PageWindow(FrozenValue):
    """Resolved window for one call.

    ``limit`` of 0 means unbounded (legacy zero fallback only).
    """

    mode: AddressingMode
    page: int
    offset: int
    skip: int
    limit: int
    paginate: bool = True


def resolve_window(options: PaginationOptions) -> PageWindow:
    """
    Select the addressing mode and compute skip for the data branch.

    First match wins:
    1. ``offset`` supplied -> offset mode, skip = offset
    2. ``page`` supplied -> page mode, skip = (page - 1) * limit
    3. neither -> default mode, page 1, skip 0

    Args:
        options: Coerced pagination options

    Returns:
        PageWindow describing the requested slice
    """
    limit = options.limit

    if options.has_offset:
        offset = options.offset
        mode = AddressingMode.OFFSET
        page = derive_page_from_offset(offset, limit)
        skip = offset
    elif options.has_page:
        page = options.page
        mode = AddressingMode.PAGE
        skip = (page - 1) * limit
        offset = skip
    else:
        mode = AddressingMode.DEFAULT
        page = 1
        offset = 0
        skip = 0

    window = PageWindow(
        mode=mode,
        page=page,
        offset=offset,
        skip=skip,
        limit=limit,
        paginate=options.pagination,
    )
    logger.debug("Resolved pagination window: %s", window)
    return window


def _ceil_div(numerator: int, denominator: int) -> int:
    return -(-numerator // denominator)


def derive_page_from_offset(offset: int, limit: int) -> int:
    """Page containing row ``offset``; 1 when the limit is unbounded."""
    if limit <= 0:
        return 1
    return _ceil_div(offset + 1, limit)


def compute_total_pages(count: int, limit: int) -> Optional[int]:
    """
    Number of pages for ``count`` rows of ``limit`` each.

    An empty result still has one page. An unbounded (0) limit has no
    meaningful page count and yields None.

    Args:
        count: Total matching rows
        limit: Page size

    Returns:
        max(1, ceil(count / limit)), or None when limit is 0
    """
    if limit <= 0:
        return None
    return max(1, _ceil_div(count, limit))


def derive_meta(count: int, window: PageWindow) -> PaginationMeta:
    """
    Derive pagination metadata from the total count and the resolved window.

    With pagination disabled the whole result is one page: limit becomes
    the count, page is 1 and the call is treated as page-addressed.

    Args:
        count: Total matching rows from the count branch
        window: Window resolved for this call

    Returns:
        PaginationMeta keyed by logical field name
    """
    if not window.paginate:
        limit = count
        page = 1
        total_pages = 1
        offset = None
        paging_counter = 1
    else:
        limit = window.limit
        page = window.page
        total_pages = compute_total_pages(count, limit)
        if window.mode is AddressingMode.OFFSET:
            offset = window.offset
            paging_counter = window.offset + 1
        else:
            offset = None
            paging_counter = (page - 1) * limit + 1

    has_prev_page = page > 1
    has_next_page = total_pages is not None and page < total_pages

    return PaginationMeta(
        total_docs=count,
        limit=limit,
        page=page,
        total_pages=total_pages,
        offset=offset,
        paging_counter=paging_counter,
        has_prev_page=has_prev_page,
        has_next_page=has_next_page,
        prev_page=page - 1 if has_prev_page else None,
        next_page=page + 1 if has_next_page else None,
    )


def assemble_envelope(docs: List[Any], meta: PaginationMeta, labels: LabelSet) -> Dict[str, Any]:
    """
    Build the result envelope.

    With a meta label the metadata nests under it next to the documents;
    otherwise every field sits at the top level.

    Args:
        docs: Document window from the data branch
        meta: Derived metadata
        labels: Resolved output key names

    Returns:
        Envelope dict
    """
    rendered_meta = meta.to_labelled(labels)
    docs_key = labels.key(Label.DOCS)

    if labels.is_nested:
        return {docs_key: docs, labels.meta_key: rendered_meta}

    return {docs_key: docs, **rendered_meta}


def compute_envelope(
    raw_result: RawQueryResult,
    options: PaginationOptions,
    labels: Optional[LabelSet] = None,
) -> Dict[str, Any]:
    """
    Turn a raw query result into the paginated envelope.

    Pure function of its inputs; never raises for any coerced options.

    Args:
        raw_result: Documents and total count from the executor
        options: Resolved pagination options
        labels: Output key names (default: from ``options.custom_labels``)

    Returns:
        Envelope dict with documents under the docs label and metadata
        either flat or nested under the meta label
    """
    if labels is None:
        labels = resolve_call_labels(options)

    window = resolve_window(options)
    meta = derive_meta(raw_result.count, window)
    return assemble_envelope(list(raw_result.docs), meta, labels)
