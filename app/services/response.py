from __future__ import annotations

import math
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from app.services.search_contract import FilterSpec


def total_pages(total_elements: int, size: int) -> int:
    if total_elements <= 0:
        return 0
    return math.ceil(total_elements / size)


def paged_response(items: Sequence[Any], spec: FilterSpec, total_elements: int) -> dict:
    pages = total_pages(total_elements, spec.size)
    return {
        "content": list(items),
        "page": spec.page,
        "size": spec.size,
        "total_elements": total_elements,
        "total_pages": pages,
        "sort_by": spec.sort_by,
        "sort_direction": spec.sort_direction.value,
        "first": spec.page == 0,
        "last": spec.page >= pages - 1,
        "has_content": bool(items),
    }
