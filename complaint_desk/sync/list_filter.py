"""
In-memory filtering of an already-loaded complaint list.
"""

from typing import Any, Iterable, List, Optional, TypeVar

from complaint_desk.schemas.complaint.complaint_filters import ComplaintFilterParams

T = TypeVar("T")


def _field(item: Any, name: str) -> Any:
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


def _matches(item: Any, params: ComplaintFilterParams) -> bool:
    if params.search is not None:
        title = _field(item, "title") or ""
        if params.search.lower() not in title.lower():
            return False
    if params.status is not None and _field(item, "status") != params.status:
        return False
    if params.priority is not None and _field(item, "priority") != params.priority:
        return False
    return True


def filter_complaints(
    complaints: Iterable[T],
    *params: Optional[ComplaintFilterParams],
) -> List[T]:
    """
    Keep the complaints matching every given parameter set, in order.

    Passing several parameter sets applies their conjunction, so
    filter_complaints(filter_complaints(items, a), b) equals
    filter_complaints(items, a, b).
    """
    active = [p for p in params if p is not None and not p.is_empty]
    return [item for item in complaints if all(_matches(item, p) for p in active)]
