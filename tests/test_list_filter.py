import pytest
from pydantic import ValidationError

from complaint_desk.schemas.complaint import ComplaintFilterParams
from complaint_desk.sync.list_filter import filter_complaints

COMPLAINTS = [
    {"id": "1", "title": "Broken heater", "status": "submitted", "priority": "high"},
    {"id": "2", "title": "Wifi outage in library", "status": "resolved", "priority": "medium"},
    {"id": "3", "title": "Heater noise", "status": "in_progress", "priority": "low"},
    {"id": "4", "title": "Mess food quality", "status": "resolved", "priority": "high"},
    {"id": "5", "title": "Leaking tap", "status": "closed", "priority": "high"},
]


def ids(items):
    return [item["id"] for item in items]


def test_status_resolved_keeps_only_resolved():
    result = filter_complaints(COMPLAINTS, ComplaintFilterParams(status="resolved"))
    assert ids(result) == ["2", "4"]


def test_search_is_case_insensitive_title_substring():
    result = filter_complaints(COMPLAINTS, ComplaintFilterParams(search="HEATER"))
    assert ids(result) == ["1", "3"]


@pytest.mark.parametrize("value", ["all", "ALL", None, ""])
def test_all_means_no_constraint(value):
    params = ComplaintFilterParams(status=value, priority=value)
    assert filter_complaints(COMPLAINTS, params) == COMPLAINTS


def test_no_params_returns_everything_in_order():
    assert filter_complaints(COMPLAINTS) == COMPLAINTS
    assert filter_complaints(COMPLAINTS, None) == COMPLAINTS


def test_filter_is_idempotent():
    params = ComplaintFilterParams(priority="high", search="e")
    once = filter_complaints(COMPLAINTS, params)
    assert filter_complaints(once, params) == once


def test_sequential_filters_equal_their_conjunction():
    by_status = ComplaintFilterParams(status="resolved")
    by_priority = ComplaintFilterParams(priority="high")

    chained = filter_complaints(filter_complaints(COMPLAINTS, by_status), by_priority)

    assert chained == filter_complaints(COMPLAINTS, by_status, by_priority)
    assert ids(chained) == ["4"]


def test_works_on_objects():
    class Row:
        def __init__(self, **fields):
            self.__dict__.update(fields)

    rows = [Row(**c) for c in COMPLAINTS]
    result = filter_complaints(rows, ComplaintFilterParams(status="closed"))
    assert [r.id for r in result] == ["5"]


def test_unknown_status_is_rejected():
    with pytest.raises(ValidationError):
        ComplaintFilterParams(status="archived")
