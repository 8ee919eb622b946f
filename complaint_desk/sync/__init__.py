"""
Client-side synchronisation: batched joins, live per-complaint views,
optimistic appends, filtering and statistics.
"""

from complaint_desk.sync.aggregation import summarize
from complaint_desk.sync.joiner import BatchJoiner, CategoryJoiner, ProfileJoiner, student_name_joiner
from complaint_desk.sync.list_filter import filter_complaints
from complaint_desk.sync.optimistic import OptimisticAppender
from complaint_desk.sync.synced_list import SyncedList

__all__ = [
    "BatchJoiner",
    "CategoryJoiner",
    "OptimisticAppender",
    "ProfileJoiner",
    "SyncedList",
    "filter_complaints",
    "student_name_joiner",
    "summarize",
]
