"""Activity persistence collaborators.

Exports the store interface, the row helpers and the two implementations.
"""

from .base import (
    ActivityFilters,
    ActivityStore,
    NearFilter,
    build_activity_record,
    stored_activity_from_row,
    visit_record_from_row,
)
from .memory import InMemoryActivityStore
from .supabase import SupabaseActivityStore

__all__ = [
    "ActivityFilters",
    "ActivityStore",
    "InMemoryActivityStore",
    "NearFilter",
    "SupabaseActivityStore",
    "build_activity_record",
    "stored_activity_from_row",
    "visit_record_from_row",
]
