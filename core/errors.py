"""
Error taxonomy shared by the booking rules, the store and the API layer.
"""
from datetime import time
from typing import Any, Dict, List, Optional


class FrontDeskError(Exception):
    """Base class for every error the dashboard core raises."""


class DuplicateSlotError(FrontDeskError):
    """Raised when a slot matches an existing active slot on the same weekday."""

    def __init__(self, weekday: int, start_time: time, end_time: time):
        self.weekday = weekday
        self.start_time = start_time
        self.end_time = end_time
        super().__init__(
            f"A time slot {start_time.strftime('%H:%M')}-{end_time.strftime('%H:%M')} "
            f"already exists for weekday {weekday}"
        )


class SettingsValidationError(FrontDeskError):
    """Raised when a settings payload cannot be coerced into a valid shape."""

    def __init__(self, issues: List[Dict[str, str]]):
        self.issues = issues
        summary = "; ".join(f"{i['field']}: {i['message']}" for i in issues)
        super().__init__(f"Invalid settings: {summary}")

    @classmethod
    def single(cls, field: str, message: str) -> "SettingsValidationError":
        return cls([{"field": field, "message": message}])


class AssignmentConflictError(FrontDeskError):
    """Raised when a table is no longer eligible at assignment time."""

    def __init__(self, table_id: Any, entry_id: Any, reason: str = "table is no longer available"):
        self.table_id = table_id
        self.entry_id = entry_id
        self.reason = reason
        super().__init__(f"Cannot assign table {table_id} to {entry_id}: {reason}")


class CollaboratorUnavailableError(FrontDeskError):
    """Raised when the store (or another collaborator) fails; safe to retry."""

    def __init__(self, operation: str, detail: Optional[str] = None):
        self.operation = operation
        self.detail = detail
        message = f"{operation} failed"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class RecordNotFoundError(FrontDeskError):
    """Raised when a store lookup finds nothing."""

    def __init__(self, kind: str, record_id: Any):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} {record_id} not found")
