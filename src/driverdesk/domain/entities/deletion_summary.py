"""Result of deprovisioning a driver."""

from collections.abc import Iterable
from dataclasses import dataclass, field


@dataclass
class DeletionSummary:
    """Per-table outcome of a driver deprovisioning.

    Every table the cascade can touch is present in deleted_records, with a
    zero count when nothing was removed or the table was skipped.

    Attributes:
        deleted_records: Table name to number of rows removed.
        auth_user_deleted: Whether the login identity was removed.
        message: Human-readable outcome.
        failed_tables: Table name to error description for best-effort
            deletions that failed without aborting the operation.
    """

    deleted_records: dict[str, int]
    auth_user_deleted: bool = False
    message: str = ""
    failed_tables: dict[str, str] = field(default_factory=dict)

    @classmethod
    def for_tables(cls, tables: Iterable[str]) -> "DeletionSummary":
        """Create a summary with a zero count for every table."""
        return cls(deleted_records={table: 0 for table in tables})

    @property
    def partial_failure(self) -> bool:
        return bool(self.failed_tables)

    @property
    def total_deleted(self) -> int:
        return sum(self.deleted_records.values())

    def to_dict(self) -> dict:
        return {
            "success": True,
            "message": self.message,
            "deleted_records": dict(self.deleted_records),
            "auth_user_deleted": self.auth_user_deleted,
            "partial_failure": self.partial_failure,
            "failed_tables": dict(self.failed_tables),
        }
