"""Activity logging package."""

from offering_ledger.activity.logger import ActivityLogger

__all__ = ["ActivityLogger"]
