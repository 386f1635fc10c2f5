"""Service layer wiring the pure engine to its stores."""

from .progress_service import ProgressService, ProgressStore, ReviewItemStore, ReviewOutcome

__all__ = ["ProgressService", "ProgressStore", "ReviewItemStore", "ReviewOutcome"]
