"""Exception hierarchy shared by the progress engine and its adapters."""

from __future__ import annotations


class ProgressEngineError(Exception):
    """Base class for every error raised by the progress engine."""


class InvalidSessionStateError(ProgressEngineError, RuntimeError):
    """A session operation was invoked in a state that does not allow it."""


class InvalidInputError(ProgressEngineError, ValueError):
    """A caller supplied a value outside its documented range."""


class StoreError(ProgressEngineError):
    """Loading or saving a persisted record failed."""
