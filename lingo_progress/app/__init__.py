"""Application bootstrap helpers for the progress engine."""

from .runtime import bootstrap
from .settings import AppSettings

__all__ = ["bootstrap", "AppSettings"]
