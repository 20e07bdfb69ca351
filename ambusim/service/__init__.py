"""Caller-facing services over the fleet registry."""

from .dispatch import DispatchService
from .query import QueryService

__all__ = ["DispatchService", "QueryService"]
