"""Errors raised by the allocation engine and its storage contracts."""

from __future__ import annotations


class AllocationError(Exception):
    """Base exception for case allocation failures."""


class NotFoundError(AllocationError):
    """Raised when the user being allocated to does not exist."""


class ConflictError(AllocationError):
    """Raised when a concurrent write broke (user, case) uniqueness at commit time."""


class PersistenceError(AllocationError):
    """Raised when the underlying store fails; partial writes are rolled back first."""
