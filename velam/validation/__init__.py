"""Input validation package."""

from velam.validation.validator import EntryValidator, ValidationError

__all__ = ["EntryValidator", "ValidationError"]
