"""Domain-specific exceptions"""

from typing import Sequence


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ValidationError(DomainException):
    """Input rejected before any write was issued"""

    pass


class NotFoundError(DomainException):
    """Referenced record does not exist for this owner"""

    pass


class RecordStoreError(DomainException):
    """Record store returned an error or is unavailable"""

    pass


class PartialWriteError(RecordStoreError):
    """A multi-step write failed after some of its steps were stored"""

    def __init__(self, message: str, completed_steps: Sequence[str]):
        super().__init__(message)
        self.completed_steps = list(completed_steps)
