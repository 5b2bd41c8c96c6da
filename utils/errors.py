"""
utils/errors.py
---------------
Exception hierarchy for DueTrack.

Validation errors subclass ``ValueError`` so callers that only care about
"bad input" can catch the builtin.
"""


class DueTrackError(Exception):
    """Base class for all application errors."""


class ValidationError(DueTrackError, ValueError):
    """Input rejected before it reaches the scheduling core."""


class InvalidFrequencyError(ValidationError):
    def __init__(self, frequency):
        super().__init__(f"Unknown frequency: {frequency!r}")
        self.frequency = frequency


class MissingDueDayError(ValidationError):
    def __init__(self, frequency: str):
        super().__init__(f"A due day is required for '{frequency}' obligations")
        self.frequency = frequency


class InvalidDueDayError(ValidationError):
    def __init__(self, due_day):
        super().__init__(f"Due day must be between 1 and 31, got {due_day!r}")
        self.due_day = due_day


class InvalidAmountError(ValidationError):
    def __init__(self, amount):
        super().__init__(f"Amount must be a positive number, got {amount!r}")
        self.amount = amount


class InvalidStatusError(ValidationError):
    def __init__(self, status):
        super().__init__(f"Unknown payment status: {status!r}")
        self.status = status


class ObligationNotFoundError(DueTrackError, LookupError):
    def __init__(self, obligation_id):
        super().__init__(f"Obligation #{obligation_id} does not exist")
        self.obligation_id = obligation_id
