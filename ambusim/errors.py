"""Exceptions raised by the tracking engine.

Lookups by unknown id are not errors: they return ``None``.
"""


class TrackingError(Exception):
    """Base class for tracking engine errors."""


class NoCapacity(TrackingError):
    """Dispatch was requested while no unit is ``available``.

    Recoverable: the caller may retry later. The engine never retries on its
    own and nothing was mutated.
    """

    def __init__(self, patient_id: str):
        self.patient_id = patient_id
        super().__init__(f"No units available to dispatch for patient {patient_id!r}")


class InvalidTransition(TrackingError):
    """A lifecycle or vitals change was attempted from the wrong state."""

    def __init__(self, msg: str, *, unit_id: str | None = None):
        self.unit_id = unit_id
        super().__init__(msg)
