"""Typed errors raised by the tracking core."""


class TimetrackError(Exception):
    """Base class for all timetrack errors."""


class StoreUnavailable(TimetrackError):
    """The database could not be reached or the call timed out."""


class UniquenessConflict(TimetrackError):
    """An insert lost a race against a concurrent insert of the same key.

    Only raised inside the resolver; callers never see it.
    """


class InvalidState(TimetrackError):
    """The caller asked for something the current data does not allow."""


class AlreadyActive(InvalidState):
    """The member already has a running timer."""


class DataIntegrityViolation(TimetrackError):
    """More rows matched than the uniqueness rules permit."""
