"""Error taxonomy shared by the store, the API and the client."""


class TrackerError(Exception):
    """Base class for tracker failures."""


class ValidationError(TrackerError):
    """A required field is missing or an enumerated value is unknown."""


class NotFoundError(TrackerError):
    """The targeted record id does not exist."""

    def __init__(self, kind: str, record_id: str):
        super().__init__(f"{kind} not found")
        self.kind = kind
        self.record_id = record_id


class StoreUnavailableError(TrackerError):
    """The record store could not be opened or queried."""
