"""Error taxonomy shared by the engine, the CLI and the API."""


class FreelanceTrackerError(Exception):
    """Base class for all application errors."""

    pass


class ValidationError(FreelanceTrackerError):
    """A caller-side precondition was violated.

    Raised before any write reaches the store, so the operation has no
    partial effect.
    """

    pass


class PersistenceError(FreelanceTrackerError):
    """The record store failed to read or write."""

    pass


class RecordNotFoundError(PersistenceError):
    """A record addressed by id does not exist in the store."""

    def __init__(self, collection: str, record_id: str):
        super().__init__(f"{collection} record not found: {record_id}")
        self.collection = collection
        self.record_id = record_id
