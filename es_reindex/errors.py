# errors.py


class MigrationError(Exception):
    """
    A migration run was aborted.

    Carries the index pair, the number of documents confirmed written in the
    failing pass, and the underlying transport error (also chained as
    ``__cause__`` when raised from the orchestrator).
    """

    def __init__(self, message, source_index=None, destination_index=None,
                 completed=0, cause=None):
        super().__init__(message)
        self.message = message
        self.source_index = source_index
        self.destination_index = destination_index
        self.completed = completed
        self.cause = cause

    @classmethod
    def from_failure(cls, failure):
        return cls(
            failure.message,
            source_index=failure.source_index,
            destination_index=failure.destination_index,
            completed=failure.completed,
            cause=failure.cause,
        )
