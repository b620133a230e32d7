"""Error types raised by the offline client."""


class StorageUnavailable(RuntimeError):
    """The local durable store cannot be opened or written."""


class NetworkFailure(RuntimeError):
    """The remote server could not be reached."""


class SyncRecordFailure(RuntimeError):
    """A single queued record could not be delivered during a drain."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"Failed to sync {key}: {reason}")
        self.key = key
        self.reason = reason


class PayloadParseFailure(ValueError):
    """A push payload could not be parsed into a notification."""


class SubmissionRejected(RuntimeError):
    """The server refused an online session submission."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"Session submission rejected with status {status_code}")
        self.status_code = status_code


class PrecacheError(RuntimeError):
    """The app shell could not be precached."""
