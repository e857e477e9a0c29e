"""Domain-specific exceptions — framework-independent."""


class NetworkError(Exception):
    """Raised when a request cannot reach its destination (or times out)."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Network request to '{url}' failed: {reason}")


class UnknownActionError(Exception):
    """Raised when an offline action name is not part of the action set."""

    def __init__(self, action: str):
        self.action = action
        super().__init__(f"Unknown offline action '{action}'")


class UnknownMirrorError(Exception):
    """Raised when a local mirror name does not exist."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Local mirror '{name}' not found")


class ReplayError(Exception):
    """Raised when the origin rejects a replayed offline action.

    Carries the origin's status code so the queue can log it alongside
    the retry count.
    """

    def __init__(self, action: str, status_code: int, message: str):
        self.action = action
        self.status_code = status_code
        self.message = message
        super().__init__(f"[{action}] {status_code}: {message}")
