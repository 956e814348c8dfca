class PortwalkerError(Exception):
    """Base class for everything portwalker raises on purpose."""


class ConfigurationError(PortwalkerError):
    """Startup configuration is missing or malformed. Fatal."""


class TransportError(PortwalkerError):
    """A single network exchange failed (connect, read, serialize)."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class ParseError(PortwalkerError):
    """A response body did not carry the value we expected."""

    def __init__(self, message: str, body: str = "") -> None:
        super().__init__(message)
        self.body = body
