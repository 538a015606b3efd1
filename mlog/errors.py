"""Exception types raised by mlog."""


class MlogError(Exception):
    """Base class for all mlog errors."""


class ConfigError(MlogError, ValueError):
    """Invalid or unreadable configuration. Fatal at startup."""


class CaptureError(MlogError):
    """The child could not be spawned, or a capture worker failed unreported."""

    def __init__(self, message: str, exit_code: int | None = None,
                 errors: dict[str, BaseException] | None = None):
        super().__init__(message)
        self.exit_code = exit_code
        self.errors = dict(errors or {})
