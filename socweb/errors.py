"""Exceptions raised by the socweb package."""


class SocwebError(Exception):
    """Base class for every error the package raises on purpose."""


class NetworkFileError(SocwebError):
    """A food-web or neighborhood definition is unreadable or malformed."""

    def __init__(self, path, message, line_no=None):
        self.path = path
        self.line_no = line_no
        where = f"{path}:{line_no}" if line_no is not None else f"{path}"
        super().__init__(f"{where}: {message}")


class ConfigError(SocwebError):
    """Run parameters that cannot drive a simulation."""
