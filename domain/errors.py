"""Errors raised while restoring or saving a dependency cache."""


class CacheRestoreError(Exception):
    """Base class for all fatal cache restore/save failures."""


class UnsupportedPackageManagerError(CacheRestoreError):
    def __init__(self, package_manager: str):
        self.package_manager = package_manager
        super().__init__(f"Caching for '{package_manager}' is not supported")


class PathResolutionError(CacheRestoreError):
    """The package manager's cache directory could not be determined."""


class HashComputationError(CacheRestoreError):
    """A matched lock file could not be read."""


class RemoteLookupError(CacheRestoreError):
    """The cache store failed at the transport level (not a cache miss)."""


class CommandError(Exception):
    """A shell command exited non-zero or could not be started."""

    def __init__(self, command: str, message: str, exit_code: int = -1):
        self.command = command
        self.exit_code = exit_code
        super().__init__(message)
