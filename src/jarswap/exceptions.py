"""
Swap exceptions.

Every failure the engine can report derives from SwapError, so the pipeline
runner and the CLI only need to catch one base class (plus OSError).
"""


class SwapError(Exception):
    """Base class for all patch/restore failures."""
    pass


class DestinationError(SwapError, ValueError):
    """Raised when a destination specifier cannot be resolved."""
    pass


class MissingPathError(DestinationError):
    """Destination specifier has no path component (e.g. "user@host:")."""
    pass


class MissingHostError(DestinationError):
    """Destination specifier names a user but no host (e.g. "user@:/opt")."""
    pass


class NoMatchingArtifactError(SwapError):
    """
    Raised when an accepted source file has no compiled artifact in the source jar.

    Aborts the whole run: a patch missing one of the requested classes would
    be silently incomplete.
    """

    def __init__(self, source: str, pattern: str):
        super().__init__(f"No compiled artifact matches {pattern} (from {source})")
        self.source = source
        self.pattern = pattern


class StagingError(SwapError):
    """Raised when local preparation of the overlay fails."""
    pass


class ArchiveError(SwapError):
    """Raised when an archive cannot be read or written."""
    pass


class TransportError(SwapError):
    """
    Raised when the overlay cannot be delivered or the destination cannot be reached.

    Examples:
        - scp failed (no route, permission denied on target directory)
        - ssh connection refused (exit status 255)
        - local target directory does not exist
    """
    pass


class RemoteMergeError(SwapError):
    """Raised when any step of the destination-side merge fails."""
    pass


class ConcurrentSwapError(RemoteMergeError):
    """Another run currently holds the lock for the same destination jar."""
    pass


class RestoreError(SwapError):
    """Raised when a pristine backup exists but could not be put back."""
    pass


class ConfigError(SwapError):
    """Raised when the configuration file is unreadable or invalid."""
    pass
