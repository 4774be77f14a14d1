"""
LocalTransport - Destination on the same host.

Strategy: copy overlay into the target directory → merge in-process
"""

from pathlib import Path

from jarswap.core.protocols import FileSystemService, ArchiveCodec, Logger
from jarswap.deploy.base import Destination, RemoteRequest, TransportResult
from jarswap.exceptions import TransportError


class LocalTransport:
    """Plain filesystem copy plus in-process execution of the request."""

    def __init__(self, filesystem: FileSystemService, codec: ArchiveCodec, logger: Logger):
        self.fs = filesystem
        self.codec = codec
        self.log = logger

    def deliver(self, overlay_archive: Path, destination: Destination) -> None:
        target_dir = Path(destination.path)
        if not self.fs.is_dir(target_dir):
            raise TransportError(f"Target directory does not exist: {target_dir}")

        target = target_dir / overlay_archive.name
        self.log.debug(f"Executing: cp {overlay_archive} {target}")
        try:
            self.fs.copy_file(overlay_archive, target)
        except OSError as e:
            raise TransportError(f"Could not copy {overlay_archive} to {target_dir}: {e}") from e

    def execute(self, request: RemoteRequest, destination: Destination) -> TransportResult:
        # Lazy import to avoid circular dependencies
        from jarswap.swap.destination import apply_request

        result = apply_request(request, self.fs, self.codec, self.log)
        return TransportResult(success=result.success, output=getattr(result, 'message', ''))
