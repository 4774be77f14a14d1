"""Patch and restore orchestration with dependency injection.

A patch run is local staging followed by two fail-fast stages: delivery of
the overlay and the destination-side merge. Local staging completes before
the destination is contacted, and the merge completes before a result is
reported. A restore run is a single destination-side request.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Union

from jarswap.core.protocols import FileSystemService, ArchiveCodec, Logger
from jarswap.deploy.base import Destination, RemoteRequest, RequestAction, Transport
from jarswap.exceptions import SwapError
from jarswap.swap.pipeline import Pipeline, PipelineResult
from jarswap.swap.stager import LocalStager, StagingResult
from jarswap.utils.config import SwapConfig


@dataclass
class SwapOutcome:
    """
    Result of one invocation.

    Attributes:
        success: Drives the final [SUCCESS]/[FAILED] line
        pipeline: Stage results (None for restore)
        staging: Local staging details (None for restore)
        error: First error encountered, if any
    """
    success: bool
    pipeline: Optional[PipelineResult] = None
    staging: Optional[StagingResult] = None
    error: Optional[BaseException] = None


class JarSwapper:
    """Orchestrates patch and restore runs against one destination.

    Args:
        destination: Resolved destination
        transport: Transport serving that destination
        filesystem: Filesystem operations abstraction
        codec: Archive codec
        config: Resolved configuration
        logger: Logging abstraction
    """

    def __init__(
        self,
        destination: Destination,
        transport: Transport,
        filesystem: FileSystemService,
        codec: ArchiveCodec,
        config: SwapConfig,
        logger: Logger,
        verbose: bool = False
    ):
        self.destination = destination
        self.transport = transport
        self.fs = filesystem
        self.codec = codec
        self.config = config
        self.log = logger
        self.verbose = verbose
        self.stager = LocalStager(
            filesystem,
            codec,
            logger,
            source_extension=config.source_extension,
            artifact_extension=config.artifact_extension,
            working_dir_name=config.local_working_dir
        )

    def _request(self, action: RequestAction, archive_name: str) -> RemoteRequest:
        return RemoteRequest(
            action=action,
            target_dir=self.destination.path,
            archive_name=archive_name,
            working_dir_name=self.config.remote_working_dir,
            verbose=self.verbose
        )

    def describe(self, source_jar: Union[str, Path]) -> None:
        """Echo every derived name and path (verbose mode)."""
        ws = self.stager.workspace(source_jar)
        stem = ws.stem
        for label, value in [
            ("transport", f"{type(self.transport).__name__} -> {self.destination}"),
            ("jarPath", ws.source_jar),
            ("jarName", ws.archive_name),
            ("jarNameWithoutExt", stem),
            ("workingDir", ws.working_dir),
            ("unpackedJarPath", ws.pristine_dir),
            ("swapDir", ws.overlay_dir),
            ("swapArchive", ws.overlay_archive),
            ("targetWorkingDir", f"{self.destination.path}/{self.config.remote_working_dir}"),
            ("targetBackupName", f"{stem}.orig.jar"),
            ("targetSwappedDir", f"{stem}.swapped"),
        ]:
            self.log.debug(f"{label:<20} = {value}")

    def patch(self, source_jar: Union[str, Path], identifiers: Iterable[str]) -> SwapOutcome:
        """
        Swap the classes of the given source files into the destination jar.

        Local staging runs to completion first; the destination is only
        contacted once the overlay archive exists. A staging failure has
        already been reported by the stager and is returned as is.

        Args:
            source_jar: Jar holding the freshly compiled classes
            identifiers: Source file paths relative to the package root

        Returns:
            SwapOutcome; never raises for SwapError/OSError
        """
        archive_name = Path(source_jar).name

        staging = self.stager.stage(source_jar, identifiers)
        if not staging.success:
            return SwapOutcome(
                success=False,
                pipeline=staging.pipeline,
                staging=staging,
                error=staging.pipeline.error
            )
        self.log.debug(f"{len(staging.artifacts)} classes staged")

        def deliver() -> None:
            self.log.debug("Sending classes for swap...")
            self.transport.deliver(staging.overlay_archive, self.destination)

        def merge() -> None:
            self.log.debug(f"Swapping classes at {self.destination}...")
            self.transport.execute(self._request(RequestAction.MERGE, archive_name), self.destination)

        result = (
            Pipeline("swap", self.log)
            .add("deliver overlay", deliver)
            .add("merge at destination", merge)
            .run()
        )
        return SwapOutcome(
            success=result.success,
            pipeline=result,
            staging=staging,
            error=result.error
        )

    def restore(self, source_jar: Union[str, Path]) -> SwapOutcome:
        """Restore the destination jar named like source_jar from its backup."""
        archive_name = Path(source_jar).name
        self.log.debug(f"Attempting to restore {archive_name} at {self.destination}...")
        try:
            self.transport.execute(self._request(RequestAction.RESTORE, archive_name), self.destination)
        except (SwapError, OSError) as e:
            self.log.error(str(e))
            return SwapOutcome(success=False, error=e)
        return SwapOutcome(success=True)
