"""Local preparation of the overlay archive.

Everything here happens next to the source jar; nothing at the destination
is read or written.
"""

from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Iterable, List, Optional, Union

from jarswap.core.protocols import FileSystemService, ArchiveCodec, Logger
from jarswap.exceptions import StagingError
from jarswap.swap.mapper import ArtifactMapper
from jarswap.swap.pipeline import Pipeline, PipelineResult
from jarswap.swap.staging import archive_stem, overlay_archive_name

DEFAULT_LOCAL_WORKING_DIR = '.jar-prepare'


class LocalWorkspace:
    """Local staging paths for one source jar.

    For ``build/libs/app.jar``::

        build/libs/.jar-prepare/app.orig/       unpacked source jar
        build/libs/.jar-prepare/app.swap/       classes selected for swap
        build/libs/.jar-prepare/app.swap.zip    overlay archive
    """

    def __init__(self, source_jar: Union[str, Path], working_dir_name: str = DEFAULT_LOCAL_WORKING_DIR):
        self.source_jar = Path(source_jar).resolve()
        self.archive_name = self.source_jar.name
        self.stem = archive_stem(self.archive_name)
        self.working_dir = self.source_jar.parent / working_dir_name
        self.pristine_dir = self.working_dir / f"{self.stem}.orig"
        self.overlay_dir = self.working_dir / f"{self.stem}.swap"
        self.overlay_archive = self.working_dir / overlay_archive_name(self.archive_name)


@dataclass
class StagingResult:
    """
    Outcome of local staging.

    Attributes:
        pipeline: Per-step results
        overlay_archive: Path of the packed overlay (valid only on success)
        sources: Accepted source identifiers, in input order
        artifacts: Relative paths of all classes copied into the overlay
    """
    pipeline: PipelineResult
    overlay_archive: Path
    sources: List[str] = field(default_factory=list)
    artifacts: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.pipeline.success

    @property
    def is_empty(self) -> bool:
        return not self.artifacts


class LocalStager:
    """
    Builds the overlay archive from a source jar and a list of changed sources.

    Steps (fail-fast, each one a precondition for the next):
        1. Recreate the local working directory
        2. Unpack the source jar into the pristine copy directory
        3. Copy the classes of every accepted source file into the overlay directory
        4. Report "nothing to swap" when no class was selected (not an error)
        5. Pack the overlay directory into the overlay archive
    """

    def __init__(
        self,
        filesystem: FileSystemService,
        codec: ArchiveCodec,
        logger: Logger,
        source_extension: str = '.java',
        artifact_extension: str = '.class',
        working_dir_name: str = DEFAULT_LOCAL_WORKING_DIR
    ):
        self.fs = filesystem
        self.codec = codec
        self.log = logger
        self.source_extension = source_extension
        self.artifact_extension = artifact_extension
        self.working_dir_name = working_dir_name

    def workspace(self, source_jar: Union[str, Path]) -> LocalWorkspace:
        return LocalWorkspace(source_jar, self.working_dir_name)

    def stage(self, source_jar: Union[str, Path], identifiers: Iterable[str]) -> StagingResult:
        """
        Run all staging steps.

        Args:
            source_jar: Jar to take compiled classes from
            identifiers: Source paths relative to the package root, consumed lazily

        Returns:
            StagingResult; on failure the pipeline result names the failed step
        """
        ws = self.workspace(source_jar)
        result = StagingResult(pipeline=PipelineResult(success=False), overlay_archive=ws.overlay_archive)

        def recreate_working_dir() -> None:
            if not self.fs.is_file(ws.source_jar):
                raise StagingError(f"Source jar not found: {ws.source_jar}")
            if self.fs.exists(ws.working_dir):
                self.fs.rmtree(ws.working_dir)
            self.fs.mkdir(ws.working_dir)

        def unpack_source() -> str:
            self.log.debug(f"Unpacking {ws.archive_name} into {ws.pristine_dir}...")
            count = self.codec.unpack(ws.source_jar, ws.pristine_dir)
            self.fs.make_user_writable(ws.pristine_dir)
            return f"{count} entries"

        def collect_artifacts() -> str:
            self.fs.mkdir(ws.overlay_dir)
            mapper = ArtifactMapper(
                ws.pristine_dir,
                self.fs,
                self.log,
                source_extension=self.source_extension,
                artifact_extension=self.artifact_extension
            )
            self.log.progress("Packing for swap the classes corresponding to the following source files:")
            seen = set()
            for artifact_set in mapper.map(identifiers):
                result.sources.append(artifact_set.source)
                for relative in artifact_set.artifacts:
                    if relative in seen:
                        continue
                    seen.add(relative)
                    self._copy_artifact(ws, relative)
                    result.artifacts.append(relative)
            return f"{len(result.artifacts)} classes from {len(result.sources)} sources"

        def report_selection() -> Optional[str]:
            if result.is_empty:
                self.log.info(f"No {self.artifact_extension} file to swap.")
                return "nothing to swap"
            return None

        def pack_overlay() -> str:
            count = self.codec.pack(ws.overlay_dir, ws.overlay_archive)
            return f"{count} entries in {ws.overlay_archive.name}"

        pipeline = (
            Pipeline("stage", self.log)
            .add("recreate working directory", recreate_working_dir)
            .add("unpack source jar", unpack_source)
            .add("collect compiled classes", collect_artifacts)
            .add("report selection", report_selection)
            .add("pack overlay", pack_overlay)
        )
        result.pipeline = pipeline.run()
        return result

    def _copy_artifact(self, ws: LocalWorkspace, relative: str) -> None:
        """Copy one class into the overlay directory, mirroring its path."""
        target = ws.overlay_dir / PurePosixPath(relative)
        self.fs.mkdir(target.parent)
        self.fs.copy_file(ws.pristine_dir / PurePosixPath(relative), target)
