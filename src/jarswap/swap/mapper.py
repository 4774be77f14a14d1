"""Map changed source files to the compiled classes they produce."""

from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Iterable, Iterator, Tuple, Union

from jarswap.core.protocols import FileSystemService, Logger
from jarswap.exceptions import NoMatchingArtifactError


@dataclass(frozen=True)
class CompiledArtifactSet:
    """
    Classes compiled from one source file.

    Attributes:
        source: Source identifier as given, e.g. "org/foo/Bar.java"
        artifacts: Paths relative to the package root, e.g.
            ("org/foo/Bar.class", "org/foo/Bar$Inner.class")
    """
    source: str
    artifacts: Tuple[str, ...]


class ArtifactMapper:
    """
    Resolves source identifiers against an unpacked jar.

    For "org/foo/Bar.java" the mapper picks "org/foo/Bar.class" plus every
    nested class "org/foo/Bar$*.class" from the same directory. A sibling
    such as "org/foo/BarTest.class" is not part of Bar.java's output and is
    left alone.
    """

    def __init__(
        self,
        package_root: Union[str, Path],
        filesystem: FileSystemService,
        logger: Logger,
        source_extension: str = '.java',
        artifact_extension: str = '.class'
    ):
        self.root = Path(package_root)
        self.fs = filesystem
        self.log = logger
        self.source_extension = source_extension
        self.artifact_extension = artifact_extension

    def accepts(self, identifier: str) -> bool:
        return identifier.endswith(self.source_extension) and len(identifier) > len(self.source_extension)

    def _is_artifact_of(self, filename: str, base: str) -> bool:
        if not filename.endswith(self.artifact_extension):
            return False
        name = filename[:-len(self.artifact_extension)]
        return name == base or name.startswith(base + '$')

    def resolve(self, identifier: str) -> CompiledArtifactSet:
        """
        Compiled artifacts for one accepted identifier.

        Raises:
            NoMatchingArtifactError: If the jar has no class for the source
        """
        source = PurePosixPath(identifier)
        parent = source.parent
        base = source.name[:-len(self.source_extension)]
        directory = self.root / parent

        matches = []
        if self.fs.is_dir(directory):
            for entry in self.fs.iterdir(directory):
                if self._is_artifact_of(entry.name, base) and self.fs.is_file(entry):
                    matches.append((parent / entry.name).as_posix())

        if not matches:
            pattern = (parent / f"{base}{self.artifact_extension}").as_posix()
            raise NoMatchingArtifactError(identifier, pattern)
        return CompiledArtifactSet(source=identifier, artifacts=tuple(sorted(matches)))

    def map(self, identifiers: Iterable[str]) -> Iterator[CompiledArtifactSet]:
        """
        Lazily map a stream of identifiers (one per line).

        Surrounding whitespace and blank lines are ignored; identifiers that
        do not end in the source extension are skipped silently. Each accepted
        identifier is echoed before it is resolved.
        """
        for line in identifiers:
            identifier = line.strip()
            if not self.accepts(identifier):
                continue
            self.log.progress(f"  {identifier}")
            yield self.resolve(identifier)
