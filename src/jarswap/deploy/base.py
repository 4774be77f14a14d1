"""
Transport Protocol - Abstract interface for reaching the destination jar.

This module defines the destination model and the protocol that every
transport must implement. Two transports exist: local (plain file copy plus
in-process merge) and SSH (scp plus one remote command).
"""

import shlex
from dataclasses import dataclass
from enum import Enum
from typing import Protocol, Optional, List, runtime_checkable
from pathlib import Path


class TransportMode(str, Enum):
    LOCAL = "local"
    REMOTE = "remote"


@dataclass(frozen=True)
class Destination:
    """
    Resolved destination specifier.

    Attributes:
        mode: LOCAL when no host was given, REMOTE otherwise
        path: Directory holding the destination jar (remote path for REMOTE)
        user: SSH user (None to let ssh pick its default)
        host: SSH host (None for LOCAL)
    """
    mode: TransportMode
    path: str
    user: Optional[str] = None
    host: Optional[str] = None

    @property
    def is_remote(self) -> bool:
        return self.mode is TransportMode.REMOTE

    @property
    def ssh_target(self) -> str:
        """"user@host" or just "host"."""
        return f"{self.user}@{self.host}" if self.user else str(self.host)

    def __str__(self) -> str:
        if self.is_remote:
            return f"{self.ssh_target}:{self.path}"
        return self.path


class RequestAction(str, Enum):
    MERGE = "merge"
    RESTORE = "restore"


@dataclass(frozen=True)
class RemoteRequest:
    """
    Structured request executed at the destination.

    Passed as-is to the local transport; rendered to ``apply`` CLI arguments
    for the SSH transport, where the same program runs in merge mode.
    """
    action: RequestAction
    target_dir: str
    archive_name: str
    working_dir_name: str
    verbose: bool = False

    def to_args(self) -> List[str]:
        """Arguments for ``jarswap apply`` (unquoted)."""
        args = [
            "apply", self.action.value,
            "--target-dir", self.target_dir,
            "--archive-name", self.archive_name,
            "--working-dir-name", self.working_dir_name,
        ]
        if self.verbose:
            args.append("--verbose")
        return args

    def to_shell(self, remote_command: str) -> str:
        """Render a shell command line for the remote login shell.

        A leading "~/" in the target directory is turned into "$HOME"/ so the
        remote shell expands it; shlex.quote() alone would suppress that.
        """
        parts = [remote_command]
        for arg in self.to_args():
            if arg == self.target_dir and arg.startswith("~/"):
                parts.append('"$HOME"/' + shlex.quote(arg[2:]))
            else:
                parts.append(shlex.quote(arg))
        return " ".join(parts)


@dataclass
class TransportResult:
    """
    Result of executing a request at the destination.

    Attributes:
        success: Whether the destination-side routine reported success
        output: Diagnostic text produced at the destination
    """
    success: bool
    output: str = ""


@runtime_checkable
class Transport(Protocol):
    """
    Interface for moving the overlay to the destination and running the
    destination-side routine there.

    Either the overlay is fully present and the routine ran, or an exception
    is raised; callers never see a partially applied patch reported as success.
    """

    def deliver(self, overlay_archive: Path, destination: Destination) -> None:
        """
        Copy the overlay archive into the destination directory.

        Raises:
            TransportError: If the bytes could not be delivered
        """
        ...

    def execute(self, request: RemoteRequest, destination: Destination) -> TransportResult:
        """
        Run the destination-side routine for request.

        Raises:
            TransportError: If the destination could not be reached
            RemoteMergeError / RestoreError: If the routine ran and failed
        """
        ...
