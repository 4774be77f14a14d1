"""
SSHTransport - Deliver the overlay with scp and merge with one ssh call.

Strategy: scp overlay → ssh "<remote_command> apply merge ..."
The remote host needs jarswap installed (or ssh.remote_command pointing at it).
"""

from pathlib import Path
from typing import List, Optional

from jarswap.core.protocols import ProcessExecutor, Logger
from jarswap.deploy.base import Destination, RemoteRequest, RequestAction, TransportResult
from jarswap.exceptions import TransportError, RemoteMergeError, RestoreError

# ssh reports its own failures (auth, DNS, refused connection) with 255
SSH_CONNECTION_FAILURE = 255


class SSHTransport:
    """
    Reaches the destination via SCP + SSH.

    One scp call for the overlay bytes, then exactly one ssh round trip that
    runs the destination-side routine. Password prompts, if any, come from
    ssh/scp themselves.
    """

    def __init__(
        self,
        process_executor: ProcessExecutor,
        logger: Logger,
        ssh_port: int = 22,
        ssh_options: Optional[List[str]] = None,
        remote_command: str = "jarswap"
    ):
        self.process = process_executor
        self.log = logger
        self.ssh_port = ssh_port
        self.ssh_options = list(ssh_options or [])
        self.remote_command = remote_command

    def _option_args(self) -> List[str]:
        args = []
        for option in self.ssh_options:
            args.extend(["-o", option])
        return args

    def _scp_cmd(self, local_path: Path, destination: Destination) -> List[str]:
        """Build scp command with custom port (scp uses -P, not -p)."""
        return [
            "scp",
            "-P", str(self.ssh_port),
            *self._option_args(),
            str(local_path),
            f"{destination.ssh_target}:{destination.path}/"
        ]

    def _ssh_cmd(self, destination: Destination, command: str) -> List[str]:
        """Build SSH command with custom port."""
        return [
            "ssh",
            "-p", str(self.ssh_port),
            *self._option_args(),
            destination.ssh_target,
            command
        ]

    def deliver(self, overlay_archive: Path, destination: Destination) -> None:
        cmd = self._scp_cmd(overlay_archive, destination)
        self.log.debug(f"Executing: {' '.join(cmd)}")

        try:
            result = self.process.run(cmd)
        except OSError as e:
            raise TransportError(f"Could not run scp: {e}") from e

        if result.returncode != 0:
            raise TransportError(
                f"scp to {destination} failed (exit {result.returncode})\n"
                f"Error: {result.stderr.strip()}\n\n"
                f"Troubleshooting:\n"
                f"  1. Verify SSH access: ssh -p {self.ssh_port} {destination.ssh_target}\n"
                f"  2. Verify the target directory exists and is writable: "
                f"ssh {destination.ssh_target} ls -ld {destination.path}"
            )

    def execute(self, request: RemoteRequest, destination: Destination) -> TransportResult:
        command = request.to_shell(self.remote_command)
        cmd = self._ssh_cmd(destination, command)
        self.log.debug(f"Executing: {' '.join(cmd)}")

        try:
            result = self.process.run(cmd)
        except OSError as e:
            raise TransportError(f"Could not run ssh: {e}") from e

        output = result.stdout.rstrip()
        if output:
            self.log.info(output)

        if result.returncode == 0:
            return TransportResult(success=True, output=output)

        stderr = result.stderr.strip()
        if result.returncode == SSH_CONNECTION_FAILURE:
            raise TransportError(
                f"Could not reach {destination.ssh_target}\n"
                f"Error: {stderr}"
            )

        error_cls = RestoreError if request.action is RequestAction.RESTORE else RemoteMergeError
        raise error_cls(
            f"{request.action.value} failed on {destination.ssh_target} (exit {result.returncode})\n"
            f"{stderr}"
        )
