"""
Destination parsing and transport routing.

Format-based routing:
    /opt/app/lib               → LocalTransport
    relative/dir               → LocalTransport
    host:/opt/app/lib          → SSHTransport (ssh default user)
    deploy@host:/opt/app/lib   → SSHTransport
    deploy@host:lib            → SSHTransport, path relative to remote home
"""

from jarswap.deploy.base import Destination, TransportMode
from jarswap.exceptions import MissingPathError, MissingHostError


def resolve_destination(spec: str) -> Destination:
    """
    Parse a destination specifier of the form ``[user@]host:path`` or ``path``.

    The string is split on its last ":"; everything after it is the path.
    The part before it is split on the first "@" into user and host.

    Args:
        spec: Destination specifier from the command line

    Returns:
        Destination with mode LOCAL when no host was given, REMOTE otherwise

    Raises:
        MissingPathError: If the path component is empty
        MissingHostError: If a user is given with an empty host ("user@:path")

    Example:
        >>> resolve_destination("deploy@app01:/opt/app/lib")
        Destination(mode=<TransportMode.REMOTE: 'remote'>, path='/opt/app/lib', user='deploy', host='app01')
    """
    if ':' not in spec:
        if not spec:
            raise MissingPathError("missing target path")
        return Destination(mode=TransportMode.LOCAL, path=spec)

    location, path = spec.rsplit(':', 1)
    if not path:
        raise MissingPathError("missing target path")

    if '@' in location:
        user, host = location.split('@', 1)
    else:
        user, host = '', location

    if user and not host:
        raise MissingHostError("missing host name")

    if not host:
        # ":path" carries no host, so it stays local
        return Destination(mode=TransportMode.LOCAL, path=path)

    return Destination(
        mode=TransportMode.REMOTE,
        path=path,
        user=user or None,
        host=host
    )


class TransportFactory:
    """Factory for building the transport that serves a destination."""

    @staticmethod
    def for_destination(destination, config, filesystem, codec, process_executor, logger):
        """
        Return the transport for a resolved destination.

        Args:
            destination: Result of resolve_destination()
            config: SwapConfig (SSH port, options and remote command)
            filesystem: FileSystemService for local copies and merges
            codec: ArchiveCodec used by in-process merges
            process_executor: ProcessExecutor used for scp/ssh
            logger: Logger for operator output

        Returns:
            LocalTransport or SSHTransport
        """
        # Lazy import to avoid circular dependencies
        from jarswap.deploy.local_transport import LocalTransport
        from jarswap.deploy.ssh_transport import SSHTransport

        if destination.mode is TransportMode.LOCAL:
            return LocalTransport(filesystem=filesystem, codec=codec, logger=logger)

        return SSHTransport(
            process_executor=process_executor,
            logger=logger,
            ssh_port=config.ssh.port,
            ssh_options=config.ssh.options,
            remote_command=config.ssh.remote_command
        )
