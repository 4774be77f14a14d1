"""
Destination and transport subsystem.

Transports for reaching the jar to patch:
    - LocalTransport: file copy + in-process merge
    - SSHTransport: scp + one remote `jarswap apply` call

Public API:
    - resolve_destination: Parse "[user@]host:path" or "path"
    - Destination, TransportMode: Resolved destination
    - Transport: Protocol interface
    - TransportFactory: Pick the transport for a destination
    - RemoteRequest, RequestAction, TransportResult: Request/result types
"""

from .base import (
    Destination,
    TransportMode,
    Transport,
    RemoteRequest,
    RequestAction,
    TransportResult,
)
from .factory import resolve_destination, TransportFactory
from .local_transport import LocalTransport
from .ssh_transport import SSHTransport

__all__ = [
    # Destination
    "Destination",
    "TransportMode",
    "resolve_destination",

    # Protocol and types
    "Transport",
    "RemoteRequest",
    "RequestAction",
    "TransportResult",

    # Factory
    "TransportFactory",

    # Implementations
    "LocalTransport",
    "SSHTransport",
]
