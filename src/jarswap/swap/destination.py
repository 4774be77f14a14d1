"""Destination-side entry point.

Runs a RemoteRequest against the filesystem it is executed on. The local
transport calls this in-process; over SSH the same code runs through
``jarswap apply``.
"""

from typing import Union

from jarswap.core.protocols import FileSystemService, ArchiveCodec, Logger
from jarswap.deploy.base import RemoteRequest, RequestAction
from jarswap.exceptions import RemoteMergeError
from jarswap.swap.merger import MergeResult, RemoteMerger
from jarswap.swap.restore import RestoreManager, RestoreResult
from jarswap.swap.staging import DestinationStagingArea


def apply_request(
    request: RemoteRequest,
    filesystem: FileSystemService,
    codec: ArchiveCodec,
    logger: Logger
) -> Union[MergeResult, RestoreResult]:
    """
    Execute a merge or restore request at the destination.

    Raises:
        RemoteMergeError: If any merge step failed
        RestoreError: If the backup could not be put back
    """
    staging = DestinationStagingArea(
        request.target_dir,
        request.archive_name,
        filesystem,
        working_dir_name=request.working_dir_name
    )

    if request.action is RequestAction.RESTORE:
        return RestoreManager(staging, logger).restore()

    result = RemoteMerger(staging, codec, logger).merge()
    if not result.success:
        raise RemoteMergeError(f"{result.failed_step.value} failed: {result.message}")
    return result
