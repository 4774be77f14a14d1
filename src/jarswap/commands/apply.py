"""Destination-side merge/restore command.

Invoked over SSH by the swap command; reports through its exit status only.
"""
from jarswap.core import ConsoleLogger, RealFileSystemService, ZipArchiveCodec
from jarswap.deploy.base import RemoteRequest, RequestAction
from jarswap.exceptions import SwapError
from jarswap.swap.destination import apply_request
from jarswap.swap.staging import DEFAULT_WORKING_DIR_NAME


def setup_parser(parser):
    """Setup argument parser for apply command"""
    parser.add_argument(
        'action',
        choices=[a.value for a in RequestAction],
        help='merge: apply the delivered overlay; restore: put the backup back'
    )
    parser.add_argument(
        '--target-dir',
        required=True,
        help='Directory holding the destination jar'
    )
    parser.add_argument(
        '--archive-name',
        required=True,
        help='File name of the destination jar (e.g. app.jar)'
    )
    parser.add_argument(
        '--working-dir-name',
        default=DEFAULT_WORKING_DIR_NAME,
        help=f'Staging directory name inside the target dir (default: {DEFAULT_WORKING_DIR_NAME})'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Print debug information'
    )


def execute(args):
    """Execute apply command"""
    logger = ConsoleLogger(verbose=args.verbose)

    request = RemoteRequest(
        action=RequestAction(args.action),
        target_dir=args.target_dir,
        archive_name=args.archive_name,
        working_dir_name=args.working_dir_name,
        verbose=args.verbose
    )
    try:
        apply_request(request, RealFileSystemService(), ZipArchiveCodec(), logger)
    except (SwapError, OSError) as e:
        logger.error(str(e))
        return 1
    return 0
