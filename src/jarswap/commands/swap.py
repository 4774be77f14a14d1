"""Swap classes into a deployed jar, or restore it"""
import sys

from jarswap.core import (
    ConsoleLogger,
    RealFileSystemService,
    SubprocessExecutor,
    ZipArchiveCodec,
)
from jarswap.deploy import resolve_destination, TransportFactory
from jarswap.exceptions import DestinationError, ConfigError
from jarswap.swap.swapper import JarSwapper
from jarswap.utils.config import load_config

SUCCESS_LINE = '[SUCCESS]'
FAILED_LINE = '[FAILED]'

EPILOG = '''
Classes from JAR are swapped into the jar with the same name at TARGET.
Changes done by subsequent runs are NOT incremental: every run patches the
jar as it was before the first run. Use --restore to put that original back.

Source files are read from stdin, one per line, relative to the package
root (e.g. java/lang/String.java). Each one selects its class and all of its
inner classes. Lines not ending in .java are ignored.

TARGET formats:
  local/directory/containing/target/jar
  [user@]host:/remote/directory/containing/target/jar
      (remote host needs jarswap installed, see ssh.remote_command)

Examples:
  echo 'org/foo/Bar.java' | jarswap swap path/to/jar/my.jar user@my.host.com:/target/path
      Takes org.foo.Bar and its inner classes from path/to/jar/my.jar and puts
      them into /target/path/my.jar on my.host.com.
  jarswap swap path/to/jar/my.jar user@my.host.com:/target/path --restore

Useful input recipes (run in the directory containing the package root):
  svn status . | grep '^[AM]' | awk '{print $2}'    uncommitted files
  git diff --name-only --relative                   changed files
  find . -mtime -2                                  files modified in the last 2 days
'''


def setup_parser(parser):
    """Setup argument parser for swap command"""
    parser.add_argument(
        'jar',
        help='Jar to take compiled classes from (e.g. build/libs/app.jar)'
    )
    parser.add_argument(
        'target',
        help='Directory holding the jar to patch: path or [user@]host:path'
    )
    parser.add_argument(
        '--restore',
        action='store_true',
        help='Restore the target jar to its state before the first swap'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Print debug information'
    )
    parser.add_argument(
        '--config',
        help='YAML config file (default: $JARSWAP_CONFIG or ~/.jarswap.yaml)'
    )
    parser.set_defaults(print_usage=parser.print_help)


def execute(args, stdin=None):
    """Execute swap command"""
    stdin = stdin if stdin is not None else sys.stdin
    logger = ConsoleLogger(verbose=args.verbose)

    try:
        destination = resolve_destination(args.target)
    except DestinationError as e:
        print(f"[ERROR] {e}")
        print_usage = getattr(args, 'print_usage', None)
        if print_usage:
            print_usage()
        print(FAILED_LINE)
        return 1

    try:
        config = load_config(args.config)
    except ConfigError as e:
        logger.error(str(e))
        print(FAILED_LINE)
        return 1

    filesystem = RealFileSystemService()
    codec = ZipArchiveCodec()
    transport = TransportFactory.for_destination(
        destination,
        config,
        filesystem=filesystem,
        codec=codec,
        process_executor=SubprocessExecutor(),
        logger=logger
    )
    swapper = JarSwapper(
        destination=destination,
        transport=transport,
        filesystem=filesystem,
        codec=codec,
        config=config,
        logger=logger,
        verbose=args.verbose
    )
    swapper.describe(args.jar)

    if args.restore:
        outcome = swapper.restore(args.jar)
    else:
        outcome = swapper.patch(args.jar, stdin)

    print(SUCCESS_LINE if outcome.success else FAILED_LINE)
    return 0 if outcome.success else 1
