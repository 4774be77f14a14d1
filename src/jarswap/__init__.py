"""
jarswap - hot-patch compiled classes into a deployed jar

Takes the classes compiled from a list of changed source files out of one
build of a jar, swaps them into a deployed copy of that jar (locally or over
SSH), and can restore the deployed jar to its state before the first swap.
"""
import argparse
import logging
import sys

__version__ = "1.0.0"


def main(argv=None):
    """Main CLI entry point"""
    from jarswap.commands import swap, apply

    parser = argparse.ArgumentParser(
        prog='jarswap',
        description='jarswap: swap .class files into a deployed jar',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  echo 'org/foo/Bar.java' | jarswap swap build/libs/app.jar deploy@app01:/opt/app/lib
  jarswap swap build/libs/app.jar deploy@app01:/opt/app/lib --restore
  jarswap swap build/libs/app.jar /opt/app/lib --verbose < changed.txt
        '''
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    subparsers = parser.add_subparsers(dest='command', help='Command to execute')

    # Swap command
    swap_parser = subparsers.add_parser(
        'swap',
        help='Swap classes into a jar (or restore it)',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=swap.EPILOG
    )
    swap.setup_parser(swap_parser)

    # Apply command (destination side)
    apply_parser = subparsers.add_parser('apply', help='Destination-side merge/restore (used over SSH)')
    apply.setup_parser(apply_parser)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s'
    )

    # Dispatch to command handler
    try:
        if args.command == 'swap':
            sys.exit(swap.execute(args))
        elif args.command == 'apply':
            sys.exit(apply.execute(args))
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        sys.exit(130)
