"""
CrownSync - Main Entry Point

Parses command-line arguments and dispatches to CLI mode.

Author: CrownSync Project
"""

import sys
import argparse
from pathlib import Path


def main(argv=None):
    """
    Main entry point for CrownSync.

    Commands:
    - login: store credentials after a successful login
    - sync: run a reconciliation pass
    - delete-session: delete a session from the shared library
    """
    parser = argparse.ArgumentParser(
        description='CrownSync - Remote Library Reconciliation',
        epilog='Configuration is read from config.json in the working directory'
    )
    parser.add_argument('--config-dir', type=Path,
                        help='Directory holding config.json (defaults to the working directory)')

    subparsers = parser.add_subparsers(dest='operation', required=True)

    login_parser = subparsers.add_parser('login', help='Verify and store credentials')
    login_parser.add_argument('--username', help='Account email (prompted if omitted)')

    sync_parser = subparsers.add_parser('sync', help='Reconcile the local catalog with the remote library')
    sync_parser.add_argument('--prefix', help='Remote key prefix (overrides config remote_prefix)')

    delete_parser = subparsers.add_parser('delete-session', help='Delete a session from the remote library')
    delete_parser.add_argument('session_id', type=int, help='Remote session id')

    args = parser.parse_args(argv)

    from crownsync.cli import run_cli_operation
    return run_cli_operation(
        args.operation,
        prefix=getattr(args, 'prefix', None),
        session_id=getattr(args, 'session_id', None),
        username=getattr(args, 'username', None),
        config_dir=args.config_dir
    )


if __name__ == '__main__':
    sys.exit(main())
