"""
Command-line interface for the directory client.

Runs one directory operation against the servers described in a JSON
configuration file and prints the result as JSON.
"""

import argparse
import getpass
import json
import sys
from typing import Any, Optional

from .config.loader import CONFIG_ENV_VAR, load_config, validate_config
from .core.exceptions import DirectoryError, EnumerationError
from .core.logging import setup_logging
from .core.service import DirectoryService


class DirectoryClientCommand:
    """
    Command runner for directory operations.

    Operations: test, auth, groups, users, memberships.
    """

    help = "LDAP/AD authentication and identity resolution"

    def __init__(self, service: Optional[DirectoryService] = None, stdout=None):
        self.service = service or DirectoryService()
        self.stdout = stdout or sys.stdout

    def add_arguments(self, parser):
        """Add command line arguments."""
        parser.add_argument(
            '--config',
            type=str,
            help=f'Configuration file path (default: ${CONFIG_ENV_VAR})'
        )
        subparsers = parser.add_subparsers(dest='operation', required=True)

        subparsers.add_parser('test', help='Check connectivity and the service account bind')

        auth = subparsers.add_parser('auth', help='Verify a username and password')
        auth.add_argument('username', type=str)
        auth.add_argument('--password', type=str, help='Password (prompted when omitted)')

        groups = subparsers.add_parser('groups', help='List the groups of a user')
        groups.add_argument('username', type=str)

        subparsers.add_parser('users', help='List every user matched by the search settings')
        subparsers.add_parser('memberships', help='List every group membership')

    def write(self, payload: Any) -> None:
        self.stdout.write(json.dumps(payload, indent=2) + "\n")

    def handle(self, *args, **options) -> int:
        """Handle the command execution. Returns the process exit code."""
        config = load_config(options.get('config'))
        validate_config(config)
        setup_logging(config.logging)

        settings = config.directory
        operation = options['operation']

        try:
            if operation == 'test':
                self.service.test_connectivity(settings)
                self.write({"success": True})
            elif operation == 'auth':
                password = options.get('password')
                if password is None:
                    password = getpass.getpass("Password: ")
                self.service.authenticate(options['username'], password, settings)
                self.write({"success": True, "username": options['username']})
            elif operation == 'groups':
                groups = self.service.get_user_groups(options['username'], settings)
                self.write({"username": options['username'], "groups": groups})
            elif operation == 'users':
                self.write({"users": self.service.search_users(settings)})
            elif operation == 'memberships':
                memberships = self.service.search_groups(settings)
                self.write({"memberships": [m.model_dump() for m in memberships]})
        except EnumerationError as e:
            partial = [m.model_dump() if hasattr(m, 'model_dump') else m for m in e.partial_results]
            self.write({"success": False, "error": str(e), "partial_results": partial})
            return 1
        except DirectoryError as e:
            self.write({"success": False, "error": str(e), "error_type": type(e).__name__})
            return 1

        return 0


def main(argv=None):
    """Main entry point for standalone execution."""
    parser = argparse.ArgumentParser(description=DirectoryClientCommand.help)
    command = DirectoryClientCommand()
    command.add_arguments(parser)

    args = parser.parse_args(argv)
    options = vars(args)

    try:
        sys.exit(command.handle(**options))
    except KeyboardInterrupt:
        print("\nInterrupted")
        sys.exit(130)
    except (DirectoryError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
