"""
Command-line interface for Chef API Python SDK
Prints request authorization headers and performs authenticated requests
"""

import argparse
import json
import logging
import sys
from dataclasses import replace
from typing import Optional

from . import __version__
from .config.knife_config import KnifeConfig, load_environment_overrides
from .connection import ConnectionContext
from .exceptions import ChefSDKError, ValidationError
from .http_client import ChefClient, response_body
from .signing.authorizer import RequestAuthorizer


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog='chefapi',
        description='Chef server API client with X-Ops request signing'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'Chef API Python SDK {__version__}'
    )
    parser.add_argument('-v', '--verbose', action='count', default=0, help='Increase log verbosity')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    headers_parser = subparsers.add_parser('headers', help='Print the signed header set for a request')
    add_connection_arguments(headers_parser)
    headers_parser.add_argument('--method', default='GET', help='HTTP method (default: GET)')
    headers_parser.add_argument('--path', required=True, help='Request path, e.g. /organizations/acme/nodes')
    headers_parser.add_argument('--body', default='', help='Request body (default: empty)')
    headers_parser.add_argument('--timestamp', help='Fixed RFC 3339 timestamp instead of the current time')

    get_parser = subparsers.add_parser('get', help='Perform an authenticated GET and print the body')
    add_connection_arguments(get_parser)
    get_parser.add_argument('endpoint', help='Endpoint relative to the server URL')

    return parser


def add_connection_arguments(parser: argparse.ArgumentParser) -> None:
    """Options that describe how to reach the Chef server."""
    parser.add_argument('-c', '--config', help='Path to knife.rb or client.rb')
    parser.add_argument('--server-url', help='Chef server URL')
    parser.add_argument('-u', '--user', help='Client or user name')
    parser.add_argument('-k', '--key', help='Path to the client key')
    parser.add_argument('--chef-version', help='X-Chef-Version to send')
    parser.add_argument('--insecure', action='store_true', help='Skip TLS certificate verification')


def resolve_connection(args: argparse.Namespace) -> ConnectionContext:
    """Combine config file, environment variables and options."""
    config = KnifeConfig.from_file(args.config) if args.config else None
    config = load_environment_overrides(config)

    overrides = {}
    if args.server_url:
        overrides['chef_server_url'] = args.server_url
    if args.user:
        overrides['node_name'] = args.user
    if args.key:
        overrides['client_key'] = args.key
    if args.chef_version:
        overrides['version'] = args.chef_version
    if args.insecure:
        overrides['ssl_verify_mode'] = 'verify_none'

    if overrides:
        config = replace(config, **overrides)

    return config.to_connection()


def handle_headers_command(args: argparse.Namespace) -> int:
    context = resolve_connection(args)
    authorizer = RequestAuthorizer(context.key, context.user_id, context.version)
    headers = authorizer.headers(args.method, args.path, args.body, args.timestamp)
    print(json.dumps(headers, indent=2))
    return 0


def handle_get_command(args: argparse.Namespace) -> int:
    context = resolve_connection(args)
    with ChefClient(context) as client:
        body = response_body(client.get(args.endpoint))
    sys.stdout.write(body.decode('utf-8', errors='replace'))
    if body and not body.endswith(b'\n'):
        sys.stdout.write('\n')
    return 0


def configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format='%(asctime)s %(levelname)s %(name)s: %(message)s')


def main(argv: Optional[list] = None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    handlers = {
        'headers': handle_headers_command,
        'get': handle_get_command,
    }
    handler = handlers.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    try:
        return handler(args)
    except ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1
    except ChefSDKError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
