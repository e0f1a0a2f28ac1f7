"""
SocialBu Command Line Client

Entry point for the command line tools: list accounts, inspect a post, send a
test post (or dry run it), check configuration, and serve the webhook receiver.

Exit codes: 0 on success, 1 on a handled failure, 2 on an unexpected error.
"""

import sys
import os
import json
import argparse
import logging
from typing import Any, List, Optional, Sequence

import uvicorn

from config import settings
from config.validators import validate_settings, get_config_summary
from services.client import SocialBuClient
from utils.exceptions import (
    ConfigurationError, MediaUploadError, NotFoundError, SocialBuError, ValidationError
)
from utils.helpers import format_datetime, is_valid_url, truncate_text
from utils.logger import get_logger, setup_file_logging
from webhooks.receiver import create_app

# Set up logging
logger = get_logger(__name__)

NOT_CONFIGURED_MESSAGE = "SocialBu is not configured. Set SOCIALBU_TOKEN in your .env file."


def format_table(headers: Sequence[str], rows: List[Sequence[Any]]) -> str:
    """Render rows as a plain-text table with a header separator."""
    cells = [[str(value) for value in row] for row in rows]
    widths = [len(header) for header in headers]
    for row in cells:
        for index, value in enumerate(row):
            widths[index] = max(widths[index], len(value))

    def render(values):
        return "| " + " | ".join(value.ljust(widths[i]) for i, value in enumerate(values)) + " |"

    separator = "+-" + "-+-".join("-" * width for width in widths) + "-+"
    lines = [separator, render(headers), separator]
    lines.extend(render(row) for row in cells)
    lines.append(separator)
    return "\n".join(lines)


def print_error(message: str) -> None:
    print(message, file=sys.stderr)


def print_validation_errors(error: ValidationError) -> None:
    print_error("Validation failed:")
    for field, messages in error.errors.items():
        if isinstance(messages, str):
            messages = [messages]
        for message in messages:
            print_error(f"  - {field}: {message}")


# =============================================================================
# Commands
# =============================================================================

def accounts_command(args, client) -> int:
    """List every connected account."""
    if not client.is_configured():
        print_error(NOT_CONFIGURED_MESSAGE)
        return 1

    try:
        accounts = client.accounts().all(args.type)
    except SocialBuError as e:
        logger.error(f"Failed to fetch accounts: {e.context()}")
        print_error(f"Failed to fetch accounts: {e}")
        return 1

    if not accounts:
        print("No accounts found.")
        return 0

    if args.json:
        print(json.dumps([account.to_dict() for account in accounts], indent=4))
        return 0

    print(format_table(
        ["ID", "Name", "Type", "Status", "Username"],
        [[a.id, a.name, a.type, a.status, a.username or "-"] for a in accounts]
    ))
    print()
    print(f"Total: {len(accounts)} account(s)")
    return 0


def post_command(args, client) -> int:
    """Show the details of one post."""
    if not client.is_configured():
        print_error(NOT_CONFIGURED_MESSAGE)
        return 1

    try:
        post = client.posts().get(args.id)
    except NotFoundError:
        print_error(f"Post #{args.id} not found.")
        return 1
    except SocialBuError as e:
        logger.error(f"Failed to fetch post {args.id}: {e.context()}")
        print_error(f"Failed to fetch post: {e}")
        return 1

    if args.json:
        print(json.dumps(post.to_dict(), indent=4))
        return 0

    print(f"Post #{post.id}")
    print()
    print(format_table(["Field", "Value"], [
        ["ID", post.id],
        ["Status", post.status],
        ["Content", post.content],
        ["Accounts", ", ".join(str(i) for i in post.account_ids)],
        ["Scheduled", format_datetime(post.publish_at) or "-"],
        ["Created", format_datetime(post.created_at) or "-"],
        ["Updated", format_datetime(post.updated_at) or "-"],
        ["Attachments", f"{len(post.attachments)} file(s)" if post.attachments else "None"],
    ]))
    return 0


def test_command(args, client) -> int:
    """Send (or dry run) a test post."""
    if not client.is_configured():
        print_error(NOT_CONFIGURED_MESSAGE)
        return 1

    builder = client.create().content(args.content)

    if args.media:
        if not os.path.exists(args.media) and not is_valid_url(args.media):
            print_error(f"Media file not found: {args.media}")
            return 1
        builder.media(args.media)

    try:
        if args.schedule:
            builder.scheduled_at(args.schedule)

        if args.to:
            builder.to(args.to)

        if args.dry_run:
            payload = builder.dry_run()
            print("Dry run - payload that would be sent:")
            print(json.dumps(payload, indent=4))
            return 0

        print("Sending post...")
        post = builder.send()
    except ValidationError as e:
        print_validation_errors(e)
        return 1
    except MediaUploadError as e:
        logger.error(f"Media upload failed: {e.context()}")
        print_error(f"Media upload failed at step '{e.step.value}': {e}")
        return 1
    except SocialBuError as e:
        logger.error(f"Failed to create post: {e.context()}")
        print_error(f"Failed to create post: {e}")
        return 1

    print()
    print("Post created successfully!")
    print(format_table(["Field", "Value"], [
        ["ID", post.id],
        ["Status", post.status],
        ["Content", truncate_text(post.content, 50)],
        ["Accounts", ", ".join(str(i) for i in post.account_ids)],
        ["Scheduled", format_datetime(post.publish_at) or "Immediate"],
    ]))
    return 0


def check_config_command(args) -> int:
    """Print the configuration summary and validate it."""
    print(json.dumps(get_config_summary(), indent=4))
    try:
        validate_settings()
    except ConfigurationError as e:
        print_error(str(e))
        return 1
    print("Configuration is valid.")
    return 0


def webhooks_command(args) -> int:
    """Serve the webhook receiver with uvicorn."""
    if not settings.SOCIALBU_WEBHOOKS_ENABLED:
        print_error("Webhooks are disabled. Set SOCIALBU_WEBHOOKS_ENABLED=true in your .env file.")
        return 1

    if not settings.SOCIALBU_WEBHOOK_SECRET:
        logger.warning("SOCIALBU_WEBHOOK_SECRET is not set; webhook signatures will not be verified")

    app = create_app(secret=settings.SOCIALBU_WEBHOOK_SECRET, prefix=settings.SOCIALBU_WEBHOOKS_PREFIX)
    logger.info(f"Serving webhooks on {args.host}:{args.port}/{settings.SOCIALBU_WEBHOOKS_PREFIX.strip('/')}")
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level.lower())
    return 0


CLIENT_COMMANDS = {
    "accounts": accounts_command,
    "post": post_command,
    "test": test_command,
}


def parse_arguments(argv: Optional[Sequence[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description='SocialBu command line client')
    parser.add_argument('--log-file', type=str, default=None, help='Log file path')
    parser.add_argument('--log-level', type=str, choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        default='WARNING', help='Logging level')

    subparsers = parser.add_subparsers(dest='command', required=True)

    accounts_parser = subparsers.add_parser('accounts', help='List all connected social accounts')
    accounts_parser.add_argument('--type', type=str, default=None, help='Filter by account type')
    accounts_parser.add_argument('--json', action='store_true', help='Output as JSON')

    post_parser = subparsers.add_parser('post', help='Get details of a specific post')
    post_parser.add_argument('id', type=int, help='The post ID')
    post_parser.add_argument('--json', action='store_true', help='Output as JSON')

    test_parser = subparsers.add_parser('test', help='Send a test post')
    test_parser.add_argument('content', type=str, help='The post content')
    test_parser.add_argument('--media', type=str, default=None, help='Path or URL of a media file')
    test_parser.add_argument('--schedule', type=str, default=None,
                             help='Schedule for a future time (YYYY-MM-DD HH:MM:SS)')
    test_parser.add_argument('--to', type=int, action='append', default=None,
                             help='Account ID to post to (repeatable)')
    test_parser.add_argument('--dry-run', action='store_true', help='Validate without posting')

    subparsers.add_parser('check-config', help='Validate configuration and print a summary')

    webhooks_parser = subparsers.add_parser('webhooks', help='Serve the webhook receiver')
    webhooks_parser.add_argument('--host', type=str, default=settings.SOCIALBU_WEBHOOK_HOST)
    webhooks_parser.add_argument('--port', type=int, default=settings.SOCIALBU_WEBHOOK_PORT)

    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None, client=None) -> int:
    """Main entry point for the application."""
    args = parse_arguments(argv)

    # Set up logging
    log_level = getattr(logging, args.log_level)
    setup_file_logging(args.log_file, log_level)
    logger.debug(f"Configuration: {get_config_summary()}")

    try:
        if args.command == 'check-config':
            exit_code = check_config_command(args)
        elif args.command == 'webhooks':
            exit_code = webhooks_command(args)
        else:
            client = client or SocialBuClient.from_settings()
            exit_code = CLIENT_COMMANDS[args.command](args, client)
    except Exception as e:
        logger.error(f"Unhandled exception in SocialBu CLI: {e}", exc_info=True)
        exit_code = 2

    logger.debug(f"Command {args.command} finished with exit code {exit_code}")
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
