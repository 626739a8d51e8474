"""Command-line interface for scrotmenu.

Entry point flow:
1. Parse arguments (bad values fail here, before any tool runs)
2. Handle introspection flags
3. Load configuration
4. Capture -> menu -> resolve -> dispatch, aborting on the first error
"""

import argparse
import atexit
import json
import logging
import sys
import uuid
from pathlib import Path
from typing import Optional

from . import __version__
from .capture import CaptureRequest, CaptureSession, capture
from .choice import choose
from .config import (
    APP_NAME,
    Config,
    config_defaults,
    config_schema,
    config_to_dict,
    load_config,
    parse_non_negative_int,
    validate_config_file,
)
from .dispatch import dispatch
from .emit import EVENT_CATALOG, configure, emit
from .errors import ConfigError, MenuCancelled, ScrotmenuError
from .hooks import notify_dispatch
from .instance import RunLock
from .menu import catalog_from_config
from .notify import Notifier

log = logging.getLogger(__name__)

_shutdown_registered = False


def _register_shutdown() -> None:
    """Emit one shutdown event at interpreter exit, however often main() runs."""
    global _shutdown_registered
    if _shutdown_registered:
        return
    atexit.register(emit, "shutdown", {})
    _shutdown_registered = True


def seconds(value: str) -> int:
    """argparse type for whole, non-negative second counts."""
    try:
        return parse_non_negative_int(value, "seconds")
    except ConfigError as e:
        raise argparse.ArgumentTypeError(f"invalid number of seconds: {value!r}") from e


def create_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Take a screenshot, then upload, save, open or copy it",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                              # Full screen, then pick an action
  %(prog)s -s                           # Select a region first
  %(prog)s -t 5                         # Wait 5 seconds before capturing
  %(prog)s --imgur CLIENT_ID            # Offer "Upload to imgur.com"
  %(prog)s --viewer feh --viewer gimp   # Offer "Open with feh" and "Open with gimp"
""",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"{APP_NAME} {__version__}",
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="Path to config file (default: platform config dir)",
    )

    # Capture
    parser.add_argument(
        "-s", "--select",
        action="store_true",
        help="Let the user select the area to capture",
    )
    parser.add_argument(
        "-t", "--timer",
        type=seconds,
        default=0,
        metavar="SECONDS",
        help="Wait SECONDS before capturing",
    )

    # Actions
    parser.add_argument(
        "--imgur",
        metavar="CLIENT_ID",
        help="Enable uploading to imgur.com with this client id",
    )
    parser.add_argument(
        "--viewer",
        action="append",
        metavar="IMAGE_VIEWER",
        help="Add an \"Open with IMAGE_VIEWER\" action (repeatable)",
    )
    parser.add_argument(
        "--grace",
        type=seconds,
        metavar="SECONDS",
        help="Keep running SECONDS after copying an upload link, for clipboard managers",
    )
    parser.add_argument(
        "--keep",
        action="store_true",
        help="Do not delete the temporary capture file",
    )
    parser.add_argument(
        "--no-notification",
        action="store_true",
        help="Do not show desktop notifications",
    )

    # Introspection
    parser.add_argument(
        "--print-defaults",
        action="store_true",
        help="Print default configuration as JSON and exit",
    )
    parser.add_argument(
        "--print-config-schema",
        action="store_true",
        help="Print configuration schema as JSON and exit",
    )
    parser.add_argument(
        "--validate-config",
        action="store_true",
        help="Validate configuration file and exit",
    )
    parser.add_argument(
        "--print-resolved",
        action="store_true",
        help="Print resolved configuration as JSON and exit",
    )
    parser.add_argument(
        "--print-event-catalog",
        action="store_true",
        help="Print event catalog as JSON and exit",
    )

    # Diagnostics
    parser.add_argument(
        "--quiet-events",
        action="store_true",
        help="Do not write JSON events to stderr",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    return parser


def build_overrides(args: argparse.Namespace) -> dict:
    """Config overrides from the command line; None means "not given"."""
    return {
        "imgur_client_id": args.imgur,
        "viewers": args.viewer,
        "clipboard_grace_seconds": args.grace,
        "keep_capture": True if args.keep else None,
        "enable_notification": False if args.no_notification else None,
    }


def _emit_json(payload) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True))


def _handle_introspection(args: argparse.Namespace) -> Optional[int]:
    config_path = Path(args.config).expanduser() if args.config else None

    if args.print_defaults:
        _emit_json(config_defaults())
        return 0

    if args.print_config_schema:
        _emit_json(config_schema())
        return 0

    if args.validate_config:
        errors = validate_config_file(config_path)
        for error in errors:
            print(error, file=sys.stderr)
        return 1 if errors else 0

    if args.print_resolved:
        try:
            config = load_config(config_path=config_path, overrides=build_overrides(args))
        except ConfigError as e:
            print(e, file=sys.stderr)
            return 1
        _emit_json(config_to_dict(config))
        return 0

    if args.print_event_catalog:
        _emit_json({"catalog": EVENT_CATALOG})
        return 0

    return None


def run(
    config: Config,
    select_region: bool = False,
    delay: int = 0,
    notifier: Optional[Notifier] = None,
) -> int:
    """Run one capture-and-dispatch cycle.

    Returns:
        Exit code: 0 when the chosen action succeeded, 1 otherwise
    """
    operation_id = str(uuid.uuid4())
    emit("operation.started", {
        "operation_id": operation_id,
        "select": select_region,
        "delay": delay,
    })
    notifier = notifier or Notifier(enabled=config.enable_notification)

    try:
        catalog = catalog_from_config(config)
        request = CaptureRequest.from_config(config, select_region=select_region, delay=delay)
        with RunLock(config.lock_file), CaptureSession(request.path, keep=config.keep_capture) as session:
            capture(request, config)
            choice = choose(catalog, config)
            emit("choice.resolved", {"operation_id": operation_id, "action": choice.name})
            outcome = dispatch(choice, session, config, notifier)
            notify_dispatch(outcome, session, config.hooks_dir)
    except MenuCancelled as e:
        log.info("Cancelled: %s", e)
        emit("operation.cancelled", {"operation_id": operation_id, "stage": e.stage})
        return 1
    except ScrotmenuError as e:
        emit("error.handled", {
            "operation_id": operation_id,
            "error_type": type(e).__name__,
            "stage": e.stage,
            "message": str(e),
        })
        emit("operation.completed", {
            "operation_id": operation_id,
            "success": False,
            "error_message": str(e),
        })
        log.error("%s failed: %s", e.stage.capitalize(), e)
        return 1

    emit("operation.completed", {
        "operation_id": operation_id,
        "success": True,
        "action": outcome.action,
        "detail": outcome.detail,
    })
    return 0


def main(args: Optional[list[str]] = None) -> int:
    """Main entry point.

    Args:
        args: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_argument_parser()
    parsed_args = parser.parse_args(args)

    result = _handle_introspection(parsed_args)
    if result is not None:
        return result

    logging.basicConfig(
        level=logging.DEBUG if parsed_args.debug else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    configure(APP_NAME, stderr=not parsed_args.quiet_events)
    _register_shutdown()

    config_path = Path(parsed_args.config).expanduser() if parsed_args.config else None
    try:
        config = load_config(config_path=config_path, overrides=build_overrides(parsed_args))
    except ConfigError as e:
        log.error("Invalid configuration: %s", e)
        return 1

    return run(config, select_region=parsed_args.select, delay=parsed_args.timer)


if __name__ == "__main__":
    sys.exit(main())
