"""ClinicDesk entry point.

Changes:
  - 2026-10-18: Initial launcher: --host, --port, --dev, --log-level.
"""

import argparse
import logging
from importlib.metadata import version as get_version

from clinicdesk.config import get_settings
from clinicdesk.logging_setup import setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="ClinicDesk - admin dashboard for the clinic booking platform",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  clinicdesk                         Start the dashboard on the configured host/port
  clinicdesk --port 9000             Start on another port
  clinicdesk --dev                   Start with auto-reload (dev mode)
""",
    )
    parser.add_argument("--host", default=None, help="Host to bind (default: CLINICDESK_HOST)")
    parser.add_argument(
        "--port", type=int, default=None, help="Port to bind (default: CLINICDESK_PORT)"
    )
    parser.add_argument(
        "--dev", action="store_true", help="Development mode with auto-reload"
    )
    parser.add_argument("--log-level", default=None, help="Override CLINICDESK_LOG_LEVEL")
    parser.add_argument(
        "--version",
        "-v",
        action="version",
        version=f"%(prog)s {get_version('clinicdesk')}",
    )
    args = parser.parse_args()

    settings = get_settings()
    setup_logging(level=args.log_level or settings.log_level)

    from clinicdesk.web.app import run_server

    try:
        run_server(host=args.host, port=args.port, dev=args.dev)
    except KeyboardInterrupt:
        logger.info("ClinicDesk stopped")


if __name__ == "__main__":
    main()
