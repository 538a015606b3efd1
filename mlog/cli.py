"""mlog command line: ``mlog [-c CONFIG] [-v] -- CMD [ARGS...]``."""

import argparse
import logging
import sys

from mlog import __version__
from mlog.capture import CaptureOrchestrator
from mlog.config import load_config
from mlog.diagnostics import setup_logging, teardown_logging
from mlog.errors import CaptureError, ConfigError

logger = logging.getLogger(__name__)

EXIT_CAPTURE_FAILED = 1
EXIT_CONFIG_ERROR = 2


def build_cli_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mlog",
        description="Run a command and tee or redirect its output into rotated log files.",
    )
    parser.add_argument(
        "-c", "--config", default=None,
        help="Config file path (default: $MLOG_CONFIG or ~/.mlog)",
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0,
        help="Log more about mlog itself (-v info, -vv debug)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "cmd", nargs=argparse.REMAINDER,
        help="Command to run, after `--`",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_cli_parser()
    args = parser.parse_args(argv)

    cmd = args.cmd
    if cmd and cmd[0] == "--":
        cmd = cmd[1:]
    if not cmd:
        parser.print_usage(sys.stderr)
        print("mlog: error: no command given", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"mlog: config error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    diagnostic_sink = setup_logging(config.mlog, args.verbose)
    logger.info("Running: %s", " ".join(cmd))
    orchestrator = CaptureOrchestrator(cmd, config, diagnostic_sink=diagnostic_sink)
    try:
        return orchestrator.run()
    except CaptureError as e:
        print(f"mlog: {e}", file=sys.stderr)
        # child's code even when capture failed
        return e.exit_code if e.exit_code is not None else EXIT_CAPTURE_FAILED
    finally:
        teardown_logging()


if __name__ == "__main__":
    sys.exit(main())
