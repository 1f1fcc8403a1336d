"""clashpick command-line interface"""

import argparse
import logging
import sys
from pathlib import Path
from typing import NoReturn, Optional, Sequence

from clashpick import __version__
from clashpick.actions import feature_run
from clashpick.cli_logging import logging_setup
from clashpick.common.config import (
    Config,
    ConfigLoader,
    featureMode_resolve,
    runConfigFromEnviron_resolve,
)
from clashpick.common.errors import ClashPickError
from clashpick.common.types import RunConfig

logger = logging.getLogger(__name__)

ENVIRONMENT_HELP = """\
Environment variables (overridden by command line arguments):

    CLASH_PORT          Clash external controller port. If not specified,
                        9090, 9091, 19090, 19091 will be tried sequentially.
    CLASH_ADDR          Clash external controller address. Defaults to
                        127.0.0.1.
    CLASH_SCHEME        Clash external controller scheme. Defaults to http.
    CLASH_GROUPS        Which groups to select from. Can be group names or
                        group indexes (starts from 0), separated by commas.
                        E.g. "My Proxy,Video Media,3".
    CLASH_TEST_URL      Delay test URL. Defaults to
                        http://connectivitycheck.gstatic.com/generate_204
"""


def arguments_parse(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments

    Args:
        argv: Argument list; sys.argv[1:] when None.

    Returns:
        Parsed CLI arguments.
    """
    parser = argparse.ArgumentParser(
        prog="clashpick",
        description="Select proxy group nodes and run delay tests through a Clash external controller",
        epilog=ENVIRONMENT_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("--version", action="version", version=f"clashpick {__version__}")

    parser.add_argument(
        "groups",
        nargs="*",
        metavar="GROUP",
        help="Group names or indexes to select from (overrides CLASH_GROUPS)",
    )

    parser.add_argument(
        "-p", "--port", type=int, default=None, help="Clash external controller port"
    )

    parser.add_argument(
        "-a", "--addr", type=str, default=None, help="Clash external controller address"
    )

    parser.add_argument(
        "-e", "--scheme", type=str, default=None, help="Clash external controller scheme"
    )

    parser.add_argument("-u", "--url", type=str, default=None, dest="test_url", help="Delay test URL")

    parser.add_argument(
        "-s",
        "--select",
        action="store_true",
        help="(Select) Use node select feature. This is the default feature",
    )

    parser.add_argument(
        "-t",
        "--delay-test",
        action="store_true",
        dest="delay_test",
        help="(delay Test) Use delay test feature. Only 1 proxy group is used in this case",
    )

    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to config file (default: search standard locations)",
    )

    parser.add_argument(
        "--debug", action="store_true", help="Enable debug logging (overrides config)"
    )

    parser.add_argument(
        "--info", action="store_true", help="Enable info logging (overrides config)"
    )

    parser.add_argument(
        "--warning", action="store_true", help="Enable warning logging (overrides config)"
    )

    parser.add_argument(
        "--error", action="store_true", help="Enable error logging (overrides config)"
    )

    parser.add_argument(
        "--critical", action="store_true", help="Enable critical logging (overrides config)"
    )

    return parser.parse_args(argv)


def logLevelOverride_get(args: argparse.Namespace) -> str | None:
    """
    Resolve explicit log level override flags.

    Args:
        args: Parsed CLI args.

    Returns:
        Selected log level or None.
    """
    if args.critical:
        return "CRITICAL"
    if args.error:
        return "ERROR"
    if args.warning:
        return "WARNING"
    if args.info:
        return "INFO"
    if args.debug:
        return "DEBUG"
    return None


def configFile_load(args: argparse.Namespace) -> Config:
    """
    Load the config file named by --config or found in standard locations.

    Args:
        args: Parsed CLI args.

    Returns:
        Parsed config file, or defaults when none exists.
    """
    config_path: Path | None = Path(args.config).expanduser() if args.config else None
    return ConfigLoader.config_load(config_path)


def runConfig_build(args: argparse.Namespace, file_config: Config) -> RunConfig:
    """
    Resolve the run configuration from args, environment and config file.

    Args:
        args: Parsed CLI args.
        file_config: Loaded config file.

    Returns:
        Immutable run configuration.
    """
    return runConfigFromEnviron_resolve(
        file_config,
        port=args.port,
        addr=args.addr,
        scheme=args.scheme,
        test_url=args.test_url,
        groups=args.groups,
        feature=featureMode_resolve(args.select, args.delay_test),
    )


def banner_print(config: RunConfig) -> None:
    """Print the resolved controller endpoint, groups and test URL"""
    print(
        f"Using:\n"
        f"    Clash external controller: {config.scheme}://{config.addr}:{config.portDisplay_get()}\n"
        f"    Groups: [{' '.join(config.groups)}]\n"
        f"    TestURL: {config.test_url}\n"
    )


def main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """
    Main entry point for the clashpick command

    Args:
        argv: Argument list; sys.argv[1:] when None.
    """
    args = arguments_parse(argv)

    try:
        file_config: Config = configFile_load(args)
        logging_setup(file_config.logging, logLevelOverride_get(args))

        config: RunConfig = runConfig_build(args, file_config)
        logger.debug(f"Resolved configuration: {config}")
        banner_print(config)
        feature_run(config)
        sys.exit(0)

    except KeyboardInterrupt:
        print("\nInterrupted.")
        sys.exit(130)
    except ClashPickError as e:
        logger.debug("Stop, because error encountered", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
