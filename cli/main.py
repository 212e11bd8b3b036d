"""ShareBox CLI entry point."""

import argparse
import os

from common.logging_config import setup_logging
from cli.config import DEFAULT_CONFIG_PATH
from cli.repl import repl_loop

DEFAULT_LOG_FILE = DEFAULT_CONFIG_PATH.parent / 'cli.log'


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='sharebox', description='Interactive ShareBox client')
    parser.add_argument('--debug', action='store_true', help='log at DEBUG level')
    parser.add_argument(
        '--log-file',
        default=os.getenv('SHAREBOX_CLI_LOG', str(DEFAULT_LOG_FILE)),
        help='where client logs are written (keeps them out of the prompt)',
    )
    return parser


def main(argv=None) -> None:
    args = build_arg_parser().parse_args(argv)
    level = 'DEBUG' if args.debug else os.getenv('LOG_LEVEL', 'WARNING')

    logger = setup_logging('cli', log_level=level, log_file=args.log_file)
    logger.info("ShareBox CLI started (log level %s)", level)

    try:
        repl_loop()
    except Exception:
        logger.exception("CLI terminated by unexpected error")
        raise
    finally:
        logger.info("ShareBox CLI stopped")


if __name__ == "__main__":
    main()
