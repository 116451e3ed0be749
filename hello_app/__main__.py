import argparse
import logging
import sys

from . import config
from .logging_config import configure_logging
from .server import BindError, run

LOG = logging.getLogger("hello_app")


def _parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="hello-app", description="Serve the hello world Flask app."
    )
    parser.add_argument(
        "--host", default=config.HOST, help="Interface to bind (default: %(default)s)."
    )
    parser.add_argument(
        "--port", type=int, default=config.PORT, help="Port to bind (default: %(default)s)."
    )
    parser.add_argument(
        "--log-level", default=config.LOG_LEVEL, help="Root log level (default: %(default)s)."
    )
    return parser.parse_args(argv)


def main(argv=None):
    args = _parse_args(argv)
    configure_logging(args.log_level)
    try:
        run(host=args.host, port=args.port)
    except BindError as e:
        LOG.error("Startup failed: %s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
