import argparse
import os
import signal
import sys

import yaml

from shared.logger_client import LoggerClient, setup_logging

from .config import DEFAULT_CONFIG_PATH, load_config
from .supervisor import Supervisor

SERVICE_NAME = "node_agent_service"

logger = LoggerClient(service_name=SERVICE_NAME)


def build_parser():
    parser = argparse.ArgumentParser(
        prog="node-agent",
        description="Keeps a websocket session to the coordination server and answers ping/info commands.",
    )
    parser.add_argument("--sid", type=int, default=0, help="session id of this node, e.g. --sid=7")
    parser.add_argument("--config", default=None, help=f"config file (default: {DEFAULT_CONFIG_PATH})")
    return parser


def parse_args(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.sid <= 0:
        parser.error("--sid must be a positive integer, e.g. --sid=7")
    if args.config is not None and not os.path.exists(args.config):
        parser.error(f"config file not found: {args.config}")
    return args


def main(argv=None):
    args = parse_args(argv)

    try:
        cfg = load_config(args.sid, path=args.config or DEFAULT_CONFIG_PATH)
    except (ValueError, OSError, yaml.YAMLError) as e:
        print(f"[{SERVICE_NAME}] invalid configuration: {e}", file=sys.stderr, flush=True)
        return 1

    setup_logging(cfg.log_level)
    logger.info("starting", extra={"sid": cfg.sid, "url": cfg.server_url})

    supervisor = Supervisor(cfg)
    signal.signal(signal.SIGTERM, lambda signum, frame: supervisor.stop())

    try:
        supervisor.run()
    except KeyboardInterrupt:
        supervisor.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
