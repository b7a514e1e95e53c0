from __future__ import annotations

import argparse
import logging

from api import run_server
from api.config import API_HOST, API_PORT
from api.mdns import set_mdns_enabled


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the Kinship API server")
    parser.add_argument("--host", default=API_HOST)
    parser.add_argument("--port", type=int, default=API_PORT)
    parser.add_argument("--log-level", default="info", choices=["debug", "info", "warning", "error"])
    parser.add_argument("--no-mdns", action="store_true", help="Do not advertise the server over mDNS")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    if args.no_mdns:
        set_mdns_enabled(False)

    run_server(host=args.host, port=args.port, log_level=args.log_level)


if __name__ == "__main__":
    main()
