from __future__ import annotations

import argparse
import logging

from .core.keys import default_app_name
from .runtime.server import run


def main() -> None:
    p = argparse.ArgumentParser(prog="scenekv", description="scenekv: scene key-value server for simulator viewers")
    p.add_argument("--host", default="127.0.0.1")
    p.add_argument("--port", type=int, default=8000)
    p.add_argument("--app", default=default_app_name(), help="web app name used in key prefixes")
    p.add_argument("--log-level", default="info")
    args = p.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    srv = run(host=args.host, port=args.port, app_name=args.app, log_level=args.log_level)
    print(srv.url)

    # Block forever (so it behaves like a normal CLI server)
    import time

    while True:
        time.sleep(3600)


if __name__ == "__main__":
    main()
