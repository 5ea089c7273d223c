"""
Entry point for the FairShare household cost splitter.

Usage:
    python main.py                 # launches the web app at localhost:5000
    python main.py --cli           # runs the terminal wizard
    python main.py --cli --reset   # forget saved answers first
"""

import argparse
import logging
import os

DEFAULT_CACHE_DIR = os.path.join(os.path.expanduser("~"), ".fairshare")


def main() -> None:
    parser = argparse.ArgumentParser(
        description="FairShare: split household costs by income",
    )
    parser.add_argument(
        "--cli",
        action="store_true",
        help="Run in terminal mode instead of launching the web app",
    )
    parser.add_argument(
        "--cache-dir",
        default=DEFAULT_CACHE_DIR,
        help="Where the terminal wizard keeps your previous answers",
    )
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Start over: clear saved answers before running the wizard",
    )
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=5000)
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.cli:
        from cli import run_cli
        from state import HouseholdStore, SnapshotStore

        store = HouseholdStore(storage=SnapshotStore(args.cache_dir))
        if args.reset:
            store.clear()
        run_cli(store)
    else:
        from app import run_web
        run_web(host=args.host, port=args.port)


if __name__ == "__main__":
    main()
