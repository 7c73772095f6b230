"""Entry point: interactive console for the database."""

import argparse
import logging
from typing import List, Optional

from src.relational_db.engine import run
from src.relational_db.utils import DATA_DIR


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="relational-db",
        description="Single-user relational database driven by a small SQL-like language.",
    )
    parser.add_argument("--data-dir", "-d", default=DATA_DIR,
                        help=f"Directory holding the databases (default: {DATA_DIR})")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = create_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s:%(name)s:%(message)s",
    )
    run(args.data_dir)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
