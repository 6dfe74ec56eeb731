#!/usr/bin/env python
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from mediaservices import MediaServicesError, create_context


def main() -> None:
    parser = argparse.ArgumentParser(description="Create a streaming origin and wait for it to be provisioned")
    parser.add_argument("--name", required=True, help="Origin name")
    parser.add_argument("--reserved-units", type=int, default=1, help="Reserved streaming units")
    parser.add_argument("--description", default=None, help="Optional description")
    parser.add_argument("--timeout", type=float, default=None, help="Give up after this many seconds")
    parser.add_argument("--no-wait", action="store_true", help="Print the operation id and return immediately")
    parser.add_argument("--verbose", action="store_true", help="Log every poll")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )

    with create_context() as context:
        try:
            if args.no_wait:
                operation = context.origins.send_create_operation(args.name, args.reserved_units, args.description)
                print(f"Operation submitted: {operation.id}")
                return
            origin = context.origins.create(
                args.name,
                args.reserved_units,
                args.description,
                timeout=args.timeout,
            )
        except MediaServicesError as exc:
            print(f"Origin creation failed: {exc}", file=sys.stderr)
            raise SystemExit(1) from exc

    print(f"Origin created: {origin.id} ({origin.name}, {origin.reserved_units} units, state={origin.state})")


if __name__ == "__main__":
    main()
