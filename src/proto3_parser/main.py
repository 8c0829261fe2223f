from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from proto3_parser.errors import ParseError
from proto3_parser.generator.summary_generator import generate_summary, summary_dict
from proto3_parser.parser.proto_parser import Parser


def run(proto_path: str, output_format: str = "text") -> None:
    """Parse one .proto file and print its summary."""
    if not Path(proto_path).is_file():
        print(f"No such .proto file: {proto_path}", file=sys.stderr)
        sys.exit(1)

    parser = Parser()
    try:
        parser.read_file(proto_path)
    except ParseError as e:
        print(f"FATAL: {e}", file=sys.stderr)
        sys.exit(1)

    if output_format == "json":
        print(json.dumps(summary_dict(parser.proto_file), indent=2))
    else:
        print(generate_summary(parser.proto_file), end="")


def main():
    parser = argparse.ArgumentParser(
        description="Describe the contents of a proto3 file",
    )
    parser.add_argument(
        "--proto-file",
        required=True,
        help="Path to the .proto file to parse",
    )
    parser.add_argument(
        "--format",
        choices=("text", "json"),
        default="text",
        help="Output format (default: text)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log parser debug output",
    )

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    run(args.proto_file, args.format)


if __name__ == "__main__":
    main()
