import argparse
import sys

from core.content_hash import create_hashable_content, format_for_display, verify
from core.logging_utils import configure_logging


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Compute or verify the sha256 fingerprint of a submission."
    )
    parser.add_argument("--title", required=True)
    parser.add_argument("--description", required=True)
    parser.add_argument("--url", default=None)
    parser.add_argument(
        "--timestamp",
        type=int,
        default=None,
        help="Unix epoch milliseconds (default: now).",
    )
    parser.add_argument(
        "--verify",
        dest="expected_hash",
        default=None,
        help="Expected hash, bare hex or sha256:-prefixed. Exit status is 1 on mismatch.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    configure_logging()
    args = parse_args(argv)
    content = create_hashable_content(args.title, args.description, args.url, args.timestamp)

    if args.expected_hash is not None:
        verified = verify(content, args.expected_hash)
        print("Verified:", "yes" if verified else "no")
        return 0 if verified else 1

    print("Timestamp:", content.timestamp)
    print("Hash:", format_for_display(content))
    return 0


if __name__ == "__main__":
    sys.exit(main())
