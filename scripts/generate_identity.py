import argparse

from core.identity import derive_identity, generate_random_identity
from core.logging_utils import configure_logging


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Derive a participant identity from a private key, or generate a fresh one."
    )
    parser.add_argument(
        "--name",
        default=None,
        help="Display name; produces a client|<name> alias instead of eth|<address>.",
    )
    parser.add_argument(
        "--private-key",
        default=None,
        help="Existing secp256k1 private key (64 hex chars). A random key is generated when omitted.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    configure_logging()
    args = parse_args(argv)
    if args.private_key:
        identity = derive_identity(args.private_key, args.name)
    else:
        identity = generate_random_identity(args.name)

    print("Alias:", identity.alias)
    print("Address:", identity.address)
    print("Public Key:", identity.public_key)
    if not args.private_key:
        print("Private Key (shown once):", identity.private_key)


if __name__ == "__main__":
    main()
