import argparse
import logging
import os
import sys
from typing import List, Optional

from .codec import (
    CodecConfig,
    Hashids,
    load_codec_key,
    save_codec_key,
)

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _read_text(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def _write_text(path: str, text: str) -> None:
    if path == "-":
        sys.stdout.write(text)
        sys.stdout.flush()
    else:
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
    )


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Encode integers into short salted hashids and back"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--salt")
    common.add_argument("--min-length", type=int, default=None)
    common.add_argument("--alphabet")
    common.add_argument("--separators")
    common.add_argument(
        "--key",
        help="Path to a codec key file; explicit options override its values",
    )
    common.add_argument(
        "--save-key",
        help="Write the effective codec settings to this path",
    )
    common.add_argument(
        "--hex",
        action="store_true",
        help="Treat the plain value as a hex string instead of integers",
    )
    common.add_argument(
        "--input",
        default=None,
        help="Read the value from a file ('-' for stdin) instead of the arguments",
    )
    common.add_argument("--output", default="-")
    common.add_argument("-v", "--verbose", action="store_true")

    enc = subparsers.add_parser("encode", parents=[common])
    enc.add_argument("values", nargs="*", help="Integers (or one hex string with --hex)")

    dec = subparsers.add_parser("decode", parents=[common])
    dec.add_argument("hashid", nargs="?")

    return parser


def resolve_config(args) -> CodecConfig:
    if args.key is not None:
        if not os.path.exists(args.key):
            raise ValueError(f"--key file not found: {args.key}")
        cfg = load_codec_key(args.key)
    else:
        cfg = CodecConfig()

    if args.salt is not None:
        cfg.salt = args.salt
    if args.min_length is not None:
        cfg.min_length = args.min_length
    if args.alphabet is not None:
        cfg.alphabet = args.alphabet
    if args.separators is not None:
        cfg.separators = args.separators
    return cfg


def _build_codec(args) -> Hashids:
    cfg = resolve_config(args)
    hashids = Hashids.from_config(cfg)
    if args.save_key is not None:
        save_codec_key(cfg, args.save_key)
        logger.info("Saved codec key to %s", args.save_key)
    return hashids


def _parse_numbers(tokens: List[str]) -> List[int]:
    numbers = []
    for token in tokens:
        try:
            numbers.append(int(token))
        except ValueError:
            raise ValueError(f"not an integer: {token!r}") from None
    return numbers


def run_encode(args) -> None:
    hashids = _build_codec(args)
    tokens = _read_text(args.input).split() if args.input is not None else args.values
    if not tokens:
        raise ValueError("nothing to encode; pass values or --input")

    if args.hex:
        if len(tokens) != 1:
            raise ValueError("--hex expects exactly one hex string")
        hashid = hashids.encode_hex(tokens[0])
    else:
        hashid = hashids.encode(_parse_numbers(tokens))
    _write_text(args.output, hashid + "\n")


def run_decode(args) -> None:
    hashids = _build_codec(args)
    hashid = _read_text(args.input).strip() if args.input is not None else args.hashid
    if not hashid:
        raise ValueError("nothing to decode; pass a hashid or --input")

    if args.hex:
        text = hashids.decode_hex(hashid)
    else:
        text = " ".join(str(number) for number in hashids.decode(hashid))
    _write_text(args.output, text + "\n")


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    try:
        if args.command == "encode":
            run_encode(args)
        elif args.command == "decode":
            run_decode(args)
        else:
            parser.error("Unknown command")
    except ValueError as exc:
        parser.error(str(exc))


__all__ = ["build_arg_parser", "resolve_config", "run_encode", "run_decode", "main"]
