"""CLI shim for running the codec directly from the repository checkout."""

from hashid_codec.cli import main
from hashid_codec.codec import (
    CodecConfig,
    Hashids,
    load_codec_key,
    save_codec_key,
)

__all__ = [
    "CodecConfig",
    "Hashids",
    "load_codec_key",
    "main",
    "save_codec_key",
]


if __name__ == "__main__":
    main()
