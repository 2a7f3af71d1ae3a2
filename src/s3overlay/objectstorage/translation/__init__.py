"""Virtual path translation through the metadata map."""

from .metadata import load_metadata, metadata_key, parse_metadata
from .path_translator import PathTranslator, shard

__all__ = [
    "PathTranslator",
    "load_metadata",
    "metadata_key",
    "parse_metadata",
    "shard",
]
