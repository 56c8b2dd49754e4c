from .atomic import atomic_write_json, atomic_write_text, read_json, remove_file
from .hashing import canonical_json, hash_json, sha256_hash, tab_filename

__all__ = [
    "atomic_write_json",
    "atomic_write_text",
    "read_json",
    "remove_file",
    "canonical_json",
    "hash_json",
    "sha256_hash",
    "tab_filename",
]
