"""Content hashing utilities for asset fingerprinting."""

import hashlib
import posixpath


def hash_bytes(data: bytes) -> str:
    """
    Compute a deterministic digest of raw file contents.

    MD5 is used as a cache key only, so the digest changes whenever the
    bytes change and stays identical across publishes otherwise.

    Args:
        data: Raw file bytes

    Returns:
        32-character hexadecimal digest
    """
    return hashlib.md5(data, usedforsecurity=False).hexdigest()


def fingerprint_path(rel_path: str, digest: str) -> str:
    """
    Insert a digest before the final extension of a relative POSIX path.

    "css/bootstrap.min.css" -> "css/bootstrap.min.<digest>.css"
    "fonts/LICENSE"         -> "fonts/LICENSE.<digest>"

    Args:
        rel_path: Asset path relative to the asset root
        digest: Hex digest of the asset's contents

    Returns:
        Fingerprinted relative path in the same directory
    """
    directory, name = posixpath.split(rel_path)
    stem, ext = posixpath.splitext(name)
    # splitext treats a leading dot as part of the stem (".htaccess" has no ext)
    fingerprinted = f"{stem}.{digest}{ext}"
    return posixpath.join(directory, fingerprinted) if directory else fingerprinted
