"""Path traversal protection for user-supplied relative paths."""

from __future__ import annotations

import os
from pathlib import Path


class PathTraversalError(ValueError):
    """User-supplied path is empty, malformed, or escapes its root directory."""

    pass


def safe_path(root: str | os.PathLike[str], user_path: object) -> Path:
    """
    Resolve an untrusted relative path against a trusted root directory.

    Resolution goes through os.path.join + abspath, so ".." segments and
    absolute-path overrides are normalized before the containment check.

    Args:
        root: Trusted directory the result must stay inside
        user_path: Untrusted path, typically from a request or AI output

    Returns:
        Absolute path equal to root or located under it

    Raises:
        PathTraversalError: If the path is empty, not a path, or escapes root
    """
    if not isinstance(user_path, (str, os.PathLike)):
        raise PathTraversalError("Path must be a non-empty string")
    user_path = os.fspath(user_path)
    if not isinstance(user_path, str) or not user_path or "\x00" in user_path:
        raise PathTraversalError("Path must be a non-empty string")

    base = os.path.abspath(os.fspath(root))
    resolved = os.path.abspath(os.path.join(base, user_path))

    if resolved != base and not resolved.startswith(base + os.sep):
        raise PathTraversalError(f'Path "{user_path}" resolves outside the allowed directory')

    return Path(resolved)
