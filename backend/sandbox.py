# backend/sandbox.py
import os
from pathlib import Path
from typing import FrozenSet, Union

from errors import NotFoundError, PathEscapeError


def strip_sep(p: str) -> str:
    """Drop trailing separators, keeping a bare "/" intact."""
    return p.rstrip("/") or "/"


def resolve_within(base: Union[str, Path], raw: str) -> str:
    """
    Join a user supplied path onto base and make sure the result stays inside it.

    Leading separators are removed so "/a" and "a" mean the same thing, and ".."
    segments are collapsed lexically before the containment check.
    """
    base = os.path.normpath(str(base))
    rel = raw.lstrip("/")
    target = os.path.normpath(os.path.join(base, rel))
    if target != base and not target.startswith(base + os.sep):
        raise PathEscapeError()
    return target


def is_private(path: str, private_dirs: FrozenSet[str]) -> bool:
    # exact match only, children of a private dir are still reachable by name
    return strip_sep(path) in private_dirs


def resolve_public(public_root: Union[str, Path], raw: str, private_dirs: FrozenSet[str]) -> str:
    """Anonymous resolution: escapes and private dirs both look like a missing path."""
    try:
        target = resolve_within(public_root, raw)
    except PathEscapeError:
        raise NotFoundError()
    if is_private(target, private_dirs):
        raise NotFoundError()
    return target


def relative_display(root: Union[str, Path], path: str) -> str:
    """Path as shown to clients: relative to root, "" for root itself."""
    rel = os.path.relpath(path, str(root))
    return "" if rel == "." else rel
