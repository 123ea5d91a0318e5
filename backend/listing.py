# backend/listing.py
import os
from typing import FrozenSet, List, NamedTuple, Optional

from sandbox import is_private

BRANCH = "├── "
LAST = "└── "


class Entry(NamedTuple):
    name: str
    is_dir: bool
    mtime: float


def _grammar(n: int, singular: str, plural: str) -> str:
    return f"{n} {singular if n == 1 else plural}"


def read_entries(path: str, private_dirs: Optional[FrozenSet[str]] = None) -> List[Entry]:
    """
    Read the immediate children of path. When private_dirs is given (anonymous
    access) any child matching one of them is left out.
    """
    out: List[Entry] = []
    with os.scandir(path) as it:
        for de in it:
            if private_dirs and is_private(os.path.join(path, de.name), private_dirs):
                continue
            st = de.stat(follow_symlinks=False)
            out.append(Entry(de.name, de.is_dir(), st.st_mtime))
    return out


def sort_entries(entries: List[Entry], sort: Optional[str] = None) -> List[Entry]:
    entries = list(entries)
    if sort == "date":
        entries.sort(key=lambda e: e.mtime)
    # stable, so date order (or read order) survives inside each group
    entries.sort(key=lambda e: not e.is_dir)
    return entries


def render_listing(header: str, entries: List[Entry]) -> str:
    """
    Render entries as a one level tree:

        filesystem/public/
        ├── docs/
        └── notes.txt

        1 directory, 1 file
    """
    if not entries:
        return f"{header}\n\n0 directories, 0 files\n"

    lines = [header]
    dirs = files = 0
    for i, e in enumerate(entries):
        glyph = LAST if i == len(entries) - 1 else BRANCH
        if e.is_dir:
            dirs += 1
            lines.append(f"{glyph}{e.name}/")
        else:
            files += 1
            lines.append(f"{glyph}{e.name}")
    lines.append("")
    lines.append(f"{_grammar(dirs, 'directory', 'directories')}, {_grammar(files, 'file', 'files')}")
    return "\n".join(lines) + "\n"


def list_directory(path: str, header: str, private_dirs: Optional[FrozenSet[str]] = None,
                   sort: Optional[str] = None) -> str:
    return render_listing(header, sort_entries(read_entries(path, private_dirs), sort))
