# backend/settings.py
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, Iterable

from errors import ConfigError

OWNER_PERM = 0o700
DEFAULT_MAX_BODY = 100 * 1024 * 1024


def _truthy(v: str) -> bool:
    return v.lower() in ("1", "true", "yes")


def _strip_trailing_sep(p: str) -> str:
    return p.rstrip("/") or "/"


def read_token(path: str) -> bytes:
    try:
        with open(path, "rb") as f:
            raw = f.read()
    except OSError as e:
        raise ConfigError(f"Unable to read token file '{path}': {e}")
    return raw.rstrip(b"\r\n")


def read_private_dirs(path: str, public_root: Path) -> FrozenSet[str]:
    """
    One directory per line, relative to the public root. Blank lines are ignored
    and a missing file simply means nothing is private.
    """
    if not os.path.isfile(path):
        return frozenset()
    with open(path, "r", encoding="utf-8") as f:
        lines = [ln.strip() for ln in f.read().splitlines()]
    return normalize_private_dirs((ln for ln in lines if ln), public_root)


def normalize_private_dirs(entries: Iterable[str], public_root: Path) -> FrozenSet[str]:
    out = set()
    for e in entries:
        rel = e.lstrip("/")
        out.add(_strip_trailing_sep(os.path.normpath(os.path.join(str(public_root), rel))))
    return frozenset(out)


@dataclass(frozen=True)
class Settings:
    root: Path
    token: bytes
    private_dirs: FrozenSet[str] = field(default_factory=frozenset)
    host: str = "localhost"
    port: int = 6060
    compress: bool = True
    max_body_size: int = DEFAULT_MAX_BODY

    @property
    def public_root(self) -> Path:
        return self.root / "public"

    @property
    def addr(self) -> str:
        return f"{self.host}:{self.port}"

    @classmethod
    def from_env(cls) -> "Settings":
        root = Path(os.getenv("FSOH_ROOT", "filesystem")).absolute()
        token = read_token(os.getenv("FSOH_TOKEN_FILE", "token"))
        private = read_private_dirs(os.getenv("FSOH_PRIVATE_FILE", "private_folders"), root / "public")
        return cls(
            root=root,
            token=token,
            private_dirs=private,
            host=os.getenv("FSOH_HOST", "localhost"),
            port=int(os.getenv("FSOH_PORT", "6060")),
            compress=_truthy(os.getenv("FSOH_COMPRESS", "true")),
            max_body_size=int(os.getenv("FSOH_MAX_BODY_SIZE", str(DEFAULT_MAX_BODY))),
        )

    def ensure_roots(self) -> None:
        # mkdir's mode is masked by umask, chmod only the dirs we create
        for d in (self.root, self.public_root):
            if not d.exists():
                d.mkdir(mode=OWNER_PERM, parents=True, exist_ok=True)
                os.chmod(d, OWNER_PERM)
