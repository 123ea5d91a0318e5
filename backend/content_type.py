# backend/content_type.py
import mimetypes
from typing import BinaryIO

import chardet

SNIFF_LEN = 512
DEFAULT_TYPE = "application/octet-stream"

# signatures checked before falling back to text detection
_MAGIC = (
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"%PDF-", "application/pdf"),
    (b"PK\x03\x04", "application/zip"),
    (b"\x1f\x8b\x08", "application/x-gzip"),
)


def _sniff(head: bytes) -> str:
    for sig, mime in _MAGIC:
        if head.startswith(sig):
            return mime
    if head.startswith(b"RIFF") and head[8:12] == b"WEBP":
        return "image/webp"
    if b"\x00" in head:
        return DEFAULT_TYPE
    try:
        head.decode("utf-8")
        return "text/plain; charset=utf-8"
    except UnicodeDecodeError:
        pass
    enc = chardet.detect(head).get("encoding")
    if enc:
        return f"text/plain; charset={enc.lower()}"
    return DEFAULT_TYPE


def detect_content_type(f: BinaryIO, path: str) -> str:
    """
    Extension first, content sniffing second. Leaves f positioned at the start.
    Read or seek failures are raised to the caller as OSError.
    """
    guessed, _ = mimetypes.guess_type(path)
    if guessed:
        if guessed.startswith("text/"):
            guessed += "; charset=utf-8"
        return guessed

    head = f.read(SNIFF_LEN)
    f.seek(0)
    return _sniff(head)
