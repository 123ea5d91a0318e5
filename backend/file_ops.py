# backend/file_ops.py
import os
import stat
import logging
from typing import BinaryIO, Iterator, Optional, Tuple

from fastapi import UploadFile

from content_type import detect_content_type
from errors import RootModificationError, StorageError
from settings import OWNER_PERM

CHUNK = 1024 * 1024  # 1 MiB

logger = logging.getLogger("fsoh")


def guard_root(path: str, root: str) -> None:
    if os.path.normpath(path) == os.path.normpath(root):
        raise RootModificationError()


def make_dirs(path: str) -> None:
    try:
        os.makedirs(path, mode=OWNER_PERM, exist_ok=True)
    except OSError as e:
        raise StorageError(e)
    logger.info(f"[FS] Created directory {path}")


def write_text(path: str, content: str) -> int:
    try:
        with open(path, "w", encoding="utf-8", newline="") as f:
            n = f.write(content)
    except OSError as e:
        raise StorageError(e)
    logger.info(f"[FS] Wrote {path} ({n} chars)")
    return n


async def save_upload(upload: UploadFile, path: str) -> int:
    """Stream an UploadFile to path in chunks, overwriting whatever was there."""
    size = 0
    try:
        with open(path, "wb") as out:
            while True:
                chunk = await upload.read(CHUNK)
                if not chunk:
                    break
                out.write(chunk)
                size += len(chunk)
    except OSError as e:
        raise StorageError(e)
    logger.info(f"[FS] Saved upload {upload.filename!r} -> {path} ({size} bytes)")
    return size


def read_existing(path: str) -> bytes:
    # anything unreadable counts as no prior content, bytes are kept as-is
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError:
        return b""


def append_line(path: str, content: str) -> int:
    data = read_existing(path) + content.encode("utf-8") + b"\n"
    try:
        with open(path, "wb") as f:
            n = f.write(data)
    except OSError as e:
        raise StorageError(e)
    logger.info(f"[FS] Appended to {path} ({n} bytes)")
    return n


def delete_entry(path: str) -> None:
    try:
        st = os.lstat(path)
    except OSError as e:
        raise StorageError(e)
    try:
        if stat.S_ISDIR(st.st_mode):
            os.rmdir(path)
        else:
            os.remove(path)
    except OSError as e:
        raise StorageError(e)
    logger.info(f"[FS] Deleted {path}")


def is_directory(path: str) -> bool:
    try:
        return stat.S_ISDIR(os.stat(path).st_mode)
    except OSError as e:
        raise StorageError(e)


def open_for_stream(path: str) -> Tuple[Optional[BinaryIO], str]:
    """
    Open path for download. Returns (None, "") for a readable empty file,
    otherwise the open handle and its content type. The caller owns the handle.
    """
    try:
        f = open(path, "rb")
    except OSError as e:
        raise StorageError(e)
    try:
        if os.fstat(f.fileno()).st_size == 0:
            f.close()
            return None, ""
        ctype = detect_content_type(f, path)
    except OSError as e:
        f.close()
        raise StorageError(e)
    return f, ctype


def iter_file(f: BinaryIO) -> Iterator[bytes]:
    try:
        while True:
            chunk = f.read(CHUNK)
            if not chunk:
                break
            yield chunk
    finally:
        f.close()
