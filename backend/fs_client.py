# backend/fs_client.py
import re
from dataclasses import dataclass, field
from typing import List, Optional

import aiohttp

_GLYPH = re.compile(r"^(└|├)── ")
_COUNT = re.compile(r"^(\d+) (?:directory|directories), (\d+) (?:file|files)$")


class FsClientError(Exception):
    def __init__(self, status: int, message: str):
        self.status = status
        self.message = message
        super().__init__(f"{status}: {message}")


@dataclass
class Listing:
    path: str
    directories: List[str] = field(default_factory=list)
    files: List[str] = field(default_factory=list)
    dir_count: int = 0
    file_count: int = 0


def parse_listing(text: str) -> Listing:
    """
    Turn a rendered directory listing back into names and counts.

    The layout is the header line, one glyph-prefixed line per entry, a blank
    line and the summary line. Directory names carry a trailing "/".
    """
    lines = text.rstrip("\n").split("\n")
    if len(lines) < 3 or lines[-2] != "":
        raise ValueError("Not a directory listing")
    m = _COUNT.match(lines[-1])
    if not m:
        raise ValueError(f"Bad summary line: {lines[-1]!r}")

    out = Listing(path="/" + lines[0], dir_count=int(m.group(1)), file_count=int(m.group(2)))
    for ln in lines[1:-2]:
        name = _GLYPH.sub("", ln)
        if name == ln:
            raise ValueError(f"Bad entry line: {ln!r}")
        if name.endswith("/"):
            out.directories.append(name[:-1])
        else:
            out.files.append(name)
    return out


class FsClient:
    """Small async client for a fs-over-http server."""

    def __init__(self, base_url: str, token: Optional[str] = None, timeout: float = 30.0):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _headers(self):
        return {"Auth": self.token} if self.token else {}

    async def _request(self, method: str, path: str, **kwargs):
        async with aiohttp.ClientSession(timeout=self.timeout) as s:
            async with s.request(method, self._url(path), headers=self._headers(), **kwargs) as r:
                body = await r.read()
                if r.status >= 400:
                    raise FsClientError(r.status, body.decode("utf-8", errors="replace"))
                return r.headers, body

    async def _mutate(self, method: str, path: str, **kwargs) -> str:
        headers, _ = await self._request(method, path, **kwargs)
        return headers.get("X-Modified-Path", "")

    async def read(self, path: str) -> bytes:
        _, body = await self._request("GET", path)
        return body

    async def get_dir(self, path: str = "/", sort: Optional[str] = None) -> Listing:
        params = {"sort": sort} if sort else None
        _, body = await self._request("GET", path, params=params)
        return parse_listing(body.decode("utf-8"))

    async def mkdir(self, dirname: str) -> str:
        return await self._mutate("POST", "/", data={"dir": dirname})

    async def write(self, path: str, content: str) -> str:
        # the server turns a literal backslash-n into a newline
        return await self._mutate("POST", path, data={"content": content})

    async def upload(self, path: str, data: bytes, filename: str = "upload") -> str:
        form = aiohttp.FormData()
        form.add_field("file", data, filename=filename, content_type="application/octet-stream")
        return await self._mutate("POST", path, data=form)

    async def append(self, path: str, content: str) -> str:
        return await self._mutate("PUT", path, data={"content": content})

    async def delete(self, path: str) -> str:
        return await self._mutate("DELETE", path)
