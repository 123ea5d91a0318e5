# backend/fs_routes.py
import os
import logging
import secrets
from enum import Enum
from typing import Optional

from fastapi import APIRouter, Depends, Request
from starlette.datastructures import UploadFile
from fastapi.responses import PlainTextResponse, Response, StreamingResponse

from errors import BadRequestError, ForbiddenError, NotFoundError, StorageError
from file_ops import (
    append_line, delete_entry, guard_root, is_directory, iter_file, make_dirs,
    open_for_stream, save_upload, write_text,
)
from listing import list_directory
from sandbox import relative_display, resolve_public, resolve_within, strip_sep
from settings import Settings

logger = logging.getLogger("fsoh")

router = APIRouter()

AUTH_HEADER = "Auth"
ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"]


class Route(str, Enum):
    ANON_READ = "anon_read"
    AUTH_READ = "auth_read"
    AUTH_WRITE = "auth_write"
    FORBIDDEN = "forbidden"


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def classify(method: str, auth: Optional[bytes], token: bytes) -> Route:
    """
    Map (method, credential) onto one of four outcomes. A request that carries an
    Auth header is never downgraded to anonymous access, even for GET.
    """
    if not auth:
        return Route.ANON_READ if method == "GET" else Route.FORBIDDEN
    if not token or not secrets.compare_digest(auth, token):
        return Route.FORBIDDEN
    if method == "GET":
        return Route.AUTH_READ
    if method in WRITE_HANDLERS:
        return Route.AUTH_WRITE
    return Route.FORBIDDEN


def _modified(settings: Settings, path: str, folder: bool) -> Response:
    rel = relative_display(settings.root, path)
    if folder:
        shown = rel.rstrip("/") + "/"
    else:
        shown = strip_sep(rel) if rel else ""
    # header values go out as latin-1, keep the raw utf-8 bytes of the name
    shown = shown.encode("utf-8").decode("latin-1")
    return PlainTextResponse(
        "",
        headers={"X-Server-Message": "200 Success", "X-Modified-Path": shown},
    )


def _form_value(request: Request, form, name: str) -> str:
    # form fields win, query string is the fallback
    v = form.get(name) if form is not None else None
    if v is None:
        v = request.query_params.get(name)
    return v if isinstance(v, str) else ""


async def _read_form(request: Request):
    ctype = request.headers.get("content-type", "")
    if ctype.startswith("multipart/form-data") or ctype.startswith("application/x-www-form-urlencoded"):
        return await request.form()
    return None


def serve(settings: Settings, path: str, public: bool, sort: Optional[str]) -> Response:
    try:
        isdir = is_directory(path)
    except StorageError as e:
        if public and isinstance(e.cause, (FileNotFoundError, NotADirectoryError)):
            raise NotFoundError()
        raise

    if isdir:
        header = os.path.join(settings.root.name, relative_display(settings.root, path)).rstrip("/") + "/"
        try:
            body = list_directory(
                path, header,
                private_dirs=settings.private_dirs if public else None,
                sort=sort,
            )
        except OSError as e:
            raise StorageError(e)
        return PlainTextResponse(body)

    f, ctype = open_for_stream(path)
    if f is None:
        return Response(status_code=204)
    return StreamingResponse(iter_file(f), media_type=ctype)


async def handle_post(request: Request, settings: Settings, path: str) -> Response:
    form = await _read_form(request)

    dirname = _form_value(request, form, "dir")
    if dirname:
        make_dirs(resolve_within(settings.root, dirname))
        return _modified(settings, path, folder=True)

    # everything below writes to path itself
    guard_root(path, str(settings.root))

    upload = form.get("file") if form is not None else None
    if isinstance(upload, UploadFile):
        await save_upload(upload, path)
        return _modified(settings, path, folder=False)

    content = _form_value(request, form, "content")
    if content:
        write_text(path, content.replace("\\n", "\n"))
        return _modified(settings, path, folder=False)

    raise BadRequestError("Missing 'file' or 'dir' or 'content' form")


async def handle_put(request: Request, settings: Settings, path: str) -> Response:
    guard_root(path, str(settings.root))
    form = await _read_form(request)
    content = _form_value(request, form, "content")
    if not content:
        raise BadRequestError("Missing 'content' form")
    append_line(path, content)
    return _modified(settings, path, folder=False)


async def handle_delete(request: Request, settings: Settings, path: str) -> Response:
    guard_root(path, str(settings.root))
    delete_entry(path)
    return _modified(settings, path, folder=False)


WRITE_HANDLERS = {
    "POST": handle_post,
    "PUT": handle_put,
    "DELETE": handle_delete,
}


@router.api_route("/{full_path:path}", methods=ALL_METHODS)
async def dispatch(request: Request, settings: Settings = Depends(get_settings)):
    method = request.method
    raw_path = request.scope["path"]
    auth = request.headers.get(AUTH_HEADER)
    route = classify(method, auth.encode("latin-1") if auth else None, settings.token)
    sort = request.query_params.get("sort")

    if route is Route.ANON_READ:
        target = resolve_public(settings.public_root, raw_path, settings.private_dirs)
        return serve(settings, target, public=True, sort=sort)

    if route is Route.FORBIDDEN:
        logger.info(f"[AUTH] Forbidden {method} {raw_path} (auth={'yes' if auth else 'no'})")
        raise ForbiddenError()

    target = resolve_within(settings.root, raw_path)
    if route is Route.AUTH_READ:
        return serve(settings, target, public=False, sort=sort)
    return await WRITE_HANDLERS[method](request, settings, target)
