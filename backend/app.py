# backend/app.py
import os
import argparse
import logging
from dataclasses import replace
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from errors import FsError
from settings import Settings

logger = logging.getLogger("fsoh")
if not logger.handlers:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)s | %(message)s")

APP_TITLE = "fs-over-http"
TOO_LARGE = "Request body too large"
CORS_ORIGINS = [o.strip() for o in os.getenv("FSOH_CORS_ORIGINS", "*").split(",") if o.strip()]


class BodySizeLimit:
    """
    Reject bodies over max_body_size with 413. A declared Content-Length is
    checked up front, chunked bodies are counted as they are received.
    """

    def __init__(self, app, max_body_size: int):
        self.app = app
        self.max_body_size = max_body_size

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            return await self.app(scope, receive, send)

        request = Request(scope)
        length = request.headers.get("content-length")
        if length and length.isdigit() and int(length) > self.max_body_size:
            logger.warning(f"[HTTP] Rejected {request.method} {request.url.path}: body of {length} bytes")
            return await PlainTextResponse(TOO_LARGE, status_code=413)(scope, receive, send)

        received = 0

        async def limited_receive():
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_body_size:
                    logger.warning(f"[HTTP] Rejected {request.method} {request.url.path}: body over {self.max_body_size} bytes")
                    raise StarletteHTTPException(413, TOO_LARGE)
            return message

        await self.app(scope, limited_receive, send)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    settings.ensure_roots()

    app = FastAPI(title=APP_TITLE, docs_url=None, redoc_url=None, openapi_url=None)
    app.state.settings = settings

    # ---- Middleware -----------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Server-Message", "X-Modified-Path"],
    )
    if settings.compress:
        app.add_middleware(GZipMiddleware, minimum_size=500)

    app.add_middleware(BodySizeLimit, max_body_size=settings.max_body_size)

    # ---- Error rendering ------------------------------------------------------
    @app.exception_handler(FsError)
    async def fs_error_handler(request: Request, exc: FsError):
        if exc.status_code >= 500:
            logger.warning(f"[FS] {request.method} {request.url.path} failed: {exc.message}")
        return PlainTextResponse(exc.message, status_code=exc.status_code)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        # unsupported methods are reported the same way as a bad token
        if exc.status_code == 405:
            return PlainTextResponse("Forbidden", status_code=403)
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code)

    # ---- Routers (include AFTER app is created) -------------------------------
    from fs_routes import router as fs_router
    app.include_router(fs_router)

    logger.info(f"[FS] Serving {settings.root} (public: {settings.public_root}, "
                f"{len(settings.private_dirs)} private dir(s))")
    return app


# ---- Entry point --------------------------------------------------------------
def build_parser(defaults: Settings) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="fs-over-http", description="Serve a directory tree over HTTP")
    p.add_argument("--addr", default=defaults.addr, help="TCP address to listen to")
    p.add_argument("--compress", action=argparse.BooleanOptionalAction, default=defaults.compress,
                   help="Whether to enable transparent response compression")
    p.add_argument("--maxbodysize", type=int, default=defaults.max_body_size,
                   help="Maximum request body size in bytes, defaults to 100MiB")
    return p


def parse_addr(addr: str):
    host, _, port = addr.rpartition(":")
    if not host or not port.isdigit():
        raise ValueError(f"Invalid address '{addr}', expected host:port")
    return host.strip("[]"), int(port)


def main(argv=None):
    defaults = Settings.from_env()
    args = build_parser(defaults).parse_args(argv)
    host, port = parse_addr(args.addr)
    settings = replace(defaults, host=host, port=port, compress=args.compress, max_body_size=args.maxbodysize)
    logger.info(f"- Running fs-over-http on http://{settings.addr}")
    uvicorn.run(create_app(settings), host=host, port=port)


if __name__ == "__main__":
    main()
