from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import settings
from .deps import get_file_ops
from .errors import ErrorKind
from .logging_setup import setup_logging
from .routers import files

logger = logging.getLogger(__name__)


def _parse_cors_origins(value: str) -> list[str]:
    return [origin.strip() for origin in value.split(',') if origin.strip()]


@asynccontextmanager
async def lifespan(_app: FastAPI):
    setup_logging(settings.log_level)
    ops = get_file_ops()
    ops.root.mkdir(parents=True, exist_ok=True)
    logger.info('Serving files from %s', ops.root)
    yield


app = FastAPI(title=settings.app_name, lifespan=lifespan)

cors_origins = _parse_cors_origins(settings.cors_origins)
if cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_methods=['GET', 'POST', 'DELETE', 'OPTIONS'],
        allow_headers=['Content-Type'],
        expose_headers=['Content-Disposition', 'X-Error-Code', 'X-File-Size'],
    )


@app.middleware('http')
async def access_log_middleware(request: Request, call_next):
    start = time.monotonic()
    response = await call_next(request)
    elapsed_ms = (time.monotonic() - start) * 1000
    logger.info('%s %s %s %.1fms', request.method, request.url.path, response.status_code, elapsed_ms)
    return response


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    headers = dict(exc.headers or {})
    code = headers.get('X-Error-Code')
    body = {'ok': False, 'detail': exc.detail}
    if code:
        body['code'] = code
    return JSONResponse(body, status_code=exc.status_code, headers=headers or None)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    fields = ', '.join('.'.join(str(p) for p in err.get('loc', ())) for err in exc.errors())
    detail = f'Invalid request: {fields}' if fields else 'Invalid request'
    return JSONResponse(
        {'ok': False, 'code': ErrorKind.INVALID_PATH.value, 'detail': detail},
        status_code=ErrorKind.INVALID_PATH.status_code,
        headers={'X-Error-Code': ErrorKind.INVALID_PATH.value},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception('Unhandled error on %s %s', request.method, request.url.path, exc_info=exc)
    if request.url.path.startswith('/api/'):
        return JSONResponse(
            {'ok': False, 'code': ErrorKind.INTERNAL_FAILURE.value, 'detail': 'Internal server error. Please try again.'},
            status_code=500,
        )
    return PlainTextResponse('Unexpected error', status_code=500)


@app.get('/healthz')
def healthz():
    return {'ok': True}


app.include_router(files.router)


class SpaStaticFiles(StaticFiles):
    """Static frontend that answers unknown non-API routes with index.html."""

    async def get_response(self, path: str, scope):
        try:
            return await super().get_response(path, scope)
        except StarletteHTTPException as exc:
            if exc.status_code != 404 or path.split('/', 1)[0] == 'api':
                raise
            return await super().get_response('index.html', scope)


if settings.static_dir and Path(settings.static_dir).is_dir():
    app.mount('/', SpaStaticFiles(directory=settings.static_dir, html=True), name='static')
