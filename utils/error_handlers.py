"""
Manejador global de errores: único punto que traduce excepciones a HTTP
"""

import logging
from typing import Any, Dict

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from utils.exceptions import ApiError

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "Error interno del servidor"


def error_envelope(message: str) -> Dict[str, Any]:
    return {"success": False, "error": message or DEFAULT_ERROR_MESSAGE}


def _status_from(exc: Exception) -> int:
    for attr in ("status_code", "statusCode"):
        code = getattr(exc, attr, None)
        if isinstance(code, int) and 400 <= code <= 599:
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"Error no controlado: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_envelope())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = "; ".join(str(error.get("msg", "")) for error in errors) or "Solicitud inválida"
    logger.warning(f"{request.method} {request.url.path} -> 400: {message}")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=error_envelope(message))


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    logger.warning(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Error no controlado: {exc}", exc_info=exc)
    return JSONResponse(status_code=_status_from(exc), content=error_envelope(str(exc)))


def register_error_handlers(app: FastAPI) -> None:
    """Instala los manejadores; se llama al final del ensamblado de la app"""
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
