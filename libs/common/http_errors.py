"""HTTP error responses shared by the FastAPI services.

Both services answer failures with ``{"message": "..."}`` and a status code
that carries the failure category, and answer wrong-method requests with a
bare 405.
"""

from fastapi import FastAPI, Request, status
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from libs.common.schemas import ErrorResult

# Error messages are part of the public contract
MSG_INVALID_ZIPCODE = "invalid zipcode"
MSG_SERVICE_UNAVAILABLE = "service unavailable"
MSG_INTERNAL_ERROR = "internal error"
MSG_ZIPCODE_NOT_FOUND = "can not find zipcode"
MSG_WEATHER_FAILED = "failed to get weather"


def error_response(status_code: int, message: str) -> JSONResponse:
    """Build a JSON error response with the shared ErrorResult body."""
    return JSONResponse(status_code=status_code, content=ErrorResult(message=message).model_dump())


def invalid_zipcode_response() -> JSONResponse:
    """422 response used for both unparseable bodies and malformed CEPs."""
    return error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, MSG_INVALID_ZIPCODE)


async def method_not_allowed_handler(
    request: Request, exc: StarletteHTTPException
) -> Response:
    """Answer 405 with no body; defer every other HTTP error to FastAPI."""
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        return Response(status_code=exc.status_code, headers=exc.headers)
    return await http_exception_handler(request, exc)


def install_error_handlers(app: FastAPI) -> None:
    """Register the shared HTTP exception handler on an application."""
    app.add_exception_handler(StarletteHTTPException, method_not_allowed_handler)
