from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from app import config
from app.logger import get_logger

logger = get_logger(__name__)

AUTH_ERROR_STATUS = {
    "USER_EXISTS": status.HTTP_409_CONFLICT,
    "INVALID_CREDENTIALS": status.HTTP_401_UNAUTHORIZED,
    "ACCOUNT_DEACTIVATED": status.HTTP_403_FORBIDDEN,
    "INVALID_TOKEN": status.HTTP_401_UNAUTHORIZED,
    "INVALID_REFRESH_TOKEN": status.HTTP_401_UNAUTHORIZED,
    "INVALID_RESET_TOKEN": status.HTTP_400_BAD_REQUEST,
    "AUTH_ERROR": status.HTTP_400_BAD_REQUEST,
}


class AuthError(Exception):
    def __init__(self, message: str, code: str = "AUTH_ERROR"):
        super().__init__(message)
        self.message = message
        self.code = code

    @property
    def status_code(self) -> int:
        return AUTH_ERROR_STATUS.get(self.code, status.HTTP_400_BAD_REQUEST)


def validation_details(exc: RequestValidationError) -> list:
    details = []
    for error in exc.errors():
        # Drop the "body"/"query" prefix so fields read like the payload keys
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        message = error.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        details.append({"field": ".".join(location), "message": message})
    return details


async def auth_error_handler(request: Request, exc: AuthError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "code": exc.code},
    )


async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.info(f"Validation failed for {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "Validation failed",
            "code": "VALIDATION_ERROR",
            "details": validation_details(exc),
        },
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {str(exc)}")
    content = {"error": "Internal server error"}
    if not config.IS_PRODUCTION:
        content["details"] = str(exc)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AuthError, auth_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
