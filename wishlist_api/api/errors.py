# wishlist_api/api/errors.py
"""
Translate service errors and request validation failures into HTTP responses.
"""
from typing import Any, Dict, List, Sequence

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from wishlist_api.core.errors import ErrorType, WishlistError
from wishlist_api.api.schemas.wishlist import ApiErrorResponse, ValidationErrorResponse

STATUS_BY_ERROR_TYPE = {
    ErrorType.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorType.WISHLIST_ALREADY_EXISTS: status.HTTP_409_CONFLICT,
    ErrorType.CONCURRENCY_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorType.MAX_ITEMS: 422,
}

FIELD_MESSAGES = {
    "user_id": "User id cannot be empty",
    "product_id": "Product id cannot be empty",
    "product_name": "Product name cannot be empty",
    "quantity": "Quantity cannot be null",
}


def status_for(exc: WishlistError) -> int:
    return STATUS_BY_ERROR_TYPE.get(exc.error_type, status.HTTP_500_INTERNAL_SERVER_ERROR)


def _field_path(loc: Sequence[Any]) -> str:
    # ("body", "products", 0, "product_name") -> "products[0].product_name"
    path = ""
    for part in loc:
        if part in ("body", "path", "query"):
            continue
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path += f".{part}" if path else str(part)
    return path


def _message_for(err: Dict[str, Any]) -> str:
    loc = err.get("loc") or ()
    field = loc[-1] if loc else ""
    if field == "quantity" and err.get("type") == "greater_than":
        return "Quantity must be greater than zero"
    return FIELD_MESSAGES.get(str(field), err.get("msg") or "Invalid value")


def validation_messages(exc: RequestValidationError) -> List[str]:
    return [f"{_field_path(err.get('loc') or ())}: {_message_for(err)}" for err in exc.errors()]


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(WishlistError)
    async def wishlist_error_handler(request: Request, exc: WishlistError):
        body = ApiErrorResponse(type=exc.error_type, message=exc.message)
        return JSONResponse(
            status_code=status_for(exc),
            content=body.model_dump(mode="json"),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        body = ValidationErrorResponse(errors=validation_messages(exc))
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body.model_dump(mode="json"))
