"""
Uniform response envelope.

Every REST response, success or failure, has the shape::

    {"success": bool, "statusCode": int, "message": str, "meta": ..., "data": ...}
"""

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def send_response(
    data=None,
    message: str = "Request successful",
    status_code: int = status.HTTP_200_OK,
    meta: dict | None = None,
) -> JSONResponse:
    """
    Wrap `data` in the envelope. Pydantic models are serialized with their
    camelCase aliases.
    """
    body = {
        "success": status_code < 400,
        "statusCode": status_code,
        "message": message,
        "meta": meta,
        "data": jsonable_encoder(data, by_alias=True),
    }
    return JSONResponse(status_code=status_code, content=body)
