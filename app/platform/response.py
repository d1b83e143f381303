from typing import Any, List, Optional

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def api_response(
    *,
    data: Optional[Any] = None,
    message: str = "Operation successful",
    status_code: int = status.HTTP_200_OK,
    code: Optional[str] = None,
    errors: Optional[List[dict]] = None,
) -> JSONResponse:
    """
    Single envelope for every JSON response the API returns.

    `status` is "success" below 400 and "error" otherwise. Error responses may
    carry a machine-readable `code` (e.g. TOKEN_EXPIRED) and field-level
    `errors`.
    """
    status_str = "success" if status_code < 400 else "error"
    content = {
        "status_code": status_code,
        "status": status_str,
        "message": message,
        "data": jsonable_encoder(data) if data is not None else {},
    }
    if code:
        content["code"] = code
    if errors is not None:
        content["errors"] = errors

    return JSONResponse(status_code=status_code, content=content)


def paginate(total: int, page: int, limit: int) -> dict:
    return {
        "current_page": page,
        "total_pages": (total + limit - 1) // limit if limit else 0,
        "limit": limit,
    }
