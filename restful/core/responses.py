"""
Uniform response envelope `{message, data}` shared by the user endpoints.
"""
from typing import Any, Dict, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from starlette.status import HTTP_200_OK, HTTP_201_CREATED, HTTP_500_INTERNAL_SERVER_ERROR


def _envelope(message: str, data: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    body: Dict[str, Any] = {"message": message}
    if data is not None:
        body["data"] = jsonable_encoder(data)
    return body


class ServerResponse:
    @staticmethod
    def success(message: str, data: Optional[Dict[str, Any]] = None, status_code: int = HTTP_200_OK) -> JSONResponse:
        return JSONResponse(status_code=status_code, content=_envelope(message, data if data is not None else {}))

    @staticmethod
    def created(message: str, data: Optional[Dict[str, Any]] = None) -> JSONResponse:
        return ServerResponse.success(message, data, status_code=HTTP_201_CREATED)

    @staticmethod
    def error(
        message: str,
        status_code: int = HTTP_500_INTERNAL_SERVER_ERROR,
        data: Optional[Dict[str, Any]] = None,
    ) -> JSONResponse:
        """Error envelope; `data` is omitted from the body when not given."""
        return JSONResponse(status_code=status_code, content=_envelope(message, data))
