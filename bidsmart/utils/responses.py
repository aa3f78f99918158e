from datetime import datetime, timezone
from typing import Any, Optional, Dict
from uuid import uuid4

from fastapi import Request
from pydantic import BaseModel

from bidsmart.schemas.common import ApiResponse, ResponseMeta


def _dump(item: Any) -> Any:
    # Models serialize with their camelCase aliases, as the status endpoint does
    if isinstance(item, BaseModel):
        return item.model_dump(mode="json", by_alias=True)
    return item


def create_api_response(
    data: Any,
    message: str = "Operation successful",
    status: bool = True,
    request: Optional[Request] = None,
    api_version: str = "v1"
) -> Dict[str, Any]:
    """Wrap endpoint data in the ``{status, message, data, meta}`` envelope.

    Lists become ``{"items": [...], "count": n}``, scalars ``{"value": x}`` and
    ``None`` an empty object. ``meta.request_id`` is the request's correlation id.
    """
    request_id = str(uuid4())
    if request and hasattr(request.state, "correlation_id"):
        request_id = request.state.correlation_id

    meta = ResponseMeta(
        timestamp=datetime.now(timezone.utc),
        request_id=request_id,
        api_version=api_version
    )

    data_dict: Dict[str, Any] = {}
    if isinstance(data, dict):
        data_dict = data
    elif isinstance(data, BaseModel):
        data_dict = _dump(data)
    elif isinstance(data, list):
        data_dict = {"items": [_dump(item) for item in data], "count": len(data)}
    elif data is not None:
        data_dict = {"value": data}

    response = ApiResponse(
        status=status,
        message=message,
        data=data_dict,
        meta=meta
    )
    return response.model_dump(mode="json")
