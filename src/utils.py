import re
from collections.abc import Mapping
from typing import Any, Dict, Iterable, List, Tuple

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from firebase_admin import messaging

from src.schemas import (
    DeviceNotificationRequest,
    MulticastNotificationRequest,
    TopicNotificationRequest,
)

_BRACKET_SEGMENT = re.compile(r"\[([^\[\]]*)\]")


def build_notification(payload: Any) -> messaging.Notification:
    """Title and body are read as-is, anything but a mapping yields neither"""
    if not isinstance(payload, Mapping):
        payload = {}
    return messaging.Notification(title=payload.get("title"), body=payload.get("body"))


def build_device_message(request: DeviceNotificationRequest) -> messaging.Message:
    return messaging.Message(
        token=request.token,
        notification=build_notification(request.notification),
    )


def build_multicast_message(
    request: MulticastNotificationRequest,
) -> messaging.MulticastMessage:
    # MulticastMessage checks its token list on construction
    return messaging.MulticastMessage(
        tokens=request.tokens,
        notification=build_notification(request.notification),
    )


def build_topic_message(request: TopicNotificationRequest) -> messaging.Message:
    return messaging.Message(
        topic=request.topic,
        notification=build_notification(request.notification),
    )


def serialize_error(exc: BaseException) -> Dict[str, Any]:
    """
    Flatten a provider (or any other) exception into JSON.
    FirebaseError carries a platform code such as INVALID_ARGUMENT.
    """
    return {
        "type": type(exc).__name__,
        "code": getattr(exc, "code", None) or "internal",
        "message": str(exc),
    }


def serialize_receipt(receipt: Any) -> Any:
    """
    Message ids pass through untouched.
    Batch results are expanded into per-token outcomes.
    """
    if hasattr(receipt, "responses") and hasattr(receipt, "success_count"):
        return {
            "success_count": receipt.success_count,
            "failure_count": receipt.failure_count,
            "responses": [
                {
                    "success": item.success,
                    "message_id": item.message_id,
                    "error": serialize_error(item.exception) if item.exception else None,
                }
                for item in receipt.responses
            ],
        }
    return jsonable_encoder(receipt)


def success_response(receipt: Any) -> JSONResponse:
    return JSONResponse(
        status_code=200,
        content={"success": True, "response": serialize_receipt(receipt)},
    )


def failure_response(error: Any) -> JSONResponse:
    if isinstance(error, BaseException):
        error = serialize_error(error)
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": jsonable_encoder(error)},
    )


def nest_form_fields(items: Iterable[Tuple[str, Any]]) -> Dict[str, Any]:
    """
    Rebuild a bracketed form body into the document a JSON client would send.
      notification[title]=a     -> {"notification": {"title": "a"}}
      tokens[]=a&tokens[]=b     -> {"tokens": ["a", "b"]}
      tokens[0]=a&tokens[1]=b   -> {"tokens": ["a", "b"]}
      tokens=a&tokens=b         -> {"tokens": ["a", "b"]}
    """
    document: Dict[str, Any] = {}
    for key, value in items:
        head, bracket, rest = key.partition("[")
        segments = _BRACKET_SEGMENT.findall(bracket + rest) if bracket else []
        # Keys without well-formed brackets are kept verbatim
        path = [head] + segments if head and segments else [key]
        _assign_field(document, path, value)

    return {key: _collapse_indexes(value) for key, value in document.items()}


def _assign_field(node: Dict[str, Any], path: List[str], value: Any) -> None:
    key = path[0] or str(len(node))

    if len(path) == 1:
        if key not in node:
            node[key] = value
        elif isinstance(node[key], list):
            node[key].append(value)
        else:
            node[key] = [node[key], value]
        return

    child = node.get(key)
    if not isinstance(child, dict):
        child = node[key] = {}
    _assign_field(child, path[1:], value)


def _collapse_indexes(value: Any) -> Any:
    if not isinstance(value, dict):
        return value

    value = {key: _collapse_indexes(item) for key, item in value.items()}
    if value and all(key.isdigit() for key in value):
        return [value[key] for key in sorted(value, key=int)]
    return value
