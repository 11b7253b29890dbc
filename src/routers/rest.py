import json
from typing import Callable

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import PlainTextResponse
from fastapi.routing import APIRoute
from loguru import logger

from src.config import GREETING
from src.messaging import MessagingClient
from src.schemas import (
    DeviceNotificationRequest,
    MulticastNotificationRequest,
    RelayResponse,
    TopicNotificationRequest,
)
from src.utils import (
    build_device_message,
    build_multicast_message,
    build_topic_message,
    failure_response,
    nest_form_fields,
    success_response,
)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class FormBodyRoute(APIRoute):
    """
    Accepts urlencoded bodies next to JSON.
    Bracketed form keys are rebuilt into the nested document and handed
    to the endpoint as if the client had posted JSON.
    """

    def get_route_handler(self) -> Callable:
        original_route_handler = super().get_route_handler()

        async def custom_route_handler(request: Request) -> Response:
            content_type = request.headers.get("content-type", "")
            if content_type.split(";")[0].strip().lower() == FORM_CONTENT_TYPE:
                form = await request.form()
                document = nest_form_fields(form.multi_items())

                headers = [
                    (name, value)
                    for name, value in request.scope["headers"]
                    if name != b"content-type"
                ]
                headers.append((b"content-type", b"application/json"))

                request = Request({**request.scope, "headers": headers}, request.receive)
                request._body = json.dumps(document).encode()

            return await original_route_handler(request)

        return custom_route_handler


router = APIRouter(tags=["REST"], route_class=FormBodyRoute)


def get_messaging(request: Request) -> MessagingClient:
    """Shared messaging client created by the application lifespan"""
    return request.app.state.messaging


@router.get("/", response_class=PlainTextResponse)
async def root():
    """Root endpoint for checking server status"""
    logger.info("[GET][/] Root endpoint accessed")
    return GREETING


@router.post("/send-to-device", response_model=RelayResponse)
async def send_to_device(
    payload: DeviceNotificationRequest,
    client: MessagingClient = Depends(get_messaging),
):
    """Send a notification to a single device token"""
    logger.info(f"[POST][/send-to-device] Sending to token: {payload.token}")

    try:
        message = build_device_message(payload)
        receipt = await client.send(message)
    except Exception as exc:
        logger.error(f"[POST][/send-to-device] Provider error: {exc}")
        return failure_response(exc)

    return success_response(receipt)


@router.post("/send-to-multiple", response_model=RelayResponse)
async def send_to_multiple(
    payload: MulticastNotificationRequest,
    client: MessagingClient = Depends(get_messaging),
):
    """
    Send a notification to many device tokens in a single provider call.
    The response holds the aggregate result with one entry per token.
    """
    count = len(payload.tokens) if isinstance(payload.tokens, list) else 0
    logger.info(f"[POST][/send-to-multiple] Sending to {count} tokens")

    try:
        message = build_multicast_message(payload)
        receipt = await client.send_multicast(message)
    except Exception as exc:
        logger.error(f"[POST][/send-to-multiple] Provider error: {exc}")
        return failure_response(exc)

    return success_response(receipt)


@router.post("/send-to-topic", response_model=RelayResponse)
async def send_to_topic(
    payload: TopicNotificationRequest,
    client: MessagingClient = Depends(get_messaging),
):
    """Send a notification to every device subscribed to a topic"""
    logger.info(f"[POST][/send-to-topic] Sending to topic: {payload.topic}")

    try:
        message = build_topic_message(payload)
        receipt = await client.send(message)
    except Exception as exc:
        logger.error(f"[POST][/send-to-topic] Provider error: {exc}")
        return failure_response(exc)

    return success_response(receipt)
