from typing import Any

from pydantic import BaseModel

# Request fields are untyped: whatever the caller sends is
# forwarded and the provider decides whether it is acceptable.


class DeviceNotificationRequest(BaseModel):
    """{token, notification: {title, body}}"""

    token: Any = None
    notification: Any = None


class MulticastNotificationRequest(BaseModel):
    """{tokens: [...], notification: {title, body}}"""

    tokens: Any = None
    notification: Any = None


class TopicNotificationRequest(BaseModel):
    """{topic, notification: {title, body}}"""

    topic: Any = None
    notification: Any = None


class RelayResponse(BaseModel):
    """Envelope returned by every send endpoint"""

    success: bool
    response: Any = None
    error: Any = None
