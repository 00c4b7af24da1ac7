"""Pydantic models for configuration and relayed messages."""

from models.config import DEFAULT_OAUTH_SUCCESS_URI, RelayConfig  # noqa: F401
from models.message import (  # noqa: F401
    DeliveryBatch,
    DeliveryRecord,
    MessageAttribute,
    PublishEnvelope,
    ResponseLocals,
    is_sns_delivery,
)
from models.response import ApiResponse  # noqa: F401
