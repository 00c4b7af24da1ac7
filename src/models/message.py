"""Models for messages moving between the webhook, SNS and Slack."""

import json
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from utils.error_handling import ValidationError

ATTRIBUTE_KEYS = ("type", "id", "callback_id")


class ResponseLocals(BaseModel):
    """Normalized result of the webhook middleware for one request."""

    message: Dict[str, Any] = Field(default_factory=dict)
    type: Optional[Any] = None
    id: Optional[Any] = None
    callback_id: Optional[Any] = None


class MessageAttribute(BaseModel):
    """SNS string message attribute."""

    data_type: str = Field("String", serialization_alias="DataType")
    string_value: str = Field(serialization_alias="StringValue")

    @classmethod
    def string(cls, value: Any) -> "MessageAttribute":
        return cls(string_value=f"{value}")


class PublishEnvelope(BaseModel):
    """Everything needed for one SNS publish call."""

    message: str
    topic_arn: str
    attributes: Dict[str, MessageAttribute] = Field(default_factory=dict)

    @classmethod
    def from_locals(cls, locals_: ResponseLocals, topic_arn: str) -> "PublishEnvelope":
        attributes = {}
        for key in ATTRIBUTE_KEYS:
            value = getattr(locals_, key)
            if value:
                attributes[key] = MessageAttribute.string(value)
        return cls(
            message=json.dumps(locals_.message),
            topic_arn=topic_arn,
            attributes=attributes,
        )

    def to_sns_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for ``sns.publish``."""
        return {
            "TopicArn": self.topic_arn,
            "Message": self.message,
            "MessageAttributes": {
                name: attr.model_dump(by_alias=True)
                for name, attr in self.attributes.items()
            },
        }


class DeliveryRecord(BaseModel):
    """One SNS notification handed to a consumer Lambda."""

    message: Dict[str, Any]
    message_id: Optional[str] = None
    attributes: Dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_sns_record(cls, record: Dict[str, Any]) -> "DeliveryRecord":
        sns = record.get("Sns") or {}
        try:
            message = json.loads(sns["Message"])
        except (KeyError, TypeError, json.JSONDecodeError) as exc:
            raise ValidationError(f"Unreadable SNS message: {exc}") from exc
        if not isinstance(message, dict):
            raise ValidationError("SNS message must be a JSON object")
        attributes = {
            name: attr.get("Value", "")
            for name, attr in (sns.get("MessageAttributes") or {}).items()
        }
        return cls(message=message, message_id=sns.get("MessageId"), attributes=attributes)


class DeliveryBatch(BaseModel):
    """Ordered records from a single SNS invocation."""

    records: List[DeliveryRecord] = Field(default_factory=list)

    @classmethod
    def from_event(cls, event: Dict[str, Any]) -> "DeliveryBatch":
        return cls(
            records=[DeliveryRecord.from_sns_record(rec) for rec in event.get("Records", [])]
        )

    def __len__(self) -> int:
        return len(self.records)


def is_sns_delivery(event: Dict[str, Any]) -> bool:
    """True when a Lambda event is an SNS delivery rather than an HTTP request."""
    records = event.get("Records") if isinstance(event, dict) else None
    if not records:
        return False
    return all(rec.get("EventSource") == "aws:sns" for rec in records)
