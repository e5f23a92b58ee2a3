"""
Inbound message schemas.

Clients send ``{type, data?, token?, role?}`` text frames. Each recognised
``type`` maps to one variant carrying exactly the fields it needs; any other
tag decodes to ``UnknownMessage`` so callers can log and ignore it.
"""

import json
from typing import Any, Dict, Literal, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, ValidationError

from tocsin.domain.exceptions import InvalidMessageError


class InboundMessage(BaseModel):
    """Base class for client frames."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    type: str


class AdminAuthMessage(InboundMessage):
    """Authenticate the connection as an admin."""

    type: Literal["ADMIN_AUTH"] = "ADMIN_AUTH"
    token: Optional[str] = None


class UserAuthMessage(InboundMessage):
    """Authenticate the connection as a plain user."""

    type: Literal["USER_AUTH"] = "USER_AUTH"
    token: Optional[str] = None


class PingMessage(InboundMessage):
    """Application-level heartbeat."""

    type: Literal["PING"] = "PING"


class UnknownMessage(InboundMessage):
    """Well-formed frame with an unrecognised tag."""

    model_config = ConfigDict(frozen=True, extra="allow")

    data: Optional[Any] = None


ClientMessage = Union[AdminAuthMessage, UserAuthMessage, PingMessage, UnknownMessage]

MESSAGE_TYPES: Dict[str, Type[InboundMessage]] = {
    "ADMIN_AUTH": AdminAuthMessage,
    "USER_AUTH": UserAuthMessage,
    "PING": PingMessage,
}


def parse_inbound(raw: str) -> ClientMessage:
    """
    Decode one text frame into a message variant.

    Args:
        raw: Frame payload as received

    Returns:
        Matching message variant (UnknownMessage for unrecognised tags)

    Raises:
        InvalidMessageError: If the frame is not a JSON object with a
            string ``type`` or its fields have the wrong shape
    """
    try:
        payload = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise InvalidMessageError(f"not valid JSON ({e})")

    if not isinstance(payload, dict):
        raise InvalidMessageError("expected a JSON object")

    message_type = payload.get("type")
    if not isinstance(message_type, str) or not message_type:
        raise InvalidMessageError("missing 'type' field")

    model = MESSAGE_TYPES.get(message_type, UnknownMessage)

    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise InvalidMessageError(
            f"bad fields for {message_type} ({e.error_count()} error(s))"
        )
