"""Wire messages exchanged between peers and the relay.

Every frame is a JSON object carrying a ``type`` tag. Inbound frames are
validated against the closed set of variants a sender may use in its current
role; anything else is dropped by the caller. The ``message`` payload of the
WebRTC variants is opaque and forwarded untouched.
"""
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictStr, TypeAdapter, ValidationError

from logging_config import get_logger

logger = get_logger(__name__)

Kind = Literal["offer", "answer", "candidate"]


class WireMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class JoinRequest(WireMessage):
    type: Literal["join"]
    room_id: StrictStr = Field(alias="roomId", min_length=1)


class BroadcastAssigned(WireMessage):
    type: Literal["broadcast"] = "broadcast"


class ViewAssigned(WireMessage):
    type: Literal["view"] = "view"


class RequestViewers(WireMessage):
    type: Literal["requestviewers"] = "requestviewers"


class ViewerJoined(WireMessage):
    type: Literal["viewer"] = "viewer"
    viewer_id: StrictStr = Field(alias="viewerId")


class ViewerDisconnected(WireMessage):
    type: Literal["viewerdisconnected"] = "viewerdisconnected"
    viewer_id: StrictStr = Field(alias="viewerId")


class WebRTCViewer(WireMessage):
    type: Literal["webrtcviewer"] = "webrtcviewer"
    kind: Kind
    message: Any


class WebRTCBroadcaster(WireMessage):
    type: Literal["webrtcbroadcaster"] = "webrtcbroadcaster"
    viewer_id: StrictStr = Field(alias="viewerId")
    kind: Kind
    message: Any


class BroadcasterDisconnected(WireMessage):
    type: Literal["broadcasterdisconnected"] = "broadcasterdisconnected"


# What a peer may send once it holds a role. A repeated join parses but has no effect.
BroadcasterMessage = Annotated[
    Union[JoinRequest, WebRTCBroadcaster, RequestViewers],
    Field(discriminator="type"),
]

ViewerMessage = Annotated[
    Union[JoinRequest, WebRTCViewer],
    Field(discriminator="type"),
]

_join_adapter = TypeAdapter(JoinRequest)
_broadcaster_adapter = TypeAdapter(BroadcasterMessage)
_viewer_adapter = TypeAdapter(ViewerMessage)


def _parse(adapter: TypeAdapter, text: str, role: str):
    try:
        return adapter.validate_json(text)
    except ValidationError as e:
        logger.debug(f"Dropping invalid {role} message: {e.error_count()} error(s), first: {e.errors()[0]['msg']}")
        return None


def parse_join(text: str) -> Optional[JoinRequest]:
    return _parse(_join_adapter, text, "join")


def parse_broadcaster_message(text: str) -> Optional[Union[JoinRequest, WebRTCBroadcaster, RequestViewers]]:
    return _parse(_broadcaster_adapter, text, "broadcaster")


def parse_viewer_message(text: str) -> Optional[Union[JoinRequest, WebRTCViewer]]:
    return _parse(_viewer_adapter, text, "viewer")
