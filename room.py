from typing import Dict

from connection import Connection
from errors import RoomClosedError, UnknownViewerError
from logging_config import get_logger
from schemas.messages import (
    BroadcastAssigned,
    BroadcasterDisconnected,
    RequestViewers,
    ViewAssigned,
    ViewerDisconnected,
    ViewerJoined,
    WebRTCBroadcaster,
    WebRTCViewer,
    parse_broadcaster_message,
    parse_viewer_message,
)

logger = get_logger(__name__)


class Room:
    """A screensharing room: one broadcaster and any number of viewers.

    The broadcaster is fixed for the room's whole life. Viewers get string ids
    "0", "1", ... in join order; an id is never handed out twice, even after its
    viewer leaves. The room stays open until ``close_room`` is called for the
    broadcaster's disconnect, after which it is done for good.
    """

    def __init__(self, room_id: str, broadcaster: Connection):
        self.room_id = room_id
        self.broadcaster = broadcaster
        self.viewers: Dict[str, Connection] = {}
        self.counter = 0
        self._open = True

        broadcaster.on_message = self.handle_broadcaster_message
        broadcaster.send(BroadcastAssigned())
        logger.info(f"Room {room_id} created with broadcaster {broadcaster.connection_id}")

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def viewer_count(self) -> int:
        return len(self.viewers)

    def add_viewer(self, viewer: Connection):
        if not self._open:
            raise RoomClosedError(self.room_id)

        viewer_id = str(self.counter)
        self.counter += 1

        viewer.on_message = lambda text: self.handle_viewer_message(viewer_id, text)
        viewer.on_close = lambda: self.handle_viewer_disconnect(viewer_id)

        viewer.send(ViewAssigned())
        self.broadcaster.send(ViewerJoined(viewer_id=viewer_id))
        self.viewers[viewer_id] = viewer
        logger.info(f"Viewer {viewer_id} ({viewer.connection_id}) joined room {self.room_id} ({len(self.viewers)} viewers)")

    def handle_broadcaster_message(self, text: str):
        msg = parse_broadcaster_message(text)

        if isinstance(msg, WebRTCBroadcaster):
            viewer = self.viewers.get(msg.viewer_id)
            if viewer is None:
                logger.debug(f"Room {self.room_id}: no viewer {msg.viewer_id!r}, dropping {msg.kind}")
                return
            viewer.send(WebRTCViewer(kind=msg.kind, message=msg.message))
            logger.debug(f"Room {self.room_id}: relayed {msg.kind} to viewer {msg.viewer_id}")
        elif isinstance(msg, RequestViewers):
            for viewer_id in list(self.viewers):
                self.broadcaster.send(ViewerJoined(viewer_id=viewer_id))
        # Anything else (unparseable, a repeated join) is dropped.

    def handle_viewer_message(self, viewer_id: str, text: str):
        msg = parse_viewer_message(text)

        if isinstance(msg, WebRTCViewer):
            self.broadcaster.send(WebRTCBroadcaster(viewer_id=viewer_id, kind=msg.kind, message=msg.message))
            logger.debug(f"Room {self.room_id}: relayed {msg.kind} from viewer {viewer_id}")

    def handle_viewer_disconnect(self, viewer_id: str):
        if viewer_id not in self.viewers:
            raise UnknownViewerError(viewer_id)

        del self.viewers[viewer_id]
        self.broadcaster.send(ViewerDisconnected(viewer_id=viewer_id))
        logger.info(f"Viewer {viewer_id} left room {self.room_id} ({len(self.viewers)} viewers)")

    def close_room(self):
        """Tell every viewer the broadcaster is gone and disconnect them."""
        if not self._open:
            return
        self._open = False

        viewers, self.viewers = self.viewers, {}
        for viewer in viewers.values():
            viewer.detach()
            viewer.send(BroadcasterDisconnected())
            viewer.close()

        self.broadcaster.detach()
        logger.info(f"Room {self.room_id} closed, disconnected {len(viewers)} viewers")
