from typing import Dict, Optional

from connection import Connection
from errors import DuplicateRoomIdError
from logging_config import get_logger
from room import Room
from schemas.messages import parse_join

logger = get_logger(__name__)


class Server:
    """Process-wide registry of rooms, keyed by room id.

    A new connection is inert until it sends a valid join. The first join for
    an unused id makes the connection that room's broadcaster; later joins for
    the same id make viewers. A room leaves the registry when its
    broadcaster disconnects.

    All methods run synchronously on the event loop. Nothing awaits between
    looking up a room id and inserting it, which keeps insertion atomic.
    """

    def __init__(self):
        self.rooms: Dict[str, Room] = {}

    @property
    def room_count(self) -> int:
        return len(self.rooms)

    def get_room(self, room_id: str) -> Optional[Room]:
        return self.rooms.get(room_id)

    def on_connection(self, connection: Connection):
        connection.on_message = lambda text: self.handle_join(connection, text)

    def handle_join(self, connection: Connection, text: str):
        join = parse_join(text)
        if join is None:
            # Nothing but a valid join means anything before the handshake.
            return

        room_id = join.room_id
        room = self.rooms.get(room_id)
        if room is None:
            self.new_room(room_id, connection)
        else:
            room.add_viewer(connection)

    def new_room(self, room_id: str, broadcaster: Connection) -> Room:
        if room_id in self.rooms:
            raise DuplicateRoomIdError(room_id)

        room = Room(room_id, broadcaster)
        self.rooms[room_id] = room
        broadcaster.on_close = lambda: self.close_room(room_id)
        return room

    def close_room(self, room_id: str):
        room = self.rooms.get(room_id)
        if room is None:
            return
        room.close_room()
        del self.rooms[room_id]

    def shutdown(self):
        logger.info(f"Shutting down relay, closing {len(self.rooms)} rooms")
        for room_id, room in list(self.rooms.items()):
            self.close_room(room_id)
            room.broadcaster.close()
