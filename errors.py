class RelayInvariantError(Exception):
    """Internal state disagrees with an event. Aborts handling of that event only."""


class DuplicateRoomIdError(RelayInvariantError):
    def __init__(self, room_id: str):
        super().__init__(f"roomId already taken: {room_id!r}")
        self.room_id = room_id


class UnknownViewerError(RelayInvariantError):
    def __init__(self, viewer_id: str):
        super().__init__(f"viewerId does not exist: {viewer_id!r}")
        self.viewer_id = viewer_id


class RoomClosedError(RelayInvariantError):
    def __init__(self, room_id: str):
        super().__init__(f"room {room_id!r} is already closed")
        self.room_id = room_id
