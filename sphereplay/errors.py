"""
sphereplay.errors — exception hierarchy
=======================================

Join and store failures are surfaced to the caller; ``MoveRejected`` is an
expected race and is swallowed by the service layer.
"""


class SpherePlayError(Exception):
    """Base exception for all SpherePlay errors."""
    pass


class RoomNotFound(SpherePlayError):
    """Raised when a room id does not name an existing match record."""

    def __init__(self, room_id):
        self.room_id = room_id
        super().__init__(f"Room {room_id} not found")


class ColorConflict(SpherePlayError):
    """Raised when a guest tries to join with the host's colour."""

    def __init__(self, color):
        self.color = color
        super().__init__(f"Color conflict! Host is using {color.upper()}.")


class RoomFull(SpherePlayError):
    """Raised when a second, different guest tries to join a filled room."""

    def __init__(self, room_id):
        self.room_id = room_id
        super().__init__(f"Room {room_id} already has two players")


class InvalidGameConfig(SpherePlayError, ValueError):
    """Raised for an unknown game type, profile or variant setting."""
    pass


class MoveRejected(SpherePlayError):
    """A move failed a rule precondition. Never shown to the player."""

    def __init__(self, reason):
        self.reason = reason
        super().__init__(reason)


class StoreError(SpherePlayError):
    """The document store failed; the previous record stays authoritative."""

    retryable = True


class CreationError(StoreError):
    """Raised when a new match record could not be written."""
    pass


class StaleRecordError(StoreError):
    """Raised when a compare-and-swap write kept losing to concurrent writers."""

    def __init__(self, room_id, attempts):
        self.room_id = room_id
        self.attempts = attempts
        super().__init__(f"Room {room_id} changed during {attempts} write attempts")


class RoomClosed(SpherePlayError):
    """Terminal event: the room was deleted while a participant watched it."""

    def __init__(self, room_id, message="Room Closed. Opponent left."):
        self.room_id = room_id
        self.message = message
        super().__init__(message)
