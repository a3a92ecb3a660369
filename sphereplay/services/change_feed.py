import logging
from collections import defaultdict
from threading import Lock

from ..errors import RoomClosed
from ..models.match import get_player_role

logger = logging.getLogger(__name__)

ROOM_CLOSED_MESSAGE = "Room Closed. Opponent left."


class ChangeFeed:
    """Pushes the latest record of a room to everyone watching it.

    In-process callbacks receive the record (or ``None`` once the room is
    deleted). When bound to a SocketIO server the same snapshot is emitted to
    the Socket.IO room named after the room id.
    """

    def __init__(self, socketio=None):
        self.socketio = socketio
        self._subscribers = defaultdict(list)
        self._lock = Lock()

    def subscribe(self, key, callback):
        with self._lock:
            self._subscribers[key].append(callback)
        return lambda: self.unsubscribe(key, callback)

    def unsubscribe(self, key, callback):
        with self._lock:
            callbacks = self._subscribers.get(key, [])
            if callback in callbacks:
                callbacks.remove(callback)
            if not callbacks:
                self._subscribers.pop(key, None)

    def subscriber_count(self, key):
        with self._lock:
            return len(self._subscribers.get(key, []))

    def publish(self, key, record):
        with self._lock:
            callbacks = list(self._subscribers.get(key, []))

        for callback in callbacks:
            try:
                callback(record)
            except Exception:
                logger.exception(f"Error delivering snapshot of room {key}")

        if self.socketio is None:
            return
        if record is None:
            self.socketio.emit('room_closed', {
                'room_id': key,
                'reason': 'opponent_left',
                'message': ROOM_CLOSED_MESSAGE
            }, room=key)
        else:
            self.socketio.emit('room_snapshot', {
                'room_id': key,
                'record': record
            }, room=key)


class RoomWatcher:
    """A participant's local view of one room.

    The view is rebuilt only from pushed snapshots. Once the feed reports the
    room as absent the watcher is closed for good and stops listening.
    """

    GAME = 'game'
    CLOSED = 'closed'

    def __init__(self, feed, room_id, participant_id):
        self.feed = feed
        self.room_id = room_id
        self.participant_id = participant_id
        self.record = None
        self.view = self.GAME
        self.error = None
        self._unsubscribe = None

    def start(self, initial=None):
        self._unsubscribe = self.feed.subscribe(self.room_id, self.on_snapshot)
        if initial is not None:
            self.on_snapshot(initial)
        return self

    def stop(self):
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def on_snapshot(self, record):
        if self.view == self.CLOSED:
            return
        if record is not None:
            self.record = record
            return
        # Nothing seen yet, so there is no room to close
        if self.record is None:
            return

        logger.info(f"Room {self.room_id} closed while watched by {self.participant_id}")
        self.record = None
        self.view = self.CLOSED
        self.error = ROOM_CLOSED_MESSAGE
        self.stop()

    @property
    def closed(self):
        return self.view == self.CLOSED

    @property
    def role(self):
        if self.record is None:
            return None
        return get_player_role(self.record, self.participant_id)

    def is_my_turn(self):
        return (self.record is not None
                and self.record.get('winner') is None
                and self.record.get('turn') == self.role)

    def require_open(self):
        if self.closed:
            raise RoomClosed(self.room_id, self.error)
        return self.record
