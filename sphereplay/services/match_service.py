import logging
from datetime import datetime, timedelta

from ..config import Config
from ..errors import (ColorConflict, CreationError, MoveRejected, RoomFull,
                      RoomNotFound, StaleRecordError, StoreError)
from ..models.match import generate_room_id, get_player_role, normalize_room_id
from .change_feed import ChangeFeed
from .game_service import GameService
from .store import DocumentStore

logger = logging.getLogger(__name__)


class MatchService:
    """Creates, joins, advances and tears down match records.

    Every write goes through ``_write``: read the stored record and its
    version, compute the change from that record, then compare-and-swap. A
    lost race re-reads and re-checks the rules against the fresh record.
    """

    def __init__(self, store=None, feed=None,
                 max_write_retries=Config.MAX_WRITE_RETRIES,
                 room_id_length=Config.ROOM_ID_LENGTH,
                 room_id_attempts=Config.ROOM_ID_ATTEMPTS):
        self.store = store or DocumentStore()
        self.feed = feed or ChangeFeed()
        self.max_write_retries = max_write_retries
        self.room_id_length = room_id_length
        self.room_id_attempts = room_id_attempts

    def create_match(self, game_type, host_id, profile, config=None):
        record = GameService.new_match(game_type, host_id, profile, config)

        for _ in range(self.room_id_attempts):
            room_id = generate_room_id(self.room_id_length)
            try:
                created = self.store.create(room_id, record)
            except StoreError as e:
                raise CreationError(f"Could not create {game_type} match") from e
            if created:
                logger.info(f"Match created: {room_id} ({game_type}) by {host_id}")
                self.feed.publish(room_id, record)
                return room_id
            logger.info(f"Room id {room_id} already taken, drawing another")

        raise CreationError(f"No free room id after {self.room_id_attempts} attempts")

    def get_match(self, room_id):
        return self.store.read(normalize_room_id(room_id))

    @staticmethod
    def get_role(record, participant_id):
        return get_player_role(record, participant_id)

    def join_match(self, room_id, guest_id, profile):
        room_id = normalize_room_id(room_id)

        def join(record):
            # Host re-entering its own room, or the same guest coming back
            if guest_id in (record['host_id'], record['guest_id']):
                return None
            if record['guest_id'] is not None:
                raise RoomFull(room_id)
            if profile.color == record['host_color']:
                raise ColorConflict(profile.color)
            updated = dict(record)
            updated['guest_id'] = guest_id
            updated['guest_name'] = profile.name
            updated['guest_color'] = profile.color
            return updated

        record = self._write(room_id, join)
        logger.info(f"Player {guest_id} joined match {room_id}")
        return record

    def make_move(self, room_id, participant_id, move):
        """Apply a move. Returns the new record, or None if the rules reject it."""
        room_id = normalize_room_id(room_id)

        def play(record):
            role = get_player_role(record, participant_id)
            return GameService.apply_move(record, role, move)

        return self._write_or_reject(room_id, participant_id, play)

    def next_round(self, room_id, participant_id):
        room_id = normalize_room_id(room_id)

        def advance(record):
            return GameService.next_round(record, get_player_role(record, participant_id))

        return self._write_or_reject(room_id, participant_id, advance)

    def request_rematch(self, room_id, participant_id):
        room_id = normalize_room_id(room_id)

        def rematch(record):
            return GameService.request_rematch(record, get_player_role(record, participant_id))

        record = self._write_or_reject(room_id, participant_id, rematch)
        if record is not None and record['winner'] is None:
            logger.info(f"Rematch started in {room_id}, {record['turn']} moves first")
        return record

    def abandon_match(self, room_id):
        """Delete the room. Watchers receive an absent snapshot and close."""
        room_id = normalize_room_id(room_id)
        deleted = self.store.delete(room_id)
        if deleted:
            logger.info(f"Match {room_id} abandoned")
        self.feed.publish(room_id, None)
        return deleted

    def cleanup_stale_rooms(self, max_age=timedelta(minutes=Config.STALE_ROOM_MINUTES)):
        """Delete rooms nobody has touched for ``max_age``."""
        cutoff = datetime.utcnow() - max_age
        removed = 0
        for room_id in self.store.stale_keys(cutoff):
            logger.info(f"Cleaning up stale room {room_id}")
            if self.store.delete(room_id):
                removed += 1
            self.feed.publish(room_id, None)
        return removed

    def _write_or_reject(self, room_id, participant_id, mutate):
        try:
            return self._write(room_id, mutate)
        except MoveRejected as e:
            logger.debug(f"Rejected action in {room_id} by {participant_id}: {e.reason}")
            return None

    def _write(self, room_id, mutate):
        for attempt in range(1, self.max_write_retries + 1):
            record, version = self.store.read_versioned(room_id)
            if record is None:
                raise RoomNotFound(room_id)

            updated = mutate(record)
            if updated is None or updated == record:
                return record

            if self.store.compare_and_swap(room_id, version, updated):
                self.feed.publish(room_id, updated)
                return updated
            logger.info(f"Room {room_id} changed under write, retrying ({attempt}/{self.max_write_retries})")

        raise StaleRecordError(room_id, self.max_write_retries)
