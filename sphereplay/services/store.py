import logging
from datetime import datetime

from sqlalchemy import select, update, delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..errors import StoreError
from ..models.database import db, GameRoom

logger = logging.getLogger(__name__)


class DocumentStore:
    """Match records keyed by room id, backed by the ``game_rooms`` table.

    Every accepted write bumps ``version``; ``compare_and_swap`` only succeeds
    when the caller saw the latest version, so two clients racing on the
    same record cannot both win.
    """

    def create(self, key, record):
        """Insert a new record. Returns False if the key is already taken."""
        try:
            if db.session.get(GameRoom, key) is not None:
                return False
            db.session.add(GameRoom(id=key, game_type=record['game_type'], state=record, version=1))
            db.session.commit()
            return True
        except IntegrityError:
            db.session.rollback()
            return False
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.exception(f"Error creating room {key}")
            raise StoreError(f"Could not create room {key}") from e

    def read(self, key):
        record, _ = self.read_versioned(key)
        return record

    def read_versioned(self, key):
        """Return ``(record, version)``, or ``(None, None)`` when absent."""
        try:
            row = db.session.execute(
                select(GameRoom.state, GameRoom.version).where(GameRoom.id == key)
            ).first()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.exception(f"Error reading room {key}")
            raise StoreError(f"Could not read room {key}") from e
        if row is None:
            return None, None
        return row.state, row.version

    def update(self, key, fields):
        """Merge ``fields`` into the stored record, last write wins."""
        try:
            row = db.session.execute(
                select(GameRoom.state).where(GameRoom.id == key)
            ).first()
            if row is None:
                return None
            record = dict(row.state)
            record.update(fields)
            db.session.execute(
                update(GameRoom)
                .where(GameRoom.id == key)
                .values(state=record, version=GameRoom.version + 1, updated_at=datetime.utcnow())
            )
            db.session.commit()
            return record
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.exception(f"Error updating room {key}")
            raise StoreError(f"Could not update room {key}") from e

    def compare_and_swap(self, key, expected_version, record):
        """Replace the record only if it is still at ``expected_version``."""
        try:
            result = db.session.execute(
                update(GameRoom)
                .where(GameRoom.id == key, GameRoom.version == expected_version)
                .values(state=record, version=expected_version + 1, updated_at=datetime.utcnow())
            )
            db.session.commit()
            return result.rowcount == 1
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.exception(f"Error writing room {key}")
            raise StoreError(f"Could not write room {key}") from e

    def delete(self, key):
        try:
            result = db.session.execute(delete(GameRoom).where(GameRoom.id == key))
            db.session.commit()
            return result.rowcount > 0
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.exception(f"Error deleting room {key}")
            raise StoreError(f"Could not delete room {key}") from e

    def stale_keys(self, cutoff):
        """Room ids whose record has not changed since ``cutoff``."""
        try:
            return list(db.session.execute(
                select(GameRoom.id).where(GameRoom.updated_at < cutoff)
            ).scalars())
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.exception("Error listing stale rooms")
            raise StoreError("Could not list stale rooms") from e
