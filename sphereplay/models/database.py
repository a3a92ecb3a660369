from datetime import datetime
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

class GameRoom(db.Model):
    """One match record stored as a JSON document under its room id."""
    __tablename__ = 'game_rooms'

    id = db.Column(db.String(8), primary_key=True)
    game_type = db.Column(db.String(16), nullable=False)
    state = db.Column(db.JSON, nullable=False)
    version = db.Column(db.Integer, nullable=False, default=1)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'game_type': self.game_type,
            'state': self.state,
            'version': self.version,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None
        }
