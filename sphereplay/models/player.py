from ..errors import InvalidGameConfig
from .match import PALETTE

MAX_NAME_LENGTH = 24


class Profile:
    """Cosmetic participant settings chosen in the lobby."""

    def __init__(self, name, color='blue'):
        if color not in PALETTE:
            raise InvalidGameConfig(f"Invalid color: {color}. Must be one of {', '.join(PALETTE)}")
        if name is not None and not isinstance(name, str):
            raise InvalidGameConfig("Player name must be text")
        name = (name or '').strip()
        if not name:
            raise InvalidGameConfig("Player name is required")
        self.name = name[:MAX_NAME_LENGTH]
        self.color = color

    @classmethod
    def default_for(cls, participant_id, color='blue'):
        return cls(f"Player {str(participant_id)[:3]}", color)

    @classmethod
    def from_request(cls, data, participant_id):
        """Build a profile from a JSON body, falling back to a generated name."""
        color = data.get('color', 'blue')
        name = data.get('name')
        if not name:
            return cls.default_for(participant_id, color)
        return cls(name, color)

    def to_dict(self):
        return {
            'name': self.name,
            'color': self.color
        }
