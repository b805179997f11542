"""Game content: pre-authored files, generated quizzes and their cache."""

from .prompts import GameRequest
from .service import ContentService
from .shuffle import to_shuffle_content
from .store import ContentStore, GameInfo

__all__ = ["ContentService", "ContentStore", "GameInfo", "GameRequest", "to_shuffle_content"]
