from .database import Database
from .models import Session
from .repository import SessionRepository

__all__ = ["Database", "Session", "SessionRepository"]
