import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime
from pos_checklist.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    username = Column(String(100), unique=True, nullable=False, index=True)
    password_hash = Column(String(100), nullable=False)  # bcrypt, never plaintext
    created_at = Column(DateTime(timezone=True), default=_utcnow)
