from sqlalchemy import Column, String, DateTime, Integer
from sqlalchemy.sql import func
import uuid
from app.db.database import Base
from app.db.types import GUID


class User(Base):
    __tablename__ = "users"

    user_id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=True, index=True)
    avatar = Column(String, nullable=True)
    score = Column(Integer, default=0, nullable=False)  # accumulated points
    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    deleted_at = Column(DateTime(timezone=True), nullable=True)
