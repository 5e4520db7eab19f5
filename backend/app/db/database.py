"""
Database engine, session factory and FastAPI session dependency.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from pydantic_settings import BaseSettings


class DatabaseSettings(BaseSettings):
    """Database configuration settings."""

    database_url: str = "sqlite:///./pumpup.db"
    database_echo: bool = False

    class Config:
        env_file = ".env"
        extra = "ignore"


db_settings = DatabaseSettings()

if db_settings.database_url.startswith("sqlite"):
    engine = create_engine(
        db_settings.database_url,
        connect_args={"check_same_thread": False},
        echo=db_settings.database_echo,
    )
else:
    engine = create_engine(
        db_settings.database_url,
        pool_pre_ping=True,
        echo=db_settings.database_echo,
    )

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Yield a database session for one request and close it afterwards."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
