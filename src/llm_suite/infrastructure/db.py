"""Подключение к БД и фабрика сессий SQLAlchemy."""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from llm_suite.settings import get_settings


def create_session_factory(database_url: str | None = None) -> sessionmaker:
    """Создаёт `sessionmaker` на основе `DATABASE_URL`."""
    url = database_url or get_settings().database_url
    engine = create_engine(url, pool_pre_ping=True)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)
