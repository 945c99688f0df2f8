"""Composition root — turns settings into a ready unit of work.

The engine and schema are created once per process; the CLI asks for a
fresh SqlAlchemyUnitOfWork per command.
"""

from __future__ import annotations

from functools import lru_cache

from sqlalchemy.orm import sessionmaker

from medstore.infrastructure.config import Settings, get_settings
from medstore.infrastructure.persistence.database import (
    create_schema,
    make_engine,
    make_session_factory,
)
from medstore.infrastructure.persistence.unit_of_work import SqlAlchemyUnitOfWork


def settings() -> Settings:
    return get_settings()


@lru_cache
def session_factory() -> sessionmaker:
    engine = make_engine(settings().DATABASE_URL)
    create_schema(engine)
    return make_session_factory(engine)


def unit_of_work() -> SqlAlchemyUnitOfWork:
    return SqlAlchemyUnitOfWork(session_factory())
