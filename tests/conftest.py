from typing import Generator

import pytest
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from db.models import Base
from domain.taxonomy import Forest, TaxonomyRecord
from domain.tree import build_forest
from tests.constants import CONSOLE_RECORDS, STATUS_RECORDS

# StaticPool keeps one connection so the FastAPI worker thread sees the same in-memory DB.
engine: Engine = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
session_factory = sessionmaker(engine)


@pytest.fixture(scope="function")
def test_session() -> Generator[Session, None, None]:
    with session_factory() as session:
        yield session


@pytest.fixture(scope="function", autouse=True)
def reset_db() -> Generator[None, None, None]:
    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)


@pytest.fixture(scope="function")
def status_records() -> list[TaxonomyRecord]:
    return list(STATUS_RECORDS)


@pytest.fixture(scope="function")
def status_forest(status_records: list[TaxonomyRecord]) -> Forest:
    return build_forest(status_records)


@pytest.fixture(scope="function")
def console_records() -> list[TaxonomyRecord]:
    return list(CONSOLE_RECORDS)


@pytest.fixture(scope="function")
def console_forest(console_records: list[TaxonomyRecord]) -> Forest:
    return build_forest(console_records)
