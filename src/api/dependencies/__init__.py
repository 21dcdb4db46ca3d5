from typing import Annotated, Generator

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from config import config
from db.repositories import TaxonomySnapshotRepository
from domain.taxonomy import Forest
from domain.tree import build_forest


def get_session(request: Request) -> Generator[Session, None, None]:
    with request.app.state.sessionmaker() as session:
        yield session


def get_snapshot_repository(session: Annotated[Session, Depends(get_session)]) -> TaxonomySnapshotRepository:
    return TaxonomySnapshotRepository(session)


def get_forest(snapshot: Annotated[TaxonomySnapshotRepository, Depends(get_snapshot_repository)]) -> Forest:
    return build_forest(snapshot.list())


def get_option_indent() -> str:
    return config().option_indent
