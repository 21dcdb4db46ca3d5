from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from db import models
from domain.taxonomy import TaxonomyId, TaxonomyRecord, TaxonomyStatus, TypeKey

_SYNC_STATE_ID = 1


class TaxonomySnapshotRepository:
    """Local copy of the last fetched dictionary type list.

    The snapshot is replaced wholesale on every sync; it is never patched
    record by record and never pushed back to the backend.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def replace_all(self, records: list[TaxonomyRecord], *, synced_at: datetime | None = None) -> None:
        self._session.execute(
            delete(models.TaxonomyRecordOrm).execution_options(synchronize_session=False)
        )
        # Rows from the previous snapshot may still sit in the identity map under the same positions.
        self._session.expunge_all()
        self._session.add_all(
            models.TaxonomyRecordOrm(
                position=position,
                record_id=record.id,
                name=record.name,
                type_key=record.type_key,
                parent_id=record.parent_id,
                status=record.status.value,
                remark=record.remark,
            )
            for position, record in enumerate(records)
        )

        state = self._session.get(models.TaxonomySyncStateOrm, _SYNC_STATE_ID)
        when = synced_at or datetime.now(timezone.utc)
        if state is None:
            state = models.TaxonomySyncStateOrm(id=_SYNC_STATE_ID, last_synced_at=when, record_count=len(records))
            self._session.add(state)
        else:
            state.last_synced_at = when
            state.record_count = len(records)
        self._session.commit()

    def list(self) -> list[TaxonomyRecord]:
        stmt = select(models.TaxonomyRecordOrm).order_by(models.TaxonomyRecordOrm.position.asc())
        rows = self._session.execute(stmt).scalars().all()
        return [self._to_domain(row) for row in rows]

    def last_synced_at(self) -> datetime | None:
        state = self._session.get(models.TaxonomySyncStateOrm, _SYNC_STATE_ID)
        if state is None:
            return None
        synced_at = state.last_synced_at
        if synced_at.tzinfo is None:
            synced_at = synced_at.replace(tzinfo=timezone.utc)
        return synced_at

    @staticmethod
    def _to_domain(row: models.TaxonomyRecordOrm) -> TaxonomyRecord:
        return TaxonomyRecord(
            id=TaxonomyId(row.record_id) if row.record_id is not None else None,
            name=row.name,
            type_key=TypeKey(row.type_key),
            parent_id=TaxonomyId(row.parent_id) if row.parent_id is not None else None,
            status=TaxonomyStatus(row.status),
            remark=row.remark,
        )
