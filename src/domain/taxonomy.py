from __future__ import annotations

from enum import StrEnum
from typing import Any, NewType

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

TaxonomyId = NewType("TaxonomyId", int)
TypeKey = NewType("TypeKey", str)

ROOT_PARENT_ID = 0


class TaxonomyStatus(StrEnum):
    ENABLED = "1"
    DISABLED = "0"


class TaxonomyRecord(BaseModel):
    """A reference-data category as received from the list endpoint.

    ``parent_id`` of ``0``/``None`` (or one that no other record carries) marks a root.
    ``id`` is ``None`` only for a draft that has not been saved yet.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: TaxonomyId | None = None
    name: str = ""
    type_key: TypeKey = Field(default=TypeKey(""), alias="typeKey")
    parent_id: TaxonomyId | None = Field(default=None, alias="parentId")
    status: TaxonomyStatus = TaxonomyStatus.ENABLED
    remark: str = ""

    @model_validator(mode="before")
    @classmethod
    def _coerce_blanks(cls, data: Any) -> Any:
        # Backend sends "" and null interchangeably for optional text fields.
        if isinstance(data, dict):
            data = dict(data)
            for key in ("name", "remark", "type_key", "typeKey"):
                if key in data and data[key] is None:
                    data[key] = ""
            for key in ("parent_id", "parentId"):
                if data.get(key) in ("", "0"):
                    data[key] = ROOT_PARENT_ID
            if isinstance(data.get("status"), int):
                data["status"] = str(data["status"])
        return data

    @classmethod
    def from_wire(cls, payload: dict[str, Any]) -> TaxonomyRecord:
        status = payload.get("status")
        return cls(
            id=payload.get("dictId"),
            name=payload.get("dictName") or "",
            type_key=payload.get("dictType") or "",
            parent_id=payload.get("pid"),
            status=TaxonomyStatus(str(status)) if status not in (None, "") else TaxonomyStatus.ENABLED,
            remark=payload.get("remark") or "",
        )

    def to_wire(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "dictName": self.name,
            "dictType": self.type_key,
            "pid": self.parent_id or ROOT_PARENT_ID,
            "status": self.status.value,
            "remark": self.remark,
        }
        if self.id is not None:
            payload["dictId"] = self.id
        return payload


class TaxonomyNode(TaxonomyRecord):
    # None, never [], for a leaf.
    children: list[TaxonomyNode] | None = None

    @field_validator("children")
    @classmethod
    def _empty_children_as_leaf(cls, value: list[TaxonomyNode] | None) -> list[TaxonomyNode] | None:
        return value or None

    @classmethod
    def from_record(cls, record: TaxonomyRecord, children: list[TaxonomyNode] | None = None) -> TaxonomyNode:
        return cls(**record.model_dump(), children=children or None)


Forest = list[TaxonomyNode]


class TaxonomyOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    value: TypeKey
    id: TaxonomyId | None = None


class TaxonomySelection(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: TypeKey
    node: TaxonomyNode
