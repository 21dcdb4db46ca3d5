from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable

import requests

from domain.taxonomy import TaxonomyId, TaxonomyRecord

logger = logging.getLogger(__name__)

SUCCESS_CODES = (0, 200)


class DictionaryApiError(RuntimeError):
    def __init__(
        self,
        message: str,
        *,
        code: int | None = None,
        status_code: int | None = None,
        payload: Any | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.status_code = status_code
        self.payload = payload


@dataclass(frozen=True)
class DictionaryEntryPage:
    entries: list[dict[str, Any]]
    total: int


def clean_request_params(params: dict[str, Any]) -> dict[str, Any]:
    """Drop empty-string and ``None`` values so the backend does not filter on them."""
    return {key: value for key, value in params.items() if value not in ("", None)}


class DictionaryApiClient:
    """Client for the backend reference-data endpoints (dictionary types and entries)."""

    TYPE_LIST_PATH = "/system/dict/type/optionSelect"
    TYPE_GET_PATH = "/system/dict/type/get"
    TYPE_ADD_PATH = "/system/dict/type/add"
    TYPE_EDIT_PATH = "/system/dict/type/edit"
    TYPE_DELETE_PATH = "/system/dict/type/delete"
    DATA_LIST_PATH = "/system/dict/data/list"

    def __init__(
        self,
        *,
        base_url: str,
        token: str = "",
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        if not base_url:
            msg = "base_url must be provided"
            raise ValueError(msg)

        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self._session = session or requests.Session()

    def list_types(self) -> list[TaxonomyRecord]:
        data = self._request("GET", self.TYPE_LIST_PATH)
        if isinstance(data, dict):
            data = data.get("dictType") or data.get("list") or []
        if not isinstance(data, list):
            raise DictionaryApiError("Dictionary type list has unexpected shape", payload=data)

        records = [TaxonomyRecord.from_wire(item) for item in data]
        logger.info("Fetched %d dictionary types", len(records))
        return records

    def get_type(self, type_id: TaxonomyId) -> TaxonomyRecord | None:
        data = self._request("GET", self.TYPE_GET_PATH, params={"dictId": type_id})
        if not data:
            return None
        return TaxonomyRecord.from_wire(data)

    def create_type(self, record: TaxonomyRecord) -> None:
        payload = record.to_wire()
        payload.pop("dictId", None)
        self._request("POST", self.TYPE_ADD_PATH, json=payload)
        logger.info("Created dictionary type type_key=%s parent_id=%s", record.type_key, payload["pid"])

    def update_type(self, record: TaxonomyRecord) -> None:
        if record.id is None:
            msg = "update_type requires a saved record with an id"
            raise ValueError(msg)
        self._request("PUT", self.TYPE_EDIT_PATH, json=record.to_wire())
        logger.info("Updated dictionary type id=%s", record.id)

    def delete_types(self, type_ids: Iterable[TaxonomyId]) -> None:
        ids = list(type_ids)
        if not ids:
            return
        self._request("DELETE", self.TYPE_DELETE_PATH, json={"dictIds": ids})
        logger.info("Deleted dictionary types ids=%s", ids)

    def list_entries(self, **params: Any) -> DictionaryEntryPage:
        data = self._request("GET", self.DATA_LIST_PATH, params=clean_request_params(params))
        if isinstance(data, dict):
            entries = data.get("list") or data.get("rows") or []
            total = data.get("total") or len(entries)
        else:
            entries = data or []
            total = len(entries)
        return DictionaryEntryPage(entries=list(entries), total=int(total))

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any | None = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        try:
            response = self._session.request(
                method,
                url,
                params=params,
                json=json,
                timeout=self.timeout,
                headers=headers,
            )
            response.raise_for_status()
        except requests.HTTPError as exc:
            resp = exc.response
            status_code = getattr(resp, "status_code", None)
            error_payload: Any | None = None
            message = "Dictionary API request failed"
            if resp is not None:
                try:
                    error_payload = resp.json()
                    if isinstance(error_payload, dict):
                        message = error_payload.get("message") or error_payload.get("msg") or message
                except ValueError:
                    error_payload = resp.text
            raise DictionaryApiError(message, status_code=status_code, payload=error_payload) from exc
        except requests.RequestException as exc:
            status_code = getattr(getattr(exc, "response", None), "status_code", None)
            raise DictionaryApiError("Dictionary API request failed", status_code=status_code) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise DictionaryApiError("Dictionary API returned invalid JSON", payload=response.text) from exc

        if not isinstance(payload, dict) or "code" not in payload:
            return payload

        self._raise_for_code(payload, response.status_code)
        data = payload.get("data")
        # Some endpoints nest a second envelope inside ``data``.
        if isinstance(data, dict) and "code" in data:
            self._raise_for_code(data, response.status_code, fallback=payload)
            data = data.get("data")
        return data

    @staticmethod
    def _raise_for_code(envelope: dict[str, Any], status_code: int, *, fallback: dict[str, Any] | None = None) -> None:
        code = envelope.get("code")
        try:
            code_value = int(code) if code is not None else None
        except (TypeError, ValueError):
            code_value = None
        if code_value in SUCCESS_CODES:
            return
        outer = fallback or {}
        message = (
            envelope.get("message")
            or envelope.get("msg")
            or outer.get("message")
            or outer.get("msg")
            or "Dictionary API request failed"
        )
        raise DictionaryApiError(str(message), code=code_value, status_code=status_code, payload=envelope)


__all__ = ["DictionaryApiClient", "DictionaryApiError", "DictionaryEntryPage", "clean_request_params"]
