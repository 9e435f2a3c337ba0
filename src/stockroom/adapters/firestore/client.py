"""Entity store backed by the Firestore REST v1 API."""

from __future__ import annotations

from dataclasses import replace
from logging import getLogger
from typing import TYPE_CHECKING
from urllib.parse import quote

import httpx
from pydantic import TypeAdapter, ValidationError

from stockroom.adapters.http_resilience import ResilientClient
from stockroom.config.firestore import get_firestore_config
from stockroom.domain.errors import RecordNotFoundError, StoreUnavailableError
from stockroom.domain.model import values_equal

from .schema import DocumentPayload, ErrorResponse, RunQueryItem
from .translator import document_to_record, encode_value, field_path, record_to_fields

if TYPE_CHECKING:
    from types import TracebackType

    from stockroom.config.firestore import FirestoreConfig
    from stockroom.domain.model import EntityKind, FieldValue, Record
    from stockroom.domain.ports import EntityStore

log = getLogger(__name__)

_RUN_QUERY_RESPONSE = TypeAdapter(list[RunQueryItem])


class FirestoreEntityStore:
    """One Firestore collection per entity kind, accessed over REST.

    Absolute URLs are built here; ``httpx`` base-URL merging would read the
    ``documents:runQuery`` suffix as a URL scheme.
    """

    def __init__(
        self,
        config: FirestoreConfig | None = None,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.config = config or get_firestore_config()
        resilience = self.config.resilience
        token = self.config.bearer_token
        if token is not None:
            headers = dict(resilience.default_headers or {})
            headers["Authorization"] = f"Bearer {token}"
            resilience = replace(resilience, default_headers=headers)
        self._client = ResilientClient(resilience, transport=transport)

    def __enter__(self) -> FirestoreEntityStore:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    # Queries ---------------------------------------------------------------

    def list_all(self, kind: EntityKind) -> list[Record]:
        # No orderBy: Firestore would silently leave out documents lacking the key field.
        documents = self._run_query(kind, self._query(kind))
        records = [document_to_record(kind, doc) for doc in documents]
        return sorted(records, key=lambda r: (r.natural_key, r.id or ""))

    def find_by_field(self, kind: EntityKind, name: str, value: FieldValue) -> list[Record]:
        query = self._query(kind)
        query["where"] = {
            "fieldFilter": {
                "field": {"fieldPath": field_path(name)},
                "op": "EQUAL",
                "value": encode_value(value),
            }
        }
        records = [document_to_record(kind, doc) for doc in self._run_query(kind, query)]
        # Firestore equality treats 1 and 1.0 as the same value.
        matches = [r for r in records if values_equal(kind.value_of(r, name), value)]
        return sorted(matches, key=lambda r: r.natural_key)

    def natural_keys(self, kind: EntityKind) -> list[str]:
        query = self._query(kind)
        query["select"] = {"fields": [{"fieldPath": field_path(kind.natural_key_field)}]}
        return [document_to_record(kind, doc).natural_key for doc in self._run_query(kind, query)]

    # Single documents ------------------------------------------------------

    def get(self, kind: EntityKind, record_id: str) -> Record | None:
        action = f"get {kind.name} record"
        response = self._send("GET", self._document_url(kind, record_id), action)
        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        self._raise_for_status(response, action)
        return document_to_record(kind, self._parse_document(response))

    def insert(self, kind: EntityKind, record: Record) -> str:
        url = f"{self.config.documents_url}/{quote(kind.collection, safe='')}"
        response = self._send(
            "POST", url, f"add {kind.name} record", json={"fields": record_to_fields(kind, record)}
        )
        self._raise_for_status(response, f"add {kind.name} record")
        return document_to_record(kind, self._parse_document(response)).id or ""

    def replace(self, kind: EntityKind, record: Record) -> None:
        if record.id is None:
            raise RecordNotFoundError(kind=kind.name, record_id="")
        fields = record_to_fields(kind, record)
        response = self._send(
            "PATCH",
            self._document_url(kind, record.id),
            f"update {kind.name} record",
            params=_update_params(fields),
            json={"fields": fields},
        )
        if response.status_code == httpx.codes.NOT_FOUND:
            raise RecordNotFoundError(kind=kind.name, record_id=record.id)
        self._raise_for_status(response, f"update {kind.name} record")

    def delete(self, kind: EntityKind, record_id: str) -> None:
        response = self._send(
            "DELETE", self._document_url(kind, record_id), f"delete {kind.name} record"
        )
        if response.status_code == httpx.codes.NOT_FOUND:
            return
        self._raise_for_status(response, f"delete {kind.name} record")

    # Transport -------------------------------------------------------------

    def _query(self, kind: EntityKind) -> dict[str, object]:
        return {"from": [{"collectionId": kind.collection}]}

    def _document_url(self, kind: EntityKind, record_id: str) -> str:
        collection = quote(kind.collection, safe="")
        return f"{self.config.documents_url}/{collection}/{quote(record_id, safe='')}"

    def _run_query(self, kind: EntityKind, query: dict[str, object]) -> list[DocumentPayload]:
        url = f"{self.config.documents_url}:runQuery"
        response = self._send(
            "POST", url, f"query {kind.name} records", json={"structuredQuery": query}
        )
        self._raise_for_status(response, f"query {kind.name} records")
        try:
            items = _RUN_QUERY_RESPONSE.validate_python(response.json())
        except (ValueError, ValidationError) as exc:
            raise StoreUnavailableError(
                f"Unexpected Firestore query response for {kind.name}"
            ) from exc
        return [item.document for item in items if item.document is not None]

    def _send(
        self,
        method: str,
        url: str,
        action: str,
        *,
        params: list[tuple[str, str]] | None = None,
        json: object = None,
    ) -> httpx.Response:
        try:
            return self._client.request(method, url, params=params, json=json)
        except httpx.HTTPError as exc:
            log.error("Firestore request failed (%s): %s", action, exc)
            raise StoreUnavailableError(
                f"Firestore request failed while trying to {action}"
            ) from exc

    def _raise_for_status(self, response: httpx.Response, action: str) -> None:
        if response.is_success:
            return
        message = _error_message(response)
        log.error(
            "Firestore API error %s while trying to %s: %s", response.status_code, action, message
        )
        raise StoreUnavailableError(
            f"Firestore error while trying to {action}: {message}",
            status_code=response.status_code,
        )

    def _parse_document(self, response: httpx.Response) -> DocumentPayload:
        try:
            return DocumentPayload.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise StoreUnavailableError("Unexpected Firestore document payload") from exc


def _update_params(fields: dict[str, object]) -> list[tuple[str, str]]:
    """Existence precondition plus an update mask over the written fields.

    Unmasked PATCH replaces the whole document, including fields we never decode.
    """

    params = [("currentDocument.exists", "true")]
    params.extend(("updateMask.fieldPaths", field_path(name)) for name in fields)
    return params


def _error_message(response: httpx.Response) -> str:
    try:
        error = ErrorResponse.model_validate(response.json())
    except ValueError:
        return response.reason_phrase
    return error.error.message or error.error.status or response.reason_phrase


if TYPE_CHECKING:
    _store_check: EntityStore = FirestoreEntityStore()
