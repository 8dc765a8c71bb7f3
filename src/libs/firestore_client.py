"""
Firestore REST client.

Implements the document store port over the Firestore v1 REST API, including
conversion between plain Python values and Firestore typed values.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any

import httpx
import structlog
from src.core.config import get_settings
from src.domain.errors import StoreUnavailableError

logger = structlog.get_logger()

PAGE_SIZE = 300


def encode_value(value: Any) -> dict[str, Any]:
    """Convert a Python value to a Firestore typed value."""
    if value is None:
        return {"nullValue": None}
    if isinstance(value, bool):
        return {"booleanValue": value}
    if isinstance(value, int):
        return {"integerValue": str(value)}
    if isinstance(value, float):
        return {"doubleValue": value}
    if isinstance(value, datetime):
        return {"timestampValue": value.isoformat()}
    if isinstance(value, str):
        return {"stringValue": value}
    if isinstance(value, Mapping):
        return {"mapValue": {"fields": encode_fields(value)}}
    if isinstance(value, list | tuple):
        return {"arrayValue": {"values": [encode_value(item) for item in value]}}
    raise TypeError(f"Unsupported Firestore value: {type(value).__name__}")


def encode_fields(data: Mapping[str, Any]) -> dict[str, Any]:
    return {key: encode_value(value) for key, value in data.items()}


def decode_value(value: Mapping[str, Any]) -> Any:
    """Convert a Firestore typed value to a plain Python value."""
    if "nullValue" in value:
        return None
    if "booleanValue" in value:
        return bool(value["booleanValue"])
    if "integerValue" in value:
        return int(value["integerValue"])
    if "doubleValue" in value:
        return float(value["doubleValue"])
    if "timestampValue" in value:
        return value["timestampValue"]
    if "stringValue" in value:
        return value["stringValue"]
    if "referenceValue" in value:
        return value["referenceValue"]
    if "mapValue" in value:
        return decode_fields(value["mapValue"].get("fields", {}))
    if "arrayValue" in value:
        return [decode_value(item) for item in value["arrayValue"].get("values", [])]
    if "geoPointValue" in value:
        return dict(value["geoPointValue"])
    raise ValueError(f"Unknown Firestore value type: {sorted(value)}")


def decode_fields(fields: Mapping[str, Any]) -> dict[str, Any]:
    return {key: decode_value(value) for key, value in fields.items()}


def _document_id(name: str) -> str:
    return name.rsplit("/", 1)[-1]


class FirestoreDocumentStore:
    """Async Firestore document store over REST."""

    def __init__(
        self,
        project_id: str | None = None,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = get_settings()
        self.project_id = project_id or settings.firebase_project_id
        self.api_key = api_key if api_key is not None else settings.firebase_api_key
        self.base_url = base_url or settings.firestore_url
        self.timeout = (
            timeout_seconds if timeout_seconds is not None else settings.http_timeout_seconds
        )
        self._transport = transport

        if not self.project_id:
            logger.warning("firestore_project_missing", msg="FIREBASE_PROJECT_ID not configured")

    @property
    def documents_url(self) -> str:
        return f"{self.base_url}/projects/{self.project_id}/databases/(default)/documents"

    async def get_document(self, collection: str, key: str) -> dict[str, Any] | None:
        response = await self._request("GET", f"{collection}/{key}")
        if response.status_code == 404:
            return None
        return decode_fields(self._json(response).get("fields", {}))

    async def set_document(self, collection: str, key: str, data: Mapping[str, Any]) -> None:
        response = await self._request(
            "PATCH", f"{collection}/{key}", json={"fields": encode_fields(data)}
        )
        self._json(response)

    async def add_document(self, collection: str, data: Mapping[str, Any]) -> str:
        response = await self._request("POST", collection, json={"fields": encode_fields(data)})
        return _document_id(self._json(response)["name"])

    async def update_document(
        self, collection: str, key: str, changes: Mapping[str, Any]
    ) -> dict[str, Any] | None:
        params: list[tuple[str, str]] = [("currentDocument.exists", "true")]
        params.extend(("updateMask.fieldPaths", field) for field in changes)
        response = await self._request(
            "PATCH",
            f"{collection}/{key}",
            params=params,
            json={"fields": encode_fields(changes)},
        )
        if response.status_code == 404:
            return None
        return decode_fields(self._json(response).get("fields", {}))

    async def delete_document(self, collection: str, key: str) -> bool:
        response = await self._request(
            "DELETE", f"{collection}/{key}", params=[("currentDocument.exists", "true")]
        )
        if response.status_code == 404:
            return False
        self._json(response)
        return True

    async def list_documents(
        self, collection: str, where: Mapping[str, Any] | None = None
    ) -> list[tuple[str, dict[str, Any]]]:
        documents: list[tuple[str, dict[str, Any]]] = []
        page_token: str | None = None
        while True:
            params: list[tuple[str, str]] = [("pageSize", str(PAGE_SIZE))]
            if page_token:
                params.append(("pageToken", page_token))
            payload = self._json(await self._request("GET", collection, params=params))

            for document in payload.get("documents", []):
                data = decode_fields(document.get("fields", {}))
                if where and any(data.get(k) != v for k, v in where.items()):
                    continue
                documents.append((_document_id(document["name"]), data))

            page_token = payload.get("nextPageToken")
            if not page_token:
                return documents

    async def ping(self) -> None:
        self._json(await self._request("GET", "Admin", params=[("pageSize", "1")]))

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: list[tuple[str, str]] | None = None,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        query = list(params or [])
        if self.api_key:
            query.append(("key", self.api_key))

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                return await client.request(
                    method, f"{self.documents_url}/{path}", params=query, json=json
                )
        except httpx.TimeoutException as exc:
            await logger.awarning("firestore_timeout", method=method, path=path)
            raise StoreUnavailableError(f"Firestore request timed out: {path}") from exc
        except httpx.RequestError as exc:
            await logger.awarning("firestore_request_error", method=method, path=path, error=str(exc))
            raise StoreUnavailableError(f"Firestore request failed: {exc}") from exc

    def _json(self, response: httpx.Response) -> dict[str, Any]:
        if response.status_code >= 400:
            raise StoreUnavailableError(
                f"Firestore error {response.status_code}: {response.text[:200]}"
            )
        return response.json() if response.content else {}
