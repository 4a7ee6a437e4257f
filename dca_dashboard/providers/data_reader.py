"""Reader for the JSON and NDJSON files published by the DCA bot.

Files live under a base path injected at construction time. The base path is
either an ``http(s)://`` URL, fetched with httpx, or a local directory.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, TypeVar
from urllib.parse import urlsplit

import httpx
from opentelemetry.propagate import inject
from pydantic import BaseModel, ValidationError

from dca_dashboard.config import AppSettings, get_settings
from dca_dashboard.config.settings import DEFAULT_PRICES_FILE
from dca_dashboard.core.telemetry import data_file_span, record_dropped_lines
from dca_dashboard.models import Iteration, PositionsSnapshot, PricePoint, Transaction
from dca_dashboard.schemas.records import (
    IterationRecord,
    PositionsSnapshotRecord,
    PriceRecord,
    TransactionRecord,
)

logger = logging.getLogger(__name__)

POSITIONS_FILE = "positions_current.json"
TRANSACTIONS_FILE = "transactions.ndjson"
ITERATIONS_FILE = "iterations.ndjson"


class FetchError(RuntimeError):
    """Raised when a data file cannot be retrieved."""

    def __init__(self, resource: str, status: int | None = None, detail: str | None = None):
        self.resource = resource
        self.status = status
        self.detail = detail
        message = f"Failed to fetch {resource}"
        if status is not None:
            message += f": HTTP {status}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)


class ParseError(ValueError):
    """A record in a data file could not be decoded."""

    def __init__(self, resource: str, line_number: int | None, reason: str):
        self.resource = resource
        self.line_number = line_number
        self.reason = reason
        where = f"{resource}:{line_number}" if line_number is not None else resource
        super().__init__(f"Malformed record in {where}: {reason}")


RecordT = TypeVar("RecordT", bound=BaseModel)


def join_path(base: str, name: str) -> str:
    """Join ``base`` and ``name`` with exactly one slash between them."""

    return f"{base.rstrip('/')}/{name.lstrip('/')}"


def parse_ndjson(text: str, model: type[RecordT], *, resource: str = "ndjson") -> list[RecordT]:
    """Parse newline-delimited JSON into ``model`` records.

    Blank lines are ignored. Lines that are not JSON, or do not match
    ``model``, are logged and dropped.
    """

    records: list[RecordT] = []
    dropped = 0
    for line_number, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        try:
            records.append(_parse_line(line, model, resource, line_number))
        except ParseError as exc:
            dropped += 1
            logger.warning("%s; line dropped", exc)
    record_dropped_lines(resource, dropped)
    return records


def _parse_line(line: str, model: type[RecordT], resource: str, line_number: int) -> RecordT:
    try:
        payload = json.loads(line)
    except json.JSONDecodeError as exc:
        raise ParseError(resource, line_number, f"invalid JSON: {exc.msg}") from exc
    if not isinstance(payload, dict):
        raise ParseError(resource, line_number, "expected a JSON object")
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) or "record" for err in exc.errors())
        raise ParseError(resource, line_number, f"invalid fields: {fields}") from exc


class DataReader:
    """Fetch and decode the bot's output files under ``base_path``."""

    def __init__(
        self,
        base_path: str,
        *,
        prices_file: str = DEFAULT_PRICES_FILE,
        timeout_seconds: float = 15.0,
        client: httpx.AsyncClient | None = None,
    ):
        if not base_path:
            raise ValueError("base_path must not be empty")
        self.base_path = base_path
        self.prices_file = prices_file
        self.timeout_seconds = timeout_seconds
        self._client = client
        self._remote = urlsplit(base_path).scheme in ("http", "https")

    @classmethod
    def from_settings(cls, settings: AppSettings | None = None) -> "DataReader":
        settings = settings or get_settings()
        return cls(
            settings.data_base_path,
            prices_file=settings.prices_file,
            timeout_seconds=settings.request_timeout_seconds,
        )

    def resource_location(self, name: str) -> str:
        if self._remote:
            return join_path(self.base_path, name)
        return str(Path(self.base_path) / name.lstrip("/"))

    async def fetch_text(self, name: str) -> str:
        """Return the raw contents of ``name`` or raise ``FetchError``."""

        with data_file_span(name, self.resource_location(name)):
            if self._remote:
                return await self._fetch_remote(name)
            return await self._read_local(name)

    async def _fetch_remote(self, name: str) -> str:
        url = self.resource_location(name)
        headers: dict[str, str] = {}
        # Propagate trace context so the file server's spans link to this request
        try:
            inject(headers)
        except Exception:
            pass
        try:
            if self._client is not None:
                response = await self._client.get(url, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                    response = await client.get(url, headers=headers)
        except httpx.HTTPError as exc:
            raise FetchError(name, detail=str(exc) or exc.__class__.__name__) from exc
        if response.status_code >= 400:
            logger.warning("Data file %s returned HTTP %s", url, response.status_code)
            raise FetchError(name, status=response.status_code, detail=response.reason_phrase)
        return response.text

    async def _read_local(self, name: str) -> str:
        path = Path(self.resource_location(name))
        try:
            return await asyncio.to_thread(path.read_text, encoding="utf-8")
        except FileNotFoundError as exc:
            raise FetchError(name, status=404, detail=f"{path} not found") from exc
        except OSError as exc:
            raise FetchError(name, detail=str(exc)) from exc

    async def _fetch_records(self, name: str, model: type[RecordT]) -> list[Any]:
        text = await self.fetch_text(name)
        records = parse_ndjson(text, model, resource=name)
        return [record.to_domain() for record in records]  # type: ignore[attr-defined]

    async def fetch_transactions(self) -> list[Transaction]:
        return await self._fetch_records(TRANSACTIONS_FILE, TransactionRecord)

    async def fetch_prices(self) -> list[PricePoint]:
        return await self._fetch_records(self.prices_file, PriceRecord)

    async def fetch_iterations(self) -> list[Iteration]:
        return await self._fetch_records(ITERATIONS_FILE, IterationRecord)

    async def fetch_positions_snapshot(self) -> PositionsSnapshot:
        """Load the bot's own pre-computed snapshot (legacy input)."""

        text = await self.fetch_text(POSITIONS_FILE)
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ParseError(POSITIONS_FILE, None, f"invalid JSON: {exc.msg}") from exc
        try:
            return PositionsSnapshotRecord.model_validate(payload).to_domain()
        except ValidationError as exc:
            raise ParseError(POSITIONS_FILE, None, str(exc)) from exc


__all__ = [
    "DataReader",
    "FetchError",
    "ParseError",
    "POSITIONS_FILE",
    "TRANSACTIONS_FILE",
    "ITERATIONS_FILE",
    "join_path",
    "parse_ndjson",
]
