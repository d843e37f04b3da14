"""Roster retrieval with a one-shot fallback to the values API."""

from __future__ import annotations

import logging
from typing import List

from .errors import FailureKind, IngestionFailure
from .models import FetchConfig, User
from .roster import ingest_lines, ingest_values
from .schema import RosterSchema, column_offset
from .sheets_client import SheetsApiError, SheetsClient

logger = logging.getLogger(__name__)

SOURCE_EXPORT = "export"
SOURCE_VALUES = "values"


class SourceFetcher:
    """Fetches the roster from the CSV export, falling back to the values API."""

    def __init__(self, client: SheetsClient, schema: RosterSchema) -> None:
        self.client = client
        self.schema = schema
        self.last_source: str | None = None

    async def fetch_roster(self, config: FetchConfig) -> List[User]:
        try:
            body = await self.client.export_csv(config.sheet_id, config.sheet_ref, timeout=config.timeout)
        except SheetsApiError as exc:
            logger.warning("CSV export failed (%s); falling back to the values API", exc.error)
            primary = exc
        else:
            self.last_source = SOURCE_EXPORT
            return ingest_lines(body.split("\n"), self.schema)

        if not config.api_key and not config.access_token:
            logger.error("Roster ingestion failed: no API key configured for the values API")
            raise IngestionFailure(
                "Could not read the roster: the export failed and no API key is configured",
                FailureKind.ACCESS,
                primary=primary,
            )

        try:
            values = await self.client.get_values(
                config.sheet_id,
                config.range,
                api_key=config.api_key,
                access_token=config.access_token,
                timeout=config.timeout,
            )
        except SheetsApiError as secondary:
            logger.error("Roster ingestion failed on both paths: %s / %s", primary.error, secondary.error)
            raise IngestionFailure(
                f"Could not read the roster: {secondary.error}",
                secondary.kind,
                primary=primary,
                secondary=secondary,
            ) from secondary

        self.last_source = SOURCE_VALUES
        return ingest_values(values, self.schema.shifted(column_offset(config.range)))


__all__ = ["SourceFetcher", "SOURCE_EXPORT", "SOURCE_VALUES"]
