from __future__ import annotations

import logging
from datetime import date
from typing import Callable, List, Optional

from weather_records.core.errors import UpstreamUnavailable
from weather_records.schemas.records import Coordinates, DateRange, Location, WeatherRecord
from weather_records.services import date_range as ranges
from weather_records.services.export_service import ExportDocument, ExportFormat, encode
from weather_records.services.history_service import HistoryService
from weather_records.services.record_store import RecordStore

logger = logging.getLogger(__name__)

DownloadSink = Callable[[bytes, str, str], None]

DEFAULT_PRESET_DAYS = 7


def empty_location() -> Location:
    return Location(display_name="", coordinates=Coordinates(latitude=0, longitude=0))


class RecordEditor:
    """
    Draft record form state.

    Holds the record being created or edited, re-derives its observations
    whenever the location or the date range changes, and saves it through
    the record store.

    Every refetch takes a new generation token. A result is applied only if
    its token is still the latest one when it arrives, so a slow response
    for an earlier location or range never overwrites a newer one. When a
    fetch fails, the form goes back to the location, range and observations
    it held after the last completed fetch, so the draft never pairs a range
    with a series fetched for another one.
    """

    def __init__(
        self,
        history: HistoryService,
        store: RecordStore,
        clock: Callable[[], date] = ranges.today_utc,
    ):
        self.history = history
        self.store = store
        self.clock = clock
        self.loading = False
        self._generation = 0
        self._settle(self._new_draft())

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def records(self) -> List[WeatherRecord]:
        return self.store.records

    @property
    def has_location(self) -> bool:
        return bool(self.draft.location.display_name.strip())

    def _new_draft(self) -> WeatherRecord:
        return WeatherRecord(
            location=empty_location(),
            date_range=ranges.preset_range(DEFAULT_PRESET_DAYS, self.clock()),
            observations=[],
        )

    def _settle(self, draft: WeatherRecord) -> None:
        # last draft whose observations belong to its location and range
        self.draft = draft
        self._settled = draft

    def _invalidate(self) -> int:
        self._generation += 1
        return self._generation

    def reset(self) -> None:
        self._invalidate()
        self.loading = False
        self._settle(self._new_draft())

    def edit(self, record: WeatherRecord) -> None:
        """Load a stored record into the form."""
        self._invalidate()
        self.loading = False
        self._settle(record.model_copy(deep=True))

    # ------------------------------------------------------------------
    # Location and date range
    # ------------------------------------------------------------------

    async def _refresh(self) -> bool:
        token = self._invalidate()
        location = self.draft.location
        date_range = self.draft.date_range
        self.loading = True

        try:
            observations = await self.history.fetch_range(location.coordinates, date_range, self.clock())
        except UpstreamUnavailable:
            if token != self._generation:
                logger.debug("Ignoring failure of superseded fetch (generation %d)", token)
                return False
            self.loading = False
            self.draft = self._settled
            raise

        if token != self._generation:
            logger.debug("Discarding stale series (generation %d, current %d)", token, self._generation)
            return False

        self.loading = False
        self._settle(self.draft.model_copy(update={"observations": observations}))
        return True

    async def set_location(self, location: Location) -> bool:
        """
        Replace the location and reload the series.

        Returns False when the result was superseded by a newer request.
        """
        self.draft = self.draft.model_copy(update={"location": location})
        return await self._refresh()

    async def set_date_range(self, start: date, end: date) -> bool:
        """
        Validate and apply a new date range, reloading the series when a
        location is selected.

        Raises:
            DateRangeError: the range is rejected; the form is unchanged.
        """
        date_range: DateRange = self.history.validate(start, end, self.clock())
        draft = self.draft.model_copy(update={"date_range": date_range})
        if not draft.location.display_name.strip():
            self._settle(draft)
            return False
        self.draft = draft
        return await self._refresh()

    async def apply_preset(self, days: int) -> bool:
        """Select the last `days` days; 0 means a custom range (no change)."""
        if days == 0:
            return False
        preset = ranges.preset_range(days, self.clock())
        return await self.set_date_range(preset.start, preset.end)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    async def refresh_records(self) -> List[WeatherRecord]:
        return await self.store.list()

    async def save(self) -> WeatherRecord:
        """
        Create the draft, or replace the stored record it was loaded from.
        The form is reset once the store confirmed the write.
        """
        if self.draft.id:
            record = await self.store.update(self.draft.id, self.draft)
        else:
            record = await self.store.create(self.draft)
        self.reset()
        return record

    async def delete(self, record_id: str) -> None:
        await self.store.delete(record_id)
        if self.draft.id == record_id:
            self.reset()

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def export(self, record: WeatherRecord, fmt: ExportFormat | str, sink: DownloadSink) -> ExportDocument:
        document = encode(record, fmt)
        sink(document.content, document.filename, document.media_type)
        return document
