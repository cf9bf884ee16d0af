# src/services/spot_price_collector.py

"""Orchestrates one collection run: fetch, merge, persist."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Protocol

from src.config.settings import Settings, TrackerConfig
from src.models.outcomes import (
    FetchFailure,
    LoadResult,
    LocalSaveStatus,
    SaveResult,
)
from src.models.price_sample import PriceSample, RunRecord, utc_now_iso

logger = logging.getLogger("spot_tracker.collector")


class PriceFetcher(Protocol):
    """Anything that can price one region (see RetailPricesClient)."""

    def fetch(self, region: str) -> PriceSample | FetchFailure: ...


class RemoteStore(Protocol):
    """Authoritative dataset storage (see GitHubDatasetStore)."""

    def load(self, path: str | None = None) -> LoadResult: ...

    def save(
        self,
        records: list[RunRecord],
        path: str | None = None,
        message: str | None = None,
    ) -> SaveResult: ...


class SnapshotStore(Protocol):
    """Advisory single-run local copy (see LocalSnapshotStore)."""

    def try_save(self, record: RunRecord) -> LocalSaveStatus: ...

    def load_last(self) -> list[RunRecord]: ...


@dataclass
class CollectionSummary:
    """What one run collected and where each write ended up."""

    record: RunRecord
    load: LoadResult
    dataset_source: str  # "remote", "local" or "empty"
    dataset_length: int
    local_status: LocalSaveStatus
    remote: SaveResult
    failures: list[FetchFailure] = field(
        default_factory=lambda: list[FetchFailure]()
    )


class SpotPriceCollector:
    """Samples every configured region and appends one run record.

    Each call to :meth:`run` adds exactly one record to the dataset,
    even when every fetch failed.  Fetch and storage problems are
    absorbed into the returned summary; only genuine defects raise.
    """

    def __init__(
        self,
        config: TrackerConfig,
        fetcher: PriceFetcher,
        remote_store: RemoteStore,
        local_store: SnapshotStore,
        regions: list[dict[str, str]] | None = None,
        request_delay: float | None = None,
        max_history: int | None = None,
    ) -> None:
        self.config = config
        self.fetcher = fetcher
        self.remote_store = remote_store
        self.local_store = local_store
        self.regions = regions or Settings.REGIONS
        self.request_delay = (
            Settings.REQUEST_DELAY if request_delay is None else request_delay
        )
        self.max_history = (
            Settings.MAX_HISTORY_ENTRIES if max_history is None else max_history
        )

    # ── Private helpers ──────────────────────────────────

    async def _collect(self) -> tuple[RunRecord, list[FetchFailure]]:
        """Fetch regions one at a time, spacing requests evenly."""
        record = RunRecord(timestamp=utc_now_iso())
        failures: list[FetchFailure] = []

        for region in self.regions:
            key = region["name"]
            label = region.get("display_name", key)
            result = await asyncio.to_thread(self.fetcher.fetch, key)
            if isinstance(result, PriceSample):
                record.regions[key] = result
                logger.info(
                    "%s: %s %s/hour",
                    label,
                    result.retail_price,
                    result.currency_code,
                )
            else:
                failures.append(result)
                logger.warning(
                    "%s: failed to fetch data (%s)", label, result.reason,
                )
            await asyncio.sleep(self.request_delay)

        return record, failures

    async def _load_existing(self) -> tuple[LoadResult, list[RunRecord], str]:
        """Prefer the remote dataset, falling back to the local snapshot."""
        load = await asyncio.to_thread(
            self.remote_store.load, self.config.data_path,
        )
        if load.records:
            return load, list(load.records), "remote"

        local = await asyncio.to_thread(self.local_store.load_last)
        if local:
            logger.info(
                "Remote dataset %s; continuing from local snapshot "
                "(%d records)",
                load.status.value,
                len(local),
            )
            return load, local, "local"

        return load, [], "empty"

    def _apply_retention(self, records: list[RunRecord]) -> list[RunRecord]:
        if self.max_history > 0 and len(records) > self.max_history:
            dropped = len(records) - self.max_history
            logger.info("Trimming %d oldest run records", dropped)
            return records[dropped:]
        return records

    # ── Entry point ──────────────────────────────────────

    async def run(self) -> CollectionSummary:
        """Run one collection cycle end to end."""
        logger.info(
            "Spot price collection started for %d regions",
            len(self.regions),
        )
        record, failures = await self._collect()

        load, dataset, source = await self._load_existing()
        dataset.append(record)
        dataset = self._apply_retention(dataset)

        local_status = await asyncio.to_thread(
            self.local_store.try_save, record,
        )
        remote = await asyncio.to_thread(
            self.remote_store.save, dataset, self.config.data_path,
        )

        logger.info(
            "Collection complete: %d/%d regions, %d records, "
            "local=%s remote=%s",
            len(record.regions),
            len(self.regions),
            len(dataset),
            local_status.value,
            remote.status.value,
        )
        return CollectionSummary(
            record=record,
            load=load,
            dataset_source=source,
            dataset_length=len(dataset),
            local_status=local_status,
            remote=remote,
            failures=failures,
        )
