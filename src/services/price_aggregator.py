# src/services/price_aggregator.py

"""Per-region price statistics for the dashboard, rebuilt from raw runs."""

import json
import logging
from pathlib import Path
from typing import Any

from src.models.price_sample import RunRecord, records_from_json, utc_now_iso

logger = logging.getLogger("spot_tracker.aggregator")


def _stats(prices: list[float]) -> dict[str, float | int | None]:
    """count/current/min/max/avg, with ``None`` for an empty series."""
    if not prices:
        return {
            "count": 0,
            "current": None,
            "min": None,
            "max": None,
            "avg": None,
        }
    return {
        "count": len(prices),
        "current": prices[-1],
        "min": min(prices),
        "max": max(prices),
        "avg": sum(prices) / len(prices),
    }


def aggregate(
    records: list[RunRecord], now: str | None = None,
) -> dict[str, Any]:
    """Group every sample by region and summarise its retail price.

    Pure apart from the ``lastUpdated`` stamp; pass *now* to pin it.
    """
    regions: dict[str, dict[str, Any]] = {}

    for record in records:
        for key, sample in record.regions.items():
            bucket = regions.setdefault(key, {
                "name": key,
                "displayName": sample.location,
                "data": [],
            })
            bucket["data"].append({
                "timestamp": record.timestamp,
                "retailPrice": sample.retail_price,
                "unitPrice": sample.unit_price,
                "currencyCode": sample.currency_code,
            })

    for bucket in regions.values():
        bucket["stats"] = _stats(
            [point["retailPrice"] for point in bucket["data"]]
        )

    return {
        "lastUpdated": now or utc_now_iso(),
        "regions": regions,
        "summary": {
            "totalEntries": len(records),
            "dateRange": {
                "start": records[0].timestamp if records else None,
                "end": records[-1].timestamp if records else None,
            },
        },
    }


def run_aggregation(source: Path, output: Path) -> dict[str, Any]:
    """Read the raw dataset file and write the summary document.

    Errors propagate; a missing or malformed source is fatal for
    this offline pass.
    """
    with open(source, encoding="utf-8") as f:
        records = records_from_json(json.load(f))
    logger.info("Processing %d price entries from %s", len(records), source)

    summary = aggregate(records)

    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, "w", encoding="utf-8") as f:
        json.dump(summary, f, ensure_ascii=False, indent=2)

    logger.info(
        "Summary written to %s (regions: %s)",
        output,
        ", ".join(summary["regions"]) or "none",
    )
    return summary
