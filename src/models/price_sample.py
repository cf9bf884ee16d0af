# src/models/price_sample.py

"""Spot price sample and run record models for the persisted dataset."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


def utc_now_iso() -> str:
    """Current UTC instant in ISO-8601 with millisecond precision."""
    return (
        datetime.now(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


@dataclass
class PriceSample:
    """One retail price observation for one region at one instant."""

    region: str
    timestamp: str
    retail_price: float
    unit_price: float
    currency_code: str
    location: str = ""
    effective_start_date: str = ""
    meter_name: str = ""
    sku_name: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Serialise using the API's camelCase field names."""
        return {
            "region": self.region,
            "timestamp": self.timestamp,
            "retailPrice": self.retail_price,
            "unitPrice": self.unit_price,
            "currencyCode": self.currency_code,
            "location": self.location,
            "effectiveStartDate": self.effective_start_date,
            "meterName": self.meter_name,
            "skuName": self.sku_name,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PriceSample":
        """Rebuild a sample from its persisted JSON form.

        Raises ``KeyError`` when a required field is missing.
        """
        return cls(
            region=data["region"],
            timestamp=data["timestamp"],
            retail_price=data["retailPrice"],
            unit_price=data["unitPrice"],
            currency_code=data["currencyCode"],
            location=data.get("location") or "",
            effective_start_date=data.get("effectiveStartDate") or "",
            meter_name=data.get("meterName") or "",
            sku_name=data.get("skuName") or "",
        )


@dataclass
class RunRecord:
    """Everything one scheduled run collected, keyed by region.

    A region missing from ``regions`` failed to fetch during that run.
    """

    timestamp: str
    regions: dict[str, PriceSample] = field(
        default_factory=lambda: dict[str, PriceSample]()
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "regions": {
                key: sample.to_dict()
                for key, sample in self.regions.items()
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RunRecord":
        regions = data.get("regions") or {}
        return cls(
            timestamp=data["timestamp"],
            regions={
                key: PriceSample.from_dict(sample)
                for key, sample in regions.items()
            },
        )


def records_to_json(records: list[RunRecord]) -> list[dict[str, Any]]:
    """Serialise a dataset to plain dicts for JSON output."""
    return [r.to_dict() for r in records]


def records_from_json(data: Any) -> list[RunRecord]:
    """Parse a JSON array of run records.

    Raises ``TypeError`` when *data* is not a list.
    """
    if not isinstance(data, list):
        msg = f"Expected a JSON array of run records, got {type(data).__name__}"
        raise TypeError(msg)
    return [RunRecord.from_dict(item) for item in data]
