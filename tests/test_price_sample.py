# tests/test_price_sample.py

"""Tests for the PriceSample and RunRecord data models."""

import unittest
from datetime import datetime, timedelta

from src.models.price_sample import (
    PriceSample,
    RunRecord,
    records_from_json,
    records_to_json,
    utc_now_iso,
)
from src.services import price_aggregator


def _sample(region: str = "eastus2", price: float = 0.1234) -> PriceSample:
    return PriceSample(
        region=region,
        timestamp="2026-10-19T12:00:00.000Z",
        retail_price=price,
        unit_price=price,
        currency_code="USD",
        location="US East 2",
        effective_start_date="2026-10-01T00:00:00Z",
        meter_name="D16s v5 Spot",
        sku_name="D16s v5 Spot",
    )


class TestPriceSample(unittest.TestCase):
    """PriceSample JSON mapping."""

    def test_to_dict_uses_camel_case(self) -> None:
        """Persisted keys match the pricing API field names."""
        data = _sample().to_dict()
        self.assertEqual(
            set(data),
            {
                "region", "timestamp", "retailPrice", "unitPrice",
                "currencyCode", "location", "effectiveStartDate",
                "meterName", "skuName",
            },
        )
        self.assertEqual(data["retailPrice"], 0.1234)

    def test_from_dict_restores_fields(self) -> None:
        """from_dict inverts to_dict."""
        sample = _sample()
        self.assertEqual(PriceSample.from_dict(sample.to_dict()), sample)

    def test_from_dict_optional_fields_default(self) -> None:
        """Descriptive fields may be missing or null."""
        sample = PriceSample.from_dict({
            "region": "eastus2",
            "timestamp": "t",
            "retailPrice": 1.0,
            "unitPrice": 1.0,
            "currencyCode": "USD",
            "meterName": None,
        })
        self.assertEqual(sample.location, "")
        self.assertEqual(sample.meter_name, "")

    def test_from_dict_missing_price_raises(self) -> None:
        """A record without retailPrice is malformed."""
        with self.assertRaises(KeyError):
            PriceSample.from_dict({"region": "eastus2", "timestamp": "t"})


class TestRunRecord(unittest.TestCase):
    """RunRecord and dataset helpers."""

    def test_empty_regions_round_trip(self) -> None:
        """A run where every fetch failed still serialises."""
        record = RunRecord(timestamp="2026-10-19T12:00:00.000Z")
        self.assertEqual(record.to_dict()["regions"], {})
        self.assertEqual(RunRecord.from_dict(record.to_dict()), record)

    def test_null_regions_treated_as_empty(self) -> None:
        """regions: null in old files parses as no samples."""
        record = RunRecord.from_dict({"timestamp": "t", "regions": None})
        self.assertEqual(record.regions, {})

    def test_dataset_helpers_preserve_order(self) -> None:
        """records_from_json keeps chronological order."""
        records = [
            RunRecord("t1", {"eastus2": _sample(price=1.0)}),
            RunRecord("t2", {"northeurope": _sample("northeurope", 2.0)}),
        ]
        restored = records_from_json(records_to_json(records))
        self.assertEqual(restored, records)
        self.assertEqual([r.timestamp for r in restored], ["t1", "t2"])

    def test_records_from_json_rejects_object(self) -> None:
        """A top-level object is not a dataset."""
        with self.assertRaises(TypeError):
            records_from_json({"timestamp": "t"})


class TestUtcNowIso(unittest.TestCase):
    """Shared run timestamp helper."""

    def test_millisecond_utc_with_z_suffix(self) -> None:
        """Timestamps are UTC, millisecond precision, Z-terminated."""
        stamp = utc_now_iso()
        self.assertTrue(stamp.endswith("Z"))
        self.assertEqual(len(stamp.split(".")[-1]), 4)
        parsed = datetime.fromisoformat(stamp.replace("Z", "+00:00"))
        self.assertEqual(parsed.utcoffset(), timedelta(0))

    def test_aggregator_does_not_depend_on_fetcher(self) -> None:
        """The offline aggregation pass does not pull in the HTTP client."""
        self.assertIs(price_aggregator.utc_now_iso, utc_now_iso)
        self.assertFalse(hasattr(price_aggregator, "RetailPricesClient"))
        self.assertNotIn("curl_requests", vars(price_aggregator))


if __name__ == "__main__":
    unittest.main()
