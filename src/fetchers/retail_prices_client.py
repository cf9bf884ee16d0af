# src/fetchers/retail_prices_client.py

"""Client for the Azure Retail Prices API, one spot SKU per region."""

import json
import logging
import urllib.parse
from typing import Any

from curl_cffi import requests as curl_requests

from src.config.settings import Settings
from src.models.outcomes import FetchFailure
from src.models.price_sample import PriceSample, utc_now_iso


class RetailPricesClient:
    """Fetches the current spot price of the configured VM SKU.

    Every failure mode (transport error, non-2xx status, bad JSON, empty
    result set) comes back as a :class:`FetchFailure`; nothing is raised
    to the caller and nothing is retried.
    """

    def __init__(
        self,
        session: Any | None = None,
        vm_config: dict[str, str] | None = None,
        require_unique: bool | None = None,
    ) -> None:
        self.logger = logging.getLogger("spot_tracker.fetcher")
        self.settings = Settings()
        self.session = session or curl_requests.Session()
        self.vm_config = vm_config or self.settings.VM_CONFIG
        self.require_unique = (
            self.settings.REQUIRE_UNIQUE_MATCH
            if require_unique is None
            else require_unique
        )

    def build_filter(self, region: str) -> str:
        """OData filter selecting the spot meter for one region."""
        return (
            f"serviceName eq '{self.vm_config['service_name']}' "
            f"and productName eq '{self.vm_config['product_name']}' "
            f"and armRegionName eq '{region}' "
            f"and armSkuName eq '{self.vm_config['arm_sku_name']}' "
            "and contains(skuName,'Spot')"
        )

    def build_url(self, region: str) -> str:
        """Full query URL with the pinned API version and encoded filter."""
        encoded = urllib.parse.quote(self.build_filter(region), safe="")
        return (
            f"{self.settings.PRICING_API_URL}"
            f"?api-version={self.settings.PRICING_API_VERSION}"
            f"&$filter={encoded}"
        )

    def fetch(self, region: str) -> PriceSample | FetchFailure:
        """Query one region and normalise the first price row."""
        url = self.build_url(region)
        self.logger.info("Fetching price data for %s", region)

        try:
            resp = self.session.get(
                url,
                headers={"User-Agent": self.settings.USER_AGENT},
                timeout=self.settings.REQUEST_TIMEOUT,
            )
        except Exception as exc:
            self.logger.error(
                "[%s] Request error: %s", region, exc, exc_info=True,
            )
            return FetchFailure(region, "network", message=str(exc))

        if not 200 <= resp.status_code < 300:
            self.logger.warning(
                "[%s] HTTP %d from pricing API", region, resp.status_code,
            )
            return FetchFailure(
                region, "http_error", status_code=resp.status_code,
            )

        try:
            payload = json.loads(resp.text)
        except ValueError as exc:
            self.logger.error(
                "[%s] Pricing API returned invalid JSON: %s", region, exc,
            )
            return FetchFailure(
                region,
                "invalid_json",
                status_code=resp.status_code,
                message=str(exc),
            )

        items = payload.get("Items") if isinstance(payload, dict) else None
        if not items:
            self.logger.warning("[%s] No pricing data found", region)
            return FetchFailure(
                region, "empty", status_code=resp.status_code,
            )

        if not isinstance(items, list) or not isinstance(items[0], dict):
            self.logger.error(
                "[%s] Unexpected Items payload: %.200r", region, items,
            )
            return FetchFailure(
                region, "invalid_payload", status_code=resp.status_code,
            )

        if len(items) > 1:
            if self.require_unique:
                self.logger.error(
                    "[%s] %d items matched the spot filter; refusing "
                    "to pick one",
                    region,
                    len(items),
                )
                return FetchFailure(
                    region,
                    "ambiguous",
                    status_code=resp.status_code,
                    message=f"{len(items)} items matched",
                )
            self.logger.warning(
                "[%s] %d items matched the spot filter; using the first",
                region,
                len(items),
            )

        price = items[0].get("retailPrice")
        if (
            isinstance(price, bool)
            or not isinstance(price, (int, float))
            or price < 0
        ):
            self.logger.error(
                "[%s] Invalid retailPrice in price row: %r", region, price,
            )
            return FetchFailure(
                region,
                "invalid_price",
                status_code=resp.status_code,
                message=f"retailPrice={price!r}",
            )

        return self._to_sample(region, items[0])

    @staticmethod
    def _to_sample(region: str, item: dict[str, Any]) -> PriceSample:
        """Map an API price row onto a sample stamped with the current time."""
        return PriceSample(
            region=region,
            timestamp=utc_now_iso(),
            retail_price=item["retailPrice"],
            unit_price=item.get("unitPrice", 0.0),
            currency_code=item.get("currencyCode", ""),
            location=item.get("location", ""),
            effective_start_date=item.get("effectiveStartDate", ""),
            meter_name=item.get("meterName", ""),
            sku_name=item.get("skuName", ""),
        )
