# src/config/settings.py

"""Central configuration for the spot price tracker."""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the spot price tracker."""

    # --- Retail Prices API ---
    PRICING_API_URL: str = "https://prices.azure.com/api/retail/prices"
    PRICING_API_VERSION: str = "2023-01-01-preview"
    USER_AGENT: str = "Azure-Spot-Price-Checker/1.0"
    REQUEST_DELAY: float = 1.0          # Seconds between region queries
    REQUEST_TIMEOUT: int = 30           # Seconds before a request times out
    REQUIRE_UNIQUE_MATCH: bool = False  # Fail a region on >1 matching item

    # --- Tracked product ---
    VM_CONFIG: dict[str, str] = {
        "service_name": "Virtual Machines",
        "product_name": "Virtual Machines Dsv5 Series",
        "arm_sku_name": "Standard_D16s_v5",
    }

    # --- Regions (queried in declaration order) ---
    REGIONS: list[dict[str, str]] = [
        {"name": "eastus2", "display_name": "East US 2"},
        {"name": "northeurope", "display_name": "North Europe"},
    ]

    # --- GitHub contents API ---
    GITHUB_API_URL: str = "https://api.github.com"
    GITHUB_API_VERSION: str = "2022-11-28"
    DEFAULT_BRANCH: str = "main"
    DEFAULT_DATA_PATH: str = "data/price-logs.json"

    # --- History ---
    MAX_HISTORY_ENTRIES: int = 0        # 0 keeps every run

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    DATA_DIR: Path = BASE_DIR / "data"
    DOCS_DIR: Path = BASE_DIR / "docs"
    LOGS_DIR: Path = BASE_DIR / "logs"
    LOCAL_SNAPSHOT_PATH: Path = DATA_DIR / "latest-run.json"
    RAW_DATASET_PATH: Path = DATA_DIR / "price-logs.json"
    SUMMARY_PATH: Path = DOCS_DIR / "price-data.json"


@dataclass(frozen=True)
class TrackerConfig:
    """Per-process repository settings, built once at startup."""

    github_token: str = ""
    github_owner: str = ""
    github_repo: str = ""
    github_branch: str = Settings.DEFAULT_BRANCH
    data_path: str = Settings.DEFAULT_DATA_PATH

    @classmethod
    def from_env(
        cls, environ: Mapping[str, str] | None = None,
    ) -> "TrackerConfig":
        """Read the GitHub settings from *environ* (default ``os.environ``)."""
        env = os.environ if environ is None else environ
        return cls(
            github_token=env.get("GITHUB_TOKEN", "").strip(),
            github_owner=env.get("GITHUB_OWNER", "").strip(),
            github_repo=env.get("GITHUB_REPO", "").strip(),
            github_branch=(
                env.get("GITHUB_BRANCH", "").strip()
                or Settings.DEFAULT_BRANCH
            ),
            data_path=(
                env.get("GITHUB_DATA_PATH", "").strip()
                or Settings.DEFAULT_DATA_PATH
            ),
        )

    @property
    def is_configured(self) -> bool:
        """True when token, owner and repo are all present."""
        return bool(
            self.github_token and self.github_owner and self.github_repo
        )
