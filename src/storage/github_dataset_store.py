# src/storage/github_dataset_store.py

"""Dataset persistence in a GitHub repository via the contents API.

The whole dataset lives in one JSON document.  Reads return the blob
``sha`` alongside the content; writes must echo that ``sha`` back to
replace the file (optimistic concurrency) or omit it to create the file.
A write racing another writer is rejected by GitHub with 409/422 and is
logged, not retried: the next scheduled run starts from fresh state.
"""

import base64
import json
import logging
import urllib.parse
from datetime import datetime, timezone
from typing import Any

from curl_cffi import requests as curl_requests

from src.config.settings import Settings, TrackerConfig
from src.models.outcomes import LoadResult, LoadStatus, SaveResult, SaveStatus
from src.models.price_sample import (
    RunRecord,
    records_from_json,
    records_to_json,
)

logger = logging.getLogger("spot_tracker.remote_store")

_CONFLICT_CODES: frozenset[int] = frozenset({409, 422})


def encode_dataset(records: list[RunRecord]) -> str:
    """Serialise records to the base64 JSON form GitHub expects."""
    text = json.dumps(records_to_json(records), indent=2)
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def decode_dataset(content: str) -> list[RunRecord]:
    """Parse base64 document content back into run records.

    GitHub wraps base64 content at 60 columns, so newlines are dropped
    before decoding.
    """
    raw = base64.b64decode(content.replace("\n", ""))
    return records_from_json(json.loads(raw.decode("utf-8")))


def _is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


class GitHubDatasetStore:
    """Reads and replaces the dataset document in a GitHub repository."""

    def __init__(
        self,
        config: TrackerConfig,
        session: Any | None = None,
    ) -> None:
        self.config = config
        self.settings = Settings()
        self.session = session or curl_requests.Session()

    # ── Private helpers ──────────────────────────────────

    def _contents_url(self, path: str) -> str:
        return (
            f"{self.settings.GITHUB_API_URL}/repos/"
            f"{self.config.github_owner}/{self.config.github_repo}"
            f"/contents/{urllib.parse.quote(path)}"
        )

    def _headers(
        self, accept: str = "application/vnd.github+json",
    ) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.github_token}",
            "Accept": accept,
            "X-GitHub-Api-Version": self.settings.GITHUB_API_VERSION,
            "User-Agent": self.settings.USER_AGENT,
        }

    def _get(self, path: str, accept: str | None = None) -> Any:
        headers = self._headers(accept) if accept else self._headers()
        return self.session.get(
            self._contents_url(path),
            headers=headers,
            params={"ref": self.config.github_branch},
            timeout=self.settings.REQUEST_TIMEOUT,
        )

    def _read_records(
        self, path: str, meta: dict[str, Any],
    ) -> list[RunRecord]:
        """Decode a contents response, re-reading raw for large files.

        Files above 1 MB come back with ``encoding: none`` and empty
        content; the raw media type returns the bytes directly.
        """
        content = meta.get("content") or ""
        if content or meta.get("encoding") == "base64":
            return decode_dataset(content) if content else []

        logger.debug(
            "Document %s too large for inline content, fetching raw", path,
        )
        resp = self._get(path, accept="application/vnd.github.raw+json")
        if not _is_success(resp.status_code):
            msg = f"raw read returned HTTP {resp.status_code}"
            raise ValueError(msg)
        return records_from_json(json.loads(resp.text))

    # ── Public API ───────────────────────────────────────

    def load(self, path: str | None = None) -> LoadResult:
        """Fetch the dataset document.

        404 means no dataset exists yet.  Every other failure is
        reported as ``UNAVAILABLE`` with empty records so the caller can
        fall back to the local snapshot.
        """
        path = path or self.config.data_path
        if not self.config.is_configured:
            logger.info(
                "GitHub credentials not configured; skipping remote load",
            )
            return LoadResult(LoadStatus.NOT_CONFIGURED)

        try:
            resp = self._get(path)
        except Exception as exc:
            logger.warning(
                "Remote load of %s failed: %s", path, exc, exc_info=True,
            )
            return LoadResult(LoadStatus.UNAVAILABLE)

        if resp.status_code == 404:
            logger.info("No remote dataset at %s yet", path)
            return LoadResult(LoadStatus.NOT_FOUND)

        if not _is_success(resp.status_code):
            logger.warning(
                "Remote load of %s returned HTTP %d: %s",
                path,
                resp.status_code,
                resp.text[:500],
            )
            return LoadResult(LoadStatus.UNAVAILABLE)

        try:
            meta: dict[str, Any] = json.loads(resp.text)
            records = self._read_records(path, meta)
        except Exception as exc:
            logger.error(
                "Remote dataset at %s could not be decoded: %s",
                path,
                exc,
                exc_info=True,
            )
            return LoadResult(LoadStatus.UNAVAILABLE)

        logger.info(
            "Loaded %d run records from %s", len(records), path,
        )
        return LoadResult(
            LoadStatus.LOADED, records=records, sha=meta.get("sha"),
        )

    def fetch_sha(self, path: str) -> tuple[bool, str | None]:
        """Look up the current blob sha of *path*.

        Returns ``(True, sha)`` for an existing file, ``(True, None)``
        when the file does not exist, and ``(False, None)`` when the
        lookup itself failed.
        """
        try:
            resp = self._get(path)
        except Exception as exc:
            logger.error(
                "Could not read current revision of %s: %s",
                path,
                exc,
                exc_info=True,
            )
            return False, None

        if resp.status_code == 404:
            return True, None
        if not _is_success(resp.status_code):
            logger.error(
                "Revision lookup for %s returned HTTP %d: %s",
                path,
                resp.status_code,
                resp.text[:500],
            )
            return False, None
        try:
            sha: str | None = json.loads(resp.text).get("sha")
        except ValueError as exc:
            logger.error("Revision lookup for %s: bad JSON: %s", path, exc)
            return False, None
        return True, sha

    def save(
        self,
        records: list[RunRecord],
        path: str | None = None,
        message: str | None = None,
    ) -> SaveResult:
        """Replace the dataset document with *records*.

        The current sha is read immediately before the write; a missing
        file is created instead of updated.  Failures are logged with
        the HTTP status and body and returned, never raised.
        """
        path = path or self.config.data_path
        if not self.config.is_configured:
            logger.info(
                "GitHub credentials not configured; skipping GitHub push",
            )
            return SaveResult(SaveStatus.NOT_CONFIGURED)

        looked_up, sha = self.fetch_sha(path)
        if not looked_up:
            return SaveResult(SaveStatus.FAILED)

        stamp = datetime.now(timezone.utc).isoformat(timespec="seconds")
        body: dict[str, Any] = {
            "message": message or f"Update spot price data {stamp}",
            "content": encode_dataset(records),
            "branch": self.config.github_branch,
        }
        if sha:
            body["sha"] = sha

        try:
            resp = self.session.put(
                self._contents_url(path),
                headers=self._headers(),
                json=body,
                timeout=self.settings.REQUEST_TIMEOUT,
            )
        except Exception as exc:
            logger.error(
                "Remote save of %s failed: %s", path, exc, exc_info=True,
            )
            return SaveResult(SaveStatus.FAILED, body=str(exc))

        if not _is_success(resp.status_code):
            status = (
                SaveStatus.CONFLICT
                if resp.status_code in _CONFLICT_CODES
                else SaveStatus.FAILED
            )
            logger.error(
                "Remote save of %s rejected (%s): HTTP %d %s",
                path,
                status.value,
                resp.status_code,
                resp.text[:1000],
            )
            return SaveResult(
                status, status_code=resp.status_code, body=resp.text,
            )

        commit_sha: str | None = None
        try:
            commit_sha = json.loads(resp.text).get("commit", {}).get("sha")
        except ValueError:
            logger.debug("Save response for %s was not JSON", path)

        status = SaveStatus.UPDATED if sha else SaveStatus.CREATED
        logger.info(
            "Remote dataset %s %s (%d records, commit %s)",
            path,
            status.value,
            len(records),
            commit_sha,
        )
        return SaveResult(
            status,
            status_code=resp.status_code,
            body=resp.text,
            commit_sha=commit_sha,
        )
