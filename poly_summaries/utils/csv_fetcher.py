"""CSV download and parsing for the ratings and comments datasets."""

import csv
import io
from typing import Any, Optional

import httpx

from poly_summaries.utils.logger import get_logger


class CSVFetchError(Exception):
    """Raised when a CSV source cannot be retrieved."""

    pass


def parse_csv(text: str) -> list[dict[str, str]]:
    """Parse CSV text with a header row into row dicts.

    Blank lines are skipped. Short rows get empty strings for missing columns.
    """
    reader = csv.DictReader(io.StringIO(text), restval="")
    rows = []
    for row in reader:
        # Extra columns land under the None key
        row.pop(None, None)  # type: ignore[call-overload]
        if not any((value or "").strip() for value in row.values()):
            continue
        rows.append({key: value or "" for key, value in row.items()})
    return rows


class CSVFetcher:
    """Fetches remote CSV documents over HTTP."""

    def __init__(
        self,
        correlation_id: str,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize CSV fetcher.

        Args:
            correlation_id: Unique ID for tracing the run
            timeout: Request timeout in seconds (default: 30)
            client: Optional pre-configured client (a fresh one is used otherwise)
        """
        self.timeout = timeout
        self.client = client
        self.logger: Any = get_logger(
            correlation_id=correlation_id,
            phase="fetch",
            component="csv_fetcher",
        )

    async def _get(self, client: httpx.AsyncClient, url: str) -> str:
        response = await client.get(url, follow_redirects=True)
        response.raise_for_status()
        return response.text

    async def fetch_csv(self, url: str) -> list[dict[str, str]]:
        """Fetch and parse a CSV document.

        Args:
            url: CSV URL

        Returns:
            Parsed rows keyed by header

        Raises:
            CSVFetchError: On transport failure or a non-success status
        """
        self.logger.info("Fetching CSV", url=url)

        try:
            if self.client is not None:
                text = await self._get(self.client, url)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    text = await self._get(client, url)
        except httpx.HTTPStatusError as e:
            self.logger.error(
                "CSV fetch failed", url=url, status_code=e.response.status_code
            )
            raise CSVFetchError(
                f"Failed to fetch {url}: {e.response.status_code}"
            ) from e
        except httpx.TransportError as e:
            self.logger.error("CSV fetch failed", url=url, error=str(e))
            raise CSVFetchError(f"Failed to fetch {url}: {e}") from e

        rows = parse_csv(text)
        self.logger.info("CSV parsed", url=url, rows=len(rows))
        return rows

    async def fetch_sources(
        self, ratings_url: str, comments_url: str
    ) -> tuple[list[dict[str, str]], list[dict[str, str]]]:
        """Fetch the ratings and comments CSVs, one after the other."""
        ratings = await self.fetch_csv(ratings_url)
        comments = await self.fetch_csv(comments_url)
        return ratings, comments
