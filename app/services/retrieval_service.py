"""
Wikipedia retrieval for factual grounding

Both lookups hit the REST summary endpoint and are best-effort: any
network, status or parse failure returns None so quiz generation can
proceed without context. Successful lookups are cached.
"""
import logging
from dataclasses import asdict, dataclass
from typing import Optional
from urllib.parse import quote

import httpx

from app.config import settings
from app.utils.cache import CacheService, cache_service

logger = logging.getLogger(__name__)

SUMMARY_MAX_CHARS = 1500
EXTRACT_MAX_CHARS = 800


@dataclass
class PageInfo:
    title: str
    extract: Optional[str]
    type: str  # "standard" or "disambiguation"

    @property
    def is_disambiguation(self) -> bool:
        return self.type == "disambiguation"


class WikipediaService:
    """Fetches summaries and page classification from Wikipedia REST"""

    TIMEOUT = 10.0

    def __init__(self, cache: CacheService, base_url: str = None, transport: httpx.AsyncBaseTransport = None):
        self.cache = cache
        self.base_url = (base_url or settings.WIKIPEDIA_API_URL).rstrip("/")
        self.transport = transport

    async def _fetch_summary_json(self, topic: str) -> Optional[dict]:
        url = f"{self.base_url}/page/summary/{quote(topic, safe='')}"

        async with httpx.AsyncClient(timeout=self.TIMEOUT, transport=self.transport) as client:
            response = await client.get(url, headers={"Accept": "application/json"})

        if response.status_code != 200:
            logger.info(f"Wikipedia lookup for {topic!r} returned HTTP {response.status_code}")
            return None

        data = response.json()
        return data if isinstance(data, dict) else None

    async def fetch_summary(self, topic: str) -> Optional[str]:
        """
        Short natural-language blurb for a topic

        Prefers `extract`, falls back to `description`, truncated to
        1500 chars. Cached for 24h.
        """
        key = f"wiki:summary:{topic.lower()}"
        try:
            cached = self.cache.get(key)
            if cached:
                return cached

            data = await self._fetch_summary_json(topic)
            if not data:
                return None

            text = data.get("extract") or data.get("description")
            summary = str(text)[:SUMMARY_MAX_CHARS] if text else None

            if summary:
                self.cache.set(key, summary, settings.WIKI_SUMMARY_TTL)
            return summary

        except Exception as e:
            logger.warning(f"Wikipedia summary failed for {topic!r}: {str(e)}")
            return None

    async def fetch_page_info(self, topic: str) -> Optional[PageInfo]:
        """
        Canonical title, short extract and page type for a topic

        Cached for 12h.
        """
        key = f"wiki:pageinfo:{topic.lower()}"
        try:
            cached = self.cache.get(key)
            if cached:
                return PageInfo(**cached)

            data = await self._fetch_summary_json(topic)
            if not data:
                return None

            page_type = "disambiguation" if data.get("type") == "disambiguation" else "standard"
            title = data.get("title") if isinstance(data.get("title"), str) and data.get("title") else topic

            if data.get("extract"):
                extract = str(data["extract"])[:EXTRACT_MAX_CHARS]
            elif data.get("description"):
                extract = str(data["description"])[:EXTRACT_MAX_CHARS]
            else:
                extract = None

            info = PageInfo(title=title, extract=extract, type=page_type)
            self.cache.set(key, asdict(info), settings.WIKI_PAGEINFO_TTL)
            return info

        except Exception as e:
            logger.warning(f"Wikipedia page info failed for {topic!r}: {str(e)}")
            return None


# Global instance
wikipedia_service = WikipediaService(cache=cache_service)
