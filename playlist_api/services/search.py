"""
Video catalog search via the YouTube Data API (v3).

Provides:
- YouTubeClient.search: search videos then fetch duration/view details
- iso_duration_to_clock / format_views: display helpers for result cards
- demo_results: canned results used when no API key is configured

No ranking is applied; results keep the upstream order.
"""

from __future__ import annotations

import math
import re
from typing import Any, Dict, Iterable, List, Optional

import httpx

from playlist_api.core.config import Settings
from playlist_api.core.errors import SearchUnavailable
from playlist_api.core.logging import get_logger
from playlist_api.schemas.search import VideoResult

logger = get_logger("search")

NOT_AVAILABLE = "N/A"

_ISO_DURATION = re.compile(r"^PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?$")


# PUBLIC_INTERFACE
def iso_duration_to_clock(value: Any) -> str:
    """Convert an ISO 8601 duration (PT1H2M3S) to "1:02:03", or "MM:SS" under an hour."""
    if not isinstance(value, str):
        return NOT_AVAILABLE
    match = _ISO_DURATION.match(value)
    if not match:
        return NOT_AVAILABLE
    hours, minutes, seconds = (int(g or 0) for g in match.groups())
    total = hours * 3600 + minutes * 60 + seconds
    h, rest = divmod(total, 3600)
    m, s = divmod(rest, 60)
    if h > 0:
        return f"{h}:{m:02d}:{s:02d}"
    return f"{m:02d}:{s:02d}"


# PUBLIC_INTERFACE
def format_views(value: Any) -> str:
    """Format a view count with thousands separators ("1234567" -> "1,234,567")."""
    if value is None or isinstance(value, bool):
        return NOT_AVAILABLE
    try:
        number = float(value)
    except (TypeError, ValueError):
        return NOT_AVAILABLE
    if not math.isfinite(number):
        return NOT_AVAILABLE
    if number.is_integer():
        return f"{int(number):,}"
    return f"{number:,}"


# PUBLIC_INTERFACE
def demo_results(query: str) -> List[VideoResult]:
    return [
        VideoResult(
            video_id="dQw4w9WgXcQ",
            title=f'Demo result for "{query}" (1)',
            thumbnail_url="https://i.ytimg.com/vi/dQw4w9WgXcQ/hqdefault.jpg",
        ),
        VideoResult(
            video_id="kJQP7kiw5Fk",
            title=f'Demo result for "{query}" (2)',
            thumbnail_url="https://i.ytimg.com/vi/kJQP7kiw5Fk/hqdefault.jpg",
        ),
    ]


class YouTubeClient:
    """Thin synchronous client for the search and videos endpoints."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://www.googleapis.com/youtube/v3",
        max_results: int = 9,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.max_results = max_results
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_settings(cls, settings: Settings, transport: Optional[httpx.BaseTransport] = None) -> "YouTubeClient":
        return cls(
            api_key=settings.YOUTUBE_API_KEY,
            base_url=settings.YOUTUBE_API_BASE,
            max_results=settings.SEARCH_MAX_RESULTS,
            timeout=settings.SEARCH_TIMEOUT_SECONDS,
            transport=transport,
        )

    def _client(self) -> httpx.Client:
        return httpx.Client(base_url=self.base_url, timeout=self.timeout, transport=self.transport)

    def _details(self, client: httpx.Client, video_ids: Iterable[str]) -> Dict[str, Dict[str, str]]:
        ids = ",".join(v for v in video_ids if v)
        if not ids:
            return {}
        resp = client.get(
            "/videos",
            params={"part": "contentDetails,statistics", "id": ids, "key": self.api_key},
        )
        resp.raise_for_status()
        details: Dict[str, Dict[str, str]] = {}
        for item in resp.json().get("items") or []:
            video_id = str(item.get("id") or "")
            details[video_id] = {
                "duration": iso_duration_to_clock((item.get("contentDetails") or {}).get("duration")),
                "views": format_views((item.get("statistics") or {}).get("viewCount")),
            }
        return details

    # PUBLIC_INTERFACE
    def search(self, query: str) -> List[VideoResult]:
        """Search videos by free text.

        Returns:
        - an empty list for a blank query
        - demo results when no API key is configured
        - upstream results with duration/views filled in ("N/A" when unknown)

        Raises:
        - SearchUnavailable on any upstream HTTP or decoding failure
        """
        q = (query or "").strip()
        if not q:
            return []
        if not self.api_key:
            return demo_results(q)

        try:
            with self._client() as client:
                resp = client.get(
                    "/search",
                    params={
                        "part": "snippet",
                        "type": "video",
                        "maxResults": self.max_results,
                        "q": q,
                        "key": self.api_key,
                    },
                )
                resp.raise_for_status()
                base: List[Dict[str, str]] = []
                for item in resp.json().get("items") or []:
                    video_id = (item.get("id") or {}).get("videoId")
                    if not video_id:
                        continue
                    snippet = item.get("snippet") or {}
                    base.append(
                        {
                            "video_id": str(video_id),
                            "title": str(snippet.get("title") or ""),
                            "thumbnail_url": str(((snippet.get("thumbnails") or {}).get("medium") or {}).get("url") or ""),
                        }
                    )
                details = self._details(client, (b["video_id"] for b in base))
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Video search failed", extra={"query": q, "error": str(exc)})
            raise SearchUnavailable(str(exc))

        return [VideoResult(**b, **details.get(b["video_id"], {})) for b in base]
