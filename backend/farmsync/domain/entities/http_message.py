"""Domain entities for intercepted requests and the responses the edge serves."""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from urllib.parse import urlsplit

CACHED_DATE_HEADER = "x-edge-cached-date"

_IMAGE_PATH_RE = re.compile(r"\.(jpg|jpeg|png|gif|webp|svg|ico)$", re.IGNORECASE)


@dataclass
class InterceptedRequest:
    """A request as seen by the edge before any caching decision is made."""

    url: str
    method: str = "GET"
    headers: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.method = self.method.upper()
        self.headers = {k.lower(): v for k, v in self.headers.items()}

    @property
    def path(self) -> str:
        return urlsplit(self.url).path or "/"

    @property
    def filename(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    @property
    def cache_key(self) -> str:
        return self.url

    def accepts(self, mime: str) -> bool:
        """Substring match against the Accept header, as browsers send it."""
        return mime in self.headers.get("accept", "")

    @property
    def is_image(self) -> bool:
        return bool(_IMAGE_PATH_RE.search(self.path)) or self.accepts("image/")


@dataclass
class CachedResponse:
    """An HTTP response, either live from the network or stored in a partition.

    Header names are kept lower-cased so lookups are case-insensitive.
    """

    status: int
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    url: str = ""
    status_text: str = ""

    def __post_init__(self) -> None:
        self.headers = {k.lower(): v for k, v in self.headers.items()}

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    def header(self, name: str) -> str | None:
        return self.headers.get(name.lower())

    def clone(self, headers: dict[str, str] | None = None) -> "CachedResponse":
        """Copy the response, optionally overriding some headers."""
        merged = dict(self.headers)
        for name, value in (headers or {}).items():
            merged[name.lower()] = value
        return CachedResponse(
            status=self.status,
            headers=merged,
            body=self.body,
            url=self.url,
            status_text=self.status_text,
        )

    @property
    def recorded_at(self) -> datetime | None:
        """Timestamp implied by the headers: cached-date marker first, then Date."""
        marker = self.headers.get(CACHED_DATE_HEADER)
        if marker:
            try:
                parsed = datetime.fromisoformat(marker)
            except ValueError:
                parsed = None
            if parsed is not None:
                return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)

        date_header = self.headers.get("date")
        if date_header:
            try:
                parsed = parsedate_to_datetime(date_header)
            except (TypeError, ValueError):
                return None
            return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
        return None
