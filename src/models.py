"""
Value types shared by the store, the share codec and the search bridge.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from utils import NO_POSTER


@dataclass(frozen=True)
class MovieRecord:
    imdb_id: str
    title: str
    year: str = ""
    poster_url: str = NO_POSTER
    media_type: str = "movie"

    @property
    def has_poster(self) -> bool:
        return bool(self.poster_url) and self.poster_url != NO_POSTER

    @property
    def label(self) -> str:
        return f"{self.title} ({self.year})" if self.year else self.title

    @classmethod
    def from_omdb(cls, data: dict) -> "MovieRecord":
        """Build a record from an OMDb search item or detail payload."""
        imdb_id = data.get("imdbID")
        if not isinstance(imdb_id, str) or not imdb_id:
            raise ValueError("OMDb record has no imdbID")
        return cls(
            imdb_id=imdb_id,
            title=str(data.get("Title") or ""),
            year=str(data.get("Year") or ""),
            poster_url=str(data.get("Poster") or NO_POSTER),
            media_type=str(data.get("Type") or "movie"),
        )

    def to_omdb(self) -> dict:
        return {
            "imdbID": self.imdb_id,
            "Title": self.title,
            "Year": self.year,
            "Poster": self.poster_url,
            "Type": self.media_type,
        }


@dataclass(frozen=True)
class ShareMetadata:
    name: Optional[str] = None
    author: Optional[str] = None


@dataclass(frozen=True)
class SharePayload:
    identifiers: Tuple[str, ...]
    created_at: datetime
    name: Optional[str] = None
    author: Optional[str] = None
