"""
Share links: encode a nomination list into a URL and validate it on the way back.

Link format::

    <base>?movies=tt0111161&movies=tt0068646&date=2024-01-01T00:00:00.000Z&name=...&author=...

``movies`` (repeated, in nomination order) and ``date`` are mandatory;
``name`` and ``author`` are optional.
"""

import re
from datetime import datetime, timezone
from urllib.parse import parse_qs, urlencode

from loguru import logger

from models import SharePayload

SHARE_DESCRIPTION_SUFFIX = "for the first-ever Shoppies Movie Awards."
SHARE_PARAMS = ("movies", "date")
FRACTION_PATTERN = re.compile(r"(\d{2}:\d{2}:\d{2})[.,](\d+)")


class InvalidLink(Exception):
    """Raised when a share link is missing or has malformed parameters."""

    MISSING_MOVIES = "missing movies"
    MISSING_DATE = "missing date"
    BAD_DATE = "bad date"

    def __init__(self, reason):
        self.reason = reason
        super().__init__(f"Invalid share link: {reason}")


def format_timestamp(moment):
    """Render a datetime the way JavaScript's toISOString does (UTC, milliseconds, Z)."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def parse_timestamp(value):
    """
    Parse an ISO-8601 timestamp; naive values are taken as UTC.

    Raises:
        ValueError: value is not an ISO-8601 timestamp
    """
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    # fromisoformat before 3.11 only takes 3 or 6 fractional digits
    text = FRACTION_PATTERN.sub(lambda m: m.group(1) + "." + m.group(2)[:6].ljust(6, "0"), text)
    moment = datetime.fromisoformat(text)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def encode_share_link(movies, metadata, base_url, now=None):
    """
    Build a shareable URL for a nomination list.

    Args:
        movies: MovieRecords or plain identifiers, in nomination order
        metadata: ShareMetadata with optional name / author
        base_url: URL of the read-only view
        now: Creation time, defaults to the current UTC time

    Returns:
        The share URL
    """
    identifiers = [getattr(m, "imdb_id", m) for m in movies]
    created_at = now or datetime.now(timezone.utc)

    params = [("movies", identifier) for identifier in identifiers]
    params.append(("date", format_timestamp(created_at)))
    if metadata is not None and metadata.name:
        params.append(("name", metadata.name))
    if metadata is not None and metadata.author:
        params.append(("author", metadata.author))

    return f"{base_url}?{urlencode(params)}"


def _collapse(values):
    values = list(values)
    return values[0] if len(values) == 1 else values


def parse_query(query_string):
    """
    Turn a raw query string into a mapping of key to str or list of str.

    A key that appears once maps to a string, a repeated key to a list.
    """
    parsed = parse_qs(query_string.lstrip("?"), keep_blank_values=True)
    return {key: _collapse(values) for key, values in parsed.items()}


def query_params_to_mapping(params):
    """Same shape as parse_query, built from st.query_params or a dict of lists."""
    mapping = {}
    for key in params:
        if hasattr(params, "get_all"):
            values = params.get_all(key)
        else:
            values = params[key]
        if isinstance(values, str):
            values = [values]
        mapping[key] = _collapse(values)
    return mapping


def is_share_link(query):
    """True when the parameters are meant for the shared-list view."""
    return any(key in query for key in SHARE_PARAMS)


def decode_share_link(query):
    """
    Validate share-link parameters.

    Args:
        query: Mapping of parameter name to a string or list of strings

    Returns:
        SharePayload

    Raises:
        InvalidLink: movies or date missing, or date unparseable
    """
    movies = query.get("movies")
    if isinstance(movies, str):
        movies = [movies]
    if (not isinstance(movies, (list, tuple)) or not movies
            or not all(isinstance(m, str) and m for m in movies)):
        raise InvalidLink(InvalidLink.MISSING_MOVIES)

    date = query.get("date")
    if not isinstance(date, str):
        raise InvalidLink(InvalidLink.MISSING_DATE)
    try:
        created_at = parse_timestamp(date)
    except ValueError:
        logger.debug(f"Rejecting share link with unparseable date {date!r}")
        raise InvalidLink(InvalidLink.BAD_DATE) from None

    name = query.get("name")
    author = query.get("author")
    return SharePayload(
        identifiers=tuple(movies),
        created_at=created_at,
        name=name if isinstance(name, str) else None,
        author=author if isinstance(author, str) else None,
    )


def display_title(payload):
    if payload.name:
        return payload.name
    if payload.author:
        return f"{payload.author}'s nomination list"
    return "Nomination list"


def display_subtitle(payload):
    created = payload.created_at
    subtitle = f"Created on {created:%B} {created.day}, {created.year}"
    if payload.author:
        subtitle += f" by {payload.author}"
    return subtitle


def describe(payload):
    """Page description for a shared list."""
    parts = ["Nomination list"]
    if payload.name:
        parts.append(f'"{payload.name}"')
    if payload.author:
        parts.append(f"by {payload.author}")
    parts.append(SHARE_DESCRIPTION_SUFFIX)
    return " ".join(parts)
