"""
Movie lookups against OMDb.

Every call makes a single request and always returns a response object;
errors are reported in its ``error`` field instead of being raised.
"""

import concurrent.futures
from dataclasses import dataclass, field
from typing import Optional, Tuple

import requests
from loguru import logger

from models import MovieRecord
from utils import OMDB_URL, REQUEST_TIMEOUT, get_omdb_api_key

MISSING_KEY_ERROR = "OMDb API key is not configured"
MALFORMED_RESPONSE_ERROR = "Malformed response from OMDb"


@dataclass(frozen=True)
class SearchResponse:
    movies: Tuple[MovieRecord, ...] = field(default_factory=tuple)
    error: Optional[str] = None

    @property
    def ok(self):
        return self.error is None


@dataclass(frozen=True)
class LookupResponse:
    imdb_id: str
    movie: Optional[MovieRecord] = None
    error: Optional[str] = None

    @property
    def ok(self):
        return self.error is None and self.movie is not None


def _omdb_request(params, api_key, timeout):
    """
    Issue one OMDb request.

    Returns:
        Tuple of (payload, error); exactly one of them is None
    """
    params = dict(params, apikey=api_key)
    try:
        response = requests.get(OMDB_URL, params=params, timeout=timeout)
    except requests.RequestException as e:
        logger.warning(f"OMDb request failed: {e}")
        return None, str(e) or e.__class__.__name__

    try:
        data = response.json()
    except ValueError as e:
        logger.warning(f"OMDb returned non-JSON content: {e}")
        return None, MALFORMED_RESPONSE_ERROR

    if not isinstance(data, dict):
        return None, MALFORMED_RESPONSE_ERROR
    if data.get("Response") == "False" or "Error" in data:
        return None, str(data.get("Error") or "Unknown OMDb error")
    return data, None


def search_movies(query, api_key=None, timeout=REQUEST_TIMEOUT):
    """
    Search OMDb for movies by title.

    Args:
        query: Free-text title query
        api_key: OMDb key, read from configuration when omitted
        timeout: Request timeout in seconds

    Returns:
        SearchResponse with the matching movies or an error message
    """
    query = (query or "").strip()
    if not query:
        return SearchResponse()

    api_key = api_key or get_omdb_api_key()
    if not api_key:
        return SearchResponse(error=MISSING_KEY_ERROR)

    data, error = _omdb_request({"s": query, "type": "movie"}, api_key, timeout)
    if error:
        logger.debug(f"Search for {query!r} failed: {error}")
        return SearchResponse(error=error)

    items = data.get("Search")
    if not isinstance(items, list):
        return SearchResponse(error=MALFORMED_RESPONSE_ERROR)

    movies = []
    for item in items:
        try:
            movies.append(MovieRecord.from_omdb(item))
        except (AttributeError, ValueError):
            logger.debug(f"Skipping search item without an id: {item!r}")

    logger.debug(f"Search for {query!r} returned {len(movies)} movies")
    return SearchResponse(movies=tuple(movies))


def fetch_movie(imdb_id, api_key=None, timeout=REQUEST_TIMEOUT):
    """
    Look up a single movie by IMDb id.

    Returns:
        LookupResponse with the movie or an error message
    """
    api_key = api_key or get_omdb_api_key()
    if not api_key:
        return LookupResponse(imdb_id=imdb_id, error=MISSING_KEY_ERROR)

    data, error = _omdb_request({"i": imdb_id}, api_key, timeout)
    if error:
        logger.debug(f"Lookup of {imdb_id} failed: {error}")
        return LookupResponse(imdb_id=imdb_id, error=error)

    try:
        movie = MovieRecord.from_omdb(data)
    except ValueError:
        return LookupResponse(imdb_id=imdb_id, error=MALFORMED_RESPONSE_ERROR)
    return LookupResponse(imdb_id=imdb_id, movie=movie)


def fetch_movies(imdb_ids, api_key=None, timeout=REQUEST_TIMEOUT, max_workers=5):
    """
    Look up several movies concurrently.

    Args:
        imdb_ids: Identifiers to resolve

    Returns:
        List of LookupResponse in the same order as imdb_ids
    """
    imdb_ids = list(imdb_ids)
    if not imdb_ids:
        return []

    api_key = api_key or get_omdb_api_key()
    results = [None] * len(imdb_ids)
    with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
        future_to_index = {
            executor.submit(fetch_movie, imdb_id, api_key, timeout): idx
            for idx, imdb_id in enumerate(imdb_ids)
        }
        for future in concurrent.futures.as_completed(future_to_index):
            results[future_to_index[future]] = future.result()
    return results
