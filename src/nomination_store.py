"""
Nomination list state: the five-item cap, de-duplication and persistence.
"""

from loguru import logger

from local_storage import read_json, write_json
from models import MovieRecord, ShareMetadata
from utils import MAX_NOMINATIONS, SAVED_MOVIES_KEY, SHARE_AUTHOR_KEY, SHARE_NAME_KEY


class NominationRejected(Exception):
    """Raised when a nomination would break the list rules."""

    FULL = "full"
    DUPLICATE = "duplicate"

    def __init__(self, reason, message=None):
        self.reason = reason
        self.message = message or f"Nomination rejected: {reason}"
        super().__init__(self.message)


class NominationStore:
    """
    Ordered list of nominated movies mirrored to durable storage.

    Args:
        storage: Adapter with get / set / remove
        capacity: Maximum number of nominations
    """

    def __init__(self, storage, capacity=MAX_NOMINATIONS):
        self.storage = storage
        self.capacity = capacity
        self._movies = []

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------
    @property
    def nominations(self):
        return tuple(self._movies)

    @property
    def identifiers(self):
        return [m.imdb_id for m in self._movies]

    @property
    def is_complete(self):
        return len(self._movies) == self.capacity

    @property
    def remaining(self):
        return self.capacity - len(self._movies)

    def is_nominated(self, imdb_id):
        return any(m.imdb_id == imdb_id for m in self._movies)

    def __len__(self):
        return len(self._movies)

    def __iter__(self):
        return iter(tuple(self._movies))

    def __contains__(self, imdb_id):
        return self.is_nominated(imdb_id)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def add(self, record):
        """
        Append a movie to the list.

        Args:
            record: MovieRecord to nominate

        Returns:
            The new nomination list

        Raises:
            NominationRejected: list is full or the movie is already nominated
        """
        if len(self._movies) >= self.capacity:
            logger.info(f"Rejected {record.imdb_id}: list already has {self.capacity} nominations")
            raise NominationRejected(
                NominationRejected.FULL,
                f"You can only nominate up to {self.capacity} movies.",
            )
        if self.is_nominated(record.imdb_id):
            logger.info(f"Rejected {record.imdb_id}: already nominated")
            raise NominationRejected(
                NominationRejected.DUPLICATE,
                f"{record.title or record.imdb_id} is already nominated.",
            )

        self._movies.append(record)
        self._save()
        return self.nominations

    def remove(self, imdb_id):
        self._movies = [m for m in self._movies if m.imdb_id != imdb_id]
        self._save()
        return self.nominations

    def clear(self):
        """Empty the list and drop its storage entries."""
        self._movies = []
        self.storage.remove(SAVED_MOVIES_KEY)
        self.storage.remove(SHARE_NAME_KEY)
        return self.nominations

    def _save(self):
        write_json(self.storage, SAVED_MOVIES_KEY, [m.to_omdb() for m in self._movies])

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def load_from_storage(self):
        """
        Replace the in-memory list with the stored one.

        Absent or malformed entries give an empty list. Stored lists that
        contain duplicates, malformed records or too many movies are trimmed
        to fit and the trimmed list is written back.

        Returns:
            The loaded nomination list
        """
        raw = read_json(self.storage, SAVED_MOVIES_KEY, default=[])
        if not isinstance(raw, list):
            logger.warning(f"Stored {SAVED_MOVIES_KEY} is not a list, starting empty")
            raw = []

        movies = []
        seen = set()
        for item in raw:
            try:
                record = MovieRecord.from_omdb(item)
            except (AttributeError, TypeError, ValueError):
                logger.warning(f"Skipping malformed stored nomination: {item!r}")
                continue
            if record.imdb_id in seen:
                continue
            seen.add(record.imdb_id)
            movies.append(record)

        if len(movies) > self.capacity:
            logger.warning(f"Stored list has {len(movies)} nominations, keeping the first {self.capacity}")
            movies = movies[:self.capacity]

        self._movies = movies
        if len(movies) != len(raw):
            logger.info(f"Writing back repaired nomination list ({len(raw)} -> {len(movies)} entries)")
            self._save()
        return self.nominations

    # ------------------------------------------------------------------
    # Share metadata
    # ------------------------------------------------------------------
    def share_metadata(self):
        name = self.storage.get(SHARE_NAME_KEY)
        author = self.storage.get(SHARE_AUTHOR_KEY)
        return ShareMetadata(
            name=name if name and name.strip() else None,
            author=author if author and author.strip() else None,
        )

    def set_share_name(self, value):
        self._set_optional(SHARE_NAME_KEY, value)

    def set_share_author(self, value):
        self._set_optional(SHARE_AUTHOR_KEY, value)

    def _set_optional(self, key, value):
        if value:
            self.storage.set(key, value)
        else:
            self.storage.remove(key)
