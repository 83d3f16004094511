"""
Recent Results
==============

Artworks the user has recently seen, most recent first.

The Context Assembler upserts every artwork returned by a search or a
detail lookup. The Direct-Action Extractor reads the cache to resolve
phrases like "show the image of the night watch" without another search.

Entries are keyed by object number: upserting a known object replaces the
old entry and moves it to the front, so the cache never holds duplicates
and never shrinks.
"""

from typing import Iterable, Iterator

from rijkschat.artwork import Artwork


class RecentResults:
    """
    Recency-ordered, deduplicated artwork cache.

    Example:
        recent = RecentResults()
        recent.upsert_many(artworks)

        match = recent.find("night watch")
        if match:
            print(match.image_url)
    """

    def __init__(self):
        # Most recent first
        self._items: list[Artwork] = []

    def upsert(self, artwork: Artwork) -> None:
        """Insert an artwork, replacing any entry with the same object number."""
        self._items = [a for a in self._items if a.object_number != artwork.object_number]
        self._items.insert(0, artwork)

    def upsert_many(self, artworks: Iterable[Artwork]) -> None:
        """
        Upsert several artworks keeping their relative order.

        The first artwork of the batch ends up most recent.
        """
        for artwork in reversed(list(artworks)):
            self.upsert(artwork)

    def get(self, object_number: str) -> Artwork | None:
        wanted = object_number.strip().lower()
        for artwork in self._items:
            if artwork.object_number.lower() == wanted:
                return artwork
        return None

    def find(self, text: str) -> Artwork | None:
        """
        Find the most recent artwork whose title or artist contains text.

        Matching is a case-insensitive substring test; an object number
        match is also accepted.

        Returns:
            The best match, or None
        """
        needle = text.strip().lower()
        if not needle:
            return None

        for artwork in self._items:
            if needle in artwork.title.lower() or needle in artwork.artist.lower():
                return artwork
        return self.get(needle)

    def items(self) -> list[Artwork]:
        return list(self._items)

    def __iter__(self) -> Iterator[Artwork]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)
