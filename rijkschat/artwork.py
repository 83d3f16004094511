"""
Artwork Model
=============

A single object from the Rijksmuseum collection, normalized from whatever
shape the tool provider returned.

The provider forwards the collection API almost verbatim, so search results
arrive as ``{"count": N, "artObjects": [...]}`` and detail lookups as
``{"artObject": {...}}``. Some provider builds already flatten records to
``{"objectNumber", "title", "artist", "imageUrl"}``. ``Artwork.from_api``
accepts both.
"""

from dataclasses import dataclass, field
from typing import Any


def _text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return str(value)


def _image_url(record: dict) -> str | None:
    for key in ("webImage", "headerImage"):
        image = record.get(key)
        if isinstance(image, dict) and image.get("url"):
            return image["url"]
    return _text(record.get("imageUrl") or record.get("image_url"))


def _dimensions(record: dict) -> list[str]:
    raw = record.get("dimensions")
    if isinstance(raw, list):
        rendered = []
        for entry in raw:
            if isinstance(entry, dict):
                parts = [str(entry.get(k)) for k in ("type", "value", "unit") if entry.get(k)]
                if parts:
                    rendered.append(" ".join(parts))
            elif entry:
                rendered.append(str(entry))
        if rendered:
            return rendered
    sub_title = _text(record.get("subTitle"))
    return [sub_title] if sub_title else []


@dataclass
class Artwork:
    """
    A collection object.

    Attributes:
        object_number: Museum inventory number, e.g. "SK-C-5"; the cache key
        title: Display title
        artist: Principal maker
        id: Collection API id, e.g. "en-SK-C-5"
        image_url: Web image location, if the object has one
        description: Curatorial description
        date: Presenting date, e.g. "1642"
        materials: Materials and techniques
        dimensions: Human-readable dimensions
    """
    object_number: str
    title: str
    artist: str
    id: str | None = None
    image_url: str | None = None
    description: str | None = None
    date: str | None = None
    materials: list[str] = field(default_factory=list)
    dimensions: list[str] = field(default_factory=list)

    @classmethod
    def from_api(cls, record: dict) -> "Artwork | None":
        """
        Build an Artwork from a collection API record.

        Returns:
            The artwork, or None if the record has no object number
        """
        if not isinstance(record, dict):
            return None

        object_number = _text(record.get("objectNumber") or record.get("object_number"))
        if not object_number:
            return None

        dating = record.get("dating")
        date = None
        if isinstance(dating, dict):
            date = _text(dating.get("presentingDate") or dating.get("sortingDate"))
        date = date or _text(record.get("date"))

        description = (
            _text(record.get("plaqueDescriptionEnglish"))
            or _text(record.get("description"))
        )
        label = record.get("label")
        if not description and isinstance(label, dict):
            description = _text(label.get("description"))

        materials = [str(m) for m in record.get("materials") or [] if m]
        materials += [str(t) for t in record.get("techniques") or [] if t and str(t) not in materials]

        return cls(
            object_number=object_number,
            title=_text(record.get("title")) or _text(record.get("longTitle")) or "Untitled",
            artist=(
                _text(record.get("principalOrFirstMaker"))
                or _text(record.get("principalMaker"))
                or _text(record.get("artist"))
                or "Unknown artist"
            ),
            id=_text(record.get("id")),
            image_url=_image_url(record),
            description=description,
            date=date,
            materials=materials,
            dimensions=_dimensions(record),
        )

    def to_dict(self) -> dict:
        """Convert to the camelCase shape the presentation layer renders."""
        return {
            "id": self.id or self.object_number,
            "objectNumber": self.object_number,
            "title": self.title,
            "artist": self.artist,
            "imageUrl": self.image_url,
            "description": self.description,
            "date": self.date,
            "materials": list(self.materials),
            "dimensions": list(self.dimensions),
        }


def artworks_from_search(payload: Any) -> list[Artwork]:
    """Extract artworks from a search result payload; unknown shapes yield []."""
    if isinstance(payload, dict):
        records = payload.get("artObjects") or payload.get("artworks") or []
    elif isinstance(payload, list):
        records = payload
    else:
        return []

    artworks = []
    for record in records:
        artwork = Artwork.from_api(record)
        if artwork:
            artworks.append(artwork)
    return artworks


def artwork_from_details(payload: Any) -> Artwork | None:
    """Extract the artwork from a detail lookup payload."""
    if isinstance(payload, dict):
        record = payload.get("artObject") or payload.get("artwork") or payload
        return Artwork.from_api(record)
    return None
