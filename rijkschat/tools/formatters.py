"""
Result Formatters
=================

Turn raw tool results into short natural-language context for the model.

Formatting is table-driven: ``FORMATTERS`` maps a tool name to a function
taking the parsed result. Tools without an entry get the generic
``Result from <name>: <json>`` rendering.

Formatters never raise to their caller. Empty results render a "not found"
sentence, and a formatter that trips over an unexpected shape falls back
to the generic rendering.
"""

import json
from typing import Any, Callable

from rijkschat.artwork import Artwork, artwork_from_details, artworks_from_search
from rijkschat.utils.logger import Logger

logger = Logger("Formatters")

MAX_SEARCH_RESULTS = 5

Formatter = Callable[[Any], str]


def _artwork_line(artwork: Artwork) -> str:
    line = f'"{artwork.title}" by {artwork.artist} ({artwork.object_number})'
    if artwork.date:
        line += f", {artwork.date}"
    return line


def format_search(result: Any) -> str:
    if isinstance(result, str):
        return f"Search results:\n{result}" if result.strip() else "No artworks found matching your search."

    artworks = artworks_from_search(result)
    if not artworks:
        return "No artworks found matching your search."

    total = result.get("count", len(artworks)) if isinstance(result, dict) else len(artworks)
    lines = [f"Found {total} artworks. Here are the top results:"]
    for i, artwork in enumerate(artworks[:MAX_SEARCH_RESULTS], start=1):
        lines.append(f"{i}. {_artwork_line(artwork)}")
    return "\n".join(lines)


def format_details(result: Any) -> str:
    if isinstance(result, str):
        return f"Artwork details:\n{result}" if result.strip() else "No details found for this artwork."

    artwork = artwork_from_details(result)
    if artwork is None:
        return "No details found for this artwork."

    lines = [
        "Artwork details:",
        f"Title: {artwork.title}",
        f"Artist: {artwork.artist}",
        f"Object number: {artwork.object_number}",
    ]
    if artwork.date:
        lines.append(f"Date: {artwork.date}")
    if artwork.materials:
        lines.append(f"Materials: {', '.join(artwork.materials)}")
    if artwork.dimensions:
        lines.append(f"Dimensions: {'; '.join(artwork.dimensions)}")
    if artwork.description:
        lines.append(f"Description: {artwork.description}")
    if artwork.image_url:
        lines.append(f"Image: {artwork.image_url}")
    return "\n".join(lines)


def format_image(result: Any) -> str:
    if isinstance(result, str):
        return f"Image information:\n{result}" if result.strip() else "No image information found for this artwork."
    if not isinstance(result, dict) or not result:
        return "No image information found for this artwork."

    url = result.get("url") or result.get("imageUrl")
    levels = result.get("levels")
    if url:
        return f"The artwork image is available at {url}"
    if isinstance(levels, list) and levels:
        largest = max(levels, key=lambda level: level.get("width", 0) if isinstance(level, dict) else 0)
        size = ""
        if isinstance(largest, dict) and largest.get("width") and largest.get("height"):
            size = f" (up to {largest['width']}x{largest['height']} pixels)"
        return f"A high-resolution image is available with {len(levels)} zoom levels{size}."
    return "No image information found for this artwork."


def format_user_sets(result: Any) -> str:
    sets = result.get("userSets") if isinstance(result, dict) else result
    if not isinstance(sets, list) or not sets:
        return "No user sets found."

    lines = [f"Found {len(sets)} user-curated sets:"]
    for entry in sets:
        if not isinstance(entry, dict):
            continue
        owner = (entry.get("user") or {}).get("name") if isinstance(entry.get("user"), dict) else None
        line = f"- {entry.get('name', 'Unnamed set')} (id {entry.get('id', '?')}, {entry.get('count', 0)} items)"
        if owner:
            line += f" by {owner}"
        lines.append(line)
    return "\n".join(lines)


def format_user_set_details(result: Any) -> str:
    user_set = result.get("userSet", result) if isinstance(result, dict) else None
    if not isinstance(user_set, dict) or not user_set:
        return "No details found for this user set."

    lines = [f"User set: {user_set.get('name', 'Unnamed set')}"]
    if user_set.get("description"):
        lines.append(f"Description: {user_set['description']}")

    items = user_set.get("setItems") or []
    if items:
        lines.append(f"Contains {len(items)} items:")
        for item in items[:MAX_SEARCH_RESULTS]:
            if isinstance(item, dict):
                label = item.get("title") or item.get("objectNumber") or "Untitled"
                lines.append(f"- {label}")
    else:
        lines.append("This set is empty.")
    return "\n".join(lines)


def format_timeline(result: Any) -> str:
    if isinstance(result, dict):
        entries = result.get("timeline") or result.get("artObjects") or []
        artist = result.get("artist")
    else:
        entries = result if isinstance(result, list) else []
        artist = None

    if not entries:
        return "No timeline information found for this artist."

    header = f"Timeline of works by {artist}:" if artist else "Timeline of works:"
    lines = [header]
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        year = entry.get("year") or entry.get("date")
        if year is None and isinstance(entry.get("dating"), dict):
            year = entry["dating"].get("presentingDate") or entry["dating"].get("year")
        lines.append(f"- {year or 'Undated'}: {entry.get('title', 'Untitled')}")
    return "\n".join(lines)


def format_open_image(result: Any) -> str:
    if isinstance(result, dict) and result.get("success") is False:
        return "The image could not be opened in the browser."
    if isinstance(result, str) and result.strip():
        return result
    return "The image has been opened in your browser."


def format_generic(tool_name: str, result: Any) -> str:
    """Render any result as ``Result from <name>: <json>``."""
    try:
        rendered = json.dumps(result, indent=2, default=str)
    except (TypeError, ValueError):
        rendered = str(result)
    return f"Result from {tool_name}: {rendered}"


FORMATTERS: dict[str, Formatter] = {
    "search_artwork": format_search,
    "get_artwork_details": format_details,
    "get_artwork_image": format_image,
    "get_user_sets": format_user_sets,
    "get_user_set_details": format_user_set_details,
    "get_artist_timeline": format_timeline,
    "open_image_in_browser": format_open_image,
}


def format_result(tool_name: str, result: Any) -> str:
    """
    Format a tool result for the prompt.

    Args:
        tool_name: The tool that produced the result
        result: Parsed result (JSON value or raw text)

    Returns:
        Human-readable context text; never raises
    """
    formatter = FORMATTERS.get(tool_name)
    if formatter is None:
        return format_generic(tool_name, result)

    try:
        return formatter(result)
    except Exception as e:
        logger.warning(f"Formatter for {tool_name} failed, using generic rendering", {"error": str(e)})
        return format_generic(tool_name, result)
