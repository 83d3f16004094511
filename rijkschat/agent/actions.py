"""
Direct Actions
==============

Recognizes a few imperative phrasings and carries them out against
artworks the user has already seen, without going through intent matching:

    "show the image of the night watch"   -> open that artwork's image
    "tell me more details about milkmaid" -> fetch its full details

The target text is looked up in the recent-results cache by title or
artist (case-insensitive substring). No pattern match, no cached artwork
or a failed action all yield None, and the message continues through the
normal context pipeline.
"""

import re
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from rijkschat.artwork import Artwork, artwork_from_details
from rijkschat.memory import RecentResults
from rijkschat.tools.formatters import format_result
from rijkschat.utils.logger import Logger

logger = Logger("DirectAction")

IMAGE_PATTERN = re.compile(
    r"\b(?:show|open|view|display)\s+(?:me\s+)?(?:the\s+|an?\s+)?(?:image|picture|photo)\s+(?:of|for)\s+(?P<target>.+)",
    re.IGNORECASE,
)
DETAILS_PATTERN = re.compile(
    r"\b(?:tell|show|give)\s+me\s+(?:the\s+|some\s+)?(?:more\s+)?(?:details|information|info)\s+(?:about|on|of|for)\s+(?P<target>.+)",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class ActionResult:
    """
    What a direct action did.

    Attributes:
        summary: One-line confirmation for the prompt and the user
        context: Formatted data the action fetched, if any
        artwork: The artwork acted on
    """
    summary: str
    context: str | None = None
    artwork: Artwork | None = None


def _clean_target(raw: str) -> str:
    target = raw.strip().strip("\"'“”").strip(" ?!.,;:")
    target = re.sub(r"^(?:the|a|an)\s+", "", target, flags=re.IGNORECASE)
    return target.strip("\"'“”").strip()


class DirectActionExtractor:
    """
    Pre-pass that short-cuts "show image of X" and "details about X".

    Example:
        extractor = DirectActionExtractor(recent, open_image, fetch_details)
        result = await extractor.try_direct_action("show the image of the milkmaid")
        result.summary
        # 'Opened the image of "The Milkmaid" by Johannes Vermeer in your browser.'
    """

    def __init__(
        self,
        recent: RecentResults,
        open_image: Callable[[str], Awaitable[Any]],
        fetch_details: Callable[[str], Awaitable[Any]]
    ):
        """
        Args:
            recent: Recent-results cache, only read here
            open_image: Coroutine opening an image URL
            fetch_details: Coroutine returning the raw detail result for an
                object number
        """
        self._recent = recent
        self._open_image = open_image
        self._fetch_details = fetch_details

    async def try_direct_action(self, message: str) -> ActionResult | None:
        """
        Run a direct action if the message asks for one.

        Returns:
            What was done, or None when nothing was done
        """
        image_request = IMAGE_PATTERN.search(message)
        if image_request:
            artwork = self._recent.find(_clean_target(image_request.group("target")))
            if artwork and artwork.image_url:
                return await self._open(artwork)

        details_request = DETAILS_PATTERN.search(message)
        if details_request:
            artwork = self._recent.find(_clean_target(details_request.group("target")))
            if artwork:
                return await self._details(artwork)

        return None

    async def _open(self, artwork: Artwork) -> ActionResult | None:
        try:
            await self._open_image(artwork.image_url)
        except Exception as e:
            logger.error(f"Could not open image for {artwork.object_number}", e)
            return None

        logger.info(f"Opened image for {artwork.object_number}")
        return ActionResult(
            summary=f'Opened the image of "{artwork.title}" by {artwork.artist} in your browser.',
            artwork=artwork,
        )

    async def _details(self, artwork: Artwork) -> ActionResult | None:
        try:
            result = await self._fetch_details(artwork.object_number)
        except Exception as e:
            logger.error(f"Could not fetch details for {artwork.object_number}", e)
            return None

        detailed = artwork_from_details(result) or artwork
        logger.info(f"Fetched details for {detailed.object_number}")
        return ActionResult(
            summary=f'Retrieved details for "{detailed.title}" by {detailed.artist} ({detailed.object_number}).',
            context=format_result("get_artwork_details", result),
            artwork=detailed,
        )
