"""
Intent Matching
===============

Decides which tool, if any, a chat message is asking for, and builds the
call arguments from the message text.

This is a rule-based classifier, not language understanding:

1. Each tool name has a list of trigger phrases.
2. Tools are checked in registry order; the first tool whose trigger
   phrase appears in the lower-cased message wins. There is no scoring,
   so when two tools share a phrase the one the provider listed first
   is chosen.
3. The winning tool's extractor pulls arguments out of the text with
   regular expressions. Extraction always returns something: when no
   pattern applies, the whole message becomes the salient value.

``IntentMatcher`` is the interface the Context Assembler depends on, so a
different classifier can replace ``TriggerPhraseMatcher`` without touching
the orchestration code.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

from rijkschat.tools import ToolDescriptor
from rijkschat.utils.logger import Logger

logger = Logger("Intent")

DEFAULT_PAGE_SIZE = 10
DEFAULT_SORT = "relevance"
DEFAULT_TIMELINE_WORKS = 10


@dataclass(frozen=True)
class ToolMatch:
    """A tool chosen for a message, with its synthesized arguments."""
    tool: ToolDescriptor
    arguments: dict[str, Any] = field(default_factory=dict)


class IntentMatcher(ABC):
    """Chooses at most one tool for a message."""

    @abstractmethod
    def match(self, message: str, tools: Iterable[ToolDescriptor]) -> ToolMatch | None:
        """Return the matching tool and arguments, or None."""


# ==============================================================================
# Trigger phrases
# ==============================================================================

TRIGGER_PHRASES: dict[str, tuple[str, ...]] = {
    "search_artwork": (
        "find", "search", "look for", "show me", "paintings by", "paintings of",
        "artworks by", "artworks of", "works by", "do you have",
    ),
    "get_artwork_details": (
        "details", "tell me about", "tell me more", "information about",
        "info about", "more about", "describe",
    ),
    "get_artwork_image": (
        "image of", "picture of", "high resolution", "high-resolution", "zoom",
    ),
    "get_user_sets": (
        "user sets", "curated sets", "user collections", "collections made by",
    ),
    "get_user_set_details": (
        "set details", "contents of set", "items in set", "what is in set",
    ),
    "get_artist_timeline": (
        "timeline", "career", "chronolog", "over the years", "over time",
    ),
    "open_image_in_browser": (
        "open image", "open the image", "open in browser", "in my browser",
    ),
}


# ==============================================================================
# Argument extraction
# ==============================================================================

# Inventory numbers such as SK-C-5, SK-A-1718 or RP-P-OB-1234
OBJECT_NUMBER_PATTERN = re.compile(r"\b([A-Z]{2,4}(?:-[A-Z]{1,4})*-\d+[A-Z0-9]*(?:[.-][A-Z0-9]+)*)\b", re.IGNORECASE)
QUOTED_PATTERN = re.compile(r"[\"“”]([^\"“”]+)[\"“”]")
URL_PATTERN = re.compile(r"https?://\S+")
SET_ID_PATTERN = re.compile(r"\b(\d+-[\w-]+)\b")

SEARCH_FILLER = re.compile(
    r"\b(?:can you|could you|would you|please|i want to|i'd like to|help me|"
    r"find me|find|search for|search|show me|look for|look up|do you have|"
    r"are there|any|some|paintings|painting|artworks|artwork|works|"
    r"in the rijksmuseum|in the museum|in the collection|for me)\b",
    re.IGNORECASE,
)
DETAIL_FILLER = re.compile(
    r"\b(?:can you|could you|please|tell me more about|tell me about|tell me more|"
    r"give me|show me|get|details of|details about|details for|details on|details|"
    r"information about|information on|info about|more about|describe|"
    r"the artwork|the painting|high resolution|high-resolution|image of|picture of|zoom into|zoom in on|zoom)\b",
    re.IGNORECASE,
)
TIMELINE_FILLER = re.compile(
    r"\b(?:can you|could you|please|show me|give me|what is|what's|the|timeline|career|"
    r"chronological|chronology|over the years|over time|of|for|artist|works by|"
    r"how did|evolve|develop)\b",
    re.IGNORECASE,
)
SET_FILLER = re.compile(
    r"\b(?:can you|please|show me|set details|contents of set|items in set|what is in set|for|of|the)\b",
    re.IGNORECASE,
)
LEADING_CONNECTOR = re.compile(r"^(?:of|by|with|about|for|on)\s+", re.IGNORECASE)


def normalize_whitespace(text: str) -> str:
    return " ".join(text.split())


def _strip(message: str, filler: re.Pattern) -> str:
    """
    Remove filler phrases, quotes and trailing punctuation from a message.

    Falls back to the whole (normalized) message when nothing is left.
    """
    quoted = QUOTED_PATTERN.search(message)
    if quoted:
        value = normalize_whitespace(quoted.group(1))
        if value:
            return value

    text = filler.sub(" ", message)
    text = text.replace('"', " ").replace("“", " ").replace("”", " ")
    text = normalize_whitespace(text).strip(" ?!.,:;")
    text = LEADING_CONNECTOR.sub("", text).strip()

    return text or normalize_whitespace(message)


def find_object_number(message: str) -> str | None:
    match = OBJECT_NUMBER_PATTERN.search(message)
    return match.group(1).upper() if match else None


def extract_search_arguments(message: str) -> dict[str, Any]:
    return {
        "query": _strip(message, SEARCH_FILLER),
        "pageSize": DEFAULT_PAGE_SIZE,
        "imgonly": True,
        "s": DEFAULT_SORT,
    }


def extract_object_arguments(message: str) -> dict[str, Any]:
    # An inventory number anywhere in the message overrides the free text
    object_number = find_object_number(message)
    return {"objectNumber": object_number or _strip(message, DETAIL_FILLER)}


def extract_timeline_arguments(message: str) -> dict[str, Any]:
    return {
        "artist": _strip(message, TIMELINE_FILLER),
        "maxWorks": DEFAULT_TIMELINE_WORKS,
    }


def extract_user_sets_arguments(message: str) -> dict[str, Any]:
    return {"page": 0, "pageSize": DEFAULT_PAGE_SIZE}


def extract_set_details_arguments(message: str) -> dict[str, Any]:
    match = SET_ID_PATTERN.search(message)
    return {"setId": match.group(1) if match else _strip(message, SET_FILLER)}


def extract_open_image_arguments(message: str) -> dict[str, Any]:
    match = URL_PATTERN.search(message)
    url = match.group(0).rstrip(".,;)") if match else normalize_whitespace(message)
    return {"imageUrl": url}


def extract_default_arguments(message: str) -> dict[str, Any]:
    return {"query": normalize_whitespace(message)}


ArgumentExtractor = Callable[[str], dict[str, Any]]

ARGUMENT_EXTRACTORS: dict[str, ArgumentExtractor] = {
    "search_artwork": extract_search_arguments,
    "get_artwork_details": extract_object_arguments,
    "get_artwork_image": extract_object_arguments,
    "get_user_sets": extract_user_sets_arguments,
    "get_user_set_details": extract_set_details_arguments,
    "get_artist_timeline": extract_timeline_arguments,
    "open_image_in_browser": extract_open_image_arguments,
}


class TriggerPhraseMatcher(IntentMatcher):
    """
    First-match substring classifier.

    Example:
        matcher = TriggerPhraseMatcher()
        match = matcher.match("find sunflowers", registry)
        # ToolMatch(tool=search_artwork, arguments={"query": "sunflowers", ...})
    """

    def __init__(
        self,
        triggers: dict[str, tuple[str, ...]] | None = None,
        extractors: dict[str, ArgumentExtractor] | None = None
    ):
        self.triggers = {
            name: tuple(phrase.lower() for phrase in phrases)
            for name, phrases in (triggers if triggers is not None else TRIGGER_PHRASES).items()
        }
        self.extractors = extractors if extractors is not None else ARGUMENT_EXTRACTORS

    def match(self, message: str, tools: Iterable[ToolDescriptor]) -> ToolMatch | None:
        lowered = message.lower()

        for tool in tools:
            phrases = self.triggers.get(tool.name, ())
            trigger = next((p for p in phrases if p in lowered), None)
            if trigger is None:
                continue

            arguments = self.extract_arguments(tool.name, message)
            logger.debug(f"Matched {tool.name} on '{trigger}'", arguments)
            return ToolMatch(tool=tool, arguments=arguments)

        return None

    def extract_arguments(self, tool_name: str, message: str) -> dict[str, Any]:
        extractor = self.extractors.get(tool_name, extract_default_arguments)
        return extractor(message)
