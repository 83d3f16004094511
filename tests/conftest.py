"""Shared pytest fixtures."""

import pytest

from rijkschat.tools import ToolDescriptor, ToolRegistry

ALL_TOOLS = (
    "search_artwork",
    "get_artwork_details",
    "get_artwork_image",
    "get_user_sets",
    "get_user_set_details",
    "get_artist_timeline",
    "open_image_in_browser",
)


@pytest.fixture
def registry() -> ToolRegistry:
    return ToolRegistry([ToolDescriptor(name=name) for name in ALL_TOOLS])


@pytest.fixture(autouse=True)
def quiet_logs(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "error")
