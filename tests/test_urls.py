"""Tests for URL and query-string construction."""

from __future__ import annotations

import enum

import pytest

from mbclient.models import HTTPMethod
from mbclient.urls import build_query_string, build_url, query_value


PREFIX = "http://localhost:3000/api/"


class ModelType(str, enum.Enum):
    CARD = "card"
    DATASET = "dataset"


class Level(enum.Enum):
    HIGH = 3


class TestQueryValue:
    def test_plain_string(self) -> None:
        assert query_value("all") == "all"

    def test_int(self) -> None:
        assert query_value(1) == "1"

    def test_str_enum_uses_value(self) -> None:
        assert query_value(ModelType.DATASET) == "dataset"
        assert query_value(HTTPMethod.GET) == "GET"

    def test_non_str_enum_uses_value(self) -> None:
        assert query_value(Level.HIGH) == "3"


class TestBuildUrl:
    @pytest.mark.parametrize("path", ["card", "card/1", "card/1/favorite", ""])
    def test_no_params_is_prefix_plus_path(self, path: str) -> None:
        assert build_url(PREFIX, path) == PREFIX + path

    def test_empty_params_adds_no_question_mark(self) -> None:
        assert build_url(PREFIX, "card", {}) == PREFIX + "card"

    def test_params_in_insertion_order(self) -> None:
        url = build_url(PREFIX, "card", {"org": 1, "f": "all", "archived": "false"})
        assert url == PREFIX + "card?org=1&f=all&archived=false"

    def test_order_follows_mapping_not_sorting(self) -> None:
        url = build_url(PREFIX, "card", {"z": "1", "a": "2"})
        assert url == PREFIX + "card?z=1&a=2"

    def test_symbolic_keys_and_values(self) -> None:
        url = build_url(PREFIX, "search", {ModelType.CARD: ModelType.DATASET})
        assert url == PREFIX + "search?card=dataset"

    def test_special_characters_encoded_by_default(self) -> None:
        url = build_url(PREFIX, "search", {"q": "a b&c=d"})
        assert url == PREFIX + "search?q=a%20b%26c%3Dd"

    def test_verbatim_when_encoding_disabled(self) -> None:
        url = build_url(PREFIX, "search", {"q": "a b&c"}, encode=False)
        assert url == PREFIX + "search?q=a b&c"

    def test_custom_prefix(self) -> None:
        assert build_url("https://mb.example.com/api/", "user/current") == (
            "https://mb.example.com/api/user/current"
        )


class TestBuildQueryString:
    def test_single_pair(self) -> None:
        assert build_query_string({"org": 1}) == "org=1"

    def test_unicode_encoded(self) -> None:
        assert build_query_string({"name": "café"}) == "name=caf%C3%A9"
