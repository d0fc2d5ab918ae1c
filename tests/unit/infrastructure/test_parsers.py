"""Tests for infrastructure parsers."""

from __future__ import annotations

from urllib.parse import urlencode

from tydle.infrastructure.common.parsers import (
    int_or_none,
    parse_signature_cipher,
    traverse,
)

DOC = {
    "videoDetails": {
        "title": "t",
        "thumbnail": {"thumbnails": [{"url": "a"}, {"url": "b"}]},
    },
    "list": [1, 2],
}


class TestTraverse:
    def test_nested_dict(self) -> None:
        assert traverse(DOC, "videoDetails", "title") == "t"

    def test_list_index(self) -> None:
        assert traverse(DOC, "videoDetails", "thumbnail", "thumbnails", -1, "url") == "b"

    def test_missing_key_returns_default(self) -> None:
        assert traverse(DOC, "videoDetails", "nope") is None
        assert traverse(DOC, "nope", "deeper", default="d") == "d"

    def test_index_out_of_range(self) -> None:
        assert traverse(DOC, "list", 5) is None

    def test_type_mismatch(self) -> None:
        assert traverse(DOC, "list", "key") is None
        assert traverse(DOC, "videoDetails", 0) is None

    def test_empty_path_returns_document(self) -> None:
        assert traverse(DOC) is DOC


class TestIntOrNone:
    def test_numeric_string(self) -> None:
        assert int_or_none("212") == 212

    def test_int(self) -> None:
        assert int_or_none(7) == 7

    def test_garbage(self) -> None:
        assert int_or_none("abc") is None
        assert int_or_none(None) is None
        assert int_or_none({}) is None

    def test_bool_is_not_a_number(self) -> None:
        assert int_or_none(True) is None


class TestParseSignatureCipher:
    def test_decodes_fields(self) -> None:
        raw = urlencode(
            {"s": "AB%3D=", "sp": "sig", "url": "https://cdn/videoplayback?itag=18&x=1"}
        )
        fields = parse_signature_cipher(raw)
        assert fields == {
            "s": "AB%3D=",
            "sp": "sig",
            "url": "https://cdn/videoplayback?itag=18&x=1",
        }

    def test_missing_sp(self) -> None:
        assert parse_signature_cipher("s=abc&url=https%3A%2F%2Fcdn") == {
            "s": "abc",
            "url": "https://cdn",
        }

    def test_empty(self) -> None:
        assert parse_signature_cipher("") == {}
