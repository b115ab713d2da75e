"""Unit tests for migration markers and attribution stripping."""

import pytest

from rehome.comments import (
    build_marker,
    build_migrated_body,
    has_marker,
    marker_prefix,
    strip_attribution,
)
from rehome.gateway import Comment


def _comment(**overrides: object) -> Comment:
    data: dict = {
        "id": 3842112060,
        "body": "The boss spawns inside the wall.",
        "author": "finalFlick",
        "created_at": "2026-02-03T15:48:18Z",
        "url": "https://github.com/finalFlick/mantasphere/issues/3#issuecomment-3842112060",
    }
    data.update(overrides)
    return Comment(**data)


@pytest.mark.unit
class TestMarkers:
    """Tests for marker construction."""

    def test_build_marker(self) -> None:
        assert build_marker(3, 3842112060) == "<!-- migrated-from:issue#3 comment:3842112060 -->"

    def test_marker_prefix_does_not_match_other_tickets(self) -> None:
        assert marker_prefix(3) in build_marker(3, 1)
        assert marker_prefix(3) not in build_marker(31, 1)

    def test_has_marker(self) -> None:
        assert has_marker(f"{build_marker(1, 2)}\nhi")
        assert not has_marker("plain comment")


@pytest.mark.unit
class TestBuildMigratedBody:
    """Tests for build_migrated_body."""

    def test_layout(self) -> None:
        body = build_migrated_body(3, _comment())

        assert body.split("\n") == [
            "<!-- migrated-from:issue#3 comment:3842112060 -->",
            "> *Originally posted by @finalFlick on 2026-02-03T15:48:18Z*",
            "> Source: https://github.com/finalFlick/mantasphere/issues/3#issuecomment-3842112060",
            "",
            "The boss spawns inside the wall.",
        ]

    def test_body_kept_verbatim(self) -> None:
        original = "line one\r\n\r\n```js\ncode()\n```\n"

        body = build_migrated_body(3, _comment(body=original))

        assert body.endswith("\n\n" + original)

    def test_missing_metadata_placeholders(self) -> None:
        body = build_migrated_body(3, _comment(author="", created_at="", url=""))

        assert "@unknown on unknown-date" in body
        assert "> Source: unknown-url" in body


@pytest.mark.unit
class TestStripAttribution:
    """Tests for strip_attribution."""

    def test_removes_attribution_block(self) -> None:
        body = build_migrated_body(3, _comment())

        cleaned = strip_attribution(body)

        assert cleaned == (
            "<!-- migrated-from:issue#3 comment:3842112060 -->\n"
            "\n"
            "The boss spawns inside the wall."
        )

    def test_idempotent(self) -> None:
        once = strip_attribution(build_migrated_body(3, _comment()))

        assert strip_attribution(once) == once

    def test_multiline_body_untouched_after_header(self) -> None:
        original = "> quoted by the user\n> Source: https://github.com/x/y\n\nmore"
        cleaned = strip_attribution(build_migrated_body(3, _comment(body=original)))

        assert cleaned.endswith("\n\n" + original)

    @pytest.mark.parametrize(
        "body",
        [
            "just a comment",
            "intro\n<!-- migrated-from:issue#3 comment:1 -->\n> *Originally posted by @a on b*\n"
            "> Source: https://github.com/o/r/issues/3\n\nx",
            "<!-- migrated-from:issue#3 comment:1 -->\nno attribution here",
            "<!-- migrated-from:issue#3 comment:1 -->\n> *Originally posted by @a on b*\n"
            "> Source: unknown-url\n\nx",
        ],
    )
    def test_non_matching_shapes_unchanged(self, body: str) -> None:
        assert strip_attribution(body) == body

    def test_custom_web_url(self) -> None:
        comment = _comment(url="https://ghe.example.com/o/r/issues/3#issuecomment-1")
        body = build_migrated_body(3, comment)

        assert strip_attribution(body) == body
        assert strip_attribution(body, "https://ghe.example.com/") != body
