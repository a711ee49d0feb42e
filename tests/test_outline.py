from __future__ import annotations

import json

import pytest

from autoppt.errors import MalformedOutline
from autoppt.outline import (
    BulletsSlide,
    ContentSlide,
    TitleSlide,
    find_json_object,
    normalize_outline,
    strip_code_fences,
)


def test_first_slide_is_forced_to_title() -> None:
    raw = json.dumps({
        "title": "Deck",
        "slides": [
            {"title": "Opening", "content": ["a"], "type": "bullets"},
            {"title": "Body", "content": ["b"], "type": "bullets"},
        ],
    })

    outline = normalize_outline(raw)

    assert isinstance(outline.slides[0], TitleSlide)
    assert outline.slides[0].type == "title"
    assert isinstance(outline.slides[1], BulletsSlide)


def test_fenced_json_matches_unwrapped_json(outline_json) -> None:
    fenced = f"Here is your outline:\n```json\n{outline_json}\n```\nLet me know if you need changes."

    assert normalize_outline(fenced) == normalize_outline(outline_json)


def test_text_without_json_raises_malformed_outline() -> None:
    raw = "Sorry, I cannot help with that."

    with pytest.raises(MalformedOutline) as exc:
        normalize_outline(raw)

    assert exc.value.raw_response == raw
    assert raw not in exc.value.message


@pytest.mark.parametrize(
    "raw",
    [
        "",
        '{"slides": []}',
        '{"title": "", "slides": []}',
        '{"title": "Deck", "slides": "not a list"}',
        '{"title": "Deck", "slides": ["just a string"]}',
        '{"title": "Deck", "slides": [{"title": "x"}',
    ],
)
def test_invalid_outlines_are_rejected(raw: str) -> None:
    with pytest.raises(MalformedOutline):
        normalize_outline(raw)


def test_missing_fields_are_tolerated() -> None:
    outline = normalize_outline('{"title": "Deck", "slides": [{"title": "Only"}, {"content": "single"}]}')

    assert outline.slides[0].content == []
    assert outline.slides[0].notes is None
    assert isinstance(outline.slides[1], ContentSlide)
    assert outline.slides[1].title == ""
    assert outline.slides[1].content == ["single"]


def test_points_alias_and_unknown_type() -> None:
    raw = json.dumps({
        "title": "Deck",
        "slides": [
            {"title": "Intro", "points": ["x"]},
            {"title": "Data", "points": ["1", 2, 3.5], "type": "chart", "notes": "Say hi", "image": "logo"},
        ],
    })

    outline = normalize_outline(raw)
    slide = outline.slides[1]

    assert outline.slides[0].content == ["x"]
    assert slide.type == "content"
    assert slide.content == ["1", "2", "3.5"]
    assert slide.notes == "Say hi"
    assert slide.image == "logo"


def test_empty_slide_list_is_accepted() -> None:
    outline = normalize_outline('{"title": "Deck", "slides": []}')

    assert outline.title == "Deck"
    assert outline.slides == []


def test_find_json_object_skips_non_json_braces() -> None:
    text = 'Use {placeholders} like this: {"title": "Deck", "slides": []} and {"other": 1}'

    assert find_json_object(text) == {"title": "Deck", "slides": []}


def test_deeply_nested_reply_is_malformed() -> None:
    raw = '{"title": "Deck", "slides": ' + "[" * 100000 + "]" * 100000 + "}"

    with pytest.raises(MalformedOutline):
        normalize_outline(raw)


def test_strip_code_fences() -> None:
    assert strip_code_fences("```json\n{}\n```") == "{}"
    assert strip_code_fences("```\n{}\n```") == "{}"
