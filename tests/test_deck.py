from __future__ import annotations

import io

import pytest
from pptx import Presentation
from pptx.enum.shapes import MSO_SHAPE_TYPE
from pptx.util import Inches

from autoppt.deck import DeckEmitter
from autoppt.errors import DeckEmissionFailure
from autoppt.models import DEFAULT_TEMPLATE, ColorScheme, TemplateModel
from autoppt.outline import BulletsSlide, ContentSlide, SlideOutline, TitleSlide, normalize_outline
from autoppt.placement import PlacementEngine
from autoppt.template import analyze_template


def _render(template, outline, include_notes=False):
    plan = PlacementEngine(template, include_notes=include_notes).plan(outline)
    return Presentation(io.BytesIO(DeckEmitter().render(plan)))


def test_default_template_two_slide_deck(ooxml) -> None:
    template = analyze_template(ooxml.archive({}))
    outline = SlideOutline(
        title="Deck",
        slides=[TitleSlide(title="Welcome"), BulletsSlide(title="Agenda", content=["a", "b"])],
    )

    deck = _render(template, outline)

    assert len(deck.slides) == 2
    assert deck.slide_width == Inches(10)
    assert deck.slide_height == Inches(7.5)

    title_shape = deck.slides[0].shapes[0]
    assert title_shape.text_frame.text == "Welcome"
    assert title_shape.left == Inches(0.5)
    assert title_shape.top == Inches(0.5)
    run = title_shape.text_frame.paragraphs[0].runs[0]
    assert run.font.bold is True
    assert str(run.font.color.rgb) == DEFAULT_TEMPLATE.colors.primary.lstrip("#").upper()

    body = deck.slides[1].shapes[1]
    paragraphs = [p.text for p in body.text_frame.paragraphs]
    assert paragraphs == ["a", "b"]
    assert body.top == Inches(2)
    assert body.width == Inches(9)
    bullet_xml = body.text_frame.paragraphs[0]._p.xml
    assert "buChar" in bullet_xml


def test_background_fill_and_notes(outline_json) -> None:
    template = TemplateModel(colors=ColorScheme(background="#102030"))
    deck = _render(template, normalize_outline(outline_json), include_notes=True)

    second = deck.slides[1]
    assert str(second.background.fill.fore_color.rgb) == "102030"
    assert second.has_notes_slide
    assert second.notes_slide.notes_text_frame.text == "Mention the new region"
    assert not deck.slides[2].has_notes_slide


def test_template_image_is_embedded(ooxml) -> None:
    template = TemplateModel(images={"logo.png": ooxml.PNG_BASE64})
    outline = SlideOutline(
        title="Deck",
        slides=[TitleSlide(title="Hi"), ContentSlide(title="Brand", content=["text"], image="logo")],
    )

    deck = _render(template, outline)

    pictures = [shape for shape in deck.slides[1].shapes if shape.shape_type == MSO_SHAPE_TYPE.PICTURE]
    assert len(pictures) == 1


def test_corrupt_image_raises_deck_emission_failure() -> None:
    template = TemplateModel(images={"broken.png": "bm90IGFuIGltYWdl"})
    outline = SlideOutline(
        title="Deck",
        slides=[TitleSlide(title="Hi"), ContentSlide(title="Broken", content=["x"], image="broken")],
    )
    plan = PlacementEngine(template).plan(outline)

    with pytest.raises(DeckEmissionFailure):
        DeckEmitter().render(plan)
