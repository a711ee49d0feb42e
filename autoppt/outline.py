"""Parse the model's free-text answer into a validated slide outline."""

import json
import logging
import re
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import MalformedOutline

logger = logging.getLogger(__name__)

SLIDE_TYPES = ("title", "content", "bullets")

_FENCE = re.compile(r"```[A-Za-z0-9_-]*[ \t]*\n?|\n?```")


class _SlideBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    title: str = ""
    content: List[str] = Field(default_factory=list)
    notes: Optional[str] = None
    image: Optional[str] = None


class TitleSlide(_SlideBase):
    type: Literal["title"] = "title"


class ContentSlide(_SlideBase):
    type: Literal["content"] = "content"


class BulletsSlide(_SlideBase):
    type: Literal["bullets"] = "bullets"


SlideSpec = Annotated[
    Union[TitleSlide, ContentSlide, BulletsSlide], Field(discriminator="type")
]


class SlideOutline(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    title: str
    slides: List[SlideSpec]


def strip_code_fences(text):
    """Remove Markdown code fence markers, keeping what they wrapped."""
    return _FENCE.sub("", text).strip()


def find_json_object(text):
    """Return the first balanced JSON object embedded in ``text``, or None."""
    decoder = json.JSONDecoder()
    start = text.find("{")
    while start != -1:
        try:
            value, _ = decoder.raw_decode(text, start)
        except (json.JSONDecodeError, RecursionError):
            value = None
        if isinstance(value, dict):
            return value
        start = text.find("{", start + 1)
    return None


def _as_text(item):
    if isinstance(item, str):
        return item
    if isinstance(item, (dict, list)):
        return json.dumps(item, ensure_ascii=False)
    return str(item)


def _as_text_list(value):
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, (list, tuple)):
        return [_as_text(item) for item in value if item is not None]
    return [_as_text(value)]


def _repair_slide(raw, index):
    """Coerce one raw slide dict into the fields the slide models accept."""
    slide_type = raw.get("type")
    if slide_type not in SLIDE_TYPES:
        slide_type = "content"
    if index == 0:
        slide_type = "title"

    # "points" is what older prompts asked for
    content = raw.get("content")
    if content is None:
        content = raw.get("points")

    title = raw.get("title")
    notes = raw.get("notes")
    image = raw.get("image")
    return {
        "type": slide_type,
        "title": title if isinstance(title, str) else ("" if title is None else str(title)),
        "content": _as_text_list(content),
        "notes": notes if isinstance(notes, str) and notes.strip() else None,
        "image": image if isinstance(image, str) and image.strip() else None,
    }


def normalize_outline(raw_text):
    """Validate model output into a SlideOutline.

    Raises MalformedOutline when no JSON object can be found, or when it lacks
    a title string or a list of slide objects. The first slide always becomes
    a title slide.
    """
    if not isinstance(raw_text, str) or not raw_text.strip():
        raise MalformedOutline("The model returned an empty response", raw_response=raw_text or "")

    data = find_json_object(strip_code_fences(raw_text))
    if data is None:
        raise MalformedOutline("The model response did not contain a JSON outline", raw_response=raw_text)

    title = data.get("title")
    slides = data.get("slides")
    if not isinstance(title, str) or not title.strip():
        raise MalformedOutline("The generated outline has no presentation title", raw_response=raw_text)
    if not isinstance(slides, list):
        raise MalformedOutline("The generated outline has no list of slides", raw_response=raw_text)
    if not all(isinstance(slide, dict) for slide in slides):
        raise MalformedOutline("The generated outline contains slides that are not objects", raw_response=raw_text)

    try:
        outline = SlideOutline(
            title=title.strip(),
            slides=[_repair_slide(slide, i) for i, slide in enumerate(slides)],
        )
    except ValidationError as e:
        logger.debug(f"Outline validation failed: {e}")
        raise MalformedOutline("The generated outline has an invalid structure", raw_response=raw_text) from e

    logger.info(f"Outline normalized: '{outline.title}' with {len(outline.slides)} slides")
    return outline
