"""Layout selection and placement: turn an outline plus a template model into
concrete, python-pptx independent drawing directives.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional, Tuple

from .models import DEFAULT_LAYOUT, Box

logger = logging.getLogger(__name__)

TITLE_SLIDE_TITLE_PT = 36
TITLE_SLIDE_SUBTITLE_PT = 18
SLIDE_TITLE_PT = 28
BODY_PT = 16

IMAGE_SIZE = 3.0
IMAGE_TOP = 2.0
IMAGE_MARGIN = 0.5
IMAGE_GAP = 0.25
SUBTITLE_GAP = 0.5
SUBTITLE_HEIGHT = 1.0

WHITE = "#ffffff"
DEFAULT_FILENAME = "Presentation"
MAX_FILENAME_LENGTH = 50


@dataclass(frozen=True)
class TextDirective:
    box: Box
    paragraphs: Tuple[str, ...]
    font_face: str
    font_size: int
    color: str
    bold: bool = False
    bullets: bool = False
    align: str = "left"
    anchor: str = "top"


@dataclass(frozen=True)
class ImageDirective:
    name: str
    data: str
    box: Box


@dataclass(frozen=True)
class SlidePlan:
    layout_name: str
    texts: Tuple[TextDirective, ...] = ()
    images: Tuple[ImageDirective, ...] = ()
    background: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class DeckPlan:
    title: str
    filename: str
    canvas_width: float
    canvas_height: float
    slides: Tuple[SlidePlan, ...]


# -- layout selection -------------------------------------------------------
#
# Each rule returns a layout or None; the first non-None answer wins.

def _has_title(layout):
    return "title" in layout.name.lower()


def _no_layouts(slide, layouts):
    if not layouts:
        return DEFAULT_LAYOUT
    return None


def _only_layout(slide, layouts):
    if len(layouts) == 1:
        return layouts[0]
    return None


def _title_slide_layout(slide, layouts):
    if slide.type != "title":
        return None
    return next((layout for layout in layouts if _has_title(layout)), layouts[0])


def _body_slide_layout(slide, layouts):
    return next((layout for layout in layouts if not _has_title(layout)), layouts[1])


LAYOUT_RULES = (_no_layouts, _only_layout, _title_slide_layout, _body_slide_layout)


def select_layout(slide, layouts):
    """Pick the template layout a slide is drawn with."""
    layouts = tuple(layouts)
    for rule in LAYOUT_RULES:
        layout = rule(slide, layouts)
        if layout is not None:
            return layout
    return layouts[0]


# -- media ------------------------------------------------------------------

def find_image(requested, images):
    """First asset whose filename contains ``requested`` or whose stem is
    contained in it. Matching is case-sensitive.
    """
    if not requested:
        return None
    for name, data in images.items():
        stem = name.rsplit(".", 1)[0]
        if requested in name or (stem and stem in requested):
            return name, data
    return None


# -- filename ---------------------------------------------------------------

def derive_filename_base(title):
    cleaned = re.sub(r"[^\w\s-]", "", title or "", flags=re.ASCII).strip()
    cleaned = re.sub(r"\s+", "_", cleaned, flags=re.ASCII)[:MAX_FILENAME_LENGTH]
    return cleaned or DEFAULT_FILENAME


def derive_filename(title):
    return f"{derive_filename_base(title)}.pptx"


# -- placement --------------------------------------------------------------

class PlacementEngine:
    """Lays out normalized slides on the geometry of a template model."""

    def __init__(self, template, include_notes=False):
        self.template = template
        self.include_notes = include_notes

    @property
    def canvas(self):
        return self.template.canvas

    def plan(self, outline):
        slides = tuple(self.plan_slide(slide) for slide in outline.slides)
        return DeckPlan(
            title=outline.title,
            filename=derive_filename(outline.title),
            canvas_width=self.canvas.width,
            canvas_height=self.canvas.height,
            slides=slides,
        )

    def plan_slide(self, slide):
        layout = select_layout(slide, self.template.layouts)
        title_box = layout.title_box or DEFAULT_LAYOUT.title_box
        content_box = layout.content_box or DEFAULT_LAYOUT.content_box
        logger.debug(f"Slide '{slide.title}' ({slide.type}) uses layout '{layout.name}'")

        images = ()
        match = find_image(slide.image, self.template.images)
        if match:
            image = self._image_directive(*match)
            images = (image,)
            content_box = self._beside_image(content_box, image.box)
        elif slide.image:
            logger.debug(f"No template image matches '{slide.image}'")

        if slide.type == "title":
            texts = self._title_slide_texts(slide, title_box, content_box)
        else:
            texts = self._content_slide_texts(slide, title_box, content_box)

        colors = self.template.colors
        background = colors.background if colors.background.lower() != WHITE else None
        notes = slide.notes if self.include_notes and slide.notes else None

        return SlidePlan(
            layout_name=layout.name,
            texts=texts,
            images=images,
            background=background,
            notes=notes,
        )

    def _title_slide_texts(self, slide, title_box, content_box):
        colors, fonts = self.template.colors, self.template.fonts
        texts = [
            TextDirective(
                box=title_box,
                paragraphs=(slide.title,),
                font_face=fonts.title,
                font_size=TITLE_SLIDE_TITLE_PT,
                color=colors.primary,
                bold=True,
                align="center",
                anchor="middle",
            )
        ]
        if slide.content:
            texts.append(
                TextDirective(
                    box=self._subtitle_box(title_box, content_box),
                    paragraphs=(" ".join(slide.content),),
                    font_face=fonts.body,
                    font_size=TITLE_SLIDE_SUBTITLE_PT,
                    color=colors.text,
                    align="center",
                )
            )
        return tuple(texts)

    def _content_slide_texts(self, slide, title_box, content_box):
        colors, fonts = self.template.colors, self.template.fonts
        texts = [
            TextDirective(
                box=title_box,
                paragraphs=(slide.title,),
                font_face=fonts.title,
                font_size=SLIDE_TITLE_PT,
                color=colors.primary,
                bold=True,
            )
        ]
        if slide.content:
            if slide.type == "bullets":
                paragraphs = tuple(slide.content)
            else:
                # blank paragraph between entries
                paragraphs = tuple("\n\n".join(slide.content).split("\n"))
            texts.append(
                TextDirective(
                    box=content_box,
                    paragraphs=paragraphs,
                    font_face=fonts.body,
                    font_size=BODY_PT,
                    color=colors.text,
                    bullets=slide.type == "bullets",
                )
            )
        return tuple(texts)

    def _subtitle_box(self, title_box, content_box):
        """Below the title, spanning the content column."""
        y = title_box.y + title_box.height + SUBTITLE_GAP
        y = max(0.0, min(y, self.canvas.height - SUBTITLE_HEIGHT))
        return Box(content_box.x, y, content_box.width, SUBTITLE_HEIGHT).clamped(self.canvas)

    def _image_directive(self, name, data):
        x = max(0.0, self.canvas.width - IMAGE_SIZE - IMAGE_MARGIN)
        box = Box(x, IMAGE_TOP, IMAGE_SIZE, IMAGE_SIZE).clamped(self.canvas)
        return ImageDirective(name=name, data=data, box=box)

    def _beside_image(self, content_box, image_box):
        available = image_box.x - IMAGE_GAP - content_box.x
        if available <= 0 or available >= content_box.width:
            return content_box
        return Box(content_box.x, content_box.y, available, content_box.height)
