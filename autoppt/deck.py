"""Serialize a DeckPlan into a .pptx file with python-pptx."""

import base64
import binascii
import io
import logging

from lxml import etree
from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.enum.text import MSO_ANCHOR, PP_ALIGN
from pptx.oxml.ns import qn
from pptx.util import Inches, Pt

from .errors import DeckEmissionFailure

logger = logging.getLogger(__name__)

BLANK_LAYOUT_INDEX = 6
BULLET_CHAR = "•"
BULLET_MARGIN_EMU = 342900
BULLET_INDENT_EMU = -228600

ALIGNMENTS = {
    "left": PP_ALIGN.LEFT,
    "center": PP_ALIGN.CENTER,
    "right": PP_ALIGN.RIGHT,
}
ANCHORS = {
    "top": MSO_ANCHOR.TOP,
    "middle": MSO_ANCHOR.MIDDLE,
    "bottom": MSO_ANCHOR.BOTTOM,
}


def _rgb(hex_color):
    return RGBColor.from_string(hex_color.lstrip("#").upper())


def _apply_bullet(paragraph):
    """Native bullet (a:buChar) on a paragraph, with a hanging indent."""
    pPr = paragraph._p.get_or_add_pPr()
    pPr.set("marL", str(BULLET_MARGIN_EMU))
    pPr.set("indent", str(BULLET_INDENT_EMU))
    bu_font = etree.SubElement(pPr, qn("a:buFont"))
    bu_font.set("typeface", "Arial")
    bu_char = etree.SubElement(pPr, qn("a:buChar"))
    bu_char.set("char", BULLET_CHAR)


class DeckEmitter:
    """Draws planned slides onto blank slides of a fresh presentation."""

    def render(self, plan):
        """Return the .pptx bytes for ``plan``; raises DeckEmissionFailure."""
        try:
            presentation = Presentation()
            presentation.slide_width = Inches(plan.canvas_width)
            presentation.slide_height = Inches(plan.canvas_height)
            presentation.core_properties.title = plan.title
            blank_layout = presentation.slide_layouts[BLANK_LAYOUT_INDEX]

            for index, slide_plan in enumerate(plan.slides):
                slide = presentation.slides.add_slide(blank_layout)
                self._draw_slide(slide, slide_plan)
                logger.debug(f"Rendered slide {index + 1} with layout '{slide_plan.layout_name}'")

            buffer = io.BytesIO()
            presentation.save(buffer)
        except DeckEmissionFailure:
            raise
        except Exception as e:
            logger.error(f"Deck emission failed: {e}")
            raise DeckEmissionFailure("Failed to build the presentation file", cause=e) from e

        logger.info(f"Rendered {len(plan.slides)} slides into {plan.filename}")
        return buffer.getvalue()

    def _draw_slide(self, slide, slide_plan):
        if slide_plan.background:
            fill = slide.background.fill
            fill.solid()
            fill.fore_color.rgb = _rgb(slide_plan.background)

        for text in slide_plan.texts:
            self._add_text(slide, text)

        for image in slide_plan.images:
            self._add_image(slide, image)

        if slide_plan.notes:
            slide.notes_slide.notes_text_frame.text = slide_plan.notes

    def _add_text(self, slide, directive):
        box = directive.box
        shape = slide.shapes.add_textbox(
            Inches(box.x), Inches(box.y), Inches(box.width), Inches(box.height)
        )
        text_frame = shape.text_frame
        text_frame.word_wrap = True
        text_frame.vertical_anchor = ANCHORS[directive.anchor]

        for i, text in enumerate(directive.paragraphs):
            paragraph = text_frame.paragraphs[0] if i == 0 else text_frame.add_paragraph()
            paragraph.text = text
            paragraph.alignment = ALIGNMENTS[directive.align]
            if directive.bullets:
                _apply_bullet(paragraph)
            for run in paragraph.runs:
                font = run.font
                font.name = directive.font_face
                font.size = Pt(directive.font_size)
                font.bold = directive.bold
                font.color.rgb = _rgb(directive.color)

    def _add_image(self, slide, directive):
        try:
            payload = base64.b64decode(directive.data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise DeckEmissionFailure(f"Template image {directive.name} is not valid base64", cause=e) from e
        box = directive.box
        slide.shapes.add_picture(
            io.BytesIO(payload), Inches(box.x), Inches(box.y), Inches(box.width), Inches(box.height)
        )
