"""Template analysis: recover colors, fonts, placeholder geometry and images
from an uploaded .pptx/.potx archive.

Analysis is best-effort. Every field falls back to ``DEFAULT_TEMPLATE`` when
it cannot be read, and an unreadable archive yields the default template
instead of an error.
"""

import base64
import io
import logging
import re
import zipfile
import zlib

from lxml import etree

from .config import Settings
from .errors import ExtractionMiss, TemplateAnalysisFailure
from .models import (
    DEFAULT_CONTENT_BOX,
    DEFAULT_TEMPLATE,
    DEFAULT_TITLE_BOX,
    EMU_PER_INCH,
    Box,
    CanvasSize,
    ColorScheme,
    FontScheme,
    LayoutGeometry,
    TemplateModel,
)

logger = logging.getLogger(__name__)

NS = {
    "a": "http://schemas.openxmlformats.org/drawingml/2006/main",
    "p": "http://schemas.openxmlformats.org/presentationml/2006/main",
}

THEME_PATH = "ppt/theme/theme1.xml"
MASTER_PATH = "ppt/slideMasters/slideMaster1.xml"
PRESENTATION_PATH = "ppt/presentation.xml"
LAYOUTS_PREFIX = "ppt/slideLayouts/"
MEDIA_PREFIX = "ppt/media/"

IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".gif")
MASTER_LAYOUT_NAME = "Master Layout"
DEFAULT_LAYOUT_NAME = "Content Layout"

# theme scheme element -> ColorScheme role
COLOR_ROLES = (
    ("dk1", "text"),
    ("lt1", "background"),
    ("accent1", "primary"),
    ("accent2", "secondary"),
)
FONT_ROLES = (
    ("majorFont", "title"),
    ("minorFont", "body"),
)

TITLE_PLACEHOLDERS = ("title", "ctrTitle")
CONTENT_PLACEHOLDERS = ("body", "obj")

_HEX_COLOR = re.compile(r"^[0-9A-Fa-f]{6}$")
_PARSER = etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=False)


def _parse(xml):
    if isinstance(xml, str):
        xml = xml.encode("utf-8")
    return etree.fromstring(xml, parser=_PARSER)


def _or_default(result, default):
    if isinstance(result, ExtractionMiss):
        logger.debug(f"Template field {result.field} not recovered: {result.reason}")
        return default
    return result


# -- theme ------------------------------------------------------------------

def _color_token(scheme, element_name):
    """Read one scheme color as ``#rrggbb`` or return an ExtractionMiss."""
    if scheme is None:
        return ExtractionMiss(element_name, "no color scheme")
    node = scheme.find(f"a:{element_name}", NS)
    if node is None:
        return ExtractionMiss(element_name, "element missing")

    srgb = node.find("a:srgbClr", NS)
    sys_clr = node.find("a:sysClr", NS)
    if srgb is not None:
        value = srgb.get("val", "")
    elif sys_clr is not None:
        # System colors carry their resolved value in lastClr
        value = sys_clr.get("lastClr", "")
    else:
        return ExtractionMiss(element_name, "no srgbClr/sysClr child")

    if not _HEX_COLOR.match(value):
        return ExtractionMiss(element_name, f"not a hex color: {value!r}")
    return f"#{value.lower()}"


def _font_token(font_scheme, element_name):
    if font_scheme is None:
        return ExtractionMiss(element_name, "no font scheme")
    latin = font_scheme.find(f"a:{element_name}/a:latin", NS)
    if latin is None:
        return ExtractionMiss(element_name, "no latin font")
    typeface = (latin.get("typeface") or "").strip()
    if not typeface:
        return ExtractionMiss(element_name, "empty typeface")
    return typeface


def extract_theme_colors(theme_xml, defaults=DEFAULT_TEMPLATE.colors):
    """Map dk1/lt1/accent1/accent2 onto text/background/primary/secondary."""
    try:
        root = _parse(theme_xml)
    except (etree.XMLSyntaxError, ValueError) as e:
        logger.debug(f"Theme XML unreadable: {e}")
        return defaults

    scheme = root.find(".//a:clrScheme", NS)
    values = {}
    for element_name, role in COLOR_ROLES:
        values[role] = _or_default(_color_token(scheme, element_name), getattr(defaults, role))
    return ColorScheme(accent=defaults.accent, **values)


def extract_theme_fonts(theme_xml, defaults=DEFAULT_TEMPLATE.fonts):
    """Major font becomes the title face, minor font the body face."""
    try:
        root = _parse(theme_xml)
    except (etree.XMLSyntaxError, ValueError) as e:
        logger.debug(f"Theme XML unreadable: {e}")
        return defaults

    font_scheme = root.find(".//a:fontScheme", NS)
    values = {}
    for element_name, role in FONT_ROLES:
        values[role] = _or_default(_font_token(font_scheme, element_name), getattr(defaults, role))
    return FontScheme(**values)


# -- layouts ----------------------------------------------------------------

def _placeholder_type(shape):
    """Return the placeholder type of a shape, or None if it is not one.

    A ``p:ph`` without a type attribute is an object placeholder.
    """
    ph = shape.find("p:nvSpPr/p:nvPr/p:ph", NS)
    if ph is None:
        return None
    return ph.get("type", "obj")


def _shape_box(shape, canvas):
    xfrm = shape.find("p:spPr/a:xfrm", NS)
    if xfrm is None:
        return ExtractionMiss("xfrm", "shape inherits its position")
    off = xfrm.find("a:off", NS)
    ext = xfrm.find("a:ext", NS)
    if off is None or ext is None:
        return ExtractionMiss("xfrm", "offset or extent missing")
    try:
        x, y = int(off.get("x")), int(off.get("y"))
        cx, cy = int(ext.get("cx")), int(ext.get("cy"))
    except (TypeError, ValueError) as e:
        return ExtractionMiss("xfrm", f"bad coordinates: {e}")
    if cx < 0 or cy < 0:
        return ExtractionMiss("xfrm", "negative extent")
    return Box.from_emu(x, y, cx, cy, canvas)


def extract_master_layout(master_xml, canvas=DEFAULT_TEMPLATE.canvas):
    """Title and body placeholder boxes of the slide master.

    Returns None when the XML cannot be parsed.
    """
    try:
        root = _parse(master_xml)
    except (etree.XMLSyntaxError, ValueError) as e:
        logger.debug(f"Slide master unreadable: {e}")
        return None

    title_box = None
    content_box = None
    for shape in root.iter(f"{{{NS['p']}}}sp"):
        ph_type = _placeholder_type(shape)
        if ph_type == "title" and title_box is None:
            title_box = _shape_box(shape, canvas) or None
        elif ph_type == "body" and content_box is None:
            content_box = _shape_box(shape, canvas) or None

    return LayoutGeometry(
        name=MASTER_LAYOUT_NAME,
        title_box=title_box or DEFAULT_TITLE_BOX.clamped(canvas),
        content_box=content_box or DEFAULT_CONTENT_BOX.clamped(canvas),
    )


def _layout_name(root):
    c_sld = root.find("p:cSld", NS)
    for node in (root, c_sld):
        if node is not None and node.get("name"):
            return node.get("name")
    return DEFAULT_LAYOUT_NAME


def extract_layout_geometry(layout_xml, canvas=DEFAULT_TEMPLATE.canvas):
    """Title and content boxes of one slide layout.

    Title role: ``title``/``ctrTitle`` placeholders. Content role: ``body``/``obj``
    placeholders, or any placeholder met before a title was found. Only the first
    box per role is kept. Returns None when the XML cannot be parsed.
    """
    try:
        root = _parse(layout_xml)
    except (etree.XMLSyntaxError, ValueError) as e:
        logger.debug(f"Slide layout unreadable: {e}")
        return None

    title_box = None
    content_box = None
    for shape in root.iter(f"{{{NS['p']}}}sp"):
        ph_type = _placeholder_type(shape)
        if ph_type is None:
            continue
        box = _shape_box(shape, canvas)
        if not box:
            continue

        if ph_type in TITLE_PLACEHOLDERS:
            if title_box is None:
                title_box = box
        elif ph_type in CONTENT_PLACEHOLDERS or title_box is None:
            if content_box is None:
                content_box = box

    return LayoutGeometry(
        name=_layout_name(root),
        title_box=title_box or DEFAULT_TITLE_BOX.clamped(canvas),
        content_box=content_box or DEFAULT_CONTENT_BOX.clamped(canvas),
    )


def extract_canvas_size(presentation_xml, default=DEFAULT_TEMPLATE.canvas):
    """Slide size from ``p:sldSz`` in presentation.xml, in inches."""
    try:
        root = _parse(presentation_xml)
    except (etree.XMLSyntaxError, ValueError) as e:
        logger.debug(f"presentation.xml unreadable: {e}")
        return default

    size = root.find("p:sldSz", NS)
    if size is None:
        return default
    try:
        cx = int(size.get("cx"))
        cy = int(size.get("cy"))
    except (TypeError, ValueError):
        return default
    if cx <= 0 or cy <= 0:
        return default
    return CanvasSize(width=cx / EMU_PER_INCH, height=cy / EMU_PER_INCH)


# -- media ------------------------------------------------------------------

def extract_media(archive, max_files=5, accept_svg=False):
    """Base64 payloads of the first ``max_files`` images under ppt/media/.

    Keys are bare filenames; a later entry with the same name replaces an
    earlier one.
    """
    extensions = IMAGE_EXTENSIONS + ((".svg",) if accept_svg else ())
    names = [
        name for name in archive.namelist()
        if name.startswith(MEDIA_PREFIX) and name.lower().endswith(extensions)
    ]

    images = {}
    for name in names[:max_files]:
        try:
            payload = archive.read(name)
        except (zipfile.BadZipFile, zlib.error, OSError, RuntimeError, NotImplementedError) as e:
            logger.debug(f"Skipping unreadable media entry {name}: {e}")
            continue
        images[name.rsplit("/", 1)[-1]] = base64.b64encode(payload).decode("ascii")
    return images


# -- builder ----------------------------------------------------------------

class TemplateAnalyzer:
    """Builds a TemplateModel from the raw bytes of a template archive."""

    def __init__(self, settings=None):
        self.settings = settings or Settings()

    def analyze(self, archive_bytes):
        if not archive_bytes:
            logger.info("No template supplied, using default template model")
            return DEFAULT_TEMPLATE

        try:
            model = self._analyze_archive(archive_bytes)
        except TemplateAnalysisFailure as e:
            logger.debug(f"Template analysis failed, using defaults: {e}")
            return DEFAULT_TEMPLATE

        logger.info(
            f"Template analyzed: {len(model.layouts)} layouts, {len(model.images)} images, "
            f"canvas {model.canvas.width:.2f}x{model.canvas.height:.2f}in"
        )
        return model

    def _open(self, archive_bytes):
        try:
            return zipfile.ZipFile(io.BytesIO(archive_bytes))
        except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError, ValueError) as e:
            raise TemplateAnalysisFailure(f"cannot open template archive: {e}") from e

    def _analyze_archive(self, archive_bytes):
        with self._open(archive_bytes) as archive:
            entries = set(archive.namelist())

            def read(name):
                if name not in entries:
                    return ExtractionMiss(name, "entry missing")
                try:
                    return archive.read(name)
                except (zipfile.BadZipFile, zlib.error, OSError, RuntimeError, NotImplementedError) as e:
                    return ExtractionMiss(name, f"unreadable: {e}")

            canvas = DEFAULT_TEMPLATE.canvas
            presentation_xml = read(PRESENTATION_PATH)
            if presentation_xml:
                canvas = extract_canvas_size(presentation_xml)

            colors = DEFAULT_TEMPLATE.colors
            fonts = DEFAULT_TEMPLATE.fonts
            theme_xml = read(THEME_PATH)
            if theme_xml:
                colors = extract_theme_colors(theme_xml)
                fonts = extract_theme_fonts(theme_xml)
            else:
                logger.debug("Template has no theme entry, keeping default colors and fonts")

            layouts = []
            master_xml = read(MASTER_PATH)
            if master_xml:
                master = extract_master_layout(master_xml, canvas)
                if master is not None:
                    layouts.append(master)

            layout_names = [
                name for name in archive.namelist()
                if name.startswith(LAYOUTS_PREFIX) and name.endswith(".xml")
            ]
            for name in layout_names[: self.settings.max_layout_files]:
                layout_xml = read(name)
                if not layout_xml:
                    continue
                layout = extract_layout_geometry(layout_xml, canvas)
                if layout is not None:
                    layouts.append(layout)

            images = extract_media(
                archive,
                max_files=self.settings.max_media_files,
                accept_svg=self.settings.accept_svg_media,
            )

        return TemplateModel(
            colors=colors,
            fonts=fonts,
            layouts=tuple(layouts),
            images=images,
            canvas=canvas,
        )


def analyze_template(archive_bytes, settings=None):
    """Template model for ``archive_bytes``; defaults when None or unreadable."""
    return TemplateAnalyzer(settings).analyze(archive_bytes)
