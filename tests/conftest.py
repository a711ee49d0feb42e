from __future__ import annotations

import io
import zipfile
from typing import Dict, Iterable, Optional

import pytest

A_NS = "http://schemas.openxmlformats.org/drawingml/2006/main"
P_NS = "http://schemas.openxmlformats.org/presentationml/2006/main"
EMU = 914400

# 1x1 transparent PNG
PNG_BASE64 = (
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


def emu(inches: float) -> int:
    return int(round(inches * EMU))


def shape_xml(
    ph_type: Optional[str] = "body",
    box: Optional[Iterable[float]] = (0.5, 2.0, 9.0, 4.5),
    placeholder: bool = True,
    name: str = "Shape",
) -> str:
    if not placeholder:
        ph = ""
    elif ph_type is None:
        ph = '<p:ph idx="1"/>'
    else:
        ph = f'<p:ph type="{ph_type}"/>'
    xfrm = ""
    if box is not None:
        x, y, w, h = box
        xfrm = (
            f'<a:xfrm><a:off x="{emu(x)}" y="{emu(y)}"/>'
            f'<a:ext cx="{emu(w)}" cy="{emu(h)}"/></a:xfrm>'
        )
    return (
        f'<p:sp><p:nvSpPr><p:cNvPr id="2" name="{name}"/><p:cNvSpPr/>'
        f"<p:nvPr>{ph}</p:nvPr></p:nvSpPr><p:spPr>{xfrm}</p:spPr></p:sp>"
    )


def layout_xml(name: Optional[str], shapes: Iterable[str]) -> str:
    name_attr = f' name="{name}"' if name is not None else ""
    return (
        f'<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        f'<p:sldLayout xmlns:a="{A_NS}" xmlns:p="{P_NS}">'
        f"<p:cSld{name_attr}><p:spTree>{''.join(shapes)}</p:spTree></p:cSld></p:sldLayout>"
    )


def master_xml(shapes: Iterable[str]) -> str:
    return (
        f'<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        f'<p:sldMaster xmlns:a="{A_NS}" xmlns:p="{P_NS}">'
        f"<p:cSld><p:spTree>{''.join(shapes)}</p:spTree></p:cSld></p:sldMaster>"
    )


def theme_xml(colors: Dict[str, str], major: Optional[str] = "Georgia", minor: Optional[str] = "Verdana") -> str:
    """``colors`` maps scheme element (dk1, accent1, ...) to an srgbClr value,
    or to ``sys:<hex>`` for a sysClr with that lastClr."""
    parts = []
    for element, value in colors.items():
        if value.startswith("sys:"):
            parts.append(f'<a:{element}><a:sysClr val="windowText" lastClr="{value[4:]}"/></a:{element}>')
        else:
            parts.append(f'<a:{element}><a:srgbClr val="{value}"/></a:{element}>')
    fonts = ""
    if major is not None or minor is not None:
        major_xml = f'<a:majorFont><a:latin typeface="{major}"/></a:majorFont>' if major else ""
        minor_xml = f'<a:minorFont><a:latin typeface="{minor}"/></a:minorFont>' if minor else ""
        fonts = f'<a:fontScheme name="Custom">{major_xml}{minor_xml}</a:fontScheme>'
    return (
        f'<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        f'<a:theme xmlns:a="{A_NS}" name="Custom"><a:themeElements>'
        f'<a:clrScheme name="Custom">{"".join(parts)}</a:clrScheme>{fonts}'
        f"</a:themeElements></a:theme>"
    )


def presentation_xml(width: float, height: float) -> str:
    return (
        f'<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        f'<p:presentation xmlns:p="{P_NS}"><p:sldSz cx="{emu(width)}" cy="{emu(height)}"/></p:presentation>'
    )


def build_archive(entries: Dict[str, object]) -> bytes:
    """Zip ``entries`` (name -> str/bytes) in insertion order."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        archive.writestr("[Content_Types].xml", "<Types/>")
        for name, data in entries.items():
            archive.writestr(name, data)
    return buffer.getvalue()


class OOXML:
    """Bundles the XML builders so tests can reach them through a fixture."""

    EMU = EMU
    PNG_BASE64 = PNG_BASE64
    emu = staticmethod(emu)
    shape = staticmethod(shape_xml)
    layout = staticmethod(layout_xml)
    master = staticmethod(master_xml)
    theme = staticmethod(theme_xml)
    presentation = staticmethod(presentation_xml)
    archive = staticmethod(build_archive)


@pytest.fixture
def ooxml() -> type:
    return OOXML


@pytest.fixture
def outline_json() -> str:
    return (
        '{"title": "Quarterly Review", "slides": ['
        '{"title": "Quarterly Review", "content": ["Q3 results"], "type": "title"},'
        '{"title": "Highlights", "content": ["Revenue up", "Costs down"], "type": "bullets",'
        ' "notes": "Mention the new region"},'
        '{"title": "Outlook", "content": ["Growth continues.", "Risks remain."], "type": "content"}'
        "]}"
    )
