"""Value types describing a template and the geometry recovered from it."""

from dataclasses import asdict, dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

EMU_PER_INCH = 914400


@dataclass(frozen=True)
class Box:
    """A rectangle on the slide, in inches."""

    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_emu(cls, x, y, cx, cy, canvas):
        """Convert EMU offset/extent to inches, keeping the box on the canvas."""
        return cls(
            x=max(0.0, x / EMU_PER_INCH),
            y=max(0.0, y / EMU_PER_INCH),
            width=min(canvas.width, cx / EMU_PER_INCH),
            height=min(canvas.height, cy / EMU_PER_INCH),
        )

    def clamped(self, canvas):
        return Box(
            x=max(0.0, self.x),
            y=max(0.0, self.y),
            width=min(canvas.width, self.width),
            height=min(canvas.height, self.height),
        )

    def to_dict(self):
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(frozen=True)
class CanvasSize:
    width: float = 10.0
    height: float = 7.5


@dataclass(frozen=True)
class ColorScheme:
    primary: str = "#2563eb"
    secondary: str = "#7c3aed"
    accent: str = "#059669"
    text: str = "#374151"
    background: str = "#ffffff"


@dataclass(frozen=True)
class FontScheme:
    title: str = "Calibri"
    body: str = "Calibri"


@dataclass(frozen=True)
class LayoutGeometry:
    name: str
    title_box: Optional[Box] = None
    content_box: Optional[Box] = None

    def to_dict(self):
        return {
            "name": self.name,
            "title_box": self.title_box.to_dict() if self.title_box else None,
            "content_box": self.content_box.to_dict() if self.content_box else None,
        }


def _frozen_images(images=None):
    return MappingProxyType(dict(images or {}))


@dataclass(frozen=True)
class TemplateModel:
    """Everything the placement engine needs to know about a template.

    Built once per request and never mutated. ``images`` maps a bare media
    filename to its base64 payload, in archive enumeration order.
    """

    colors: ColorScheme = field(default_factory=ColorScheme)
    fonts: FontScheme = field(default_factory=FontScheme)
    layouts: Tuple[LayoutGeometry, ...] = ()
    images: Mapping[str, str] = field(default_factory=_frozen_images)
    canvas: CanvasSize = field(default_factory=CanvasSize)

    def __post_init__(self):
        object.__setattr__(self, "layouts", tuple(self.layouts))
        if not isinstance(self.images, MappingProxyType):
            object.__setattr__(self, "images", _frozen_images(self.images))

    @property
    def is_default(self):
        return self == DEFAULT_TEMPLATE

    def to_dict(self):
        """JSON-friendly summary; image payloads are reported by size only."""
        return {
            "colors": asdict(self.colors),
            "fonts": asdict(self.fonts),
            "layouts": [layout.to_dict() for layout in self.layouts],
            "images": [
                {"name": name, "base64_length": len(data)} for name, data in self.images.items()
            ],
            "slide_size": {"width": self.canvas.width, "height": self.canvas.height},
        }


DEFAULT_TITLE_BOX = Box(0.5, 0.5, 9.0, 1.2)
DEFAULT_CONTENT_BOX = Box(0.5, 2.0, 9.0, 4.5)
DEFAULT_LAYOUT = LayoutGeometry("Default", DEFAULT_TITLE_BOX, DEFAULT_CONTENT_BOX)
DEFAULT_TEMPLATE = TemplateModel()
