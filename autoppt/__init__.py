"""Generate PowerPoint decks from free-form text, styled after an uploaded template."""

from .errors import (
    DeckEmissionFailure,
    GenerationError,
    InvalidRequest,
    MalformedOutline,
    ProviderAuthFailure,
    ProviderError,
    ProviderQuotaExceeded,
    ProviderTimeout,
)
from .generator import GeneratedDeck, GenerationRequest, PresentationGenerator
from .models import DEFAULT_TEMPLATE, TemplateModel
from .outline import SlideOutline, normalize_outline
from .placement import PlacementEngine, derive_filename, select_layout
from .template import analyze_template

__all__ = [
    "DEFAULT_TEMPLATE",
    "DeckEmissionFailure",
    "GeneratedDeck",
    "GenerationError",
    "GenerationRequest",
    "InvalidRequest",
    "MalformedOutline",
    "PlacementEngine",
    "PresentationGenerator",
    "ProviderAuthFailure",
    "ProviderError",
    "ProviderQuotaExceeded",
    "ProviderTimeout",
    "SlideOutline",
    "TemplateModel",
    "analyze_template",
    "derive_filename",
    "normalize_outline",
    "select_layout",
]
