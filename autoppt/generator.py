"""End-to-end generation: template + text in, .pptx bytes out."""

import logging
from dataclasses import dataclass
from typing import Optional

from .config import Settings
from .deck import DeckEmitter
from .errors import InvalidRequest
from .llm import PROVIDERS, LLMOrchestrator
from .outline import normalize_outline
from .placement import PlacementEngine
from .template import TemplateAnalyzer

logger = logging.getLogger(__name__)

PPTX_MIMETYPE = "application/vnd.openxmlformats-officedocument.presentationml.presentation"
TEMPLATE_EXTENSIONS = (".pptx", ".potx")


@dataclass(frozen=True)
class GenerationRequest:
    text: str
    provider: str
    api_key: str
    guidance: str = ""
    include_notes: bool = False
    template_bytes: Optional[bytes] = None

    def validate(self):
        if not self.text or not self.text.strip():
            raise InvalidRequest("Text content is required")
        if self.provider not in PROVIDERS:
            allowed = ", ".join(PROVIDERS)
            raise InvalidRequest(f"Valid provider ({allowed}) is required")
        if not self.api_key:
            raise InvalidRequest("API key is required")


@dataclass(frozen=True)
class GeneratedDeck:
    filename: str
    content: bytes
    slide_count: int
    mimetype: str = PPTX_MIMETYPE


class PresentationGenerator:
    """Runs one request through analysis, outline, placement and emission.

    Holds no per-request state, so one instance can serve concurrent requests.
    """

    def __init__(self, settings=None, emitter=None):
        self.settings = settings or Settings()
        self.analyzer = TemplateAnalyzer(self.settings)
        self.emitter = emitter or DeckEmitter()

    def generate(self, request):
        request.validate()
        logger.info(
            f"Generating presentation with {request.provider} provider, "
            f"notes: {request.include_notes}, template: {bool(request.template_bytes)}"
        )

        template = self.analyzer.analyze(request.template_bytes)

        orchestrator = LLMOrchestrator(request.provider, request.api_key, self.settings)
        raw_outline = orchestrator.generate_outline(
            request.text,
            guidance=request.guidance,
            template=template,
            include_notes=request.include_notes,
        )
        outline = normalize_outline(raw_outline)

        plan = PlacementEngine(template, include_notes=request.include_notes).plan(outline)
        content = self.emitter.render(plan)

        logger.info(f"Presentation generated successfully: {plan.filename}")
        return GeneratedDeck(filename=plan.filename, content=content, slide_count=len(plan.slides))
