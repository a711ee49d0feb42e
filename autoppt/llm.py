import logging

import anthropic
import groq
import openai
from google import genai
from google.genai import types as genai_types
from groq import Groq

from .config import Settings
from .errors import (
    InvalidRequest,
    ProviderAuthFailure,
    ProviderError,
    ProviderQuotaExceeded,
    ProviderTimeout,
)

logger = logging.getLogger(__name__)

PROVIDERS = {
    "openai": {"name": "OpenAI (GPT-4o mini)", "description": "OpenAI's ChatGPT models"},
    "anthropic": {"name": "Anthropic (Claude)", "description": "Anthropic's Claude models"},
    "groq": {"name": "Groq (Llama 3.1)", "description": "Groq's fast inference platform"},
    "gemini": {"name": "Google Gemini", "description": "Google's Gemini models"},
}

TIMEOUT_ERRORS = (openai.APITimeoutError, anthropic.APITimeoutError, groq.APITimeoutError, TimeoutError)
AUTH_ERRORS = (
    openai.AuthenticationError,
    openai.PermissionDeniedError,
    anthropic.AuthenticationError,
    anthropic.PermissionDeniedError,
    groq.AuthenticationError,
    groq.PermissionDeniedError,
)
QUOTA_ERRORS = (openai.RateLimitError, anthropic.RateLimitError, groq.RateLimitError)

AUTH_PATTERNS = ("api key", "api_key", "apikey", "authentication", "unauthorized", "401", "permission denied")
QUOTA_PATTERNS = ("quota", "rate limit", "rate_limit", "429", "resource exhausted", "resource_exhausted")
TIMEOUT_PATTERNS = ("timed out", "timeout", "deadline exceeded")


def classify_provider_error(provider, error):
    """Map an SDK exception to one of the caller-facing provider errors."""
    message = str(error).lower()
    label = PROVIDERS.get(provider, {}).get("name", provider)

    if isinstance(error, TIMEOUT_ERRORS) or any(p in message for p in TIMEOUT_PATTERNS):
        return ProviderTimeout(
            f"The {label} request timed out. Please try again with shorter text.",
            provider=provider, cause=error,
        )
    if isinstance(error, AUTH_ERRORS) or any(p in message for p in AUTH_PATTERNS):
        return ProviderAuthFailure(
            f"Invalid {label} API key. Please check the key and try again.",
            provider=provider, cause=error,
        )
    if isinstance(error, QUOTA_ERRORS) or any(p in message for p in QUOTA_PATTERNS):
        return ProviderQuotaExceeded(
            f"{label} API quota exceeded. Please check your plan or try again later.",
            provider=provider, cause=error,
        )
    return ProviderError(f"Generation failed with {label}.", provider=provider, cause=error)


def build_prompt(text, guidance="", template=None, include_notes=False, char_limit=4000):
    """Prompt asking for the outline JSON, aware of the template's layouts and images."""
    excerpt = text[:char_limit] + ("..." if len(text) > char_limit else "")

    notes_instruction = (
        "Also write speaker notes for each slide with explanations, examples and talking points."
        if include_notes else ""
    )
    notes_field = ', "notes": "Speaker notes for this slide"' if include_notes else ""

    template_info = ""
    if template is not None and not template.is_default:
        layout_names = ", ".join(layout.name for layout in template.layouts) or "none"
        image_names = ", ".join(template.images) or "none"
        template_info = f"""
        Template layouts: {layout_names}
        Template images: {image_names}
        To show a template image on a slide, add "image": "<file name>" to that slide.
        """

    return f"""
        Convert the following text into a PowerPoint presentation outline.
        Slide titles should not contain slide numbers.
        {notes_instruction}

        Guidelines: {guidance if guidance else "Create a professional presentation with clear structure"}
        {template_info}
        Text to convert:
        {excerpt}

        Return ONLY a JSON object in this format:
        {{
            "title": "Presentation Title",
            "slides": [
                {{"title": "Slide Title", "content": ["Point 1", "Point 2"], "type": "title|content|bullets"{notes_field}}}
            ]
        }}

        Rules:
        - Create 6-12 slides based on the content
        - The first slide type must be "title"
        - Use "bullets" for lists and "content" for paragraphs
        - Keep content concise and clear
        """


class LLMOrchestrator:
    def __init__(self, provider, api_key, settings=None):
        self.provider = (provider or "").strip().lower()
        self.api_key = api_key
        self.settings = settings or Settings()
        if self.provider not in PROVIDERS:
            raise InvalidRequest(f"Unsupported provider: {provider}")

    def generate_outline(self, text, guidance="", template=None, include_notes=False):
        """Ask the provider for a slide outline and return its raw text answer."""
        prompt = build_prompt(
            text,
            guidance=guidance,
            template=template,
            include_notes=include_notes,
            char_limit=self.settings.prompt_char_limit,
        )
        logger.info(f"Requesting outline from {self.provider} (timeout {self.settings.llm_timeout_seconds}s)")
        try:
            content = self.complete(prompt)
        except Exception as e:
            error = classify_provider_error(self.provider, e)
            logger.error(f"LLM generation error ({type(error).__name__}): {e}")
            raise error from e

        logger.debug(f"Raw {self.provider} response: {content!r}")
        return content or ""

    def complete(self, prompt):
        """Send one prompt to the configured provider; no retries."""
        timeout = self.settings.llm_timeout_seconds

        if self.provider == "openai":
            client = openai.OpenAI(api_key=self.api_key, timeout=timeout, max_retries=0)
            response = client.chat.completions.create(
                model=self.settings.openai_model,
                messages=[{"role": "user", "content": prompt}],
                temperature=0.7,
                max_tokens=2000,
            )
            return response.choices[0].message.content

        elif self.provider == "anthropic":
            client = anthropic.Anthropic(api_key=self.api_key, timeout=timeout, max_retries=0)
            response = client.messages.create(
                model=self.settings.anthropic_model,
                max_tokens=2000,
                messages=[{"role": "user", "content": prompt}],
            )
            return response.content[0].text

        elif self.provider == "groq":
            client = Groq(api_key=self.api_key, timeout=timeout, max_retries=0)
            response = client.chat.completions.create(
                model=self.settings.groq_model,
                messages=[{"role": "user", "content": prompt}],
                temperature=0.7,
            )
            return response.choices[0].message.content

        elif self.provider == "gemini":
            client = genai.Client(
                api_key=self.api_key,
                http_options=genai_types.HttpOptions(timeout=timeout * 1000),
            )
            response = client.models.generate_content(model=self.settings.gemini_model, contents=prompt)
            return response.text

        raise InvalidRequest(f"Unsupported provider: {self.provider}")
