import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


def _env_int(name, default):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring non-integer {name}={raw!r}, using {default}")
        return default


def _env_bool(name, default=False):
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """Runtime settings, read once from the environment (``.env`` supported)."""

    llm_timeout_seconds: int = 180
    max_layout_files: int = 3
    max_media_files: int = 5
    accept_svg_media: bool = False
    max_template_mb: int = 50
    prompt_char_limit: int = 4000
    openai_model: str = "gpt-4o-mini"
    anthropic_model: str = "claude-3-5-haiku-latest"
    groq_model: str = "llama-3.1-8b-instant"
    gemini_model: str = "gemini-2.0-flash"
    log_level: str = "INFO"
    port: int = 5000

    @classmethod
    def from_env(cls):
        load_dotenv()
        defaults = cls()
        return cls(
            llm_timeout_seconds=_env_int("LLM_TIMEOUT_SECONDS", defaults.llm_timeout_seconds),
            max_layout_files=_env_int("MAX_LAYOUT_FILES", defaults.max_layout_files),
            max_media_files=_env_int("MAX_MEDIA_FILES", defaults.max_media_files),
            accept_svg_media=_env_bool("ACCEPT_SVG_MEDIA", defaults.accept_svg_media),
            max_template_mb=_env_int("MAX_TEMPLATE_MB", defaults.max_template_mb),
            prompt_char_limit=_env_int("PROMPT_CHAR_LIMIT", defaults.prompt_char_limit),
            openai_model=os.getenv("OPENAI_MODEL", defaults.openai_model),
            anthropic_model=os.getenv("ANTHROPIC_MODEL", defaults.anthropic_model),
            groq_model=os.getenv("GROQ_MODEL", defaults.groq_model),
            gemini_model=os.getenv("GEMINI_MODEL", defaults.gemini_model),
            log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
            port=_env_int("PORT", defaults.port),
        )
