"""Exceptions raised while turning text and a template into a deck.

Everything the caller can see derives from ``GenerationError`` and carries a
message that is safe to show to a user plus the HTTP status to answer with.
"""


class GenerationError(Exception):
    """Base class for failures surfaced to the caller"""

    status_code = 500

    def __init__(self, message, cause=None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class InvalidRequest(GenerationError):
    """The request is missing input or names an unsupported option"""

    status_code = 400


class MalformedOutline(GenerationError):
    """The model response does not contain a usable slide outline"""

    status_code = 502

    def __init__(self, message, raw_response=""):
        super().__init__(message)
        # Kept for debugging only, never part of the user-facing message
        self.raw_response = raw_response


class ProviderError(GenerationError):
    """The LLM provider call failed for a reason we cannot classify"""

    status_code = 502

    def __init__(self, message, provider=None, cause=None):
        super().__init__(message, cause=cause)
        self.provider = provider


class ProviderAuthFailure(ProviderError):
    status_code = 401


class ProviderQuotaExceeded(ProviderError):
    status_code = 429


class ProviderTimeout(ProviderError):
    status_code = 504


class DeckEmissionFailure(GenerationError):
    """python-pptx rejected a placement directive"""

    status_code = 500


class TemplateAnalysisFailure(Exception):
    """The template archive could not be opened.

    Never reaches the caller: the template analyzer catches it and falls back
    to the default template model.
    """


class ExtractionMiss:
    """Result value for a template field that could not be recovered.

    Returned, not raised: the template analyzer swaps it for the default
    value of that field.
    """

    __slots__ = ("field", "reason")

    def __init__(self, field, reason):
        self.field = field
        self.reason = reason

    def __bool__(self):
        return False

    def __repr__(self):
        return f"ExtractionMiss({self.field!r}, {self.reason!r})"
