import io
import logging
from datetime import datetime

from flask import Flask, jsonify, request, send_file
from flask_cors import CORS
from werkzeug.exceptions import RequestEntityTooLarge

from autoppt.config import Settings
from autoppt.errors import GenerationError, InvalidRequest
from autoppt.generator import TEMPLATE_EXTENSIONS, GenerationRequest, PresentationGenerator
from autoppt.llm import PROVIDERS
from autoppt.template import analyze_template

settings = Settings.from_env()

app = Flask(__name__)
app.config["MAX_CONTENT_LENGTH"] = settings.max_template_mb * 1024 * 1024
CORS(app)

# Configure logging
logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO))
logger = logging.getLogger(__name__)

generator = PresentationGenerator(settings)


def _read_template_upload():
    """Bytes of the uploaded template, or None when no file was sent."""
    template_file = request.files.get("template")
    if not template_file or not template_file.filename:
        return None
    if not template_file.filename.lower().endswith(TEMPLATE_EXTENSIONS):
        raise InvalidRequest("Template must be a .pptx or .potx file")
    data = template_file.read()
    logger.info(f"Template uploaded: {template_file.filename} ({len(data)} bytes)")
    return data


def _parse_generation_request():
    if request.content_type and "multipart/form-data" in request.content_type:
        # Form data with potential file upload
        form = request.form
        return GenerationRequest(
            text=form.get("text", "").strip(),
            provider=form.get("provider", "").strip().lower(),
            api_key=form.get("api_key", "").strip(),
            guidance=form.get("guidance", "").strip(),
            include_notes=form.get("include_notes", "false").lower() == "true",
            template_bytes=_read_template_upload(),
        )

    data = request.get_json(silent=True)
    if not data or not isinstance(data, dict):
        raise InvalidRequest("No data provided")
    return GenerationRequest(
        text=str(data.get("text") or "").strip(),
        provider=str(data.get("provider") or "").strip().lower(),
        api_key=str(data.get("api_key") or "").strip(),
        guidance=str(data.get("guidance") or "").strip(),
        include_notes=bool(data.get("include_notes", False)),
    )


@app.errorhandler(GenerationError)
def handle_generation_error(error):
    return jsonify({"error": error.message}), error.status_code


@app.errorhandler(RequestEntityTooLarge)
def handle_too_large(error):
    return jsonify({"error": f"Template exceeds the {settings.max_template_mb}MB upload limit"}), 413


@app.route("/health", methods=["GET"])
def health_check():
    return jsonify({"status": "healthy", "timestamp": datetime.now().isoformat()})


@app.route("/providers", methods=["GET"])
def get_providers():
    """Return list of supported LLM providers"""
    return jsonify({
        "providers": [{"id": provider_id, **info} for provider_id, info in PROVIDERS.items()]
    })


@app.route("/generate", methods=["POST"])
def generate_presentation():
    generation_request = _parse_generation_request()
    try:
        deck = generator.generate(generation_request)
    except GenerationError:
        raise
    except Exception as e:
        logger.exception(f"Error generating presentation: {e}")
        return jsonify({"error": "Internal server error occurred"}), 500

    return send_file(
        io.BytesIO(deck.content),
        as_attachment=True,
        download_name=deck.filename,
        mimetype=deck.mimetype,
    )


@app.route("/analyze-template", methods=["POST"])
def analyze_template_route():
    """Report what was recovered from a template: colors, fonts, layouts, images"""
    template_bytes = _read_template_upload()
    if template_bytes is None:
        raise InvalidRequest("No template file provided")

    model = analyze_template(template_bytes, settings)
    return jsonify({
        "template_name": request.files["template"].filename,
        "used_defaults": model.is_default,
        **model.to_dict(),
    })


if __name__ == "__main__":
    app.run(debug=True, host="0.0.0.0", port=settings.port)
