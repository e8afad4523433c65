"""Quart application exposing pitch-deck extraction."""
import logging

import structlog
from quart import Quart, jsonify, request

from pitchdeck import config
from pitchdeck.errors import CapabilityError, DocumentError, LocatorParseError, PipelineTimeout
from pitchdeck.llm_client import GeminiClient
from pitchdeck.locator import resolve_locator
from pitchdeck.rag.pipeline import ExtractionPipeline

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
)
logging.basicConfig(level=config.LOG_LEVEL, format="%(message)s")

logger = structlog.get_logger()

MAX_TEXT_CHARS = 2_000_000


def create_app(
    gemini_client: GeminiClient = None,
    pipeline: ExtractionPipeline = None,
) -> Quart:
    """Build the app around one shared client and pipeline.

    Args:
        gemini_client: Capability client (built from config if not provided)
        pipeline: Extraction pipeline (built around gemini_client if not provided)
    """
    app = Quart(__name__)
    client = gemini_client or GeminiClient()
    extraction = pipeline or ExtractionPipeline(client, client)

    @app.route("/api/extract", methods=["POST"])
    async def extract():
        """Extract investment fields from a document's text.

        Expects JSON body:
        {
            "pdfUrl": "gs://bucket/decks/acme.pdf",
            "text": "raw text extracted from the PDF"
        }

        Returns the serialized PipelineResult.
        """
        data = await request.get_json(silent=True)
        if not data:
            return jsonify({"success": False, "error": "Missing JSON body"}), 400

        text = data.get("text")
        if not isinstance(text, str) or not text.strip():
            return jsonify({"success": False, "error": "Missing 'text' in request body"}), 400
        if len(text) > MAX_TEXT_CHARS:
            return jsonify({"success": False, "error": "Document text too long"}), 413

        try:
            locator = resolve_locator(data.get("pdfUrl", ""))
        except LocatorParseError as e:
            logger.warning("extract_bad_locator", error=str(e))
            return jsonify({"success": False, "error": str(e), "code": "invalid-argument"}), 400

        logger.info("extract_request_received", path=locator.path, text_length=len(text))

        try:
            result = await extraction.run(text, document_id=locator.path)
        except DocumentError as e:
            logger.warning("extract_document_rejected", error=str(e), path=locator.path)
            return jsonify({"success": False, "error": str(e), "code": "failed-precondition"}), 422
        except PipelineTimeout as e:
            return jsonify({"success": False, "error": str(e), "code": "deadline-exceeded"}), 504
        except Exception as e:
            logger.error("extract_endpoint_error", error=str(e), error_type=type(e).__name__)
            return jsonify({
                "success": False,
                "error": "Document processing failed. Please try again.",
                "code": "internal",
            }), 500

        return jsonify(result.to_response())

    @app.route("/health/ready")
    async def health_ready():
        """Readiness probe - check the Gemini API is reachable with our key."""
        checks = {
            "status": "healthy",
            "gemini": False,
            "model": False,
            "chat_model": client.chat_model,
        }

        if not client.api_key:
            checks["status"] = "unhealthy"
            checks["error"] = "GEMINI_API_KEY is not configured"
            return jsonify(checks), 503

        try:
            models = await client.list_models()
            checks["gemini"] = True

            if client.chat_model in models:
                checks["model"] = True
            else:
                checks["status"] = "unhealthy"
                checks["error"] = f"Missing chat model: {client.chat_model}"

        except CapabilityError as e:
            logger.error("health_check_failed", error=str(e))
            checks["status"] = "unhealthy"
            checks["error"] = str(e)

        status_code = 200 if checks["status"] == "healthy" else 503
        return jsonify(checks), status_code

    @app.route("/health/live")
    async def health_live():
        """Liveness probe - check if app is running."""
        return jsonify({"status": "alive"}), 200

    @app.errorhandler(404)
    async def not_found(error):
        return jsonify({"error": "Not found"}), 404

    return app


app = create_app()


if __name__ == "__main__":
    # For development - use hypercorn in production
    app.run(host="0.0.0.0", port=5000, debug=True)
