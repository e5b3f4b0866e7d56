"""AWS Lambda entry point for the scope determination search API."""

from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import Any, Dict

from pydantic import ValidationError

import config, fallback, search
from bedrock_client import BedrockClient
from schemas import SearchRequest

config.configure_logging()
logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def _method_from_event(event: Dict[str, Any]) -> str:
    """Extract HTTP method from API Gateway event."""
    if "requestContext" in event:
        http = event["requestContext"].get("http", {})
        if "method" in http:
            return http["method"]
    return event.get("httpMethod", "")


def _json_response_cors(body: Dict[str, Any], status: int = 200) -> Dict[str, Any]:
    return {
        "statusCode": status,
        "headers": {"Content-Type": "application/json", **CORS_HEADERS},
        "body": json.dumps(body, ensure_ascii=False),
    }


def _decode_body(event: Dict[str, Any]) -> str:
    body = event.get("body") or ""
    if event.get("isBase64Encoded"):
        body = base64.b64decode(body).decode("utf-8")
    return body


def _parse_json(event: Dict[str, Any]) -> Any:
    try:
        raw = _decode_body(event)
        if not raw:
            return {}
        return json.loads(raw)
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return {}


def _get_completion_client() -> BedrockClient:
    return BedrockClient.from_settings()


def lambda_handler(event: Dict[str, Any], _: Any) -> Dict[str, Any]:
    """Entrypoint for AWS Lambda."""
    method = _method_from_event(event)
    logger.debug("incoming_event", extra={"method": method})

    if method == "OPTIONS":
        return {"statusCode": 204, "headers": dict(CORS_HEADERS), "body": ""}
    if method != "POST":
        return _json_response_cors({"error": "Method Not Allowed"}, status=405)

    try:
        request = SearchRequest.model_validate(_parse_json(event))
    except ValidationError as exc:
        logger.info("invalid_search_request", extra={"error": str(exc)})
        return _json_response_cors(
            {"error": "Query parameter is required and must be a string"}, status=400
        )

    try:
        settings = config.get_settings()
        if not settings.bedrock_enabled:
            return _json_response_cors({"error": "Bedrock model id is missing"}, status=500)
        completion = _get_completion_client()
    except config.ConfigurationError as exc:
        logger.error("configuration_error", extra={"error": str(exc)})
        return _json_response_cors({"error": "Service is not configured"}, status=500)

    try:
        response = search.run_search(request.query, completion)
    except config.ConfigurationError as exc:
        logger.error("configuration_error", extra={"error": str(exc)})
        return _json_response_cors({"error": "Service is not configured"}, status=500)
    except fallback.AIServiceError:
        return _json_response_cors({"error": "Invalid response from AI"}, status=500)
    except Exception:
        logger.exception("search_request_failed")
        return _json_response_cors({"error": "Internal server error"}, status=500)

    logger.info(
        "search_completed",
        extra={"total_hasil": response.total, "corrected": response.corrected_query is not None},
    )
    return _json_response_cors(response.to_payload(), status=200)
