"""Wrapper around Amazon Bedrock text completion."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional, Protocol

from botocore.exceptions import ClientError

import config

logger = logging.getLogger(__name__)


class TextCompletion(Protocol):
    """Single prompt-in/text-out exchange with a generative model."""

    def complete(self, prompt: str, *, max_output_tokens: int) -> str:
        ...


class BedrockClient:
    """Bedrock InvokeModel client exposing the ``TextCompletion`` capability."""

    def __init__(
        self,
        region: str,
        model_id: Optional[str],
        guardrail_id: Optional[str] = None,
        guardrail_ver: Optional[int] = None,
    ):
        if not model_id:
            raise config.ConfigurationError("BEDROCK_MODEL_ID must be provided")

        self.region = region
        self.model_id = model_id
        self.guardrail_id = guardrail_id
        self.guardrail_ver = guardrail_ver
        self._runtime = config.get_bedrock_runtime_client()

    @classmethod
    def from_settings(cls) -> "BedrockClient":
        settings = config.get_settings()
        return cls(
            region=settings.aws_region,
            model_id=settings.bedrock_model_id,
            guardrail_id=settings.bedrock_guardrail_id,
            guardrail_ver=settings.bedrock_guardrail_ver,
        )

    def _payload(self, prompt: str, max_output_tokens: int) -> Dict[str, Any]:
        if "claude" in self.model_id:
            return {
                "anthropic_version": "bedrock-2023-05-31",
                "messages": [
                    {
                        "role": "user",
                        "content": [{"type": "text", "text": prompt}],
                    }
                ],
                "max_tokens": max_output_tokens,
            }
        return {
            "inputText": prompt,
            "textGenerationConfig": {"maxTokenCount": max_output_tokens},
        }

    def _invoke_model(self, prompt: str, max_output_tokens: int) -> Dict[str, Any]:
        invoke_kwargs: Dict[str, Any] = {
            "modelId": self.model_id,
            "accept": "application/json",
            "contentType": "application/json",
            "body": json.dumps(self._payload(prompt, max_output_tokens)).encode("utf-8"),
        }
        if self.guardrail_id and self.guardrail_ver:
            invoke_kwargs["guardrailIdentifier"] = self.guardrail_id
            invoke_kwargs["guardrailVersion"] = str(self.guardrail_ver)

        try:
            response = self._runtime.invoke_model(**invoke_kwargs)
        except ClientError as exc:
            logger.error("bedrock_invoke_model_error", extra={"error": str(exc)})
            raise

        body = response.get("body")
        if hasattr(body, "read"):
            data = body.read()
        else:
            data = body
        return json.loads(data)

    @staticmethod
    def _extract_text_from_response(model_response: Dict[str, Any]) -> str:
        if "outputText" in model_response:
            return model_response["outputText"]

        if "content" in model_response and isinstance(model_response["content"], list):
            for block in model_response["content"]:
                if isinstance(block, dict) and block.get("type") == "text":
                    return block.get("text", "")

        if "results" in model_response:
            results = model_response["results"]
            if results and isinstance(results, list) and isinstance(results[0], dict):
                return results[0].get("outputText", "") or ""

        return ""

    def complete(self, prompt: str, *, max_output_tokens: int) -> str:
        """Return the first text block of the model's answer ("" when there is none)."""
        response_payload = self._invoke_model(prompt, max_output_tokens)
        text = self._extract_text_from_response(response_payload)
        logger.debug(
            "bedrock_completion",
            extra={"model_id": self.model_id, "chars": len(text), "stop_reason": response_payload.get("stop_reason")},
        )
        return text
