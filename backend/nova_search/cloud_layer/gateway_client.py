from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from ..config import Settings
from ..errors import UpstreamHTTPError
from ..orchestrator.messages import UpstreamMessages
from ..orchestrator.routing import Provider, RoutingDecision

logger = logging.getLogger(__name__)

FREQUENCY_PENALTY = 0.6
PRESENCE_PENALTY = 0.1

EMPTY_COMPLETION = "Unable to generate response"
DEFAULT_IMAGE_CAPTION = "Here's your generated image! 🎨"

PUBLICATION_SETTING_MARKER = "Free model publication"
PUBLICATION_SETTING_MESSAGE = (
    "OpenRouter privacy settings need configuration. Go to "
    "https://openrouter.ai/settings/privacy and enable 'Free model publication'."
)

@dataclass(frozen=True)
class GeneratedImages:
    text: str
    image_urls: List[str] = field(default_factory=list)

def _first_message(data: dict) -> dict:
    choices = data.get("choices") or []
    if not choices or not isinstance(choices[0], dict):
        return {}
    return choices[0].get("message") or {}

def _message_text(message: dict) -> str:
    content = message.get("content")
    if isinstance(content, str):
        return content

    # Some providers answer with a list of typed parts
    chunks: list[str] = []
    if isinstance(content, list):
        for part in content:
            t = part.get("text") if isinstance(part, dict) else None
            if isinstance(t, str) and t.strip():
                chunks.append(t)
    return "\n".join(chunks)

def map_upstream_error(status_code: int, body: str) -> UpstreamHTTPError:
    if status_code == 404 and PUBLICATION_SETTING_MARKER in body:
        return UpstreamHTTPError(PUBLICATION_SETTING_MESSAGE, status_code=404)

    messages = {
        429: "Rate limit exceeded. Please try again later.",
        402: "Payment required. Please add credits to continue.",
        401: "Invalid API key. Please check your API keys in settings.",
        400: f"Bad request: {body or 'Invalid model or parameters'}",
    }
    return UpstreamHTTPError(messages.get(status_code, f"AI gateway error: {body}"), status_code=status_code)

def build_chat_payload(
    model: str,
    messages: List[Dict[str, Any]],
    max_tokens: int,
    temperature: Optional[float] = None,
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "model": model,
        "messages": messages,
        "max_tokens": max_tokens,
    }
    if temperature is not None:
        payload["temperature"] = temperature
    payload["frequency_penalty"] = FREQUENCY_PENALTY
    payload["presence_penalty"] = PRESENCE_PENALTY
    return payload

def _endpoint(
    settings: Settings, provider: Provider, direct_api_key: Optional[str]
) -> tuple[str, Dict[str, str]]:
    if provider is Provider.DIRECT:
        return settings.direct_provider_url, {
            "Authorization": f"Bearer {direct_api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": settings.app_url,
            "X-Title": settings.app_title,
        }
    return settings.gateway_url, {
        "Authorization": f"Bearer {settings.gateway_api_key}",
        "Content-Type": "application/json",
    }

async def dispatch_chat_completion(
    client: httpx.AsyncClient,
    settings: Settings,
    *,
    messages: UpstreamMessages,
    decision: RoutingDecision,
    max_tokens: int,
    temperature: Optional[float] = None,
    direct_api_key: Optional[str] = None,
) -> str:
    url, headers = _endpoint(settings, decision.provider, direct_api_key)
    payload = build_chat_payload(decision.model, messages.as_list(), max_tokens, temperature)

    logger.info("Dispatching chat completion: provider=%s model=%s", decision.provider.value, decision.model)
    r = await client.post(url, headers=headers, json=payload)

    if r.status_code >= 400:
        err_body = r.text
        logger.error("AI gateway error: %s %s", r.status_code, err_body)
        raise map_upstream_error(r.status_code, err_body)

    text = _message_text(_first_message(r.json()))
    return text if text else EMPTY_COMPLETION

async def dispatch_image_generation(
    client: httpx.AsyncClient,
    settings: Settings,
    *,
    query: str,
    model: str,
) -> GeneratedImages:
    url, headers = _endpoint(settings, Provider.GATEWAY, None)
    payload = {
        "model": model,
        "messages": [{"role": "user", "content": query}],
        "modalities": ["image", "text"],
    }

    logger.info("Dispatching image generation: model=%s", model)
    r = await client.post(url, headers=headers, json=payload)

    if r.status_code >= 400:
        err_body = r.text
        logger.error("Image gen error: %s %s", r.status_code, err_body)
        raise UpstreamHTTPError(f"Image generation failed: {err_body}", status_code=500)

    message = _first_message(r.json())
    urls = []
    for img in message.get("images") or []:
        url_value = (img.get("image_url") or {}).get("url") if isinstance(img, dict) else None
        if url_value:
            urls.append(url_value)

    return GeneratedImages(text=_message_text(message) or DEFAULT_IMAGE_CAPTION, image_urls=urls)
