from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from ..config import Settings
from ..errors import ConfigurationError
from ..schemas.dtos import Meta, SearchRequest, SearchResponse
from .catalog import ModelCatalog
from .intent import classify_intent
from .messages import build_upstream_messages, image_data_urls
from .normalize import normalize_text
from .routing import (
    RoutingDecision,
    expand_auto_mode,
    pin_vision_model,
    resolve_model,
    select_image_model,
    wants_image_generation,
)

from ..cloud_layer.gateway_client import (
    EMPTY_COMPLETION,
    dispatch_chat_completion,
    dispatch_image_generation,
)
from ..cloud_layer.search_client import SearchAugmentation, search_web

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Credentials:
    gateway: str
    direct: Optional[str]
    search: Optional[str]


def _meta(decision: RoutingDecision, generated_images: Optional[bool] = None) -> Meta:
    return Meta(
        model=decision.model,
        fallbackUsed=decision.fallback_applied,
        isAutoMode=decision.auto_mode_applied,
        generatedImages=generated_images,
    )


# -------------------------
# Orchestrator
# -------------------------
class Orchestrator:
    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.settings = settings
        self.catalog = ModelCatalog.from_settings(settings)
        self._transport = transport

    def credentials(self, req: SearchRequest) -> Credentials:
        if not self.settings.gateway_api_key:
            raise ConfigurationError("GATEWAY_API_KEY is not configured")
        keys = req.apiKeys
        return Credentials(
            gateway=self.settings.gateway_api_key,
            direct=(keys.primary if keys else None) or self.settings.direct_provider_api_key,
            search=(keys.secondary if keys else None) or self.settings.search_api_key,
        )

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.settings.http_timeout_seconds, transport=self._transport)

    async def process(self, req: SearchRequest) -> SearchResponse:
        creds = self.credentials(req)
        attachments = req.attachments or []
        has_images = bool(image_data_urls(attachments))

        intent_res = classify_intent(req.query, attachments)
        decision = resolve_model(
            req.model,
            intent_res,
            has_images=has_images,
            direct_key_available=bool(creds.direct),
            catalog=self.catalog,
        )
        logger.info(
            "Routing: intent=%s requested=%s model=%s provider=%s fallback=%s auto=%s",
            intent_res.intent.value,
            req.model,
            decision.model,
            decision.provider.value,
            decision.fallback_applied,
            decision.auto_mode_applied,
        )

        async with self._client() as client:
            if wants_image_generation(intent_res, req.model):
                candidate, _ = expand_auto_mode(req.model, intent_res, self.catalog)
                decision = select_image_model(decision, self.catalog, candidate)
                generated = await dispatch_image_generation(
                    client, self.settings, query=req.query, model=decision.model
                )
                return SearchResponse(
                    summary=generated.text,
                    query=req.query,
                    images=generated.image_urls,
                    meta=_meta(decision, generated_images=True),
                )

            if has_images:
                decision = pin_vision_model(decision, self.catalog)

            messages = build_upstream_messages(
                req.query,
                attachments,
                req.systemPrompt,
                intent_res.intent,
                decision.model,
                attachment_text_limit=self.settings.attachment_text_limit,
            )
            max_tokens = min(req.maxTokens or self.settings.max_output_tokens, self.settings.max_output_tokens)

            chat = dispatch_chat_completion(
                client,
                self.settings,
                messages=messages,
                decision=decision,
                max_tokens=max_tokens,
                temperature=req.temperature,
                direct_api_key=creds.direct,
            )
            search = self._augment(client, req.query, creds.search)

            # Only the chat completion is allowed to fail the request.
            completion, augmentation = await asyncio.gather(chat, search, return_exceptions=True)

        if isinstance(completion, BaseException):
            raise completion
        if isinstance(augmentation, BaseException):
            logger.warning("Search augmentation failed, continuing without sources: %s", augmentation)
            augmentation = None

        response = SearchResponse(
            summary=normalize_text(completion) or EMPTY_COMPLETION,
            query=req.query,
            meta=_meta(decision),
        )
        if augmentation is not None:
            response.sources = augmentation.sources
            response.images = augmentation.images
        return response

    async def _augment(
        self, client: httpx.AsyncClient, query: str, api_key: Optional[str]
    ) -> Optional[SearchAugmentation]:
        if not api_key:
            return None
        return await search_web(client, self.settings, query=query, api_key=api_key)
