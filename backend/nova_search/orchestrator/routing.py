from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Optional, Tuple

from .catalog import ModelCatalog, is_image_model
from .intent import Intent, IntentResult


class Provider(str, Enum):
    GATEWAY = "gateway"
    DIRECT = "direct"


AUTO_SENTINELS: Dict[str, Provider] = {
    "auto-gateway": Provider.GATEWAY,
    "auto-lovable": Provider.GATEWAY,
    "auto-direct": Provider.DIRECT,
    "auto-openrouter": Provider.DIRECT,
}


@dataclass(frozen=True)
class RoutingDecision:
    model: str
    provider: Provider
    fallback_applied: bool = False
    auto_mode_applied: bool = False


def expand_auto_mode(
    requested_model: Optional[str], intent: IntentResult, catalog: ModelCatalog
) -> Tuple[str, bool]:
    """Return the requested model with auto sentinels replaced by the intent's suggestion."""
    model = requested_model or catalog.default_text_model
    sentinel = AUTO_SENTINELS.get(model)
    if sentinel is None:
        return model, False
    return (intent.gateway_model if sentinel is Provider.GATEWAY else intent.direct_model), True


def resolve_model(
    requested_model: Optional[str],
    intent: IntentResult,
    *,
    has_images: bool,
    direct_key_available: bool,
    catalog: ModelCatalog,
) -> RoutingDecision:
    """
    Pick the upstream model and provider for a chat request.

    The result is always runnable: a direct-provider model is only returned
    with a direct-provider key, and with images attached only gateway
    multi-modal models are returned.
    """
    model, auto = expand_auto_mode(requested_model, intent, catalog)

    if has_images:
        if model in catalog.multimodal_models:
            return RoutingDecision(model, Provider.GATEWAY, False, auto)
        return RoutingDecision(catalog.default_vision_model, Provider.GATEWAY, True, auto)

    if catalog.is_direct_model(model) and direct_key_available:
        return RoutingDecision(model, Provider.DIRECT, False, auto)

    if catalog.is_gateway_model(model):
        return RoutingDecision(model, Provider.GATEWAY, False, auto)

    return RoutingDecision(catalog.default_text_model, Provider.GATEWAY, True, auto)


def pin_vision_model(decision: RoutingDecision, catalog: ModelCatalog) -> RoutingDecision:
    # Attached images always go to the gateway's vision default.
    return replace(decision, model=catalog.default_vision_model, provider=Provider.GATEWAY)


def wants_image_generation(intent: IntentResult, requested_model: Optional[str]) -> bool:
    return intent.intent is Intent.IMAGE_GENERATION or is_image_model(requested_model or "")


def select_image_model(
    decision: RoutingDecision, catalog: ModelCatalog, candidate: Optional[str] = None
) -> RoutingDecision:
    """
    Route an image-generation request to a gateway image model.

    `candidate` is the requested model after auto-mode expansion. When it is
    already a gateway image model it is used as-is and no fallback is
    reported, even if attachments made `resolve_model` fall back earlier.
    """
    for model in (candidate, decision.model):
        if model and catalog.is_gateway_model(model) and is_image_model(model):
            return replace(decision, model=model, provider=Provider.GATEWAY, fallback_applied=False)
    return replace(decision, model=catalog.default_image_model, provider=Provider.GATEWAY)
