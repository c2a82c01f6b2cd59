from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional

from ..config import Settings


@dataclass(frozen=True)
class DirectModel:
    id: str
    name: str
    description: str = ""
    is_free: bool = False
    context_length: Optional[int] = None


DEFAULT_TEXT_MODEL = "google/gemini-2.5-flash"
DEFAULT_VISION_MODEL = "google/gemini-2.5-pro"
DEFAULT_IMAGE_MODEL = "google/gemini-2.5-flash-image-preview"

IMAGE_MODEL_MARKER = "image-preview"

GATEWAY_MODELS: List[str] = [
    "openai/gpt-4o-mini",
    "openai/gpt-4o",
    "openai/gpt-5",
    "openai/gpt-5-mini",
    "google/gemini-2.5-pro",
    "google/gemini-2.5-flash",
    "google/gemini-2.5-flash-lite",
    "google/gemini-2.5-flash-image-preview",
]

# Gateway models that accept image_url content parts
GATEWAY_MULTIMODAL_MODELS: List[str] = [
    "google/gemini-2.5-pro",
    "google/gemini-2.5-flash",
    "google/gemini-2.5-flash-lite",
    "openai/gpt-4o",
    "openai/gpt-4o-mini",
    "openai/gpt-5",
    "openai/gpt-5-mini",
]

DIRECT_MODELS: List[DirectModel] = [
    DirectModel("deepseek/deepseek-chat-v3.1:free", "DeepSeek V3.1", "Fast and capable reasoning model (Free)", True, 64_000),
    DirectModel("google/gemini-2.0-flash-exp:free", "Gemini 2.0 Flash", "Google's fast multimodal model (Free)", True, 1_000_000),
    DirectModel("google/gemini-2.5-flash-image-preview:free", "Nano Banana (Image Gen)", "Creates images from text prompts (Free)", True, 32_000),
    DirectModel("meta-llama/llama-3.3-70b-instruct:free", "Llama 3.3 70B (Free)", "Meta's open source powerhouse (Free)", True, 128_000),
    DirectModel("meta-llama/llama-3.3-70b-instruct", "Llama 3.3 70B", "Meta's open source powerhouse", False, 128_000),
    DirectModel("anthropic/claude-3.5-sonnet", "Claude 3.5 Sonnet", "Strong analysis and long documents", False, 200_000),
    DirectModel("anthropic/claude-opus-4", "Claude Opus 4", "Most intelligent Claude model", False, 200_000),
    DirectModel("anthropic/claude-sonnet-4", "Claude Sonnet 4", "Balanced intelligence and speed", False, 200_000),
    DirectModel("openai/gpt-4o", "GPT-4o", "OpenAI's flagship model", False, 128_000),
]


@dataclass(frozen=True)
class ModelCatalog:
    gateway_models: FrozenSet[str]
    multimodal_models: FrozenSet[str]
    direct_models: Dict[str, DirectModel]
    default_text_model: str = DEFAULT_TEXT_MODEL
    default_vision_model: str = DEFAULT_VISION_MODEL
    default_image_model: str = DEFAULT_IMAGE_MODEL
    ordered_gateway: tuple = field(default=(), compare=False)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ModelCatalog":
        gateway = list(dict.fromkeys([*GATEWAY_MODELS, *settings.extra_gateway_models]))
        direct = {m.id: m for m in DIRECT_MODELS}
        for model_id in settings.extra_direct_models:
            direct.setdefault(model_id, DirectModel(id=model_id, name=model_id))
        return cls(
            gateway_models=frozenset(gateway),
            multimodal_models=frozenset(GATEWAY_MULTIMODAL_MODELS),
            direct_models=direct,
            ordered_gateway=tuple(gateway),
        )

    def is_direct_model(self, model: str) -> bool:
        return model in self.direct_models

    def is_gateway_model(self, model: str) -> bool:
        return model in self.gateway_models

    def is_known(self, model: str) -> bool:
        return self.is_gateway_model(model) or self.is_direct_model(model)


def is_image_model(model: str) -> bool:
    return IMAGE_MODEL_MARKER in (model or "")
