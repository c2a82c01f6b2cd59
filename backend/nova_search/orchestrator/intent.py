# backend/nova_search/orchestrator/intent.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Sequence, Tuple

from ..schemas.dtos import Attachment


class Intent(str, Enum):
    IMAGE_GENERATION = "image_gen"
    VISION = "vision"
    FILE_ANALYSIS = "file_analysis"
    CODING = "coding"
    REASONING = "reasoning"
    TEXT = "text"


@dataclass(frozen=True)
class IntentResult:
    intent: Intent
    gateway_model: str
    direct_model: str


IMAGE_GEN_KEYWORDS = [
    "generate image", "create image", "make image", "draw", "make a picture",
    "design", "illustrate", "visualize", "picture of", "image of",
    "generate a photo", "create a photo", "show me a picture", "draw me",
]
CODING_KEYWORDS = ["code", "program", "function", "debug", "algorithm", "javascript", "python", "typescript"]
REASONING_KEYWORDS = ["analyze", "explain", "compare", "why", "how", "reasoning", "logic"]

# intent -> (gateway model, direct-provider model)
SUGGESTED_MODELS: Dict[Intent, Tuple[str, str]] = {
    Intent.IMAGE_GENERATION: ("google/gemini-2.5-flash-image-preview", "google/gemini-2.5-flash-image-preview"),
    Intent.VISION: ("google/gemini-2.5-pro", "google/gemini-2.0-flash-exp:free"),
    Intent.FILE_ANALYSIS: ("google/gemini-2.5-pro", "anthropic/claude-3.5-sonnet"),
    Intent.CODING: ("openai/gpt-5", "deepseek/deepseek-chat-v3.1:free"),
    Intent.REASONING: ("openai/gpt-5", "anthropic/claude-3.5-sonnet"),
    Intent.TEXT: ("google/gemini-2.5-flash", "meta-llama/llama-3.3-70b-instruct:free"),
}


def _mentions(keywords: Sequence[str]) -> Callable[[str, Sequence[Attachment]], bool]:
    return lambda lowered, _attachments: any(kw in lowered for kw in keywords)


def _has_image(_lowered: str, attachments: Sequence[Attachment]) -> bool:
    return any(att.is_image for att in attachments)


def _has_document(_lowered: str, attachments: Sequence[Attachment]) -> bool:
    return any(
        att.contentText or "pdf" in att.type.lower() or "document" in att.type.lower()
        for att in attachments
    )


# Ordered: first matching predicate wins.
INTENT_RULES: List[Tuple[Callable[[str, Sequence[Attachment]], bool], Intent]] = [
    (_mentions(IMAGE_GEN_KEYWORDS), Intent.IMAGE_GENERATION),
    (_has_image, Intent.VISION),
    (_has_document, Intent.FILE_ANALYSIS),
    (_mentions(CODING_KEYWORDS), Intent.CODING),
    (_mentions(REASONING_KEYWORDS), Intent.REASONING),
]


def _result(intent: Intent) -> IntentResult:
    gateway_model, direct_model = SUGGESTED_MODELS[intent]
    return IntentResult(intent=intent, gateway_model=gateway_model, direct_model=direct_model)


def classify_intent(query: str, attachments: Sequence[Attachment] = ()) -> IntentResult:
    lowered = (query or "").lower()
    for predicate, intent in INTENT_RULES:
        if predicate(lowered, attachments):
            return _result(intent)

    # default
    return _result(Intent.TEXT)
