from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from ..schemas.dtos import Attachment
from .intent import Intent

IMAGES_ATTACHED_NOTE = "\n\n[Images attached for analysis]"

PERSONA = (
    "You are NOVA, a helpful search assistant. Provide comprehensive, "
    "well-researched answers with clear structure."
)
FILE_ANALYSIS_DIRECTIVE = (
    "⚠️ FILE ANALYSIS: The user has attached files for you to analyze. "
    "Read them carefully and provide insights based on the content."
)
VISION_DIRECTIVE = (
    "🖼️ VISION MODE: Analyze the attached images in detail. "
    "Describe what you see and answer any questions about them."
)
FORMATTING_GUIDE = (
    "MATHEMATICAL FORMATTING:\n"
    "- Use LaTeX formatting: $x = 5$ for inline, $$\\frac{a}{b} = c$$ for display\n\n"
    "Use emojis occasionally to make it engaging 🌟"
)


@dataclass(frozen=True)
class UpstreamMessages:
    system: Dict[str, Any]
    user: Dict[str, Any]

    def as_list(self) -> List[Dict[str, Any]]:
        return [self.system, self.user]


def image_data_urls(attachments: Sequence[Attachment]) -> List[str]:
    return [att.dataUrl for att in attachments if att.is_image and att.dataUrl]


def _file_sections(attachments: Sequence[Attachment], limit: int) -> str:
    parts = []
    for att in attachments:
        if att.contentText:
            parts.append(f"\n\n📄 File: {att.name}\n{att.contentText[:limit]}")
    return "".join(parts)


def default_system_prompt(model: str, *, files_attached: bool, images_attached: bool) -> str:
    sections = [
        PERSONA,
        f'IMPORTANT: You are currently using the {model} model. '
        f'If asked which model you are, respond with "{model}".',
        "IMPORTANT: Your response should be concise and well-structured. "
        "ALWAYS complete your final sentence - never cut off mid-sentence.",
    ]
    if files_attached:
        sections.append(FILE_ANALYSIS_DIRECTIVE)
    if images_attached:
        sections.append(VISION_DIRECTIVE)
    sections.append(FORMATTING_GUIDE)
    return "\n\n".join(sections)


def build_upstream_messages(
    query: str,
    attachments: Sequence[Attachment],
    system_prompt: Optional[str],
    intent: Intent,
    model: str,
    *,
    attachment_text_limit: int = 50_000,
) -> UpstreamMessages:
    """
    Build the system and user messages for a chat completion.

    A caller-supplied system prompt is sent verbatim. Attached file text is
    appended to the query; attached images turn the user content into a list
    of parts (text first, then one image_url part per image).
    """
    files = _file_sections(attachments, attachment_text_limit)
    images = image_data_urls(attachments)

    user_text = query + files
    if images and "image" not in user_text.lower():
        user_text += IMAGES_ATTACHED_NOTE

    if system_prompt:
        system_text = system_prompt
    else:
        system_text = default_system_prompt(
            model,
            files_attached=bool(files) or intent is Intent.FILE_ANALYSIS,
            images_attached=bool(images) or intent is Intent.VISION,
        )

    if images:
        content: Any = [{"type": "text", "text": user_text}]
        content.extend({"type": "image_url", "image_url": {"url": url}} for url in images)
    else:
        content = user_text

    return UpstreamMessages(
        system={"role": "system", "content": system_text},
        user={"role": "user", "content": content},
    )
