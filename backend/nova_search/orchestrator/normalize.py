from __future__ import annotations

import re

# Sequence-boundary tokens some providers leak into completions.
SPECIAL_TOKENS = (
    "<|begin▁of▁sentence|>",
    "<|end▁of▁sentence|>",
    "<|begin_of_text|>",
    "<|end_of_text|>",
    "<｜begin▁of▁sentence｜>",
    "<｜end▁of▁sentence｜>",
)

_REPEATED_RUN = re.compile(r"(.{50,}?)\1+")


def strip_special_tokens(text: str) -> str:
    for token in SPECIAL_TOKENS:
        text = text.replace(token, "")
    return text


def collapse_repeats(text: str) -> str:
    return _REPEATED_RUN.sub(r"\1", text)


def normalize_text(text: str) -> str:
    """
    Strip special tokens, collapse immediately repeated runs of 50+ chars and
    trim. Applied until nothing changes so the result is a fixed point.
    """
    current = text or ""
    while True:
        cleaned = collapse_repeats(strip_special_tokens(current)).strip()
        if cleaned == current:
            return cleaned
        current = cleaned
