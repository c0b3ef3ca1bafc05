from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Iterable

from .schema import PLATFORM_KEYS, PLATFORMS, Platform


@dataclass(frozen=True)
class PlatformGuideline:
    tone: str
    max_length: int
    emoji: str
    example: str
    hashtags: bool = False


PLATFORM_GUIDELINES: dict[Platform, PlatformGuideline] = {
    "Instagram": PlatformGuideline(
        tone="casual and trendy, written to stop the scroll",
        max_length=2200,
        emoji="2 to 4 emojis that fit the mood",
        example="Golden hour did not disappoint today. Who else is chasing sunsets this week?",
        hashtags=True,
    ),
    "Twitter": PlatformGuideline(
        tone="concise and punchy",
        max_length=280,
        emoji="at most 1 emoji",
        example="Caught the sky on fire tonight. Worth every minute outside.",
    ),
    "Facebook": PlatformGuideline(
        tone="conversational and engaging, can tell a short story",
        max_length=500,
        emoji="1 or 2 emojis",
        example="We almost skipped the walk tonight, and we are so glad we didn't. What is your favourite spot to watch the sun go down?",
    ),
    "LinkedIn": PlatformGuideline(
        tone="professional and business-focused, with a takeaway",
        max_length=700,
        emoji="no emojis",
        example="Stepping away from the desk for ten minutes reminded me why perspective matters in every project.",
    ),
}


def ordered_platforms(platforms: Iterable[Platform]) -> list[Platform]:
    """Deduplicate platforms and put them in canonical order."""
    requested = set(platforms)
    return [platform for platform in PLATFORMS if platform in requested]


def _platform_block(platform: Platform) -> str:
    key = PLATFORM_KEYS[platform]
    guideline = PLATFORM_GUIDELINES[platform]
    if guideline.hashtags:
        fields = '"caption" (string) and "hashtags" (array of 5 to 15 relevant hashtag words without the # sign)'
    else:
        fields = '"caption" (string) only'
    return (
        f'{platform} (JSON key "{key}"):\n'
        f"- Fields: {fields}\n"
        f"- Style: {guideline.tone}; at most {guideline.max_length} characters; {guideline.emoji}\n"
        f'- Example caption: "{guideline.example}"'
    )


def _response_skeleton(platforms: list[Platform]) -> str:
    skeleton: dict[str, dict[str, object]] = {}
    for platform in platforms:
        entry: dict[str, object] = {"caption": "..."}
        if PLATFORM_GUIDELINES[platform].hashtags:
            entry["hashtags"] = ["...", "..."]
        skeleton[PLATFORM_KEYS[platform]] = entry
    return json.dumps(skeleton, indent=2)


def build_prompt(context: str | None, platforms: Iterable[Platform]) -> str:
    selected = ordered_platforms(platforms)
    context_line = (
        f"Additional context about the image: {context.strip()}"
        if context and context.strip()
        else "No additional context provided."
    )
    blocks = "\n\n".join(_platform_block(platform) for platform in selected)
    keys = ", ".join(f'"{PLATFORM_KEYS[platform]}"' for platform in selected)

    return f"""Analyze the image and the provided context to create platform-specific captions.

{context_line}

Write exactly one caption for each platform below.

{blocks}

Respond ONLY with a single valid JSON object containing exactly these keys: {keys}.
Do not include keys for any other platform.
Do not wrap the JSON in markdown code fences and do not add any text before or after it.

Use this structure:
{_response_skeleton(selected)}"""
