from __future__ import annotations

import json
import re
from typing import Any, Iterable

from .schema import PLATFORM_KEYS, Caption, Platform, normalize_platform

FALLBACK_CAPTION_TEXT = "Unable to generate caption. Please try again."


def clean_text(text: str) -> str:
    cleaned = re.sub(r"^```[a-zA-Z]*\s*", "", text.strip())
    cleaned = re.sub(r"`{3}$", "", cleaned)
    return cleaned.strip()


def parse_json(text: str) -> dict[str, Any] | None:
    """Parse a model reply into a JSON object, or None when it is not one."""
    trimmed = text.strip()
    if not trimmed:
        return None
    try:
        parsed = json.loads(trimmed)
    except (json.JSONDecodeError, TypeError):
        start = trimmed.find("{")
        end = trimmed.rfind("}")
        if start < 0 or end <= start:
            return None
        try:
            parsed = json.loads(trimmed[start : end + 1])
        except (json.JSONDecodeError, TypeError):
            return None
    return parsed if isinstance(parsed, dict) else None


def _format_hashtags(hashtags: Any) -> str:
    if not isinstance(hashtags, list):
        return ""
    tags = []
    for tag in hashtags:
        if not isinstance(tag, str):
            continue
        word = tag.strip().lstrip("#").strip()
        if word:
            tags.append(f"#{word}")
    return " ".join(tags)


def _keyed_caption(platform: Platform, entry: Any) -> str | None:
    if isinstance(entry, str):
        return entry.strip() or None
    if not isinstance(entry, dict):
        return None
    caption = entry.get("caption")
    if not isinstance(caption, str) or not caption.strip():
        return None
    text = caption.strip()
    if platform == "Instagram":
        hashtags = _format_hashtags(entry.get("hashtags"))
        if hashtags:
            text = f"{text}\n\n{hashtags}"
    return text


def _listed_captions(entries: list[Any]) -> dict[Platform, str]:
    found: dict[Platform, str] = {}
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        name = entry.get("platform")
        text = entry.get("text")
        if not isinstance(name, str) or not isinstance(text, str) or not text.strip():
            continue
        platform = normalize_platform(name)
        if platform and platform not in found:
            found[platform] = text
    return found


def _keyed_entries(parsed: dict[str, Any]) -> dict[Platform, Any]:
    """Top-level platform entries keyed by canonical platform, whatever their case."""
    entries: dict[Platform, Any] = {}
    for name, entry in parsed.items():
        platform = normalize_platform(name) if isinstance(name, str) else None
        if platform is None:
            continue
        # An exact lowercase key wins over a differently-cased duplicate.
        if platform not in entries or name == PLATFORM_KEYS[platform]:
            entries[platform] = entry
    return entries


def build_captions(parsed: dict[str, Any], platforms: Iterable[Platform]) -> list[Caption]:
    """Keep only non-empty captions for the requested platforms, in request order.

    Accepts the per-platform keyed object the prompt asks for, and a
    ``{"captions": [{"platform", "text"}]}`` list whose texts pass through as-is.
    """
    listed = _listed_captions(parsed["captions"]) if isinstance(parsed.get("captions"), list) else {}
    keyed = _keyed_entries(parsed)
    captions: list[Caption] = []
    for platform in platforms:
        text = _keyed_caption(platform, keyed.get(platform))
        if text is None:
            text = listed.get(platform)
        if text:
            captions.append(Caption(platform=platform, text=text))
    return captions


def fallback_captions(platforms: Iterable[Platform]) -> list[Caption]:
    return [Caption(platform=platform, text=FALLBACK_CAPTION_TEXT) for platform in platforms]
