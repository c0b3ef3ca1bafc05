from itertools import combinations

import pytest

from caption_gateway.routes.captions.prompt import PLATFORM_GUIDELINES, build_prompt, ordered_platforms
from caption_gateway.routes.captions.schema import PLATFORM_KEYS, PLATFORMS

ALL_SUBSETS = [list(subset) for size in range(1, len(PLATFORMS) + 1) for subset in combinations(PLATFORMS, size)]


@pytest.mark.parametrize("platforms", ALL_SUBSETS, ids=lambda subset: "+".join(subset))
def test_prompt_mentions_only_requested_platform_keys(platforms: list[str]) -> None:
    prompt = build_prompt(None, platforms).lower()

    for platform in PLATFORMS:
        key = PLATFORM_KEYS[platform]
        if platform in platforms:
            assert f'"{key}"' in prompt
        else:
            assert key not in prompt


def test_prompt_is_deterministic_and_order_independent() -> None:
    first = build_prompt("beach day", ["Twitter", "Instagram"])
    second = build_prompt("beach day", ["Instagram", "Twitter", "Instagram"])

    assert first == second


def test_prompt_includes_context_or_placeholder() -> None:
    assert "Additional context about the image: sunset at the beach" in build_prompt(
        "  sunset at the beach ", ["Twitter"]
    )
    assert "No additional context provided." in build_prompt(None, ["Twitter"])
    assert "No additional context provided." in build_prompt("   ", ["Twitter"])


def test_only_instagram_block_asks_for_hashtags() -> None:
    instagram_prompt = build_prompt(None, ["Instagram"])
    linkedin_prompt = build_prompt(None, ["LinkedIn"])

    assert '"hashtags"' in instagram_prompt
    assert '"hashtags"' not in linkedin_prompt
    assert '"caption" (string) only' in linkedin_prompt


def test_prompt_carries_style_guidelines_and_json_instruction() -> None:
    prompt = build_prompt(None, ["Twitter", "LinkedIn"])

    assert f"at most {PLATFORM_GUIDELINES['Twitter'].max_length} characters" in prompt
    assert PLATFORM_GUIDELINES["LinkedIn"].emoji in prompt
    assert 'containing exactly these keys: "twitter", "linkedin"' in prompt
    assert "markdown code fences" in prompt


def test_ordered_platforms_uses_canonical_order() -> None:
    assert ordered_platforms(["LinkedIn", "Instagram", "LinkedIn"]) == ["Instagram", "LinkedIn"]
