from caption_gateway.routes.captions.parser import (
    FALLBACK_CAPTION_TEXT,
    build_captions,
    clean_text,
    fallback_captions,
    parse_json,
)


def test_clean_text_strips_fences_with_and_without_language() -> None:
    assert clean_text('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert clean_text('```\n{"a": 1}\n```  ') == '{"a": 1}'
    assert clean_text('  {"a": 1}  ') == '{"a": 1}'


def test_parse_json_rejects_non_objects_and_garbage() -> None:
    assert parse_json("invalid json response") is None
    assert parse_json("") is None
    assert parse_json("[1, 2, 3]") is None
    assert parse_json('Sure! {"twitter": {"caption": "hi"}} Enjoy') == {"twitter": {"caption": "hi"}}


def test_build_captions_filters_to_requested_platforms() -> None:
    parsed = {
        "instagram": {"caption": "Insta", "hashtags": []},
        "twitter": {"caption": "Tweet"},
        "facebook": {"caption": "Post"},
        "linkedin": {"caption": "Update"},
    }

    captions = build_captions(parsed, ["Twitter", "LinkedIn"])

    assert [(c.platform, c.text) for c in captions] == [("Twitter", "Tweet"), ("LinkedIn", "Update")]


def test_build_captions_appends_instagram_hashtags() -> None:
    parsed = {"instagram": {"caption": "Golden hour", "hashtags": ["sunset", "#beach", "", 3]}}

    captions = build_captions(parsed, ["Instagram"])

    assert captions[0].text == "Golden hour\n\n#sunset #beach"


def test_build_captions_skips_missing_and_empty_captions() -> None:
    parsed = {"twitter": {"caption": "   "}, "facebook": {"text": "wrong field"}, "linkedin": {"caption": "Ok"}}

    captions = build_captions(parsed, ["Twitter", "Facebook", "LinkedIn"])

    assert [c.platform for c in captions] == ["LinkedIn"]


def test_build_captions_matches_platform_keys_in_any_case() -> None:
    parsed = {"Instagram": {"caption": "Golden hour", "hashtags": ["sunset"]}, "TWITTER": {"caption": "Tweet"}}

    captions = build_captions(parsed, ["Instagram", "Twitter"])

    assert [(c.platform, c.text) for c in captions] == [
        ("Instagram", "Golden hour\n\n#sunset"),
        ("Twitter", "Tweet"),
    ]


def test_build_captions_prefers_lowercase_key_over_other_casing() -> None:
    parsed = {"twitter": {"caption": "Lower"}, "Twitter": {"caption": "Title"}}

    assert build_captions(parsed, ["Twitter"])[0].text == "Lower"
    assert build_captions(dict(reversed(parsed.items())), ["Twitter"])[0].text == "Lower"


def test_build_captions_accepts_caption_list_shape() -> None:
    parsed = {
        "captions": [
            {"platform": "Instagram", "text": "A #sunset"},
            {"platform": "twitter", "text": "Nice sunset"},
            {"platform": "Facebook", "text": "Not requested"},
            {"platform": "Myspace", "text": "Unknown"},
        ]
    }

    captions = build_captions(parsed, ["Instagram", "Twitter"])

    assert [(c.platform, c.text) for c in captions] == [("Instagram", "A #sunset"), ("Twitter", "Nice sunset")]


def test_fallback_captions_cover_every_platform() -> None:
    captions = fallback_captions(["Instagram", "LinkedIn"])

    assert [c.platform for c in captions] == ["Instagram", "LinkedIn"]
    assert all(c.text == FALLBACK_CAPTION_TEXT for c in captions)
