"""Tests for the metadata synthesizer.

Mocking strategy
----------------
* The chat model is a ``MagicMock`` whose ``ainvoke`` is an ``AsyncMock``
  returning a fake ``AIMessage``-like object, so no provider is contacted.
* ``settings`` values are patched with ``monkeypatch`` where a test depends on
  the truncation cap or the AI timeout.
"""

from __future__ import annotations

import asyncio
import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from brandmeta.config import settings
from brandmeta.errors import SynthesisError
from brandmeta.models import BrandContext, GeneratedMetadata
from brandmeta.scraper.models import ExtractedContent
from brandmeta.synthesizer import (
    build_prompt,
    parse_reply,
    synthesize_metadata,
    truncate_content,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_GOOD_REPLY = {
    "pageTitle": "Trail Shoes That Grip | Acme",
    "metaDescription": "How to pick trail shoes for wet rock.",
    "ogTitle": "Pick trail shoes that grip",
    "ogDescription": "Grip beats weight. Our guide to wet-rock trail shoes.",
}

_BRAND = BrandContext(
    brand_id="acme",
    brand_identity="Family-run outdoor gear maker",
    tone_of_voice="Warm and practical",
    guardrails=frozenset({"cheap", "guaranteed"}),
    language="en",
    country="GB",
)


def _content(body: str = "Grip matters more than weight.") -> ExtractedContent:
    return ExtractedContent(
        title="Choosing trail shoes",
        body=body,
        source_url="https://example.com/a",
        existing_meta={"description": "Old description."},
    )


def _fake_ai_message(content: str) -> SimpleNamespace:
    """Minimal stand-in for a LangChain ``AIMessage``."""
    return SimpleNamespace(content=content)


def _fake_llm(reply=None, side_effect=None) -> MagicMock:
    llm = MagicMock()
    llm.ainvoke = AsyncMock(return_value=_fake_ai_message(reply), side_effect=side_effect)
    return llm


# ---------------------------------------------------------------------------
# truncate_content
# ---------------------------------------------------------------------------

class TestTruncateContent:
    def test_long_content_cut_to_exact_limit(self) -> None:
        text = "abcdefghij" * 10
        assert truncate_content(text, 25) == text[:25]
        assert len(truncate_content(text, 25)) == 25

    def test_content_at_limit_unchanged(self) -> None:
        text = "x" * 25
        assert truncate_content(text, 25) is text

    def test_short_content_unchanged(self) -> None:
        assert truncate_content("short", 25) == "short"

    def test_default_limit_from_settings(self, monkeypatch) -> None:
        monkeypatch.setattr(settings, "content_char_limit", 6000)
        assert len(truncate_content("y" * 7000)) == 6000


# ---------------------------------------------------------------------------
# build_prompt
# ---------------------------------------------------------------------------

class TestBuildPrompt:
    def test_includes_brand_context(self) -> None:
        prompt = build_prompt(_content(), _BRAND)

        assert "Family-run outdoor gear maker" in prompt
        assert "Warm and practical" in prompt
        assert "cheap, guaranteed" in prompt
        assert "language 'en'" in prompt
        assert "GB" in prompt

    def test_includes_page_title_content_and_existing_meta(self) -> None:
        prompt = build_prompt(_content(), _BRAND)

        assert "Page title: Choosing trail shoes" in prompt
        assert "Grip matters more than weight." in prompt
        assert "- description: Old description." in prompt

    def test_content_truncated_before_sending(self, monkeypatch) -> None:
        monkeypatch.setattr(settings, "content_char_limit", 50)
        body = "a" * 50 + "TAIL"
        prompt = build_prompt(_content(body), _BRAND)

        assert "a" * 50 in prompt
        assert "TAIL" not in prompt

    def test_empty_content_is_marked(self) -> None:
        prompt = build_prompt(_content(""), _BRAND)
        assert "(empty)" in prompt


# ---------------------------------------------------------------------------
# parse_reply
# ---------------------------------------------------------------------------

class TestParseReply:
    def test_parses_all_fields(self) -> None:
        metadata = parse_reply(json.dumps(_GOOD_REPLY))
        assert metadata == GeneratedMetadata(
            page_title=_GOOD_REPLY["pageTitle"],
            meta_description=_GOOD_REPLY["metaDescription"],
            og_title=_GOOD_REPLY["ogTitle"],
            og_description=_GOOD_REPLY["ogDescription"],
        )

    def test_tolerates_code_fence(self) -> None:
        metadata = parse_reply("```json\n" + json.dumps(_GOOD_REPLY) + "\n```")
        assert metadata.page_title == _GOOD_REPLY["pageTitle"]

    def test_malformed_json_is_parse_error(self) -> None:
        with pytest.raises(SynthesisError) as excinfo:
            parse_reply('{"pageTitle": "unterminated')
        assert excinfo.value.kind == "parse"
        assert not excinfo.value.transient

    def test_non_object_is_parse_error(self) -> None:
        with pytest.raises(SynthesisError) as excinfo:
            parse_reply('["not", "an", "object"]')
        assert excinfo.value.kind == "parse"

    def test_missing_field_is_reported(self) -> None:
        reply = dict(_GOOD_REPLY)
        del reply["ogDescription"]
        with pytest.raises(SynthesisError) as excinfo:
            parse_reply(json.dumps(reply))
        assert excinfo.value.kind == "missing-fields"
        assert "ogDescription" in str(excinfo.value)

    def test_blank_field_counts_as_missing(self) -> None:
        reply = dict(_GOOD_REPLY, ogTitle="   ")
        with pytest.raises(SynthesisError) as excinfo:
            parse_reply(json.dumps(reply))
        assert excinfo.value.kind == "missing-fields"


# ---------------------------------------------------------------------------
# synthesize_metadata
# ---------------------------------------------------------------------------

class TestSynthesizeMetadata:
    async def test_single_call_returns_metadata(self) -> None:
        llm = _fake_llm(json.dumps(_GOOD_REPLY))

        metadata = await synthesize_metadata(_content(), _BRAND, llm)

        assert metadata.og_title == _GOOD_REPLY["ogTitle"]
        llm.ainvoke.assert_awaited_once()

    async def test_messages_carry_system_and_page_prompt(self) -> None:
        llm = _fake_llm(json.dumps(_GOOD_REPLY))

        await synthesize_metadata(_content(), _BRAND, llm)

        messages = llm.ainvoke.await_args.args[0]
        assert len(messages) == 2
        assert "pageTitle" in messages[0].content
        assert "https://example.com/a" in messages[1].content

    async def test_provider_failure_is_upstream_error(self) -> None:
        llm = _fake_llm(side_effect=RuntimeError("429 rate limited"))

        with pytest.raises(SynthesisError) as excinfo:
            await synthesize_metadata(_content(), _BRAND, llm)

        assert excinfo.value.kind == "upstream"
        assert excinfo.value.transient
        assert "429" in str(excinfo.value)

    async def test_timeout_is_upstream_error(self, monkeypatch) -> None:
        monkeypatch.setattr(settings, "llm_timeout", 0.01)

        async def _hang(messages):
            await asyncio.sleep(1)

        llm = MagicMock()
        llm.ainvoke = _hang

        with pytest.raises(SynthesisError) as excinfo:
            await synthesize_metadata(_content(), _BRAND, llm)

        assert excinfo.value.kind == "upstream"
        assert "timed out" in str(excinfo.value)

    async def test_malformed_reply_is_parse_error(self) -> None:
        llm = _fake_llm("Sure! Here is your metadata: pageTitle=...")

        with pytest.raises(SynthesisError) as excinfo:
            await synthesize_metadata(_content(), _BRAND, llm)

        assert excinfo.value.kind == "parse"

    async def test_builds_llm_from_settings_when_omitted(self) -> None:
        llm = _fake_llm(json.dumps(_GOOD_REPLY))
        with patch("brandmeta.synthesizer.get_llm", return_value=llm) as mock_get:
            await synthesize_metadata(_content(), _BRAND)

        mock_get.assert_called_once_with()
        llm.ainvoke.assert_awaited_once()
