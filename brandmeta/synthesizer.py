"""Brand-aware SEO / Open Graph metadata generation via a chat model.

``synthesize_metadata`` builds one prompt from the extracted page content and
the brand context, makes exactly one chat-model call, and parses the JSON
reply into :class:`~brandmeta.models.GeneratedMetadata`.

Chat providers
--------------
``openai`` (default)
    ``ChatOpenAI`` in JSON mode.  Requires ``OPENAI_API_KEY``.
``ollama``
    ``ChatOllama`` with ``format="json"`` against ``OLLAMA_BASE_URL``.
"""

from __future__ import annotations

import asyncio
import json
import re
from typing import Any, Optional

import structlog

from brandmeta.config import settings
from brandmeta.errors import SynthesisError
from brandmeta.models import BrandContext, GeneratedMetadata
from brandmeta.scraper.models import ExtractedContent

log = structlog.get_logger(__name__)

# Reply key -> GeneratedMetadata attribute
_FIELDS = {
    "pageTitle": "page_title",
    "metaDescription": "meta_description",
    "ogTitle": "og_title",
    "ogDescription": "og_description",
}

_CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)

_SYSTEM_PROMPT = (
    "You are an SEO specialist writing page metadata for a brand. "
    "Respond with a single JSON object and nothing else, using exactly these "
    'keys: "pageTitle", "metaDescription", "ogTitle", "ogDescription". '
    "Keep pageTitle under 60 characters, metaDescription under 160, "
    "ogTitle under 70 and ogDescription under 200."
)


# ---------------------------------------------------------------------------
# LLM helper
# ---------------------------------------------------------------------------

def get_llm() -> Any:
    """Return a LangChain chat model that replies in JSON, based on ``settings``."""
    if settings.llm_provider == "ollama":
        from langchain_ollama import ChatOllama

        return ChatOllama(
            model=settings.ollama_chat_model,
            base_url=settings.ollama_base_url,
            temperature=settings.llm_temperature,
            format="json",
        )

    from langchain_openai import ChatOpenAI

    return ChatOpenAI(
        model=settings.openai_chat_model,
        temperature=settings.llm_temperature,
        timeout=settings.llm_timeout,
        max_retries=0,
        model_kwargs={"response_format": {"type": "json_object"}},
    )


# ---------------------------------------------------------------------------
# Prompt construction
# ---------------------------------------------------------------------------

def truncate_content(text: str, limit: Optional[int] = None) -> str:
    """Keep the first *limit* characters of *text*.

    Text at or under the limit is returned unchanged.
    """
    limit = settings.content_char_limit if limit is None else limit
    if len(text) <= limit:
        return text
    return text[:limit]


def build_prompt(content: ExtractedContent, brand: BrandContext) -> str:
    """Return the user prompt for one page."""
    guardrails = ", ".join(sorted(brand.guardrails)) or "(none)"
    lines = [
        f"Write metadata in language '{brand.language}'"
        + (f" for an audience in {brand.country}." if brand.country else "."),
        "",
        "Brand",
        f"- Identity: {brand.brand_identity or '(not provided)'}",
        f"- Tone of voice: {brand.tone_of_voice or '(not provided)'}",
        f"- Guardrails (never use or imply): {guardrails}",
        "",
        f"Page URL: {content.source_url}",
        f"Page title: {content.title or '(none)'}",
    ]
    if content.existing_meta:
        lines.append("Current metadata on the page (improve on it, do not copy):")
        for key in sorted(content.existing_meta):
            lines.append(f"- {key}: {content.existing_meta[key]}")
    lines += [
        "",
        "Page content:",
        truncate_content(content.body) or "(empty)",
    ]
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Reply parsing
# ---------------------------------------------------------------------------

def _reply_text(response: Any) -> str:
    raw = response.content if hasattr(response, "content") else response
    if isinstance(raw, list):
        # Content-block style replies
        raw = "".join(
            block.get("text", "") if isinstance(block, dict) else str(block) for block in raw
        )
    return str(raw).strip()


def parse_reply(text: str) -> GeneratedMetadata:
    """Parse the model's JSON reply.

    Raises:
        SynthesisError: ``kind="parse"`` if the reply is not a JSON object,
            ``kind="missing-fields"`` if any of the four keys is absent or blank.
    """
    fenced = _CODE_FENCE.match(text)
    if fenced:
        text = fenced.group(1)
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SynthesisError("parse", f"AI reply is not valid JSON: {exc.msg}") from exc
    if not isinstance(data, dict):
        raise SynthesisError("parse", "AI reply is not a JSON object")

    values = {}
    missing = []
    for key, attr in _FIELDS.items():
        value = data.get(key)
        if not isinstance(value, str) or not value.strip():
            missing.append(key)
        else:
            values[attr] = value.strip()
    if missing:
        raise SynthesisError(
            "missing-fields", f"AI reply is missing field(s): {', '.join(missing)}"
        )
    return GeneratedMetadata(**values)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

async def synthesize_metadata(
    content: ExtractedContent,
    brand: BrandContext,
    llm: Any = None,
) -> GeneratedMetadata:
    """Generate page title, meta description and OG fields for one page.

    Args:
        content: Extracted page content.
        brand: Brand voice and locale.
        llm: A LangChain chat model; built from ``settings`` when omitted.

    Raises:
        SynthesisError: ``kind="upstream"`` when the call itself fails or times
            out, otherwise as raised by :func:`parse_reply`.
    """
    from langchain_core.messages import HumanMessage, SystemMessage

    llm = llm if llm is not None else get_llm()
    messages = [
        SystemMessage(content=_SYSTEM_PROMPT),
        HumanMessage(content=build_prompt(content, brand)),
    ]

    try:
        response = await asyncio.wait_for(llm.ainvoke(messages), timeout=settings.llm_timeout)
    except asyncio.TimeoutError as exc:
        raise SynthesisError(
            "upstream", f"AI request timed out after {settings.llm_timeout:g}s"
        ) from exc
    except Exception as exc:  # noqa: BLE001
        raise SynthesisError("upstream", f"AI request failed: {exc}") from exc

    text = _reply_text(response)
    log.debug("synthesis_reply", url=content.source_url, chars=len(text))
    return parse_reply(text)
