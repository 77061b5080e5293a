"""Verification oracle backed by Gemini with Google Search grounding."""
from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, Sequence

from google import genai
from google.genai import types

from ..config import OracleConfig
from ..models import OracleResponse, VerificationSource
from .base import OracleError, OracleResponseError, parse_matches

LOGGER = logging.getLogger(__name__)

VERIFY_INSTRUCTION = (
    "You are an elite logistics data auditor. Use Google Search to verify every port or airport "
    "against official sources such as the UNECE UN/LOCODE directory. Provide the five-character "
    "UN/LOCODE, the official {language} name and the country name. If the input is an airport, "
    "say so in remarks. Output MUST be valid JSON."
)

VERIFY_PROMPT = (
    "Please verify and match the following port names against official UN/LOCODE databases and "
    "shipping directories. Confirm the five-character code, standard {language} name and country "
    "for each:\n{names}"
)

# Appended to the prompt when the model cannot combine search grounding with a JSON response type.
FORMAT_HINT = (
    "\n\nAnswer with a JSON array only, one object per name, each with the string fields "
    "originalName, portCode, localizedName, countryName and remarks."
)

# Model families that accept Google Search grounding together with a JSON response schema.
GROUNDED_JSON_MODEL_PREFIXES = ("gemini-3",)

SUMMARY_INSTRUCTION = (
    "You are a senior international logistics compliance expert. Summarise the matching results, "
    "point out codes that changed recently and locations with several roles (sea port versus "
    "airport). Answer in professional {language}."
)

SUMMARY_PROMPT = "Analyse the following port data, verified online, and write a logistics summary:\n{lines}"


def _build_response_schema() -> types.Schema:
    string = types.Type.STRING
    return types.Schema(
        type=types.Type.ARRAY,
        items=types.Schema(
            type=types.Type.OBJECT,
            properties={
                "originalName": types.Schema(type=string),
                "portCode": types.Schema(type=string, description="Official five-character UN/LOCODE"),
                "localizedName": types.Schema(type=string, description="Official localized name"),
                "countryName": types.Schema(type=string, description="Country name"),
                "remarks": types.Schema(type=string, description="Verification details or error notes"),
            },
            required=["originalName", "portCode", "localizedName", "countryName", "remarks"],
            property_ordering=["originalName", "portCode", "localizedName", "countryName", "remarks"],
        ),
    )


def extract_sources(response: Any) -> List[VerificationSource]:
    """Collect web grounding chunks of the first candidate, in response order."""

    sources: List[VerificationSource] = []
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return sources
    metadata = getattr(candidates[0], "grounding_metadata", None)
    chunks = getattr(metadata, "grounding_chunks", None) or []
    for chunk in chunks:
        web = getattr(chunk, "web", None)
        uri = getattr(web, "uri", None)
        if uri:
            sources.append(VerificationSource(uri=uri, title=getattr(web, "title", None) or "Source"))
    return sources


def _default_client_factory(config: OracleConfig) -> genai.Client:
    http_options = None
    if config.endpoint_override or config.timeout_seconds:
        http_options = types.HttpOptions(
            base_url=config.endpoint_override or None,
            timeout=int(config.timeout_seconds * 1000) if config.timeout_seconds else None,
        )
    return genai.Client(api_key=config.credential, http_options=http_options)


def supports_grounded_json(model: str) -> bool:
    name = model.rsplit("/", 1)[-1].lower()
    return name.startswith(GROUNDED_JSON_MODEL_PREFIXES)


class GeminiOracle:
    """Oracle client calling ``generate_content`` once per batch.

    A client is created per call from the supplied :class:`OracleConfig` and
    closed once the call returns, so credential or endpoint changes take
    effect without restarting anything.
    """

    name = "gemini"

    def __init__(
        self,
        *,
        client_factory: Optional[Callable[[OracleConfig], Any]] = None,
        use_search: bool = True,
    ) -> None:
        self._client_factory = client_factory or _default_client_factory
        self._use_search = use_search

    def _tools(self) -> Optional[List[types.Tool]]:
        if not self._use_search:
            return None
        return [types.Tool(google_search=types.GoogleSearch())]

    def _generate(self, config: OracleConfig, contents: str, generation_config: types.GenerateContentConfig):
        client = self._client_factory(config)
        try:
            return client.models.generate_content(
                model=config.model,
                contents=contents,
                config=generation_config,
            )
        finally:
            close = getattr(client, "close", None)
            if callable(close):
                close()

    def verification_config(self, config: OracleConfig) -> types.GenerateContentConfig:
        """Generation settings for a batch call against ``config.model``.

        Without search grounding, or on models that accept it alongside a
        response schema, the structured JSON contract is requested directly.
        Otherwise the schema is described in the prompt and the reply is
        parsed from text.
        """

        tools = self._tools()
        instruction = VERIFY_INSTRUCTION.format(language=config.language)
        if tools is None or supports_grounded_json(config.model):
            return types.GenerateContentConfig(
                system_instruction=instruction,
                tools=tools,
                response_mime_type="application/json",
                response_schema=_build_response_schema(),
            )
        return types.GenerateContentConfig(system_instruction=instruction, tools=tools)

    def verify_batch(self, names: Sequence[str], config: OracleConfig) -> OracleResponse:
        generation_config = self.verification_config(config)
        prompt = VERIFY_PROMPT.format(language=config.language, names=", ".join(names))
        if generation_config.response_schema is None:
            prompt += FORMAT_HINT

        LOGGER.debug("Requesting verification of %s name(s) from %s", len(names), config.model)
        try:
            response = self._generate(config, prompt, generation_config)
        except Exception as exc:
            raise OracleError(f"Verification request failed: {exc}") from exc

        sources = extract_sources(response)
        try:
            matches = parse_matches(getattr(response, "text", None))
        except OracleResponseError:
            LOGGER.error("Failed to parse verification response for %s", list(names))
            raise
        return OracleResponse(matches=matches, sources=sources)

    def summarize(self, lines: Sequence[str], config: OracleConfig) -> str:
        prompt = SUMMARY_PROMPT.format(lines="\n".join(lines))
        generation_config = types.GenerateContentConfig(
            system_instruction=SUMMARY_INSTRUCTION.format(language=config.language),
            tools=self._tools(),
        )
        try:
            response = self._generate(config, prompt, generation_config)
        except Exception as exc:
            raise OracleError(f"Summary request failed: {exc}") from exc
        return getattr(response, "text", None) or ""
