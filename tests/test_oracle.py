"""Unit tests for the oracle clients and response parsing."""
from __future__ import annotations

import json
from types import SimpleNamespace

import pytest

from port_verifier.config import DEFAULT_MODEL, OracleConfig
from port_verifier.oracle.base import OracleError, OracleResponseError, parse_matches
from port_verifier.oracle.gemini import FORMAT_HINT, GeminiOracle, extract_sources, supports_grounded_json
from port_verifier.oracle.sample import StaticOracle
from port_verifier.rate_limit import RateLimitedOracle, RateLimiter

PAYLOAD = json.dumps(
    [
        {
            "originalName": "USLAX",
            "portCode": "USLAX",
            "localizedName": "洛杉矶",
            "countryName": "United States",
            "remarks": "Sea port",
        },
        {
            "originalName": "SHEKOU",
            "portCode": "CNSWA",
            "localizedName": "蛇口",
            "countryName": "China",
            "remarks": "",
        },
    ],
    ensure_ascii=False,
)


def _response(text, chunks=()):
    metadata = SimpleNamespace(grounding_chunks=list(chunks))
    return SimpleNamespace(text=text, candidates=[SimpleNamespace(grounding_metadata=metadata)])


def _chunk(uri, title=None):
    return SimpleNamespace(web=SimpleNamespace(uri=uri, title=title))


class FakeClient:
    def __init__(self, response=None, error=None) -> None:
        self.requests: list[dict] = []
        self._response = response
        self._error = error
        self.models = self
        self.closed = False

    def generate_content(self, **kwargs):
        self.requests.append(kwargs)
        if self._error is not None:
            raise self._error
        return self._response

    def close(self) -> None:
        self.closed = True


def test_parse_matches_reads_structured_list() -> None:
    matches = parse_matches(PAYLOAD)

    assert [match.original_name for match in matches] == ["USLAX", "SHEKOU"]
    assert matches[1].code == "CNSWA"
    assert matches[1].localized_name == "蛇口"


def test_parse_matches_accepts_code_fence_and_missing_optional_fields() -> None:
    matches = parse_matches('```json\n[{"originalName": "Hamburg", "portCode": "DEHAM"}]\n```')

    assert matches[0].code == "DEHAM"
    assert matches[0].country_name == ""


@pytest.mark.parametrize(
    "text",
    [None, "", "   ", "not json", '{"originalName": "x"}', "[1, 2]", '[{"portCode": "USLAX"}]'],
)
def test_parse_matches_rejects_bad_payloads(text) -> None:
    with pytest.raises(OracleResponseError):
        parse_matches(text)


def test_extract_sources_keeps_order_and_skips_chunks_without_uri() -> None:
    response = _response(
        PAYLOAD,
        [_chunk("https://unece.org/a", "UNECE"), SimpleNamespace(web=None), _chunk("https://b.example")],
    )

    sources = extract_sources(response)

    assert [(source.uri, source.title) for source in sources] == [
        ("https://unece.org/a", "UNECE"),
        ("https://b.example", "Source"),
    ]
    assert extract_sources(SimpleNamespace(candidates=None)) == []


def test_gemini_verify_batch_uses_explicit_config() -> None:
    client = FakeClient(_response(PAYLOAD, [_chunk("https://unece.org")]))
    seen_configs: list[OracleConfig] = []

    def factory(config: OracleConfig) -> FakeClient:
        seen_configs.append(config)
        return client

    config = OracleConfig(credential="key", endpoint_override="https://proxy.example", model="gemini-3-pro-preview")
    oracle = GeminiOracle(client_factory=factory)

    response = oracle.verify_batch(["USLAX", "SHEKOU"], config)

    assert seen_configs == [config]
    assert client.requests[0]["model"] == "gemini-3-pro-preview"
    assert "USLAX, SHEKOU" in client.requests[0]["contents"]
    assert client.requests[0]["config"].response_mime_type == "application/json"
    assert [match.code for match in response.matches] == ["USLAX", "CNSWA"]
    assert [source.uri for source in response.sources] == ["https://unece.org"]


def test_gemini_verify_batch_wraps_transport_errors() -> None:
    client = FakeClient(error=ConnectionError("reset"))
    oracle = GeminiOracle(client_factory=lambda config: client)

    with pytest.raises(OracleError) as excinfo:
        oracle.verify_batch(["USLAX"], OracleConfig())

    assert "reset" in str(excinfo.value)
    assert client.closed


def test_default_model_gets_schema_together_with_search() -> None:
    generation_config = GeminiOracle().verification_config(OracleConfig())

    assert DEFAULT_MODEL.startswith("gemini-3")
    assert generation_config.tools
    assert generation_config.response_mime_type == "application/json"
    assert generation_config.response_schema is not None


def test_older_model_with_search_describes_format_in_prompt() -> None:
    client = FakeClient(_response(PAYLOAD))
    oracle = GeminiOracle(client_factory=lambda config: client)

    response = oracle.verify_batch(["USLAX", "SHEKOU"], OracleConfig(model="gemini-2.5-flash"))

    sent = client.requests[0]
    assert sent["config"].tools
    assert sent["config"].response_mime_type is None
    assert sent["config"].response_schema is None
    assert sent["contents"].endswith(FORMAT_HINT)
    assert [match.code for match in response.matches] == ["USLAX", "CNSWA"]


def test_older_model_without_search_keeps_schema() -> None:
    generation_config = GeminiOracle(use_search=False).verification_config(OracleConfig(model="gemini-2.5-flash"))

    assert generation_config.tools is None
    assert generation_config.response_schema is not None


@pytest.mark.parametrize(
    ("model", "expected"),
    [("gemini-3-flash-preview", True), ("models/gemini-3-pro", True), ("gemini-2.5-flash", False)],
)
def test_supports_grounded_json(model: str, expected: bool) -> None:
    assert supports_grounded_json(model) is expected


def test_gemini_client_is_closed_after_each_call() -> None:
    clients: list[FakeClient] = []

    def factory(config: OracleConfig) -> FakeClient:
        clients.append(FakeClient(_response(PAYLOAD)))
        return clients[-1]

    oracle = GeminiOracle(client_factory=factory)

    oracle.verify_batch(["USLAX"], OracleConfig())
    oracle.summarize(["USLAX -> 洛杉矶 (USLAX)"], OracleConfig())

    assert len(clients) == 2
    assert all(client.closed for client in clients)


def test_gemini_verify_batch_rejects_empty_text() -> None:
    oracle = GeminiOracle(client_factory=lambda config: FakeClient(_response(None)))

    with pytest.raises(OracleResponseError):
        oracle.verify_batch(["USLAX"], OracleConfig())


def test_gemini_summarize_returns_empty_string_for_missing_text() -> None:
    client = FakeClient(_response(None))
    oracle = GeminiOracle(client_factory=lambda config: client, use_search=False)

    assert oracle.summarize(["USLAX -> 洛杉矶 (USLAX), country: United States"], OracleConfig()) == ""
    assert client.requests[0]["config"].tools is None


def test_static_oracle_omits_unknown_names() -> None:
    oracle = StaticOracle(
        {"uslax": {"code": "USLAX", "country_name": "United States"}},
        sources=[{"uri": "https://unece.org"}],
    )

    response = oracle.verify_batch(["USLAX", "Atlantis"], OracleConfig())

    assert [match.original_name for match in response.matches] == ["USLAX"]
    assert response.sources[0].title == "Source"


def test_rate_limited_oracle_delegates_calls() -> None:
    inner = StaticOracle({"uslax": {"code": "USLAX"}}, summary="done")
    wrapper = RateLimitedOracle(inner, display_name="Limited", rate_limiter=RateLimiter(None))

    response = wrapper.verify_batch(["USLAX"], OracleConfig())

    assert wrapper.name == "Limited"
    assert wrapper.wrapped is inner
    assert response.matches[0].code == "USLAX"
    assert wrapper.summarize(["x"], OracleConfig()) == "done"


def test_rate_limiter_interval_from_calls_per_minute() -> None:
    assert RateLimiter(30).interval == 2.0
    assert RateLimiter(None).interval == 0.0
