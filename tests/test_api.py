from __future__ import annotations

import httpx
import openai

from conftest import FakeImageClient, FakeOpenAIClient, reader_transport
from services.content_extractor import ContentExtractorService
from services.errors import AUTH_MESSAGE, FETCH_MESSAGE, QUOTA_MESSAGE
from services.image_generator import ImageGeneratorService

PAYLOAD = {
    "articleUrl": "https://example.com/a",
    "panelCount": 3,
    "style": "clean_editorial",
    "slant": "dark",
}


def test_generate_end_to_end(make_pipeline, make_client, openai_client, image_client) -> None:
    seen: list[httpx.Request] = []
    client = make_client(make_pipeline(transport=reader_transport(seen=seen)))

    response = client.post("/api/generate", json=PAYLOAD)

    assert response.status_code == 200
    body = response.json()
    assert body["imageUrl"] == "https://cdn.example.com/strip.png"
    assert body["extraction"]["centralImage"].startswith("An elderly man")
    assert body["extraction"]["supportingDetails"] == "A pigeon reading a price list."
    assert body["extraction"]["hasSupportingDetails"] is True
    assert "Create a 3-panel cartoon strip" in body["prompt"]
    assert "New Yorker" in body["prompt"]
    assert "gallows humor" in body["prompt"]

    assert str(seen[0].url) == "https://r.jina.ai/https://example.com/a"
    assert len(openai_client.responses.calls) == 1
    assert image_client.calls[0][1]["prompt"] == body["prompt"]


def test_validation_short_circuits_pipeline(make_pipeline, make_client, openai_client, image_client) -> None:
    seen: list[httpx.Request] = []
    client = make_client(make_pipeline(transport=reader_transport(seen=seen)))

    response = client.post("/api/generate", json={**PAYLOAD, "articleUrl": "", "panelCount": 7})

    assert response.status_code == 400
    assert response.json() == {"error": "Article URL is required"}
    assert seen == []
    assert openai_client.responses.calls == []
    assert image_client.calls == []


def test_invalid_url_message(make_pipeline, make_client) -> None:
    client = make_client(make_pipeline())

    response = client.post("/api/generate", json={**PAYLOAD, "articleUrl": "not a url"})

    assert response.status_code == 400
    assert response.json() == {"error": "Please enter a valid URL"}


def test_invalid_options(make_pipeline, make_client) -> None:
    client = make_client(make_pipeline())

    assert client.post("/api/generate", json={**PAYLOAD, "panelCount": 2}).json() == {
        "error": "Panel count must be 1, 3, or 4"
    }
    assert client.post("/api/generate", json={**PAYLOAD, "style": "oil"}).json() == {
        "error": "Invalid style"
    }
    assert client.post("/api/generate", json={**PAYLOAD, "slant": "grim"}).json() == {
        "error": "Invalid slant"
    }


def test_malformed_body(make_pipeline, make_client) -> None:
    client = make_client(make_pipeline())

    for content in (b"{not json", b"[1, 3, 4]"):
        response = client.post(
            "/api/generate", content=content, headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid request body"}


def test_reader_404_aborts_before_model_calls(make_pipeline, make_client, openai_client, image_client) -> None:
    client = make_client(make_pipeline(transport=reader_transport(status_code=404, text="")))

    response = client.post("/api/generate", json=PAYLOAD)

    assert response.status_code == 400
    assert response.json() == {"error": FETCH_MESSAGE}
    assert openai_client.responses.calls == []
    assert image_client.calls == []


def test_empty_image_list_is_a_server_error(make_pipeline, make_client) -> None:
    image_generator = ImageGeneratorService(api_key="fal-test", client=FakeImageClient(result={"images": []}))
    client = make_client(make_pipeline(image_generator=image_generator))

    response = client.post("/api/generate", json=PAYLOAD)

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to generate image"}


def test_model_quota_is_429(make_pipeline, make_client, image_client) -> None:
    request = httpx.Request("POST", "https://api.openai.com/v1/responses")
    error = openai.RateLimitError(
        "You exceeded your current quota", response=httpx.Response(429, request=request), body=None
    )
    extractor = ContentExtractorService(api_key="sk-test", client=FakeOpenAIClient(error=error))
    client = make_client(make_pipeline(extractor=extractor))

    response = client.post("/api/generate", json=PAYLOAD)

    assert response.status_code == 429
    assert response.json() == {"error": QUOTA_MESSAGE}
    assert image_client.calls == []


def test_missing_model_key_is_401(make_pipeline, make_client) -> None:
    client = make_client(make_pipeline(extractor=ContentExtractorService(api_key=None)))

    response = client.post("/api/generate", json=PAYLOAD)

    assert response.status_code == 401
    assert response.json() == {"error": AUTH_MESSAGE}


def test_unclassified_failure_includes_message(make_pipeline, make_client) -> None:
    extractor = ContentExtractorService(
        api_key="sk-test", client=FakeOpenAIClient(error=RuntimeError("connection reset"))
    )
    client = make_client(make_pipeline(extractor=extractor))

    response = client.post("/api/generate", json=PAYLOAD)

    assert response.status_code == 500
    assert response.json() == {
        "error": "Failed to generate cartoon strip: OpenAI request failed: connection reset"
    }


def test_health_and_page(make_pipeline, make_client) -> None:
    client = make_client(make_pipeline())

    assert client.get("/health").json() == {"status": "ok"}

    page = client.get("/")
    assert page.status_code == 200
    assert "Cartoon Strip Generator" in page.text
    assert page.headers["X-Frame-Options"] == "DENY"

    script = client.get("/static/app.js")
    assert script.status_code == 200
    assert "hasSupportingDetails" in script.text


def test_model_saying_none_needed_hides_details(make_pipeline, make_client) -> None:
    reply = "CONCEPT: A strike.\n\nCENTRAL IMAGE: A picket sign.\n\nSUPPORTING DETAILS: None Needed"
    extractor = ContentExtractorService(api_key="sk-test", client=FakeOpenAIClient(output_text=reply))
    client = make_client(make_pipeline(extractor=extractor))

    response = client.post("/api/generate", json=PAYLOAD)

    assert response.status_code == 200
    assert response.json()["extraction"]["hasSupportingDetails"] is False


def test_long_url_and_whole_float_panel_count(make_pipeline, make_client) -> None:
    seen: list[httpx.Request] = []
    client = make_client(make_pipeline(transport=reader_transport(seen=seen)))
    article_url = "https://example.com/" + "a" * 2100

    response = client.post("/api/generate", json={**PAYLOAD, "articleUrl": article_url, "panelCount": 3.0})

    assert response.status_code == 200
    assert "Create a 3-panel cartoon strip" in response.json()["prompt"]
    assert str(seen[0].url).endswith("a" * 2100)


def test_generate_is_rate_limited_per_client(make_pipeline, make_client, image_client) -> None:
    client = make_client(make_pipeline(), rate_limit="1/minute")

    first = client.post("/api/generate", json=PAYLOAD)
    second = client.post("/api/generate", json=PAYLOAD)

    assert first.status_code == 200
    assert "img-src 'self' https:" in first.headers["Content-Security-Policy"]
    assert second.status_code == 429
    assert second.json()["error"].startswith("Rate limit exceeded")
    assert len(image_client.calls) == 1


def test_rate_limit_is_per_app(make_pipeline, make_client) -> None:
    for _ in range(2):
        client = make_client(make_pipeline(), rate_limit="1/minute")
        assert client.post("/api/generate", json=PAYLOAD).status_code == 200


def test_production_redirects_to_https(make_pipeline, make_client) -> None:
    client = make_client(make_pipeline(), environment="production")

    response = client.get("/health", follow_redirects=False)

    assert response.status_code == 307
    assert response.headers["location"].startswith("https://testserver/health")
