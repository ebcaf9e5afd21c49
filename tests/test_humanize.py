from __future__ import annotations

from app.core.exceptions import IntegrationError

HEADERS = {"x-user-id": "user-1"}


def words(count):
    return " ".join(f"word{i}" for i in range(count))


def test_humanize_requires_user_header(client, fake_humanizer):
    response = client.post("/api/humanize", json={"text": "hello"})

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}
    assert fake_humanizer.calls == []


def test_humanize_returns_rewritten_text(client, fake_humanizer):
    response = client.post("/api/humanize", json={"text": "hello there", "tone": "Friendly"}, headers=HEADERS)

    assert response.status_code == 200
    assert response.json() == {"text": "Rewritten text."}
    assert fake_humanizer.calls == [("humanize", "hello there", "Friendly")]


def test_humanize_defaults_to_standard_tone(client, fake_humanizer):
    client.post("/api/humanize", json={"text": "hello"}, headers=HEADERS)

    assert fake_humanizer.calls == [("humanize", "hello", "Standard")]


def test_free_user_at_limit_proceeds(client, fake_humanizer):
    response = client.post("/api/humanize", json={"text": words(100)}, headers=HEADERS)

    assert response.status_code == 200


def test_free_user_over_limit_is_forbidden_before_upstream_call(client, fake_humanizer):
    response = client.post("/api/humanize", json={"text": words(101)}, headers=HEADERS)

    assert response.status_code == 403
    assert response.json() == {"error": "Subscription required for over 100 words."}
    assert fake_humanizer.calls == []


def test_subscribed_user_over_limit_proceeds(client, store, fake_humanizer):
    store.update_user_subscription("user-1", True, "sub_1")

    response = client.post("/api/humanize", json={"text": words(101)}, headers=HEADERS)

    assert response.status_code == 200
    assert len(fake_humanizer.calls) == 1


def test_word_limit_is_configurable(client, use_settings, fake_humanizer):
    use_settings(free_word_limit=5)

    response = client.post("/api/humanize", json={"text": words(6)}, headers=HEADERS)

    assert response.status_code == 403
    assert fake_humanizer.calls == []


def test_humanize_missing_text_is_bad_request(client):
    response = client.post("/api/humanize", json={"tone": "Friendly"}, headers=HEADERS)

    assert response.status_code == 400
    assert "text" in response.json()["error"]


def test_humanize_upstream_error_is_surfaced(client, fake_humanizer):
    async def failing(text, tone="Standard"):
        raise IntegrationError("model overloaded")

    fake_humanizer.humanize = failing

    response = client.post("/api/humanize", json={"text": "hello"}, headers=HEADERS)

    assert response.status_code == 500
    assert response.json() == {"error": "LLM API Error", "details": "model overloaded"}


def test_humanize_creates_user_on_first_request(client, store):
    client.post("/api/humanize", json={"text": "hello"}, headers={"x-user-id": "fresh"})

    assert store.backend.get_by_id("fresh") is not None


def test_detect_requires_user_header(client):
    response = client.post("/api/detect-ai", json={"text": "hello"})

    assert response.status_code == 401


def test_detect_empty_text_skips_upstream(client, fake_humanizer):
    for body in ({"text": ""}, {"text": "   \n\t"}, {}):
        response = client.post("/api/detect-ai", json=body, headers=HEADERS)

        assert response.status_code == 200
        assert response.json() == {"aiPercentage": 0}
    assert fake_humanizer.calls == []


def test_detect_returns_percentage(client, fake_humanizer):
    response = client.post("/api/detect-ai", json={"text": "Furthermore, it is crucial."}, headers=HEADERS)

    assert response.status_code == 200
    assert response.json() == {"aiPercentage": 42}
    assert fake_humanizer.calls == [("detect", "Furthermore, it is crucial.")]


def test_detect_upstream_error_is_surfaced(client, fake_humanizer):
    async def failing(text):
        raise IntegrationError("timed out")

    fake_humanizer.detect_ai_percentage = failing

    response = client.post("/api/detect-ai", json={"text": "hello"}, headers=HEADERS)

    assert response.status_code == 500
    assert response.json()["details"] == "timed out"
