from __future__ import annotations

from app.services.deepseek_client import DeepSeekError
from app.services.risk_ai_service import RiskAIService, get_risk_ai_service

from conftest import complete_business_wizard, create_risk, signup


class _ScriptedClient:
    """Stands in for DeepSeekClient; returns canned replies and records prompts."""

    is_configured = True

    def __init__(self, json_reply=None, chat_reply: str = "", error: Exception | None = None) -> None:
        self.json_reply = json_reply
        self.chat_reply = chat_reply
        self.error = error
        self.prompts: list[str] = []
        self.messages: list[list[dict[str, str]]] = []

    def generate_json(self, prompt: str, system_prompt: str | None = None):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.json_reply

    def chat(self, messages, **kwargs) -> str:
        self.messages.append(messages)
        return self.chat_reply


def _use(client, fake: _ScriptedClient) -> None:
    client.app.dependency_overrides[get_risk_ai_service] = lambda: RiskAIService(client=fake)


def test_ai_requires_profile_and_key(client) -> None:
    signup(client)
    no_profile = client.post("/api/ai/suggest-risks", json={"count": 3})
    assert no_profile.status_code == 400
    assert no_profile.json() == {"error": "profile_required"}

    complete_business_wizard(client)
    not_configured = client.post("/api/ai/suggest-risks", json={"count": 3})
    assert not_configured.status_code == 503
    assert not_configured.json() == {"error": "ai_not_configured"}


def test_suggest_and_analyze_with_scripted_model(client) -> None:
    signup(client)
    complete_business_wizard(client)
    fake = _ScriptedClient(json_reply=[{"title": "Fuga de datos", "likelihood": "LIKELY", "impact": "MAJOR"}])
    _use(client, fake)

    suggested = client.post("/api/ai/suggest-risks", json={"count": 1})
    assert suggested.status_code == 200
    assert suggested.json()["risks"][0]["title"] == "Fuga de datos"
    assert "Tipo de negocio: TECHNOLOGY" in fake.prompts[0]

    fake.json_reply = {"suggestedLikelihood": "POSSIBLE", "suggestedImpact": "MAJOR", "reasoning": "..."}
    analysis = client.post("/api/ai/analyze-risk", json={"title": "Fuga de datos"})
    assert analysis.json()["analysis"]["suggestedImpact"] == "MAJOR"

    fake.json_reply = {"unexpected": True}
    wrong_shape = client.post("/api/ai/suggest-risks", json={"count": 1})
    assert wrong_shape.status_code == 502
    assert wrong_shape.json()["error"] == "ai_request_failed"


def test_risk_scoped_ai_routes(client) -> None:
    signup(client)
    complete_business_wizard(client)
    risk = create_risk(client)
    fake = _ScriptedClient(json_reply=[{"title": "Cifrado", "controlStrength": "STRONG"}])
    _use(client, fake)

    controls = client.post("/api/ai/recommend-controls", json={"riskId": risk["id"], "count": 1})
    assert controls.status_code == 200
    assert controls.json()["controls"][0]["title"] == "Cifrado"
    assert "16/25" in fake.prompts[-1]

    fake.json_reply = {"recommendedStrategy": "REDUCE", "actions": []}
    plan = client.post("/api/ai/generate-treatment-plan", json={"riskId": risk["id"]})
    assert plan.json()["treatmentPlan"]["recommendedStrategy"] == "REDUCE"
    assert "Sin controles implementados" in fake.prompts[-1]

    missing = client.post("/api/ai/recommend-controls", json={"riskId": risk["id"] + 100})
    assert missing.status_code == 404

    fake.error = DeepSeekError("upstream down")
    failed = client.post("/api/ai/generate-treatment-plan", json={"riskId": risk["id"]})
    assert failed.status_code == 502


def test_chat_passes_history(client) -> None:
    signup(client)
    complete_business_wizard(client)
    fake = _ScriptedClient(chat_reply="Revise la Ley 25.326.")
    _use(client, fake)

    response = client.post(
        "/api/ai/chat",
        json={
            "question": "¿Qué ley aplica a mis bases de datos?",
            "history": [
                {"role": "user", "content": "Hola"},
                {"role": "assistant", "content": "¿En qué puedo ayudarte?"},
            ],
        },
    )
    assert response.status_code == 200
    assert response.json() == {"answer": "Revise la Ley 25.326."}
    messages = fake.messages[0]
    assert messages[0]["role"] == "system"
    assert [m["role"] for m in messages[1:]] == ["user", "assistant", "user"]
    assert messages[-1]["content"] == "¿Qué ley aplica a mis bases de datos?"
