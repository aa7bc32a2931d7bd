from __future__ import annotations

from conftest import complete_business_wizard, signup


def test_questions_and_score(client) -> None:
    questions = client.get("/api/wizard/questions").json()
    ids = [q["id"] for q in questions["questions"]]
    assert "contratos_escritos" in ids
    assert "seguros" in ids
    assert len(ids) == 7

    partial = client.post("/api/wizard/score", json={"answers": {"contratos_escritos": False}})
    assert partial.status_code == 200
    assert partial.json() == {"riskScore": 35, "level": "medium", "allAnswered": False}

    for seguros in (5, True):
        odd = client.post("/api/wizard/score", json={"answers": {"seguros": seguros}})
        assert odd.status_code == 200
        assert odd.json() == {"riskScore": 20, "level": "low", "allAnswered": False}


def test_activities_require_profile_fields(client) -> None:
    missing = client.get("/api/wizard/activities")
    assert missing.status_code == 400
    assert missing.json()["error"] == "missing_profile_type"

    no_profession = client.get("/api/wizard/activities", params={"profileType": "PROFESSIONAL"})
    assert no_profession.status_code == 400
    assert no_profession.json() == {"error": "missing_fields", "field": "profession"}

    doctor = client.get("/api/wizard/activities", params={"profileType": "PROFESSIONAL", "profession": "DOCTOR"})
    assert doctor.status_code == 200
    body = doctor.json()
    activity_ids = {a["id"] for a in body["activities"]}
    assert "atencion_pacientes" in activity_ids
    assert "manejo_datos_clientes" in activity_ids
    assert "representacion_judicial" not in activity_ids
    severities = [a["severity"] for a in body["riskAreas"]]
    assert severities == sorted(severities, key=["HIGH", "MEDIUM", "LOW"].index)


def test_recommended_protocols_for_business(client) -> None:
    response = client.get(
        "/api/wizard/recommended-protocols",
        params={"profileType": "BUSINESS", "businessType": "TECHNOLOGY"},
    )
    assert response.status_code == 200
    codes = {p["code"] for p in response.json()["protocols"]}
    assert {"contratos_modelo", "politica_privacidad"} <= codes


def test_complete_without_session_defers_to_signup(client) -> None:
    payload = {
        "profileType": "PROFESSIONAL",
        "profession": "LAWYER",
        "answers": {"contratos_escritos": True},
        "selectedProtocols": ["contratos_modelo"],
    }
    deferred = client.post("/api/wizard/complete", json=payload)
    assert deferred.status_code == 200
    body = deferred.json()
    assert body["requiresAuth"] is True
    assert body["wizardData"]["profession"] == "LAWYER"

    assert client.post("/api/wizard/complete-after-signup", json=payload).status_code == 401

    signup(client, email="lawyer@example.com")
    done = client.post("/api/wizard/complete-after-signup", json=body["wizardData"])
    assert done.status_code == 201
    assert done.json()["assignedProtocols"] == ["contratos_modelo"]

    profile = client.get("/api/user/profile").json()
    assert profile["user"]["profileType"] == "PROFESSIONAL"
    assert profile["professionalProfile"]["profession"] == "LAWYER"


def test_complete_scores_server_side_and_skips_unknown_protocols(client) -> None:
    signup(client)
    result = complete_business_wizard(
        client,
        riskScore=0,
        selectedProtocols=["politica_privacidad", "does_not_exist", "politica_privacidad"],
    )
    assert result["riskScore"] == 45
    assert result["level"] == "medium"
    assert result["assignedProtocols"] == ["politica_privacidad"]

    protocols = client.get("/api/protocols").json()
    assert protocols["stats"]["total"] == 1

    overview = client.get("/api/dashboard/overview").json()
    assert overview["riskScore"] == 45
    assert overview["riskLevel"] == "medium"
    assert overview["hasRegister"] is False
    assert overview["profile"]["businessType"] == "TECHNOLOGY"


def test_complete_validates_profile_fields(client) -> None:
    signup(client)
    response = client.post("/api/wizard/complete", json={"profileType": "BUSINESS"})
    assert response.status_code == 400
    assert response.json()["error"] == "invalid_payload"


def test_complete_scores_non_list_insurance_as_uninsured(client) -> None:
    signup(client)
    answers = {
        "contratos_escritos": False,
        "politica_privacidad": False,
        "asesor_legal": 2,
        "litigios_previos": 0,
        "capacitacion_legal": True,
        "seguros": True,
        "documentos_actualizados": 3,
    }
    result = complete_business_wizard(client, answers=answers)
    assert result["riskScore"] == 65
    assert result["level"] == "high"
