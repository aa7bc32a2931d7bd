from __future__ import annotations

from conftest import create_risk, signup


CONTROL = {
    "title": "Cifrado de bases de datos",
    "description": "Cifrado AES-256 de la base de clientes y sus respaldos",
    "type": "PREVENTIVE",
    "category": "TECHNICAL",
    "controlStrength": "STRONG",
}


def test_create_and_list_risks(client) -> None:
    signup(client)
    risk = create_risk(client)
    assert risk["inherentRisk"] == 16
    assert risk["priority"] == "CRITICAL"
    assert risk["status"] == "IDENTIFIED"
    assert risk["residualRisk"] is None
    assert risk["register"]["status"] == "ACTIVE"

    create_risk(client, title="Reclamo laboral", category="Laboral", likelihood="UNLIKELY", impact="MINOR")

    listing = client.get("/api/risks").json()
    assert [r["title"] for r in listing["risks"]] == ["Filtración de datos de clientes", "Reclamo laboral"]
    assert listing["stats"]["total"] == 2
    assert listing["stats"]["critical"] == 1
    assert listing["stats"]["low"] == 1
    assert listing["registerId"] == risk["registerId"]

    filtered = client.get("/api/risks", params={"priority": "low"}).json()
    assert [r["title"] for r in filtered["risks"]] == ["Reclamo laboral"]
    assert filtered["stats"]["total"] == 2

    searched = client.get("/api/risks", params={"search": "clientes"}).json()
    assert len(searched["risks"]) == 1


def test_risk_validation_and_ownership(client) -> None:
    signup(client, email="owner@example.com")
    risk = create_risk(client)

    invalid = client.post("/api/risks", json={"title": "X", "likelihood": "SOMETIMES", "impact": "MAJOR"})
    assert invalid.status_code == 400
    assert invalid.json()["error"] == "invalid_payload"

    client.post("/api/auth/logout")
    signup(client, email="intruder@example.com")
    assert client.get(f"/api/risks/{risk['id']}").status_code == 404
    assert client.patch(f"/api/risks/{risk['id']}", json={"title": "Mío"}).status_code == 404
    assert client.delete(f"/api/risks/{risk['id']}").json() == {"error": "not_found"}
    assert client.get(f"/api/risks/{risk['id']}/controls").status_code == 404


def test_update_recomputes_scores(client) -> None:
    signup(client)
    risk = create_risk(client)

    updated = client.patch(f"/api/risks/{risk['id']}", json={"impact": "MINOR", "status": "ANALYZING"})
    assert updated.status_code == 200
    body = updated.json()["risk"]
    assert body["inherentRisk"] == 8
    assert body["priority"] == "MEDIUM"
    assert body["status"] == "ANALYZING"

    assert client.delete(f"/api/risks/{risk['id']}").json() == {"success": True}
    assert client.get(f"/api/risks/{risk['id']}").status_code == 404


def test_controls_drive_residual_risk(client) -> None:
    signup(client)
    risk = create_risk(client)
    base = f"/api/risks/{risk['id']}/controls"

    planned = client.post(base, json=CONTROL)
    assert planned.status_code == 201
    assert planned.json()["control"]["status"] == "PLANNED"
    assert planned.json()["risk"]["residualRisk"] is None

    operational = client.post(
        base,
        json={**CONTROL, "title": "Seguro de ciberriesgo", "controlStrength": "MODERATE", "status": "OPERATIONAL"},
    )
    assert operational.status_code == 201
    assert operational.json()["risk"]["residualRisk"] == 14
    assert operational.json()["control"]["implementationDate"] is not None

    control_id = planned.json()["control"]["id"]
    implemented = client.put(f"{base}/{control_id}", json={"status": "IMPLEMENTED"})
    assert implemented.status_code == 200
    assert implemented.json()["risk"]["residualRisk"] == 11
    assert implemented.json()["risk"]["residualLikelihood"] == "LIKELY"

    listing = client.get(base).json()["controls"]
    assert [c["status"] for c in listing] == ["IMPLEMENTED", "OPERATIONAL"]

    review = client.post(f"{base}/{control_id}/reviews", json={"effectiveness": 4, "notes": "Sin hallazgos"})
    assert review.status_code == 201
    detail = client.get(f"{base}/{control_id}").json()["control"]
    assert detail["reviews"][0]["effectiveness"] == 4
    assert detail["lastReviewedAt"] is not None

    bad_review = client.post(f"{base}/{control_id}/reviews", json={"effectiveness": 9})
    assert bad_review.status_code == 400

    removed = client.delete(f"{base}/{operational.json()['control']['id']}")
    assert removed.json()["risk"]["residualRisk"] == 13

    client.delete(f"{base}/{control_id}")
    assert client.get(f"/api/risks/{risk['id']}").json()["risk"]["residualRisk"] is None


def test_control_with_unknown_protocol_is_rejected(client) -> None:
    signup(client)
    risk = create_risk(client)
    response = client.post(f"/api/risks/{risk['id']}/controls", json={**CONTROL, "protocolId": 99999})
    assert response.status_code == 400
    assert response.json() == {"error": "invalid_payload", "field": "protocolId"}


def test_treatment_plan_lifecycle(client) -> None:
    signup(client)
    risk = create_risk(client)
    base = f"/api/risks/{risk['id']}/treatment"

    assert client.get(base).json() == {"treatmentPlan": None}

    plan_payload = {
        "strategy": "REDUCE",
        "justification": "Reducir la exposición de datos",
        "actions": [{"id": "a1", "title": "Implementar cifrado"}],
        "targetLikelihood": "UNLIKELY",
        "targetImpact": "MODERATE",
    }
    created = client.post(base, json=plan_payload)
    assert created.status_code == 201
    plan = created.json()["treatmentPlan"]
    assert plan["status"] == "DRAFT"
    assert plan["targetRisk"] == 6
    assert client.get(f"/api/risks/{risk['id']}").json()["risk"]["status"] == "TREATING"

    duplicate = client.post(base, json=plan_payload)
    assert duplicate.status_code == 409
    assert duplicate.json() == {"error": "treatment_plan_exists"}

    approved = client.put(f"{base}/{plan['id']}", json={"status": "APPROVED", "approvedBy": "Dirección"})
    assert approved.json()["treatmentPlan"]["approvedAt"] is not None
    assert approved.json()["treatmentPlan"]["approvedBy"] == "Dirección"
    approved_at = approved.json()["treatmentPlan"]["approvedAt"]

    reapproved = client.put(f"{base}/{plan['id']}", json={"status": "APPROVED", "approvedBy": "Gerencia"})
    assert reapproved.json()["treatmentPlan"]["approvedAt"] == approved_at
    assert reapproved.json()["treatmentPlan"]["approvedBy"] == "Dirección"

    started = client.put(f"{base}/{plan['id']}", json={"status": "IN_PROGRESS", "progress": 30})
    started_at = started.json()["treatmentPlan"]["startedAt"]
    assert started_at is not None
    restarted = client.put(f"{base}/{plan['id']}", json={"status": "IN_PROGRESS", "progress": 60})
    assert restarted.json()["treatmentPlan"]["startedAt"] == started_at
    assert restarted.json()["treatmentPlan"]["progress"] == 60

    done = client.put(f"{base}/{plan['id']}", json={"status": "COMPLETED"})
    assert done.json()["treatmentPlan"]["progress"] == 100
    assert done.json()["riskStatus"] == "MONITORING"
    completed_at = done.json()["treatmentPlan"]["completedAt"]
    assert completed_at is not None
    again = client.put(f"{base}/{plan['id']}", json={"status": "COMPLETED"})
    assert again.json()["treatmentPlan"]["completedAt"] == completed_at
    assert again.json()["treatmentPlan"]["startedAt"] == started_at
    assert again.json()["treatmentPlan"]["approvedAt"] == approved_at

    assert client.get(f"{base}/{plan['id'] + 1}").status_code == 404
    assert client.delete(f"{base}/{plan['id']}").json() == {"success": True}
    assert client.get(base).json() == {"treatmentPlan": None}
    assert client.get(f"/api/risks/{risk['id']}").json()["risk"]["status"] == "EVALUATED"
