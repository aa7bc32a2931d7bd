from __future__ import annotations

import json
from pathlib import Path

from sqlalchemy import func, select

from app.bootstrap import seed_catalog
from app.models import Protocol, RiskControl, RiskEvent, RiskScenario, User
from app.services.catalog_generator import (
    CatalogGenerator,
    PROTOCOL_TEMPLATES,
    SCENARIO_TEMPLATES,
    scenario_breakdown,
    write_seed_file,
)
from app.services.deepseek_client import DeepSeekError
from app.utils.catalog_seed import SCENARIOS_FILE, load_catalog
from app.utils.demo_seed import DEMO_EMAIL, DEMO_RISKS, seed_demo


def test_seed_catalog_is_idempotent(db_session) -> None:
    # The app already seeded the built-in catalog on startup.
    again = seed_catalog(db_session)
    db_session.commit()
    assert again == {"activities": 0, "riskAreas": 0, "protocols": 0, "scenarios": 0}

    codes = set(db_session.execute(select(Protocol.code)).scalars())
    assert {"contratos_modelo", "politica_privacidad", "manual_empleados"} <= codes
    trabajo = db_session.execute(select(RiskScenario).where(RiskScenario.code == "trabajo_no_registrado")).scalars().one()
    assert trabajo.likelihood == "UNLIKELY"
    assert trabajo.impact == "CATASTROPHIC"
    assert trabajo.risk_score == 10


def test_generated_seed_files_merge_over_builtins(tmp_path: Path) -> None:
    seeds = tmp_path / "seeds"
    seeds.mkdir()
    (seeds / SCENARIOS_FILE).write_text(
        json.dumps(
            [
                {
                    "code": "demanda_laboral",
                    "title": "Demanda laboral por despido",
                    "category": "Laboral",
                    "probability": "HIGH",
                    "impact": "HIGH",
                    "triggers": ["Despido sin causa"],
                },
                {"title": "Escenario Nuevo", "category": "Datos", "probability": "VERY_LOW", "impact": "NEGLIGIBLE"},
            ]
        ),
        encoding="utf-8",
    )
    (seeds / "protocols.json").write_text("not json", encoding="utf-8")

    catalog = load_catalog(seeds)
    scenarios = {s["code"]: s for s in catalog["scenarios"]}
    merged = scenarios["demanda_laboral"]
    assert merged["title"] == "Demanda laboral por despido"
    assert merged["likelihood"] == "LIKELY"
    assert merged["impact"] == "MAJOR"
    assert merged["riskScore"] == 16
    assert scenarios["escenario_nuevo"]["riskScore"] == 1
    assert len(catalog["protocols"]) == len(load_catalog(None)["protocols"])


def test_seed_demo_creates_register_once(db_session) -> None:
    first = seed_demo(db_session)
    assert first["risks"] == len(DEMO_RISKS)
    assert first["controls"] == sum(len(r.controls) for r in DEMO_RISKS)

    again = seed_demo(db_session)
    assert again["risks"] == 0
    assert again["userId"] == first["userId"]

    user = db_session.execute(select(User).where(User.email == DEMO_EMAIL)).scalars().one()
    assert user.profile_type == "BUSINESS"
    assert user.business_profile.business_type == "CONSULTING"

    malpractice = (
        db_session.execute(select(RiskEvent).where(RiskEvent.title.like("Demanda por responsabilidad%")))
        .scalars()
        .one()
    )
    # POSSIBLE x MAJOR = 12; operational STRONG (3) + implemented MODERATE (2)
    assert malpractice.inherent_risk == 12
    assert malpractice.residual_risk == 7
    uncontrolled = db_session.execute(select(RiskEvent).where(RiskEvent.category == "Regulatorio")).scalars().one()
    assert uncontrolled.residual_risk is None
    total_controls = db_session.execute(select(func.count(RiskControl.id))).scalar_one()
    assert total_controls == first["controls"]


class _FakeGenerator:
    is_configured = True

    def __init__(self, replies: list) -> None:
        self.replies = list(replies)
        self.calls = 0

    def generate_json(self, prompt: str, system_prompt: str | None = None):
        self.calls += 1
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


def test_generator_skips_failed_templates(tmp_path: Path) -> None:
    steps = [
        {"title": "Relevar", "description": "Relevar contratos vigentes"},
        {"title": "Redactar", "description": "Redactar plantillas"},
    ]
    fake = _FakeGenerator(
        [
            {"title": "Contratos", "content": {"steps": steps, "objectives": ["Formalizar"]}, "complexity": "weird"},
            DeepSeekError("timeout"),
        ]
    )
    waits: list[float] = []
    generator = CatalogGenerator(fake, delay_seconds=0.5, sleep=waits.append)

    protocols = generator.generate_protocols(PROTOCOL_TEMPLATES[:2])

    assert [p["code"] for p in protocols] == ["contratos_modelo"]
    assert [s["order"] for s in protocols[0]["content"]["steps"]] == [1, 2]
    assert protocols[0]["complexity"] == "MEDIUM"
    assert protocols[0]["priority"] == "HIGH"
    assert waits == [0.5]

    path = write_seed_file(tmp_path / "seeds", "protocols.json", protocols)
    catalog = load_catalog(path.parent)
    merged = next(p for p in catalog["protocols"] if p["code"] == "contratos_modelo")
    assert merged["title"] == "Contratos"


def test_generator_tolerates_malformed_day_counts() -> None:
    steps = [{"title": "Relevar", "description": "Relevar contratos vigentes"}]
    fake = _FakeGenerator(
        [
            {"title": "Contratos", "content": {"steps": steps}, "estimatedImplementationDays": "30 dias"},
            {"title": "Privacidad", "content": {"steps": steps}, "estimatedImplementationDays": 45},
        ]
    )
    generator = CatalogGenerator(fake, delay_seconds=0)

    protocols = generator.generate_protocols(PROTOCOL_TEMPLATES[:2])

    assert [p["code"] for p in protocols] == ["contratos_modelo", "politica_privacidad"]
    assert [p["estimatedImplementationDays"] for p in protocols] == [30, 45]


def test_generator_skips_template_with_unusable_reply() -> None:
    steps = [{"title": "Relevar", "description": "Relevar contratos vigentes"}]
    fake = _FakeGenerator(
        [
            ValueError("unexpected reply shape"),
            {"title": "Privacidad", "content": {"steps": steps}},
        ]
    )
    generator = CatalogGenerator(fake, delay_seconds=0)

    protocols = generator.generate_protocols(PROTOCOL_TEMPLATES[:2])

    assert [p["code"] for p in protocols] == ["politica_privacidad"]
    assert fake.calls == 2


def test_generator_scenarios_and_wizard_data() -> None:
    fake = _FakeGenerator(
        [
            {"title": "Incumplimiento contractual", "triggers": ["Mora"], "consequences": ["Demanda"]},
            {
                "activities": [{"code": "Redacción Contratos", "label": "Redacción de contratos"}],
                "riskAreas": [{"code": "mala_praxis", "label": "Mala praxis", "severity": "high"}],
            },
            {
                "activities": [{"code": "redaccion_contratos", "label": "Redacción de contratos"}],
                "riskAreas": [],
            },
        ]
    )
    generator = CatalogGenerator(fake, delay_seconds=0)

    scenarios = generator.generate_scenarios(SCENARIO_TEMPLATES[:1])
    assert scenarios[0]["code"] == "incumplimiento_de_contrato"
    assert scenarios[0]["riskScore"] == 12
    assert scenario_breakdown(scenarios) == {"byCategory": {"Contractual": 1}, "byLevel": {"HIGH": 1}}

    wizard = generator.generate_wizard_data(professions=["LAWYER"], business_types=["LEGAL_FIRM"])
    assert len(wizard["activities"]) == 1
    activity = wizard["activities"][0]
    assert activity["code"] == "redaccion_contratos"
    assert activity["professions"] == ["LAWYER"]
    assert activity["businessTypes"] == ["LEGAL_FIRM"]
    assert wizard["riskAreas"][0]["severity"] == "HIGH"
    assert fake.calls == 3
