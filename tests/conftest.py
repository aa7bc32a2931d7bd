from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path

import pytest


ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
VENV_SITE_PACKAGES = ROOT_DIR / ".venv" / "Lib" / "site-packages"

for path in (ROOT_DIR, SRC_DIR, VENV_SITE_PACKAGES):
    value = str(path)
    if path.exists() and value not in sys.path:
        sys.path.insert(0, value)

# app.main builds an app at import time; keep it away from data/runtime.
_SESSION_TMP = Path(tempfile.mkdtemp(prefix="legalrisk-tests-"))
os.environ["RUNTIME_DIR"] = str(_SESSION_TMP / "runtime")
os.environ["DATABASE_URL"] = f"sqlite:///{(_SESSION_TMP / 'import.db').as_posix()}"
os.environ["SEEDS_DIR"] = str(_SESSION_TMP / "seeds")
os.environ["DEEPSEEK_API_KEY"] = ""
os.environ["DEFAULT_ADMIN_EMAIL"] = ""


@pytest.fixture()
def app_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("RUNTIME_DIR", str(tmp_path / "runtime"))
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{(tmp_path / 'legalrisk.db').as_posix()}")
    monkeypatch.setenv("SEEDS_DIR", str(tmp_path / "seeds"))
    monkeypatch.setenv("SEED_CATALOG_ON_STARTUP", "1")
    monkeypatch.setenv("DEEPSEEK_API_KEY", "")
    return tmp_path


@pytest.fixture()
def client(app_env: Path):
    from fastapi.testclient import TestClient

    from app.main import create_app

    with TestClient(create_app()) as test_client:
        yield test_client


@pytest.fixture()
def db_session(client):
    import app.db as app_db

    with app_db.SessionLocal() as db:
        yield db


def signup(client, email: str = "ana@example.com", password: str = "secret123", name: str = "Ana"):
    response = client.post("/api/auth/signup", json={"name": name, "email": email, "password": password})
    assert response.status_code == 201, response.text
    return response.json()["user"]


def complete_business_wizard(client, **overrides):
    payload = {
        "profileType": "BUSINESS",
        "businessType": "TECHNOLOGY",
        "companySize": "SMALL",
        "jurisdiction": "AR",
        "activities": ["contratos_clientes", "proteccion_datos"],
        "riskExposure": ["datos"],
        "answers": {
            "contratos_escritos": False,
            "politica_privacidad": False,
            "asesor_legal": 2,
            "litigios_previos": 0,
            "capacitacion_legal": True,
            "seguros": ["Responsabilidad civil"],
            "documentos_actualizados": 3,
        },
        "selectedProtocols": ["politica_privacidad"],
    }
    payload.update(overrides)
    response = client.post("/api/wizard/complete", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def create_risk(client, **overrides):
    payload = {
        "title": "Filtración de datos de clientes",
        "description": "Acceso no autorizado a la base de clientes",
        "category": "Datos",
        "likelihood": "LIKELY",
        "impact": "MAJOR",
    }
    payload.update(overrides)
    response = client.post("/api/risks", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["risk"]
