from __future__ import annotations

import json
from pathlib import Path

from legalrisk.cli.main import main


EXAMPLE_INPUT = Path(__file__).resolve().parents[1] / "data" / "examples" / "score_input.json"


def test_legalrisk_score_cli_smoke(tmp_path: Path) -> None:
    output_path = tmp_path / "result.json"

    code = main([str(EXAMPLE_INPUT), "--out", str(output_path)])

    assert code == 0
    result = json.loads(output_path.read_text(encoding="utf-8"))
    assert isinstance(result.get("risks"), list)
    assert len(result["matrix"]) == 25
    assert isinstance(result["wizard"]["risk_score"], int)
    first = result["risks"][0]
    assert first["inherent_risk"] >= result["risks"][-1]["inherent_risk"]


def test_legalrisk_score_cli_top_and_missing_input(tmp_path: Path) -> None:
    output_path = tmp_path / "top.json"
    assert main([str(EXAMPLE_INPUT), "--out", str(output_path), "--top", "1"]) == 0
    assert len(json.loads(output_path.read_text(encoding="utf-8"))["risks"]) == 1

    assert main([str(tmp_path / "missing.json"), "--out", str(output_path)]) == 2


def test_legalrisk_score_cli_rejects_invalid_input(tmp_path: Path) -> None:
    input_path = tmp_path / "bad.json"
    input_path.write_text(json.dumps({"risks": "nope"}), encoding="utf-8")

    assert main([str(input_path), "--out", str(tmp_path / "out.json")]) == 2

    input_path.write_text(json.dumps({"risks": 5}), encoding="utf-8")
    assert main([str(input_path), "--out", str(tmp_path / "out.json")]) == 2

    input_path.write_text(json.dumps({"answers": {"seguros": 5}, "risks": []}), encoding="utf-8")
    assert main([str(input_path), "--out", str(tmp_path / "out.json")]) == 0


def test_app_health_smoke(client) -> None:
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}

    health = client.get("/api/health")
    assert health.status_code == 200
    assert health.json()["status"] == "ok"
    assert health.json()["version"]
