from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from ..models import RiskInput, to_risk_input


def load_scoring_file(path: Path) -> tuple[dict[str, Any] | None, list[RiskInput]]:
    """Read ``{"answers": {...}, "risks": [...]}``; a bare list is read as risks."""
    raw = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(raw, list):
        raw = {"risks": raw}
    if not isinstance(raw, dict):
        raise ValueError("Input JSON must be an object or a list of risks.")

    answers = raw.get("answers")
    if answers is not None and not isinstance(answers, dict):
        raise ValueError("'answers' must be an object.")

    risks: list[RiskInput] = []
    items = raw.get("risks") or []
    if not isinstance(items, list):
        raise ValueError("'risks' must be a list.")
    for idx, item in enumerate(items, start=1):
        if not isinstance(item, dict):
            raise ValueError("Each risk must be an object.")
        risks.append(to_risk_input(item, idx))  # type: ignore[arg-type]
    return answers, risks


def dump_result_file(path: Path, payload: dict[str, object]) -> None:
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
