from __future__ import annotations

import tomllib
from pathlib import Path

from .core.scoring import inherent_risk, priority_for_score, residual_risk, wizard_risk_score

__version__ = "0.1.0"


def get_runtime_version() -> str:
    candidates = [Path.cwd() / "pyproject.toml", Path(__file__).resolve().parents[2] / "pyproject.toml"]
    for path in dict.fromkeys(candidates):
        if not path.exists():
            continue
        try:
            data = tomllib.loads(path.read_text(encoding="utf-8"))
        except (OSError, tomllib.TOMLDecodeError):
            continue
        project = data.get("project", {}) or {}
        if project.get("name") != "legalrisk":
            continue
        version = str(project.get("version", "")).strip()
        if version:
            return version
    return __version__


__all__ = [
    "__version__",
    "get_runtime_version",
    "inherent_risk",
    "priority_for_score",
    "residual_risk",
    "wizard_risk_score",
]
