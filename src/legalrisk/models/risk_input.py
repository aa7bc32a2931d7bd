from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, TypedDict


class RawControl(TypedDict, total=False):
    title: str
    control_strength: str
    status: str


class RawRisk(TypedDict, total=False):
    id: Any
    title: str
    likelihood: str
    impact: str
    controls: list[RawControl]


@dataclass(slots=True, frozen=True)
class ControlInput:
    title: str
    control_strength: str
    status: str = "PLANNED"

    def to_payload(self) -> RawControl:
        return {"title": self.title, "control_strength": self.control_strength, "status": self.status}


@dataclass(slots=True, frozen=True)
class RiskInput:
    title: str
    likelihood: str
    impact: str
    id: Any = None
    controls: tuple[ControlInput, ...] = field(default_factory=tuple)


def to_risk_input(payload: RawRisk, index: int = 0) -> RiskInput:
    controls = []
    for raw in payload.get("controls", []) or []:
        if not isinstance(raw, dict):
            raise ValueError("Each control must be an object.")
        controls.append(
            ControlInput(
                title=str(raw.get("title", "")),
                control_strength=str(raw.get("control_strength") or raw.get("controlStrength") or "").upper(),
                status=str(raw.get("status", "PLANNED")).upper(),
            )
        )
    return RiskInput(
        id=payload.get("id", index),
        title=str(payload.get("title", "")),
        likelihood=str(payload.get("likelihood", "")).upper(),
        impact=str(payload.get("impact", "")).upper(),
        controls=tuple(controls),
    )
