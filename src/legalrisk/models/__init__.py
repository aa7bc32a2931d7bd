from .risk_input import ControlInput, RawRisk, RiskInput, to_risk_input

__all__ = ["ControlInput", "RawRisk", "RiskInput", "to_risk_input"]
