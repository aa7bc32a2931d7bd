import json
from typing import Any


def to_json(data: Any) -> str:
    return json.dumps(data, ensure_ascii=False, default=str)


def from_json(value: str | None, fallback: Any):
    try:
        return json.loads(value) if value else fallback
    except ValueError:
        return fallback


def json_list(value: str | None) -> list:
    data = from_json(value, [])
    return data if isinstance(data, list) else []


def json_dict(value: str | None) -> dict:
    data = from_json(value, {})
    return data if isinstance(data, dict) else {}
