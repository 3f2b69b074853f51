"""리드 수집(Lead capture) 필드 정의/정규화 헬퍼입니다."""

import json
import uuid
from typing import Any


FIELD_LIBRARY: dict[str, dict[str, Any]] = {
    "first_name": {"label": "First name", "placeholder": "Jane", "required": False},
    "last_name": {"label": "Last name", "placeholder": "Smith", "required": False},
    "phone": {"label": "Phone number", "placeholder": "(201) 555-0123", "required": False},
    "email": {"label": "Email", "placeholder": "name@example.com", "required": True},
    "company": {"label": "Company", "placeholder": "Acme Inc.", "required": False},
}

DEFAULT_TITLE = "Last step: get your result by email"
DEFAULT_SUBTITLE = "Enter your email and (optionally) your name to receive a summary of your result."
DEFAULT_CTA_LABEL = "See result"
DEFAULT_DISCLAIMER = "We store your result and email you the link."


def _new_field_id() -> str:
    return f"lead-{uuid.uuid4().hex[:12]}"


def create_field(field_type: str, overrides: dict | None = None) -> dict:
    overrides = overrides or {}
    template = FIELD_LIBRARY[field_type]
    placeholder = overrides.get("placeholder")
    required = overrides.get("required")
    return {
        "id": str(overrides.get("id") or _new_field_id()),
        "type": field_type,
        "label": str(overrides.get("label") or template["label"]),
        "placeholder": template["placeholder"] if placeholder is None else str(placeholder),
        "required": template["required"] if required is None else bool(required),
    }


def default_fields() -> list[dict]:
    return [
        create_field("first_name"),
        create_field("email", {"required": True}),
    ]


def sanitize_fields(raw: Any) -> list[dict]:
    """저장된 JSON/목록을 필드 라이브러리 기준으로 정규화한다. 유효한 필드가 없으면 기본 필드."""
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            return default_fields()
    if not isinstance(raw, list):
        return default_fields()

    rows = []
    seen_ids = set()
    for index, item in enumerate(raw):
        if not isinstance(item, dict):
            continue
        field_type = item.get("type")
        if field_type not in FIELD_LIBRARY:
            continue
        field_id = str(item.get("id") or f"lead-{index}-{uuid.uuid4().hex[:6]}")
        if field_id in seen_ids:
            continue
        seen_ids.add(field_id)
        rows.append(create_field(field_type, {**item, "id": field_id}))
    return rows or default_fields()


def build_name(fields: list[dict], values: dict[str, str]) -> str:
    pieces = []
    for field_type in ("first_name", "last_name"):
        field = next((row for row in fields if row["type"] == field_type), None)
        if field:
            pieces.append(str(values.get(field["id"]) or "").strip())
    return " ".join(piece for piece in pieces if piece).strip()


def extract_email(fields: list[dict], values: dict[str, str]) -> str:
    field = next((row for row in fields if row["type"] == "email"), None)
    if not field:
        return ""
    return str(values.get(field["id"]) or "").strip()


def has_any_value(values: dict[str, str]) -> bool:
    return any(str(value or "").strip() for value in (values or {}).values())


def missing_required(fields: list[dict], values: dict[str, str]) -> list[str]:
    return [
        row["label"]
        for row in fields
        if row.get("required") and not str(values.get(row["id"]) or "").strip()
    ]


def build_snapshot(fields: list[dict], values: dict[str, str]) -> list[dict]:
    return [
        {
            "field_id": row["id"],
            "label": row["label"],
            "type": row["type"],
            "required": bool(row.get("required")),
            "value": str(values.get(row["id"]) or "").strip(),
        }
        for row in fields
    ]
