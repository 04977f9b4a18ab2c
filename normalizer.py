# normalizer.py
"""
Turns the model's raw text into a validated Contract.

The parsed JSON is treated as an untyped intermediate: every field is coerced
individually here and the dict never leaves this module.
"""

from __future__ import annotations

import json
import logging
import math
import re
import uuid
from datetime import date, datetime, timezone
from pathlib import PurePath
from typing import Any, Dict, List, Optional

from contract_types import ContractStatus, category_for_type, parse_risk_level
from document_classifier import ContractTypeResolver, resolve_contract_type
from errors import MalformedOutputError
from schemas import Contract
from settings import settings

log = logging.getLogger("contractdash.normalizer")

NOTICE_PERIOD_MISSING = "Nicht angegeben"
PARTNER_MISSING = "Unbekannt"
TITLE_MISSING = "Unbenannter Vertrag"

_FENCE = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.IGNORECASE)
_PLAIN_NUMBER = re.compile(r"^-?\d+(?:\.\d+)?$")
_NO_DATE = {"", "null", "none", "n/a", "unbefristet"}


def strip_code_fences(text: str) -> str:
    """Content of the first ``` fenced block if there is one, else the trimmed text."""
    m = _FENCE.search(text)
    if m:
        return m.group(1).strip()
    return text.strip()


def parse_json_object(text: str) -> Dict[str, Any]:
    cleaned = strip_code_fences(text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise MalformedOutputError(f"Modellantwort ist kein gültiges JSON: {e}", raw_text=text) from e
    if not isinstance(data, dict):
        raise MalformedOutputError(
            f"Modellantwort ist kein JSON-Objekt (got {type(data).__name__})", raw_text=text
        )
    return data


def derive_status(end_date: Optional[date], today: date, horizon_days: Optional[int] = None) -> ContractStatus:
    """
    Lifecycle status from the end date alone.

    None -> active (unlimited term); past -> expired; within the horizon
    (inclusive, today counts) -> expiring soon; otherwise active.
    """
    horizon = settings.CD_EXPIRING_HORIZON_DAYS if horizon_days is None else horizon_days
    if end_date is None:
        return ContractStatus.ACTIVE
    if end_date < today:
        return ContractStatus.EXPIRED
    if (end_date - today).days <= horizon:
        return ContractStatus.EXPIRING_SOON
    return ContractStatus.ACTIVE


# ---------- field coercion ----------
def coerce_text(raw: Any, default: str = "") -> str:
    if raw is None or isinstance(raw, (dict, list)):
        return default
    s = str(raw).strip()
    return s or default


def coerce_value(raw: Any) -> float:
    if isinstance(raw, bool):
        return 0.0
    if isinstance(raw, (int, float)):
        value = float(raw)
    elif isinstance(raw, str) and _PLAIN_NUMBER.match(raw.strip()):
        value = float(raw.strip())
    else:
        if raw is not None:
            log.debug(f"Non-numeric contract value {raw!r}; using 0")
        return 0.0
    if math.isnan(value) or math.isinf(value) or value < 0:
        log.debug(f"Out-of-range contract value {raw!r}; using 0")
        return 0.0
    return value


def coerce_currency(raw: Any, default: Optional[str] = None) -> str:
    fallback = default or settings.CD_DEFAULT_CURRENCY
    return coerce_text(raw, fallback).upper()


def coerce_date(raw: Any) -> Optional[date]:
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if not isinstance(raw, str) or raw.strip().lower() in _NO_DATE:
        return None
    try:
        return date.fromisoformat(raw.strip()[:10])
    except ValueError:
        log.debug(f"Unparseable date {raw!r}; treating as missing")
        return None


def coerce_tags(raw: Any) -> List[str]:
    if not isinstance(raw, list):
        return []
    tags: List[str] = []
    for item in raw:
        tag = coerce_text(item)
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def new_contract_id() -> str:
    return str(uuid.uuid4())


def contract_from_fields(
    data: Dict[str, Any],
    file_name: str,
    now: datetime,
    contract_id: Optional[str] = None,
    resolver: Optional[ContractTypeResolver] = None,
    horizon_days: Optional[int] = None,
    status: Optional[ContractStatus] = None,
    uploaded_at: Optional[datetime] = None,
) -> Contract:
    """
    Assemble a Contract from an untyped camelCase field dict.

    Every field is coerced on its own with the defaults above. ``status``
    overrides the date-derived status (manual statuses only come from
    curated data, never from model output).
    """
    raw_type = data.get("contractType") or data.get("category")
    resolution = resolver.resolve(raw_type) if resolver else resolve_contract_type(raw_type)

    end_date = coerce_date(data.get("endDate"))
    if status is None:
        status = derive_status(end_date, now.date(), horizon_days)

    return Contract(
        id=contract_id or new_contract_id(),
        title=coerce_text(data.get("title"), PurePath(file_name).stem or TITLE_MISSING),
        partner_name=coerce_text(data.get("partnerName"), PARTNER_MISSING),
        category=category_for_type(resolution.contract_type),
        contract_type=resolution.contract_type,
        type_match=resolution.match,
        status=status,
        value=coerce_value(data.get("value")),
        currency=coerce_currency(data.get("currency")),
        start_date=coerce_date(data.get("startDate")),
        end_date=end_date,
        notice_period=coerce_text(data.get("noticePeriod"), NOTICE_PERIOD_MISSING),
        risk_level=parse_risk_level(data.get("riskLevel")),
        tags=coerce_tags(data.get("tags")),
        summary=coerce_text(data.get("summary")),
        file_name=file_name,
        uploaded_at=uploaded_at or now,
    )


def normalize_response(
    raw_text: str,
    file_name: str,
    now: Optional[datetime] = None,
    contract_id: Optional[str] = None,
    resolver: Optional[ContractTypeResolver] = None,
    horizon_days: Optional[int] = None,
) -> Contract:
    """
    Build a Contract from raw model output.

    Args:
        raw_text: Text returned by the extraction backend
        file_name: Name of the uploaded file (provenance)
        now: Reference time for status derivation and uploadedAt
        contract_id: Identifier to assign; a fresh UUID when omitted
        resolver: Contract type resolver (module default when omitted)
        horizon_days: ExpiringSoon horizon override

    Raises:
        MalformedOutputError: text is not a JSON object even after fence stripping
    """
    now = now or datetime.now(timezone.utc)
    data = parse_json_object(raw_text)
    return contract_from_fields(
        data,
        file_name=file_name,
        now=now,
        contract_id=contract_id,
        resolver=resolver,
        horizon_days=horizon_days,
    )
