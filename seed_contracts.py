#!/usr/bin/env python3
"""
Load the initial dashboard working set from YAML.
Run directly to print what would be seeded.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

import yaml

from contract_store import ContractStore
from contract_types import MANUAL_STATUSES, ContractStatus
from normalizer import coerce_text, contract_from_fields
from schemas import Contract

SEED_FILE = Path(__file__).parent / "seeds" / "sample_contracts.yml"


def _manual_status(raw) -> Optional[ContractStatus]:
    # only Entwurf/Gekündigt are taken from the file; the rest is derived
    for status in MANUAL_STATUSES:
        if raw == status.value:
            return status
    return None


def _contract_from_seed(raw: dict, now: datetime) -> Contract:
    return contract_from_fields(
        raw,
        file_name=coerce_text(raw.get("fileName")),
        now=now,
        contract_id=coerce_text(raw.get("id")) or None,
        status=_manual_status(raw.get("status")),
        uploaded_at=raw.get("uploadedAt"),
    )


def load_seed_contracts(path: Path = SEED_FILE, now: Optional[datetime] = None) -> List[Contract]:
    now = now or datetime.now(timezone.utc)
    raw = yaml.safe_load(path.read_text(encoding="utf-8")) or []
    if not isinstance(raw, list):
        raise ValueError(f"{path} must contain a list of contracts")
    return [_contract_from_seed(item, now) for item in raw]


def seed_store(store: ContractStore, path: Path = SEED_FILE, now: Optional[datetime] = None) -> int:
    contracts = load_seed_contracts(path, now)
    store.replace_all(contracts)
    return len(contracts)


if __name__ == "__main__":
    for c in load_seed_contracts():
        print(f"{c.id:>4}  {c.title:<35} {c.contract_type.value:<22} {c.status.value}")
