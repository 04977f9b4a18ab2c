# main.py: local runner: import every document in a folder through the LLM
from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import List

from telemetry import go_quiet
from contract_analyzer import import_contract
from contract_store import ContractStore
from ingest import ingest_folder
from llm_factory import load_provider
from schemas import Contract
from settings import settings


def save_contracts_json(contracts: List[Contract], out_path: Path) -> Path:
    out_path.parent.mkdir(parents=True, exist_ok=True)
    payload = [c.model_dump(mode="json", by_alias=True) for c in contracts]
    out_path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
    return out_path


def main(data_dir: str = "data", outputs_dir: str = "outputs") -> int:
    go_quiet(settings.CD_LOG_LEVEL)

    folder = Path(data_dir)
    if not folder.is_dir():
        print(f"[ERROR] No such folder: {folder}")
        return 2

    provider = load_provider("llm.yaml")
    store = ContractStore()
    failures = 0

    # One import in flight at a time
    for doc in ingest_folder(folder):
        result = import_contract(doc, provider)
        if result.ok:
            store.add(result.contract)
            c = result.contract
            print(f"✓ {doc.file_name}: {c.title} | {c.contract_type.value} | {c.status.value}")
        else:
            failures += 1
            f = result.failure
            hint = " (retry possible)" if f.retryable else ""
            print(f"[FAIL] {doc.file_name}: {f.kind}: {f.message}{hint}")

    out = save_contracts_json(store.all(), Path(outputs_dir) / "contracts.json")
    print(f"=== {len(store)} imported, {failures} failed → {out} ===")
    return 0 if failures == 0 else 1


if __name__ == "__main__":
    sys.exit(main(*sys.argv[1:3]))
