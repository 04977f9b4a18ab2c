# contract_analyzer.py: file -> prompt -> model -> Contract
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from document_classifier import ContractTypeResolver
from errors import BackendTransportError, ContractImportError
from ingest import prepare_payload
from llm_provider import LLMProvider
from normalizer import normalize_response
from prompt_builder import build_extraction_prompt
from schemas import Contract, ImportFailure, ImportResult, UploadedDocument

log = logging.getLogger("contractdash.analyzer")


def analyze_contract(
    doc: UploadedDocument,
    provider: LLMProvider,
    now: Optional[datetime] = None,
    contract_id: Optional[str] = None,
    resolver: Optional[ContractTypeResolver] = None,
) -> Contract:
    """
    Run one import end to end. Each step depends on the previous one; the
    first failure aborts the chain with a ContractImportError.

    File reading happens before any network call, so unsupported formats never
    reach the backend.
    """
    payload = prepare_payload(doc, accepts_binary=provider.accepts_binary)
    prompt = build_extraction_prompt(payload)
    images = [payload.base64_data] if payload.is_binary else None

    raw_text = provider.complete(prompt, images=images)

    contract = normalize_response(
        raw_text,
        file_name=doc.file_name,
        now=now,
        contract_id=contract_id,
        resolver=resolver,
    )
    log.info(
        f"Imported '{contract.title}' from {doc.file_name}: "
        f"{contract.contract_type.value} ({contract.type_match}), {contract.status.value}"
    )
    return contract


def to_failure(err: ContractImportError) -> ImportFailure:
    status_code = err.status_code if isinstance(err, BackendTransportError) else None
    return ImportFailure(kind=err.kind, message=err.message, retryable=err.retryable, status_code=status_code)


def import_contract(
    doc: UploadedDocument,
    provider: LLMProvider,
    now: Optional[datetime] = None,
    contract_id: Optional[str] = None,
) -> ImportResult:
    """Same as analyze_contract, but failures come back as a typed ImportResult instead of raising."""
    try:
        contract = analyze_contract(doc, provider, now=now, contract_id=contract_id)
    except ContractImportError as e:
        log.error(f"Import of {doc.file_name} failed [{e.kind}]: {e.message}")
        return ImportResult.failed(to_failure(e))
    return ImportResult.success(contract)
