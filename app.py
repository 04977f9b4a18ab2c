# app.py
from __future__ import annotations
from typing import List, Optional
import logging

from fastapi import FastAPI, UploadFile, File, Depends, HTTPException, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from contract_analyzer import analyze_contract, to_failure
from contract_store import ContractStore
from contract_types import ContractCategory, ContractStatus, ContractType, RiskLevel, types_for_category
from errors import ContractImportError
from ingest import decode_base64_upload
from llm_factory import load_provider
from llm_provider import LLMProvider
from schemas import Contract, ContractFilter, ContractStats, UploadedDocument
from seed_contracts import seed_store
from settings import settings
from telemetry import go_quiet

log = logging.getLogger("contractdash.api")

app = FastAPI(title="Contract Dashboard API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CD_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Process-wide working set; no persistence
_store = ContractStore()
_provider: Optional[LLMProvider] = None


def get_store() -> ContractStore:
    return _store


def get_provider() -> LLMProvider:
    global _provider
    if _provider is None:
        _provider = load_provider("llm.yaml")
    return _provider


# --------- Schemas (Pydantic) ---------
class Base64ImportIn(BaseModel):
    file_name: str
    mime_type: str = ""
    content: str  # base64, optionally with a data:<mime>;base64, prefix


class CategoryTypesOut(BaseModel):
    category: ContractCategory
    types: List[ContractType]


class DeleteResult(BaseModel):
    id: str
    status: str  # "deleted"


class HealthOut(BaseModel):
    status: str
    backend_url: str
    model: str


# --------- Error mapping ---------
_STATUS_BY_KIND = {
    "unsupported_format": 415,
    "decode_failure": 422,
    "malformed_output": 502,
    "backend_transport": 502,
    "empty_response": 502,
}


@app.exception_handler(ContractImportError)
async def _import_error_handler(request: Request, exc: ContractImportError):
    failure = to_failure(exc)
    log.error(f"{request.url.path} failed [{exc.kind}]: {exc.message}")
    return JSONResponse(
        status_code=_STATUS_BY_KIND.get(exc.kind, 500),
        content=failure.model_dump(by_alias=True),
    )


# --------- Endpoints ---------
@app.on_event("startup")
def _startup():
    go_quiet(settings.CD_LOG_LEVEL)
    if settings.CD_SEED_ON_STARTUP and len(_store) == 0:
        n = seed_store(_store)
        log.info(f"Seeded {n} sample contracts")


def _import(doc: UploadedDocument, provider: LLMProvider, store: ContractStore) -> Contract:
    contract = analyze_contract(doc, provider)
    return store.add(contract)


@app.post("/contracts/import", response_model=Contract, status_code=201)
async def import_contract_upload(
    file: UploadFile = File(...),
    provider: LLMProvider = Depends(get_provider),
    store: ContractStore = Depends(get_store),
):
    """
    Upload a contract document, extract its metadata with the LLM and add the
    resulting record to the working set.
    """
    data = await file.read()
    doc = UploadedDocument(
        file_name=file.filename or "upload",
        mime_type=file.content_type or "",
        data=data,
    )
    # requests blocks; keep it off the event loop
    return await run_in_threadpool(_import, doc, provider, store)


@app.post("/contracts/import-base64", response_model=Contract, status_code=201)
async def import_contract_base64(
    body: Base64ImportIn,
    provider: LLMProvider = Depends(get_provider),
    store: ContractStore = Depends(get_store),
):
    doc = decode_base64_upload(body.file_name, body.mime_type, body.content)
    return await run_in_threadpool(_import, doc, provider, store)


@app.get("/contracts", response_model=List[Contract])
def list_contracts(
    q: str = "",
    status: Optional[ContractStatus] = Query(None),
    risk_level: Optional[RiskLevel] = Query(None),
    category: Optional[ContractCategory] = Query(None),
    store: ContractStore = Depends(get_store),
):
    flt = ContractFilter(query=q, status=status, risk_level=risk_level, category=category)
    return store.filter(flt)


@app.get("/contracts/stats", response_model=ContractStats)
def contract_stats(store: ContractStore = Depends(get_store)):
    return store.stats()


@app.get("/contracts/{contract_id}", response_model=Contract)
def read_contract(contract_id: str, store: ContractStore = Depends(get_store)):
    contract = store.get(contract_id)
    if contract is None:
        raise HTTPException(404, f"Contract {contract_id} not found")
    return contract


@app.delete("/contracts/{contract_id}", response_model=DeleteResult)
def delete_contract(contract_id: str, store: ContractStore = Depends(get_store)):
    if not store.remove(contract_id):
        raise HTTPException(404, f"Contract {contract_id} not found")
    return DeleteResult(id=contract_id, status="deleted")


@app.get("/contract-types", response_model=List[CategoryTypesOut])
def contract_types():
    return [CategoryTypesOut(category=cat, types=types_for_category(cat)) for cat in ContractCategory]


@app.get("/health", response_model=HealthOut)
def health(provider: LLMProvider = Depends(get_provider)):
    # report what the live provider uses, llm.yaml included
    cfg = provider.config or settings.ollama_config()
    return HealthOut(status="ok", backend_url=cfg.base_url, model=cfg.model)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="127.0.0.1", port=8000, log_level="info")
