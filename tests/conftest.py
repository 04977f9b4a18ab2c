"""Pytest configuration and shared fixtures."""

import json
from datetime import date, datetime, timezone
from pathlib import Path
from typing import List, Optional

import pytest

from contract_store import ContractStore
from contract_types import ContractType
from llm_provider import LLMProvider
from schemas import Contract, UploadedDocument

FIXTURES = Path(__file__).parent / "fixtures"

# Fixed reference time for all status derivations
NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)
TODAY = NOW.date()


class FakeProvider(LLMProvider):
    """Records prompts and returns a canned answer (or raises a canned error)."""

    def __init__(self, response_text: str = "", error: Optional[Exception] = None, accepts_binary: bool = False):
        self.response_text = response_text
        self.error = error
        self._accepts_binary = accepts_binary
        self.calls: List[tuple] = []

    @property
    def accepts_binary(self) -> bool:
        return self._accepts_binary

    def complete(self, prompt: str, images: Optional[List[str]] = None) -> str:
        self.calls.append((prompt, images))
        if self.error is not None:
            raise self.error
        return self.response_text


def make_contract(**overrides) -> Contract:
    fields = dict(
        id="c-1",
        title="Büromietvertrag",
        partner_name="Lindenhof Immobilien GmbH",
        contract_type=ContractType.LEASE,
        status="Aktiv",
        value=1000.0,
        currency="EUR",
        start_date=date(2024, 2, 1),
        end_date=None,
        risk_level="Mittel",
        tags=["Miete"],
        summary="",
        file_name="miete.txt",
        uploaded_at=NOW,
    )
    fields.update(overrides)
    return Contract(**fields)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def lease_response() -> str:
    """Well-formed model answer for the lease fixture."""
    return json.dumps({
        "title": "Gewerbemietvertrag Büroflächen Berlin",
        "partnerName": "Lindenhof Immobilien GmbH",
        "contractType": "Mietvertrag",
        "value": 90000,
        "currency": "EUR",
        "startDate": "2024-02-01",
        "endDate": None,
        "noticePeriod": "6 Monate zum Quartalsende",
        "riskLevel": "Mittel",
        "summary": "Anmietung von 420 m² Büroflächen. Unbefristet mit sechsmonatiger Kündigungsfrist.",
        "tags": ["Miete", "Büro", "Berlin"],
    }, ensure_ascii=False)


@pytest.fixture
def lease_text() -> str:
    return (FIXTURES / "mietvertrag.txt").read_text(encoding="utf-8")


@pytest.fixture
def lease_upload(lease_text) -> UploadedDocument:
    return UploadedDocument(file_name="mietvertrag.txt", mime_type="text/plain", data=lease_text.encode("utf-8"))


@pytest.fixture
def pdf_upload() -> UploadedDocument:
    return UploadedDocument(file_name="vertrag.pdf", mime_type="application/pdf", data=b"%PDF-1.7\n%\xe2\xe3\xcf\xd3\n")


@pytest.fixture
def png_upload() -> UploadedDocument:
    """Photographed contract page."""
    return UploadedDocument(file_name="scan.png", mime_type="image/png", data=b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR")


@pytest.fixture
def fake_provider(lease_response) -> FakeProvider:
    return FakeProvider(response_text=lease_response)


@pytest.fixture
def store() -> ContractStore:
    return ContractStore()
