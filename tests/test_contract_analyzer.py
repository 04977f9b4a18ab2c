"""End-to-end import tests with a fake extraction backend."""

import base64

import pytest

from conftest import NOW, FakeProvider
from contract_analyzer import analyze_contract, import_contract
from contract_types import ContractCategory, ContractStatus, ContractType, RiskLevel
from errors import BackendTransportError, EmptyResponseError, UnsupportedFormatError


def test_lease_import_round_trip(lease_upload, lease_text, fake_provider):
    contract = analyze_contract(lease_upload, fake_provider, now=NOW, contract_id="abc")

    assert contract.id == "abc"
    assert contract.title == "Gewerbemietvertrag Büroflächen Berlin"
    assert contract.partner_name == "Lindenhof Immobilien GmbH"
    assert contract.contract_type == ContractType.LEASE
    assert contract.category == ContractCategory.REAL_ESTATE
    assert contract.status == ContractStatus.ACTIVE
    assert contract.risk_level == RiskLevel.MEDIUM
    assert contract.value == 90000.0
    assert contract.tags == ["Miete", "Büro", "Berlin"]
    assert contract.file_name == "mietvertrag.txt"
    assert contract.uploaded_at == NOW

    assert len(fake_provider.calls) == 1
    prompt, images = fake_provider.calls[0]
    assert lease_text in prompt
    assert images is None


def test_pdf_fails_before_any_backend_call(pdf_upload, fake_provider):
    with pytest.raises(UnsupportedFormatError):
        analyze_contract(pdf_upload, fake_provider, now=NOW)
    assert fake_provider.calls == []


def test_binary_backend_receives_image_upload(png_upload, lease_response):
    provider = FakeProvider(response_text=lease_response, accepts_binary=True)
    contract = analyze_contract(png_upload, provider, now=NOW)

    prompt, images = provider.calls[0]
    assert images == [base64.b64encode(png_upload.data).decode("ascii")]
    assert "PNG" not in prompt
    assert contract.contract_type == ContractType.LEASE
    assert contract.file_name == "scan.png"


def test_binary_backend_never_receives_pdf(pdf_upload, lease_response):
    provider = FakeProvider(response_text=lease_response, accepts_binary=True)
    with pytest.raises(UnsupportedFormatError):
        analyze_contract(pdf_upload, provider, now=NOW)
    assert provider.calls == []


def test_backend_failure_propagates(lease_upload):
    provider = FakeProvider(error=BackendTransportError("Ollama API Fehler: 500 Internal Server Error", status_code=500))
    with pytest.raises(BackendTransportError):
        analyze_contract(lease_upload, provider, now=NOW)


class TestImportContract:

    def test_success_result(self, lease_upload, fake_provider):
        result = import_contract(lease_upload, fake_provider, now=NOW)
        assert result.ok
        assert result.contract is not None
        assert result.failure is None

    def test_unsupported_format_result(self, pdf_upload, fake_provider):
        result = import_contract(pdf_upload, fake_provider, now=NOW)
        assert not result.ok
        assert result.contract is None
        assert result.failure.kind == "unsupported_format"
        assert not result.failure.retryable

    def test_transport_failure_is_retryable_and_keeps_status(self, lease_upload):
        provider = FakeProvider(error=BackendTransportError("Ollama API Fehler: 500 Internal Server Error", status_code=500))
        result = import_contract(lease_upload, provider, now=NOW)
        assert result.failure.kind == "backend_transport"
        assert result.failure.retryable
        assert result.failure.status_code == 500

    def test_empty_response_result(self, lease_upload):
        provider = FakeProvider(error=EmptyResponseError("Keine Antwort von Ollama erhalten."))
        result = import_contract(lease_upload, provider, now=NOW)
        assert result.failure.kind == "empty_response"

    def test_malformed_output_result(self, lease_upload):
        provider = FakeProvider(response_text="Leider kann ich das nicht.")
        result = import_contract(lease_upload, provider, now=NOW)
        assert result.failure.kind == "malformed_output"
        assert not result.failure.retryable
