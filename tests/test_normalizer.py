"""Tests for response normalization: fences, JSON, status, coercion, record assembly."""

import json
from datetime import date, timedelta

import pytest

from conftest import NOW, TODAY
from contract_types import ContractCategory, ContractStatus, ContractType, RiskLevel
from errors import MalformedOutputError
from normalizer import (
    coerce_date, coerce_tags, coerce_value, contract_from_fields, derive_status, normalize_response,
    parse_json_object, strip_code_fences,
)


class TestStripCodeFences:

    def test_json_fence(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_untagged_fence_with_prose_around(self):
        text = 'Hier ist das Ergebnis:\n```\n{"a": 1}\n```\nViel Erfolg!'
        assert strip_code_fences(text) == '{"a": 1}'

    def test_only_first_block_is_used(self):
        text = '```json\n{"a": 1}\n```\n```json\n{"b": 2}\n```'
        assert strip_code_fences(text) == '{"a": 1}'

    def test_unfenced_text_is_trimmed(self):
        assert strip_code_fences('  {"a": 1}\n') == '{"a": 1}'

    @pytest.mark.parametrize("text", ['{"a": 1}', '```json\n{"a": 1}\n```', "kein json"])
    def test_idempotent(self, text):
        once = strip_code_fences(text)
        assert strip_code_fences(once) == once


class TestParseJsonObject:

    def test_fenced_and_bare_parse_identically(self, lease_response):
        fenced = f"```json\n{lease_response}\n```"
        assert parse_json_object(fenced) == parse_json_object(lease_response)

    def test_malformed_json_is_not_repaired(self):
        with pytest.raises(MalformedOutputError) as exc_info:
            parse_json_object('{"title": "Mietvertrag",}')
        assert exc_info.value.kind == "malformed_output"
        assert exc_info.value.raw_text == '{"title": "Mietvertrag",}'

    @pytest.mark.parametrize("text", ["[1, 2]", '"text"', "null"])
    def test_non_object_json_is_rejected(self, text):
        with pytest.raises(MalformedOutputError):
            parse_json_object(text)


class TestDeriveStatus:

    def test_no_end_date_is_active(self):
        assert derive_status(None, TODAY) == ContractStatus.ACTIVE

    @pytest.mark.parametrize("days", [1, 30, 400])
    def test_past_end_date_is_expired(self, days):
        assert derive_status(TODAY - timedelta(days=days), TODAY) == ContractStatus.EXPIRED

    @pytest.mark.parametrize("days", [0, 1, 45, 90])
    def test_within_horizon_is_expiring_soon(self, days):
        assert derive_status(TODAY + timedelta(days=days), TODAY) == ContractStatus.EXPIRING_SOON

    @pytest.mark.parametrize("days", [91, 365])
    def test_beyond_horizon_is_active(self, days):
        assert derive_status(TODAY + timedelta(days=days), TODAY) == ContractStatus.ACTIVE

    def test_custom_horizon(self):
        assert derive_status(TODAY + timedelta(days=31), TODAY, horizon_days=30) == ContractStatus.ACTIVE


class TestCoercion:

    @pytest.mark.parametrize("raw,expected", [
        (12000, 12000.0),
        (99.5, 99.5),
        ("4500", 4500.0),
        ("4.500,00 EUR", 0.0),
        (None, 0.0),
        (True, 0.0),
        (-10, 0.0),
        (float("nan"), 0.0),
        ({"amount": 5}, 0.0),
    ])
    def test_value(self, raw, expected):
        assert coerce_value(raw) == expected

    @pytest.mark.parametrize("raw,expected", [
        ("2025-12-31", date(2025, 12, 31)),
        ("2025-12-31T00:00:00Z", date(2025, 12, 31)),
        (None, None),
        ("null", None),
        ("unbefristet", None),
        ("31.12.2025", None),
    ])
    def test_date(self, raw, expected):
        assert coerce_date(raw) == expected

    def test_tags_keep_order_and_drop_duplicates(self):
        assert coerce_tags(["IT", " SaaS ", "IT", "", None, 7]) == ["IT", "SaaS", "7"]

    @pytest.mark.parametrize("raw", [None, "IT, SaaS", {"a": 1}])
    def test_tags_default_to_empty(self, raw):
        assert coerce_tags(raw) == []


def _normalize(payload: dict, **kwargs):
    return normalize_response(json.dumps(payload), file_name="vertrag.txt", now=NOW, contract_id="id-1", **kwargs)


class TestNormalizeResponse:

    def test_lease_with_open_end_is_real_estate_and_active(self):
        contract = _normalize({"title": "Büro", "partnerName": "ImmoTrust AG",
                               "contractType": "Mietvertrag", "endDate": None})
        assert contract.contract_type == ContractType.LEASE
        assert contract.category == ContractCategory.REAL_ESTATE
        assert contract.status == ContractStatus.ACTIVE
        assert contract.type_match == "exact"

    def test_variant_spelling_resolves_to_it_contract(self):
        contract = _normalize({"title": "CRM", "contractType": "softwarevertrag"})
        assert contract.contract_type == ContractType.IT
        assert contract.category == ContractCategory.PERSONNEL_SERVICES
        assert contract.type_match == "fuzzy"

    def test_end_date_in_45_days_is_expiring_soon(self):
        end = (TODAY + timedelta(days=45)).isoformat()
        contract = _normalize({"title": "Wartung", "contractType": "Wartungsvertrag", "endDate": end})
        assert contract.status == ContractStatus.EXPIRING_SOON
        assert contract.end_date == TODAY + timedelta(days=45)

    def test_fenced_response_normalizes_like_bare_one(self, lease_response):
        bare = normalize_response(lease_response, "m.txt", now=NOW, contract_id="x")
        fenced = normalize_response(f"```json\n{lease_response}\n```", "m.txt", now=NOW, contract_id="x")
        assert fenced == bare

    def test_category_field_is_used_when_type_missing(self):
        contract = _normalize({"title": "Kfz", "category": "Leasing"})
        assert contract.contract_type == ContractType.LEASING
        assert contract.category == ContractCategory.SUPPLIERS_PROCUREMENT

    def test_missing_type_is_catch_all(self):
        contract = _normalize({"title": "Irgendwas"})
        assert contract.contract_type == ContractType.OTHER
        assert contract.category == ContractCategory.CUSTOMERS_CONSTRUCTION
        assert contract.type_match == "fallback"

    def test_defaults_for_missing_optional_fields(self):
        contract = _normalize({})
        assert contract.title == "vertrag"
        assert contract.partner_name == "Unbekannt"
        assert contract.value == 0.0
        assert contract.currency == "EUR"
        assert contract.notice_period == "Nicht angegeben"
        assert contract.tags == []
        assert contract.summary == ""
        assert contract.risk_level == RiskLevel.UNKNOWN
        assert contract.start_date is None and contract.end_date is None

    def test_provenance_and_id(self):
        contract = _normalize({"title": "X", "currency": "usd", "riskLevel": "Hoch"})
        assert contract.id == "id-1"
        assert contract.file_name == "vertrag.txt"
        assert contract.uploaded_at == NOW
        assert contract.currency == "USD"
        assert contract.risk_level == RiskLevel.HIGH

    def test_fresh_ids_are_unique(self):
        a = normalize_response('{"title": "A"}', "a.txt", now=NOW)
        b = normalize_response('{"title": "A"}', "a.txt", now=NOW)
        assert a.id and b.id and a.id != b.id

    def test_malformed_output_propagates(self):
        with pytest.raises(MalformedOutputError):
            normalize_response("Ich konnte den Vertrag leider nicht lesen.", "a.txt", now=NOW)

    def test_contract_is_immutable(self):
        contract = _normalize({"title": "X"})
        with pytest.raises(Exception):
            contract.id = "other"


class TestContractFromFields:

    def test_explicit_status_overrides_derived_one(self):
        contract = contract_from_fields(
            {"contractType": "Kaufvertrag", "endDate": "2025-01-01"}, "k.txt", NOW,
            status=ContractStatus.TERMINATED,
        )
        assert contract.status == ContractStatus.TERMINATED

    def test_without_file_name_title_falls_back(self):
        contract = contract_from_fields({}, "", NOW)
        assert contract.title == "Unbenannter Vertrag"
        assert contract.file_name == ""

    def test_uploaded_at_defaults_to_now(self):
        earlier = NOW.replace(year=2024)
        assert contract_from_fields({}, "a.txt", NOW).uploaded_at == NOW
        assert contract_from_fields({}, "a.txt", NOW, uploaded_at=earlier).uploaded_at == earlier
