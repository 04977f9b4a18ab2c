# schemas.py
from __future__ import annotations

from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from contract_types import (
    ContractCategory, ContractStatus, ContractType, RiskLevel, category_for_type,
)

MatchKind = Literal["exact", "fuzzy", "fallback"]


class CamelModel(BaseModel):
    # Wire shape matches the dashboard frontend (partnerName, endDate, ...)
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------- Inbound files ----------
class UploadedDocument(BaseModel):
    file_name: str
    mime_type: str = ""
    data: bytes = b""


class DocumentPayload(BaseModel):
    """What the file reader hands to the prompt builder: text OR a base64 body."""
    file_name: str
    mime_type: str = ""
    text: Optional[str] = None
    base64_data: Optional[str] = None

    @property
    def is_binary(self) -> bool:
        return self.text is None and self.base64_data is not None


# ---------- Classification ----------
class TypeResolution(BaseModel):
    contract_type: ContractType
    match: MatchKind
    raw_value: Optional[str] = None


# ---------- Contract ----------
class Contract(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    title: str
    partner_name: str
    category: ContractCategory
    contract_type: ContractType
    type_match: MatchKind = "exact"
    status: ContractStatus
    value: float = Field(default=0.0, ge=0)
    currency: str = "EUR"
    start_date: Optional[date] = None
    end_date: Optional[date] = None      # None = unlimited term
    notice_period: str = "Nicht angegeben"
    risk_level: RiskLevel = RiskLevel.UNKNOWN
    tags: List[str] = Field(default_factory=list)
    summary: str = ""
    file_name: str = ""
    uploaded_at: datetime

    @model_validator(mode="before")
    @classmethod
    def _fill_category(cls, data):
        if isinstance(data, dict):
            ctype = data.get("contract_type", data.get("contractType"))
            if ctype is not None and data.get("category") is None:
                data = dict(data)
                data["category"] = category_for_type(ContractType(ctype))
        return data

    @model_validator(mode="after")
    def _category_matches_type(self):
        expected = category_for_type(self.contract_type)
        if self.category != expected:
            raise ValueError(
                f"category '{self.category.value}' does not match contract type "
                f"'{self.contract_type.value}' (expected '{expected.value}')"
            )
        return self


# ---------- Import outcome ----------
class ImportFailure(CamelModel):
    kind: str
    message: str
    retryable: bool = False
    status_code: Optional[int] = None


class ImportResult(CamelModel):
    ok: bool
    contract: Optional[Contract] = None
    failure: Optional[ImportFailure] = None

    @classmethod
    def success(cls, contract: Contract) -> "ImportResult":
        return cls(ok=True, contract=contract)

    @classmethod
    def failed(cls, failure: ImportFailure) -> "ImportResult":
        return cls(ok=False, failure=failure)


# ---------- Listing / dashboard ----------
class ContractFilter(CamelModel):
    query: str = ""
    status: Optional[ContractStatus] = None
    risk_level: Optional[RiskLevel] = None
    category: Optional[ContractCategory] = None


class RiskDistribution(CamelModel):
    low: int = 0
    medium: int = 0
    high: int = 0
    unknown: int = 0


class CategoryStat(CamelModel):
    category: ContractCategory
    count: int = 0
    value: float = 0.0


class TypeCount(CamelModel):
    contract_type: ContractType
    count: int


class ContractStats(CamelModel):
    total_count: int = 0
    total_value: float = 0.0
    expiring_soon: int = 0
    high_risk: int = 0
    risk_distribution: RiskDistribution = Field(default_factory=RiskDistribution)
    by_category: List[CategoryStat] = Field(default_factory=list)
    top_contract_types: List[TypeCount] = Field(default_factory=list)
