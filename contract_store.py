# contract_store.py
from __future__ import annotations

import threading
from collections import Counter
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from contract_types import MANUAL_STATUSES, ContractCategory, ContractStatus, RiskLevel
from normalizer import derive_status
from schemas import (
    CategoryStat, Contract, ContractFilter, ContractStats, RiskDistribution, TypeCount,
)

TOP_CONTRACT_TYPES = 6


def refresh_status(contract: Contract, now: Optional[datetime] = None) -> Contract:
    """Copy of the contract with its status re-derived for ``now``."""
    if contract.status in MANUAL_STATUSES:
        return contract
    now = now or datetime.now(timezone.utc)
    status = derive_status(contract.end_date, now.date())
    if status == contract.status:
        return contract
    return contract.model_copy(update={"status": status})


def matches_filter(contract: Contract, flt: ContractFilter) -> bool:
    q = flt.query.strip().lower()
    if q and q not in contract.title.lower() and q not in contract.partner_name.lower():
        return False
    if flt.status is not None and contract.status != flt.status:
        return False
    if flt.risk_level is not None and contract.risk_level != flt.risk_level:
        return False
    if flt.category is not None and contract.category != flt.category:
        return False
    return True


def compute_stats(contracts: List[Contract]) -> ContractStats:
    risk = Counter(c.risk_level for c in contracts)
    by_category = [
        CategoryStat(
            category=cat,
            count=sum(1 for c in contracts if c.category == cat),
            value=sum(c.value for c in contracts if c.category == cat),
        )
        for cat in ContractCategory
    ]
    type_counts = Counter(c.contract_type for c in contracts)
    # most_common keeps first-seen order for ties
    top_types = [
        TypeCount(contract_type=t, count=n)
        for t, n in type_counts.most_common(TOP_CONTRACT_TYPES)
    ]
    return ContractStats(
        total_count=len(contracts),
        total_value=sum(c.value for c in contracts),
        expiring_soon=sum(1 for c in contracts if c.status == ContractStatus.EXPIRING_SOON),
        high_risk=risk[RiskLevel.HIGH],
        risk_distribution=RiskDistribution(
            low=risk[RiskLevel.LOW],
            medium=risk[RiskLevel.MEDIUM],
            high=risk[RiskLevel.HIGH],
            unknown=risk[RiskLevel.UNKNOWN],
        ),
        by_category=by_category,
        top_contract_types=top_types,
    )


class ContractStore:
    """
    In-memory working set of contracts, newest first.

    Records are immutable; the store only adds, removes, or replaces them.
    Reads return statuses recomputed for the read time.
    """

    def __init__(self, contracts: Optional[Iterable[Contract]] = None):
        self._lock = threading.Lock()
        self._items: List[Contract] = []
        if contracts:
            self.replace_all(contracts)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def add(self, contract: Contract) -> Contract:
        with self._lock:
            if any(c.id == contract.id for c in self._items):
                raise ValueError(f"Contract id '{contract.id}' already exists")
            self._items.insert(0, contract)
        return contract

    def get(self, contract_id: str, now: Optional[datetime] = None) -> Optional[Contract]:
        with self._lock:
            found = next((c for c in self._items if c.id == contract_id), None)
        return refresh_status(found, now) if found else None

    def remove(self, contract_id: str) -> bool:
        with self._lock:
            before = len(self._items)
            self._items = [c for c in self._items if c.id != contract_id]
            return len(self._items) != before

    def replace_all(self, contracts: Iterable[Contract]) -> None:
        items = list(contracts)
        ids = [c.id for c in items]
        if len(ids) != len(set(ids)):
            raise ValueError("Duplicate contract ids in working set")
        with self._lock:
            self._items = items

    def clear(self) -> None:
        with self._lock:
            self._items = []

    def all(self) -> List[Contract]:
        """Stored records as they were created (no status refresh)."""
        with self._lock:
            return list(self._items)

    def list(self, now: Optional[datetime] = None) -> List[Contract]:
        now = now or datetime.now(timezone.utc)
        return [refresh_status(c, now) for c in self.all()]

    def filter(self, flt: ContractFilter, now: Optional[datetime] = None) -> List[Contract]:
        return [c for c in self.list(now) if matches_filter(c, flt)]

    def stats(self, now: Optional[datetime] = None) -> ContractStats:
        return compute_stats(self.list(now))
