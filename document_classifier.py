"""
Contract type resolution: exact label match first, then an ordered synonym
table, then the catch-all type.
"""

import logging
from typing import Dict, List, Optional, Tuple

from contract_types import ContractType
from schemas import TypeResolution

log = logging.getLogger("contractdash.classifier")

# Order is significant: the first entry contained in the input wins.
CONTRACT_TYPE_VARIANTS: List[Tuple[str, ContractType]] = [
    ("it-dienstleistung", ContractType.IT),
    ("it dienstleistung", ContractType.IT),
    ("it-dienstleistungsvertrag", ContractType.IT),
    ("softwarevertrag", ContractType.IT),
    ("lizenzvertrag", ContractType.IT),
    ("dienstleistungsvertrag", ContractType.CONSULTING),
    ("dienstvertrag", ContractType.CONSULTING),
    ("servicevertrag", ContractType.MAINTENANCE),
    ("service", ContractType.MAINTENANCE),
    ("miete", ContractType.LEASE),
    ("miet", ContractType.LEASE),
    ("pacht", ContractType.TENANCY),
    ("arbeit", ContractType.EMPLOYMENT),
    ("anstellung", ContractType.EMPLOYMENT),
    ("anstellungsvertrag", ContractType.EMPLOYMENT),
    ("kauf", ContractType.PURCHASE),
    ("lieferung", ContractType.SUPPLY),
    ("leasing", ContractType.LEASING),
    ("versicherung", ContractType.INSURANCE),
    ("darlehen", ContractType.LOAN),
    ("kredit", ContractType.LOAN),
    ("kreditvertrag", ContractType.LOAN),
    ("nda", ContractType.CONSULTING),
    ("geheimhaltung", ContractType.CONSULTING),
    ("geheimhaltungsvertrag", ContractType.CONSULTING),
    ("werk", ContractType.WORK_CONTRACT),
    ("bauvertrag", ContractType.VOB_B),
    ("bau", ContractType.VOB_B),
    ("vob", ContractType.VOB_B),
    ("rahmen", ContractType.FRAMEWORK),
    ("makler", ContractType.BROKERAGE),
    ("hausverwaltung", ContractType.PROPERTY_MANAGEMENT),
    ("hausmeister", ContractType.CARETAKER),
    ("reinigung", ContractType.CLEANING),
    ("gesellschaft", ContractType.PARTNERSHIP),
    ("gmbh", ContractType.PARTNERSHIP),
    ("wartung", ContractType.MAINTENANCE),
    ("subunternehmer", ContractType.SUBCONTRACTOR),
    ("beratung", ContractType.CONSULTING),
    ("consulting", ContractType.CONSULTING),
]


class ContractTypeResolver:
    """Best-effort resolver: never fails, always returns a canonical type plus how it was found."""

    def __init__(
        self,
        variants: Optional[List[Tuple[str, ContractType]]] = None,
        fallback: ContractType = ContractType.OTHER,
    ):
        self.variants = list(variants if variants is not None else CONTRACT_TYPE_VARIANTS)
        self.fallback = fallback
        self.labels: Dict[str, ContractType] = {t.value.lower(): t for t in ContractType}

    def resolve(self, raw: Optional[str]) -> TypeResolution:
        if not isinstance(raw, str) or not raw.strip():
            return TypeResolution(contract_type=self.fallback, match="fallback", raw_value=None)

        needle = raw.strip().lower()

        exact = self.labels.get(needle)
        if exact is not None:
            return TypeResolution(contract_type=exact, match="exact", raw_value=raw)

        for variant, ctype in self.variants:
            if variant in needle:
                log.info(f"Contract type '{raw}' resolved via synonym '{variant}' -> {ctype.value}")
                return TypeResolution(contract_type=ctype, match="fuzzy", raw_value=raw)

        log.info(f"Contract type '{raw}' not recognised; using '{self.fallback.value}'")
        return TypeResolution(contract_type=self.fallback, match="fallback", raw_value=raw)


# Global resolver instance
_resolver = ContractTypeResolver()


def resolve_contract_type(raw: Optional[str]) -> TypeResolution:
    return _resolver.resolve(raw)
