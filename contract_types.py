# contract_types.py
"""
Static classification vocabulary for contracts.

Values are the German display labels used by the dashboard and by the
extraction prompt; the model is asked to answer with exactly these strings.
"""

from enum import Enum
from typing import Dict, List, Optional


class ContractStatus(str, Enum):
    ACTIVE = "Aktiv"
    EXPIRING_SOON = "Läuft bald ab"
    EXPIRED = "Abgelaufen"
    DRAFT = "Entwurf"
    TERMINATED = "Gekündigt"


# Set by a person, never derived from dates
MANUAL_STATUSES = (ContractStatus.DRAFT, ContractStatus.TERMINATED)


class RiskLevel(str, Enum):
    LOW = "Niedrig"
    MEDIUM = "Mittel"
    HIGH = "Hoch"
    UNKNOWN = "Unbekannt"


class ContractCategory(str, Enum):
    CUSTOMERS_CONSTRUCTION = "Kunden & Bauprojekte"
    PERSONNEL_SERVICES = "Personal & Dienstleister"
    SUPPLIERS_PROCUREMENT = "Lieferanten & Einkauf"
    REAL_ESTATE = "Immobilien"
    FINANCE_INSURANCE = "Finanzen & Versicherungen"


class ContractType(str, Enum):
    # Kunden & Bauprojekte
    WORK_CONTRACT = "Werkvertrag"
    MAINTENANCE = "Wartungsvertrag"
    FRAMEWORK = "Rahmenvertrag"
    VOB_B = "VOB/B-Vertrag"

    # Personal & Dienstleister
    EMPLOYMENT = "Arbeitsvertrag"
    COLLECTIVE_AGREEMENT = "Tarifvertrag"
    SUBCONTRACTOR = "Subunternehmervertrag"
    CONSULTING = "Beratungsvertrag"
    IT = "IT-Vertrag"

    # Lieferanten & Einkauf
    PURCHASE = "Kaufvertrag"
    SUPPLY = "Liefervertrag"
    FRAMEWORK_SUPPLY = "Rahmenliefervertrag"
    LEASING = "Leasingvertrag"
    MACHINE_RENTAL = "Mietvertrag Maschinen"
    FLEET_MAINTENANCE = "Wartungsvertrag Fuhrpark"

    # Immobilien
    LEASE = "Mietvertrag"
    TENANCY = "Pachtvertrag"
    PROPERTY_MANAGEMENT = "Hausverwaltungsvertrag"
    BROKERAGE = "Maklervertrag"
    CARETAKER = "Hausmeistervertrag"
    CLEANING = "Reinigungsvertrag"

    # Finanzen & Versicherungen
    LOAN = "Darlehensvertrag"
    ACCOUNT = "Kontovertrag"
    SURETY = "Bürgschaft"
    BANK_GUARANTEE = "Bankaval"
    INSURANCE = "Versicherungsvertrag"
    PARTNERSHIP = "Gesellschaftsvertrag"

    # catch-all
    OTHER = "Sonstiger Vertrag"


CONTRACT_TYPE_TO_CATEGORY: Dict[ContractType, ContractCategory] = {
    ContractType.WORK_CONTRACT: ContractCategory.CUSTOMERS_CONSTRUCTION,
    ContractType.MAINTENANCE: ContractCategory.CUSTOMERS_CONSTRUCTION,
    ContractType.FRAMEWORK: ContractCategory.CUSTOMERS_CONSTRUCTION,
    ContractType.VOB_B: ContractCategory.CUSTOMERS_CONSTRUCTION,

    ContractType.EMPLOYMENT: ContractCategory.PERSONNEL_SERVICES,
    ContractType.COLLECTIVE_AGREEMENT: ContractCategory.PERSONNEL_SERVICES,
    ContractType.SUBCONTRACTOR: ContractCategory.PERSONNEL_SERVICES,
    ContractType.CONSULTING: ContractCategory.PERSONNEL_SERVICES,
    ContractType.IT: ContractCategory.PERSONNEL_SERVICES,

    ContractType.PURCHASE: ContractCategory.SUPPLIERS_PROCUREMENT,
    ContractType.SUPPLY: ContractCategory.SUPPLIERS_PROCUREMENT,
    ContractType.FRAMEWORK_SUPPLY: ContractCategory.SUPPLIERS_PROCUREMENT,
    ContractType.LEASING: ContractCategory.SUPPLIERS_PROCUREMENT,
    ContractType.MACHINE_RENTAL: ContractCategory.SUPPLIERS_PROCUREMENT,
    ContractType.FLEET_MAINTENANCE: ContractCategory.SUPPLIERS_PROCUREMENT,

    ContractType.LEASE: ContractCategory.REAL_ESTATE,
    ContractType.TENANCY: ContractCategory.REAL_ESTATE,
    ContractType.PROPERTY_MANAGEMENT: ContractCategory.REAL_ESTATE,
    ContractType.BROKERAGE: ContractCategory.REAL_ESTATE,
    ContractType.CARETAKER: ContractCategory.REAL_ESTATE,
    ContractType.CLEANING: ContractCategory.REAL_ESTATE,

    ContractType.LOAN: ContractCategory.FINANCE_INSURANCE,
    ContractType.ACCOUNT: ContractCategory.FINANCE_INSURANCE,
    ContractType.SURETY: ContractCategory.FINANCE_INSURANCE,
    ContractType.BANK_GUARANTEE: ContractCategory.FINANCE_INSURANCE,
    ContractType.INSURANCE: ContractCategory.FINANCE_INSURANCE,
    ContractType.PARTNERSHIP: ContractCategory.FINANCE_INSURANCE,

    ContractType.OTHER: ContractCategory.CUSTOMERS_CONSTRUCTION,
}

DEFAULT_CATEGORY = ContractCategory.CUSTOMERS_CONSTRUCTION

# Short hints shown next to each type in the extraction prompt
CONTRACT_TYPE_DESCRIPTIONS: Dict[ContractType, str] = {
    ContractType.WORK_CONTRACT: "Herstellung eines Werkes",
    ContractType.MAINTENANCE: "Wartung/Instandhaltung für Kunden",
    ContractType.FRAMEWORK: "Langfristige Geschäftsbeziehung",
    ContractType.VOB_B: "Bauverträge nach VOB",
    ContractType.EMPLOYMENT: "Anstellung von Mitarbeitern",
    ContractType.COLLECTIVE_AGREEMENT: "Kollektive Arbeitsbedingungen",
    ContractType.SUBCONTRACTOR: "Werk/Dienstleistung durch Subunternehmer",
    ContractType.CONSULTING: "Beratungsdienstleistungen",
    ContractType.IT: "Software, IT-Dienstleistungen, Lizenzen",
    ContractType.PURCHASE: "Einmaliger Kauf von Waren",
    ContractType.SUPPLY: "Regelmäßige Lieferung von Waren",
    ContractType.FRAMEWORK_SUPPLY: "Langfristiger Liefervertrag",
    ContractType.LEASING: "Leasing von Gegenständen",
    ContractType.MACHINE_RENTAL: "Anmietung von Maschinen/Geräten",
    ContractType.FLEET_MAINTENANCE: "Wartung von Fahrzeugen",
    ContractType.LEASE: "Anmietung von Immobilien/Räumen",
    ContractType.TENANCY: "Pacht von Grundstücken/Betrieben",
    ContractType.PROPERTY_MANAGEMENT: "Verwaltung von Immobilien",
    ContractType.BROKERAGE: "Immobilienvermittlung",
    ContractType.CARETAKER: "Hausmeisterservice",
    ContractType.CLEANING: "Gebäudereinigung",
    ContractType.LOAN: "Kredite, Darlehen",
    ContractType.ACCOUNT: "Bankkonten",
    ContractType.SURETY: "Bürgschaftsvereinbarungen",
    ContractType.BANK_GUARANTEE: "Bankgarantien",
    ContractType.INSURANCE: "Alle Arten von Versicherungen",
    ContractType.PARTNERSHIP: "GmbH, GbR, etc.",
}

_RISK_ALIASES: Dict[str, RiskLevel] = {
    "low": RiskLevel.LOW,
    "medium": RiskLevel.MEDIUM,
    "high": RiskLevel.HIGH,
    "unknown": RiskLevel.UNKNOWN,
}


def category_for_type(contract_type: ContractType) -> ContractCategory:
    """Total lookup: every canonical type has exactly one category."""
    return CONTRACT_TYPE_TO_CATEGORY.get(contract_type, DEFAULT_CATEGORY)


def types_for_category(category: ContractCategory) -> List[ContractType]:
    """Canonical types of a category, excluding the catch-all, in declaration order."""
    return [
        t for t, cat in CONTRACT_TYPE_TO_CATEGORY.items()
        if cat == category and t is not ContractType.OTHER
    ]


def parse_risk_level(raw: Optional[object]) -> RiskLevel:
    if not isinstance(raw, str):
        return RiskLevel.UNKNOWN
    needle = raw.strip().lower()
    for level in RiskLevel:
        if level.value.lower() == needle:
            return level
    return _RISK_ALIASES.get(needle, RiskLevel.UNKNOWN)
