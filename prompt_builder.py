# prompt_builder.py
import textwrap
from typing import Dict, List, Optional

from contract_types import (
    CONTRACT_TYPE_DESCRIPTIONS, ContractCategory, ContractType, RiskLevel, types_for_category,
)
from schemas import DocumentPayload

ATTACHED_DOCUMENT_NOTE = "(Der Vertrag liegt als angehängtes Bild vor.)"

PROMPT_HEADER = textwrap.dedent("""\
Du bist ein Vertragsanalyse-Experte. Analysiere den folgenden Vertragstext und extrahiere die Metadaten.

WICHTIG: Antworte NUR mit einem gültigen JSON-Objekt, ohne zusätzlichen Text oder Markdown.

Das JSON muss folgende Struktur haben:
{{
  "title": "Kurzer beschreibender Titel des Vertrags",
  "partnerName": "Name des Vertragspartners (Firma/Person)",
  "contractType": "Einer der erlaubten Vertragstypen (siehe Liste unten)",
  "value": 0,
  "currency": "EUR",
  "startDate": "YYYY-MM-DD",
  "endDate": "YYYY-MM-DD oder null wenn unbefristet",
  "noticePeriod": "Kündigungsfrist (z.B. 3 Monate zum Jahresende)",
  "riskLevel": "{risk_levels}",
  "summary": "Kurze Zusammenfassung des Vertragsinhalts (max 2 Sätze)",
  "tags": ["tag1", "tag2"]
}}
""")

RISK_RULES = textwrap.dedent("""\
Regeln für riskLevel:
- "{high}": Mehrdeutige Klauseln, automatische Verlängerungen > 1 Jahr, unbegrenzte Haftung
- "{medium}": Standardrisiken, normale Vertragsbedingungen
- "{low}": Standardverträge ohne besondere Risiken
- "{unknown}": Wenn nicht bestimmbar
""")


def default_catalog() -> Dict[ContractCategory, List[ContractType]]:
    return {cat: types_for_category(cat) for cat in ContractCategory}


def render_contract_type_catalog(catalog: Optional[Dict[ContractCategory, List[ContractType]]] = None) -> str:
    """Allowed contract types grouped under their category heading, plus the catch-all line."""
    catalog = catalog if catalog is not None else default_catalog()
    blocks = []
    for category, types in catalog.items():
        lines = [f"{category.value}:"]
        for t in types:
            hint = CONTRACT_TYPE_DESCRIPTIONS.get(t)
            lines.append(f"- {t.value} ({hint})" if hint else f"- {t.value}")
        blocks.append("\n".join(lines))
    body = "\n\n".join(blocks)
    return (
        "ERLAUBTE VERTRAGSTYPEN (wähle den passendsten):\n\n"
        f"{body}\n\n"
        f'Falls kein Typ passt: "{ContractType.OTHER.value}"\n'
    )


def build_extraction_prompt(
    payload: DocumentPayload,
    catalog: Optional[Dict[ContractCategory, List[ContractType]]] = None,
) -> str:
    """
    Render the extraction instruction for one document.

    Pure function of its inputs. The document text goes in verbatim at the
    end, followed by a trailing ``JSON:`` cue; binary payloads travel next to
    the prompt, so only a note stands in for the text.
    """
    header = PROMPT_HEADER.format(risk_levels="|".join(level.value for level in RiskLevel))
    risk = RISK_RULES.format(
        high=RiskLevel.HIGH.value,
        medium=RiskLevel.MEDIUM.value,
        low=RiskLevel.LOW.value,
        unknown=RiskLevel.UNKNOWN.value,
    )
    document = ATTACHED_DOCUMENT_NOTE if payload.is_binary else (payload.text or "")
    return (
        f"{header}\n"
        f"{render_contract_type_catalog(catalog)}\n"
        f"{risk}\n"
        f"VERTRAGSTEXT:\n{document}\n\n"
        "JSON:"
    )
