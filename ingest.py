# ingest.py
import base64
import logging
import mimetypes
import re
from pathlib import Path
from typing import List, Optional

from errors import DecodeFailureError, UnsupportedFormatError
from schemas import DocumentPayload, UploadedDocument

log = logging.getLogger("contractdash.ingest")

TEXT_MIME = "text/plain"
PDF_MIME = "application/pdf"
IMAGE_MIME_PREFIX = "image/"

_DATA_URL_PREFIX = re.compile(r"^data:[^,]*;base64,", re.IGNORECASE)


def _is_plain_text(doc: UploadedDocument) -> bool:
    return doc.mime_type == TEXT_MIME or doc.file_name.lower().endswith(".txt")


def read_document_text(doc: UploadedDocument) -> str:
    """
    Decode an uploaded document to text, chosen by MIME type.

    Plain text is decoded leniently (undecodable bytes become U+FFFD), PDFs are
    refused outright, anything else gets a strict best-effort UTF-8 decode.

    Raises:
        UnsupportedFormatError: PDF on the text-only path
        DecodeFailureError: content is not decodable text
    """
    if _is_plain_text(doc):
        return doc.data.decode("utf-8-sig", errors="replace")

    if doc.mime_type == PDF_MIME:
        raise UnsupportedFormatError(
            "PDF-Dateien werden aktuell nicht unterstützt. Bitte laden Sie eine "
            "Text-Datei (.txt) hoch oder kopieren Sie den Vertragstext.",
            mime_type=doc.mime_type,
        )

    try:
        return doc.data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise DecodeFailureError(
            f"Dateityp {doc.mime_type or 'unbekannt'} wird nicht unterstützt.",
            mime_type=doc.mime_type,
        ) from exc


def strip_data_url_prefix(payload: str) -> str:
    """'data:application/pdf;base64,JVBERi0...' -> 'JVBERi0...'"""
    return _DATA_URL_PREFIX.sub("", payload.strip(), count=1)


def read_document_base64(doc: UploadedDocument) -> str:
    """Whole-file base64 body for binary-capable backends, without any data-URL prefix."""
    encoded = base64.b64encode(doc.data).decode("ascii")
    return strip_data_url_prefix(encoded)


def decode_base64_upload(file_name: str, mime_type: str, content: str) -> UploadedDocument:
    """Build an upload from a (possibly data-URL prefixed) base64 string."""
    try:
        data = base64.b64decode(strip_data_url_prefix(content), validate=True)
    except (ValueError, TypeError) as exc:
        raise DecodeFailureError("Upload ist kein gültiges Base64.", mime_type=mime_type) from exc
    return UploadedDocument(file_name=file_name, mime_type=mime_type, data=data)


def _is_image(doc: UploadedDocument) -> bool:
    return doc.mime_type.lower().startswith(IMAGE_MIME_PREFIX)


def prepare_payload(doc: UploadedDocument, accepts_binary: bool = False) -> DocumentPayload:
    """
    Choose the text or base64 path for an upload.

    Only images go to a vision-capable backend (``accepts_binary``) as base64;
    Ollama's ``images`` field takes nothing else. Everything else, PDFs
    included, goes through the text reader and fails there if it is not text.
    """
    if accepts_binary and _is_image(doc):
        log.debug("Encoding %s (%s) as base64 image", doc.file_name, doc.mime_type)
        return DocumentPayload(
            file_name=doc.file_name,
            mime_type=doc.mime_type,
            base64_data=read_document_base64(doc),
        )
    text = read_document_text(doc)
    log.debug("Read %d chars from %s", len(text), doc.file_name)
    return DocumentPayload(file_name=doc.file_name, mime_type=doc.mime_type, text=text)


def guess_mime_type(path: Path) -> str:
    mime, _ = mimetypes.guess_type(path.name)
    return mime or "application/octet-stream"


def load_upload(path: Path, mime_type: Optional[str] = None) -> UploadedDocument:
    return UploadedDocument(
        file_name=path.name,
        mime_type=mime_type or guess_mime_type(path),
        data=path.read_bytes(),
    )


def ingest_folder(folder: Path) -> List[UploadedDocument]:
    """All regular files of a folder as uploads, sorted by name."""
    docs = []
    for path in sorted(folder.iterdir()):
        if path.is_file() and not path.name.startswith("."):
            print(f"Reading {path.name}...")
            docs.append(load_upload(path))
    return docs
