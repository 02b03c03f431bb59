"""
Basket document handling: canonical JSON and checksums.

A basket document maps object type -> object name -> object payload.
The canonical form sorts keys at every level and uses fixed indentation,
so semantically identical documents always serialize to the same bytes
and therefore share the same SHA-1 checksum.
"""
import hashlib
import json
from typing import Any

from core.exceptions import MalformedDocumentError


def canonical_json(document: dict) -> str:
    """Serialize a document in its canonical, human readable form."""
    return json.dumps(document, sort_keys=True, indent=4, ensure_ascii=False, allow_nan=False)


def compute_checksum(document: dict) -> bytes:
    """
    Compute the 160-bit SHA-1 digest of a document's canonical JSON.
    Documents with the same checksum are identical.
    """
    return hashlib.sha1(canonical_json(document).encode("utf-8")).digest()


def checksum_hex(digest: bytes) -> str:
    return digest.hex()


def short_checksum(digest: bytes) -> str:
    """Abbreviated checksum for confirmations, git style."""
    return digest.hex()[:7]


def _reject_constant(token: str):
    raise MalformedDocumentError(f"Invalid JSON: {token} is not a JSON value")


def parse_document(json_str: Any) -> dict:
    """
    Parse an externally supplied basket document.

    Trailing whitespace is ignored, since saving a download to a file
    usually appends an EOL. The result must be an object of objects whose
    entries are objects themselves.

    Raises:
        MalformedDocumentError: on invalid JSON or an unexpected shape
    """
    if isinstance(json_str, bytes):
        try:
            json_str = json_str.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedDocumentError(f"Document is not valid UTF-8: {e}") from e

    if not isinstance(json_str, str):
        raise MalformedDocumentError("Document must be a JSON string")

    try:
        document = json.loads(json_str.rstrip(), parse_constant=_reject_constant)
    except json.JSONDecodeError as e:
        raise MalformedDocumentError(f"Invalid JSON: {e}") from e

    validate_document(document)
    return document


def validate_document(document: Any) -> None:
    """Check the type -> name -> payload shape of an already decoded document."""
    if not isinstance(document, dict):
        raise MalformedDocumentError("Document must be a JSON object keyed by object type")

    for type_name, objects in document.items():
        if not isinstance(objects, dict):
            raise MalformedDocumentError(
                f"Objects of type {type_name} must be a JSON object keyed by name"
            )
        for name, payload in objects.items():
            if not isinstance(payload, dict):
                raise MalformedDocumentError(
                    f"Payload of {type_name} '{name}' must be a JSON object"
                )


def summarize(document: dict) -> dict[str, int]:
    """Number of objects per type, as shown in snapshot listings."""
    return {type_name: len(objects) for type_name, objects in sorted(document.items())}
