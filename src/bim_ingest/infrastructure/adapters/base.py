"""Format Adapter Contract.

Every source format is parsed by an adapter satisfying FormatAdapter;
callers pick adapters by format tag, never by concrete type.
"""
from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Protocol, runtime_checkable
from uuid import NAMESPACE_URL, uuid4, uuid5

from bim_ingest.domain import (
    ElementResolutionFailure,
    FormatError,
    ParsedModel,
    ResolutionStage,
    Scalar,
)


@dataclass(frozen=True)
class ParseContext:
    """Per-call parse options."""

    source_format: str
    model_name: str | None = None
    include_geometry: bool = True
    include_properties: bool = True
    include_spatial_structure: bool = True
    stable_guids: bool = False


@runtime_checkable
class FormatAdapter(Protocol):
    """Parse raw input into a ParsedModel."""

    async def parse(self, data: bytes | str, context: ParseContext) -> ParsedModel: ...


class GuidFactory:
    """Synthesizes identifiers and keeps them unique within one parse.

    Random by default. In stable mode the id is a UUID5 over the input
    digest, the element's type and its position, so re-parsing the same
    file yields the same identifiers.
    """

    def __init__(self, data: bytes, source_format: str, *, stable: bool = False) -> None:
        self._stable = stable
        self._seed = ""
        if stable:
            self._seed = f"{source_format}:{hashlib.sha256(data).hexdigest()}"
        self._claimed: set[str] = set()

    def new(self, kind: str, index: int) -> str:
        if not self._stable:
            return str(uuid4())
        return str(uuid5(NAMESPACE_URL, f"bim-ingest:{self._seed}:{kind}:{index}"))

    def claim(self, guid: str, kind: str, index: int) -> str:
        """Reserve a guid for one element.

        A guid already claimed by an earlier element of the same parse is
        replaced by a synthesized one.
        """
        if guid in self._claimed:
            guid = self.new(f"duplicate:{kind}", index)
        self._claimed.add(guid)
        return guid


def duplicate_guid(element_ref: str, original: str, replacement: str) -> ElementResolutionFailure:
    """Diagnostic for a repeated source guid."""
    return ElementResolutionFailure(
        element_ref=element_ref,
        guid=replacement,
        stage=ResolutionStage.GUID,
        reason=f"guid {original!r} already used by an earlier element",
    )


def decode_text(data: bytes | str, source_format: str) -> str:
    """Decode text input as UTF-8, tolerating a byte-order mark."""
    if isinstance(data, str):
        return data
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise FormatError(source_format, "input is not valid UTF-8") from e


def to_bytes(data: bytes | str) -> bytes:
    return data.encode("utf-8") if isinstance(data, str) else data


def coerce_scalar(raw: str) -> Scalar:
    """Coerce a text cell to a scalar.

    Empty -> None, "true"/"false" (any case) -> bool, numeric -> int or
    float, anything else stays a string.
    """
    text = raw.strip()
    if text == "":
        return None
    lowered = text.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    try:
        return int(text)
    except ValueError:
        pass
    try:
        value = float(text)
    except ValueError:
        return raw
    if value != value or value in (float("inf"), float("-inf")):
        # nan/inf literals stay text
        return raw
    return value


def to_number(value: object) -> float | None:
    """Numeric coercion used for quantities; bools are not numbers."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        coerced = coerce_scalar(value)
        if isinstance(coerced, (int, float)) and not isinstance(coerced, bool):
            return float(coerced)
    return None
