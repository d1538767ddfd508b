"""Parsing and serialization of ##KEY=... meta-information lines."""

import enum
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple, Union

from vcf_codec import kv
from vcf_codec.errors import DuplicateKeyError, KeyNotFound, LinePatternError
from vcf_codec.kv import KeyValue

# Structured lines also match the unstructured pattern, so the structured
# pattern must always be tried first.
STRUCTURED_PATTERN = re.compile(r"^##(\w+)=<(.+)>$", re.ASCII)
UNSTRUCTURED_PATTERN = re.compile(r"^##(\w+)=(.+)$", re.ASCII)

META_PREFIX = "##"


class MetaType(enum.Enum):
    """The two underlying kinds of meta-information line."""

    STRUCTURED = "Structured"
    UNSTRUCTURED = "Unstructured"


@dataclass
class MetaLine:
    """
    A single ``##`` header line.

    Structured lines (``##INFO=<ID=NS,...>``) keep their pairs in ``fields``;
    unstructured lines (``##phasing=partial``) keep their text in ``value``.
    """

    line_key: str
    meta_type: MetaType
    value: Optional[str] = None
    fields: Dict[str, KeyValue] = field(default_factory=dict)
    line_number: int = 0
    original_text: str = ""

    @classmethod
    def structured(
        cls,
        line_key: str,
        pairs: Union[Dict[str, str], Iterable[Tuple[str, str]]],
        quoted: Iterable[str] = ("Description",),
    ) -> "MetaLine":
        """
        Build a structured line from key/value pairs.

        Args:
            line_key: Line type, e.g. ``INFO``
            pairs: Mapping or sequence of (key, value) in output order
            quoted: Keys whose values are wrapped in double quotes

        Returns:
            New MetaLine with contiguous indices
        """
        line = cls(line_key=line_key, meta_type=MetaType.STRUCTURED)
        if isinstance(pairs, dict):
            pairs = pairs.items()
        quoted = set(quoted)
        for key, value in pairs:
            line.add_field(key, value, quote='"' if key in quoted else None)
        line.original_text = line.serialize()
        return line

    @classmethod
    def unstructured(cls, line_key: str, value: str) -> "MetaLine":
        """Build an unstructured ``##key=value`` line."""
        line = cls(line_key=line_key, meta_type=MetaType.UNSTRUCTURED, value=value)
        line.original_text = line.serialize()
        return line

    @property
    def is_structured(self) -> bool:
        return self.meta_type is MetaType.STRUCTURED

    @property
    def order(self) -> List[str]:
        """Keys sorted by their original position in the line."""
        return [pair.key for pair in kv.ordered(self.fields)]

    def get_field(self, key: str) -> KeyValue:
        """Return the KeyValue for ``key``; raises KeyNotFound if absent."""
        try:
            return self.fields[key]
        except KeyError:
            raise KeyNotFound(key) from None

    def get_value(self, key: str) -> str:
        """Return the value for ``key``; raises KeyNotFound if absent."""
        return self.get_field(key).value

    def _optional(self, key: str) -> Optional[str]:
        pair = self.fields.get(key)
        return pair.value if pair is not None else None

    @property
    def id(self) -> Optional[str]:
        return self._optional("ID")

    @property
    def number(self) -> Optional[str]:
        return self._optional("Number")

    @property
    def type(self) -> Optional[str]:
        return self._optional("Type")

    @property
    def description(self) -> Optional[str]:
        return self._optional("Description")

    def _require_structured(self) -> None:
        if not self.is_structured:
            raise TypeError(f"##{self.line_key} is an unstructured line and has no fields")

    def add_field(self, key: str, value: str, quote: Optional[str] = None) -> KeyValue:
        """
        Append a new key=value pair after the existing ones.

        Raises:
            DuplicateKeyError: If ``key`` is already present
        """
        self._require_structured()
        if key in self.fields:
            raise DuplicateKeyError(key)
        pair = KeyValue(key=key, value=value, index=len(self.fields), quote=quote)
        self.fields[key] = pair
        return pair

    def update_field(self, key: str, value: str, quote: Optional[str] = None) -> KeyValue:
        """
        Replace the value of an existing pair, keeping its position.

        ``quote`` overrides the recorded quote character when given.
        """
        self._require_structured()
        pair = self.get_field(key)
        pair.value = value
        if quote is not None:
            pair.quote = quote or None
        return pair

    def set_field(self, key: str, value: str, quote: Optional[str] = None) -> KeyValue:
        """Update ``key`` if present, otherwise append it."""
        if key in self.fields:
            return self.update_field(key, value, quote)
        return self.add_field(key, value, quote)

    def remove_field(self, key: str) -> KeyValue:
        """Remove a pair and close the gap it leaves in the indices."""
        self._require_structured()
        pair = self.get_field(key)
        del self.fields[key]
        for position, remaining in enumerate(kv.ordered(self.fields)):
            remaining.index = position
        return pair

    def serialize(self) -> str:
        """Return the line as it would appear in a VCF header."""
        if self.is_structured:
            return f"{META_PREFIX}{self.line_key}=<{kv.join(self.fields)}>"
        return f"{META_PREFIX}{self.line_key}={self.value}"

    def __str__(self) -> str:
        return self.serialize()


def parse_meta_line(line: str, line_number: int = 0) -> MetaLine:
    """
    Parse a raw ``##`` header line.

    Args:
        line: Header line, with or without its trailing newline
        line_number: Position of the line in its header, if known

    Returns:
        Structured or unstructured MetaLine

    Raises:
        LinePatternError: If the line matches neither meta-line pattern
        MalformedSpan: If a structured body cannot be tokenized
    """
    text = line.rstrip("\r\n")

    match = STRUCTURED_PATTERN.match(text)
    if match:
        fields, _ = kv.split(match.group(2))
        return MetaLine(
            line_key=match.group(1),
            meta_type=MetaType.STRUCTURED,
            fields=fields,
            line_number=line_number,
            original_text=text,
        )

    match = UNSTRUCTURED_PATTERN.match(text)
    if match:
        return MetaLine(
            line_key=match.group(1),
            meta_type=MetaType.UNSTRUCTURED,
            value=match.group(2),
            line_number=line_number,
            original_text=text,
        )

    raise LinePatternError(text)
