"""Key=value span tokenizer for structured meta-information lines."""

import enum
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from vcf_codec.errors import MalformedSpan

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = ","
KV_SEPARATOR = "="
QUOTE_CHARS = frozenset({"'", '"', "`"})


class ScanState(enum.Enum):
    """States of the key=value scanner."""

    IN_KEY = 1
    IN_VALUE = 2
    IN_QUOTE = 3
    IN_QUOTED_VALUE = 4
    IN_KV_SEPARATOR = 5


@dataclass
class KeyValue:
    """
    One key=value pair from a structured meta-line.

    Attributes:
        key: Field name, e.g. ``ID`` or ``Description``
        value: Field value without any surrounding quotes
        index: 0-based position of the pair within its source span
        quote: Quote character the value was wrapped in, or None
    """

    key: str
    value: str
    index: int
    quote: Optional[str] = None

    def __str__(self) -> str:
        if self.quote:
            return f"{self.key}{KV_SEPARATOR}{self.quote}{self.value}{self.quote}"
        return f"{self.key}{KV_SEPARATOR}{self.value}"


def split(span: str) -> Tuple[Dict[str, KeyValue], List[str]]:
    """
    Split a comma-separated key=value span into KeyValue records.

    The span is the text between ``<`` and ``>`` of a structured line, e.g.
    ``ID=DP,Number=1,Type=Integer,Description="Total Depth"``. Values may be
    quoted with ``'``, ``"`` or a backtick; a quoted value runs to the next
    matching quote character and may contain commas.

    Args:
        span: Key=value span to tokenize

    Returns:
        Tuple of (fields keyed by name, keys in original order)

    Raises:
        MalformedSpan: If a quoted value is unterminated or a closing quote
            is not followed by a field separator
    """
    emitted: List[KeyValue] = []
    state = ScanState.IN_KEY
    key: List[str] = []
    value: List[str] = []
    quote: Optional[str] = None

    def emit(with_quote: Optional[str]) -> None:
        emitted.append(
            KeyValue(
                key="".join(key), value="".join(value), index=len(emitted), quote=with_quote
            )
        )
        key.clear()
        value.clear()

    for pos, char in enumerate(span):
        if state is ScanState.IN_KEY:
            if char == KV_SEPARATOR:
                state = ScanState.IN_KV_SEPARATOR
            else:
                key.append(char)
        elif state is ScanState.IN_KV_SEPARATOR:
            if char in QUOTE_CHARS:
                quote = char
                state = ScanState.IN_QUOTED_VALUE
            else:
                # Any other character, a separator included, starts the value.
                value.append(char)
                state = ScanState.IN_VALUE
        elif state is ScanState.IN_VALUE:
            if char == FIELD_SEPARATOR:
                emit(None)
                state = ScanState.IN_KEY
            else:
                value.append(char)
        elif state is ScanState.IN_QUOTED_VALUE:
            if char == quote:
                emit(quote)
                quote = None
                state = ScanState.IN_QUOTE
            else:
                value.append(char)
        elif state is ScanState.IN_QUOTE:
            if char != FIELD_SEPARATOR:
                raise MalformedSpan(
                    span, pos, f"expected '{FIELD_SEPARATOR}' after closing quote"
                )
            state = ScanState.IN_KEY
        else:
            raise MalformedSpan(span, pos, f"unexpected scanner state {state}")

    # Unquoted values have no terminator, so the last pair is captured here.
    if state is ScanState.IN_VALUE:
        emit(None)
    elif state is ScanState.IN_QUOTED_VALUE:
        raise MalformedSpan(span, len(span), f"unterminated {quote} quoted value")
    elif state is not ScanState.IN_QUOTE and key:
        logger.debug("Dropping trailing key without value %r in span %r", "".join(key), span)

    return _deduplicate(emitted, span)


def _deduplicate(
    emitted: List[KeyValue], span: str
) -> Tuple[Dict[str, KeyValue], List[str]]:
    """Apply last-write-wins to repeated keys and renumber indices."""
    last_seen = {kv.key: kv.index for kv in emitted}
    if len(last_seen) != len(emitted):
        logger.warning("Duplicate keys in span %r; keeping the last occurrence", span)

    fields: Dict[str, KeyValue] = {}
    order: List[str] = []
    for kv in emitted:
        if last_seen[kv.key] != kv.index:
            continue
        kv.index = len(order)
        fields[kv.key] = kv
        order.append(kv.key)
    return fields, order


def ordered(fields: Dict[str, KeyValue]) -> List[KeyValue]:
    """Return the pairs sorted by their original position."""
    return sorted(fields.values(), key=lambda kv: kv.index)


def join(pairs: Iterable[KeyValue]) -> str:
    """
    Serialize pairs back into a key=value span.

    Args:
        pairs: KeyValue records, or a dict of them keyed by name

    Returns:
        Span text with pairs in index order and original quoting
    """
    if isinstance(pairs, dict):
        pairs = pairs.values()
    return FIELD_SEPARATOR.join(
        str(kv) for kv in sorted(pairs, key=lambda kv: kv.index)
    )
