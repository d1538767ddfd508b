"""Per-sample genotype decoding for VCF data lines."""

import logging
import math
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple, Union

from vcf_codec.errors import FieldDecodeError, FieldDecodeWarning

logger = logging.getLogger(__name__)

SAMPLE_SEPARATOR = ":"
LIST_SEPARATOR = ","
PHASED_SEPARATOR = "|"
UNPHASED_SEPARATOR = "/"
MISSING_VALUE = "."
MISSING_ALLELE = -1
PL_TO_GL_DIVISOR = -10.0

# ASCII-only number syntax: no underscores, padding or non-ASCII digits.
ALLELE_PATTERN = re.compile(r"[0-9]+")
INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")
FLOAT_PATTERN = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf(?:inity)?|nan)",
    re.IGNORECASE,
)

TypeLookup = Callable[[str], Optional[str]]


@dataclass
class GenotypeRecord:
    """
    Decoded FORMAT values for one sample at one variant.

    Attributes:
        alleles: Allele indices, one per copy; -1 marks a missing allele
        phased: True when the GT alleles were separated by ``|``
        depth: DP value, None when absent
        quality: GQ value, None when absent
        likelihoods: GL values, or PL values converted to the GL scale
        raw_fields: Original strings of keys without a dedicated decoder
    """

    alleles: List[int] = field(default_factory=list)
    phased: bool = False
    depth: Optional[int] = None
    quality: Optional[int] = None
    likelihoods: List[float] = field(default_factory=list)
    raw_fields: Dict[str, str] = field(default_factory=dict)

    @property
    def ploidy(self) -> int:
        return len(self.alleles)

    @property
    def is_missing(self) -> bool:
        return not self.alleles or all(a == MISSING_ALLELE for a in self.alleles)


@dataclass
class DecodeResult:
    """A best-effort GenotypeRecord plus the diagnostics collected for it."""

    record: GenotypeRecord
    errors: List[FieldDecodeError] = field(default_factory=list)
    warnings: List[FieldDecodeWarning] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def _is_absent(value: str) -> bool:
    return value == "" or value == MISSING_VALUE


def _to_int(token: str) -> int:
    if not INTEGER_PATTERN.fullmatch(token):
        raise ValueError(f"invalid integer {token!r}")
    return int(token)


def _to_float(token: str) -> float:
    if not FLOAT_PATTERN.fullmatch(token):
        raise ValueError(f"invalid float {token!r}")
    return float(token)


def decode_alleles(value: str) -> Optional[Tuple[List[int], bool]]:
    """
    Decode a GT value into (alleles, phased).

    The first separator seen decides both phasing and how the value is
    split, so ``0/0/0`` is an unphased triploid and ``.`` a haploid missing
    call.

    Returns:
        None for an empty value, else a tuple of (allele list, phased flag)

    Raises:
        FieldDecodeError: If any allele token is not ``.`` or a
            non-negative integer
    """
    if value == "":
        return None
    separator = None
    for char in value:
        if char in (PHASED_SEPARATOR, UNPHASED_SEPARATOR):
            separator = char
            break

    tokens = value.split(separator) if separator else [value]
    alleles = []
    for token in tokens:
        if token == MISSING_VALUE:
            alleles.append(MISSING_ALLELE)
        elif ALLELE_PATTERN.fullmatch(token):
            alleles.append(int(token))
        else:
            raise FieldDecodeError("GT", token, f"bad allele in genotype '{value}'")
    return alleles, separator == PHASED_SEPARATOR


def decode_likelihoods(value: str, as_pl: bool = False) -> List[float]:
    """
    Decode a GL or PL value into log10-scaled likelihoods.

    Args:
        value: Comma-separated numbers, or ``.``/empty when absent
        as_pl: Treat the values as phred-scaled and divide each by -10

    Returns:
        List of floats, empty when the value is absent

    Raises:
        ValueError: If an entry is not a number
    """
    if _is_absent(value):
        return []
    likelihoods = []
    for token in value.split(LIST_SEPARATOR):
        number = _to_float(token)
        if as_pl:
            number /= PL_TO_GL_DIVISOR
        likelihoods.append(number)
    return likelihoods


def _decode_gt(record: GenotypeRecord, value: str) -> None:
    decoded = decode_alleles(value)
    if decoded is not None:
        record.alleles, record.phased = decoded


def _decode_dp(record: GenotypeRecord, value: str) -> None:
    if _is_absent(value):
        return
    try:
        record.depth = _to_int(value)
    except ValueError:
        raise FieldDecodeError("DP", value, "expected an integer") from None


def _decode_gq(
    record: GenotypeRecord, value: str, result: DecodeResult, declared: Optional[str]
) -> None:
    if _is_absent(value):
        return
    if declared == "Float":
        try:
            number = _to_float(value)
        except ValueError:
            raise FieldDecodeError("GQ", value, "expected a float") from None
        if not math.isfinite(number):
            raise FieldDecodeError("GQ", value, "expected a finite float")
        record.quality = int(math.floor(number + 0.5))
        result.warnings.append(
            FieldDecodeWarning(
                "GQ",
                value,
                f"GQ declared as Float; rounded {value} to {record.quality}",
            )
        )
        return
    try:
        record.quality = _to_int(value)
    except ValueError:
        raise FieldDecodeError("GQ", value, "expected an integer") from None


def _decode_likelihood_field(
    record: GenotypeRecord, key: str, value: str
) -> None:
    try:
        record.likelihoods = decode_likelihoods(value, as_pl=(key == "PL"))
    except ValueError:
        record.likelihoods = []
        raise FieldDecodeError(key, value, "expected comma-separated numbers") from None


def decode_sample(
    format_keys: Sequence[str],
    sample_string: str,
    type_lookup: Optional[TypeLookup] = None,
) -> DecodeResult:
    """
    Decode one sample column against its FORMAT keys.

    Every field that can be decoded is; each failure is collected as a
    FieldDecodeError and the remaining fields are still processed. A
    mismatch between the number of keys and values is reported once and
    nothing is decoded.

    Args:
        format_keys: FORMAT keys, e.g. ``["GT", "GQ", "DP", "HQ"]``
        sample_string: Colon-delimited sample value, e.g. ``0|1:48:8:51,51``
        type_lookup: Returns the declared FORMAT type of a key (see
            ``Header.format_type``); GQ is decoded as Integer when undeclared

    Returns:
        DecodeResult with the record, errors and warnings
    """
    record = GenotypeRecord()
    result = DecodeResult(record=record)

    values = sample_string.split(SAMPLE_SEPARATOR)
    if len(values) != len(format_keys):
        result.errors.append(
            FieldDecodeError(
                SAMPLE_SEPARATOR.join(format_keys),
                sample_string,
                f"{len(values)} values for {len(format_keys)} FORMAT keys",
            )
        )
        return result

    for key, value in zip(format_keys, values):
        try:
            if key == "GT":
                _decode_gt(record, value)
            elif key == "DP":
                _decode_dp(record, value)
            elif key == "GQ":
                declared = type_lookup(key) if type_lookup is not None else None
                _decode_gq(record, value, result, declared)
            elif key in ("GL", "PL"):
                _decode_likelihood_field(record, key, value)
            else:
                record.raw_fields[key] = value
        except FieldDecodeError as exc:
            result.errors.append(exc)

    return result


def typed_field(
    record: GenotypeRecord,
    key: str,
    declared_type: Optional[str],
    missing: Union[int, float, str, None] = MISSING_ALLELE,
) -> list:
    """
    Convert a raw FORMAT value (e.g. ``HQ``) using its declared type.

    Args:
        record: Decoded genotype holding the raw value
        key: FORMAT key stored in ``raw_fields``
        declared_type: ``Integer``, ``Float`` or anything else for strings
        missing: Replacement for ``.`` entries

    Returns:
        List of converted values

    Raises:
        KeyError: If the record has no raw value for ``key``
        FieldDecodeError: If an entry does not match the declared type
    """
    raw = record.raw_fields[key]
    if declared_type == "Integer":
        convert = _to_int
    elif declared_type == "Float":
        convert = _to_float
    else:
        convert = str

    values = []
    for token in raw.split(LIST_SEPARATOR):
        if token == MISSING_VALUE:
            values.append(missing)
            continue
        try:
            values.append(convert(token))
        except ValueError:
            raise FieldDecodeError(key, token, f"expected {declared_type}") from None
    return values


class GenotypeStore:
    """
    Decoded genotypes of every sample at one variant, keyed by sample name.

    Iteration yields sample names in column order, like a dict.
    """

    def __init__(
        self,
        records: Optional[Dict[str, GenotypeRecord]] = None,
        errors: Optional[Dict[str, List[FieldDecodeError]]] = None,
        warnings: Optional[Dict[str, List[FieldDecodeWarning]]] = None,
    ):
        self.records: Dict[str, GenotypeRecord] = records or {}
        self.errors: Dict[str, List[FieldDecodeError]] = errors or {}
        self.warnings: Dict[str, List[FieldDecodeWarning]] = warnings or {}

    @classmethod
    def from_samples(
        cls,
        sample_names: Sequence[str],
        format_keys: Sequence[str],
        sample_strings: Sequence[str],
        type_lookup: Optional[TypeLookup] = None,
    ) -> "GenotypeStore":
        """
        Decode all sample columns of one data line.

        Args:
            sample_names: Names from the header column line
            format_keys: FORMAT keys of the data line
            sample_strings: Sample columns, aligned with ``sample_names``
            type_lookup: Declared FORMAT type lookup for the decoder

        Returns:
            GenotypeStore with one record per sample that has a column
        """
        if len(sample_names) != len(sample_strings):
            logger.warning(
                "Data line has %d sample columns but header names %d samples",
                len(sample_strings),
                len(sample_names),
            )

        store = cls()
        for name, sample_string in zip(sample_names, sample_strings):
            store.add(name, decode_sample(format_keys, sample_string, type_lookup))
        return store

    def add(self, sample_name: str, result: DecodeResult) -> GenotypeRecord:
        self.records[sample_name] = result.record
        if result.errors:
            self.errors[sample_name] = result.errors
        if result.warnings:
            self.warnings[sample_name] = result.warnings
        return result.record

    def __getitem__(self, key: Union[str, int]) -> GenotypeRecord:
        if isinstance(key, int):
            return list(self.records.values())[key]
        return self.records[key]

    def __contains__(self, sample_name: str) -> bool:
        return sample_name in self.records

    def __iter__(self) -> Iterator[str]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    @property
    def sample_names(self) -> List[str]:
        return list(self.records)

    def items(self):
        return self.records.items()

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)
