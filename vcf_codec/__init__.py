"""VCF codec - header meta-line and sample genotype parsing."""

__version__ = "0.1.0"

from vcf_codec.errors import (
    DuplicateKeyError,
    FieldDecodeError,
    FieldDecodeWarning,
    KeyNotFound,
    LinePatternError,
    MalformedSpan,
    MissingMandatoryLine,
    VCFCodecError,
)
from vcf_codec.genotype import (
    DecodeResult,
    GenotypeRecord,
    GenotypeStore,
    decode_likelihoods,
    decode_sample,
)
from vcf_codec.header import Header, parse_header
from vcf_codec.kv import KeyValue
from vcf_codec.metaline import MetaLine, MetaType, parse_meta_line
from vcf_codec.reader import GenotypeReader, read_header

__all__ = [
    "DecodeResult",
    "DuplicateKeyError",
    "FieldDecodeError",
    "FieldDecodeWarning",
    "GenotypeReader",
    "GenotypeRecord",
    "GenotypeStore",
    "Header",
    "KeyNotFound",
    "KeyValue",
    "LinePatternError",
    "MalformedSpan",
    "MetaLine",
    "MetaType",
    "MissingMandatoryLine",
    "VCFCodecError",
    "decode_likelihoods",
    "decode_sample",
    "parse_header",
    "parse_meta_line",
    "read_header",
]
