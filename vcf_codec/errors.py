"""Exceptions raised while parsing VCF headers and sample genotypes."""

from typing import Optional


class VCFCodecError(Exception):
    """Base exception for vcf_codec parsing errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class LinePatternError(VCFCodecError, ValueError):
    """Raised when a header line matches neither meta-line pattern."""

    def __init__(self, line: str, message: Optional[str] = None):
        self.line = line
        super().__init__(message or f"unexpected header line: {line!r}")


class MalformedSpan(VCFCodecError, ValueError):
    """Raised when a structured key=value span cannot be tokenized."""

    def __init__(self, span: str, position: int, reason: str):
        self.span = span
        self.position = position
        super().__init__(f"malformed key=value span at {position}: {reason} [{span}]")


class KeyNotFound(VCFCodecError, KeyError):
    """Raised when a field or meta-line lookup misses."""

    def __init__(self, key: str, message: Optional[str] = None):
        self.key = key
        super().__init__(message or f"key not found: {key}")


class DuplicateKeyError(VCFCodecError, ValueError):
    """Raised when a key that must be unique is added a second time."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"key cannot be added multiple times: {key}")


class MissingMandatoryLine(VCFCodecError):
    """Raised when the header has no ##fileformat line."""

    def __init__(self, line_key: str = "fileformat"):
        self.line_key = line_key
        super().__init__(f"header is missing the mandatory ##{line_key}= line")


class FieldDecodeError(VCFCodecError, ValueError):
    """A single genotype field failed type coercion.

    These are collected by the decoder rather than raised, so one bad
    value does not discard the rest of the sample.
    """

    def __init__(self, key: str, value: str, reason: str = ""):
        self.key = key
        self.value = value
        self.reason = reason
        message = f"value '{value}' invalid syntax for field {key}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class FieldDecodeWarning(UserWarning):
    """Non-fatal note about a coerced genotype field (e.g. a Float GQ)."""

    def __init__(self, key: str, value: str, message: str):
        self.key = key
        self.value = value
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


__all__ = [
    "VCFCodecError",
    "LinePatternError",
    "MalformedSpan",
    "KeyNotFound",
    "DuplicateKeyError",
    "MissingMandatoryLine",
    "FieldDecodeError",
    "FieldDecodeWarning",
]
