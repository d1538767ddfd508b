"""Parser options, read from string-valued option dictionaries."""

from dataclasses import dataclass
from typing import List, Mapping, Optional

DEFAULT_BATCH_SIZE = 10000


def _parse_bool(options: Mapping[str, str], name: str, default: str) -> bool:
    return str(options.get(name, default)).lower() == "true"


def _parse_list(options: Mapping[str, str], name: str) -> Optional[List[str]]:
    raw = options.get(name, "")
    if not raw:
        return None
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass
class ParserOptions:
    """
    Options shared by the header parser, the reader and the exporters.

    Attributes:
        strict: Abort on the first unparseable header line
        batch_size: Rows per Arrow record batch
        include_samples: Only decode these samples, if set
        exclude_samples: Skip these samples, if set
    """

    strict: bool = False
    batch_size: int = DEFAULT_BATCH_SIZE
    include_samples: Optional[List[str]] = None
    exclude_samples: Optional[List[str]] = None

    @classmethod
    def from_options(cls, options: Optional[Mapping[str, str]] = None) -> "ParserOptions":
        """
        Build options from a dict of strings.

        Recognised keys: ``strict`` ("true"/"false"), ``batchSize``,
        ``includeSampleIds`` and ``excludeSampleIds`` (comma-separated).

        Raises:
            ValueError: If ``batchSize`` is not a positive integer
        """
        options = options or {}
        batch_size = int(options.get("batchSize", str(DEFAULT_BATCH_SIZE)))
        if batch_size <= 0:
            raise ValueError(f"batchSize must be positive, got {batch_size}")

        return cls(
            strict=_parse_bool(options, "strict", "false"),
            batch_size=batch_size,
            include_samples=_parse_list(options, "includeSampleIds"),
            exclude_samples=_parse_list(options, "excludeSampleIds"),
        )

    def wants_sample(self, sample_name: str) -> bool:
        """Apply the include/exclude sample filters."""
        if self.include_samples and sample_name not in self.include_samples:
            return False
        if self.exclude_samples and sample_name in self.exclude_samples:
            return False
        return True
