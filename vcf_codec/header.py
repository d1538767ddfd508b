"""VCF header: an indexed, order-preserving store of meta-lines."""

import logging
import re
import threading
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from vcf_codec.errors import (
    DuplicateKeyError,
    KeyNotFound,
    LinePatternError,
    MalformedSpan,
    MissingMandatoryLine,
)
from vcf_codec.metaline import META_PREFIX, MetaLine, parse_meta_line

logger = logging.getLogger(__name__)

FILE_FORMAT_KEY = "fileformat"
FILE_VERSION_PATTERN = re.compile(r"^VCFv(.+)$")
COLUMN_HEADER_PREFIX = "#CHROM"
FIXED_COLUMNS = ("#CHROM", "POS", "ID", "REF", "ALT", "QUAL", "FILTER", "INFO")
FORMAT_COLUMN = "FORMAT"
SAMPLE_COLUMN_OFFSET = 9


class Header:
    """
    Meta-lines of a VCF header plus the sample names from its column line.

    Lines keep file order and receive 1-based line numbers as they are
    added. Lookups by line key (``INFO``) and by line key plus ``ID``
    (``INFO``/``NS``) use indexes that are refreshed on every mutation.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._lines: List[MetaLine] = []
        self._by_type: Dict[str, List[MetaLine]] = {}
        self._by_type_id: Dict[Tuple[str, str], MetaLine] = {}
        self._file_format: Optional[str] = None
        self._sample_names: List[str] = []
        self._column_header: Optional[str] = None
        self.errors: List[Exception] = []

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[MetaLine]:
        return iter(self.lines)

    @property
    def lines(self) -> List[MetaLine]:
        """All meta-lines in file order."""
        with self._lock:
            return list(self._lines)

    def add_line(self, line: MetaLine) -> MetaLine:
        """
        Append a meta-line and index it.

        Args:
            line: Parsed or programmatically built MetaLine

        Returns:
            The same MetaLine, with its line_number assigned

        Raises:
            DuplicateKeyError: If a second ##fileformat line is added
            LinePatternError: If a ##fileformat value is not ``VCFv<version>``
        """
        with self._lock:
            if line.line_key == FILE_FORMAT_KEY:
                if self._file_format is not None:
                    raise DuplicateKeyError(FILE_FORMAT_KEY)
                self._file_format = _parse_file_version(line)

            line.line_number = len(self._lines) + 1
            self._lines.append(line)
            self._index(line)
        return line

    def add_line_from_string(self, text: str) -> MetaLine:
        """Parse a raw ``##`` line and add it."""
        return self.add_line(parse_meta_line(text))

    def remove_line(self, line: MetaLine) -> None:
        """Remove a meta-line, renumber the remaining lines and rebuild indexes."""
        with self._lock:
            self._lines.remove(line)
            if line.line_key == FILE_FORMAT_KEY:
                self._file_format = None
            for number, remaining in enumerate(self._lines, start=1):
                remaining.line_number = number
            self.reindex()

    def reindex(self) -> None:
        """Rebuild the lookup indexes, e.g. after editing a line's ID in place."""
        with self._lock:
            self._by_type = {}
            self._by_type_id = {}
            for line in self._lines:
                self._index(line)

    def _index(self, line: MetaLine) -> None:
        self._by_type.setdefault(line.line_key, []).append(line)
        if line.is_structured and "ID" in line.fields:
            id_key = (line.line_key, line.fields["ID"].value)
            if id_key in self._by_type_id:
                logger.warning(
                    "##%s with ID=%s declared more than once; using line %d",
                    id_key[0],
                    id_key[1],
                    line.line_number,
                )
            self._by_type_id[id_key] = line

    def lines_by_type(self, line_key: str) -> List[MetaLine]:
        """Return every line with the given key (e.g. ``INFO``) in file order."""
        with self._lock:
            return list(self._by_type.get(line_key, []))

    def line_by_type_and_id(self, line_key: str, line_id: str) -> MetaLine:
        """
        Return the structured line with the given key and ``ID`` field.

        Raises:
            KeyNotFound: If no such line exists
        """
        with self._lock:
            try:
                return self._by_type_id[(line_key, line_id)]
            except KeyError:
                raise KeyNotFound(
                    f"{line_key}/{line_id}", f"no ##{line_key} line with ID={line_id}"
                ) from None

    @property
    def file_format_version(self) -> str:
        """
        Version from the ##fileformat line, e.g. ``4.3``.

        Raises:
            MissingMandatoryLine: If no ##fileformat line has been added
        """
        with self._lock:
            if self._file_format is None:
                raise MissingMandatoryLine(FILE_FORMAT_KEY)
            return self._file_format

    @property
    def sample_names(self) -> List[str]:
        with self._lock:
            return list(self._sample_names)

    def set_column_header(self, line: str) -> List[str]:
        """
        Record the ``#CHROM`` column line and extract the sample names.

        Returns:
            Sample names, empty if the line has no sample columns

        Raises:
            LinePatternError: If the line does not start with ``#CHROM``
        """
        text = line.rstrip("\r\n")
        if not text.startswith(COLUMN_HEADER_PREFIX):
            raise LinePatternError(text, f"not a column header line: {text!r}")
        columns = text.split("\t")
        with self._lock:
            self._column_header = text
            self._sample_names = columns[SAMPLE_COLUMN_OFFSET:]
            return list(self._sample_names)

    def declared_type(self, line_key: str, line_id: str) -> Optional[str]:
        """Return the ``Type`` declared for an INFO/FORMAT id, or None."""
        try:
            return self.line_by_type_and_id(line_key, line_id).type
        except KeyNotFound:
            return None

    def format_type(self, key: str) -> Optional[str]:
        """Declared type of a FORMAT key; usable as a decoder type lookup."""
        return self.declared_type("FORMAT", key)

    def info_type(self, key: str) -> Optional[str]:
        return self.declared_type("INFO", key)

    def filters(self) -> Dict[str, str]:
        """Map FILTER ids to their descriptions."""
        return {
            line.id: line.description or ""
            for line in self.lines_by_type("FILTER")
            if line.id is not None
        }

    def contigs(self) -> List[Dict[str, str]]:
        """Return one key/value dict per ##contig line, in file order."""
        return [
            {key: line.fields[key].value for key in line.order}
            for line in self.lines_by_type("contig")
            if line.is_structured
        ]

    def sample_metadata(self) -> Dict[str, Dict[str, str]]:
        """Map ##SAMPLE ids to their remaining key/value pairs."""
        samples = {}
        for line in self.lines_by_type("SAMPLE"):
            if line.id is None:
                continue
            samples[line.id] = {
                key: line.fields[key].value for key in line.order if key != "ID"
            }
        return samples

    def pedigrees(self) -> List[MetaLine]:
        return self.lines_by_type("PEDIGREE")

    def column_header(self) -> str:
        """The ``#CHROM`` line as read, or rebuilt from the sample names."""
        if self._column_header is not None:
            return self._column_header
        columns = list(FIXED_COLUMNS)
        if self._sample_names:
            columns.append(FORMAT_COLUMN)
            columns.extend(self._sample_names)
        return "\t".join(columns)

    def serialize(self) -> str:
        """Return the full header text, meta-lines followed by the column line."""
        lines = [line.serialize() for line in self.lines]
        lines.append(self.column_header())
        return "\n".join(lines) + "\n"


def _parse_file_version(line: MetaLine) -> str:
    match = FILE_VERSION_PATTERN.match(line.value or "")
    if not match:
        raise LinePatternError(
            line.original_text, f"file format error: {line.original_text!r}"
        )
    return match.group(1)


def parse_header(lines: Iterable[str], strict: bool = False) -> Header:
    """
    Parse VCF header lines into a Header.

    Reading stops at the ``#CHROM`` column line. In strict mode the first
    unparseable meta-line is re-raised; otherwise it is logged, kept in
    ``header.errors`` and skipped.

    Args:
        lines: Header lines, typically read from the top of a VCF file
        strict: Abort on the first bad meta-line

    Returns:
        Populated Header

    Raises:
        MissingMandatoryLine: If no ##fileformat line was found
        LinePatternError: In strict mode, for a line matching no pattern
        MalformedSpan: In strict mode, for a structured line with a bad body
    """
    header = Header()

    for number, raw in enumerate(lines, start=1):
        line = raw.rstrip("\r\n")
        if not line.strip():
            continue
        if line.startswith(COLUMN_HEADER_PREFIX):
            header.set_column_header(line)
            break
        try:
            if not line.startswith(META_PREFIX):
                raise LinePatternError(line)
            header.add_line(parse_meta_line(line))
        except (LinePatternError, MalformedSpan, DuplicateKeyError) as exc:
            if strict:
                raise
            logger.warning("Skipping header line %d: %s", number, exc)
            header.errors.append(exc)

    if not header.lines_by_type(FILE_FORMAT_KEY):
        raise MissingMandatoryLine(FILE_FORMAT_KEY)
    return header
