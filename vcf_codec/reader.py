import gzip
import logging
from typing import IO, Iterator, List, Mapping, NamedTuple, Optional, Tuple

from vcf_codec.config import ParserOptions
from vcf_codec.genotype import SAMPLE_SEPARATOR, GenotypeStore
from vcf_codec.header import COLUMN_HEADER_PREFIX, SAMPLE_COLUMN_OFFSET, Header, parse_header

logger = logging.getLogger(__name__)

MIN_DATA_COLUMNS = 8
FORMAT_COLUMN_INDEX = 8


class VariantGenotypes(NamedTuple):
    """Decoded genotypes of one data line, with its location."""

    contig: str
    position: int
    genotypes: GenotypeStore


def open_vcf(file_path: str) -> IO[str]:
    """Open a plain or gzip-compressed VCF file for text reading."""
    if file_path.endswith(".gz"):
        return gzip.open(file_path, "rt", encoding="utf-8")
    return open(file_path, "r", encoding="utf-8")


def _read_header_lines(file_handle: IO[str]) -> List[str]:
    header_lines = []
    for line in file_handle:
        header_lines.append(line)
        if line.startswith(COLUMN_HEADER_PREFIX):
            break
        if not line.startswith("#") and line.strip():
            raise ValueError(f"Data line before #CHROM header line: {line.rstrip()}")
    return header_lines


def read_header(file_path: str, strict: bool = False) -> Header:
    """
    Read and parse the header of a VCF file.

    Args:
        file_path: Path to a .vcf or .vcf.gz file
        strict: Abort on the first unparseable meta-line

    Returns:
        Parsed Header
    """
    with open_vcf(file_path) as file_handle:
        return parse_header(_read_header_lines(file_handle), strict=strict)


def split_data_line(line: str) -> Tuple[str, int, List[str], List[str]]:
    """
    Split a data line into the pieces the genotype decoder needs.

    Args:
        line: Tab-separated VCF data line

    Returns:
        Tuple of (contig, position, format_keys, sample_strings)

    Raises:
        ValueError: If the line has fewer than 8 columns or a bad POS
    """
    fields = line.rstrip("\r\n").split("\t")
    if len(fields) < MIN_DATA_COLUMNS:
        raise ValueError(f"Invalid VCF line: {line.rstrip()}")

    contig = fields[0]
    position = int(fields[1])
    if len(fields) > FORMAT_COLUMN_INDEX:
        format_keys = fields[FORMAT_COLUMN_INDEX].split(SAMPLE_SEPARATOR)
    else:
        format_keys = []
    return contig, position, format_keys, fields[SAMPLE_COLUMN_OFFSET:]


class GenotypeReader:
    """
    Reads a VCF file and decodes the sample genotypes of every data line.

    Options (string values, as for Spark data sources):
        - strict: Abort on the first unparseable header line (default: false)
        - includeSampleIds: Comma-separated list of sample IDs to include
        - excludeSampleIds: Comma-separated list of sample IDs to exclude

    Example:
        reader = GenotypeReader("calls.vcf.gz", {"includeSampleIds": "NA00001"})
        for variant in reader.read():
            print(variant.contig, variant.position, variant.genotypes["NA00001"].alleles)
    """

    def __init__(self, file_path: str, options: Optional[Mapping[str, str]] = None):
        self.file_path = file_path
        self.options = ParserOptions.from_options(options)
        self.header: Optional[Header] = None

    def _selected_columns(self) -> List[Tuple[int, str]]:
        return [
            (i, name)
            for i, name in enumerate(self.header.sample_names)
            if self.options.wants_sample(name)
        ]

    def read(self) -> Iterator[VariantGenotypes]:
        """
        Parse the header, then yield decoded genotypes per data line.

        Lines with fewer than 8 columns or a non-numeric POS are logged and
        skipped.

        Yields:
            VariantGenotypes for each data line
        """
        with open_vcf(self.file_path) as file_handle:
            header_lines = _read_header_lines(file_handle)
            self.header = parse_header(header_lines, strict=self.options.strict)
            columns = self._selected_columns()

            for line_number, line in enumerate(file_handle, start=len(header_lines) + 1):
                if line.startswith("#") or not line.strip():
                    continue
                try:
                    contig, position, format_keys, samples = split_data_line(line)
                except ValueError as exc:
                    logger.warning("Skipping data line %d: %s", line_number, exc)
                    continue

                names = [name for i, name in columns if i < len(samples)]
                strings = [samples[i] for i, _ in columns if i < len(samples)]
                store = GenotypeStore.from_samples(
                    names, format_keys, strings, self.header.format_type
                )
                for name, errors in store.errors.items():
                    for error in errors:
                        logger.debug(
                            "%s:%d sample %s: %s", contig, position, name, error
                        )
                yield VariantGenotypes(contig, position, store)
