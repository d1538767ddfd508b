"""Arrow export of decoded genotypes and header meta-lines."""

from typing import Iterable, Iterator, List, Mapping, Optional, Tuple

import pyarrow as pa

from vcf_codec.config import DEFAULT_BATCH_SIZE
from vcf_codec.genotype import GenotypeStore
from vcf_codec.header import Header
from vcf_codec.reader import GenotypeReader
from vcf_codec.schema import genotype_to_row, meta_line_to_row

GENOTYPE_ARROW_SCHEMA = pa.schema(
    [
        pa.field("contig", pa.string()),
        pa.field("position", pa.int64()),
        pa.field("sampleId", pa.string(), nullable=False),
        pa.field("alleles", pa.list_(pa.int64()), nullable=False),
        pa.field("phased", pa.bool_(), nullable=False),
        pa.field("depth", pa.int64()),
        pa.field("quality", pa.int64()),
        pa.field("likelihoods", pa.list_(pa.float64()), nullable=False),
        pa.field("rawFields", pa.map_(pa.string(), pa.string()), nullable=False),
    ]
)

META_LINE_ARROW_SCHEMA = pa.schema(
    [
        pa.field("lineNumber", pa.int64(), nullable=False),
        pa.field("metaType", pa.string(), nullable=False),
        pa.field("lineKey", pa.string(), nullable=False),
        pa.field("value", pa.string()),
        pa.field(
            "fields",
            pa.list_(
                pa.struct(
                    [
                        pa.field("key", pa.string()),
                        pa.field("value", pa.string()),
                        pa.field("index", pa.int32()),
                        pa.field("quote", pa.string()),
                    ]
                )
            ),
        ),
    ]
)


def _genotype_columns(rows: List[Tuple]) -> dict:
    names = GENOTYPE_ARROW_SCHEMA.names
    columns = {name: [] for name in names}
    for row in rows:
        for name, value in zip(names, row):
            if name == "rawFields":
                # pyarrow map columns take (key, value) pairs
                value = list(value.items())
            columns[name].append(value)
    return columns


def _to_batch(rows: List[Tuple]) -> pa.RecordBatch:
    columns = _genotype_columns(rows)
    return pa.RecordBatch.from_arrays(
        [
            pa.array(columns[f.name], type=f.type)
            for f in GENOTYPE_ARROW_SCHEMA
        ],
        schema=GENOTYPE_ARROW_SCHEMA,
    )


def _store_rows(contig: str, position: int, store: GenotypeStore) -> Iterator[Tuple]:
    for sample_id, record in store.items():
        yield (contig, position) + genotype_to_row(sample_id, record)


def genotype_batches(
    variants: Iterable[Tuple[str, int, GenotypeStore]],
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> Iterator[pa.RecordBatch]:
    """
    Convert decoded variants into Arrow record batches.

    Args:
        variants: (contig, position, GenotypeStore) per data line
        batch_size: Maximum number of genotype rows per batch

    Yields:
        RecordBatch objects with GENOTYPE_ARROW_SCHEMA
    """
    rows: List[Tuple] = []
    for contig, position, store in variants:
        for row in _store_rows(contig, position, store):
            rows.append(row)
            if len(rows) >= batch_size:
                yield _to_batch(rows)
                rows = []
    if rows:
        yield _to_batch(rows)


def genotypes_to_table(
    store: GenotypeStore, contig: str = "", position: int = 0
) -> pa.Table:
    """
    Convert the genotypes of a single variant into an Arrow table.

    Args:
        store: Decoded genotypes of one data line
        contig: Chromosome of the variant
        position: 1-based position of the variant

    Returns:
        Table with one row per sample
    """
    batches = list(genotype_batches([(contig, position, store)]))
    return pa.Table.from_batches(batches, schema=GENOTYPE_ARROW_SCHEMA)


def header_to_table(header: Header) -> pa.Table:
    """
    Convert header meta-lines into an Arrow table, one row per line.

    Args:
        header: Parsed Header

    Returns:
        Table with META_LINE_ARROW_SCHEMA
    """
    names = META_LINE_ARROW_SCHEMA.names
    columns = {name: [] for name in names}
    for line in header:
        for name, value in zip(names, meta_line_to_row(line)):
            if name == "fields" and value is not None:
                value = [
                    {"key": k, "value": v, "index": i, "quote": q}
                    for k, v, i, q in value
                ]
            columns[name].append(value)
    return pa.table(
        [pa.array(columns[f.name], type=f.type) for f in META_LINE_ARROW_SCHEMA],
        schema=META_LINE_ARROW_SCHEMA,
    )


def read_genotypes_with_arrow(
    file_path: str, options: Optional[Mapping[str, str]] = None
) -> Iterator[pa.RecordBatch]:
    """
    Read a VCF file and yield its decoded genotypes as Arrow record batches.

    Args:
        file_path: Path to a .vcf or .vcf.gz file
        options: Reader options; ``batchSize`` sets the rows per batch

    Yields:
        RecordBatch objects with GENOTYPE_ARROW_SCHEMA
    """
    reader = GenotypeReader(file_path, options)
    yield from genotype_batches(reader.read(), batch_size=reader.options.batch_size)
