"""
Example of reading a VCF header and decoding sample genotypes.

Usage:
    python examples/genotype_reader_example.py calls.vcf.gz [SAMPLE,SAMPLE...]
"""

import sys
import time

import pyarrow as pa

from vcf_codec.arrow_export import header_to_table, read_genotypes_with_arrow
from vcf_codec.logging_utils import configure_logging
from vcf_codec.reader import GenotypeReader, read_header


def show_header(vcf_path: str):
    """Print the header summary and the FORMAT declarations."""
    header = read_header(vcf_path)
    print(f"VCF version: {header.file_format_version}")
    print(f"Samples: {', '.join(header.sample_names) or '(none)'}")
    print(f"Meta-lines: {len(header)}")

    for line in header.lines_by_type("FORMAT"):
        print(f"  FORMAT {line.id}: {line.type} ({line.description})")

    for error in header.errors:
        print(f"  skipped: {error}")

    table = header_to_table(header)
    print(f"Header table: {table.num_rows} rows, columns {table.column_names}")


def show_genotypes(vcf_path: str, samples: str = "", limit: int = 5):
    """Print decoded genotypes of the first few variants."""
    options = {"includeSampleIds": samples} if samples else {}
    reader = GenotypeReader(vcf_path, options)

    for count, variant in enumerate(reader.read()):
        if count >= limit:
            break
        print(f"{variant.contig}:{variant.position}")
        for name, record in variant.genotypes.items():
            separator = "|" if record.phased else "/"
            gt = separator.join("." if a < 0 else str(a) for a in record.alleles)
            print(f"  {name}: GT={gt or '-'} DP={record.depth} GQ={record.quality}")
        for name, errors in variant.genotypes.errors.items():
            for error in errors:
                print(f"  {name}: {error}")


def export_to_arrow(vcf_path: str):
    """Decode the whole file into an Arrow table and time it."""
    start = time.time()
    batches = list(read_genotypes_with_arrow(vcf_path, {"batchSize": "10000"}))
    if not batches:
        print("No genotypes found")
        return None
    table = pa.Table.from_batches(batches)
    elapsed = time.time() - start
    print(f"Arrow export: {table.num_rows} genotypes in {elapsed:.2f} seconds")
    return table


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)

    configure_logging("warning")
    path = sys.argv[1]
    show_header(path)
    show_genotypes(path, sys.argv[2] if len(sys.argv) > 2 else "")
    export_to_arrow(path)
