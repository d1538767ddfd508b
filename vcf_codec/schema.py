from typing import Optional, Tuple

from pyspark.sql.types import (
    ArrayType,
    BooleanType,
    DoubleType,
    IntegerType,
    LongType,
    MapType,
    StringType,
    StructField,
    StructType,
)

from vcf_codec.genotype import GenotypeRecord
from vcf_codec.metaline import MetaLine


def get_genotype_schema() -> StructType:
    """
    Returns the schema for decoded sample genotypes.

    One row per sample per variant; FORMAT keys without a dedicated decoder
    are kept as strings in ``rawFields``.
    """
    return StructType(
        [
            StructField("sampleId", StringType(), False),
            StructField("alleles", ArrayType(LongType()), False),
            StructField("phased", BooleanType(), False),
            StructField("depth", LongType(), True),
            StructField("quality", LongType(), True),
            StructField("likelihoods", ArrayType(DoubleType()), False),
            StructField("rawFields", MapType(StringType(), StringType()), False),
        ]
    )


def get_meta_line_schema() -> StructType:
    """
    Returns the schema for header meta-lines.

    Structured lines fill ``fields`` (in original order), unstructured lines
    fill ``value``.
    """
    field_struct = StructType(
        [
            StructField("key", StringType(), False),
            StructField("value", StringType(), False),
            StructField("index", IntegerType(), False),
            StructField("quote", StringType(), True),
        ]
    )

    return StructType(
        [
            StructField("lineNumber", LongType(), False),
            StructField("metaType", StringType(), False),
            StructField("lineKey", StringType(), False),
            StructField("value", StringType(), True),
            StructField("fields", ArrayType(field_struct), True),
        ]
    )


def genotype_to_row(sample_id: str, record: GenotypeRecord) -> Tuple:
    """
    Convert a decoded genotype into a tuple matching get_genotype_schema().

    Args:
        sample_id: Sample name the genotype belongs to
        record: Decoded genotype

    Returns:
        Tuple of column values
    """
    return (
        sample_id,
        list(record.alleles),
        record.phased,
        record.depth,
        record.quality,
        list(record.likelihoods),
        dict(record.raw_fields),
    )


def meta_line_to_row(line: MetaLine) -> Tuple:
    """
    Convert a meta-line into a tuple matching get_meta_line_schema().

    Args:
        line: Parsed or built MetaLine

    Returns:
        Tuple of column values
    """
    fields: Optional[list] = None
    if line.is_structured:
        fields = [
            (pair.key, pair.value, pair.index, pair.quote)
            for pair in sorted(line.fields.values(), key=lambda kv: kv.index)
        ]
    return (
        line.line_number,
        line.meta_type.value,
        line.line_key,
        line.value,
        fields,
    )
