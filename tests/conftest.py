import gzip
import pytest

VCF_V43_META_LINES = [
    "##fileformat=VCFv4.3",
    "##fileDate=20090805",
    "##source=myImputationProgramV3.1",
    "##reference=file:///seq/references/1000GenomesPilot-NCBI36.fasta",
    '##contig=<ID=20,length=62435964,assembly=B36,md5=f126cdf8a6e0c7f379d618ff66beb2da,species="Homo sapiens",taxonomy=x>',
    "##phasing=partial",
    '##INFO=<ID=NS,Number=1,Type=Integer,Description="Number of Samples With Data">',
    '##INFO=<ID=DP,Number=1,Type=Integer,Description="Total Depth">',
    '##INFO=<ID=AF,Number=A,Type=Float,Description="Allele Frequency">',
    '##INFO=<ID=AA,Number=1,Type=String,Description="Ancestral Allele">',
    '##INFO=<ID=DB,Number=0,Type=Flag,Description="dbSNP membership, build 129">',
    '##INFO=<ID=H2,Number=0,Type=Flag,Description="HapMap2 membership">',
    '##FILTER=<ID=q10,Description="Quality below 10">',
    '##FILTER=<ID=s50,Description="Less than 50% of samples have data">',
    '##FORMAT=<ID=GT,Number=1,Type=String,Description="Genotype">',
    '##FORMAT=<ID=GQ,Number=1,Type=Integer,Description="Genotype Quality">',
    '##FORMAT=<ID=DP,Number=1,Type=Integer,Description="Read Depth">',
    '##FORMAT=<ID=HQ,Number=2,Type=Integer,Description="Haplotype Quality">',
]

COLUMN_LINE = "\t".join(
    ["#CHROM", "POS", "ID", "REF", "ALT", "QUAL", "FILTER", "INFO", "FORMAT"]
    + ["NA00001", "NA00002", "NA00003"]
)

DATA_LINES = [
    "\t".join(row)
    for row in [
        ["20", "14370", "rs6054257", "G", "A", "29", "PASS", "NS=3;DP=14;AF=0.5;DB;H2",
         "GT:GQ:DP:HQ", "0|0:48:1:51,51", "1|0:48:8:51,51", "1/1:43:5:.,."],
        ["20", "17330", ".", "T", "A", "3", "q10", "NS=3;DP=11;AF=0.017",
         "GT:GQ:DP:HQ", "0|0:49:3:58,50", "0|1:3:5:65,3", "0/0:41:3"],
        ["20", "1110696", "rs6040355", "A", "G,T", "67", "PASS", "NS=2;DP=10;AF=0.333,0.667;AA=T;DB",
         "GT:GQ:DP:HQ", "1|2:21:6:23,27", "2|1:2:0:18,2", "2/2:35:4"],
        ["20", "1230237", ".", "T", ".", "47", "PASS", "NS=3;DP=13;AA=T",
         "GT:GQ:DP:HQ", "0|0:54:7:56,60", "0|0:48:4:51,51", "0/0:61:2"],
        ["20", "1234567", "microsat1", "GTC", "G,GTCT", "50", "PASS", "NS=3;DP=9;AA=G",
         "GT:GQ:DP", "0/1:35:4", "0/2:17:2", "1/1:40:3"],
        ["X", "1000", ".", "A", "C", "50", "PASS", "NS=3",
         "GT", "0", "1", "."],
        ["X", "2000", ".", "A", "C", "50", "PASS", "NS=3",
         "GT", "0|0|0", "1/0/1", "."],
    ]
]


@pytest.fixture
def header_lines():
    """Meta-lines and column line of the VCFv4.3 format example."""
    return VCF_V43_META_LINES + [COLUMN_LINE]


@pytest.fixture
def sample_vcf_v43(tmp_path):
    """Create a plain VCFv4.3 file with three samples."""
    vcf_content = "\n".join(VCF_V43_META_LINES + [COLUMN_LINE] + DATA_LINES) + "\n"
    vcf_path = tmp_path / "sample_v43.vcf"
    vcf_path.write_text(vcf_content)
    return str(vcf_path)


@pytest.fixture
def sample_vcf_gzipped(tmp_path):
    """Create a gzipped copy of the VCFv4.3 example."""
    vcf_content = "\n".join(VCF_V43_META_LINES + [COLUMN_LINE] + DATA_LINES) + "\n"
    vcf_path = tmp_path / "sample_v43.vcf.gz"
    with gzip.open(vcf_path, "wb") as f:
        f.write(vcf_content.encode("utf-8"))
    return str(vcf_path)


@pytest.fixture
def sample_vcf_no_samples(tmp_path):
    """Create a VCF file without genotype columns."""
    vcf_content = "\n".join(
        [
            "##fileformat=VCFv4.2",
            '##INFO=<ID=DP,Number=1,Type=Integer,Description="Total Depth">',
            "\t".join(["#CHROM", "POS", "ID", "REF", "ALT", "QUAL", "FILTER", "INFO"]),
            "\t".join(["chr1", "100", "rs001", "A", "T", "30.0", "PASS", "DP=14"]),
        ]
    ) + "\n"
    vcf_path = tmp_path / "sample_no_genotypes.vcf"
    vcf_path.write_text(vcf_content)
    return str(vcf_path)
