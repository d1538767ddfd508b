"""Unit tests for reader module (GenotypeReader)."""

import logging

import pytest

from vcf_codec.reader import GenotypeReader, VariantGenotypes, read_header, split_data_line


class TestSplitDataLine:
    """Tests for splitting data lines."""

    def test_with_samples(self):
        """Test contig, position, FORMAT keys and sample columns."""
        line = "20\t14370\trs1\tG\tA\t29\tPASS\tNS=3\tGT:GQ\t0|0:48\t1|0:48\n"
        assert split_data_line(line) == ("20", 14370, ["GT", "GQ"], ["0|0:48", "1|0:48"])

    def test_sites_only(self):
        """Test a line with only the fixed columns."""
        line = "chr1\t100\trs001\tA\tT\t30.0\tPASS\tDP=14"
        assert split_data_line(line) == ("chr1", 100, [], [])

    def test_too_few_columns(self):
        """Test that short lines are rejected."""
        with pytest.raises(ValueError):
            split_data_line("chr1\t100\trs001")

    def test_bad_position(self):
        """Test that a non-numeric POS is rejected."""
        with pytest.raises(ValueError):
            split_data_line("chr1\tabc\t.\tA\tT\t30\tPASS\t.")


class TestReadHeader:
    """Tests for reading only the header."""

    def test_plain(self, sample_vcf_v43):
        """Test header of a plain file."""
        header = read_header(sample_vcf_v43)
        assert header.file_format_version == "4.3"
        assert header.sample_names == ["NA00001", "NA00002", "NA00003"]
        assert len(header) == 18

    def test_gzipped(self, sample_vcf_gzipped):
        """Test header of a gzipped file."""
        assert read_header(sample_vcf_gzipped).sample_names == ["NA00001", "NA00002", "NA00003"]

    def test_data_before_column_line(self, tmp_path):
        """Test that a data line before #CHROM is an error."""
        path = tmp_path / "broken.vcf"
        path.write_text("##fileformat=VCFv4.2\nchr1\t1\t.\tA\tT\t.\t.\t.\n")
        with pytest.raises(ValueError):
            read_header(str(path))


class TestGenotypeReader:
    """Tests for decoding genotypes from files."""

    def test_first_variant(self, sample_vcf_v43):
        """Test the decoded genotypes of the first data line."""
        first = next(GenotypeReader(sample_vcf_v43).read())

        assert isinstance(first, VariantGenotypes)
        assert first.contig == "20"
        assert first.position == 14370
        na1 = first.genotypes["NA00001"]
        assert na1.alleles == [0, 0]
        assert na1.phased is True
        assert na1.quality == 48
        assert na1.depth == 1
        assert na1.raw_fields == {"HQ": "51,51"}
        assert first.genotypes["NA00003"].phased is False

    def test_all_variants(self, sample_vcf_v43):
        """Test every data line is yielded."""
        reader = GenotypeReader(sample_vcf_v43)
        variants = list(reader.read())

        assert [v.position for v in variants] == [
            14370, 17330, 1110696, 1230237, 1234567, 1000, 2000,
        ]
        assert reader.header.file_format_version == "4.3"

    def test_gzipped_matches_plain(self, sample_vcf_v43, sample_vcf_gzipped):
        """Test plain and gzipped input decode the same."""
        plain = [v.genotypes["NA00002"].alleles for v in GenotypeReader(sample_vcf_v43).read()]
        gzipped = [
            v.genotypes["NA00002"].alleles for v in GenotypeReader(sample_vcf_gzipped).read()
        ]
        assert plain == gzipped

    def test_short_sample_column_is_reported(self, sample_vcf_v43):
        """Test a sample with fewer values than FORMAT keys."""
        second = list(GenotypeReader(sample_vcf_v43).read())[1]

        assert list(second.genotypes.errors) == ["NA00003"]
        assert second.genotypes["NA00003"].alleles == []
        assert second.genotypes["NA00002"].alleles == [0, 1]

    def test_haploid_and_triploid(self, sample_vcf_v43):
        """Test ploidy follows the GT value."""
        variants = list(GenotypeReader(sample_vcf_v43).read())
        haploid, triploid = variants[5], variants[6]

        assert [haploid.genotypes[i].alleles for i in range(3)] == [[0], [1], [-1]]
        assert triploid.genotypes["NA00001"].alleles == [0, 0, 0]
        assert triploid.genotypes["NA00001"].phased is True
        assert triploid.genotypes["NA00002"].alleles == [1, 0, 1]
        assert triploid.genotypes["NA00002"].phased is False

    def test_include_samples(self, sample_vcf_v43):
        """Test includeSampleIds option."""
        reader = GenotypeReader(sample_vcf_v43, {"includeSampleIds": "NA00001, NA00003"})
        first = next(reader.read())
        assert first.genotypes.sample_names == ["NA00001", "NA00003"]
        assert first.genotypes[1].alleles == [1, 1]

    def test_exclude_samples(self, sample_vcf_v43):
        """Test excludeSampleIds option."""
        reader = GenotypeReader(sample_vcf_v43, {"excludeSampleIds": "NA00002"})
        first = next(reader.read())
        assert first.genotypes.sample_names == ["NA00001", "NA00003"]

    def test_no_samples(self, sample_vcf_no_samples):
        """Test a sites-only file yields empty genotype stores."""
        variants = list(GenotypeReader(sample_vcf_no_samples).read())

        assert len(variants) == 1
        assert variants[0].contig == "chr1"
        assert len(variants[0].genotypes) == 0

    def test_bad_data_line_is_skipped(self, tmp_path, caplog):
        """Test short lines are skipped and logged with their file line number."""
        path = tmp_path / "short.vcf"
        path.write_text(
            "##fileformat=VCFv4.2\n"
            "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\tFORMAT\tS1\n"
            "chr1\t1\n"
            "chr1\t2\t.\tA\tT\t.\tPASS\t.\tGT\t0/1\n"
        )
        with caplog.at_level(logging.WARNING, logger="vcf_codec"):
            variants = list(GenotypeReader(str(path)).read())

        assert [v.position for v in variants] == [2]
        assert "Skipping data line 3:" in caplog.text

    def test_strict_option(self, tmp_path):
        """Test strict=true propagates header errors."""
        path = tmp_path / "bad_header.vcf"
        path.write_text(
            "##fileformat=VCFv4.2\n"
            "##broken line\n"
            "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\n"
        )
        assert list(GenotypeReader(str(path)).read()) == []
        with pytest.raises(ValueError):
            list(GenotypeReader(str(path), {"strict": "true"}).read())
