from genbank_annot.parsing.fields import (
    is_circular,
    read_definition,
    read_keywords,
    read_locus,
    read_origin,
    read_source,
    read_version,
    split_fields,
    strip_tag,
)


class TestSplitFields:
    def test_groups_lines_by_tag(self, record_text):
        fields = split_fields(record_text.splitlines())
        assert list(fields)[:6] == [
            "LOCUS",
            "DEFINITION",
            "ACCESSION",
            "VERSION",
            "KEYWORDS",
            "SOURCE",
        ]
        assert fields["FEATURES"][0].startswith("FEATURES")
        assert fields["ORIGIN"][-1].strip().startswith("61")

    def test_stops_at_record_end(self):
        fields = split_fields(["LOCUS       A", "//", "LOCUS       B"])
        assert fields == {"LOCUS": ["LOCUS       A"]}

    def test_repeated_tags_merged(self):
        lines = ["REFERENCE   1", "  AUTHORS   A.", "REFERENCE   2", "  AUTHORS   B."]
        assert len(split_fields(lines)["REFERENCE"]) == 4

    def test_leading_noise_ignored(self):
        assert split_fields(["", "   ", "LOCUS       X"]) == {"LOCUS": ["LOCUS       X"]}


class TestHeaderFields:
    def test_strip_tag(self):
        assert strip_tag("  ORGANISM  Testus organismus") == "Testus organismus"

    def test_locus(self):
        locus = read_locus(["LOCUS       NC_001802    9181 bp    RNA     linear   VRL 13-AUG-2018"])
        assert locus[0] == "NC_001802"
        assert not is_circular(locus)

    def test_circular(self):
        assert is_circular(read_locus(["LOCUS       X  120 bp  DNA  circular  BCT 01-JAN-2020"]))

    def test_definition_continuation(self):
        assert read_definition(["DEFINITION  Synthetic test record,", "            two genes."]) == (
            "Synthetic test record, two genes."
        )

    def test_version_with_gi(self):
        version = read_version(["VERSION     TEST0001.1  GI:12345"])
        assert version.accession_version == "TEST0001.1"
        assert version.gi == "12345"

    def test_version_without_gi(self):
        assert read_version(["VERSION     NC_001802.1"]).gi is None

    def test_empty_keywords(self):
        assert read_keywords(["KEYWORDS    ."]) is None
        assert read_keywords(["KEYWORDS    RefSeq; complete genome."]) == "RefSeq; complete genome."

    def test_source_lineage(self):
        source = read_source(
            [
                "SOURCE      Testus organismus",
                "  ORGANISM  Testus organismus",
                "            Bacteria; Testphyla;",
                "            Testaceae.",
            ]
        )
        assert source.source == "Testus organismus"
        assert source.organism == "Testus organismus"
        assert source.lineage == ["Bacteria", "Testphyla", "Testaceae"]


class TestOrigin:
    def test_numbers_spacing_and_terminator_removed(self):
        seq = read_origin(
            ["ORIGIN      ", "        1 acgtacgtac gt", "//"]
        )
        assert str(seq) == "ACGTACGTACGT"

    def test_missing_origin(self):
        assert len(read_origin(None)) == 0
