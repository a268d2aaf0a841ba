import pytest

SEQUENCE = (
    "atgaaagtactggcagcaggaattatgctgtaaccgtacgatgaaacgttggcatcaggc"
    "taaaccgtgattacggcattgcatcgtacgttagcaacgtacggtaccatgcaatgcagc"
)

HEADER = """\
LOCUS       TEST0001                 {length} bp    DNA     {topology} BCT 01-JAN-2020
DEFINITION  Synthetic test record,
            two genes.
ACCESSION   TEST0001
VERSION     TEST0001.1  GI:12345
KEYWORDS    .
SOURCE      Testus organismus
  ORGANISM  Testus organismus
            Bacteria; Testphyla;
            Testaceae.
FEATURES             Location/Qualifiers
"""

FEATURES = """\
     source          1..120
                     /organism="Testus organismus"
                     /mol_type="genomic DNA"
                     /db_xref="taxon:9999"
     gene            1..30
                     /gene="abcA"
                     /locus_tag="T_0001"
     CDS             1..30
                     /gene="abcA"
                     /locus_tag="T_0001"
                     /codon_start=1
                     /product="protein A"
                     /db_xref="GI:1"
                     /db_xref="UniProt:Q1"
                     /translation="MKVLAAGIM
                     L"
     gene            complement(41..90)
                     /locus_tag="T_0002"
     CDS             complement(join(41..60,
                     71..90))
                     /locus_tag="T_0002"
                     /pseudo
                     /translation="MA"
     variation       100..101
                     /replace=""
     variation       105
                     /replace="g"
     misc_feature    110^111
                     /note="insertion site"
"""


def format_origin(sequence: str) -> str:
    """ORIGIN block with numbered 60-base lines split into groups of ten."""
    lines = ["ORIGIN      "]
    for offset in range(0, len(sequence), 60):
        chunk = sequence[offset : offset + 60]
        groups = " ".join(chunk[i : i + 10] for i in range(0, len(chunk), 10))
        lines.append(f"{offset + 1:>9} {groups}")
    return "\n".join(lines) + "\n"


def feature(kind: str, location: str, *qualifiers: str) -> str:
    """One FEATURES entry laid out in the fixed GenBank columns."""
    lines = [f"     {kind:<16}{location}"]
    lines += [f"{' ' * 21}/{qualifier}" for qualifier in qualifiers]
    return "\n".join(lines) + "\n"


def build_record(features: str, sequence: str | None = SEQUENCE, topology: str = "linear") -> str:
    """Assemble a GenBank record from a FEATURES body and an optional sequence."""
    length = len(sequence) if sequence else 0
    text = HEADER.format(length=length, topology=topology) + features.rstrip("\n") + "\n"
    if sequence:
        text += format_origin(sequence)
    return text + "//\n"


@pytest.fixture
def record_text() -> str:
    return build_record(FEATURES, topology="circular")


@pytest.fixture
def record_builder():
    return build_record
