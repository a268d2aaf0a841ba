"""Data classes, type definitions, and constants shared by the parser."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# Type aliases for domain clarity
ChromosomeName = str
QualifierValue = str | int | float | bool | list[Any]
Qualifiers = dict[str, QualifierValue]
FeatureRow = dict[str, Any]
RowGroup = list[FeatureRow]

# Columns every feature table starts with
CORE_COLUMNS: list[str] = ["chromosome", "start", "end", "strand", "loctype", "type"]
RANGE_COLUMNS: list[str] = ["chromosome", "start", "end", "strand"]
GROUP_ID_COLUMN = "group_id"

# Feature types with dedicated reconciliation rules
KNOWN_FEATURE_TYPES: frozenset[str] = frozenset(
    {"gene", "exon", "CDS", "variation", "mRNA", "source"}
)

# Chromosome used for features that precede every source feature
UNKNOWN_CHROMOSOME = "unk"


class Strand(str, Enum):
    """Strand of a genomic interval."""

    PLUS = "+"
    MINUS = "-"
    UNKNOWN = "*"


class LocType(str, Enum):
    """Kind of location a row was decoded from."""

    NORMAL = "normal"
    INSERT = "insert"


@dataclass(frozen=True)
class LocationToken:
    """One concrete interval decoded from a location string.

    Attributes:
        start: 1-based start position.
        end: 1-based inclusive end position.
        strand: Strand of the interval.
        is_insertion: True for ``a^b`` insertion points (``end == start``
            for adjacent bases).
    """

    start: int
    end: int
    strand: Strand = Strand.PLUS
    is_insertion: bool = False

    @property
    def loctype(self) -> LocType:
        return LocType.INSERT if self.is_insertion else LocType.NORMAL


@dataclass
class RawFeature:
    """A single FEATURES entry before location decoding.

    Attributes:
        type: Feature key (``gene``, ``CDS``, ``source``...).
        location: Location string with continuation lines joined.
        qualifiers: Qualifier name to value. Repeated qualifiers hold a list
            of every occurrence in file order.
        source_lines: The physical lines the entry was read from.
    """

    type: str
    location: str
    qualifiers: Qualifiers = field(default_factory=dict)
    source_lines: list[str] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "\n".join(self.source_lines)


@dataclass
class SourceInfo:
    """SOURCE header field: free text, organism and taxonomic lineage."""

    source: str
    organism: str
    lineage: list[str] = field(default_factory=list)


@dataclass
class VersionInfo:
    """VERSION header field."""

    accession_version: str
    gi: str | None = None
