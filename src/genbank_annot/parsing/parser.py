"""
Raw GenBank record parser.

Produces a ``RawGenBank``: the header values, the per-feature row groups
and the per-chromosome sequences of a single record.
"""

import logging
import time
import warnings
from collections.abc import Iterable
from dataclasses import dataclass, field

from Bio.Seq import Seq

from ..exceptions import GenBankParseError, GenBankWarning
from ..models import ChromosomeName, RowGroup, SourceInfo, VersionInfo
from .chromosomes import ParserState
from .features import parse_features
from .fields import (
    RECORD_END,
    is_circular,
    read_accession,
    read_definition,
    read_keywords,
    read_locus,
    read_origin,
    read_source,
    read_version,
    split_fields,
)

logger = logging.getLogger(__name__)


@dataclass
class RawGenBank:
    """Low-level parse of one GenBank record, input to the record assembler."""

    features: list[RowGroup] = field(default_factory=list)
    sequences: dict[ChromosomeName, Seq] | None = None
    locus: list[str] = field(default_factory=list)
    definition: str | None = None
    accession: str | None = None
    version: VersionInfo | None = None
    keywords: str | None = None
    source: SourceInfo | None = None

    @property
    def circular(self) -> bool:
        return is_circular(self.locus)


def normalize_lines(text: str | Iterable[str]) -> list[str]:
    """Accept a text blob or an iterable of lines; return lines without newlines."""
    if isinstance(text, str):
        return text.splitlines()
    return [line.rstrip("\r\n") for line in text]


def split_records(text: str | Iterable[str]) -> list[list[str]]:
    """
    Split multi-record text on ``//`` lines.

    Each returned record keeps its terminating ``//`` line. Trailing
    blank lines after the last record are discarded.
    """
    records: list[list[str]] = []
    current: list[str] = []
    for line in normalize_lines(text):
        current.append(line)
        if line.strip() == RECORD_END:
            records.append(current)
            current = []
    if any(line.strip() for line in current):
        records.append(current)
    return records


def slice_sequences(origin: Seq, sources: list[RowGroup]) -> dict[ChromosomeName, Seq]:
    """
    Cut the origin into one sequence per source feature.

    Multi-segment sources (e.g. spanning the origin of a circular
    molecule) are concatenated in location order.
    """
    sequences: dict[ChromosomeName, Seq] = {}
    for rows in sources:
        name = rows[0]["chromosome"]
        if name in sequences:
            logger.warning(f"Several source features are named '{name}'; keeping the first")
            continue
        seq = Seq("")
        for row in rows:
            seq += origin[row["start"] - 1 : row["end"]]
        sequences[name] = seq
    return sequences


def rebase_features(
    groups: list[RowGroup], offsets: dict[ChromosomeName, tuple[int, int]]
) -> None:
    """
    Shift rows so coordinates are relative to the start of their chromosome.

    Only rows inside the span of their chromosome's source feature move;
    other rows keep record coordinates.
    """
    outside = 0
    for rows in groups:
        for row in rows:
            if row["chromosome"] not in offsets:
                continue
            first, last = offsets[row["chromosome"]]
            if row["start"] < first or row["end"] > last:
                outside += 1
                continue
            row["start"] -= first - 1
            row["end"] -= first - 1
    if outside:
        logger.debug(f"{outside} row(s) lie outside their source feature and were not shifted")


def parse_genbank_text(
    text: str | Iterable[str],
    partial: bool | None = None,
    seq_only: bool = False,
) -> RawGenBank | dict[ChromosomeName, Seq]:
    """
    Parse the text of a single GenBank record.

    Args:
        text: Record text, as one string or as lines
        partial: Policy for features with non-exact boundaries (True keep,
            False drop, None drop with a warning)
        seq_only: Only extract the per-chromosome sequences

    Returns:
        A ``RawGenBank``, or a mapping of chromosome name to sequence when
        ``seq_only`` is set.

    Raises:
        GenBankParseError: If the record cannot be parsed, or ``seq_only``
            is requested for a record without ORIGIN data.
    """
    started = time.perf_counter()
    lines = normalize_lines(text)
    fields = split_fields(lines)
    if not fields:
        raise GenBankParseError("No GenBank fields found in input text")

    state = ParserState(partial=partial)
    groups = parse_features(fields.get("FEATURES", []), state, source_only=seq_only)
    origin = read_origin(fields.get("ORIGIN"))

    sequences = None
    if len(origin) > 0:
        sources = [rows for rows in groups if rows[0]["type"] == "source"]
        sequences = slice_sequences(origin, sources)
        if not sources:
            warnings.warn(
                "Record has ORIGIN data but no source features; sequence is not assigned "
                "to any chromosome",
                GenBankWarning,
                stacklevel=2,
            )
    elif seq_only:
        raise GenBankParseError("Asked for sequence only from a record with no sequence information")

    if seq_only:
        return sequences  # type: ignore[return-value]

    rebase_features(groups, state.offsets)

    raw = RawGenBank(features=groups, sequences=sequences)
    if "LOCUS" in fields:
        raw.locus = read_locus(fields["LOCUS"])
    if "DEFINITION" in fields:
        raw.definition = read_definition(fields["DEFINITION"])
    if "ACCESSION" in fields:
        raw.accession = read_accession(fields["ACCESSION"])
    if "VERSION" in fields:
        raw.version = read_version(fields["VERSION"])
    if "KEYWORDS" in fields:
        raw.keywords = read_keywords(fields["KEYWORDS"])
    if "SOURCE" in fields:
        raw.source = read_source(fields["SOURCE"])

    logger.debug(f"Parsed raw GenBank text in {time.perf_counter() - started:.3f}s")
    return raw
