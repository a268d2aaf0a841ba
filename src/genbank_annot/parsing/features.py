"""
FEATURES block parser.

Splits the FEATURES field into individual entries, decodes their
qualifiers and locations, and expands each entry into one row per
location segment.
"""

import logging
import re
import warnings

from ..exceptions import GenBankParseError, GenBankWarning
from ..models import (
    CORE_COLUMNS,
    QualifierValue,
    Qualifiers,
    RawFeature,
    RowGroup,
)
from .chromosomes import ChromosomeResolver, ParserState
from .location import decode_location

logger = logging.getLogger(__name__)

# Feature key at column 6 (or after a tab) followed by something location-like
FEATURE_START_RE = re.compile(r"^( {5}|\t)[A-Za-z0-9'_*-]+\s+(complement|join|order|[0-9<>,])")
# '/name' followed by '=value' or nothing at all
QUALIFIER_START_RE = re.compile(r"^\s+/[A-Za-z0-9_'*-]+(=\S|\s*$)")
QUALIFIER_RE = re.compile(r"^/(?P<name>[^=\s]+)(?:=(?P<value>.*))?$")
NUMERIC_RE = re.compile(r"^\d+(\.\d+)?$")

PARTIAL_EXAMPLES_SHOWN = 5


def split_feature_blocks(lines: list[str]) -> list[list[str]]:
    """Group FEATURES lines into one block of physical lines per feature."""
    if lines and lines[0].startswith("FEATURES"):
        lines = lines[1:]

    blocks: list[list[str]] = []
    for line in lines:
        if FEATURE_START_RE.match(line):
            blocks.append([line])
        elif blocks:
            blocks[-1].append(line)
        elif line.strip():
            logger.debug(f"Ignoring line before first feature: {line!r}")
    return blocks


def block_type(block: list[str]) -> str:
    """Feature key of a block, read from its first line."""
    return block[0].split()[0]


def decode_qualifier(line: str) -> tuple[str, QualifierValue]:
    """
    Decode one joined qualifier line.

    ``/name="text"`` gives a string, ``/name=12`` or ``/name=1.5`` a number
    and a bare ``/name`` the flag ``True``.
    """
    match = QUALIFIER_RE.match(line)
    if not match:
        raise GenBankParseError(f"Malformed qualifier: '{line}'")

    name, value = match.group("name"), match.group("value")
    if value is None:
        return name, True
    if value.startswith('"'):
        value = value[1:-1] if len(value) > 1 and value.endswith('"') else value[1:]
        return name, value.replace('""', '"')
    if NUMERIC_RE.match(value):
        return name, float(value) if "." in value else int(value)
    return name, value


def read_feature(block: list[str]) -> RawFeature:
    """Turn one block of physical lines into a ``RawFeature``."""
    # read before joining removes the leading whitespace
    feature_type = block_type(block)

    chunks: list[list[str]] = [[]]
    for line in block:
        if QUALIFIER_START_RE.match(line):
            chunks.append([])
        chunks[-1].append(line.strip())
    joined = ["".join(chunk) for chunk in chunks]

    location = "".join(joined[0].split()[1:])

    qualifiers: Qualifiers = {}
    for line in joined[1:]:
        name, value = decode_qualifier(line)
        if name not in qualifiers:
            qualifiers[name] = value
        elif isinstance(qualifiers[name], list):
            qualifiers[name].append(value)  # type: ignore[union-attr]
        else:
            qualifiers[name] = [qualifiers[name], value]

    return RawFeature(
        type=feature_type, location=location, qualifiers=qualifiers, source_lines=block
    )


def feature_rows(feature: RawFeature, chromosome: str, partial: bool | None) -> tuple[RowGroup, bool]:
    """
    Expand a feature into one row per location segment.

    Returns:
        Tuple of (rows, dropped) where ``dropped`` marks features removed by
        the partial-bound policy.
    """
    try:
        tokens, dropped = decode_location(feature.location, partial)
    except GenBankParseError as e:
        raise GenBankParseError(f"{e}\n{feature.text}") from e

    rows = []
    for token in tokens:
        row = {
            "chromosome": chromosome,
            "start": token.start,
            "end": token.end,
            "strand": token.strand.value,
            "loctype": token.loctype.value,
            "type": feature.type,
        }
        for name, value in feature.qualifiers.items():
            if name == "chromosome":
                continue
            row[f"{name}_qualifier" if name in CORE_COLUMNS else name] = value
        rows.append(row)
    return rows, dropped


def parse_features(
    lines: list[str], state: ParserState, source_only: bool = False
) -> list[RowGroup]:
    """
    Parse the FEATURES field into row groups, one per kept feature, in file order.

    Args:
        lines: Lines of the FEATURES field (the header line may be included)
        state: Fresh per-record parser state
        source_only: Only parse ``source`` features

    Returns:
        List of row groups; each group holds the rows of one feature.
    """
    blocks = split_feature_blocks(lines)
    types = [block_type(block) for block in blocks]
    state.total_sources = types.count("source")

    if source_only:
        blocks = [block for block, kind in zip(blocks, types, strict=True) if kind == "source"]

    resolver = ChromosomeResolver(state)
    groups: list[RowGroup] = []
    for block in blocks:
        feature = read_feature(block)
        chromosome = resolver.observe(feature)
        rows, dropped = feature_rows(feature, chromosome, state.partial)
        if dropped:
            state.dropped_partial.append(feature.location)
            continue
        if feature.type == "source" and rows:
            span = (rows[0]["start"], max(row["end"] for row in rows))
            state.offsets.setdefault(chromosome, span)
        if rows:
            groups.append(rows)

    if state.dropped_partial and state.partial is None:
        examples = ", ".join(state.dropped_partial[:PARTIAL_EXAMPLES_SHOWN])
        warnings.warn(
            f"Incomplete feature annotation detected. Omitting {len(state.dropped_partial)} "
            f"feature(s) with non-exact boundaries, e.g. at {examples}",
            GenBankWarning,
            stacklevel=2,
        )

    logger.debug(f"Parsed {len(groups)} features ({state.total_sources} source features)")
    return groups
