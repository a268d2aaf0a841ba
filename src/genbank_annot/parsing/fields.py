"""
Top-level GenBank fields.

Splits record text into its primary fields (LOCUS, DEFINITION, ...,
ORIGIN) and reads the header fields and the origin sequence.
"""

import logging
import re
from collections import defaultdict

from Bio.Seq import Seq

from ..models import SourceInfo, VersionInfo

logger = logging.getLogger(__name__)

PRIMARY_FIELD_RE = re.compile(r"^([A-Z]+)(\s|$)")
FIELD_TAG_RE = re.compile(r"^\s*[A-Z]+(\s+|$)")
ORIGIN_NOISE_RE = re.compile(r"\s+|\d+|//")
RECORD_END = "//"


def split_fields(lines: list[str]) -> dict[str, list[str]]:
    """
    Group record lines by the primary field they belong to.

    A primary field starts with an uppercase tag in column 1; every
    following line that does not start a new field belongs to it.
    Repeated tags (e.g. several REFERENCE blocks) are merged. Reading stops
    at the ``//`` record terminator.
    """
    fields: dict[str, list[str]] = defaultdict(list)
    current = None
    for line in lines:
        if line.strip() == RECORD_END:
            break
        match = PRIMARY_FIELD_RE.match(line)
        if match:
            current = match.group(1)
        if current is None:
            if line.strip():
                logger.debug(f"Ignoring line before first field: {line!r}")
            continue
        fields[current].append(line)
    return dict(fields)


def strip_tag(line: str) -> str:
    """Remove a leading field tag (e.g. ``DEFINITION`` or ``  ORGANISM``)."""
    return FIELD_TAG_RE.sub("", line, count=1).strip()


def _join_field(lines: list[str]) -> str:
    return " ".join([strip_tag(lines[0])] + [line.strip() for line in lines[1:]]).strip()


def read_locus(lines: list[str]) -> list[str]:
    """Whitespace-separated tokens of the LOCUS line, tag excluded."""
    return lines[0].split()[1:]


def read_definition(lines: list[str]) -> str:
    return _join_field(lines)


def read_accession(lines: list[str]) -> str:
    return _join_field(lines)


def read_version(lines: list[str]) -> VersionInfo:
    """Versioned accession and, for older records, the GI number."""
    parts = strip_tag(lines[0]).split()
    gi = parts[1].replace("GI:", "") if len(parts) > 1 else None
    return VersionInfo(accession_version=parts[0] if parts else "", gi=gi)


def read_keywords(lines: list[str]) -> str | None:
    text = _join_field(lines)
    return None if text in ("", ".") else text


def read_source(lines: list[str]) -> SourceInfo:
    """
    Read the SOURCE field.

    Returns:
        SourceInfo with the source text, the ORGANISM line and the
        lineage split on '; '.
    """
    source_lines = [strip_tag(lines[0])]
    organism = ""
    lineage_lines: list[str] = []
    seen_organism = False
    for line in lines[1:]:
        stripped = line.strip()
        if not seen_organism and stripped.startswith("ORGANISM"):
            organism = strip_tag(line)
            seen_organism = True
        elif seen_organism:
            lineage_lines.append(stripped)
        else:
            source_lines.append(stripped)

    lineage = [taxon for taxon in " ".join(lineage_lines).split("; ") if taxon]
    if lineage:
        lineage[-1] = lineage[-1].rstrip(".")
    return SourceInfo(source=" ".join(source_lines), organism=organism, lineage=lineage)


def read_origin(lines: list[str] | None) -> Seq:
    """Origin sequence with spacing, line numbers and the ``//`` terminator removed."""
    if not lines:
        return Seq("")
    return Seq("".join(ORIGIN_NOISE_RE.sub("", line) for line in lines[1:]).upper())


def is_circular(locus: list[str]) -> bool:
    return "circular" in locus
