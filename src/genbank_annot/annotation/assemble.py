"""
Record assembler: turns a ``RawGenBank`` into an ``AnnotationRecord``.
"""

import logging
import time
import warnings
from collections import defaultdict

import pandas as pd
from Bio.Seq import Seq

from ..exceptions import GenBankWarning
from ..models import KNOWN_FEATURE_TYPES, ChromosomeName, RowGroup
from ..parsing.parser import RawGenBank
from .reconcile import (
    make_cds,
    make_exons,
    make_genes,
    make_other_features,
    make_transcripts,
    make_variants,
)
from .record import AnnotationRecord
from .stacking import drop_group_id, stack_features

logger = logging.getLogger(__name__)


def split_by_type(groups: list[RowGroup]) -> dict[str, list[RowGroup]]:
    """Row groups by feature type, each list in file order."""
    by_type: dict[str, list[RowGroup]] = defaultdict(list)
    for rows in groups:
        by_type[rows[0]["type"]].append(rows)
    return by_type


def make_seqinfo(
    sources: list[RowGroup],
    sequences: dict[ChromosomeName, Seq] | None,
    circular: bool,
    genome: str | None,
) -> pd.DataFrame:
    """One row per chromosome: length, circularity and genome (versioned accession)."""
    records = []
    seen = set()
    for rows in sources:
        name = rows[0]["chromosome"]
        if name in seen:
            continue
        seen.add(name)
        if sequences is not None and name in sequences:
            length = len(sequences[name])
        else:
            length = sum(row["end"] - row["start"] + 1 for row in rows)
        records.append(
            {"chromosome": name, "length": length, "is_circular": circular, "genome": genome}
        )
    return pd.DataFrame.from_records(
        records, columns=["chromosome", "length", "is_circular", "genome"]
    )


def count_out_of_bounds(tables: dict[str, pd.DataFrame], seqinfo: pd.DataFrame) -> int:
    """Number of rows lying outside the chromosome they are assigned to."""
    lengths = seqinfo.set_index("chromosome")["length"]
    total = 0
    for table in tables.values():
        if table.empty:
            continue
        length = table["chromosome"].map(lengths)
        known = length.notna()
        outside = known & ((table["start"] < 1) | (table["end"] > length))
        total += int(outside.sum())
    return total


def make_annotation(raw: RawGenBank, ret_seq: bool = True) -> AnnotationRecord:
    """
    Build the annotation record for one parsed GenBank record.

    Args:
        raw: Output of ``parse_genbank_text``
        ret_seq: Keep the per-chromosome sequences on the record

    Returns:
        AnnotationRecord with all typed feature tables.

    Raises:
        GenBankParseError: If a gene has no name.
    """
    started = time.perf_counter()
    by_type = split_by_type(raw.features)
    genome = raw.version.accession_version if raw.version else None
    seqinfo = make_seqinfo(by_type.get("source", []), raw.sequences, raw.circular, genome)

    logger.debug("Starting creation of gene table")
    genes = make_genes(by_type.get("gene", []))
    logger.debug("Starting creation of CDS table")
    cds = make_cds(by_type.get("CDS", []), genes)
    logger.debug("Starting creation of exon table")
    exons, ambiguous_exons = make_exons(by_type.get("exon", []), cds)
    logger.debug("Starting creation of variant table")
    variants = make_variants(by_type.get("variation", []), raw.sequences)
    logger.debug("Starting creation of transcript table")
    transcripts = make_transcripts(by_type.get("mRNA", []), exons)
    logger.debug("Starting creation of misc feature table")
    other = [rows for rows in raw.features if rows[0]["type"] not in KNOWN_FEATURE_TYPES]
    other_features = make_other_features(other)
    sources = drop_group_id(stack_features(by_type.get("source", [])))

    record = AnnotationRecord(
        genes=genes,
        cds=cds,
        exons=exons,
        transcripts=transcripts,
        variants=variants,
        sources=sources,
        other_features=other_features,
        ambiguous_exons=ambiguous_exons,
        seqinfo=seqinfo,
        accession=raw.accession,
        version=raw.version,
        locus=raw.locus,
        definition=raw.definition,
        keywords=raw.keywords,
        source=raw.source,
        sequences=raw.sequences if ret_seq else None,
    )

    outside = count_out_of_bounds(record.tables(), seqinfo)
    if outside:
        warnings.warn(
            f"{outside} feature row(s) lie outside the bounds of their chromosome",
            GenBankWarning,
            stacklevel=2,
        )

    logger.info(
        f"Done creating annotation record for {raw.accession or 'record'} "
        f"[{time.perf_counter() - started:.2f} seconds]"
    )
    return record
