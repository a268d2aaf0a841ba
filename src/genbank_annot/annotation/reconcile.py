"""
Typed feature tables.

Builds the gene, CDS, exon, transcript and variant tables from stacked
feature rows, inferring approximate exons and transcripts when a record
does not annotate them.
"""

import logging
import warnings

import pandas as pd
from Bio.Seq import Seq

from ..exceptions import GenBankParseError, GenBankWarning
from ..models import CORE_COLUMNS, GROUP_ID_COLUMN, RANGE_COLUMNS, ChromosomeName, RowGroup
from .stacking import drop_group_id, empty_table, first_value, stack_features

logger = logging.getLogger(__name__)

TRANSCRIPT_COLUMNS = ["transcript_id", "gene_id"]
VARIANT_COLUMNS = ["ref", "alt"]
UNKNOWN_GENE_PREFIX = "unknown_gene_"


def _labels(table: pd.DataFrame, column: str) -> pd.Series:
    if column not in table.columns:
        return pd.Series(pd.NA, index=table.index, dtype=object)
    return first_value(table[column]).astype(object)


def gene_labels(table: pd.DataFrame, kind: str) -> pd.Series:
    """'gene' qualifier per row, falling back to 'locus_tag' where it is missing."""
    gene = _labels(table, "gene")
    missing = gene.isna()
    if missing.any() and "locus_tag" in table.columns:
        logger.info(f"{kind} annotations without 'gene' label use 'locus_tag' ({int(missing.sum())} rows)")
        gene = gene.where(~missing, _labels(table, "locus_tag"))
    return gene


def _numbered(base: pd.Series, group_ids: pd.Series) -> pd.Series:
    """'{base}.{n}' where n numbers the distinct features of each base in file order."""
    rank = group_ids.groupby(base).rank(method="dense").astype(int)
    return base.astype(str) + "." + rank.astype(str)


def make_genes(groups: list[RowGroup]) -> pd.DataFrame:
    """
    Gene table. Every gene needs a name from 'gene' or 'locus_tag'.

    Raises:
        GenBankParseError: If any gene has neither qualifier.
    """
    genes = stack_features(groups)
    if genes.empty:
        return empty_table(["gene", "gene_id"])

    gene = gene_labels(genes, "Gene")
    nameless = gene.isna()
    if nameless.any():
        first = genes[nameless].iloc[0]
        raise GenBankParseError(
            f"Unable to determine gene names for {int(nameless.sum())} gene annotation(s). "
            f"Looked for 'gene' and 'locus_tag'; first nameless gene at "
            f"{first['chromosome']}:{first['start']}..{first['end']} ({first['strand']})"
        )
    genes["gene"] = gene
    genes["gene_id"] = gene
    return drop_group_id(genes)


def match_cds_genes(cds: pd.DataFrame, genes: pd.DataFrame) -> pd.Series:
    """
    Gene name of the gene whose interval equals each CDS interval exactly.

    Returns:
        Series aligned with ``cds`` holding the gene id, or NA without an
        exact match.
    """
    if cds.empty or genes.empty:
        return pd.Series(pd.NA, index=cds.index, dtype=object)
    lookup = genes.drop_duplicates(subset=RANGE_COLUMNS)[RANGE_COLUMNS + ["gene_id"]]
    merged = cds[RANGE_COLUMNS].reset_index().merge(lookup, on=RANGE_COLUMNS, how="left")
    return merged.set_index("index")["gene_id"].reindex(cds.index).astype(object)


def make_cds(groups: list[RowGroup], genes: pd.DataFrame) -> pd.DataFrame:
    """
    CDS table with ``transcript_id`` and ``gene_id``.

    CDS features are grouped by gene and numbered in file order
    (``{gene}.{n}``); all segments of one joined CDS share an id. When any
    CDS lacks a gene, every CDS is numbered by its own feature ordinal
    instead.
    """
    cds = stack_features(groups)
    if cds.empty:
        return empty_table(TRANSCRIPT_COLUMNS)

    gene = gene_labels(cds, "CDS")
    if gene.isna().any():
        matched = match_cds_genes(cds, genes)
        recovered = gene.isna() & matched.notna()
        if recovered.any():
            logger.info(f"Matched {int(recovered.sum())} CDS rows to genes by identical interval")
            gene = gene.where(~recovered, matched)

    if gene.notna().all():
        transcript_id = _numbered(gene, cds[GROUP_ID_COLUMN])
    else:
        logger.info("Genes not available for all CDS ranges, using internal grouping ids")
        prefix = gene.where(gene.notna(), UNKNOWN_GENE_PREFIX).astype(str)
        transcript_id = prefix + cds[GROUP_ID_COLUMN].astype(str) + ".1"

    cds["transcript_id"] = transcript_id
    cds["gene_id"] = gene
    return drop_group_id(cds.drop(columns=["gene"], errors="ignore"))


def _strand_compatible(strands: pd.Series, strand: str) -> pd.Series:
    if strand == "*":
        return pd.Series(True, index=strands.index)
    return (strands == strand) | (strands == "*")


def containing_cds(exons: pd.DataFrame, cds: pd.DataFrame) -> list[pd.Index]:
    """For each exon, the index labels of the CDS rows that contain it."""
    hits = []
    for chrom, strand, start, end in zip(
        exons["chromosome"], exons["strand"], exons["start"], exons["end"], strict=True
    ):
        mask = (
            (cds["chromosome"] == chrom)
            & _strand_compatible(cds["strand"], strand)
            & (cds["start"] <= start)
            & (cds["end"] >= end)
        )
        hits.append(cds.index[mask])
    return hits


def make_exons(groups: list[RowGroup], cds: pd.DataFrame) -> tuple[pd.DataFrame, pd.DataFrame]:
    """
    Exon table and the table of exons with an ambiguous transcript.

    Without exon features each CDS segment becomes an approximate exon.
    Otherwise each exon takes the transcript of the single CDS segment
    containing it; exons inside several CDS segments are set aside with
    transcript id ``{gene}.ambiguous``.
    """
    no_ambiguous = empty_table(TRANSCRIPT_COLUMNS)
    if not groups:
        logger.info("No exons read from GenBank record. Assuming sections of CDS are full exons")
        if cds.empty:
            return empty_table(TRANSCRIPT_COLUMNS), no_ambiguous
        exons = cds.copy()
        exons["type"] = "exon"
        return exons, no_ambiguous

    exons = stack_features(groups)
    own_gene = _labels(exons, "gene")
    hits = containing_cds(exons, cds)

    transcript_id = []
    gene_id = []
    for label, matches in zip(own_gene, hits, strict=True):
        first = cds.loc[matches[0]] if len(matches) else None
        gene = label if not pd.isna(label) else (first["gene_id"] if first is not None else pd.NA)
        gene_id.append(gene)
        if len(matches) == 1:
            transcript_id.append(first["transcript_id"])  # type: ignore[index]
        elif len(matches) > 1:
            transcript_id.append(f"{gene}.ambiguous")
        else:
            transcript_id.append(pd.NA)

    exons["transcript_id"] = pd.Series(transcript_id, index=exons.index, dtype=object)
    exons["gene_id"] = pd.Series(gene_id, index=exons.index, dtype=object)
    exons = drop_group_id(exons.drop(columns=["gene"], errors="ignore"))

    counts = pd.Series([len(matches) for matches in hits], index=exons.index)
    ambiguous = counts > 1
    if ambiguous.any():
        warnings.warn(
            f"Some exons specified in GenBank record have ambiguous relationship to "
            f"transcript(s); {int(ambiguous.sum())} exon(s) removed",
            GenBankWarning,
            stacklevel=2,
        )
    unassigned = int((counts == 0).sum())
    if unassigned:
        logger.info(f"{unassigned} exon(s) are not contained in any CDS")
    return exons[~ambiguous].reset_index(drop=True), exons[ambiguous].reset_index(drop=True)


def make_transcripts(groups: list[RowGroup], exons: pd.DataFrame) -> pd.DataFrame:
    """
    Transcript table.

    mRNA features are used directly and numbered per gene like CDS
    features; rows without a gene are named ``unknown_gene_{k}`` with ``k``
    a running count of such rows. Without mRNA features, one approximate
    transcript spans each group of exons sharing a transcript id.
    """
    if groups:
        txs = stack_features(groups)
        gene = gene_labels(txs, "mRNA")
        missing = gene.isna()
        base = gene
        if missing.any():
            ordinal = missing.cumsum()[missing].astype(int)
            names = (UNKNOWN_GENE_PREFIX + ordinal.astype(str)).reindex(gene.index)
            base = gene.where(~missing, names)
        txs["transcript_id"] = _numbered(base, txs[GROUP_ID_COLUMN])
        txs["gene_id"] = gene
        return drop_group_id(txs.drop(columns=["gene"], errors="ignore"))

    if exons.empty:
        return empty_table(TRANSCRIPT_COLUMNS)

    logger.info("No transcript features (mRNA) found, using spans of exons")
    assigned = exons[exons["transcript_id"].notna()]
    if assigned.empty:
        return empty_table(TRANSCRIPT_COLUMNS)
    txs = (
        assigned.groupby("transcript_id", sort=False)
        .agg(
            chromosome=("chromosome", "first"),
            start=("start", "min"),
            end=("end", "max"),
            strand=("strand", "first"),
            gene_id=("gene_id", lambda values: values.iloc[0]),
        )
        .reset_index()
    )
    return txs[RANGE_COLUMNS + TRANSCRIPT_COLUMNS]


def _read_sequence(seq: Seq | None, start: int, end: int):
    if seq is None or start < 1 or end > len(seq):
        return pd.NA
    return str(seq[start - 1 : end])


def make_variants(
    groups: list[RowGroup], sequences: dict[ChromosomeName, Seq] | None
) -> pd.DataFrame:
    """
    Variant table with reference and alternative alleles.

    The reference allele is read from the record's sequence. A variant
    whose replacement is empty (a deletion) is extended by one base at its
    end and takes that base as its alternative allele.
    Variants not covered by the sequence of their chromosome are skipped.
    """
    if not groups:
        return empty_table(VARIANT_COLUMNS)
    if sequences is None:
        warnings.warn(
            "Importing variation features when origin sequence is not included in the "
            f"record is not supported. Skipping {len(groups)} variation features.",
            GenBankWarning,
            stacklevel=2,
        )
        return empty_table(VARIANT_COLUMNS)

    variants = drop_group_id(stack_features(groups))
    replace = _labels(variants, "replace")
    deletion = replace.map(lambda value: isinstance(value, str) and value == "")
    variants.loc[deletion, "end"] = variants.loc[deletion, "end"] + 1

    lengths = variants["chromosome"].map(
        lambda chrom: len(sequences[chrom]) if chrom in sequences else 0
    )
    covered = (variants["start"] >= 1) & (variants["end"] <= lengths)
    if not covered.all():
        warnings.warn(
            f"No sequence covers {int((~covered).sum())} of {len(variants)} variation feature "
            "row(s); skipping them.",
            GenBankWarning,
            stacklevel=2,
        )
        variants = variants[covered].reset_index(drop=True)
        replace = replace[covered].reset_index(drop=True)
        deletion = deletion[covered].reset_index(drop=True)

    ref = []
    alt = []
    for chrom, start, end, allele, is_deletion in zip(
        variants["chromosome"], variants["start"], variants["end"], replace, deletion, strict=True
    ):
        seq = sequences.get(chrom)
        ref.append(_read_sequence(seq, start, end))
        if is_deletion:
            alt.append(_read_sequence(seq, end, end))
        elif isinstance(allele, str):
            alt.append(allele.upper())
        else:
            alt.append(pd.NA)

    variants.insert(len(CORE_COLUMNS), "ref", pd.Series(ref, index=variants.index, dtype=object))
    variants.insert(len(CORE_COLUMNS) + 1, "alt", pd.Series(alt, index=variants.index, dtype=object))
    return variants


def make_other_features(groups: list[RowGroup]) -> pd.DataFrame:
    """Every remaining feature type, stacked without id assignment."""
    return drop_group_id(stack_features(groups))
