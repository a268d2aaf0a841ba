"""
Annotation record returned by the reader.
"""

from dataclasses import dataclass, field
from typing import Any

import pandas as pd
from Bio.Seq import Seq

from ..models import ChromosomeName, SourceInfo, VersionInfo


@dataclass
class AnnotationRecord:
    """Annotations of one GenBank record, organized per chromosome.

    Attributes:
        genes: Gene features with ``gene_id``.
        cds: CDS features with ``transcript_id`` and ``gene_id``.
        exons: Annotated exons, or approximate exons copied from CDS segments.
        transcripts: mRNA features, or approximate transcripts spanning exons.
        variants: Variation features with ``ref`` and ``alt`` alleles.
        sources: Source features, one per chromosome.
        other_features: Every other feature type.
        ambiguous_exons: Exons contained in more than one CDS segment.
        seqinfo: One row per chromosome with ``length``, ``is_circular`` and ``genome``.
        sequences: Chromosome name to DNA sequence, when the sequence is retained.
    """

    genes: pd.DataFrame
    cds: pd.DataFrame
    exons: pd.DataFrame
    transcripts: pd.DataFrame
    variants: pd.DataFrame
    sources: pd.DataFrame
    other_features: pd.DataFrame
    ambiguous_exons: pd.DataFrame
    seqinfo: pd.DataFrame
    accession: str | None = None
    version: VersionInfo | None = None
    locus: list[str] = field(default_factory=list)
    definition: str | None = None
    keywords: str | None = None
    source: SourceInfo | None = None
    sequences: dict[ChromosomeName, Seq] | None = None

    @property
    def name(self) -> str | None:
        """Versioned accession, or the bare accession for records without VERSION."""
        if self.version is not None and self.version.accession_version:
            return self.version.accession_version
        return self.accession

    @property
    def chromosomes(self) -> list[ChromosomeName]:
        return self.seqinfo["chromosome"].tolist()

    @property
    def has_sequence(self) -> bool:
        return self.sequences is not None

    def get_seq(self, chromosome: ChromosomeName | None = None) -> Seq:
        """Sequence of one chromosome (the only one when not given)."""
        if self.sequences is None:
            raise ValueError("Record was read without its sequence")
        if chromosome is None:
            if len(self.sequences) != 1:
                raise ValueError(
                    f"Record has {len(self.sequences)} chromosomes; specify one of "
                    f"{sorted(self.sequences)}"
                )
            return next(iter(self.sequences.values()))
        return self.sequences[chromosome]

    def is_circular(self, chromosome: ChromosomeName) -> bool:
        rows = self.seqinfo[self.seqinfo["chromosome"] == chromosome]
        if rows.empty:
            raise KeyError(chromosome)
        return bool(rows["is_circular"].iloc[0])

    def to_dict(self) -> dict[str, Any]:
        """Summary of the record for logs and reports."""
        return {
            "accession": self.accession,
            "version": self.version.accession_version if self.version else None,
            "definition": self.definition,
            "chromosomes": ",".join(self.chromosomes),
            "genes": len(self.genes),
            "cds": len(self.cds),
            "exons": len(self.exons),
            "transcripts": len(self.transcripts),
            "variants": len(self.variants),
            "other_features": len(self.other_features),
            "has_sequence": self.has_sequence,
        }

    def tables(self) -> dict[str, pd.DataFrame]:
        """Feature tables by name."""
        return {
            "genes": self.genes,
            "cds": self.cds,
            "exons": self.exons,
            "transcripts": self.transcripts,
            "variants": self.variants,
            "sources": self.sources,
            "other_features": self.other_features,
        }
