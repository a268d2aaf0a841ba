"""
Annotation tables built from parsed GenBank features.

This module stacks feature rows into uniform tables, reconciles genes,
CDS, exons, transcripts and variants, and assembles the final record.
"""

from .assemble import make_annotation
from .reconcile import (
    make_cds,
    make_exons,
    make_genes,
    make_other_features,
    make_transcripts,
    make_variants,
    match_cds_genes,
)
from .record import AnnotationRecord
from .stacking import stack_features

__all__ = [
    "AnnotationRecord",
    "make_annotation",
    "make_cds",
    "make_exons",
    "make_genes",
    "make_other_features",
    "make_transcripts",
    "make_variants",
    "match_cds_genes",
    "stack_features",
]
