"""
Read GenBank flat files into per-chromosome annotation tables.
"""

from .annotation import AnnotationRecord, make_annotation, match_cds_genes
from .data_fetching import FetchConfig, GBAccession, fetch_genbank
from .exceptions import GenBankFetchError, GenBankParseError, GenBankWarning
from .parsing import parse_genbank_text, split_records
from .reader import parse, read_genbank

__version__ = "0.1.0"

__all__ = [
    "AnnotationRecord",
    "FetchConfig",
    "GBAccession",
    "GenBankFetchError",
    "GenBankParseError",
    "GenBankWarning",
    "fetch_genbank",
    "make_annotation",
    "match_cds_genes",
    "parse",
    "parse_genbank_text",
    "read_genbank",
    "split_records",
]
