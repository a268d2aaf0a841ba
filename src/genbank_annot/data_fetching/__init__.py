"""NCBI retrieval and storage exports."""

from .accession import FetchOutcome, GBAccession
from .cache import GenBankCache
from .client import EntrezClient, NCBIClient
from .config import FetchConfig
from .fetcher import GenBankFetcher, fetch_genbank
from .storage import AnnotationStorage

__all__ = [
    "AnnotationStorage",
    "EntrezClient",
    "FetchConfig",
    "FetchOutcome",
    "GBAccession",
    "GenBankCache",
    "GenBankFetcher",
    "NCBIClient",
    "fetch_genbank",
]
