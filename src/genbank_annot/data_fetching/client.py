"""
NCBI Entrez API client.
"""

import logging
import time
from abc import ABC, abstractmethod
from functools import wraps
from urllib.error import HTTPError, URLError

from Bio import Entrez

from ..exceptions import GenBankFetchError

logger = logging.getLogger(__name__)

NUCCORE = "nuccore"
# Entrez raises RuntimeError for transient backend failures
RETRYABLE_ERRORS = (HTTPError, URLError, OSError, RuntimeError)


def retry_on_network_error(max_retries: int = 3, backoff: float = 2.0):
    """
    Retry an Entrez call, waiting backoff**attempt seconds between tries.

    The last failure is re-raised as GenBankFetchError.
    """

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            for attempt in range(1, max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except RETRYABLE_ERRORS as e:
                    if attempt == max_retries:
                        raise GenBankFetchError(
                            f"{func.__name__} failed after {max_retries} attempts: {e}"
                        ) from e
                    wait = backoff ** (attempt - 1)
                    logger.warning(
                        f"{func.__name__} attempt {attempt} failed, retrying in {wait}s: {e}"
                    )
                    time.sleep(wait)
            return None

        return wrapper

    return decorator


class NCBIClient(ABC):
    """Abstract interface for nucleotide database operations."""

    @abstractmethod
    def search(self, term: str, retmax: int = 20) -> list[str]:
        """Search the nucleotide database, returning matching uids."""
        pass

    @abstractmethod
    def fetch_records(self, uids: list[str]) -> str:
        """Fetch full GenBank text for the given uids."""
        pass


class EntrezClient(NCBIClient):
    """Real NCBI Entrez client."""

    def __init__(self, email: str | None = None, api_key: str | None = None, delay: float = 0.4):
        """
        Initialize Entrez client.

        Args:
            email: Required by NCBI
            api_key: Optional, increases rate limit from 3/s to 10/s
            delay: Delay between requests (0.34s with key, 0.4s without)
        """
        if email:
            Entrez.email = email
        if api_key:
            Entrez.api_key = api_key

        self.delay = delay
        logger.info(f"EntrezClient initialized (delay={delay}s)")

    @retry_on_network_error(max_retries=3, backoff=2.0)
    def search(self, term: str, retmax: int = 20) -> list[str]:
        """Search NCBI nucleotide database."""
        handle = Entrez.esearch(db=NUCCORE, term=term, retmax=retmax)
        record = Entrez.read(handle)
        handle.close()

        time.sleep(self.delay)
        return list(record.get("IdList", []))  # type: ignore

    @retry_on_network_error(max_retries=3, backoff=2.0)
    def fetch_records(self, uids: list[str]) -> str:
        """Fetch GenBank records, including the sequence of contig records."""
        handle = Entrez.efetch(
            db=NUCCORE, id=",".join(uids), rettype="gbwithparts", retmode="text"
        )
        data = handle.read()
        handle.close()

        time.sleep(self.delay)
        return data
