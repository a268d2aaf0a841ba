"""
GenBank record fetcher service.
"""

import logging
import warnings
from collections.abc import Iterable

from tqdm import tqdm

from ..exceptions import GenBankFetchError, GenBankWarning
from ..parsing.parser import split_records
from .accession import FetchOutcome
from .cache import GenBankCache
from .client import EntrezClient, NCBIClient
from .config import FetchConfig

logger = logging.getLogger(__name__)

# NCBI retrieval guidelines: at most a few hundred ids per efetch call
MAX_CHUNK_SIZE = 200


class GenBankFetcher:
    """Resolves accessions against nuccore and retrieves their GenBank text."""

    def __init__(self, config: FetchConfig | None = None, client: NCBIClient | None = None):
        """
        Initialize fetcher.

        Args:
            config: Fetch settings (defaults to an empty ``FetchConfig``)
            client: NCBI client (for dependency injection / testing)
        """
        self.config = config or FetchConfig()

        # Dependency injection: use provided client or create default
        self.client = client or EntrezClient(
            email=self.config.email, api_key=self.config.api_key, delay=self.config.delay
        )

        self.cache = None
        if self.config.cache_dir is not None and self.config.use_cache:
            self.cache = GenBankCache(self.config.cache_dir)

        logger.info(f"GenBankFetcher initialized (cache={'enabled' if self.cache else 'disabled'})")

    def resolve(self, accession: str) -> str | None:
        """Nuccore uid of an accession, or None unless exactly one entry matches."""
        uids = self.client.search(f"{accession}[ACCN]")
        if len(uids) != 1:
            logger.debug(f"{accession} matched {len(uids)} nuccore entries")
            return None
        return uids[0]

    def fetch(self, accessions: Iterable[str]) -> FetchOutcome:
        """
        Retrieve GenBank text for each accession.

        Unresolvable accessions are reported with a warning and listed in
        ``FetchOutcome.failed``.

        Raises:
            GenBankFetchError: If no accession could be retrieved.
        """
        ids = list(dict.fromkeys(accessions))
        outcome = FetchOutcome()
        retrieved: dict[str, str] = {}

        pending = []
        for accession in ids:
            if self.cache is not None and self.cache.is_cached(accession):
                logger.info(f"Using cached record for {accession}")
                retrieved[accession] = self.cache.load(accession)
                outcome.cached.append(accession)
            else:
                pending.append(accession)

        resolved: dict[str, str] = {}
        for accession in tqdm(pending, desc="Resolving", unit="accession", disable=len(pending) < 2):
            try:
                uid = self.resolve(accession)
            except GenBankFetchError as e:
                logger.error(f"Failed to resolve {accession}: {e}")
                uid = None
            if uid is None:
                outcome.failed.append(accession)
            else:
                resolved[accession] = uid

        names = list(resolved)
        for offset in range(0, len(names), MAX_CHUNK_SIZE):
            chunk = names[offset : offset + MAX_CHUNK_SIZE]
            retrieved.update(self._fetch_chunk(chunk, [resolved[name] for name in chunk]))

        if outcome.failed:
            warnings.warn(
                f"Unable to find entries for id(s): {' '.join(outcome.failed)}",
                GenBankWarning,
                stacklevel=2,
            )
        if not retrieved:
            raise GenBankFetchError("None of the specified id(s) were found in the nuccore database")

        outcome.records = {accession: retrieved[accession] for accession in ids if accession in retrieved}
        logger.info(
            f"Retrieved {len(outcome.records)}/{len(ids)} records ({len(outcome.cached)} from cache)"
        )
        return outcome

    def _fetch_chunk(self, accessions: list[str], uids: list[str]) -> dict[str, str]:
        """Fetch one batch and split the concatenated text back into records."""
        logger.info(f"Fetching {len(uids)} entries from nuccore: {', '.join(accessions[:10])}")
        records = split_records(self.client.fetch_records(uids))
        if len(records) != len(uids):
            raise GenBankFetchError(
                f"Expected {len(uids)} records from nuccore but received {len(records)}"
            )

        texts = {}
        for accession, lines in zip(accessions, records, strict=True):
            text = "\n".join(lines) + "\n"
            texts[accession] = text
            if self.cache is not None:
                self.cache.store(accession, text)
        return texts


def fetch_genbank(
    accessions: Iterable[str],
    config: FetchConfig | None = None,
    client: NCBIClient | None = None,
) -> str | dict[str, str]:
    """
    Retrieve GenBank text for accessions.

    Returns:
        The text of a single record, or a mapping of accession to text when
        more than one accession was retrieved.
    """
    return GenBankFetcher(config=config, client=client).fetch(accessions).text()
