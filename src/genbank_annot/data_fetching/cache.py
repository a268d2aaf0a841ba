"""
Cache manager for downloaded GenBank records.

Checks if a record already exists in the cache directory before fetching.
"""

import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

GENBANK_SUFFIX = ".gb"


class GenBankCache:
    """Stores one GenBank text file per accession to avoid re-downloading."""

    def __init__(self, cache_dir: Path):
        """
        Initialize cache manager.

        Args:
            cache_dir: Directory where GenBank files are stored
        """
        self.cache_dir = Path(cache_dir)
        self._accessions: set[str] | None = None
        logger.info(f"GenBankCache initialized for {cache_dir}")

    def scan_directory(self) -> None:
        """Scan the cache directory for existing GenBank files."""
        if not self.cache_dir.exists():
            logger.debug(f"Cache directory does not exist: {self.cache_dir}")
            self._accessions = set()
            return

        # Extract accession from filename (e.g., "NC_003326.1.gb" -> "NC_003326.1")
        self._accessions = {path.stem for path in self.cache_dir.glob(f"*{GENBANK_SUFFIX}")}
        logger.info(f"Scanned cache: found {len(self._accessions)} cached accessions")

    def path_for(self, accession: str) -> Path:
        """Build the cache path with a safe filename."""
        safe_name = accession.replace("/", "_").replace("\\", "_")[:200]
        return self.cache_dir / f"{safe_name}{GENBANK_SUFFIX}"

    def is_cached(self, accession: str) -> bool:
        """
        Check if a record is already cached.

        Args:
            accession: Accession to check (e.g., "NC_003326.1")

        Returns:
            True if the accession exists in cache, False otherwise
        """
        if self._accessions is None:
            self.scan_directory()
        return accession in self._accessions and self.path_for(accession).exists()  # type: ignore[operator]

    def load(self, accession: str) -> str:
        """Read a cached record."""
        return self.path_for(accession).read_text(encoding="utf-8")

    def store(self, accession: str, text: str) -> Path:
        """
        Write a record to the cache after a successful download.

        Args:
            accession: Accession the record was requested as
            text: GenBank text of exactly one record
        """
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        path = self.path_for(accession)
        path.write_text(text, encoding="utf-8")

        if self._accessions is None:
            self.scan_directory()
        self._accessions.add(accession)  # type: ignore[union-attr]
        logger.debug(f"Added {accession} to cache")
        return path

    def get_cache_stats(self) -> dict[str, Any]:
        """Cache statistics."""
        if self._accessions is None:
            self.scan_directory()
        return {
            "cache_dir": str(self.cache_dir),
            "cached_count": len(self._accessions),  # type: ignore[arg-type]
            "cached_accessions": sorted(self._accessions),  # type: ignore[arg-type]
        }

