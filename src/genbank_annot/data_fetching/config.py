"""
Configuration for retrieving GenBank records from NCBI.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

EMAIL_VARIABLE = "NCBI_EMAIL"
API_KEY_VARIABLE = "NCBI_API_KEY"
CACHE_DIR_VARIABLE = "GENBANK_CACHE_DIR"


@dataclass
class FetchConfig:
    """Settings for the accession fetcher."""

    email: str | None = None
    api_key: str | None = None
    # 0.34s is enough with an API key
    delay: float = 0.4
    cache_dir: Path | None = None
    use_cache: bool = True

    @classmethod
    def from_env(cls, **overrides) -> "FetchConfig":
        """Create config from NCBI_EMAIL, NCBI_API_KEY and GENBANK_CACHE_DIR."""
        cache_dir = os.getenv(CACHE_DIR_VARIABLE)
        api_key = os.getenv(API_KEY_VARIABLE)
        config = cls(
            email=os.getenv(EMAIL_VARIABLE),
            api_key=api_key,
            delay=0.34 if api_key else 0.4,
            cache_dir=Path(cache_dir) if cache_dir else None,
        )
        for name, value in overrides.items():
            if not hasattr(config, name):
                raise TypeError(f"Unknown FetchConfig option: {name}")
            setattr(config, name, value)

        if not config.email:
            logger.warning(f"{EMAIL_VARIABLE} is not set; NCBI asks for a contact email")
        return config
