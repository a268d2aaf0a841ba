import argparse
import logging
from pathlib import Path

import dotenv

from genbank_annot import FetchConfig
from genbank_annot.data_fetching import GenBankFetcher

dotenv.load_dotenv()

logger = logging.getLogger(__name__)


def main():
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    parser = argparse.ArgumentParser(description="Download GenBank records into the local cache")
    parser.add_argument("accessions", nargs="*", help="Versioned nuccore accessions")
    parser.add_argument("--from-file", type=Path, help="File with one accession per line")
    parser.add_argument("--cache-dir", type=Path, default=None)
    args = parser.parse_args()

    accessions = list(args.accessions)
    if args.from_file:
        accessions += [line.strip() for line in args.from_file.read_text().splitlines() if line.strip()]
    if not accessions:
        parser.error("No accessions given")

    config = FetchConfig.from_env()
    if args.cache_dir is not None:
        config.cache_dir = args.cache_dir
    if config.cache_dir is None:
        config.cache_dir = Path("datasets") / "genbank"

    fetcher = GenBankFetcher(config=config)
    outcome = fetcher.fetch(accessions)
    logger.info(f"Fetch summary: {outcome.to_dict()}")
    logger.info(f"Cache now holds {fetcher.cache.get_cache_stats()['cached_count']} records")


if __name__ == "__main__":
    main()
