import argparse
import logging
from pathlib import Path

import dotenv

from genbank_annot import FetchConfig, GBAccession, read_genbank
from genbank_annot.data_fetching import AnnotationStorage

dotenv.load_dotenv()

logger = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Parse GenBank records into annotation tables")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--file", type=Path, help="GenBank flat file (may hold several records)")
    source.add_argument("--accession", nargs="+", help="Versioned nuccore accession(s) to fetch")
    parser.add_argument("--output", type=Path, default=Path("datasets") / "annotations")
    partial = parser.add_mutually_exclusive_group()
    partial.add_argument(
        "--keep-partial", dest="partial", action="store_const", const=True, default=None
    )
    partial.add_argument("--drop-partial", dest="partial", action="store_const", const=False)
    parser.add_argument("--no-sequence", action="store_true", help="Do not write FASTA output")
    return parser.parse_args()


def main():
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    args = parse_args()

    if args.accession:
        result = read_genbank(
            GBAccession(args.accession),
            partial=args.partial,
            ret_seq=not args.no_sequence,
            fetch_config=FetchConfig.from_env(),
        )
    else:
        result = read_genbank(args.file, partial=args.partial, ret_seq=not args.no_sequence)

    if isinstance(result, dict):
        records = result
    elif isinstance(result, list):
        records = {f"{args.file.stem}_{i}": record for i, record in enumerate(result, start=1)}
    else:
        # a partial accession fetch returns one record; name it by its own VERSION
        fallback = args.file.stem if args.file else args.accession[0]
        records = {result.name or fallback: result}

    storage = AnnotationStorage(args.output)
    for name, record in records.items():
        storage.save_tables(record, name)
        storage.save_sequences(record, name)
    storage.save_summary(records)
    logger.info(f"Wrote {len(records)} record(s) to {args.output}")


if __name__ == "__main__":
    main()
