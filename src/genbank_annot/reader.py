"""
Entry points for reading GenBank records into annotation records.
"""

import logging
from collections.abc import Iterable
from pathlib import Path

from Bio.Seq import Seq
from tqdm import tqdm

from .annotation import AnnotationRecord, make_annotation
from .data_fetching import FetchConfig, GBAccession, GenBankFetcher, NCBIClient
from .models import ChromosomeName
from .parsing import parse_genbank_text, split_records

logger = logging.getLogger(__name__)

ReadResult = AnnotationRecord | list[AnnotationRecord] | dict[str, AnnotationRecord]


def parse(
    text: str | Iterable[str],
    partial: bool | None = None,
    seq_only: bool = False,
    ret_seq: bool = True,
) -> AnnotationRecord | dict[ChromosomeName, Seq]:
    """
    Parse one GenBank record.

    Args:
        text: Record text, as one string or as lines
        partial: True keeps features with a fuzzy start, False drops them,
            None drops them with a warning
        seq_only: Return only the per-chromosome sequences
        ret_seq: Keep the sequences on the returned record

    Returns:
        AnnotationRecord, or a mapping of chromosome to sequence when
        ``seq_only`` is set.

    Raises:
        GenBankParseError: If the record is malformed.
    """
    raw = parse_genbank_text(text, partial=partial, seq_only=seq_only)
    if seq_only:
        return raw  # type: ignore[return-value]
    return make_annotation(raw, ret_seq=ret_seq)  # type: ignore[arg-type]


def _parse_batch(records: list[list[str]], partial: bool | None, ret_seq: bool) -> list:
    results = []
    for lines in tqdm(records, desc="Parsing records", unit="record", disable=len(records) < 2):
        results.append(parse(lines, partial=partial, ret_seq=ret_seq))
    return results


def read_genbank(
    file: str | Path | GBAccession | None = None,
    text: str | Iterable[str] | None = None,
    partial: bool | None = None,
    ret_seq: bool = True,
    fetch_config: FetchConfig | None = None,
    client: NCBIClient | None = None,
) -> ReadResult:
    """
    Read GenBank data from a file, raw text or NCBI accessions.

    Args:
        file: Path to a GenBank file, or a ``GBAccession`` to fetch
        text: GenBank text, used when ``file`` is not given
        partial: Policy for features with a fuzzy start (see ``parse``)
        ret_seq: Keep the per-chromosome sequences on each record
        fetch_config: Retrieval settings, only used for accessions
        client: NCBI client override, only used for accessions

    Returns:
        One AnnotationRecord; a list of records when the text holds several
        ``//``-terminated entries; a mapping of accession to record when
        several accessions were retrieved.

    Raises:
        ValueError: If neither ``file`` nor ``text`` is given.
        GenBankParseError: If any record is malformed.
        GenBankFetchError: If no accession could be retrieved.
    """
    if isinstance(file, GBAccession):
        fetcher = GenBankFetcher(config=fetch_config or FetchConfig.from_env(), client=client)
        fetched = fetcher.fetch(file).text()
        if isinstance(fetched, str):
            return parse(fetched, partial=partial, ret_seq=ret_seq)  # type: ignore[return-value]
        names = list(fetched)
        parsed = _parse_batch([split_records(fetched[name])[0] for name in names], partial, ret_seq)
        return dict(zip(names, parsed, strict=True))

    if file is not None:
        path = Path(file)
        logger.info(f"Reading GenBank file {path}")
        text = path.read_text(encoding="utf-8")
    elif text is None:
        raise ValueError("Either file or text must be provided")

    records = split_records(text)
    if len(records) > 1:
        logger.info(f"Input holds {len(records)} records")
        return _parse_batch(records, partial, ret_seq)
    return parse(text, partial=partial, ret_seq=ret_seq)  # type: ignore[return-value]
