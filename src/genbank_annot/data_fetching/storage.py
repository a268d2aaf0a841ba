"""
File storage for parsed annotation records.
"""

import logging
from pathlib import Path

import pandas as pd
from Bio import SeqIO
from Bio.SeqRecord import SeqRecord

from ..annotation.record import AnnotationRecord

logger = logging.getLogger(__name__)


class AnnotationStorage:
    """Handles saving annotation tables and sequences to disk."""

    def __init__(self, output_dir: Path):
        self.output_dir = Path(output_dir)

    def save_tables(self, record: AnnotationRecord, name: str) -> list[Path]:
        """Save every non-empty feature table as ``{name}_{table}.tsv``."""
        paths = []
        for table_name, table in record.tables().items():
            if table.empty:
                continue
            filepath = self._get_filepath(name, f"_{table_name}.tsv")
            self._flatten_lists(table).to_csv(filepath, sep="\t", index=False, na_rep="NA")
            paths.append(filepath)
        logger.info(f"Saved {len(paths)} tables for {name}")
        return paths

    def save_sequences(self, record: AnnotationRecord, name: str) -> Path | None:
        """Save the per-chromosome sequences as FASTA."""
        if not record.has_sequence:
            logger.debug(f"{name} has no sequence to save")
            return None
        filepath = self._get_filepath(name, ".fasta")
        seq_records = [
            SeqRecord(seq, id=chromosome, description=record.definition or "")
            for chromosome, seq in record.sequences.items()  # type: ignore[union-attr]
        ]
        SeqIO.write(seq_records, filepath, "fasta")
        return filepath

    def save_summary(self, records: dict[str, AnnotationRecord]) -> Path:
        """Save a one-row-per-record summary table."""
        df = pd.DataFrame([{"name": name, **record.to_dict()} for name, record in records.items()])
        filepath = self.output_dir / "summary.tsv"
        self.output_dir.mkdir(parents=True, exist_ok=True)
        df.to_csv(filepath, sep="\t", index=False)

        logger.info(f"Summary saved: {filepath.name}")
        return filepath

    @staticmethod
    def _flatten_lists(table: pd.DataFrame) -> pd.DataFrame:
        """Join list values (e.g. db_xref) with commas so they fit in one cell."""
        flat = table.copy()
        for column in flat.columns:
            if flat[column].map(lambda value: isinstance(value, list)).any():
                flat[column] = flat[column].map(
                    lambda value: ",".join(map(str, value)) if isinstance(value, list) else value
                )
        return flat

    def _get_filepath(self, filename: str, suffix: str) -> Path:
        """Build filepath with safe filename."""
        # Only replace directory separators to prevent path traversal
        safe_name = filename.replace("/", "_").replace("\\", "_")[:200]
        self.output_dir.mkdir(parents=True, exist_ok=True)
        return self.output_dir / f"{safe_name}{suffix}"
