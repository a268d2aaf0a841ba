"""
Data models for accession retrieval.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any


@dataclass
class GBAccession:
    """One or more versioned nuccore accessions (e.g. ``NC_001802.1``)."""

    ids: list[str]

    def __post_init__(self) -> None:
        if isinstance(self.ids, str):
            self.ids = [self.ids]
        self.ids = [accession.strip() for accession in self.ids if accession.strip()]
        if not self.ids:
            raise ValueError("GBAccession requires at least one accession")

    def __iter__(self) -> Iterator[str]:
        return iter(self.ids)

    def __len__(self) -> int:
        return len(self.ids)


@dataclass
class FetchOutcome:
    """Result of retrieving GenBank text for a set of accessions."""

    records: dict[str, str] = field(default_factory=dict)  # {accession: genbank_text}
    failed: list[str] = field(default_factory=list)
    cached: list[str] = field(default_factory=list)

    def text(self) -> str | dict[str, str]:
        """The text of the only record, or a mapping of accession to text."""
        if len(self.records) == 1:
            return next(iter(self.records.values()))
        return dict(self.records)

    def to_dict(self) -> dict[str, Any]:
        return {
            "retrieved": ",".join(self.records),
            "failed": ",".join(self.failed),
            "cached": ",".join(self.cached),
        }
