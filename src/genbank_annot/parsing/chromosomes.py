"""
Chromosome naming for source features.

Every feature is assigned to the chromosome named by the most recent
preceding ``source`` feature. Names come from the first available of the
``chromosome``, ``strain`` and ``organism`` qualifiers; a record must use
the explicit ``chromosome`` tier for all of its source features or for
none of them.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum

from ..exceptions import GenBankParseError
from ..models import UNKNOWN_CHROMOSOME, ChromosomeName, RawFeature

logger = logging.getLogger(__name__)

MIXED_TIERS_MESSAGE = (
    "This record has some source features which specify chromosome names and others "
    "that do not. Mixing naming schemes within one record is not supported."
)

DERIVED_TIERS = ("strain", "organism")


class NamingMode(str, Enum):
    NO_SOURCE_SEEN = "no_source_seen"
    EXPLICIT = "explicit"
    DERIVED = "derived"


@dataclass
class ParserState:
    """Per-record mutable parsing state.

    A fresh instance is created for every parsed record so counters never
    leak between records.

    Attributes:
        total_sources: Number of source features in the record.
        partial: Partial-bound policy (True keep, False drop, None drop + warn).
        chromosome: Chromosome name currently in effect.
        mode: Whether the record names chromosomes explicitly or derives them.
        tier: Qualifier used for derived names ('strain' or 'organism').
        source_ordinal: 1-based count of source features seen so far.
        offsets: Chromosome name to the (start, end) of its source feature.
        dropped_partial: Location strings dropped by the partial policy.
    """

    total_sources: int = 0
    partial: bool | None = None
    chromosome: ChromosomeName = UNKNOWN_CHROMOSOME
    mode: NamingMode = NamingMode.NO_SOURCE_SEEN
    tier: str | None = None
    source_ordinal: int = 0
    offsets: dict[ChromosomeName, tuple[int, int]] = field(default_factory=dict)
    dropped_partial: list[str] = field(default_factory=list)


class ChromosomeResolver:
    """Tracks the chromosome in effect while walking features in file order."""

    def __init__(self, state: ParserState):
        self.state = state

    @property
    def current(self) -> ChromosomeName:
        return self.state.chromosome

    def observe(self, feature: RawFeature) -> ChromosomeName:
        """Update the naming state for ``feature`` and return its chromosome."""
        if feature.type == "source":
            self._enter_source(feature)
        return self.state.chromosome

    def _enter_source(self, feature: RawFeature) -> None:
        state = self.state
        state.source_ordinal += 1
        qualifiers = feature.qualifiers

        if "chromosome" in qualifiers:
            if state.mode is NamingMode.DERIVED:
                raise GenBankParseError(f"{MIXED_TIERS_MESSAGE}\n{feature.text}")
            state.mode = NamingMode.EXPLICIT
            state.chromosome = _first(qualifiers["chromosome"])
            return

        if state.mode is NamingMode.EXPLICIT:
            raise GenBankParseError(f"{MIXED_TIERS_MESSAGE}\n{feature.text}")

        for tier in DERIVED_TIERS:
            if tier in qualifiers:
                base = _first(qualifiers[tier])
                break
        else:
            raise GenBankParseError(
                "Unable to name chromosome: source feature has no 'chromosome', "
                f"'strain' or 'organism' qualifier\n{feature.text}"
            )

        if state.tier is not None and state.tier != tier:
            raise GenBankParseError(
                f"Source features name chromosomes by both '{state.tier}' and '{tier}'; "
                f"one naming tier must be used for the whole record\n{feature.text}"
            )
        state.mode = NamingMode.DERIVED
        state.tier = tier
        if state.total_sources == 1:
            state.chromosome = base
        else:
            state.chromosome = f"{base}:{state.source_ordinal}"
        logger.debug(f"Source feature {state.source_ordinal} named '{state.chromosome}'")


def _first(value) -> str:
    """Chromosome names come from the first occurrence of a repeated qualifier."""
    if isinstance(value, list):
        value = value[0]
    return str(value)
