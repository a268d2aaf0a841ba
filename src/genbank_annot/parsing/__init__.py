"""
GenBank flat-file parsing.

This module splits GenBank record text into fields and features,
decodes locations and qualifiers, and names chromosomes.
"""

from .chromosomes import ChromosomeResolver, ParserState
from .features import decode_qualifier, parse_features, read_feature, split_feature_blocks
from .fields import split_fields
from .location import decode_location, parse_location
from .parser import RawGenBank, parse_genbank_text, split_records

__all__ = [
    "ChromosomeResolver",
    "ParserState",
    "RawGenBank",
    "decode_location",
    "decode_qualifier",
    "parse_features",
    "parse_genbank_text",
    "parse_location",
    "read_feature",
    "split_feature_blocks",
    "split_fields",
    "split_records",
]
