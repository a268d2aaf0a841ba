"""
Error and warning types raised while reading GenBank records.
"""


class GenBankParseError(ValueError):
    """A record cannot be parsed; the current record is abandoned."""


class GenBankFetchError(GenBankParseError):
    """None of the requested accessions could be retrieved."""


class GenBankWarning(UserWarning):
    """Recoverable problem; parsing continues with a best-effort result."""
