"""
GenBank location grammar.

Location strings are tokenized, parsed into a small tree by a
recursive-descent parser and then flattened into ``LocationToken``s:

    location   := complement | join_order | span
    complement := "complement" "(" location ")"
    join_order := ("join" | "order") "(" location {"," location} ")"
    span       := bound [(".." | "^") bound]
    bound      := ["<" | ">"] INTEGER
"""

import logging
import re
from dataclasses import dataclass
from typing import Union

from ..exceptions import GenBankParseError
from ..models import LocationToken, Strand

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"\s*(?:(?P<int>\d+)|(?P<ident>[A-Za-z_][A-Za-z_]*)|(?P<op>\.\.|[()<>^,]))")

GROUPING_OPERATORS = ("join", "order")


@dataclass(frozen=True)
class Token:
    kind: str  # 'int', 'ident' or 'op'
    text: str
    pos: int


@dataclass(frozen=True)
class Bound:
    value: int
    fuzzy: str | None = None  # '<' or '>'


@dataclass(frozen=True)
class Span:
    start: Bound
    end: Bound | None = None
    insertion: bool = False


@dataclass(frozen=True)
class Complement:
    child: "LocationNode"


@dataclass(frozen=True)
class Join:
    operator: str
    children: tuple["LocationNode", ...]


LocationNode = Union[Span, Complement, Join]


def tokenize(location: str) -> list[Token]:
    """Split a location string into tokens, rejecting anything unknown."""
    tokens = []
    pos = 0
    text = location.rstrip()
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if not match or match.end() == pos:
            raise GenBankParseError(
                f"Unrecognized location syntax at position {pos} in '{location}'"
            )
        kind = match.lastgroup
        tokens.append(Token(kind=kind, text=match.group(kind), pos=match.start(kind)))  # type: ignore[arg-type]
        pos = match.end()
    return tokens


class LocationParser:
    """Recursive-descent parser producing a location tree."""

    def __init__(self, location: str):
        self.location = location
        self.tokens = tokenize(location)
        self.index = 0

    def parse(self) -> LocationNode:
        if not self.tokens:
            raise GenBankParseError(f"Empty location string: '{self.location}'")
        node = self._location()
        if self.index != len(self.tokens):
            self._fail(f"unexpected '{self.tokens[self.index].text}'")
        return node

    def _fail(self, reason: str) -> None:
        raise GenBankParseError(f"Malformed location '{self.location}': {reason}")

    def _peek(self) -> Token | None:
        return self.tokens[self.index] if self.index < len(self.tokens) else None

    def _next(self) -> Token:
        token = self._peek()
        if token is None:
            self._fail("unexpected end of location")
        self.index += 1
        return token  # type: ignore[return-value]

    def _expect(self, text: str) -> None:
        token = self._next()
        if token.text != text:
            self._fail(f"expected '{text}' but found '{token.text}'")

    def _location(self) -> LocationNode:
        token = self._peek()
        if token is not None and token.kind == "ident":
            return self._operator()
        return self._span()

    def _operator(self) -> LocationNode:
        name = self._next().text
        self._expect("(")
        if name == "complement":
            child = self._location()
            self._expect(")")
            return Complement(child)
        if name in GROUPING_OPERATORS:
            children = [self._location()]
            while self._peek() is not None and self._peek().text == ",":  # type: ignore[union-attr]
                self._next()
                children.append(self._location())
            self._expect(")")
            return Join(name, tuple(children))
        self._fail(f"unsupported operator '{name}'")
        raise AssertionError("unreachable")

    def _bound(self) -> Bound:
        token = self._next()
        fuzzy = None
        if token.text in ("<", ">"):
            fuzzy = token.text
            token = self._next()
        if token.kind != "int":
            self._fail(f"expected a position but found '{token.text}'")
        return Bound(int(token.text), fuzzy)

    def _span(self) -> Span:
        start = self._bound()
        token = self._peek()
        if token is None or token.text not in ("..", "^"):
            return Span(start)
        self._next()
        return Span(start, self._bound(), insertion=token.text == "^")


def parse_location(location: str) -> LocationNode:
    """Parse a GenBank location string into a location tree."""
    return LocationParser(location).parse()


def flatten(node: LocationNode, strand: Strand | None = None) -> list[tuple[LocationToken, Span]]:
    """
    Flatten a location tree into tokens, in the order they appear.

    The outermost ``complement`` fixes the strand; nested complements
    are ignored once a strand is set.
    """
    if isinstance(node, Complement):
        return flatten(node.child, Strand.MINUS if strand is None else strand)
    if isinstance(node, Join):
        result = []
        for child in node.children:
            result.extend(flatten(child, strand))
        return result

    start = node.start.value
    if node.end is None:
        end = start
    elif node.insertion:
        end = node.end.value - 1
    else:
        end = node.end.value
    token = LocationToken(
        start=start,
        end=end,
        strand=strand if strand is not None else Strand.PLUS,
        is_insertion=node.insertion,
    )
    return [(token, node)]


def is_partial(span: Span) -> bool:
    """True when the start bound is open (``<``)."""
    return span.start.fuzzy == "<"


def decode_location(location: str, partial: bool | None = None) -> tuple[list[LocationToken], bool]:
    """
    Decode a location string into concrete intervals.

    Args:
        location: GenBank location string (e.g. ``complement(join(1..10,20..30))``)
        partial: Policy for features with an open start bound. True keeps
            them with the marker stripped, False drops them, None drops
            them and flags them for a warning.

    Returns:
        Tuple of (tokens, dropped). ``tokens`` is empty when the feature
        was dropped by the partial policy.

    Raises:
        GenBankParseError: If the location cannot be tokenized or parsed.
    """
    pairs = flatten(parse_location(location))
    if partial is not True and any(is_partial(span) for _, span in pairs):
        logger.debug(f"Omitting partial feature at {location}")
        return [], True
    return [token for token, _ in pairs], False
