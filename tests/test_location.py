import pytest

from genbank_annot.exceptions import GenBankParseError
from genbank_annot.models import LocationToken, LocType, Strand
from genbank_annot.parsing.location import (
    Complement,
    Join,
    Span,
    decode_location,
    parse_location,
    tokenize,
)


class TestTokenize:
    def test_operators_and_integers(self):
        tokens = tokenize("complement(<1..20)")
        assert [t.text for t in tokens] == ["complement", "(", "<", "1", "..", "20", ")"]
        assert [t.kind for t in tokens][:2] == ["ident", "op"]

    def test_unknown_character(self):
        with pytest.raises(GenBankParseError, match="J00194.1:100"):
            tokenize("J00194.1:100..202")


class TestParseLocation:
    def test_simple_span(self):
        node = parse_location("10..20")
        assert isinstance(node, Span)
        assert (node.start.value, node.end.value) == (10, 20)

    def test_nested_tree(self):
        node = parse_location("complement(join(1..10,20..30))")
        assert isinstance(node, Complement)
        assert isinstance(node.child, Join)
        assert len(node.child.children) == 2

    def test_order_operator(self):
        node = parse_location("order(1..5,8..9)")
        assert isinstance(node, Join)
        assert node.operator == "order"

    @pytest.mark.parametrize(
        "location",
        ["join(1..10,20..30", "1..", "bond(1,5)", "complement(1..5))", "", "1..10,20..30"],
    )
    def test_malformed(self, location):
        with pytest.raises(GenBankParseError):
            parse_location(location)


class TestDecodeLocation:
    @pytest.mark.parametrize("start,end", [(1, 1), (1, 10), (467, 1234), (99, 100)])
    def test_range(self, start, end):
        tokens, dropped = decode_location(f"{start}..{end}")
        assert not dropped
        assert tokens == [LocationToken(start=start, end=end, strand=Strand.PLUS)]
        assert tokens[0].loctype is LocType.NORMAL

    @pytest.mark.parametrize("position", [1, 54, 1000])
    def test_insertion_between_adjacent_bases(self, position):
        tokens, _ = decode_location(f"{position}^{position + 1}")
        assert len(tokens) == 1
        assert tokens[0].start == tokens[0].end == position
        assert tokens[0].is_insertion
        assert tokens[0].loctype is LocType.INSERT

    def test_single_base(self):
        tokens, _ = decode_location("467")
        assert (tokens[0].start, tokens[0].end) == (467, 467)

    def test_complement_of_join(self):
        tokens, _ = decode_location("complement(join(1..10,20..30))")
        assert [(t.start, t.end) for t in tokens] == [(1, 10), (20, 30)]
        assert all(t.strand is Strand.MINUS for t in tokens)

    def test_join_of_complements(self):
        tokens, _ = decode_location("join(complement(1..10),complement(20..30))")
        assert [(t.start, t.end, t.strand) for t in tokens] == [
            (1, 10, Strand.MINUS),
            (20, 30, Strand.MINUS),
        ]

    def test_outer_complement_wins(self):
        tokens, _ = decode_location("complement(join(1..10,complement(20..30)))")
        assert all(t.strand is Strand.MINUS for t in tokens)

    def test_whitespace_inside_location(self):
        tokens, _ = decode_location("join(1..10, 20..30)")
        assert len(tokens) == 2


class TestPartialPolicy:
    def test_open_start_dropped_by_default(self):
        tokens, dropped = decode_location("<1..30")
        assert tokens == []
        assert dropped

    def test_open_start_dropped_when_false(self):
        tokens, dropped = decode_location("<1..30", partial=False)
        assert tokens == [] and dropped

    def test_open_start_kept_when_true(self):
        tokens, dropped = decode_location("<1..30", partial=True)
        assert not dropped
        assert (tokens[0].start, tokens[0].end) == (1, 30)

    def test_open_end_alone_is_kept(self):
        tokens, dropped = decode_location("1..>30")
        assert not dropped
        assert (tokens[0].start, tokens[0].end) == (1, 30)

    def test_any_partial_segment_drops_feature(self):
        tokens, dropped = decode_location("join(1..10,<20..30)")
        assert tokens == [] and dropped
