import logging
import textwrap

import pytest

from papershelf.errors import InvalidYearError, UnknownEntryTypeError
from papershelf.models.entry import EntryType, Month
from papershelf.services.bibtex_service import (
    iter_blocks,
    parse_author_list,
    parse_bibtex,
    parse_entry_type,
    parse_year,
)


def _doc(payload: str) -> str:
    return textwrap.dedent(payload).strip() + "\n"


def test_parse_single_article_keeps_all_fields() -> None:
    records = parse_bibtex(
        _doc(
            """
            @article{smith2020,
                title = {On Cats},
                author = {Alice Smith and Bob Jones},
                year = {2020},
                month = mar,
                journal = {Journal of Felines},
            }
            """
        )
    )

    assert len(records) == 1
    record = records[0]
    assert record.key == "smith2020"
    assert record.entry_type is EntryType.ARTICLE
    assert record.title == "On Cats"
    assert record.authors == ("Alice Smith", "Bob Jones")
    assert record.year == 2020
    assert record.month is Month.MAR
    assert record.original_fields["journal"] == "Journal of Felines"
    assert record.original_fields["author"] == "Alice Smith and Bob Jones"


def test_malformed_blocks_are_dropped_in_source_order(caplog: pytest.LogCaptureFixture) -> None:
    document = _doc(
        """
        @article{first, title = {One}, author = {A. Author}, year = {2001}}

        @article{notitle, author = {B. Author}, year = {2002}}

        @book{second, title = {Two}, author = {C. Author}, year = {2003}}

        @weird{badtype, title = {X}, author = {D. Author}, year = {2004}}

        @article{badyear, title = {Y}, author = {E. Author}, year = {20x4}}

        @article{badmonth, title = {Z}, author = {F. Author}, year = {2005}, month = {13}}

        @misc{third, title = {Three}, author = {G. Author}, year = {2006}}
        """
    )

    with caplog.at_level(logging.WARNING):
        records = parse_bibtex(document)

    assert [r.key for r in records] == ["first", "second", "third"]
    warned = " ".join(rec.getMessage() for rec in caplog.records)
    for key in ("notitle", "badtype", "badyear", "badmonth"):
        assert key in warned


def test_syntax_error_only_costs_its_block() -> None:
    document = _doc(
        """
        @article{good1, title = {One}, author = {A}, year = {2001}}
        @article{broken, title = {Unclosed, author = {B}, year = {2002}
        @article{good2, title = {Two}, author = {C}, year = {2003}}
        """
    )

    assert [r.key for r in parse_bibtex(document)] == ["good1", "good2"]


def test_duplicate_key_keeps_first() -> None:
    document = _doc(
        """
        @article{dup, title = {First}, author = {A}, year = {2001}}
        @article{dup, title = {Second}, author = {B}, year = {2002}}
        """
    )

    records = parse_bibtex(document)

    assert len(records) == 1
    assert records[0].title == "First"


def test_string_macros_carry_over_between_blocks() -> None:
    document = _doc(
        """
        @string{felines = "Journal of Felines"}
        @comment{ignored}
        @article{cat, title = {Cats}, author = {A}, year = {1999}, journal = felines}
        """
    )

    records = parse_bibtex(document)

    assert records[0].original_fields["journal"] == "Journal of Felines"


def test_parenthesized_entry_and_text_between_blocks() -> None:
    document = "Some notes about @ signs.\n@inproceedings(conf1, title = {T}, author = {A}, year = 2010)\n"

    records = parse_bibtex(document)

    assert [r.entry_type for r in records] == [EntryType.IN_PROCEEDINGS]
    assert records[0].year == 2010


def test_closing_paren_inside_quoted_value_does_not_end_block() -> None:
    document = _doc(
        """
        @article(k1, title = "a ) b", author = {A B}, year = 2001)
        @article{k2, title = {Two}, author = {C D}, year = {2002}}
        """
    )

    blocks = list(iter_blocks(document))
    records = parse_bibtex(document)

    assert blocks[0].endswith("year = 2001)")
    assert [r.key for r in records] == ["k1", "k2"]
    assert records[0].title == "a ) b"


def test_non_ascii_digit_month_only_drops_its_block(caplog: pytest.LogCaptureFixture) -> None:
    document = _doc(
        """
        @article{good, title = {One}, author = {A B}, year = {2001}}
        @article{bad, title = {Two}, author = {C D}, year = {2002}, month = {²}}
        @article{good2, title = {Three}, author = {E F}, year = {2003}}
        """
    )

    with caplog.at_level(logging.WARNING):
        records = parse_bibtex(document)

    assert [r.key for r in records] == ["good", "good2"]
    assert "bad" in caplog.text


def test_empty_document_returns_no_records() -> None:
    assert parse_bibtex("") == []
    assert list(iter_blocks("just text")) == []


def test_author_list_splits_on_literal_and() -> None:
    assert parse_author_list("Smith, John and Doe, Jane") == ("Smith, John", "Doe, Jane")
    assert parse_author_list("Alexander Anderson") == ("Alexander Anderson",)


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("ARTICLE", EntryType.ARTICLE),
        ("PhDThesis", EntryType.PHD_THESIS),
        ("mastersthesis", EntryType.MASTER_THESIS),
        ("techreport", EntryType.TECH_REPORT),
    ],
)
def test_entry_type_lookup_is_case_insensitive(name: str, expected: EntryType) -> None:
    assert parse_entry_type(name) is expected


def test_unknown_entry_type_raises() -> None:
    with pytest.raises(UnknownEntryTypeError):
        parse_entry_type("patent")


def test_year_must_be_unsigned() -> None:
    assert parse_year(" 1984 ") == 1984
    with pytest.raises(InvalidYearError):
        parse_year("-12")
