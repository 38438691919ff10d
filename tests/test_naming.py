from dataclasses import replace

import pytest

from conftest import make_record
from papershelf.config import Settings
from papershelf.models.entry import Month
from papershelf.utils.naming import assemble_name, last_name


def test_default_pattern_example(settings: Settings) -> None:
    record = make_record(authors=("Alice Smith",), year=2020, title="On Cats")

    assert assemble_name("scan", record, settings) == "Alice Smith-20-On Cats"


def test_all_placeholders(settings: Settings) -> None:
    settings = replace(settings, name_pattern="%F|%f|%K|%k|%A|%a|%L|%l|%T|%t|%Y|%y|%M|%m")
    record = make_record(
        key="Smith2005",
        authors=("Alice Smith", "Jones, Bob", "Carol King"),
        title="On Cats",
        year=2005,
        month=Month.FEB,
    )

    assert assemble_name("Scan", record, settings).split("|") == [
        "Scan",
        "scan",
        "Smith2005",
        "smith2005",
        "Alice Smith_Jones, Bob",
        "alice smith_jones, bob",
        "Smith_Jones",
        "smith_jones",
        "On Cats",
        "on cats",
        "2005",
        "05",
        "February",
        "february",
    ]


def test_missing_month_renders_empty(settings: Settings) -> None:
    settings = replace(settings, name_pattern="%Y%M%m")

    assert assemble_name("x", make_record(year=1999), settings) == "1999"


def test_zero_author_limit_or_no_authors_renders_empty(settings: Settings) -> None:
    pattern = replace(settings, name_pattern="[%A][%L]")

    assert assemble_name("x", make_record(), replace(pattern, max_author_names=0)) == "[][]"
    assert assemble_name("x", make_record(authors=()), pattern) == "[][]"


def test_author_limit_and_separator(settings: Settings) -> None:
    settings = replace(settings, name_pattern="%L", max_author_names=3, author_separator="+")
    record = make_record(authors=("A One", "B Two", "C Three", "D Four"))

    assert assemble_name("x", record, settings) == "One+Two+Three"


def test_substituted_text_is_not_expanded_again(settings: Settings) -> None:
    record = make_record(title="100%Y pure")
    settings = replace(settings, name_pattern="%T-%Y")

    assert assemble_name("x", record, settings) == "100%Y pure-2020"


def test_changing_one_field_changes_only_its_token(settings: Settings) -> None:
    settings = replace(settings, name_pattern="%A-%y-%T")
    before = assemble_name("x", make_record(title="On Cats"), settings)
    after = assemble_name("x", make_record(title="On Dogs"), settings)

    assert before == "Alice Smith-20-On Cats"
    assert after == "Alice Smith-20-On Dogs"
    assert assemble_name("x", make_record(title="On Cats"), settings) == before


@pytest.mark.parametrize(
    ("author", "expected"),
    [
        ("Smith, John", "Smith"),
        ("John Ronald Tolkien", "Tolkien"),
        ("Plato", "Plato"),
        ("van der Berg, Anna", "van der Berg"),
    ],
)
def test_last_name(author: str, expected: str) -> None:
    assert last_name(author) == expected
