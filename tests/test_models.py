import pytest

from conftest import make_entry, make_record
from papershelf.errors import MonthOutOfBoundsError, UnknownMonthError
from papershelf.models.entry import BibliographicRecord, EntryType, ImportedEntry, Month


@pytest.mark.parametrize(
    ("text", "expected"),
    [("jan", Month.JAN), ("DECEMBER", Month.DEC), ("Sept", Month.SEP), ("7", Month.JUL), ("12", Month.DEC)],
)
def test_month_parse(text: str, expected: Month) -> None:
    assert Month.parse(text) is expected


def test_month_errors_are_distinct() -> None:
    with pytest.raises(MonthOutOfBoundsError):
        Month.parse("13")
    with pytest.raises(MonthOutOfBoundsError):
        Month.parse("0")
    with pytest.raises(UnknownMonthError):
        Month.parse("Brumaire")
    with pytest.raises(UnknownMonthError):
        Month.parse("²")


def test_month_names() -> None:
    assert str(Month.MAR) == "March"
    assert Month.MAR.abbreviation == "Mar"


def test_entry_type_names() -> None:
    assert EntryType.from_bibtex("InCollection") is EntryType.IN_COLLECTION
    assert EntryType.from_bibtex("patent") is None
    assert str(EntryType.PHD_THESIS) == "PhdThesis"


def test_record_is_immutable() -> None:
    record = make_record()

    with pytest.raises(AttributeError):
        record.title = "Other"  # type: ignore[misc]


def test_record_dict_round_trip_without_optional_fields() -> None:
    record = BibliographicRecord(
        key="k", entry_type=EntryType.MISC, title="T", authors=("A",), year=1
    )

    assert BibliographicRecord.from_dict(record.to_dict()) == record


def test_entry_requires_a_file_path() -> None:
    with pytest.raises(ValueError):
        ImportedEntry(record=make_record(), tags=[], file_paths=[], digest=b"\x00" * 32)


def test_entry_requires_full_width_digest() -> None:
    with pytest.raises(ValueError):
        ImportedEntry(record=make_record(), tags=[], file_paths=["/p.pdf"], digest=b"\x00")


def test_entry_hexdigest() -> None:
    entry = make_entry(make_record())

    assert entry.hexdigest == bytes(range(32)).hex()
    assert ImportedEntry.from_dict(entry.to_dict()) == entry
