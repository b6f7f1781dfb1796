import pytest
from pydantic import ValidationError

from schemas import StopRecord, RouteBatch, RouteBook


@pytest.fixture
def route_book():
    book = RouteBook()
    book.append_batch([
        StopRecord(sequence="1", address="100", street_name="OAK RD"),
        StopRecord(sequence="2", address="102", street_name="OAK RD", unit="APT 3",
                   additional_info="Mary Jones"),
        StopRecord(sequence="3", address="200", street_name="ELM DR"),
    ])
    return book


def test_stop_defaults():
    stop = StopRecord(sequence="7")
    assert stop.delivery_type == "CURB R"
    assert stop.notes == ""
    assert stop.additional_info is None


def test_stop_sequence_must_be_digits():
    with pytest.raises(ValidationError):
        StopRecord(sequence="7a")


def test_batch_confidence_range():
    with pytest.raises(ValidationError):
        RouteBatch(source_file="page.jpg", extraction_date="2024-03-15", ocr_confidence=1.5)


def test_append_batch_keeps_order_and_duplicates(route_book):
    route_book.append_batch([StopRecord(sequence="1", address="5", street_name="PINE ST")])
    assert [s.sequence for s in route_book.stops] == ["1", "2", "3", "1"]
    assert route_book.duplicate_sequences() == ["1"]


def test_add_stop_numbers_after_last_row(route_book):
    stop = route_book.add_stop()
    assert stop.sequence == "4"
    assert stop.delivery_type == "CURB R"
    assert stop.street_name == ""
    assert route_book.stops[-1] is stop


def test_delete_stop_removes_every_match(route_book):
    route_book.append_batch([StopRecord(sequence="2", address="9")])
    assert route_book.delete_stop("2") == 2
    assert [s.sequence for s in route_book.stops] == ["1", "3"]


def test_delete_missing_stop(route_book):
    assert route_book.delete_stop("99") == 0
    assert len(route_book.stops) == 3


def test_update_stop(route_book):
    assert route_book.update_stop("3", "notes", "Dog in yard") == 1
    assert route_book.stops[2].notes == "Dog in yard"


def test_update_stop_rejects_sequence_field(route_book):
    with pytest.raises(ValueError):
        route_book.update_stop("3", "sequence", "10")


def test_search_is_case_insensitive(route_book):
    results = route_book.search("mary")
    assert [s.sequence for s in results] == ["2"]


def test_search_matches_any_field(route_book):
    assert [s.sequence for s in route_book.search("elm")] == ["3"]
    assert len(route_book.search("curb")) == 3


def test_empty_search_returns_everything(route_book):
    assert route_book.search("") == route_book.stops


def test_unique_streets(route_book):
    assert route_book.get_unique_streets() == ["OAK RD", "ELM DR"]


def test_stop_sequence_must_be_ascii_digits():
    with pytest.raises(ValidationError):
        StopRecord(sequence="１２")
