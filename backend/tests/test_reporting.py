import pytest
from sqlalchemy.exc import OperationalError

from huddy_gate.core.exceptions import InvalidListingQuery, StoreUnavailable
from huddy_gate.services import reporting


@pytest.fixture
def crowd(add_attendee):
    # ann registered twice, both entered; bob entered and gifted; cid never entered
    add_attendee("ANN-1", "ann@example.com", name="Ann", entered=True, minutes=1)
    add_attendee("ANN-2", "ann@example.com", name="Ann", entered=True, minutes=5)
    add_attendee("BOB-1", "bob@example.com", name="Bob", entered=True, gifted=True, minutes=3)
    add_attendee("CID-1", "cid@example.com", name="Cid", minutes=4)
    add_attendee("DEE-1", "dee@example.com", name="Dee", entered=True, minutes=2)


def test_entered_listing_is_distinct_by_email(db, crowd):
    listing = reporting.list_entered(db, page=1, page_size=10)

    emails = [r.email for r in listing.records]
    assert len(emails) == len(set(emails))
    assert set(emails) == {"ann@example.com", "bob@example.com", "dee@example.com"}
    assert listing.total_count == 3


def test_pages_split_distinct_emails(db, crowd):
    first = reporting.list_entered(db, page=1, page_size=2)
    second = reporting.list_entered(db, page=2, page_size=2)
    beyond = reporting.list_entered(db, page=3, page_size=2)

    assert first.total_count == second.total_count == 3
    # Newest person first: ann (latest row at minute 5), bob, then dee
    assert {r.email for r in first.records} == {"ann@example.com", "bob@example.com"}
    assert [r.email for r in second.records] == ["dee@example.com"]
    assert beyond.records == []
    assert beyond.total_count == 3


def test_sort_applies_to_representatives(db, crowd):
    by_name = reporting.list_entered(db, page=1, page_size=10, sort_key="name", order="asc")
    assert [r.name for r in by_name.records] == ["Ann", "Bob", "Dee"]

    newest = reporting.list_entered(db, page=1, page_size=10, sort_key="created_at", order="desc")
    # ann is represented by her newest row when sorting newest first
    assert newest.records[0].unique_code == "ANN-2"

    oldest = reporting.list_entered(db, page=1, page_size=10, sort_key="created_at", order="asc")
    assert oldest.records[0].unique_code == "ANN-1"


def test_dashboard_column_aliases(db, crowd):
    listing = reporting.list_entered(db, sort_key="uniqueId", order="ASC")
    assert [r.unique_code for r in listing.records][0] == "ANN-1"


def test_gifted_listing(db, crowd):
    listing = reporting.list_gifted(db)
    assert listing.total_count == 1
    assert [r.unique_code for r in listing.records] == ["BOB-1"]


def test_empty_listing_is_not_an_error(db):
    listing = reporting.list_gifted(db, page=1, page_size=5)
    assert listing.records == []
    assert listing.total_count == 0


@pytest.mark.parametrize("kwargs", [
    {"page": 0},
    {"page_size": 0},
    {"page_size": 1000},
    {"sort_key": "password"},
    {"order": "sideways"},
])
def test_invalid_listing_queries(db, kwargs):
    with pytest.raises(InvalidListingQuery):
        reporting.list_entered(db, **kwargs)


def test_listing_store_failure(db, monkeypatch):
    def broken(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("timeout"))

    monkeypatch.setattr(db, "scalar", broken)
    with pytest.raises(StoreUnavailable):
        reporting.list_entered(db)


def test_summary_counts_people_not_rows(db, crowd):
    summary = reporting.summary(db)
    assert summary.entered == 3
    assert summary.gifted == 1
    assert summary.registered == 4
    assert summary.total_rows == 5


def test_exports_one_row_per_email(db, crowd, add_attendee):
    # Gifted without entry never appears on the check-out list
    add_attendee("EVE-1", "eve@example.com", gifted=True)

    checkin = reporting.export_rows(db, "entered")
    checkout = reporting.export_rows(db, "gifted")

    assert [r["unique_code"] for r in checkin] == ["ANN-1", "BOB-1", "DEE-1"]
    assert [r["unique_code"] for r in checkout] == ["BOB-1"]

    with pytest.raises(InvalidListingQuery):
        reporting.export_rows(db, "everyone")
