from datetime import date

import pytest
from fastapi.testclient import TestClient

from reading_tracker.shelves import BookSummary, InMemoryCatalog, InMemoryShelfRepository, ShelfService

from api.app import app
from api.dependencies import get_service

HEADERS = {"X-User-Id": "reader-1"}
TODAY = date(2024, 3, 20)


@pytest.fixture
def client():
    catalog = InMemoryCatalog(
        [
            BookSummary(book_id=1, title="Dune", page_count=300, authors=["Frank Herbert"]),
            BookSummary(book_id=2, title="Emma", authors=["Jane Austen"]),
        ]
    )
    service = ShelfService(InMemoryShelfRepository(), catalog, today=lambda: TODAY)
    app.dependency_overrides[get_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_healthz(client):
    assert client.get("/healthz").json() == {"status": "ok"}


def test_requests_need_a_user(client):
    res = client.get("/shelf/counts")
    assert res.status_code == 401


def test_mark_read_and_list(client):
    res = client.put("/shelf/entries/1/status", json={"status": "Read"}, headers=HEADERS)
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "Read"
    assert body["currentPage"] == 300
    assert body["finishedAt"] == "2024-03-20"

    books = client.get("/shelf/books", params={"status": "Read"}, headers=HEADERS).json()
    assert len(books) == 1
    assert books[0]["bookTitle"] == "Dune"
    assert books[0]["bookAuthors"] == "Frank Herbert"
    assert books[0]["currentPage"] == 300

    counts = client.get("/shelf/counts", headers=HEADERS).json()
    assert counts == {"wantToRead": 0, "currentlyReading": 0, "read": 1, "dnf": 0}
    assert client.get("/shelf/years", headers=HEADERS).json() == [2024]


def test_status_none_returns_null(client):
    client.put("/shelf/entries/1/status", json={"status": "WantToRead"}, headers=HEADERS)
    res = client.put("/shelf/entries/1/status", json={"status": "None"}, headers=HEADERS)
    assert res.status_code == 200
    assert res.json() is None
    assert client.get("/shelf/entries/1", headers=HEADERS).status_code == 404


def test_unknown_status_is_rejected(client):
    res = client.put("/shelf/entries/1/status", json={"status": "Maybe"}, headers=HEADERS)
    assert res.status_code == 422


def test_unknown_book(client):
    res = client.put("/shelf/entries/99/status", json={"status": "Read"}, headers=HEADERS)
    assert res.status_code == 404
    assert res.json()["code"] == "not_found"


def test_progress_errors(client):
    res = client.put("/shelf/entries/1/progress", json={"current_page": 10}, headers=HEADERS)
    assert res.status_code == 404

    client.put("/shelf/entries/1/status", json={"status": "CurrentlyReading"}, headers=HEADERS)
    res = client.put("/shelf/entries/1/progress", json={"current_page": 301}, headers=HEADERS)
    assert res.status_code == 400
    assert res.json()["code"] == "progress_exceeds_page_count"
    assert "300" in res.json()["detail"]

    res = client.put("/shelf/entries/1/progress", json={"current_page": -1}, headers=HEADERS)
    assert res.status_code == 422

    res = client.put("/shelf/entries/1/progress", json={"current_page": 150}, headers=HEADERS)
    assert res.json()["currentPage"] == 150


def test_currently_reading_progress(client):
    client.put(
        "/shelf/entries/1/status",
        json={"status": "CurrentlyReading", "current_page": 150},
        headers=HEADERS,
    )
    books = client.get("/stats/currently-reading", headers=HEADERS).json()
    assert [(b["bookTitle"], b["progress"]) for b in books] == [("Dune", 50)]
    assert client.get("/stats/currently-reading", params={"limit": 21}, headers=HEADERS).status_code == 422


def test_rating(client):
    res = client.put("/shelf/entries/2/rating", json={"rating": 4}, headers=HEADERS)
    assert res.json()["status"] == "WantToRead"
    assert res.json()["rating"] == 4
    assert client.put("/shelf/entries/2/rating", json={"rating": 6}, headers=HEADERS).status_code == 422


def test_goal_endpoints(client):
    assert client.get("/goals/current", headers=HEADERS).json() is None

    res = client.put("/goals/current", json={"goal": 366}, headers=HEADERS)
    assert res.status_code == 400
    assert res.json()["code"] == "invalid_goal"

    res = client.put("/goals/current", json={"goal": 12}, headers=HEADERS)
    assert res.json() == {"goal": 12, "booksRead": 0, "year": 2024}

    pace = client.get("/goals/current/pace", headers=HEADERS).json()
    assert pace["goal"] == 12
    assert pace["daysElapsed"] == 80
    assert pace["requiredPacePerDay"] == "0.04"


def test_calendar_endpoint(client):
    client.put("/shelf/entries/1/status", json={"status": "Read"}, headers=HEADERS)
    calendar = client.get("/goals/calendar", params={"year": 2024, "month": 3}, headers=HEADERS).json()
    assert calendar["totalBooks"] == 1
    assert [b["title"] for b in calendar["booksByDay"]["2024-03-20"]] == ["Dune"]

    res = client.get("/goals/calendar", params={"year": 2024, "month": 13}, headers=HEADERS)
    assert res.status_code == 422


def test_stats_endpoint(client):
    client.put("/shelf/entries/1/status", json={"status": "Read"}, headers=HEADERS)
    stats = client.get("/stats", headers=HEADERS).json()
    assert stats["booksReadThisYear"] == 1
    assert stats["pagesReadThisYear"] == 300
    assert stats["longestBookRead"] == {"title": "Dune", "pages": 300}
    assert stats["fastestRead"] is None


def test_status_lookup(client):
    client.put("/shelf/entries/1/status", json={"status": "Read"}, headers=HEADERS)
    res = client.get("/shelf/statuses", params={"book_ids": [1, 2]}, headers=HEADERS)
    assert res.json() == {"1": {"status": "Read", "currentPage": 300}}

    res = client.get("/shelf/statuses", params={"book_ids": list(range(101))}, headers=HEADERS)
    assert res.status_code == 400
    assert res.json()["code"] == "invalid_query"


def test_remove_from_shelf(client):
    assert client.delete("/shelf/entries/1", headers=HEADERS).status_code == 404
    client.put("/shelf/entries/1/status", json={"status": "Read"}, headers=HEADERS)
    res = client.delete("/shelf/entries/1", headers=HEADERS)
    assert res.json() == {"success": True, "bookId": 1}


def test_export(client):
    client.put("/shelf/entries/1/status", json={"status": "Read"}, headers=HEADERS)
    res = client.get("/shelf/export", params={"status": "Read"}, headers=HEADERS)
    assert res.status_code == 200
    assert res.headers["content-type"].startswith("text/csv")
    assert "attachment" in res.headers["content-disposition"]
    lines = res.text.splitlines()
    assert lines[0].startswith("Title,Author,Pages")
    assert lines[1].startswith("Dune,")

    res = client.get("/shelf/export", params={"status": "Read", "format": "json"}, headers=HEADERS)
    assert res.json()[0]["title"] == "Dune"


def test_shelves_overview(client):
    client.put("/shelf/entries/2/status", json={"status": "DNF"}, headers=HEADERS)
    shelves = client.get("/shelf", headers=HEADERS).json()
    assert set(shelves) == {"wantToRead", "currentlyReading", "read", "dnf"}
    assert [b["bookTitle"] for b in shelves["dnf"]] == ["Emma"]


def test_request_bodies_accept_camel_case_page(client):
    res = client.put(
        "/shelf/entries/1/status",
        json={"status": "CurrentlyReading", "currentPage": 40},
        headers=HEADERS,
    )
    assert res.json()["currentPage"] == 40
    res = client.put("/shelf/entries/1/progress", json={"currentPage": 120}, headers=HEADERS)
    assert res.json()["currentPage"] == 120
    res = client.put("/shelf/entries/1/progress", json={"currentPage": 301}, headers=HEADERS)
    assert res.status_code == 400


def test_export_selected_books(client):
    client.put("/shelf/entries/1/status", json={"status": "Read"}, headers=HEADERS)
    client.put("/shelf/entries/2/status", json={"status": "Read"}, headers=HEADERS)
    res = client.get(
        "/shelf/export",
        params={"status": "Read", "format": "json", "book_ids": [2]},
        headers=HEADERS,
    )
    assert [row["title"] for row in res.json()] == ["Emma"]
