from __future__ import annotations

import httpx
import pytest

from fitsync.errors import ApiRejectedError, ConnectivityError
from fitsync.sync import EventBoard

EVENTS = {
    "success": True,
    "data": {
        "events": [
            {"id": "e1", "name": "Morning Yoga", "registrations": [], "participantCount": 4},
            {"id": "e2", "name": "Park Run", "registrations": [{"userId": "user-1"}], "participantCount": 7},
        ]
    },
}


@pytest.fixture
def board(logged_in, backend) -> EventBoard:
    backend.on("GET", "/events/", json_body=EVENTS)
    board = EventBoard(logged_in)
    assert board.refresh()
    return board


def test_register_increments(board, backend):
    backend.on("POST", "/events/e1/register", json_body={"success": True})

    event = board.toggle_attendance("e1")

    assert event.is_attending
    assert event.participant_count == 5
    assert board.button_label(event) == "Registered"
    assert backend.last.method == "POST"


def test_unregister_decrements(board, backend):
    backend.on("DELETE", "/events/e2/unregister", json_body={"success": True})

    event = board.toggle_attendance("e2")

    assert not event.is_attending
    assert event.participant_count == 6
    assert board.button_label(event) == "Register"
    assert backend.last.method == "DELETE"


def test_round_trip_restores_count(board, backend):
    backend.on("POST", "/events/e1/register", json_body={"success": True})
    backend.on("DELETE", "/events/e1/unregister", json_body={"success": True})

    board.toggle_attendance("e1")
    event = board.toggle_attendance("e1")

    assert (event.is_attending, event.participant_count) == (False, 4)


def test_failed_register_rolls_back(board, backend):
    backend.on("POST", "/events/e1/register", status=409, json_body={"message": "Event is full"})

    with pytest.raises(ApiRejectedError, match="Event is full"):
        board.toggle_attendance("e1")

    event = board.get("e1")
    assert (event.is_attending, event.participant_count) == (False, 4)
    assert board.button_label(event) == "Register"


def test_offline_unregister_rolls_back(board, backend):
    backend.on("DELETE", "/events/e2/unregister", error=httpx.ConnectError)

    with pytest.raises(ConnectivityError):
        board.toggle_attendance("e2")

    event = board.get("e2")
    assert (event.is_attending, event.participant_count) == (True, 7)


def test_refresh_replaces_collection(board, backend):
    backend.on("GET", "/events/", json_body={"success": True, "data": {"events": []}})

    assert board.refresh()
    assert board.events == []


def test_late_refresh_after_logout_is_dropped(board, backend, logged_in):
    def respond(request: httpx.Request) -> httpx.Response:
        logged_in.logout()
        return httpx.Response(200, json={"success": True, "data": {"events": []}})

    backend.on_call("GET", "/events/", respond)

    assert board.refresh() is False
    assert [event.id for event in board.events] == ["e1", "e2"]
