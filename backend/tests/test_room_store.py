# tests/test_room_store.py

import threading

import pytest

from phrasecounter.game.store import RoomStore


HOST = "player_host"


@pytest.fixture()
def room(store: RoomStore):
    room = store.ensure_room("r1")
    store.assign_host_if_absent(room, HOST)
    return room


class TestRoomLifecycle:
    """Room creation, host assignment and deletion"""

    def test_ensure_room_creates_defaults(self, store):
        room = store.ensure_room("r1")

        assert room.id == "r1"
        assert room.title == "Test Room"
        assert room.phrase is None
        assert room.state == "waiting"
        assert room.players == []
        assert room.host is None
        assert room.winner is None
        assert room.correct_answer is None
        assert room.last_updated > 0

    def test_ensure_room_returns_existing(self, store):
        first = store.ensure_room("r1")
        assert store.ensure_room("r1") is first
        assert len(store) == 1

    def test_first_joiner_becomes_host(self, store):
        room = store.ensure_room("r1")

        assert store.assign_host_if_absent(room, "a") is True
        assert store.assign_host_if_absent(room, "b") is False
        assert room.host == "a"

    def test_delete_room_requires_host(self, store, room):
        assert store.delete_room("r1", "someone_else") is None
        assert store.get_room("r1") is room

        assert store.delete_room("r1", HOST) is room
        assert store.get_room("r1") is None

    def test_rejoin_after_delete_creates_fresh_room(self, store, room):
        store.add_player("r1", "p1", "Alice")
        store.delete_room("r1", HOST)

        fresh = store.ensure_room("r1")
        assert fresh is not room
        assert fresh.host is None
        assert fresh.players == []

    def test_locked_blocks_other_threads_until_released(self, store):
        created = threading.Event()

        def join():
            store.ensure_room("r2")
            created.set()

        with store.locked():
            worker = threading.Thread(target=join)
            worker.start()
            assert not created.wait(0.2)
            # Re-entrant for the holder
            assert store.get_room("r2") is None

        worker.join(timeout=5)
        assert created.is_set()
        assert store.get_room("r2") is not None

    def test_commands_for_unknown_room_are_ignored(self, store):
        assert store.add_player("nope", "p1", "Alice") is None
        assert store.start_guessing("nope", HOST) is None
        assert store.set_guess("nope", "p1", 3) is None
        assert store.reveal_answer("nope", HOST, 3) is None
        assert store.delete_room("nope", HOST) is None
        assert len(store) == 0


class TestRoster:
    """Joining and removing players"""

    def test_players_kept_in_join_order(self, store, room):
        for i in range(5):
            store.add_player("r1", f"p{i}", f"Player {i}")

        assert [p.id for p in room.players] == [f"p{i}" for i in range(5)]
        assert all(p.guess is None and p.difference is None for p in room.players)

    def test_duplicate_join_is_noop(self, store, room):
        store.add_player("r1", "p1", "Alice")
        assert store.add_player("r1", "p1", "Alice again") is None

        assert len(room.players) == 1
        assert room.players[0].name == "Alice"

    def test_join_rejected_outside_waiting(self, store, room):
        store.add_player("r1", "p1", "Alice")
        store.start_guessing("r1", HOST)

        assert store.add_player("r1", "p2", "Bob") is None
        assert [p.id for p in room.players] == ["p1"]

    def test_remove_player_by_host(self, store, room):
        store.add_player("r1", "p1", "Alice")
        store.add_player("r1", "p2", "Bob")

        assert store.remove_player("r1", HOST, "p1") is room
        assert [p.id for p in room.players] == ["p2"]

    def test_remove_player_by_non_host_is_noop(self, store, room):
        store.add_player("r1", "p1", "Alice")
        store.add_player("r1", "p2", "Bob")

        assert store.remove_player("r1", "p2", "p1") is None
        assert [p.id for p in room.players] == ["p1", "p2"]

    def test_host_may_remove_while_guessing(self, store, room):
        store.add_player("r1", "p1", "Alice")
        store.add_player("r1", "p2", "Bob")
        store.start_guessing("r1", HOST)

        store.remove_player("r1", HOST, "p2")
        assert [p.id for p in room.players] == ["p1"]


class TestGuessingRound:
    """start -> guess -> reveal -> reset"""

    def test_start_requires_players(self, store, room):
        assert store.start_guessing("r1", HOST) is None
        assert room.state == "waiting"

    def test_non_host_cannot_start(self, store, room):
        store.add_player("r1", "p1", "Alice")

        assert store.start_guessing("r1", "p1") is None
        assert room.state == "waiting"

    def test_guess_only_while_guessing(self, store, room):
        store.add_player("r1", "p1", "Alice")
        assert store.set_guess("r1", "p1", 4) is None

        store.start_guessing("r1", HOST)
        assert store.set_guess("r1", "p1", 4) is room
        assert store.set_guess("r1", "p1", 7) is room

        player = room.find_player("p1")
        assert player.guess == 7
        assert player.difference is None

    def test_guess_from_unknown_player_is_noop(self, store, room):
        store.add_player("r1", "p1", "Alice")
        store.start_guessing("r1", HOST)

        assert store.set_guess("r1", "ghost", 4) is None

    def test_reveal_computes_differences_and_winner(self, store, room):
        store.add_player("r1", "p1", "Alice")
        store.add_player("r1", "p2", "Bob")
        store.add_player("r1", "p3", "Carol")
        store.start_guessing("r1", HOST)
        store.set_guess("r1", "p1", 3)
        store.set_guess("r1", "p2", 9)

        assert store.reveal_answer("r1", HOST, 8) is room

        alice, bob, carol = room.players
        assert room.state == "finished"
        assert room.correct_answer == 8
        assert alice.difference == 5
        assert bob.difference == 1
        assert carol.difference is None
        assert room.winner is bob

    def test_tie_goes_to_first_joiner(self, store, room):
        store.add_player("r1", "b", "Alice")
        store.add_player("r1", "c", "Bob")
        store.start_guessing("r1", HOST)
        store.set_guess("r1", "b", 10)
        store.set_guess("r1", "c", 14)

        store.reveal_answer("r1", HOST, 12)

        assert [p.difference for p in room.players] == [2, 2]
        assert room.winner.name == "Alice"
        assert room.state == "finished"

    def test_reveal_without_guesses_has_no_winner(self, store, room):
        store.add_player("r1", "p1", "Alice")
        store.start_guessing("r1", HOST)

        store.reveal_answer("r1", HOST, 5)

        assert room.state == "finished"
        assert room.winner is None

    def test_non_host_cannot_reveal(self, store, room):
        store.add_player("r1", "p1", "Alice")
        store.start_guessing("r1", HOST)
        store.set_guess("r1", "p1", 2)

        assert store.reveal_answer("r1", "p1", 2) is None
        assert room.state == "guessing"
        assert room.correct_answer is None

    def test_removing_the_winner_clears_winner(self, store, room):
        store.add_player("r1", "p1", "Alice")
        store.add_player("r1", "p2", "Bob")
        store.start_guessing("r1", HOST)
        store.set_guess("r1", "p1", 5)
        store.set_guess("r1", "p2", 9)
        store.reveal_answer("r1", HOST, 5)
        assert room.winner.id == "p1"

        store.remove_player("r1", HOST, "p2")
        assert room.winner.id == "p1"

        store.remove_player("r1", HOST, "p1")
        assert room.winner is None
        assert [p.id for p in room.players] == []

    def test_reset_clears_round_but_keeps_settings(self, store, room):
        store.set_title("r1", HOST, "Standup")
        store.set_phrase("r1", HOST, "Synergy")
        store.add_player("r1", "p1", "Alice")
        store.start_guessing("r1", HOST)
        store.set_guess("r1", "p1", 2)
        store.reveal_answer("r1", HOST, 2)

        assert store.reset_room("r1", HOST) is room

        assert room.players == []
        assert room.correct_answer is None
        assert room.winner is None
        assert room.state == "waiting"
        assert room.title == "Standup"
        assert room.phrase == "Synergy"
        assert room.host == HOST

    def test_non_host_cannot_reset(self, store, room):
        store.add_player("r1", "p1", "Alice")

        assert store.reset_room("r1", "p1") is None
        assert len(room.players) == 1


class TestRoomSettings:
    """Host-only title and phrase edits"""

    def test_host_updates_title_and_phrase(self, store, room):
        store.set_title("r1", HOST, "Quarterly review")
        store.set_phrase("r1", HOST, "Circle Back")

        assert room.title == "Quarterly review"
        assert room.phrase == "Circle Back"

    def test_non_host_edits_are_ignored(self, store, room):
        assert store.set_title("r1", "intruder", "Hacked") is None
        assert store.set_phrase("r1", "intruder", "Hacked") is None

        assert room.title == "Test Room"
        assert room.phrase is None

    def test_mutation_bumps_last_updated(self, store, room):
        room.last_updated = 0
        store.set_title("r1", HOST, "New title")
        assert room.last_updated > 0
