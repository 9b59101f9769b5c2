import threading

import pytest

import battleship.rooms as rooms_mod
from battleship.errors import RoomNotFound
from battleship.rooms import Player, Room, RoomRegistry, RoomState, generate_room_code


def test_generate_room_code_shape():
    code = generate_room_code(6)
    assert len(code) == 6
    assert code.isalnum() and code.upper() == code


def test_create_and_find():
    registry = RoomRegistry()
    code = registry.create_room()
    room = registry.find(code)
    assert room.code == code
    assert room.state is RoomState.WAITING
    assert room.players == []
    # Lookups are case-insensitive
    assert registry.find(code.lower()) is room


def test_find_unknown_code():
    registry = RoomRegistry()
    with pytest.raises(RoomNotFound):
        registry.find('NOPE00')
    with pytest.raises(RoomNotFound):
        registry.find(None)


def test_create_regenerates_on_collision(monkeypatch):
    registry = RoomRegistry()
    codes = iter(['AAAAAA', 'AAAAAA', 'AAAAAA', 'BBBBBB'])
    monkeypatch.setattr(rooms_mod, 'generate_room_code', lambda length=6: next(codes))
    assert registry.create_room() == 'AAAAAA'
    assert registry.create_room() == 'BBBBBB'
    assert len(registry) == 2
    assert registry.find('BBBBBB').code == 'BBBBBB'


def test_concurrent_creates_are_unique():
    registry = RoomRegistry(code_length=2)
    results = []

    def worker():
        for _ in range(50):
            results.append(registry.create_room())

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(results) == 200
    assert len(set(results)) == 200
    assert len(registry) == 200


def test_remove_if_empty_only_removes_empty_rooms():
    registry = RoomRegistry()
    code = registry.create_room()
    room = registry.find(code)
    room.slots[0] = Player(sid='a', name='Alice')
    assert registry.remove_if_empty(code) is False
    assert registry.find(code) is room

    room.slots[0] = None
    assert registry.remove_if_empty(code) is True
    assert room.closed
    with pytest.raises(RoomNotFound):
        registry.find(code)
    # Second call is a no-op
    assert registry.remove_if_empty(code) is False


def test_room_summary_hides_boards():
    room = Room(code='ABC123')
    room.slots[1] = Player(sid='b', name='Bob')
    summary = room.to_dict()
    assert summary == {
        'code': 'ABC123',
        'state': 'waiting',
        'players': [{'player_index': 1, 'name': 'Bob', 'configured': False}],
        'turn_index': None,
        'winner': None,
    }
    assert room.free_slot() == 0
