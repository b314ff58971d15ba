import pytest

from backend import STATE_OPEN, STATE_PAIRED, RoomRegistry
from errors import CodeTaken


def test_create_room_is_open_with_no_callee(registry, make_connection):
    caller = make_connection()
    room = registry.create_room("ABC", caller)

    assert registry.get_room("ABC") is room
    assert room.caller is caller
    assert room.callee is None
    assert room.state == STATE_OPEN
    assert "ABC" in registry
    assert len(registry) == 1


def test_create_room_rejects_taken_code(registry, make_connection):
    registry.create_room("ABC", make_connection())

    with pytest.raises(CodeTaken) as exc_info:
        registry.create_room("ABC", make_connection())
    assert exc_info.value.reason == "code-taken"
    assert len(registry) == 1


@pytest.mark.parametrize("code", ["", None])
def test_create_room_rejects_empty_code(registry, make_connection, code):
    with pytest.raises(CodeTaken):
        registry.create_room(code, make_connection())
    assert len(registry) == 0


def test_code_is_free_again_after_delete(registry, make_connection):
    registry.create_room("ABC", make_connection())
    registry.delete_room("ABC")

    new_caller = make_connection()
    assert registry.create_room("ABC", new_caller).caller is new_caller


def test_delete_room_is_idempotent(registry, make_connection):
    room = registry.create_room("ABC", make_connection())

    assert registry.delete_room("ABC") is room
    assert registry.delete_room("ABC") is None
    assert registry.get_room("ABC") is None


def test_get_unknown_room(registry):
    assert registry.get_room("nope") is None
    assert registry.get_room(None) is None


def test_room_roles(make_connection):
    registry = RoomRegistry()
    caller, callee = make_connection(), make_connection()
    room = registry.create_room("XYZ", caller)
    room.callee = callee

    assert room.state == STATE_PAIRED
    assert room.occupant("caller") is caller
    assert room.occupant("callee") is callee
    assert room.peer_of("caller") is callee
    assert room.peer_of("callee") is caller
    assert registry.codes() == ["XYZ"]


@pytest.mark.parametrize("code", [123, ["ABC"], {"code": "ABC"}, True])
def test_non_string_codes_are_never_rooms(registry, make_connection, code):
    with pytest.raises(CodeTaken):
        registry.create_room(code, make_connection())
    assert registry.get_room(code) is None
    assert len(registry) == 0
