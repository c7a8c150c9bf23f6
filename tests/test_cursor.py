import pytest

from inicache import (
    IniCache,
    IniKeyCursor,
    InsertionType,
    InvalidParameter,
    find_close,
    find_first_value,
    find_next_value,
)


@pytest.fixture
def section():
    section = IniCache().add_section("Files")
    section.add_key("1", "kernel32.dll")
    section.add_key("2", "ntdll.dll")
    section.add_key("3", "user32.dll")
    return section


def test_walk_yields_every_pair_then_stops(section):
    cur = find_first_value(section)
    assert cur is not None
    seen = []
    try:
        while True:
            seen.append(cur.current)
            if not find_next_value(cur):
                break
    finally:
        find_close(cur)
    assert seen == [("1", "kernel32.dll"), ("2", "ntdll.dll"), ("3", "user32.dll")]
    assert cur.closed


def test_exhausted_cursor_stays_on_last_entry(section):
    cur = find_first_value(section)
    assert find_next_value(cur) and find_next_value(cur)
    assert not find_next_value(cur)
    assert not find_next_value(cur)
    assert cur.current == ("3", "user32.dll")
    find_close(cur)


def test_empty_section_has_no_cursor():
    assert find_first_value(IniCache().add_section("Empty")) is None
    # closing "nothing" is fine.
    find_close(None)


def test_closed_cursor_is_rejected(section):
    cur = find_first_value(section)
    cur.close()
    assert not cur.seekable
    with pytest.raises(InvalidParameter):
        cur.next()
    with pytest.raises(InvalidParameter):
        cur.current


def test_context_manager_closes_on_early_exit(section):
    with IniKeyCursor(section) as cur:
        for name, _ in cur:
            if name == "2":
                break
    assert cur.closed


def test_iteration_protocol_and_reset(section):
    with IniKeyCursor(section) as cur:
        assert [n for n, _ in cur] == ["1", "2", "3"]
        cur.reset_seek()
        assert cur.current == ("1", "kernel32.dll")
        assert str(cur) == "[Files]#0"


def test_cursor_key_works_as_anchor(section):
    with IniKeyCursor(section) as cur:
        cur.next()
        anchor = cur.key
    section.insert_key(anchor, InsertionType.AFTER, "2a", "gdi32.dll")
    assert list(section) == ["1", "2", "2a", "3"]


def test_cursor_over_non_section():
    with pytest.raises(InvalidParameter):
        find_first_value({"a": "b"})
