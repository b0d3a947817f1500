from src.attendance_sync.attendance_sync.storage.sqlite_storage import SQLiteStorage


def test_roundtrip_and_overwrite(tmp_path):
    storage = SQLiteStorage(str(tmp_path / "profile.db"))

    assert storage.get_item("aams_users") is None
    storage.set_item("aams_users", "[]")
    storage.set_item("aams_users", '[{"id":"u1"}]')

    assert storage.get_item("aams_users") == '[{"id":"u1"}]'
    assert storage.keys() == ["aams_users"]
    storage.dispose()


def test_two_handles_share_one_file(tmp_path):
    path = str(tmp_path / "nested" / "profile.db")
    tab_a = SQLiteStorage(path)
    tab_b = SQLiteStorage(path)

    tab_a.set_item("aams_current_user", "admin1")

    assert tab_b.get_item("aams_current_user") == "admin1"

    tab_b.remove_item("aams_current_user")
    assert tab_a.get_item("aams_current_user") is None
    tab_a.dispose()
    tab_b.dispose()


def test_clear(tmp_path):
    storage = SQLiteStorage(str(tmp_path / "profile.db"))
    storage.set_item("a", "1")
    storage.set_item("b", "2")

    storage.clear()

    assert storage.keys() == []
    storage.dispose()
