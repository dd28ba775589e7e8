import json

from staffdesk.client.signals import Signal
from staffdesk.client.storage import TOKEN_KEY, USER_KEY, LocalStorage, MemoryStorage


def test_local_storage_survives_a_new_instance(tmp_path):
    path = tmp_path / "state" / "storage.json"
    first = LocalStorage(path)
    first.set_item(TOKEN_KEY, "abc")
    first.set_item(USER_KEY, json.dumps({"id": 1}))

    second = LocalStorage(path)

    assert second.get_item(TOKEN_KEY) == "abc"
    assert json.loads(second.get_item(USER_KEY)) == {"id": 1}
    assert (path.stat().st_mode & 0o777) == 0o600


def test_local_storage_remove_and_reload(tmp_path):
    path = tmp_path / "storage.json"
    storage = LocalStorage(path)
    storage.set_item(TOKEN_KEY, "abc")
    other = LocalStorage(path)

    storage.remove_item(TOKEN_KEY)
    assert other.get_item(TOKEN_KEY) == "abc"
    other.reload()

    assert other.get_item(TOKEN_KEY) is None
    assert TOKEN_KEY not in other


def test_unreadable_storage_file_starts_empty(tmp_path):
    path = tmp_path / "storage.json"
    path.write_text("{not json", encoding="utf-8")

    storage = LocalStorage(path)

    assert list(storage.keys()) == []
    storage.set_item("k", "v")
    assert json.loads(path.read_text(encoding="utf-8")) == {"k": "v"}


def test_memory_storage_stringifies_values():
    storage = MemoryStorage()
    storage.set_item("stamp", 123)

    assert storage.get_item("stamp") == "123"
    storage.clear()
    assert storage.get_item("stamp") is None


def test_signal_keeps_going_after_a_failing_receiver():
    signal = Signal("demo")
    seen = []

    def broken(**payload):
        raise RuntimeError("boom")

    signal.connect(broken)
    signal.connect(lambda **payload: seen.append(payload))
    signal.send(path="/x")

    assert seen == [{"path": "/x"}]
    signal.disconnect(broken)
    assert len(signal) == 1
