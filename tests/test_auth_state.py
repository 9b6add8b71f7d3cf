import json

from relay.auth_state import CredentialStore


def test_load_without_file_is_empty(tmp_path):
    assert CredentialStore(tmp_path / "auth").load() == {}


def test_save_merges_updates(tmp_path):
    store = CredentialStore(tmp_path / "auth")
    store.save({"token": "abc"})
    store.save({"user_id": "42"})
    store.save({"token": "def"})

    assert store.load() == {"token": "def", "user_id": "42"}
    assert json.loads((tmp_path / "auth" / "creds.json").read_text()) == {"token": "def", "user_id": "42"}


def test_corrupt_file_is_ignored(tmp_path):
    directory = tmp_path / "auth"
    directory.mkdir()
    (directory / "creds.json").write_text("{not json")
    assert CredentialStore(directory).load() == {}


def test_clear(tmp_path):
    store = CredentialStore(tmp_path / "auth")
    store.save({"token": "abc"})
    store.clear()
    assert store.load() == {}
