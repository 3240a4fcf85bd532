from __future__ import annotations

import json
from pathlib import Path

import pytest

from gym_backend.client.session import SessionManager
from gym_backend.client.storage import FileTokenStorage, MemoryTokenStorage, Session


def test_file_storage_round_trip(tmp_path: Path) -> None:
    storage = FileTokenStorage(tmp_path / "nested" / "session.json")

    storage.save(Session(access_token="a1", refresh_token="r1"))

    assert storage.load() == Session(access_token="a1", refresh_token="r1")
    on_disk = json.loads(storage.path.read_text(encoding="utf-8"))
    assert on_disk == {"accessToken": "a1", "refreshToken": "r1"}
    assert not (tmp_path / "nested" / "session.json.tmp").exists()


def test_file_storage_clear_is_idempotent(tmp_path: Path) -> None:
    storage = FileTokenStorage(tmp_path / "session.json")
    storage.save(Session(access_token="a1", refresh_token="r1"))

    storage.clear()
    storage.clear()

    assert storage.load() is None


@pytest.mark.parametrize(
    "content",
    [
        '{"accessToken": "a1"}',
        '{"accessToken": "a1", "refreshToken": ""}',
        '["a1", "r1"]',
        "{not json",
    ],
)
def test_partial_or_corrupt_file_loads_as_absent(tmp_path: Path, content: str) -> None:
    path = tmp_path / "session.json"
    path.write_text(content, encoding="utf-8")

    assert FileTokenStorage(path).load() is None


def test_session_manager_start_rotate_end() -> None:
    storage = MemoryTokenStorage()
    reasons: list[str] = []
    manager = SessionManager(storage, on_logout=reasons.append)
    assert not manager.is_authenticated

    manager.start("a1", "r1")
    assert manager.is_authenticated
    assert storage.load() == Session(access_token="a1", refresh_token="r1")

    manager.rotate("a2")
    assert manager.session == Session(access_token="a2", refresh_token="r1")

    manager.rotate("a3", "r3")
    assert storage.load() == Session(access_token="a3", refresh_token="r3")

    manager.end("logout")
    assert manager.session is None
    assert storage.load() is None
    assert reasons == ["logout"]


def test_session_manager_resumes_from_storage(tmp_path: Path) -> None:
    storage = FileTokenStorage(tmp_path / "session.json")
    SessionManager(storage).start("a1", "r1")

    resumed = SessionManager(FileTokenStorage(tmp_path / "session.json"))

    assert resumed.access_token == "a1"
    assert resumed.refresh_token == "r1"


def test_session_manager_drops_partial_state(tmp_path: Path) -> None:
    path = tmp_path / "session.json"
    path.write_text('{"accessToken": "a1"}', encoding="utf-8")

    manager = SessionManager(FileTokenStorage(path))

    assert not manager.is_authenticated
    assert not path.exists()


def test_failed_save_keeps_previous_session() -> None:
    class BrokenStorage(MemoryTokenStorage):
        fail = False

        def save(self, session: Session) -> None:
            if self.fail:
                raise OSError("disk full")
            super().save(session)

    storage = BrokenStorage()
    manager = SessionManager(storage)
    manager.start("a1", "r1")
    storage.fail = True

    with pytest.raises(OSError):
        manager.rotate("a2", "r2")

    assert manager.session == Session(access_token="a1", refresh_token="r1")


def test_rotate_without_session_is_an_error() -> None:
    with pytest.raises(RuntimeError):
        SessionManager(MemoryTokenStorage()).rotate("a1")
