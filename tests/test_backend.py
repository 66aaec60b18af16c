import json

import pytest

from fontmap.app.backend import LocalSessionBackend, sample_image_path
from fontmap.model.errors import ExternalFetchError


def write_json(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")


@pytest.fixture
def backend(tmp_path):
    sessions = tmp_path / "Generated"
    write_json(sessions / "old" / "config.json", {"id": "old", "modified_at": "2024-01-01T00:00:00"})
    write_json(sessions / "new" / "config.json", {"modified_at": "2024-06-01T00:00:00"})
    write_json(sessions / "new" / "inter" / "config.json", {
        "safe_name": "inter", "font_name": "Inter", "computed": {"vector": [0, 1], "k": 0},
    })
    write_json(sessions / "new" / "mono" / "config.json", {"font_name": "Mono"})
    broken = sessions / "new" / "broken" / "config.json"
    broken.parent.mkdir(parents=True)
    broken.write_text("{not json", encoding="utf-8")
    (sessions / "stray").mkdir()
    return LocalSessionBackend(tmp_path)


def test_available_sessions_newest_first(backend):
    sessions = backend.get_available_sessions()
    assert [s["id"] for s in sessions] == ["new", "old"]
    assert backend.get_latest_session_id() == "new"


def test_session_info(backend):
    assert backend.get_session_info("old")["id"] == "old"
    assert backend.get_session_info("missing") is None


def test_compressed_vectors_skip_unreadable_samples(backend):
    fonts = backend.get_compressed_vectors("new")
    assert set(fonts) == {"inter", "mono"}
    assert fonts["inter"]["computed"]["vector"] == [0, 1]
    assert backend.get_compressed_vectors("missing") is None


def test_corrupt_session_config_raises(backend, tmp_path):
    (tmp_path / "Generated" / "old" / "config.json").write_text("[", encoding="utf-8")
    with pytest.raises(ExternalFetchError) as info:
        backend.get_session_info("old")
    assert info.value.operation == "get_session_info"


@pytest.mark.parametrize("session_id", ["", ".", "..", "a/b", "a\\b"])
def test_invalid_session_id(backend, session_id):
    with pytest.raises(ValueError):
        backend.get_session_directory(session_id)


def test_delete_session(backend, tmp_path):
    assert backend.delete_session("old")
    assert not (tmp_path / "Generated" / "old").exists()
    assert not backend.delete_session("old")
    assert backend.get_latest_session_id() == "new"


def test_empty_root(tmp_path):
    backend = LocalSessionBackend(tmp_path / "nothing")
    assert backend.get_available_sessions() == []
    assert backend.get_latest_session_id() is None


def test_sample_image_path(backend):
    session_dir = backend.get_session_directory("new")
    assert sample_image_path(session_dir, "inter") is None

    image = session_dir / "inter" / "sample.png"
    image.write_bytes(b"\x89PNG")
    assert sample_image_path(session_dir, "inter") == image
    assert sample_image_path("", "inter") is None
