import pytest

from fontmap.model.errors import MalformedDataError
from fontmap.model.fonts import (
    NO_CLUSTER,
    ProcessStatus,
    parse_font_map,
    parse_font_metadata,
    parse_session_config,
)


def test_parse_full_entry():
    font = parse_font_metadata("inter_400", {
        "safe_name": "inter_400",
        "font_name": "Inter Regular",
        "family_name": "Inter",
        "weight": 400,
        "weights": ["400", "700"],
        "family_names": {"en": "Inter", "ja": "インター"},
        "publishers": ["Rasmus Andersson"],
        "designers": {"en": "Rasmus Andersson"},
        "computed": {"vector": [1.5, -2.0], "k": 3},
    })
    assert font.font_name == "Inter Regular"
    assert font.family_names == ("Inter", "インター")
    assert font.designers == ("Rasmus Andersson",)
    assert font.weights == ("400", "700")
    assert font.vector == (1.5, -2.0)
    assert font.cluster_id == 3


def test_defaults():
    font = parse_font_metadata("mono", {"font_name": "Mono"})
    assert font.safe_name == "mono"
    assert font.family_name == "Mono"
    assert font.weight == 400
    assert font.vector is None
    assert font.cluster_id == NO_CLUSTER


@pytest.mark.parametrize("raw", [
    "not an object",
    {"safe_name": "x"},
    {"font_name": "X", "weight": "bold"},
    {"font_name": "X", "computed": {"vector": [1.0]}},
    {"font_name": "X", "computed": {"vector": ["a", "b"]}},
    {"font_name": "X", "computed": {"vector": [float("nan"), 0.0]}},
])
def test_malformed_entries_raise(raw):
    with pytest.raises(MalformedDataError):
        parse_font_metadata("x", raw)


def test_font_map_skips_malformed_entries():
    fonts = parse_font_map({
        "a": {"font_name": "A", "computed": {"vector": [0, 0]}},
        "b": {"computed": {"vector": [1, 1]}},
        "c": 17,
    })
    assert list(fonts) == ["a"]


def test_font_map_not_found_is_empty():
    assert parse_font_map(None) == {}
    with pytest.raises(MalformedDataError):
        parse_font_map(["a", "b"])


def test_session_config():
    config = parse_session_config({
        "id": "2024-01-01_abc",
        "preview_text": "Hamburgevons",
        "weights": [400, "700", "heavy"],
        "process_status": "clustered",
        "date": "2024-01-01T10:00:00",
        "samples_amount": 12,
        "theme": "dark",
    })
    assert config.session_id == "2024-01-01_abc"
    assert config.weights == (400, 700)
    assert config.process_status is ProcessStatus.CLUSTERED
    assert config.modified_at == "2024-01-01T10:00:00"
    assert config.samples_amount == 12
    assert config.extra == {"theme": "dark"}


def test_unknown_status_falls_back_to_empty():
    config = parse_session_config({"session_id": "s", "process_status": "exploded"})
    assert config.process_status is ProcessStatus.EMPTY


def test_session_config_requires_id():
    with pytest.raises(MalformedDataError):
        parse_session_config({"preview_text": "x"})
