"""Tests for the spec file loader."""

from pathlib import Path

import pytest

from bitmaskgen.errors import InvalidWidth, SpecError, UnknownConfigOption
from bitmaskgen.specfile import _find_spec, compile_spec_file, load_spec_file

SAMPLE_TOML = """\
pointer_width = 32
output = "gen/flags.py"

[bitmasks.Permissions]
type = "u8"
config = "inverted_flags, flags_iter"
doc = "File permissions."
flags = [
    "Read",
    "Write",
    "ReadWrite = Read | Write",
    { name = "Exec", value = "0b100", doc = "May execute." },
]

[bitmasks.Wide]
flags = ["A", "B"]
"""


def _make_spec(tmp_path: Path, content: str = SAMPLE_TOML) -> Path:
    """Write a bitmasks.toml and return its path."""
    path = tmp_path / "bitmasks.toml"
    path.write_text(content, encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# _find_spec()
# ---------------------------------------------------------------------------


class TestFindSpec:
    def test_walks_up(self, tmp_path: Path) -> None:
        path = _make_spec(tmp_path)
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert _find_spec(nested) == path.resolve()

    def test_from_cwd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _make_spec(tmp_path)
        monkeypatch.chdir(tmp_path)
        spec = load_spec_file()
        assert [b.name for b in spec.bitmasks] == ["Permissions", "Wide"]

    def test_missing(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_spec_file(tmp_path / "nope.toml")


# ---------------------------------------------------------------------------
# load_spec_file()
# ---------------------------------------------------------------------------


class TestLoadSpecFile:
    def test_settings(self, tmp_path: Path) -> None:
        spec = load_spec_file(_make_spec(tmp_path))
        assert spec.pointer_width == 32
        assert spec.output == tmp_path / "gen" / "flags.py"

    def test_entries_keep_file_order(self, tmp_path: Path) -> None:
        spec = load_spec_file(_make_spec(tmp_path))
        perms, wide = spec.bitmasks
        assert perms.width == "u8"
        assert perms.config == "inverted_flags, flags_iter"
        assert perms.doc == "File permissions."
        assert perms.flags[3] == {"name": "Exec", "value": "0b100", "doc": "May execute."}
        assert wide.width is None

    def test_defaults(self, tmp_path: Path) -> None:
        spec = load_spec_file(_make_spec(tmp_path, '[bitmasks.T]\nflags = ["A"]\n'))
        assert spec.pointer_width == 64
        assert spec.output is None

    def test_unknown_top_level_key(self, tmp_path: Path) -> None:
        with pytest.raises(SpecError, match="outptu"):
            load_spec_file(_make_spec(tmp_path, 'outptu = "x.py"\n'))

    def test_unknown_bitmask_key(self, tmp_path: Path) -> None:
        with pytest.raises(SpecError, match="width") as exc_info:
            load_spec_file(_make_spec(tmp_path, '[bitmasks.T]\nwidth = "u8"\nflags = []\n'))
        assert "bitmasks.T" in str(exc_info.value)

    def test_flags_must_be_list(self, tmp_path: Path) -> None:
        with pytest.raises(SpecError, match="'flags' must be a list"):
            load_spec_file(_make_spec(tmp_path, '[bitmasks.T]\nflags = "A"\n'))

    def test_bad_pointer_width(self, tmp_path: Path) -> None:
        with pytest.raises(InvalidWidth, match="pointer_width"):
            load_spec_file(_make_spec(tmp_path, "pointer_width = 48\n"))

    def test_invalid_toml(self, tmp_path: Path) -> None:
        with pytest.raises(SpecError, match="invalid TOML"):
            load_spec_file(_make_spec(tmp_path, "[bitmasks.T\n"))


# ---------------------------------------------------------------------------
# compile_spec_file()
# ---------------------------------------------------------------------------


class TestCompileSpecFile:
    def test_compiles_every_bitmask(self, tmp_path: Path) -> None:
        perms, wide = compile_spec_file(load_spec_file(_make_spec(tmp_path)))
        assert [c.name for c in perms.constants] == [
            "Read",
            "InvertedRead",
            "Write",
            "InvertedWrite",
            "ReadWrite",
            "InvertedReadWrite",
            "Exec",
            "InvertedExec",
        ]
        assert perms.values["ReadWrite"] == 0b011
        assert perms.values["Exec"] == 0b100
        assert perms.doc == "File permissions."
        assert wide.storage.bits == 32

    def test_pointer_width_override(self, tmp_path: Path) -> None:
        _, wide = compile_spec_file(load_spec_file(_make_spec(tmp_path)), pointer_width=16)
        assert wide.storage.bits == 16

    def test_error_carries_location(self, tmp_path: Path) -> None:
        path = _make_spec(tmp_path, '[bitmasks.T]\nconfig = "nope"\nflags = ["A"]\n')
        with pytest.raises(UnknownConfigOption) as exc_info:
            compile_spec_file(load_spec_file(path))
        message = str(exc_info.value)
        assert message.startswith(f"{path}:bitmasks.T: ")
        assert "'nope'" in message
