"""Tests for bitmaskgen.parser — width, config and variant parsing."""

import pytest

from bitmaskgen.errors import InvalidIdentifier, InvalidWidth, SpecError, UnknownConfigOption
from bitmaskgen.model import Config, FlagVariant
from bitmaskgen.parser import parse_config, parse_spec, parse_variants, parse_width

# ---------------------------------------------------------------------------
# parse_width()
# ---------------------------------------------------------------------------


class TestParseWidth:
    def test_absent_defaults_to_usize(self) -> None:
        storage = parse_width(None)
        assert storage.name == "usize"
        assert storage.bits == 64
        assert storage.signed is False

    def test_fixed_unsigned(self) -> None:
        storage = parse_width("u8")
        assert (storage.bits, storage.signed) == (8, False)

    def test_fixed_signed(self) -> None:
        storage = parse_width("i128")
        assert (storage.bits, storage.signed) == (128, True)

    def test_pointer_sized_follows_pointer_width(self) -> None:
        assert parse_width("usize", pointer_width=32).bits == 32
        assert parse_width("isize", pointer_width=16).bits == 16

    def test_every_allowed_token(self) -> None:
        for token in ("u8", "u16", "u32", "u64", "u128", "usize",
                      "i8", "i16", "i32", "i64", "i128", "isize"):
            assert parse_width(token).name == token

    def test_unknown_token_names_it(self) -> None:
        with pytest.raises(InvalidWidth, match="u7"):
            parse_width("u7")

    def test_non_string_token(self) -> None:
        with pytest.raises(InvalidWidth, match="8"):
            parse_width(8)

    def test_bad_pointer_width(self) -> None:
        with pytest.raises(InvalidWidth, match="48"):
            parse_width(None, pointer_width=48)


# ---------------------------------------------------------------------------
# parse_config()
# ---------------------------------------------------------------------------


class TestParseConfig:
    def test_absent_is_all_false(self) -> None:
        assert parse_config(None) == Config()

    def test_empty_clause(self) -> None:
        assert parse_config("") == Config()

    def test_comma_separated(self) -> None:
        cfg = parse_config("inverted_flags, flags_iter")
        assert cfg.inverted_flags is True
        assert cfg.flags_iter is True
        assert cfg.vec_debug is False

    def test_trailing_comma(self) -> None:
        assert parse_config("vec_debug,") == Config(vec_debug=True)

    def test_list_form(self) -> None:
        assert parse_config(["flags_iter", "vec_debug"]) == Config(vec_debug=True, flags_iter=True)

    def test_repeated_option_is_harmless(self) -> None:
        assert parse_config("flags_iter, flags_iter") == Config(flags_iter=True)

    def test_unknown_option_names_it(self) -> None:
        with pytest.raises(UnknownConfigOption, match="bogus"):
            parse_config("inverted_flags, bogus")

    def test_enabled_lists_in_fixed_order(self) -> None:
        cfg = parse_config("flags_iter, inverted_flags")
        assert cfg.enabled() == ["inverted_flags", "flags_iter"]


# ---------------------------------------------------------------------------
# parse_variants()
# ---------------------------------------------------------------------------


class TestParseVariants:
    def test_preserves_order_and_expressions(self) -> None:
        spec = parse_variants(["A", "B = A | 0b10", "C"])
        assert [v.name for v in spec] == ["A", "B", "C"]
        assert spec[0].explicit_value is None
        assert spec[1].explicit_value == "A | 0b10"

    def test_table_entry(self) -> None:
        (variant,) = parse_variants([{"name": "Exec", "value": "0b100", "doc": "May execute."}])
        assert variant == FlagVariant("Exec", "0b100", "May execute.")

    def test_integer_value_is_recorded_as_text(self) -> None:
        (variant,) = parse_variants([{"name": "Exec", "value": 4}])
        assert variant.explicit_value == "4"

    def test_flag_variant_passes_through(self) -> None:
        spec = parse_variants([FlagVariant("A", " 0x1 ")])
        assert spec[0].explicit_value == "0x1"

    def test_expression_not_evaluated(self) -> None:
        (variant,) = parse_variants(["A = Later | Undefined"])
        assert variant.explicit_value == "Later | Undefined"

    def test_invalid_name_reports_index(self) -> None:
        with pytest.raises(InvalidIdentifier, match=r"flags\[1\]"):
            parse_variants(["A", "1bad"])

    def test_keyword_rejected(self) -> None:
        with pytest.raises(InvalidIdentifier):
            parse_variants(["class"])

    def test_underscore_rejected(self) -> None:
        with pytest.raises(InvalidIdentifier, match="underscore"):
            parse_variants(["_bits"])

    def test_empty_expression(self) -> None:
        with pytest.raises(SpecError, match="empty value"):
            parse_variants(["A ="])

    def test_unknown_table_key(self) -> None:
        with pytest.raises(SpecError, match="bits"):
            parse_variants([{"name": "A", "bits": 1}])

    def test_wrong_entry_type(self) -> None:
        with pytest.raises(SpecError):
            parse_variants([3])


# ---------------------------------------------------------------------------
# parse_spec()
# ---------------------------------------------------------------------------


class TestParseSpec:
    def test_combines_parts(self) -> None:
        parsed = parse_spec("Perms", ["Read", "Write"], "u8", "flags_iter", doc="Permissions.")
        assert parsed.name == "Perms"
        assert parsed.storage.name == "u8"
        assert parsed.config.flags_iter is True
        assert len(parsed.flags) == 2
        assert parsed.doc == "Permissions."

    def test_invalid_type_name(self) -> None:
        with pytest.raises(InvalidIdentifier, match="type name"):
            parse_spec("not valid", ["A"])
