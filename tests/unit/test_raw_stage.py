"""Raw stage tests covering every presence × encoding policy combination."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from lib_env_pipeline import InvalidUnicodeError, MissingError, Raw, StageConsumedError, Valid

INVALID = b"caf\xe9"
LOSSY = "caf�"
DEFAULT = "fallback"


def _is_invalid_utf8(data: bytes) -> bool:
    try:
        data.decode("utf-8")
    except UnicodeDecodeError:
        return True
    return False


INVALID_BYTES = st.binary(min_size=1, max_size=16).filter(_is_invalid_utf8)
TEXT = st.text(max_size=32)
RAW_TEXT = st.one_of(TEXT, TEXT.map(lambda value: value.encode("utf-8")))


@pytest.mark.parametrize("operation", ["required_unchecked", "required_checked"])
def test_required_fails_with_missing_when_absent(operation: str) -> None:
    with pytest.raises(MissingError) as info:
        getattr(Raw("PORT", None), operation)()
    assert info.value.key == "PORT"


@pytest.mark.parametrize("operation", ["optional_unchecked", "optional_checked"])
def test_optional_returns_none_when_absent(operation: str) -> None:
    assert getattr(Raw("PORT", None), operation)() is None


@pytest.mark.parametrize(
    "operation",
    ["with_default_unchecked", "with_default_unchecked_sub_invalid", "with_default_checked"],
)
def test_default_substituted_when_absent(operation: str) -> None:
    assert getattr(Raw("PORT", None), operation)(DEFAULT) == Valid("PORT", DEFAULT)


@pytest.mark.parametrize("operation", ["required_checked", "optional_checked"])
def test_checked_rejects_invalid_unicode(operation: str) -> None:
    with pytest.raises(InvalidUnicodeError) as info:
        getattr(Raw("NAME", INVALID), operation)()
    assert info.value.key == "NAME"
    assert info.value.value == LOSSY


def test_default_checked_rejects_invalid_unicode() -> None:
    with pytest.raises(InvalidUnicodeError) as info:
        Raw("NAME", INVALID).with_default_checked(DEFAULT)
    assert "�" in info.value.value


def test_unchecked_repairs_invalid_unicode() -> None:
    assert Raw("NAME", INVALID).required_unchecked().value == LOSSY
    assert Raw("NAME", INVALID).optional_unchecked() == Valid("NAME", LOSSY)
    assert Raw("NAME", INVALID).with_default_unchecked(DEFAULT).value == LOSSY


def test_sub_invalid_replaces_invalid_value_with_default() -> None:
    assert Raw("NAME", INVALID).with_default_unchecked_sub_invalid(DEFAULT).value == DEFAULT


def test_surrogate_escaped_text_counts_as_invalid() -> None:
    escaped = INVALID.decode("utf-8", errors="surrogateescape")
    with pytest.raises(InvalidUnicodeError):
        Raw("NAME", escaped).required_checked()


def test_lone_surrogate_text_counts_as_invalid() -> None:
    assert Raw("NAME", "a\ud800b").required_unchecked().value == "a\ufffdb"
    with pytest.raises(InvalidUnicodeError) as info:
        Raw("NAME", "a\udc00\ud800b").required_checked()
    assert info.value.value == "a\ufffd\ufffdb"


def test_into_inner_returns_raw_value_untouched() -> None:
    assert Raw("NAME", INVALID).into_inner() == INVALID
    assert Raw("NAME", None).into_inner() is None


def test_stage_can_only_be_consumed_once() -> None:
    raw = Raw("PORT", b"80")
    raw.required_checked()
    assert raw.consumed
    with pytest.raises(StageConsumedError, match="PORT"):
        raw.required_unchecked()


def test_stage_is_consumed_even_when_the_operation_fails() -> None:
    raw = Raw("PORT", None)
    with pytest.raises(MissingError):
        raw.required_checked()
    with pytest.raises(StageConsumedError):
        raw.optional_checked()


def test_key_survives_consumption_for_diagnostics() -> None:
    raw = Raw("PORT", None)
    raw.into_inner()
    assert raw.key == "PORT"


@given(RAW_TEXT)
def test_valid_text_passes_through_every_operation_unchanged(raw) -> None:
    expected = raw.decode("utf-8") if isinstance(raw, bytes) else raw
    assert Raw("K", raw).required_unchecked().value == expected
    assert Raw("K", raw).required_checked().value == expected
    assert Raw("K", raw).optional_unchecked().value == expected
    assert Raw("K", raw).optional_checked().value == expected
    assert Raw("K", raw).with_default_unchecked(DEFAULT).value == expected
    assert Raw("K", raw).with_default_unchecked_sub_invalid(DEFAULT).value == expected
    assert Raw("K", raw).with_default_checked(DEFAULT).value == expected


@given(INVALID_BYTES)
def test_invalid_bytes_follow_the_selected_policy(raw: bytes) -> None:
    lossy = raw.decode("utf-8", errors="replace")
    with pytest.raises(InvalidUnicodeError) as info:
        Raw("K", raw).required_checked()
    assert info.value.value == lossy
    assert Raw("K", raw).required_unchecked().value == lossy
    assert Raw("K", raw).with_default_unchecked(DEFAULT).value == lossy
    assert Raw("K", raw).with_default_unchecked_sub_invalid(DEFAULT).value == DEFAULT


@given(TEXT)
def test_absent_variables_never_fail_with_default(default: str) -> None:
    assert Raw("K", None).with_default_checked(default).value == default
    assert Raw("K", None).optional_checked() is None
