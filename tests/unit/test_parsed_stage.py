"""Parsed stage tests covering chained refinement and diagnostics."""

from __future__ import annotations

from datetime import timedelta
from enum import IntEnum
from fractions import Fraction

import pytest
from hypothesis import given
from hypothesis import strategies as st

from lib_env_pipeline import ParseError, Parsed, StageConsumedError, Valid


class Level(IntEnum):
    LOW = 1
    HIGH = 2


def test_chain_refines_text_into_domain_value() -> None:
    result = (
        Valid("LEVEL", "2")
        .then_try_fromstr_into(int)
        .then_try_into(Level)
        .then_fn_into(lambda level: level.name.lower())
        .into_inner()
    )
    assert result == "high"


def test_chained_failure_reports_original_text_and_current_type() -> None:
    parsed = Valid("LEVEL", " 7 ").then_try_fromstr_into(int)
    with pytest.raises(ParseError) as info:
        parsed.then_try_into(Level)
    err = info.value
    assert err.value == " 7 "
    assert err.source == "int"
    assert err.target.endswith("Level")
    assert isinstance(err.cause, ValueError)


def test_failure_several_steps_later_still_reports_step_one_text() -> None:
    parsed = Valid("TIMEOUT", "0x10").then_try_fn_str_into(lambda text: int(text, 16), target=int)
    parsed = parsed.then_fn_into(lambda value: value * 2)

    def to_small(value: int) -> int:
        if value > 16:
            raise ValueError(f"{value} is too large")
        return value

    with pytest.raises(ParseError) as info:
        parsed.then_try_fn_into(to_small)
    assert info.value.value == "0x10"
    assert "32 is too large" in info.value.message


def test_then_into_and_then_fn_into_are_infallible_paths() -> None:
    parsed = Valid("DELAY", "3").then_try_fromstr_into(int)
    assert parsed.then_into(Fraction).into_inner() == Fraction(3)
    with pytest.raises(TypeError):
        Valid("DELAY", "3").then_try_fromstr_into(int).then_fn_into(lambda value: value + "s")


def test_then_try_fn_into_success() -> None:
    def to_delta(seconds: int) -> timedelta:
        return timedelta(seconds=seconds)

    parsed = Valid("DELAY", "5").then_try_fromstr_into(int).then_try_fn_into(to_delta)
    assert parsed == Parsed("DELAY", "5", timedelta(seconds=5))


def test_then_try_fn_into_failure_names_annotation() -> None:
    def to_delta(seconds: int) -> timedelta:
        return timedelta(seconds=seconds)

    with pytest.raises(ParseError) as info:
        Valid("DELAY", "1e12").then_try_fromstr_into(float).then_try_fn_into(lambda s: to_delta(int(s) ** 9))
    assert info.value.source == "float"

    with pytest.raises(ParseError) as info:
        Parsed("DELAY", "huge", 10**20).then_try_fn_into(to_delta)
    assert info.value.target == "timedelta"
    assert info.value.source == "int"


def test_parsed_stage_is_single_use() -> None:
    parsed = Parsed("PORT", "1", 1)
    parsed.into_inner()
    with pytest.raises(StageConsumedError):
        parsed.then_into(str)


@given(st.integers())
def test_then_into_round_trips_through_lossless_conversion(number: int) -> None:
    text = str(number)
    parsed = Valid("N", text).then_try_fromstr_into(int)
    back = parsed.then_into(str).then_try_into(int)
    assert back.into_inner() == number
    assert back.value == text
