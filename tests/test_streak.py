# tests/test_streak.py
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from flashlearn.core.streak import AmbiguousStreakInput, calendar_day, next_progress
from flashlearn.schemas import ProgressState

UTC = timezone.utc


def at(year, month, day, hour=12):
    return datetime(year, month, day, hour, tzinfo=UTC)


def progress(**fields):
    return ProgressState(user_id=1, **fields)


def test_first_session_starts_streak():
    result = next_progress(progress(), at(2024, 1, 10), tz=UTC)
    assert result.current_streak == 1
    assert result.longest_streak == 1
    assert result.last_study_date == at(2024, 1, 10)


def test_streak_sequence_next_day_same_day_gap():
    prev = progress(current_streak=3, longest_streak=3, last_study_date=at(2024, 1, 10))

    day_after = next_progress(prev, at(2024, 1, 11), tz=UTC)
    assert day_after.current_streak == 4
    assert day_after.longest_streak == 4

    same_day = next_progress(day_after, at(2024, 1, 11, hour=20), tz=UTC)
    assert same_day.current_streak == 4
    assert same_day.longest_streak == 4

    after_gap = next_progress(same_day, at(2024, 1, 14), tz=UTC)
    assert after_gap.current_streak == 1
    assert after_gap.longest_streak == 4


def test_longest_streak_is_kept_when_larger():
    prev = progress(current_streak=2, longest_streak=9, last_study_date=at(2024, 1, 10))
    result = next_progress(prev, at(2024, 1, 11), tz=UTC)
    assert result.current_streak == 3
    assert result.longest_streak == 9


def test_backdated_study_is_ambiguous():
    prev = progress(current_streak=2, longest_streak=2, last_study_date=at(2024, 1, 10))
    with pytest.raises(AmbiguousStreakInput) as info:
        next_progress(prev, at(2024, 1, 9), tz=UTC)
    assert info.value.last_day == date(2024, 1, 10)
    assert info.value.today == date(2024, 1, 9)


def test_earlier_time_on_same_day_is_not_backdated():
    prev = progress(current_streak=2, longest_streak=2, last_study_date=at(2024, 1, 10, hour=22))
    result = next_progress(prev, at(2024, 1, 10, hour=6), tz=UTC)
    assert result.current_streak == 2


def test_counts_and_input_untouched():
    prev = progress(total_cards=10, mastered_cards=4, current_streak=1, longest_streak=1,
                    last_study_date=at(2024, 1, 10))
    result = next_progress(prev, at(2024, 1, 11), tz=UTC)
    assert (result.total_cards, result.mastered_cards) == (10, 4)
    assert prev.current_streak == 1


def test_day_boundary_follows_timezone():
    # 23:30 UTC on the 10th is already the 11th in Tokyo
    last = datetime(2024, 1, 10, 1, 0, tzinfo=UTC)
    late = datetime(2024, 1, 10, 23, 30, tzinfo=UTC)
    prev = progress(current_streak=1, longest_streak=1, last_study_date=last)

    assert next_progress(prev, late, tz=UTC).current_streak == 1
    assert next_progress(prev, late, tz=ZoneInfo("Asia/Tokyo")).current_streak == 2


def test_naive_datetimes_are_utc():
    naive = datetime(2024, 1, 10, 23, 30)
    assert calendar_day(naive, UTC) == date(2024, 1, 10)
    assert calendar_day(naive, ZoneInfo("Asia/Tokyo")) == date(2024, 1, 11)


@pytest.mark.parametrize("gap_days, expected", [(0, 5), (1, 6), (2, 1), (30, 1)])
def test_streak_never_exceeds_longest(gap_days, expected):
    start = at(2024, 3, 1)
    prev = progress(current_streak=5, longest_streak=5, last_study_date=start)
    result = next_progress(prev, start + timedelta(days=gap_days), tz=UTC)
    assert result.current_streak == expected
    assert result.current_streak <= result.longest_streak
