from datetime import date, timedelta
from decimal import Decimal

import pytest

from registrations.pricing import (
    AGE_RANGES,
    PricingMode,
    SessionRates,
    age_range_for,
    calculate_age,
    calculate_child_price,
    calculate_flat_price,
    map_days_to_dates,
    resize_sessions,
    sync_child,
    sync_registration,
)

TODAY = date(2026, 10, 17)
RATES = SessionRates(half=Decimal("2000"), full=Decimal("3500"))


def years_ago(years, today=TODAY):
    return today.replace(year=today.year - years)


class TestAgeCalculator:
    def test_birthday_not_yet_reached_this_year(self):
        assert calculate_age(date(2018, 10, 18), TODAY) == 7
        assert calculate_age(date(2018, 10, 17), TODAY) == 8

    @pytest.mark.parametrize("age, expected", [
        (0, "3-below"), (3, "3-below"), (4, "4-6"), (6, "4-6"), (7, "7-10"),
        (10, "7-10"), (11, "11-13"), (13, "11-13"), (14, "14-17"), (17, "14-17"), (18, "18+"),
    ])
    def test_bracket_upper_bounds_are_inclusive(self, age, expected):
        assert age_range_for(years_ago(age), TODAY) == expected

    def test_adults_fall_in_the_open_ended_bracket(self):
        assert age_range_for(years_ago(25), TODAY) == "18+"
        assert age_range_for(years_ago(70), TODAY) == "18+"

    def test_future_birth_date_maps_to_youngest_bracket(self):
        assert age_range_for(TODAY + timedelta(days=30), TODAY) == "3-below"

    def test_missing_birth_date_withholds_computation(self):
        assert age_range_for(None, TODAY) is None
        assert age_range_for("", TODAY) is None

    def test_accepts_iso_strings(self):
        assert age_range_for(years_ago(8).isoformat(), TODAY) == "7-10"

    def test_bracket_is_monotonic_as_birth_date_moves_earlier(self):
        order = {label: index for index, label in enumerate(AGE_RANGES)}
        previous = -1
        dob = TODAY
        for _ in range(0, 365 * 20, 30):
            current = order[age_range_for(dob, TODAY)]
            assert current >= previous
            previous = current
            dob -= timedelta(days=30)


class TestPriceCalculator:
    def test_sum_of_session_rates(self):
        assert calculate_child_price(["half", "full", "full"], RATES) == Decimal("9000")

    def test_empty_selection_costs_nothing(self):
        assert calculate_child_price([], RATES) == Decimal("0")

    def test_changing_one_day_only_moves_that_days_contribution(self):
        before = calculate_child_price(["full", "full", "full"], RATES)
        after = calculate_child_price(["full", "half", "full"], RATES)
        assert before - after == RATES.full - RATES.half

    def test_unknown_session_is_rejected(self):
        with pytest.raises(ValueError):
            calculate_child_price(["evening"], RATES)

    def test_flat_rate(self):
        assert calculate_flat_price(4, Decimal("2500")) == Decimal("10000")
        assert calculate_flat_price(None, Decimal("2500")) == Decimal("0")


class TestResizeSessions:
    def test_growing_appends_full_days(self):
        assert resize_sessions(["half"], 3) == ["half", "full", "full"]

    def test_shrinking_keeps_the_prefix(self):
        assert resize_sessions(["half", "full", "half", "half"], 2) == ["half", "full"]

    def test_same_size_is_unchanged(self):
        assert resize_sessions(["half", "full"], 2) == ["half", "full"]

    def test_custom_default(self):
        assert resize_sessions([], 2, default="half") == ["half", "half"]


class TestSyncChild:
    def test_eight_year_old_three_full_days(self):
        child = {"child_name": "Wanjiru", "date_of_birth": years_ago(8), "number_of_days": 3,
                 "selected_sessions": ["full", "full", "full"]}

        synced = sync_child(child, RATES, today=TODAY)

        assert synced["age_range"] == "7-10"
        assert synced["price"] == Decimal("10500")

    def test_price_reflects_the_resized_list(self):
        synced = sync_child({"number_of_days": 3, "selected_sessions": ["half"]}, RATES, today=TODAY)

        assert synced["selected_sessions"] == ["half", "full", "full"]
        assert synced["price"] == Decimal("9000")

    def test_day_count_defaults_to_session_count(self):
        synced = sync_child({"selected_sessions": ["half", "half"]}, RATES, today=TODAY)

        assert synced["number_of_days"] == 2
        assert synced["price"] == Decimal("4000")

    def test_explicit_age_range_kept_without_birth_date(self):
        synced = sync_child({"age_range": "11-13", "number_of_days": 1}, RATES, today=TODAY)
        assert synced["age_range"] == "11-13"

    def test_birth_date_overrides_explicit_age_range(self):
        synced = sync_child({"age_range": "11-13", "date_of_birth": years_ago(5), "number_of_days": 1},
                            RATES, today=TODAY)
        assert synced["age_range"] == "4-6"

    def test_does_not_mutate_input(self):
        child = {"number_of_days": 2, "selected_sessions": ["half"]}
        sync_child(child, RATES, today=TODAY)
        assert child == {"number_of_days": 2, "selected_sessions": ["half"]}

    def test_dates_follow_the_program_start(self):
        synced = sync_child({"number_of_days": 3}, RATES, start_date=date(2026, 12, 1))
        assert synced["selected_dates"] == ["2026-12-01", "2026-12-02", "2026-12-03"]

    def test_flat_pricing_uses_day_count(self):
        synced = sync_child({"number_of_days": 4, "selected_sessions": ["half"]},
                            SessionRates(half=Decimal("0"), full=Decimal("1800")),
                            pricing_mode=PricingMode.FLAT)
        assert synced["price"] == Decimal("7200")


def test_two_children_total():
    children = [
        {"child_name": "Amani", "number_of_days": 2, "selected_sessions": ["half", "full"]},
        {"child_name": "Zawadi", "number_of_days": 1, "selected_sessions": ["full"]},
    ]

    synced, total = sync_registration(children, RATES, today=TODAY)

    assert [child["price"] for child in synced] == [Decimal("5500"), Decimal("3500")]
    assert total == Decimal("9000")


def test_map_days_without_start_date():
    assert map_days_to_dates(None, 3) == []
