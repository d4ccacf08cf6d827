"""Canned itinerary generator."""

from __future__ import annotations

import random

from tripbook.domain.enums import Interest
from tripbook.domain.models import TripSelection
from tripbook.domain.planning import budget_amount, generate_plans, plan_day_count


def _trip(**overrides) -> TripSelection:
    base = {
        "destination": "Santorini, Greece",
        "start_date": "2026-06-10",
        "end_date": "2026-06-13",
        "travelers": 2,
        "budget": "$2,000",
        "interest": "pilgrimage",
    }
    base.update(overrides)
    return TripSelection.model_validate(base)


def test_three_plans_in_fixed_order():
    plans = generate_plans(_trip(), random.Random(1))
    assert [p.id for p in plans] == [1, 2, 3]
    assert plans[0].title.endswith("Santorini, Greece")
    assert plans[2].title.startswith("Premium ")
    assert all(p.duration == "3 days" for p in plans)


def test_itinerary_length_follows_duration():
    plans = generate_plans(_trip(), random.Random(1))
    for plan in plans:
        assert [d.day for d in plan.itinerary] == [1, 2, 3]
        assert all(len(d.activities) == 3 for d in plan.itinerary)
    assert plans[0].itinerary[0].activities[:2] == ["Arrival and check-in", "Local orientation"]
    assert plans[0].itinerary[-1].activities[-1] == "Departure preparations"


def test_feasibility_scores_stay_in_band():
    rng = random.Random(42)
    for _ in range(50):
        standard, alternative, premium = generate_plans(_trip(), rng)
        assert 85 <= standard.feasibility_score <= 99
        assert 80 <= alternative.feasibility_score <= 89
        assert 90 <= premium.feasibility_score <= 97


def test_cost_bands_scale_with_budget():
    standard, alternative, premium = generate_plans(_trip(budget="1000"), random.Random(3))
    assert standard.estimated_cost == "$800 - $1000"
    assert alternative.estimated_cost == "$1100 - $1300"
    assert premium.estimated_cost == "$1500 - $2000"


def test_defaults_when_budget_or_dates_unparseable():
    trip = TripSelection(destination="Iceland", budget="flexible", interest=Interest.BUSINESS)
    assert plan_day_count(trip) == 5
    assert budget_amount(trip) == 1000
    plans = generate_plans(trip, random.Random(0))
    assert len(plans[1].itinerary) == 5


def test_budget_amount_ignores_thousands_separator():
    assert budget_amount(_trip(budget="$2,500 USD")) == 2500


def test_same_seed_same_plans():
    assert generate_plans(_trip(), random.Random(9)) == generate_plans(_trip(), random.Random(9))
