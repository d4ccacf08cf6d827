"""Canned itinerary generator.

Plans are assembled from fixed per-interest templates; nothing here calls a
model. Feasibility scores draw from the supplied ``random.Random`` so callers
can pin them.
"""

from __future__ import annotations

import random
import re
from typing import Optional

from tripbook.domain.enums import Interest
from tripbook.domain.models import PlanDay, TripPlan, TripSelection

DEFAULT_PLAN_DAYS = 5
DEFAULT_BUDGET = 1000

_TEMPLATES: dict[Interest, dict[str, list[str]]] = {
    Interest.ADVENTURE: {
        "activities": ["Mountain hiking", "River rafting", "Rock climbing", "Wildlife spotting"],
        "types": ["Trekking expedition", "Adventure sports", "Nature exploration"],
    },
    Interest.PILGRIMAGE: {
        "activities": ["Sacred site visits", "Meditation sessions", "Prayer ceremonies", "Spiritual guidance"],
        "types": ["Spiritual journey", "Sacred pilgrimage", "Religious exploration"],
    },
    Interest.RELAXATION: {
        "activities": ["Spa treatments", "Beach lounging", "Yoga sessions", "Wellness activities"],
        "types": ["Wellness retreat", "Beach resort", "Spa vacation"],
    },
    Interest.BUSINESS: {
        "activities": ["Conference attendance", "Networking events", "Business meetings", "Professional tours"],
        "types": ["Business conference", "Corporate retreat", "Professional development"],
    },
}

_PREMIUM_HIGHLIGHTS = ["Premium accommodation", "Exclusive access", "Personal guide", "Luxury amenities"]
_LEADING_INT = re.compile(r"\d+")


def _leading_int(text: str) -> Optional[int]:
    match = _LEADING_INT.search(str(text or "").replace(",", ""))
    return int(match.group()) if match else None


def plan_day_count(trip: TripSelection) -> int:
    return _leading_int(trip.duration) or DEFAULT_PLAN_DAYS


def budget_amount(trip: TripSelection) -> int:
    return _leading_int(trip.budget) or DEFAULT_BUDGET


def _days(count: int, first: tuple[str, str], body, last: str, rest: str) -> list[PlanDay]:
    rows: list[PlanDay] = []
    for i in range(count):
        a, b = (first if i == 0 else body(i))
        rows.append(PlanDay(day=i + 1, activities=[a, b, last if i == count - 1 else rest]))
    return rows


def generate_plans(trip: TripSelection, rng: Optional[random.Random] = None) -> list[TripPlan]:
    rng = rng or random.Random()
    template = _TEMPLATES.get(trip.interest or Interest.ADVENTURE, _TEMPLATES[Interest.ADVENTURE])
    acts = template["activities"]
    types = template["types"]
    n_acts = len(acts)
    count = plan_day_count(trip)
    budget = budget_amount(trip)
    destination = trip.destination

    standard = TripPlan(
        id=1,
        title=f"{types[0]} - {destination}",
        duration=trip.duration,
        feasibility_score=rng.randint(85, 99),
        highlights=list(acts),
        itinerary=_days(
            count,
            ("Arrival and check-in", "Local orientation"),
            lambda i: (f"Day {i + 1} {acts[i % n_acts]}", f"{acts[(i + 1) % n_acts]} session"),
            "Departure preparations",
            "Evening leisure time",
        ),
        estimated_cost=f"${int(budget * 0.8)} - ${budget}",
    )
    alternative = TripPlan(
        id=2,
        title=f"{types[1]} - {destination}",
        duration=trip.duration,
        feasibility_score=rng.randint(80, 89),
        highlights=list(reversed(acts)),
        itinerary=_days(
            count,
            ("Arrival and setup", "Welcome briefing"),
            lambda i: (f"{acts[i % n_acts]} experience", f"{acts[(i + 2) % n_acts]} activity"),
            "Departure",
            "Free time exploration",
        ),
        estimated_cost=f"${int(budget * 1.1)} - ${int(budget * 1.3)}",
    )
    premium = TripPlan(
        id=3,
        title=f"Premium {types[2]} - {destination}",
        duration=trip.duration,
        feasibility_score=rng.randint(90, 97),
        highlights=list(_PREMIUM_HIGHLIGHTS),
        itinerary=_days(
            count,
            ("VIP arrival", "Luxury check-in"),
            lambda i: (f"Private {acts[i % n_acts]}", "Exclusive experience"),
            "Premium departure",
            "Fine dining",
        ),
        estimated_cost=f"${int(budget * 1.5)} - ${budget * 2}",
    )
    return [standard, alternative, premium]


__all__ = ["budget_amount", "generate_plans", "plan_day_count"]
