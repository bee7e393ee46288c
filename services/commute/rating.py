"""Commute rating: a pure function of distance and duration, no routing involved."""

from __future__ import annotations

import math

ACCEPTABLE_DISTANCE_M = 50000
ACCEPTABLE_DURATION_S = 3600
MAX_PENALTY = 5


def average_speed_kmh(distance_m: float, duration_s: float) -> float | None:
    if duration_s <= 0:
        return None
    return (distance_m / 1000.0) / (duration_s / 3600.0)


def rate_commute(distance_m: float, duration_s: float) -> int:
    score = 10.0
    if distance_m > ACCEPTABLE_DISTANCE_M:
        score -= min(MAX_PENALTY, (distance_m - ACCEPTABLE_DISTANCE_M) / 10000)
    if duration_s > ACCEPTABLE_DURATION_S:
        score -= min(MAX_PENALTY, (duration_s - ACCEPTABLE_DURATION_S) / 600)
    speed = average_speed_kmh(distance_m, duration_s)
    if speed is not None:
        if speed < 20:
            score -= 2
        elif speed < 30:
            score -= 1
    # half-up rounding, then clamp
    return max(1, min(10, math.floor(score + 0.5)))


def recommend(distance_m: float, duration_s: float, rating: int) -> str:
    km = distance_m / 1000.0
    minutes = duration_s / 60.0
    trip = f"{km:.1f}km in {minutes:.0f} minutes"
    if rating >= 8:
        return f"Excellent commute! {trip} is very reasonable."
    if rating >= 6:
        return f"Good commute. {trip} is manageable for most people."
    if rating >= 4:
        return f"Moderate commute. {trip} might be tiring daily."
    return f"Challenging commute. {trip} is quite long for daily travel."
