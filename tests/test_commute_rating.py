from services.commute.rating import rate_commute, recommend


def test_reference_ratings():
    assert rate_commute(10000, 1200) == 10
    assert rate_commute(5000, 1800) == 8
    assert rate_commute(20000, 2700) == 9
    assert rate_commute(100000, 7200) == 1
    assert rate_commute(0, 0) == 10


def test_half_points_round_up():
    # 85 km in an hour: 3.5 distance penalty, no time or speed penalty
    assert rate_commute(85000, 3600) == 7


def test_non_increasing_in_duration():
    for distance in (2000, 15000, 60000, 120000):
        ratings = [rate_commute(distance, duration) for duration in range(300, 12000, 300)]
        assert ratings == sorted(ratings, reverse=True)


def test_non_increasing_in_distance_at_commuting_speeds():
    ratings = [rate_commute(distance, 1800) for distance in range(15000, 200000, 5000)]
    assert ratings == sorted(ratings, reverse=True)


def test_rating_always_integer_between_one_and_ten():
    for distance in range(0, 250000, 12500):
        for duration in range(0, 15000, 900):
            rating = rate_commute(distance, duration)
            assert isinstance(rating, int)
            assert 1 <= rating <= 10


def test_recommendation_bands():
    assert recommend(12000, 1200, 9) == "Excellent commute! 12.0km in 20 minutes is very reasonable."
    assert recommend(12000, 1200, 6).startswith("Good commute. 12.0km in 20 minutes")
    assert recommend(12000, 1200, 4).endswith("might be tiring daily.")
    assert recommend(90000, 7200, 2) == "Challenging commute. 90.0km in 120 minutes is quite long for daily travel."
