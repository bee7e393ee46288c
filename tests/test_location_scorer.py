from conftest import LOCATION_PROMPT, OAKLAND, make_listing, run

from services.commute.location import FALLBACK_SCORE, ReasoningLocationScorer


def test_scores_parsed_and_clamped(scripted):
    client = scripted(
        [(LOCATION_PROMPT, '{"walkScore": 92, "bikeScore": 120, "transitScore": 70.4, "safetySentiment": "Lively"}')]
    )
    score = run(ReasoningLocationScorer(client).score(make_listing("a", coordinates=OAKLAND)))
    assert (score.walk_score, score.bike_score, score.transit_score) == (92, 100, 70)
    assert score.overall == 87
    assert score.safety_sentiment == "Lively"
    assert score.is_fallback is False
    assert "37.8044" in client.prompts[0]


def test_failures_fall_back_to_labelled_default(scripted):
    huge = "1" + "0" * 400
    invalid = (
        "not json",
        '{"walkScore": 50}',
        RuntimeError("down"),
        '{"walkScore": %s, "bikeScore": 50, "transitScore": 50}' % huge,
        '{"walkScore": Infinity, "bikeScore": 50, "transitScore": 50}',
    )
    for reply in invalid:
        scorer = ReasoningLocationScorer(scripted([(LOCATION_PROMPT, reply)]))
        score = run(scorer.score(make_listing("a", coordinates=OAKLAND)))
        assert score == FALLBACK_SCORE
        assert (score.walk_score, score.bike_score, score.transit_score) == (65, 45, 55)
        assert scorer.observability.events("location_score")[-1].details["status"] == "fallback"


def test_score_many_skips_listings_without_coordinates_and_bounds_batches(scripted):
    client = scripted(
        [(LOCATION_PROMPT, '{"walkScore": 80, "bikeScore": 60, "transitScore": 40, "safetySentiment": "ok"}')],
        delay_s=0.02,
    )
    listings = [make_listing(f"c-{index}", coordinates=OAKLAND) for index in range(12)]
    listings.append(make_listing("nowhere"))
    results = run(ReasoningLocationScorer(client).score_many(listings))
    assert len(results) == 12
    assert "nowhere" not in results
    assert client.max_in_flight == 5
    assert results["c-0"].overall == 60
