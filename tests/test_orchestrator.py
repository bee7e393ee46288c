import json

from conftest import ANALYSIS_PROMPT, FILTER_PROMPT, RESIDUAL_PROMPT, make_listing, run

from services.common.enums import Capability, CommuteSource, ExecutionOrder, Intent, TravelMode
from services.commute.service import CommuteService
from services.criteria.extractor import CriteriaExtractor
from services.listings.repository import ListingRepository
from services.matching.semantic import SemanticScorer
from services.matching.service import HousingSearchService
from services.orchestrator.models import CommuteCriteria, HousingCriteria, QueryAnalysis
from services.orchestrator.planner import QueryPlanner, build_plan, validate_plan
from services.orchestrator.service import QueryOrchestrator

ALL_CAPABILITIES = set(Capability)


def _analysis_reply(intent, *, work_location=None, confidence=0.95, travel_mode=None):
    return "Analysis follows.\n" + json.dumps(
        {
            "intent": intent,
            "housingCriteria": {"query": "rooms with private bath", "filters": {"privateBath": True}},
            "commuteCriteria": {"workLocation": work_location, "travelMode": travel_mode},
            "confidence": confidence,
            "explanation": "test",
        }
    )


def _analysis(intent, *, confidence=0.9, destination=None):
    return QueryAnalysis(
        intent=intent,
        confidence=confidence,
        housing_criteria=HousingCriteria(query="q"),
        commute_criteria=CommuteCriteria(work_location=destination),
    )


def test_market_summary_plan_has_single_summary_step(scripted):
    client = scripted([(ANALYSIS_PROMPT, _analysis_reply("market_summary"))])
    result = run(QueryPlanner(client).coordinate("Show me market summary", ALL_CAPABILITIES))
    assert result.analysis.intent == Intent.market_summary
    assert result.plan.capabilities == [Capability.housing_summary]
    assert result.plan.steps[0].action == "get_summary"
    assert result.plan.execution_order == ExecutionOrder.sequential
    assert result.warnings == []


def test_analysis_fallback_on_unparseable_or_unknown_intent(scripted):
    for reply in ("no idea", _analysis_reply("find_me_a_castle"), RuntimeError("down")):
        planner = QueryPlanner(scripted([(ANALYSIS_PROMPT, reply)]))
        analysis = run(planner.analyze("cheap rooms"))
        assert analysis.intent == Intent.housing_search
        assert analysis.confidence == 0.3
        assert analysis.explanation == "Fallback analysis due to parsing error"
        assert analysis.housing_criteria.query == "cheap rooms"
        assert planner.observability.events("query_analysis")[-1].details["fallback"] is True


def test_analysis_ignores_out_of_range_numbers(scripted):
    reply = (
        '{"intent": "housing_search", "confidence": 1%s,' % ("0" * 400)
        + ' "commuteCriteria": {"workLocation": "Downtown", "maxDistance": Infinity, "maxTime": NaN}}'
    )
    analysis = run(QueryPlanner(scripted([(ANALYSIS_PROMPT, reply)])).analyze("rooms near downtown"))
    assert analysis.intent == Intent.housing_search
    assert analysis.confidence == 0.0
    assert analysis.commute_criteria.max_distance is None
    assert analysis.commute_criteria.max_time is None
    assert analysis.destination == "Downtown"


def test_analysis_parses_criteria(scripted):
    reply = _analysis_reply("combined_search", work_location="230 Bay Pl", travel_mode="bicycling")
    analysis = run(QueryPlanner(scripted([(ANALYSIS_PROMPT, reply)])).analyze("rooms near 230 Bay Pl"))
    assert analysis.destination == "230 Bay Pl"
    assert analysis.commute_criteria.travel_mode == TravelMode.cycling
    assert analysis.housing_criteria.filters.private_bath is True
    assert analysis.housing_criteria.query == "rooms with private bath"


def test_build_plan_is_total_over_intents():
    plans = {intent: build_plan(_analysis(intent, destination="Stanford")) for intent in Intent}
    assert plans[Intent.housing_search].capabilities == [Capability.housing_search]
    assert plans[Intent.commute_analysis].capabilities == [Capability.commute_scorer]
    assert plans[Intent.market_summary].capabilities == [Capability.housing_summary]
    combined = plans[Intent.combined_search]
    assert combined.capabilities == [Capability.housing_search, Capability.commute_scorer]
    assert combined.steps[1].payload == {"destination": "Stanford", "travel_mode": "driving"}
    assert combined.reasoning == "Combined search - housing listings with commute analysis"
    assert all(plan.execution_order == ExecutionOrder.sequential for plan in plans.values())


def test_validate_plan_warnings():
    analysis = _analysis(Intent.combined_search, confidence=0.5)
    warnings = validate_plan(analysis, build_plan(analysis), {Capability.housing_search})
    assert warnings == [
        "Capabilities not available: commute_scorer",
        "Low confidence in query analysis (0.5). Consider rephrasing.",
        "Combined search requested but no work location detected.",
    ]
    commute_only = _analysis(Intent.commute_analysis)
    assert validate_plan(commute_only, build_plan(commute_only), ALL_CAPABILITIES) == [
        "Commute analysis requested but no work location detected."
    ]


def _orchestrator(client, listings, *, commute=True):
    housing = HousingSearchService(
        repository=ListingRepository(listings),
        extractor=CriteriaExtractor(client),
        semantic_scorer=SemanticScorer(client),
    )
    return QueryOrchestrator(
        planner=QueryPlanner(client),
        housing_search=housing,
        commute_service=CommuteService() if commute else None,
    )


def test_execute_combined_search_blends_commute(scripted):
    client = scripted(
        [
            (ANALYSIS_PROMPT, _analysis_reply("combined_search", work_location="Downtown Oakland")),
            (FILTER_PROMPT, "{}"),
            (RESIDUAL_PROMPT, "no"),
        ]
    )
    listings = [make_listing("a"), make_listing("b", price=0)]
    result = run(_orchestrator(client, listings).execute("rooms near downtown oakland"))
    assert result.warnings == []
    assert [item.match.listing.listing_id for item in result.results] == ["a"]
    item = result.results[0]
    assert item.commute.source == CommuteSource.synthetic_estimate
    assert item.combined_score == round(100 * 0.6 + item.commute.rating * 10 * 0.4)
    assert result.search.total_listings == 2


def test_execute_destination_override_and_missing_capability(scripted):
    client = scripted(
        [(ANALYSIS_PROMPT, _analysis_reply("combined_search")), (FILTER_PROMPT, "{}"), (RESIDUAL_PROMPT, "no")]
    )
    result = run(_orchestrator(client, [make_listing("a")]).execute("rooms", destination="Stanford"))
    assert result.analysis.destination == "Stanford"
    assert result.warnings == []
    assert result.results[0].commute is not None

    result = run(_orchestrator(client, [make_listing("a")], commute=False).execute("rooms", destination="Stanford"))
    assert result.warnings == ["Capabilities not available: commute_scorer"]
    assert result.results[0].commute is None


def test_execute_market_summary_and_single_commute(scripted):
    client = scripted([(ANALYSIS_PROMPT, _analysis_reply("market_summary"))])
    result = run(_orchestrator(client, [make_listing("a", price=1200), make_listing("b", price=1800)]).execute("summary"))
    assert result.summary.price_average == 1500
    assert result.results == []

    client = scripted([(ANALYSIS_PROMPT, _analysis_reply("commute_analysis", work_location="SFO"))])
    orchestrator = _orchestrator(client, [])
    result = run(orchestrator.execute("how far is SFO", origin="Oakland"))
    assert result.commute.source == CommuteSource.synthetic_estimate
    assert result.plan.steps[0].payload["destination"] == "SFO"

    result = run(orchestrator.execute("how far is SFO"))
    assert result.commute is None
    assert result.warnings == ["Commute analysis needs an origin address; none supplied."]
