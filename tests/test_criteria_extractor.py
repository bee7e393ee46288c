import asyncio

from conftest import FILTER_PROMPT, RESIDUAL_PROMPT, run

from services.common.enums import HousingType
from services.criteria.extractor import CriteriaExtractor
from services.criteria.models import FilterSpec


def test_extract_filters_parses_prose_wrapped_json(scripted):
    client = scripted(
        [(FILTER_PROMPT, 'Here: {"maxPrice": 2000, "privateBath": true, "location": "Oakland", "smoking": null}')]
    )
    spec = run(CriteriaExtractor(client).extract_filters("apartments under $2000 with private bathroom"))
    assert spec.max_price == 2000
    assert spec.private_bath is True
    assert spec.smoking is None
    assert spec.applied() == {"maxPrice": 2000.0, "privateBath": True}
    assert "apartments under $2000" in client.prompts[0]


def test_invalid_fields_are_dropped_individually(scripted):
    client = scripted([(FILTER_PROMPT, '{"housingType": "studio", "maxPrice": "cheap", "minBedrooms": 2}')])
    spec = run(CriteriaExtractor(client).extract_filters("a studio"))
    assert spec.housing_type is None
    assert spec.max_price is None
    assert spec.min_bedrooms == 2


def test_extraction_failures_yield_empty_spec(scripted):
    for reply in ("I cannot help with that", RuntimeError("boom"), '{"maxPrice": }'):
        client = scripted([(FILTER_PROMPT, reply)])
        extractor = CriteriaExtractor(client)
        spec = run(extractor.extract_filters("anything"))
        assert spec.is_empty()
        assert extractor.observability.events("filter_extraction")[-1].details["status"] != "ok"


def test_extraction_timeout_yields_empty_spec(scripted):
    client = scripted([(FILTER_PROMPT, '{"maxPrice": 1000}')], delay_s=0.2)
    spec = run(CriteriaExtractor(client, timeout_s=0.01).extract_filters("cheap"))
    assert spec == FilterSpec()


def test_residual_requirement_check(scripted):
    assert run(CriteriaExtractor(scripted([(RESIDUAL_PROMPT, "Yes.")])).has_residual_requirement("q")) is True
    assert run(CriteriaExtractor(scripted([(RESIDUAL_PROMPT, " no ")])).has_residual_requirement("q")) is False
    failing = scripted([(RESIDUAL_PROMPT, asyncio.TimeoutError())])
    assert run(CriteriaExtractor(failing).has_residual_requirement("q")) is False


def test_filter_spec_accepts_field_names_and_normalizes_type():
    spec = FilterSpec.from_payload({"max_price": 1800, "housingType": "Condo", "private_room": "maybe"})
    assert spec.max_price == 1800
    assert spec.housing_type == HousingType.condo
    assert spec.private_room is None
    assert FilterSpec.from_payload({"housingType": "unknown"}).housing_type is None


def test_oversized_or_non_finite_numbers_yield_empty_fields(scripted):
    client = scripted([(FILTER_PROMPT, '{"maxPrice": %s}' % ("9" * 5000))])
    extractor = CriteriaExtractor(client)
    assert run(extractor.extract_filters("cheap")).is_empty()

    client = scripted([(FILTER_PROMPT, '{"maxPrice": NaN, "minBedrooms": Infinity, "minPrice": 500}')])
    spec = run(CriteriaExtractor(client).extract_filters("cheap"))
    assert spec.applied() == {"minPrice": 500.0}
