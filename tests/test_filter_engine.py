from conftest import make_listing, priced_listings

from services.common.enums import HousingType
from services.criteria.models import FilterSpec
from services.filtering.service import FilterEngine


def test_zero_priced_listings_always_excluded_and_max_price_applied():
    prices = [0, 0, 0, 900, 1200, 1500, 1800, 1999, 2000, 2001, 2500, 3000]
    listings = priced_listings(prices)
    kept = FilterEngine().filter(listings, FilterSpec(max_price=2000))
    assert len(kept) == 6
    assert [listing.price for listing in kept] == [900, 1200, 1500, 1800, 1999, 2000]


def test_empty_spec_only_drops_unpriced_listings():
    listings = priced_listings([0, 100, 5000])
    kept = FilterEngine().filter(listings, FilterSpec())
    assert [listing.price for listing in kept] == [100, 5000]


def test_filter_is_order_preserving_and_does_not_mutate_input():
    listings = priced_listings([1800, 1200, 1500])
    snapshot = list(listings)
    kept = FilterEngine().filter(listings, FilterSpec(min_price=1000))
    assert [listing.listing_id for listing in kept] == ["l-0", "l-1", "l-2"]
    assert listings == snapshot


def test_unknown_counts_and_type_pass_their_filters():
    unknown_beds = make_listing("beds", bedrooms=0, bathrooms=0)
    unknown_type = make_listing("type", housing_type=HousingType.unknown)
    house = make_listing("house", housing_type=HousingType.house)
    spec = FilterSpec(min_bedrooms=2, min_bathrooms=2, housing_type=HousingType.apartment)
    kept = FilterEngine().filter([unknown_beds, unknown_type, house], spec)
    assert [listing.listing_id for listing in kept] == ["beds"]

    spec = FilterSpec(housing_type=HousingType.apartment)
    kept = FilterEngine().filter([unknown_type, house], spec)
    assert [listing.listing_id for listing in kept] == ["type"]


def test_bedroom_bounds_apply_to_known_counts():
    listings = [make_listing(f"b{beds}", bedrooms=beds) for beds in (1, 2, 3, 4)]
    kept = FilterEngine().filter(listings, FilterSpec(min_bedrooms=2, max_bedrooms=3))
    assert [listing.bedrooms for listing in kept] == [2, 3]


def test_boolean_filters_use_strict_equality():
    shared = make_listing("shared", private_bath=False, smoking=True)
    private = make_listing("private", private_bath=True, smoking=False)
    engine = FilterEngine()
    assert [l.listing_id for l in engine.filter([shared, private], FilterSpec(private_bath=True))] == ["private"]
    assert [l.listing_id for l in engine.filter([shared, private], FilterSpec(private_bath=False))] == ["shared"]
    assert [l.listing_id for l in engine.filter([shared, private], FilterSpec(smoking=False))] == ["private"]


def test_report_counts_first_failing_rule():
    listings = [
        make_listing("free", price=0),
        make_listing("pricey", price=5000),
        make_listing("shared", private_bath=False),
        make_listing("ok"),
    ]
    engine = FilterEngine()
    report = engine.filter_with_report(listings, FilterSpec(max_price=2000, private_bath=True))
    assert [listing.listing_id for listing in report.kept] == ["ok"]
    assert report.passed == 1
    assert report.failed == 3
    assert report.rejections == {"zero_price": 1, "max_price": 1, "private_bath": 1}
    event = engine.observability.events("filter")[-1]
    assert event.details["applied"] == {"maxPrice": 2000.0, "privateBath": True}


def test_unknown_counts_pass_upper_bounds():
    unknown = make_listing("unknown", bedrooms=0, bathrooms=0)
    two = make_listing("two", bedrooms=2, bathrooms=2)
    single = make_listing("one", bedrooms=1, bathrooms=1)
    kept = FilterEngine().filter([unknown, two, single], FilterSpec(max_bedrooms=1, max_bathrooms=1))
    assert [listing.listing_id for listing in kept] == ["unknown", "one"]
