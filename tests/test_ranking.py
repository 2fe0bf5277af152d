import random

from cafe_finder.models.dto import CandidateRecord, GeoPoint, RadiusQuery, ViewportQuery
from cafe_finder.services.ranking import rank_candidates
from cafe_finder.utils.haversine import haversine

BERLIN = GeoPoint(lat=52.5200, lng=13.4050)


def candidate(cafe_id: str, lat, lng) -> CandidateRecord:
    return CandidateRecord(id=cafe_id, name=cafe_id, latitude=lat, longitude=lng)


def test_radius_cutoff_is_exact_at_berlin(north_of_fn) -> None:
    request = RadiusQuery(center=BERLIN, radius_meters=2000, limit=50)
    inside = candidate("inside", north_of_fn(BERLIN.lat, 1999), BERLIN.lng)
    outside = candidate("outside", north_of_fn(BERLIN.lat, 2001), BERLIN.lng)

    results = rank_candidates(request, [outside, inside])

    assert [r.id for r in results] == ["inside"]
    assert round(results[0].distance_meters) == 1999


def test_membership_matches_true_distance() -> None:
    rng = random.Random(3)
    request = RadiusQuery(center=BERLIN, radius_meters=3000, limit=1000)
    candidates = [
        candidate(f"c{i}", BERLIN.lat + rng.uniform(-0.05, 0.05), BERLIN.lng + rng.uniform(-0.08, 0.08))
        for i in range(400)
    ]
    results = {r.id for r in rank_candidates(request, candidates)}
    expected = {
        c.id for c in candidates if haversine(BERLIN.lat, BERLIN.lng, c.latitude, c.longitude) <= 3000
    }
    assert results == expected


def test_results_are_sorted_and_truncated(north_of_fn) -> None:
    request = RadiusQuery(center=BERLIN, radius_meters=5000, limit=3)
    candidates = [candidate(f"d{m}", north_of_fn(BERLIN.lat, m), BERLIN.lng) for m in (900, 100, 4000, 300, 50)]

    results = rank_candidates(request, candidates)

    assert [r.id for r in results] == ["d50", "d100", "d300"]
    distances = [r.distance_meters for r in results]
    assert distances == sorted(distances)


def test_ties_keep_store_order() -> None:
    request = RadiusQuery(center=BERLIN, radius_meters=100, limit=10)
    same_spot = [candidate(name, BERLIN.lat, BERLIN.lng) for name in ("b", "a", "c")]
    assert [r.id for r in rank_candidates(request, same_spot)] == ["b", "a", "c"]


def test_candidates_without_coordinates_are_skipped() -> None:
    request = RadiusQuery(center=BERLIN, radius_meters=1000, limit=10)
    results = rank_candidates(
        request,
        [candidate("no-lat", None, BERLIN.lng), candidate("no-lng", BERLIN.lat, None), candidate("ok", BERLIN.lat, BERLIN.lng)],
    )
    assert [r.id for r in results] == ["ok"]


def test_viewport_mode_keeps_everything_and_sorts_from_midpoint() -> None:
    request = ViewportQuery(
        north_east=GeoPoint(lat=53.0, lng=14.0), south_west=GeoPoint(lat=52.0, lng=13.0), limit=10
    )
    corner = candidate("corner", 52.01, 13.01)
    middle = candidate("middle", 52.5, 13.5)

    results = rank_candidates(request, [corner, middle])

    assert [r.id for r in results] == ["middle", "corner"]
    # ~60 km from the midpoint, far beyond any radius ceiling, still retained
    assert results[1].distance_meters > 50_000


def test_empty_input_gives_empty_output() -> None:
    assert rank_candidates(RadiusQuery(center=BERLIN, radius_meters=2000, limit=5), []) == []
