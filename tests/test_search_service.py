"""
Tests for radius search over the vigil store.
"""

import pytest
from unittest.mock import Mock

from vigils.core.geocoder import CoordinateResolver
from vigils.core.search_service import InvalidZipcodeError, find_near
from vigils.core.store import VigilStore

from conftest import gazetteer_lookup


def _vigil(zipcode, location="Somewhere", date="2025-01-15"):
    return {"zipcode": zipcode, "location": location, "date": date, "time": "18:00"}


@pytest.fixture
def store():
    return VigilStore()


class TestFindNear:

    def test_george_floyd_square_scenario(self, store, resolver):
        record = store.create(_vigil("55408", "George Floyd Square"))

        nearby = find_near("55406", store, resolver, 10.0)
        assert [match.record.uuid for match in nearby] == [record.uuid]
        assert 0 < nearby[0].distance <= 10

        assert find_near("55901", store, resolver, 10.0) == []

    def test_smaller_radius_excludes_record(self, store, resolver):
        store.create(_vigil("55408"))
        assert len(find_near("55406", store, resolver, 10.0)) == 1
        assert find_near("55406", store, resolver, 1.0) == []

    def test_results_sorted_nearest_first(self, store, resolver):
        far = store.create(_vigil("50003", "Far"))
        near = store.create(_vigil("50001", "Near"))
        middle = store.create(_vigil("50002", "Middle"))
        store.create(_vigil("50004", "Out of range"))

        results = find_near("50000", store, resolver, 10.0)

        assert [match.record.uuid for match in results] == [near.uuid, middle.uuid, far.uuid]
        distances = [match.distance for match in results]
        assert distances == sorted(distances)
        assert len(set(distances)) == 3

    def test_ties_keep_store_order(self, store, resolver):
        first = store.create(_vigil("50001", "First"))
        second = store.create(_vigil("50001", "Second"))

        results = find_near("50000", store, resolver, 10.0)
        assert [match.record.uuid for match in results] == [first.uuid, second.uuid]

    def test_distances_are_rounded(self, store, resolver):
        store.create(_vigil("55408"))
        distance = find_near("55406", store, resolver, 10.0)[0].distance
        assert distance == round(distance, 1)

    def test_unresolvable_record_is_skipped(self, store, resolver):
        store.create(_vigil("00000", "Unknown zipcode"))
        good = store.create(_vigil("55408"))

        results = find_near("55406", store, resolver, 10.0)
        assert [match.record.uuid for match in results] == [good.uuid]

    def test_record_coordinates_come_from_cache(self, store):
        lookup = Mock(side_effect=gazetteer_lookup)
        resolver = CoordinateResolver(lookup=lookup)
        store.create(_vigil("55408"))
        store.create(_vigil("55408"))

        find_near("55406", store, resolver, 10.0)
        find_near("55406", store, resolver, 10.0)

        assert lookup.call_count == 2  # 55406 and 55408, once each

    @pytest.mark.parametrize("zipcode", ["abc", "5540", "554060", ""])
    def test_malformed_search_zipcode(self, store, resolver, zipcode):
        with pytest.raises(InvalidZipcodeError):
            find_near(zipcode, store, resolver, 10.0)

    def test_unresolvable_search_zipcode(self, store, resolver):
        store.create(_vigil("55408"))
        with pytest.raises(InvalidZipcodeError):
            find_near("99999", store, resolver, 10.0)

    def test_empty_store(self, store, resolver):
        assert find_near("55408", store, resolver, 10.0) == []
