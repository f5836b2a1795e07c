from datetime import timedelta

import pytest

from reliefhub.core.errors import DuplicateIdError, InvalidCoordinateError, NotFoundError
from reliefhub.models.base import GeoPoint
from reliefhub.models.relief_point import ReliefCategory, ReliefPointUpdate
from reliefhub.utils import geo

from tests.conftest import INDORE, NOW, make_point, offset_north


@pytest.fixture
def populated(store):
    store.add(make_point("Community Kitchen", "food", INDORE, id="food-1", description="Hot meals",
                         location_label="Rajwada"))
    store.add(make_point("Medical Camp", "medical", offset_north(INDORE, 1000), id="med-1",
                         description="First aid and FOOD packets"))
    store.add(make_point("Stadium Shelter", "shelter", offset_north(INDORE, 3000), id="shel-1",
                         location_label="Nehru Stadium"))
    store.add(make_point("Supply Depot", "supplies", offset_north(INDORE, 7000), id="sup-1",
                         description="Blankets"))
    return store


def ids(points):
    return [p.id for p in points]


def test_add_assigns_id_and_timestamps(store):
    point = store.add(make_point())
    assert point.id
    assert point.created_at == NOW and point.updated_at == NOW
    assert store.get(point.id) == point
    assert len(store) == 1


def test_add_accepts_plain_dict(store):
    point = store.add({"title": "Depot", "category": "supplies",
                       "location": {"latitude": 22.7, "longitude": 75.8}})
    assert point.category == ReliefCategory.SUPPLIES


def test_duplicate_id_is_rejected(store):
    store.add(make_point(id="p1"))
    with pytest.raises(DuplicateIdError):
        store.add(make_point(id="p1"))


def test_removed_id_is_never_reused(store):
    store.add(make_point(id="p1"))
    store.remove("p1")
    with pytest.raises(DuplicateIdError):
        store.add(make_point(id="p1"))


def test_invalid_coordinate_is_rejected_without_side_effects(store):
    events = []
    store.subscribe(events.append)
    with pytest.raises(InvalidCoordinateError):
        store.add(make_point(location=GeoPoint(latitude=95.0, longitude=10.0)))
    assert len(store) == 0
    assert events == []


def test_update_and_remove_unknown_id(store):
    with pytest.raises(NotFoundError):
        store.update("missing", ReliefPointUpdate(capacity=3))
    with pytest.raises(NotFoundError):
        store.remove("missing")
    with pytest.raises(NotFoundError):
        store.get("missing")


def test_update_applies_only_set_fields(store, clock):
    original = store.add(make_point(id="p1", open_hours="9-5", capacity=10))
    clock.now = NOW + timedelta(hours=2)

    updated = store.update("p1", {"capacity": 4})

    assert updated.capacity == 4
    assert updated.open_hours == "9-5"
    assert updated.title == original.title
    assert updated.created_at == NOW
    assert updated.updated_at == NOW + timedelta(hours=2)
    assert store.get("p1").capacity == 4


def test_update_rejects_bad_location(store):
    store.add(make_point(id="p1"))
    with pytest.raises(InvalidCoordinateError):
        store.update("p1", ReliefPointUpdate(location=GeoPoint(latitude=0, longitude=200)))
    assert store.get("p1").location == INDORE


def test_mutations_publish_events_after_commit(store):
    seen = []

    def on_change(event):
        # The store already reflects the mutation when subscribers run
        seen.append((event.kind, event.entity_id, event.entity_id in store))

    store.subscribe(on_change)
    store.add(make_point(id="p1"))
    store.update("p1", {"capacity": 1})
    store.remove("p1")

    assert seen == [("added", "p1", True), ("updated", "p1", True), ("removed", "p1", False)]


def test_failing_subscriber_does_not_undo_mutation(store):
    received = []

    def broken(event):
        raise RuntimeError("boom")

    store.subscribe(broken)
    store.subscribe(received.append)

    point = store.add(make_point(id="p1"))

    assert store.get("p1") == point
    assert [e.kind for e in received] == ["added"]


def test_unsubscribe(store):
    received = []
    unsubscribe = store.subscribe(received.append)
    unsubscribe()
    store.add(make_point())
    assert received == []


@pytest.mark.parametrize("category", list(ReliefCategory))
def test_filter_by_category_returns_only_matches(populated, category):
    result = populated.filter_by_category(category)
    assert result
    assert all(p.category == category for p in result)
    assert ids(populated.filter_by_category(category.value)) == ids(result)


def test_filter_by_none_returns_everything(populated):
    assert ids(populated.filter_by_category(None)) == ["food-1", "med-1", "shel-1", "sup-1"]


def test_search_is_case_insensitive(populated):
    lower = ids(populated.search("food"))
    upper = ids(populated.search("FOOD"))
    assert lower == upper == ["med-1"]


def test_search_matches_title_description_and_location_label(populated):
    assert ids(populated.search("kitchen")) == ["food-1"]
    assert ids(populated.search("blankets")) == ["sup-1"]
    assert ids(populated.search("nehru")) == ["shel-1"]


def test_blank_search_returns_filtered_set(populated):
    assert ids(populated.search("")) == ids(populated.all())
    assert ids(populated.search("   ", category="shelter")) == ["shel-1"]
    assert populated.search("camp", category="food") == []


def test_nearby_orders_by_distance_and_respects_radius(populated):
    result = populated.nearby_with_distance(offset_north(INDORE, 3400), 3500)

    assert ids(p for p, _ in result) == ["shel-1", "med-1", "food-1"]
    distances = [d for _, d in result]
    assert distances == sorted(distances)
    assert all(d <= 3500 for d in distances)
    for point, distance in result:
        assert geo.distance_meters(offset_north(INDORE, 3400), point.location) == pytest.approx(distance)


def test_nearby_excludes_points_beyond_radius(populated):
    result = populated.nearby(INDORE, 2000)
    assert ids(result) == ["food-1", "med-1"]


def test_nearby_with_category(populated):
    assert ids(populated.nearby(INDORE, 10_000, category="supplies")) == ["sup-1"]


def test_added_point_is_nearby_at_zero_radius(store):
    point = store.add(make_point(location=GeoPoint(latitude=-33.8688, longitude=151.2093)))
    assert point in store.nearby(point.location, 0)


def test_nearby_rejects_invalid_origin(populated):
    with pytest.raises(InvalidCoordinateError):
        populated.nearby(GeoPoint(latitude=-100, longitude=0), 1000)
