from __future__ import annotations

import copy
from datetime import datetime, timedelta, timezone
from typing import List

import pytest

from tripfilter.chain.filter_chain_builder import ItineraryFilterChainBuilder
from tripfilter.chain.filter_chain_config import FilterChainConfig
from tripfilter.filters.debug_wrapper import DebugFilterWrapper
from tripfilter.filters.max_limit import MaxLimitFilter
from tripfilter.filters.reduce_time_table_variation import ReduceTimeTableVariationFilter
from tripfilter.model.domain_types import Itinerary, Leg, TraverseMode

T0 = datetime(2020, 2, 1, 12, 0, tzinfo=timezone.utc)

DOMINANCE = "transit-vs-street-filter"
VARIATION = "reduce-time-table-variation-filter"
GROUP_BY = "group-by-legs-filter"
LATEST_DEPARTURE = "latest-departure-time-limit"
SORT = "sort-on-default-order"
MAX_LIMIT = "number-of-itineraries-filter"


def _leg(mode: TraverseMode, start_min: int, end_min: int, meters: float, trip: str | None = None) -> Leg:
    return Leg(
        mode=mode,
        start_time=T0 + timedelta(minutes=start_min),
        end_time=T0 + timedelta(minutes=end_min),
        distance_meters=meters,
        trip_id=trip,
    )


def _itinerary(itinerary_id: str, cost: int, *legs: Leg) -> Itinerary:
    return Itinerary(legs=list(legs), generalized_cost=cost, id=itinerary_id)


def _names(builder: ItineraryFilterChainBuilder) -> List[str]:
    return builder.build().filter_names


def test_default_chain():
    assert _names(ItineraryFilterChainBuilder(arrive_by=False)) == [DOMINANCE, GROUP_BY, SORT, MAX_LIMIT]


def test_all_stages_in_fixed_order():
    builder = ItineraryFilterChainBuilder(arrive_by=True)
    builder.set_short_transit_slack_in_seconds(60)
    builder.set_latest_departure_time_limit(T0)

    assert _names(builder) == [DOMINANCE, VARIATION, GROUP_BY, LATEST_DEPARTURE, SORT, MAX_LIMIT]


def test_dominance_filter_can_be_disabled():
    builder = ItineraryFilterChainBuilder(arrive_by=False)
    builder.remove_transit_with_higher_cost_than_best_on_street_only(False)

    assert DOMINANCE not in _names(builder)


@pytest.mark.parametrize("slack", [None, 0, -1, -999_999, 0.5])
def test_variation_filter_absent_unless_slack_is_positive(slack):
    builder = ItineraryFilterChainBuilder(arrive_by=False)
    builder.set_short_transit_slack_in_seconds(slack)

    assert VARIATION not in _names(builder)


def test_variation_filter_follows_dominance_filter():
    builder = ItineraryFilterChainBuilder(arrive_by=False)
    builder.set_short_transit_slack_in_seconds(60)
    chain = builder.build()

    assert chain.filter_names.index(VARIATION) == chain.filter_names.index(DOMINANCE) + 1
    variation = chain.filters[1]
    assert isinstance(variation, ReduceTimeTableVariationFilter)
    assert variation.short_transit_slack_seconds == 60


def test_latest_departure_filter_only_when_set():
    builder = ItineraryFilterChainBuilder(arrive_by=False)
    assert LATEST_DEPARTURE not in _names(builder)

    builder.set_latest_departure_time_limit(T0)
    names = _names(builder)
    assert names.index(LATEST_DEPARTURE) == names.index(GROUP_BY) + 1


def test_max_limit_omitted_when_below_min_limit():
    builder = ItineraryFilterChainBuilder(arrive_by=False)
    builder.set_approximate_min_limit(5)
    builder.set_max_limit(3)
    without_cap = builder.build()

    builder.set_max_limit(10)
    with_cap = builder.build()

    assert MAX_LIMIT not in without_cap.filter_names
    assert len(without_cap) == len(with_cap) - 1
    assert with_cap.filter_names[-1] == MAX_LIMIT


def test_max_limit_included_when_equal_to_min_limit():
    builder = ItineraryFilterChainBuilder(arrive_by=False)
    builder.set_approximate_min_limit(4)
    builder.set_max_limit(4)

    cap = builder.build().filters[-1]
    assert isinstance(cap, MaxLimitFilter)
    assert cap.max_limit == 4


def test_debug_wraps_every_stage_in_place():
    builder = ItineraryFilterChainBuilder(arrive_by=False)
    builder.set_short_transit_slack_in_seconds(60)
    builder.set_latest_departure_time_limit(T0)
    plain = builder.build()

    builder.debug()
    debug_chain = builder.build()

    assert len(debug_chain) == len(plain) == 6
    assert debug_chain.filter_names == plain.filter_names
    assert all(isinstance(f, DebugFilterWrapper) for f in debug_chain.filters)


def test_arrive_by_fixed_at_construction():
    builder = ItineraryFilterChainBuilder(arrive_by=True)
    builder.set_max_limit(7)
    assert builder.arrive_by is True
    assert builder.config().arrive_by is True
    assert builder.build().filters[2].arrive_by is True


def test_builder_from_config_snapshot():
    config = FilterChainConfig(
        arrive_by=True,
        approximate_min_limit=2,
        max_limit=1,
        remove_transit_with_higher_cost_than_best_on_street_only=False,
        debug=True,
    )
    chain = ItineraryFilterChainBuilder.from_config(config).build()

    assert chain.filter_names == [GROUP_BY, SORT]
    assert all(isinstance(f, DebugFilterWrapper) for f in chain.filters)


def _separate_buses(count: int) -> List[Itinerary]:
    # Each itinerary rides its own bus, so every one forms its own group.
    return [
        _itinerary(f"bus{n}", 1000 + n, _leg(TraverseMode.BUS, n, 30 + n, 5000, f"b{n}"))
        for n in range(count)
    ]


def test_max_limit_subscriber_receives_first_removed_in_sorted_order():
    reached: List[Itinerary] = []
    builder = ItineraryFilterChainBuilder(arrive_by=False)
    builder.set_approximate_min_limit(1)
    builder.set_max_limit(2)
    builder.set_max_limit_reached_subscriber(reached.append)
    chain = builder.build()

    items = list(reversed(_separate_buses(5)))
    result = chain.apply(items)

    assert [it.id for it in result] == ["bus0", "bus1"]
    assert len(reached) == 1
    assert reached[0].id == "bus2"


def test_max_limit_subscriber_silent_when_input_fits():
    reached: List[Itinerary] = []
    builder = ItineraryFilterChainBuilder(arrive_by=False)
    builder.set_approximate_min_limit(1)
    builder.set_max_limit(5)
    builder.set_max_limit_reached_subscriber(reached.append)

    result = builder.build().apply(_separate_buses(5))

    assert len(result) == 5
    assert reached == []


def _scenario() -> List[Itinerary]:
    walk = _itinerary("W", 2000, _leg(TraverseMode.WALK, 0, 60, 4000))
    a1 = _itinerary(
        "A1",
        1200,
        _leg(TraverseMode.WALK, 0, 5, 200),
        _leg(TraverseMode.RAIL, 10, 30, 9000, "r1"),
        _leg(TraverseMode.WALK, 30, 35, 300),
    )
    a2 = _itinerary(
        "A2",
        1300,
        _leg(TraverseMode.WALK, 0, 8, 600),
        _leg(TraverseMode.RAIL, 12, 30, 8600, "r1"),
        _leg(TraverseMode.WALK, 30, 40, 700),
    )
    b1 = _itinerary(
        "B1",
        1400,
        _leg(TraverseMode.WALK, 0, 5, 300),
        _leg(TraverseMode.RAIL, 5, 40, 12000, "r2"),
        _leg(TraverseMode.WALK, 40, 45, 300),
    )
    b2 = _itinerary(
        "B2",
        1500,
        _leg(TraverseMode.WALK, 0, 10, 700),
        _leg(TraverseMode.RAIL, 12, 40, 11000, "r2"),
        _leg(TraverseMode.WALK, 40, 50, 800),
    )
    c1 = _itinerary(
        "C1",
        1100,
        _leg(TraverseMode.BUS, 0, 50, 5000, "b9"),
        _leg(TraverseMode.WALK, 50, 55, 300),
    )
    dominated_bus = _itinerary(
        "D1",
        2500,
        _leg(TraverseMode.BUS, 0, 20, 3000, "x1"),
        _leg(TraverseMode.WALK, 20, 22, 200),
    )
    dominated_rail = _itinerary("D2", 3000, _leg(TraverseMode.RAIL, 0, 15, 4000, "x2"))
    return [a2, dominated_bus, b1, walk, c1, a1, dominated_rail, b2]


def _scenario_builder(reached: List[Itinerary]) -> ItineraryFilterChainBuilder:
    builder = ItineraryFilterChainBuilder(arrive_by=False)
    builder.set_approximate_min_limit(3)
    builder.set_max_limit(5)
    builder.set_group_by_p(0.68)
    builder.remove_transit_with_higher_cost_than_best_on_street_only(True)
    builder.set_max_limit_reached_subscriber(reached.append)
    return builder


def test_end_to_end_scenario():
    reached: List[Itinerary] = []
    chain = _scenario_builder(reached).build()

    result = chain.apply(_scenario())

    assert [it.id for it in result] == ["W", "A1", "B1", "C1"]
    assert reached == []
    assert all(not it.system_notices for it in result)


def test_end_to_end_scenario_in_debug_mode_removes_nothing():
    reached: List[Itinerary] = []
    builder = _scenario_builder(reached)
    builder.set_max_limit(10)
    builder.debug()

    result = builder.build().apply(_scenario())
    by_id = {it.id: it for it in result}

    assert len(result) == 8
    assert {it.id for it in result if not it.system_notices} == {"W", "A1", "B1", "C1"}
    assert by_id["D1"].system_notices[0].tag == DOMINANCE
    assert by_id["D2"].system_notices[0].tag == DOMINANCE
    assert by_id["A2"].system_notices[0].tag == GROUP_BY
    assert by_id["B2"].system_notices[0].tag == GROUP_BY
    assert reached == []


def test_chain_is_reusable_and_has_no_hidden_state():
    reached: List[Itinerary] = []
    chain = _scenario_builder(reached).build()
    source = _scenario()

    first = chain.apply(copy.deepcopy(source))
    second = chain.apply(copy.deepcopy(source))

    assert first == second
    assert [it.id for it in first] == ["W", "A1", "B1", "C1"]


def test_chain_does_not_mutate_input_list():
    chain = _scenario_builder([]).build()
    items = _scenario()
    snapshot = list(items)

    chain.apply(items)

    assert items == snapshot


def test_debug_mode_keeps_exactly_what_the_plain_chain_returns():
    def items() -> List[Itinerary]:
        return [
            _itinerary("walk", 1000, _leg(TraverseMode.WALK, 0, 60, 4000)),
            _itinerary("dom", 5000, _leg(TraverseMode.RAIL, 0, 15, 6000, "r1")),
            _itinerary(
                "ok",
                900,
                _leg(TraverseMode.WALK, 0, 5, 200),
                _leg(TraverseMode.RAIL, 5, 20, 6000, "r1"),
            ),
        ]

    builder = ItineraryFilterChainBuilder(arrive_by=False)
    builder.set_approximate_min_limit(1)
    plain = builder.build().apply(items())

    builder.debug()
    tagged = builder.build().apply(items())
    by_id = {it.id: it for it in tagged}

    assert [it.id for it in plain] == ["walk", "ok"]
    assert [it.id for it in tagged if not it.system_notices] == ["walk", "ok"]
    assert [n.tag for n in by_id["dom"].system_notices] == [DOMINANCE]


def test_max_limit_in_debug_mode_tags_the_same_itineraries_it_would_cut():
    plain_reached: List[Itinerary] = []
    plain_builder = _scenario_builder(plain_reached)
    plain_builder.set_max_limit(3)
    plain = plain_builder.build().apply(_scenario())

    debug_reached: List[Itinerary] = []
    debug_builder = _scenario_builder(debug_reached)
    debug_builder.set_max_limit(3)
    debug_builder.debug()
    result = debug_builder.build().apply(_scenario())
    by_id = {it.id: it for it in result}

    assert [it.id for it in plain] == ["W", "A1", "B1"]
    assert [it.id for it in plain_reached] == ["C1"]
    assert len(result) == 8
    assert [it.id for it in result if not it.system_notices] == ["W", "A1", "B1"]
    assert [n.tag for n in by_id["C1"].system_notices] == [MAX_LIMIT]
    assert [it.id for it in debug_reached] == ["C1"]
