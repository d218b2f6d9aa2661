"""Tests for merging and deduplicating normalized batches."""

from __future__ import annotations

import random

from conftest import make_event

from marketplace_feed.application.use_cases.activity import merge_events


def test_same_event_reported_by_two_sources_appears_once():
    first = make_event(1, event_id="booking_state_b1_pending")
    duplicate = make_event(1, event_id="booking_state_b1_pending")

    merged = merge_events([first], [duplicate, make_event(2)])

    assert [event.id for event in merged].count("booking_state_b1_pending") == 1
    assert len(merged) == 2


def test_result_is_sorted_newest_first():
    batch = [make_event(3), make_event(10), make_event(1)]

    merged = merge_events(batch, [make_event(7)])

    timestamps = [event.timestamp for event in merged]
    assert timestamps == sorted(timestamps, reverse=True)


def test_most_recent_occurrence_of_an_id_wins():
    older = make_event(1, event_id="shared", minutes=1)
    newer = make_event(2, event_id="shared", minutes=9)

    merged = merge_events([older], [newer])

    assert len(merged) == 1
    assert merged[0].timestamp == newer.timestamp


def test_merge_is_idempotent_and_ignores_batch_order():
    events = [make_event(index) for index in range(12)]
    events.append(make_event(4, event_id="conversation_c4"))
    shuffled = events[:]
    random.Random(7).shuffle(shuffled)

    merged = merge_events(events[:6], events[6:])

    assert merge_events(merged) == merged
    assert merge_events(shuffled[6:], shuffled[:6]) == merged
    assert len({event.id for event in merged}) == len(merged)


def test_merge_of_nothing_is_empty():
    assert merge_events() == []
    assert merge_events([], []) == []
