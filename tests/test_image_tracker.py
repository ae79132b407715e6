"""Tests for the augmented image to anchor state manager."""

from __future__ import annotations

import random

from contracts import TrackingMethod, TrackingState
from session import report_sequence
from track import ImageTrackingStateManager

FULL = TrackingMethod.FULL_TRACKING
LAST_KNOWN = TrackingMethod.LAST_KNOWN_POSE


def _step(tracker, session):
    frame = session.update()
    return tracker.update(session, frame.updated_images)


def test_paused_image_is_not_tracked(running_session) -> None:
    tracker = ImageTrackingStateManager()
    running_session.report(running_session.image("H", state=TrackingState.PAUSED))

    result = _step(tracker, running_session)

    assert len(tracker) == 0
    assert result.created == []
    assert running_session.anchor_requests == 0


def test_full_tracking_creates_one_anchor(running_session) -> None:
    tracker = ImageTrackingStateManager()
    image = running_session.image("H")
    report_sequence(running_session, [[image], [image]])

    first = _step(tracker, running_session)
    second = _step(tracker, running_session)

    assert first.created == [image.index]
    assert second.created == []
    assert len(tracker) == 1
    assert running_session.anchor_requests == 1
    assert tracker.get(image.index).anchor.pose == image.center_pose


def test_degraded_tracking_removes_entry_and_detaches_anchor(running_session) -> None:
    tracker = ImageTrackingStateManager()
    report_sequence(
        running_session,
        [[running_session.image("H")], [running_session.image("H", method=LAST_KNOWN)]],
    )

    _step(tracker, running_session)
    assert len(running_session.live_anchors) == 1

    result = _step(tracker, running_session)

    assert [entry.image.name for entry in result.removed] == ["H"]
    assert len(tracker) == 0
    assert running_session.live_anchors == []


def test_stopped_image_is_removed(running_session) -> None:
    tracker = ImageTrackingStateManager()
    report_sequence(
        running_session,
        [[running_session.image("He")], [running_session.image("He", state=TrackingState.STOPPED)]],
    )

    _step(tracker, running_session)
    _step(tracker, running_session)

    assert len(tracker) == 0
    assert running_session.live_anchors == []


def test_removing_unknown_image_is_noop(running_session) -> None:
    tracker = ImageTrackingStateManager()
    running_session.report(running_session.image("Li", state=TrackingState.STOPPED))

    result = _step(tracker, running_session)

    assert result.removed == []
    assert not result.changed


def test_retracked_image_gets_new_anchor(running_session) -> None:
    tracker = ImageTrackingStateManager()
    report_sequence(
        running_session,
        [
            [running_session.image("H", state=TrackingState.PAUSED)],
            [running_session.image("H")],
            [running_session.image("H", method=LAST_KNOWN)],
            [running_session.image("H")],
        ],
    )

    _step(tracker, running_session)
    assert running_session.anchor_requests == 0

    _step(tracker, running_session)
    first_anchor = tracker.get(0).anchor
    assert running_session.anchor_requests == 1

    _step(tracker, running_session)
    assert 0 not in tracker

    _step(tracker, running_session)
    second_anchor = tracker.get(0).anchor
    assert running_session.anchor_requests == 2
    assert second_anchor.anchor_id != first_anchor.anchor_id
    assert [anchor.anchor_id for anchor in running_session.live_anchors] == [second_anchor.anchor_id]


def test_anchor_failure_is_retried_next_frame(running_session) -> None:
    tracker = ImageTrackingStateManager()
    image_h = running_session.image("H")
    image_li = running_session.image("Li")
    report_sequence(running_session, [[image_h], [image_h, image_li]])

    running_session.reject_anchor_creation = True
    failed = _step(tracker, running_session)
    assert failed.failed == [image_h.index]
    assert len(tracker) == 0

    running_session.reject_anchor_creation = False
    retried = _step(tracker, running_session)
    assert retried.created == [image_h.index, image_li.index]
    assert len(tracker) == 2


def test_anchor_failure_does_not_block_other_images(running_session) -> None:
    tracker = ImageTrackingStateManager()
    running_session.pause()
    frame_images = (running_session.image("H"), running_session.image("He"))

    result = tracker.update(running_session, frame_images)

    assert result.failed == [0, 1]
    assert running_session.anchor_requests == 2


def test_draw_pass_revalidates_current_state(running_session) -> None:
    tracker = ImageTrackingStateManager()
    report_sequence(
        running_session,
        [
            [running_session.image("H"), running_session.image("Li")],
            [running_session.image("H", state=TrackingState.PAUSED)],
        ],
    )

    _step(tracker, running_session)
    assert {entry.image.name for entry in tracker.drawable_entries()} == {"H", "Li"}

    _step(tracker, running_session)
    assert 0 in tracker
    assert [entry.image.name for entry in tracker.drawable_entries()] == ["Li"]


def test_clear_detaches_every_anchor(running_session) -> None:
    tracker = ImageTrackingStateManager()
    running_session.report(*(running_session.image(name) for name in ("H", "He", "Li")))
    _step(tracker, running_session)

    removed = tracker.clear(running_session)

    assert len(removed) == 3
    assert len(tracker) == 0
    assert running_session.live_anchors == []


def test_map_matches_last_reported_full_tracking_state(running_session) -> None:
    """Random report sequences keep the map equal to the fully tracked set."""
    rng = random.Random(1234)
    names = ("H", "He", "Li")
    reports = [
        (TrackingState.PAUSED, FULL),
        (TrackingState.TRACKING, FULL),
        (TrackingState.TRACKING, LAST_KNOWN),
        (TrackingState.TRACKING, TrackingMethod.NOT_TRACKING),
        (TrackingState.STOPPED, TrackingMethod.NOT_TRACKING),
    ]
    tracker = ImageTrackingStateManager()
    expected = set()

    for _ in range(200):
        frame_images = []
        for name in rng.sample(names, rng.randint(0, len(names))):
            state, method = rng.choice(reports)
            image = running_session.image(name, state=state, method=method)
            frame_images.append(image)
            if image.is_fully_tracked:
                expected.add(image.index)
            elif state is not TrackingState.PAUSED:
                expected.discard(image.index)
        running_session.report(*frame_images)

        _step(tracker, running_session)

        assert {entry.index for entry in tracker.entries()} == expected
        assert len(running_session.live_anchors) == len(expected)
