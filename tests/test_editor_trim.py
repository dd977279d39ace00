"""
Tests for the trim controller and the thumbnail strip
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from edit_models import EditMode, VideoFrame
from edit_state import EditState
from editor_split import SplitEngine
from editor_trim import MIN_THUMBNAILS, ThumbnailStrip, TrimController
from fakes import FakeExtractor, FakePlayer, RecordingNotifier


def bounds(segments):
    return [(s.start_time, s.end_time) for s in segments]


def make_trim(duration=10.0, extractor=None, notifier=None):
    state = EditState(full_duration=duration)
    player = FakePlayer(duration)
    trim = TrimController(
        state, player=player, extractor=extractor, media_uri='clip.mp4' if extractor else '', notifier=notifier
    )
    trim.initialize_trim()
    return trim, state, player


class TestInitializeTrim:

    def test_full_range_single_segment(self):
        trim, state, player = make_trim()
        assert state.trim_start == 0
        assert state.trim_end == 10.0
        assert bounds(state.timeline.segments) == [(0, 10)]
        assert state.mode == EditMode.UNCUT
        assert player.current_time == 0

    @pytest.mark.parametrize("duration", [0, -5, float('nan')])
    def test_unusable_duration_falls_back(self, duration):
        trim, state, _ = make_trim(duration=duration)
        assert state.full_duration == pytest.approx(0.1)
        assert bounds(state.timeline.segments) == [(0, 0.1)]


class TestSetTrim:

    def test_trim_start(self):
        trim, state, player = make_trim()
        notice = trim.set_trim_start(2.0)

        assert notice.ok
        assert state.trim_start == 2.0
        assert bounds(state.timeline.segments) == [(2.0, 10.0)]
        assert state.mode == EditMode.TRIMMED
        assert player.current_time == 2.0

    def test_trim_start_clamped_below_end(self):
        trim, state, _ = make_trim()
        trim.set_trim_end(5.0)
        trim.set_trim_start(9.0)
        assert state.trim_start == pytest.approx(4.9)

    def test_trim_start_not_negative(self):
        trim, state, _ = make_trim()
        trim.set_trim_start(-3.0)
        assert state.trim_start == 0.0
        assert state.mode == EditMode.UNCUT

    def test_trim_end_clamped(self):
        trim, state, _ = make_trim()
        trim.set_trim_start(4.0)
        trim.set_trim_end(1.0)
        assert state.trim_end == pytest.approx(4.1)

        trim.set_trim_end(50.0)
        assert state.trim_end == 10.0

    def test_trim_end_moves_playhead_outside_range(self):
        trim, state, player = make_trim()
        trim.set_trim_start(2.0)
        player.current_time = 9.0

        trim.set_trim_end(8.0)

        assert player.current_time == 2.0

    def test_trim_end_keeps_playhead_inside_range(self):
        trim, state, player = make_trim()
        player.current_time = 3.0
        trim.set_trim_end(8.0)
        assert player.current_time == 3.0

    def test_trim_rejected_in_split_mode(self):
        trim, state, player = make_trim()
        SplitEngine(state, player).handle_split(5.0)

        notice = trim.set_trim_start(2.0)

        assert not notice.ok
        assert state.trim_start == 0.0
        assert bounds(state.timeline.segments) == [(0, 5), (5, 10)]

    def test_trim_back_to_full_range_is_uncut(self):
        trim, state, _ = make_trim()
        trim.set_trim_start(3.0)
        trim.set_trim_start(0.0)
        assert state.mode == EditMode.UNCUT


class TestThumbnailStrip:

    def test_initialize_requests_thumbnails(self):
        extractor = FakeExtractor()
        trim, _, _ = make_trim(extractor=extractor)

        assert extractor.calls[0]['count'] == max(MIN_THUMBNAILS, 10)
        assert len(trim.thumbnails.frames) == 10

    def test_trim_refreshes_thumbnails_for_new_range(self):
        extractor = FakeExtractor()
        trim, _, _ = make_trim(extractor=extractor)
        trim.set_trim_start(4.0)

        last = extractor.calls[-1]
        assert last['start'] == 4.0
        assert last['end'] == 10.0
        assert last['count'] == MIN_THUMBNAILS

    def test_stale_response_discarded(self):
        strip = ThumbnailStrip()
        old = strip.begin(0.0, 10.0)
        new = strip.begin(2.0, 8.0)
        frame = VideoFrame(id='f', time=1.0, thumbnailRef='f.jpg')

        assert not strip.complete(old, [frame])
        assert strip.frames == []
        assert strip.complete(new, [frame])
        assert strip.frames == [frame]

    def test_extraction_failure_notifies(self):
        notifier = RecordingNotifier()
        trim, _, _ = make_trim(extractor=FakeExtractor(fail=True), notifier=notifier)

        assert trim.thumbnails.frames == []
        assert trim.thumbnails.pending is None
        assert notifier.messages[0][0] == 'Thumbnails'
