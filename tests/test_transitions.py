"""
Tests for transition effects and split-point transitions
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from edit_state import EditState
from editor_split import SplitEngine
from editor_trim import TrimController
from transitions import TransitionAnnotator, get_transition_style
from fakes import FakePlayer


@pytest.fixture
def split_state():
    state = EditState(full_duration=10.0)
    player = FakePlayer(10.0)
    TrimController(state, player=player).initialize_trim()
    SplitEngine(state, player).handle_split(4.0)
    return state


class TestStandaloneEffects:

    def test_progress_through_effect(self, split_state):
        annotator = TransitionAnnotator(split_state)
        effect = annotator.add_effect('zoom-in', timestamp=2.0, duration=1.0)

        active = annotator.active_at(2.25)
        assert active.id == effect.id
        assert active.progress == pytest.approx(0.25)
        assert annotator.active_at(3.5) is None

    def test_remove_effect(self, split_state):
        annotator = TransitionAnnotator(split_state)
        effect = annotator.add_effect('fade', timestamp=1.0)
        assert annotator.remove_effect(effect.id)
        assert not annotator.remove_effect(effect.id)
        assert annotator.active_at(1.5) is None

    def test_standalone_effect_wins_over_split(self, split_state):
        annotator = TransitionAnnotator(split_state)
        annotator.begin_split_transition(split_state.split_points[0].id)
        annotator.commit_split_transition('spin')
        annotator.add_effect('fade', timestamp=3.5, duration=1.0)

        assert annotator.active_at(4.0).name == 'fade'


class TestSplitTransitions:

    def test_commit_sets_type(self, split_state):
        annotator = TransitionAnnotator(split_state)
        split_id = split_state.split_points[0].id

        assert annotator.begin_split_transition(split_id).ok
        assert annotator.commit_split_transition('slide-left').ok

        assert split_state.split_points[0].transitionType == 'slide-left'
        assert split_state.active_split_for_transition is None

    def test_unknown_type_rejected(self, split_state):
        annotator = TransitionAnnotator(split_state)
        split_id = split_state.split_points[0].id
        annotator.begin_split_transition(split_id)

        notice = annotator.commit_split_transition('banana')

        assert not notice.ok
        assert not notice.silent
        assert split_state.split_points[0].transitionType == 'none'
        assert split_state.active_split_for_transition == split_id
        assert annotator.active_at(4.0) is None

    def test_window_centred_on_split(self, split_state):
        annotator = TransitionAnnotator(split_state)
        annotator.begin_split_transition(split_state.split_points[0].id)
        annotator.commit_split_transition('blur')

        assert annotator.active_at(3.75).progress == pytest.approx(0.0)
        assert annotator.active_at(4.25).progress == pytest.approx(1.0)
        assert annotator.active_at(3.7) is None
        assert annotator.active_at(4.0).splitPointId == split_state.split_points[0].id

    def test_none_type_inactive(self, split_state):
        annotator = TransitionAnnotator(split_state)
        assert annotator.active_at(4.0) is None

    def test_commit_without_target_rejected(self, split_state):
        annotator = TransitionAnnotator(split_state)
        assert not annotator.commit_split_transition('fade').ok

    def test_target_deleted_while_picking(self, split_state):
        annotator = TransitionAnnotator(split_state)
        annotator.begin_split_transition(split_state.split_points[0].id)
        split_state.split_points = ()

        notice = annotator.commit_split_transition('fade')

        assert notice.silent
        assert split_state.active_split_for_transition is None

    def test_unknown_split_ignored(self, split_state):
        annotator = TransitionAnnotator(split_state)
        assert annotator.begin_split_transition('missing').silent

    def test_cancel(self, split_state):
        annotator = TransitionAnnotator(split_state)
        annotator.begin_split_transition(split_state.split_points[0].id)
        annotator.cancel_split_transition()
        assert split_state.active_split_for_transition is None


class TestTransitionStyle:

    def test_fade_peaks_in_middle(self):
        assert get_transition_style('fade', 0.0, 390, 844).alpha == 0.0
        assert get_transition_style('fade', 0.5, 390, 844).alpha == pytest.approx(1.0)
        assert get_transition_style('fade', 1.0, 390, 844).alpha == pytest.approx(0.0)

    def test_slide_covers_then_moves(self):
        assert get_transition_style('slide-left', 0.25, 390, 844).translate_x == 0.0
        assert get_transition_style('slide-left', 0.75, 390, 844).translate_x == pytest.approx(195.0)
        assert get_transition_style('slide-down', 0.75, 390, 844).translate_y == pytest.approx(-422.0)

    def test_blur_is_white(self):
        style = get_transition_style('blur', 0.5, 390, 844)
        assert style.background_color == 'rgba(255, 255, 255, 0.6)'

    def test_progress_clamped(self):
        assert get_transition_style('zoom-out', 5.0, 390, 844).scale == pytest.approx(3.0)

    def test_to_dict(self):
        data = get_transition_style('spin', 0.5, 390, 844).to_dict()
        assert data['rotate_deg'] == pytest.approx(360.0)
        assert data['backgroundColor'].startswith('rgba(0, 0, 0,')
