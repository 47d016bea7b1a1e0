"""Tests for scroll-to-frame mapping, cover placement and the hero renderer."""

import math

import pytest

from scrollstag.canvas import FrameCanvas, cover_placement
from scrollstag.exceptions import RendererStateError
from scrollstag.loader import FrameStatus, LoadEvent, LoadState
from scrollstag.renderer import HeroRenderer, HeroState, frame_index_for_progress
from scrollstag.sources import SourceKind

from conftest import SEQUENCE_URL, STATIC_URL, frame_color, make_frame


def sequence_state(loaded=(), failed=(), count=60, complete=False) -> LoadState:
    """A sequence load state with the given frame statuses, others pending."""
    state = LoadState.create(SourceKind.SEQUENCE, count, SEQUENCE_URL)
    for index in loaded:
        state.frames[index] = make_frame(index)
        state.frame_status[index] = FrameStatus.LOADED
    for index in failed:
        state.frame_status[index] = FrameStatus.FAILED
    state.is_complete = complete
    return state


def center_pixel(canvas: FrameCanvas):
    return canvas.snapshot().getpixel((canvas.width // 2, canvas.height // 2))


# =============================================================================
# Frame Index Mapping
# =============================================================================


class TestFrameIndexForProgress:
    """Test the progress to frame index mapping."""

    def test_boundaries(self):
        assert frame_index_for_progress(0.0, 60) == 0
        assert frame_index_for_progress(1.0, 60) == 59

    def test_formula(self):
        for progress in (0.1, 0.25, 0.5, 0.733, 0.999):
            assert frame_index_for_progress(progress, 60) == math.floor(progress * 59)

    def test_monotonic(self):
        values = [i / 1000 for i in range(1001)]
        indices = [frame_index_for_progress(p, 60) for p in values]
        assert indices == sorted(indices)
        assert set(indices) == set(range(60))

    @pytest.mark.parametrize("count", [1, 2, 7, 60, 240])
    def test_any_frame_count(self, count):
        assert frame_index_for_progress(0.0, count) == 0
        assert frame_index_for_progress(1.0, count) == count - 1
        assert 0 <= frame_index_for_progress(0.5, count) <= count - 1

    def test_out_of_range_clamped(self):
        assert frame_index_for_progress(-0.3, 60) == 0
        assert frame_index_for_progress(1.7, 60) == 59

    def test_nan(self):
        assert frame_index_for_progress(float("nan"), 60) == 0

    def test_invalid_count(self):
        with pytest.raises(ValueError):
            frame_index_for_progress(0.5, 0)


# =============================================================================
# Cover Placement
# =============================================================================


class TestCoverPlacement:
    """Test aspect-fill placement."""

    def test_wider_image_cropped_horizontally(self):
        placement = cover_placement((100, 100), (200, 100))
        assert placement.ratio == 1.0
        assert (placement.width, placement.height) == (200, 100)
        assert (placement.x, placement.y) == (-50, 0)

    def test_taller_image_cropped_vertically(self):
        placement = cover_placement((1920, 1080), (1000, 1000))
        assert placement.ratio == pytest.approx(1.92)
        assert placement.width == pytest.approx(1920)
        assert placement.height == pytest.approx(1920)
        assert placement.y == pytest.approx((1080 - 1920) / 2)

    def test_never_letterboxed(self):
        for canvas in [(1280, 720), (720, 1280), (333, 777)]:
            for image in [(16, 9), (9, 16), (1, 1), (4000, 3000)]:
                p = cover_placement(canvas, image)
                assert p.width >= canvas[0] - 1e-9
                assert p.height >= canvas[1] - 1e-9
                assert p.x <= 0 and p.y <= 0
                assert p.x == pytest.approx((canvas[0] - p.width) / 2)
                assert p.y == pytest.approx((canvas[1] - p.height) / 2)

    def test_empty_image(self):
        with pytest.raises(ValueError):
            cover_placement((100, 100), (0, 10))


# =============================================================================
# Renderer State Machine
# =============================================================================


class TestRendererStates:
    """Test state transitions."""

    def test_unresolved_source(self):
        state = LoadState.create(SourceKind.UNRESOLVED, 0)
        state.is_complete = True
        canvas = FrameCanvas(64, 36)
        renderer = HeroRenderer(state, canvas)
        assert renderer.state is HeroState.UNRESOLVED
        assert renderer.activate() is HeroState.FAILED_NO_SOURCE
        assert renderer.render_state.placeholder_draws == 1

    def test_sequence_loading_then_ready(self):
        state = sequence_state()
        renderer = HeroRenderer(state, FrameCanvas(64, 36))
        transitions = []
        renderer.subscribe(transitions.append)
        renderer.activate()
        assert renderer.state is HeroState.LOADING_SEQUENCE

        state.frames[5] = make_frame(5)
        state.frame_status[5] = FrameStatus.LOADED
        renderer.on_load_event(LoadEvent.FRAME, 5)
        assert renderer.state is HeroState.READY_SEQUENCE
        assert transitions == [HeroState.LOADING_SEQUENCE, HeroState.READY_SEQUENCE]

    def test_ready_before_complete(self):
        renderer = HeroRenderer(sequence_state(loaded=[0]), FrameCanvas(64, 36))
        renderer.activate()
        assert renderer.state is HeroState.READY_SEQUENCE

    def test_static_ready(self):
        state = LoadState.create(SourceKind.STATIC, 1, STATIC_URL)
        state.frames[0] = make_frame(9, (40, 20))
        state.frame_status[0] = FrameStatus.LOADED
        state.is_complete = True
        canvas = FrameCanvas(64, 36)
        renderer = HeroRenderer(state, canvas)
        assert renderer.activate() is HeroState.READY_STATIC
        assert renderer.static_image is state.frames[0]
        assert renderer.static_placement == cover_placement((64, 36), (40, 20))

    def test_static_failed(self):
        state = LoadState.create(SourceKind.STATIC, 1, STATIC_URL)
        canvas = FrameCanvas(64, 36)
        renderer = HeroRenderer(state, canvas)
        renderer.activate()
        assert renderer.state is HeroState.LOADING_STATIC

        state.frame_status[0] = FrameStatus.FAILED
        state.is_complete = True
        renderer.on_load_event(LoadEvent.FRAME, 0)
        assert renderer.state is HeroState.FAILED_STATIC
        assert renderer.static_image is None
        assert renderer.render_state.placeholder_draws == 1

    def test_timeout_without_frames_fails(self):
        state = sequence_state()
        renderer = HeroRenderer(state, FrameCanvas(64, 36))
        renderer.activate()
        state.is_complete = True
        state.timed_out = True
        renderer.on_load_event(LoadEvent.COMPLETE, None)
        assert renderer.state is HeroState.FAILED_SEQUENCE
        assert renderer.render_state.placeholder_drawn

    def test_closed_renderer_ignores_events(self):
        state = sequence_state()
        renderer = HeroRenderer(state, FrameCanvas(64, 36))
        renderer.activate()
        renderer.close()
        state.frames[0] = make_frame(0)
        state.frame_status[0] = FrameStatus.LOADED
        renderer.on_load_event(LoadEvent.FRAME, 0)
        assert renderer.state is HeroState.LOADING_SEQUENCE

    def test_progress_before_canvas_is_misuse(self):
        renderer = HeroRenderer(sequence_state(loaded=[0]))
        with pytest.raises(RendererStateError):
            renderer.on_progress(0.5)


# =============================================================================
# Drawing
# =============================================================================


class TestRendererDrawing:
    """Test what ends up on the canvas."""

    def test_draws_mapped_frame(self):
        canvas = FrameCanvas(64, 36)
        renderer = HeroRenderer(sequence_state(loaded=range(60), complete=True), canvas)
        renderer.activate()
        index = renderer.on_progress(0.5)
        assert index == 29
        assert renderer.render_state.drawn_frame_index == 29
        assert center_pixel(canvas) == frame_color(29)

    def test_idempotent(self):
        canvas = FrameCanvas(64, 36)
        renderer = HeroRenderer(sequence_state(loaded=range(60), complete=True), canvas)
        renderer.activate()
        first = renderer.on_progress(0.37)
        drawn = renderer.render_state.drawn_frame_index
        second = renderer.on_progress(0.37)
        assert first == second == drawn == renderer.render_state.drawn_frame_index

    def test_substitutes_lowest_loaded_frame(self):
        canvas = FrameCanvas(64, 36)
        state = sequence_state(loaded=[2, 4, 5], failed=[0, 1, 3], complete=True)
        renderer = HeroRenderer(state, canvas)
        renderer.activate()
        renderer.on_progress(0.0)
        assert renderer.render_state.current_frame_index == 0
        assert renderer.render_state.drawn_frame_index == 2
        assert center_pixel(canvas) == frame_color(2)

    def test_nothing_drawn_without_frames(self):
        canvas = FrameCanvas(64, 36)
        renderer = HeroRenderer(sequence_state(), canvas)
        renderer.activate()
        renderer.on_progress(0.8)
        assert canvas.draw_count == 0
        assert renderer.render_state.drawn_frame_index is None

    def test_frame_arriving_replaces_substitute(self):
        canvas = FrameCanvas(64, 36)
        state = sequence_state(loaded=[10])
        renderer = HeroRenderer(state, canvas)
        renderer.activate()
        renderer.on_progress(0.0)
        assert renderer.render_state.drawn_frame_index == 10

        state.frames[0] = make_frame(0)
        state.frame_status[0] = FrameStatus.LOADED
        renderer.on_load_event(LoadEvent.FRAME, 0)
        assert renderer.render_state.drawn_frame_index == 0
        assert center_pixel(canvas) == frame_color(0)

    def test_static_progress_does_not_draw(self):
        state = LoadState.create(SourceKind.STATIC, 1, STATIC_URL)
        state.frames[0] = make_frame(1)
        state.frame_status[0] = FrameStatus.LOADED
        state.is_complete = True
        canvas = FrameCanvas(64, 36)
        renderer = HeroRenderer(state, canvas)
        renderer.activate()
        renderer.on_progress(0.3)
        renderer.on_progress(0.9)
        assert canvas.draw_count == 0
        assert renderer.compose().getpixel((32, 18)) == frame_color(1)

    def test_placeholder_drawn_once_on_total_failure(self):
        canvas = FrameCanvas(64, 36)
        state = sequence_state()
        renderer = HeroRenderer(state, canvas)
        renderer.activate()
        for index in range(60):
            state.frame_status[index] = FrameStatus.FAILED
            if index == 59:
                state.is_complete = True
            renderer.on_load_event(LoadEvent.FRAME, index)
        renderer.on_load_event(LoadEvent.COMPLETE, None)

        for progress in (0.0, 0.2, 0.6, 1.0):
            renderer.on_progress(progress)
        assert renderer.state is HeroState.FAILED_SEQUENCE
        assert renderer.render_state.placeholder_draws == 1
        assert canvas.draw_count == 1


# =============================================================================
# Resize
# =============================================================================


class TestRendererResize:
    """Test resize handling."""

    def test_resize_redraws_current_frame(self):
        canvas = FrameCanvas(64, 36)
        renderer = HeroRenderer(sequence_state(loaded=range(60), complete=True), canvas)
        renderer.activate()
        renderer.on_progress(1.0)
        draws = canvas.draw_count

        renderer.on_resize(100, 50)
        assert canvas.size == (100, 50)
        assert renderer.render_state.canvas_size == (100, 50)
        assert canvas.draw_count == draws + 1
        assert renderer.render_state.drawn_frame_index == 59
        assert center_pixel(canvas) == frame_color(59)

    def test_resize_restores_placeholder(self):
        canvas = FrameCanvas(64, 36)
        state = sequence_state(failed=range(60), complete=True)
        renderer = HeroRenderer(state, canvas)
        renderer.activate()
        renderer.on_resize(80, 40)
        assert renderer.state is HeroState.FAILED_SEQUENCE
        assert canvas.snapshot().getpixel((40, 20)) != (0, 0, 0)

    def test_resize_from_listener_does_not_interleave(self):
        canvas = FrameCanvas(64, 36)
        state = sequence_state()
        renderer = HeroRenderer(state, canvas)

        def on_state(new_state):
            if new_state is HeroState.READY_SEQUENCE:
                renderer.on_resize(32, 32)

        renderer.subscribe(on_state)
        renderer.activate()
        state.frames[3] = make_frame(3)
        state.frame_status[3] = FrameStatus.LOADED
        renderer.on_load_event(LoadEvent.FRAME, 3)

        assert canvas.size == (32, 32)
        assert renderer.render_state.drawn_frame_index == 3
        assert center_pixel(canvas) == frame_color(3)

    def test_resize_before_canvas_is_misuse(self):
        with pytest.raises(RendererStateError):
            HeroRenderer(sequence_state()).on_resize(10, 10)
