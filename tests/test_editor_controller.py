import random

import pytest

from quadfit.core.editor import (
    DragVertex,
    EditorState,
    MoveWhole,
    PointerEvent,
    PointerType,
    QuadEditorController,
)
from quadfit.core.geometry import ZERO_QUAD, Point, default_quad, make_quad
from quadfit.core.warp import CompositeMode, WarpConfig

EXAMPLE_QUAD = make_quad([(116, 97), (284, 97), (284, 337), (116, 337)])


@pytest.fixture
def controller(qapp):
    controller = QuadEditorController(400, 500)
    controller.set_image_ready(True)
    controller.set_quad(EXAMPLE_QUAD)
    return controller


def test_quad_seeded_on_first_nonzero_size(qapp):
    controller = QuadEditorController()
    assert controller.quad == ZERO_QUAD

    controller.set_surface_size(0, 0)
    assert controller.quad == ZERO_QUAD

    controller.set_surface_size(400, 500)
    assert controller.quad == default_quad(400, 500)


def test_resize_keeps_user_adjusted_quad(controller):
    controller.pointer_down(Point(284, 97))
    controller.pointer_move(Point(300, 80))
    controller.pointer_up()
    edited = controller.quad

    controller.set_surface_size(800, 900)
    assert controller.quad == edited
    assert controller.surface_size == (800.0, 900.0)


def test_drag_vertex_example_scenario(controller):
    assert controller.pointer_down(Point(284, 97)) is EditorState.DRAGGING_VERTEX
    assert controller.drag_state == DragVertex(1)
    assert controller.active_vertex == 1

    controller.pointer_move(Point(390, 50))
    assert controller.quad == make_quad([(116, 97), (390, 50), (284, 337), (116, 337)])

    controller.pointer_up()
    assert controller.state is EditorState.IDLE
    assert controller.drag_state is None


def test_vertex_pick_radius_is_generous(controller):
    assert controller.pointer_down(Point(284 + 9, 97 - 9)) is EditorState.DRAGGING_VERTEX
    controller.pointer_up()
    assert controller.pointer_down(Point(284 + 12, 97 + 12)) is not EditorState.DRAGGING_VERTEX


def test_vertex_hit_wins_over_interior(controller):
    inside_near_vertex = Point(120, 101)
    assert controller.hit_test(inside_near_vertex) is EditorState.DRAGGING_VERTEX
    assert controller.pointer_down(inside_near_vertex) is EditorState.DRAGGING_VERTEX
    assert controller.drag_state == DragVertex(0)


def test_first_vertex_in_index_order_wins(controller):
    controller.set_quad([(100, 100), (105, 100), (300, 300), (100, 300)])
    controller.pointer_down(Point(103, 100))
    assert controller.drag_state == DragVertex(0)


def test_move_whole_quad_uses_snapshot_plus_delta(controller):
    assert controller.pointer_down(Point(200, 200)) is EditorState.MOVING_QUAD
    assert isinstance(controller.drag_state, MoveWhole)
    assert controller.drag_state.snapshot == EXAMPLE_QUAD

    controller.pointer_move(Point(210, 190))
    assert controller.quad[0] == Point(126, 87)
    controller.pointer_move(Point(260, 260))
    controller.pointer_move(Point(200, 200))
    assert controller.quad == EXAMPLE_QUAD


def test_move_whole_clips_each_corner_at_edges(controller):
    controller.pointer_down(Point(200, 200))
    controller.pointer_move(Point(350, 200))
    quad = controller.quad
    assert quad[0] == Point(266, 97)
    assert quad[1] == Point(400, 97)
    assert quad[2] == Point(400, 337)
    assert quad[3] == Point(266, 337)


def test_click_outside_is_noop(controller):
    assert controller.pointer_down(Point(10, 10)) is EditorState.IDLE
    controller.pointer_move(Point(50, 50))
    assert controller.quad == EXAMPLE_QUAD


def test_cancel_returns_to_idle(controller):
    controller.pointer_down(Point(284, 97))
    controller.pointer_move(Point(300, 120))
    controller.pointer_cancel()
    after_cancel = controller.quad

    controller.pointer_move(Point(10, 10))
    assert controller.quad == after_cancel
    assert controller.state is EditorState.IDLE


def test_clamp_containment_under_random_drags(controller):
    rng = random.Random(1234)
    for _ in range(200):
        controller.pointer_down(Point(rng.uniform(-50, 450), rng.uniform(-50, 550)))
        for _ in range(5):
            controller.pointer_move(Point(rng.uniform(-500, 900), rng.uniform(-500, 1000)))
            for point in controller.quad:
                assert 0 <= point.x <= 400
                assert 0 <= point.y <= 500
        controller.pointer_up()


def test_pointer_events_ignored_until_image_ready(qapp):
    controller = QuadEditorController(400, 500)
    seeded = controller.quad
    assert controller.pointer_down(seeded[1]) is EditorState.IDLE
    controller.pointer_move(Point(10, 10))
    assert controller.quad == seeded


def test_zero_surface_hit_tests_fail(qapp):
    controller = QuadEditorController()
    controller.set_image_ready(True)
    assert controller.pointer_down(Point(0, 0)) is EditorState.IDLE
    assert controller.pointer_down(Point(5, 5)) is EditorState.IDLE


def test_moves_from_other_pointers_are_ignored(controller):
    controller.pointer_down(Point(284, 97), pointer_id=7)
    controller.pointer_move(Point(390, 50), pointer_id=3)
    assert controller.quad == EXAMPLE_QUAD
    controller.pointer_move(Point(390, 50), pointer_id=7)
    assert controller.quad[1] == Point(390, 50)
    controller.pointer_up(pointer_id=3)
    assert controller.state is EditorState.IDLE


def test_handle_event_dispatches_by_type(controller):
    controller.handle_event(PointerEvent(PointerType.DOWN, 116, 337, pointer_id=1))
    assert controller.drag_state == DragVertex(3)
    controller.handle_event(PointerEvent(PointerType.MOVE, 90, 480, pointer_id=1))
    assert controller.quad[3] == Point(90, 480)
    controller.handle_event(PointerEvent(PointerType.CANCEL, 0, 0, pointer_id=1))
    assert controller.state is EditorState.IDLE


def test_mutations_request_render(controller, qtbot):
    controller.pointer_down(Point(284, 97))
    with qtbot.waitSignal(controller.quad_changed) as blocker:
        controller.pointer_move(Point(300, 90))
    assert blocker.args[0][1] == Point(300, 90)

    with qtbot.waitSignal(controller.render_requested):
        controller.pointer_move(Point(310, 90))


def test_configuration_channel(controller, qtbot):
    with qtbot.waitSignal(controller.config_changed) as blocker:
        controller.set_opacity(0.4)
    assert blocker.args[0].opacity == pytest.approx(0.4)

    controller.set_composite_mode("overlay")
    controller.set_subdivisions(1)
    controller.set_show_handles(False)
    assert controller.config == WarpConfig(
        opacity=0.4,
        composite_mode=CompositeMode.OVERLAY,
        subdivisions=1,
        show_handles=False,
    )
    with pytest.raises(ValueError):
        controller.set_composite_mode("screen")


def test_reset_is_idempotent(controller):
    controller.set_opacity(0.3)
    controller.set_composite_mode(CompositeMode.MULTIPLY)
    controller.pointer_down(Point(284, 97))
    controller.pointer_move(Point(390, 50))

    controller.reset()
    first = (controller.quad, controller.config, controller.state)
    controller.reset()
    second = (controller.quad, controller.config, controller.state)

    assert first == second
    assert first[0] == default_quad(400, 500)
    assert first[1] == WarpConfig()
    assert first[2] is EditorState.IDLE


def test_reset_restores_configured_defaults(qapp):
    defaults = WarpConfig(opacity=0.6, subdivisions=3)
    controller = QuadEditorController(200, 200, default_config=defaults)
    controller.set_opacity(1.0)
    controller.reset()
    assert controller.config == defaults


def test_image_unloaded_mid_drag_returns_to_idle(controller):
    controller.pointer_down(Point(200, 200))
    controller.set_image_ready(False)
    assert controller.state is EditorState.IDLE


def test_quad_moved_to_origin_can_still_be_grabbed(controller):
    controller.pointer_down(Point(200, 200))
    controller.pointer_move(Point(-1000, -1000))
    controller.pointer_up()
    assert controller.quad == ZERO_QUAD

    assert controller.pointer_down(Point(2, 2)) is EditorState.DRAGGING_VERTEX
    assert controller.active_vertex == 0
    controller.pointer_up()

    controller.set_surface_size(800, 900)
    assert controller.quad == ZERO_QUAD


def test_reset_on_empty_surface_seeds_on_next_size(qapp):
    controller = QuadEditorController()
    controller.reset()
    assert controller.quad == ZERO_QUAD

    controller.set_surface_size(400, 500)
    assert controller.quad == default_quad(400, 500)
