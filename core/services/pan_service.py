"""
Pan (drag-to-scroll) state machine.

    Idle --pointer_down--> Dragging{anchor_scroll, anchor_x}
    Dragging --pointer_move--> Dragging   (updates scroll_percent)
    Dragging --pointer_up | pointer_leave--> Idle

Every other event is a no-op; a pointer_down while dragging does not
re-anchor. Pure Python, independent of the host's event dispatch.
"""

from core.domain.viewer import DragPhase, DragState, IDLE, ViewState


DEFAULT_SENSITIVITY_DIVISOR = 5.0


class PanService:
    """Drives ViewState.drag_state and ViewState.scroll_percent from pointer events.

    Each method returns True when it changed the ViewState.
    """

    def __init__(self, sensitivity_divisor: float = DEFAULT_SENSITIVITY_DIVISOR):
        if not sensitivity_divisor or sensitivity_divisor <= 0:
            sensitivity_divisor = DEFAULT_SENSITIVITY_DIVISOR
        self.sensitivity_divisor = float(sensitivity_divisor)

    def pointer_down(self, view_state: ViewState, pointer_x: float) -> bool:
        if view_state.drag_state.is_dragging:
            return False
        view_state.drag_state = DragState(
            phase=DragPhase.DRAGGING,
            anchor_scroll_percent=view_state.scroll_percent,
            anchor_pointer_x=float(pointer_x),
        )
        return True

    def pointer_move(self, view_state: ViewState, pointer_x: float, viewport_width: float) -> bool:
        drag = view_state.drag_state
        if not drag.is_dragging or viewport_width <= 0:
            return False

        delta_pct = (pointer_x - drag.anchor_pointer_x) / viewport_width * 100.0
        target = drag.anchor_scroll_percent - delta_pct / self.sensitivity_divisor

        before = view_state.scroll_percent
        view_state.set_scroll_percent(target)
        return view_state.scroll_percent != before

    def pointer_up(self, view_state: ViewState) -> bool:
        if not view_state.drag_state.is_dragging:
            return False
        view_state.drag_state = IDLE
        return True

    def pointer_leave(self, view_state: ViewState) -> bool:
        return self.pointer_up(view_state)
