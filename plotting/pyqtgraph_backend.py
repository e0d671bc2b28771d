"""
PyQtGraph-based drawing surface for rendered frames.

The host knows nothing about recordings or scaling: it replays the draw
primitives produced by core.services.render_service in pixel coordinates
and reports pointer/resize events back as plain signals.

Usage:
    from plotting.pyqtgraph_backend import PyQtGraphFrameHost
    host = PyQtGraphFrameHost(parent=widget)
    viewer_vm.frame_ready.connect(host.draw_frame)
    host.pointer_pressed.connect(viewer_vm.pointer_down)
"""

from collections import defaultdict
from typing import List

import numpy as np
import pyqtgraph as pg
from PyQt6.QtCore import QEvent, Qt, pyqtSignal
from PyQt6.QtGui import QFont
from PyQt6.QtWidgets import QVBoxLayout, QWidget

from core.domain.viewer import LinePrimitive, PolylinePrimitive, TextPrimitive
from core.services.render_service import BACKGROUND_COLOR


class PyQtGraphFrameHost(QWidget):
    """
    Widget that draws one frame of primitives at a time.

    The view box is locked to pixel space: x in [0, width], y in [0, height]
    with y growing downwards, matching the primitive coordinates.
    """

    pointer_pressed = pyqtSignal(float)         # x in pixels
    pointer_moved = pyqtSignal(float)
    pointer_released = pyqtSignal()
    pointer_left = pyqtSignal()
    viewport_resized = pyqtSignal(float, float)  # width, height
    page_requested = pyqtSignal(int)            # -1 previous, +1 next

    def __init__(self, parent=None):
        super().__init__(parent)

        pg.setConfigOptions(antialias=True)

        self.graphics_layout = pg.GraphicsLayoutWidget()
        self.graphics_layout.setBackground(BACKGROUND_COLOR)
        self.graphics_layout.ci.layout.setContentsMargins(0, 0, 0, 0)

        self.view_box = self.graphics_layout.addViewBox(row=0, col=0)
        self.view_box.setMouseEnabled(x=False, y=False)
        self.view_box.setMenuEnabled(False)
        self.view_box.invertY(True)
        self.view_box.setDefaultPadding(0.0)

        self._items = []
        self._pressed = False

        # Pointer events
        self.graphics_layout.scene().installEventFilter(self)
        self.graphics_layout.scene().sigMouseMoved.connect(self._on_scene_mouse_moved)

        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)
        layout.addWidget(self.graphics_layout)

    # ------- Geometry -------
    def viewport_size(self):
        rect = self.view_box.sceneBoundingRect()
        return float(rect.width()), float(rect.height())

    def resizeEvent(self, event):
        super().resizeEvent(event)
        width, height = self.viewport_size()
        if width <= 0 or height <= 0:
            width, height = float(self.width()), float(self.height())
        self.view_box.setRange(xRange=(0, width), yRange=(0, height), padding=0)
        self.viewport_resized.emit(width, height)

    # ------- Drawing -------
    def clear(self):
        for item in self._items:
            self.view_box.removeItem(item)
        self._items = []

    def draw_frame(self, primitives: List):
        """Replace the current contents with `primitives`."""
        self.clear()
        if not primitives:
            return

        # Segments sharing a pen are batched into one curve
        segments = defaultdict(list)
        for prim in primitives:
            if isinstance(prim, LinePrimitive):
                segments[(prim.color, prim.width)].append((prim.x0, prim.y0, prim.x1, prim.y1))
            elif isinstance(prim, PolylinePrimitive):
                self._add(pg.PlotCurveItem(prim.xs, prim.ys,
                                           pen=pg.mkPen(prim.color, width=prim.width)))
            elif isinstance(prim, TextPrimitive):
                self._add_text(prim)

        for (color, width), segs in segments.items():
            arr = np.asarray(segs, dtype=float)
            xs = arr[:, [0, 2]].reshape(-1)
            ys = arr[:, [1, 3]].reshape(-1)
            item = pg.PlotCurveItem(xs, ys, connect='pairs', pen=pg.mkPen(color, width=width))
            item.setZValue(-1)
            self._add(item)

        width, height = self.viewport_size()
        self.view_box.setRange(xRange=(0, width), yRange=(0, height), padding=0)

    def _add(self, item):
        self.view_box.addItem(item, ignoreBounds=True)
        self._items.append(item)

    def _add_text(self, prim: TextPrimitive):
        item = pg.TextItem(prim.text, color=prim.color, anchor=(0, 1))
        font = QFont()
        font.setPixelSize(prim.font_size)
        font.setBold(prim.bold)
        item.setFont(font)
        item.setPos(prim.x, prim.y)
        self._add(item)

    # ------- Pointer handling -------
    def _scene_x(self, pos) -> float:
        return float(self.view_box.mapSceneToView(pos).x())

    def eventFilter(self, obj, event):
        """Translate left-button press/release on the scene into pointer signals."""
        if event.type() == QEvent.Type.GraphicsSceneMousePress:
            if event.button() == Qt.MouseButton.LeftButton:
                self._pressed = True
                self.pointer_pressed.emit(self._scene_x(event.scenePos()))
                return True
        elif event.type() == QEvent.Type.GraphicsSceneMouseRelease:
            if event.button() == Qt.MouseButton.LeftButton and self._pressed:
                self._pressed = False
                self.pointer_released.emit()
                return True
        return False

    def _on_scene_mouse_moved(self, pos):
        if self._pressed:
            self.pointer_moved.emit(self._scene_x(pos))

    def leaveEvent(self, event):
        if self._pressed:
            self._pressed = False
            self.pointer_left.emit()
        super().leaveEvent(event)

    # ------- Keyboard -------
    def keyPressEvent(self, event):
        if event.key() == Qt.Key.Key_Right:
            self.page_requested.emit(1)
        elif event.key() == Qt.Key.Key_Left:
            self.page_requested.emit(-1)
        else:
            super().keyPressEvent(event)
