# tweenr/ui/layer_panel.py
from __future__ import annotations
from typing import List, Optional

from tweenr.qt import QtCore, QtGui, QtWidgets
from tweenr.core.easing import EASING_NAMES
from tweenr.core.logging import get_logger
from tweenr.core.model import AnimationDocument, Keyframe, Layer
from tweenr.ui.theme import set_icon
from app_config import IMAGE_EXTS

KF_COLUMNS = ("Time", "Translate", "Opacity", "Easing", "Bezier", "")


def parse_bezier(text: str) -> Optional[tuple]:
    """'x1, y1, x2, y2' -> 4-tuple of floats; blank or malformed -> None."""
    parts = [p for p in text.replace(";", ",").split(",") if p.strip()]
    if len(parts) != 4:
        return None
    try:
        return tuple(float(p) for p in parts)
    except ValueError:
        return None


def format_bezier(bezier: Optional[tuple]) -> str:
    return "" if bezier is None else ", ".join(f"{v:g}" for v in bezier)


class LayerPanel(QtWidgets.QWidget):
    """
    Layer list with add/remove/reorder, the selected layer's properties and its
    keyframe table. Every edit goes through the document; refreshes from the
    document only rebuild widgets whose structure changed.
    """
    layerSelected = QtCore.Signal(object)         # Optional[str]
    message = QtCore.Signal(str)

    def __init__(self, document: AnimationDocument, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent)
        self._log = get_logger(__name__)
        self.document = document
        self._layer_id: Optional[str] = None
        self._kf_ids: List[str] = []
        self._layer_ids: List[str] = []

        # Layer list + buttons
        self.list = QtWidgets.QListWidget()
        self.list.setMaximumHeight(150)
        self.add_btn = QtWidgets.QToolButton()
        self.del_btn = QtWidgets.QToolButton()
        self.up_btn = QtWidgets.QToolButton()
        self.down_btn = QtWidgets.QToolButton()
        set_icon(self.add_btn, "fa5s.plus", "＋")
        set_icon(self.del_btn, "fa5s.trash", "🗑")
        set_icon(self.up_btn, "fa5s.arrow-up", "↑")
        set_icon(self.down_btn, "fa5s.arrow-down", "↓")
        self.add_btn.setToolTip("Add layer")
        self.del_btn.setToolTip("Remove layer")
        self.up_btn.setToolTip("Move up (drawn earlier)")
        self.down_btn.setToolTip("Move down (drawn later)")
        btns = QtWidgets.QHBoxLayout()
        for b in (self.add_btn, self.del_btn, self.up_btn, self.down_btn):
            btns.addWidget(b)
        btns.addStretch()

        # Properties
        self.label_edit = QtWidgets.QLineEdit()
        self.visible_check = QtWidgets.QCheckBox("Visible")
        self.depth_spin = self._dspin(0.0, 1.0, 0.05, 2)
        self.color_btn = QtWidgets.QPushButton()
        self.color_btn.setFixedWidth(90)
        self.image_btn = QtWidgets.QToolButton()
        self.image_clear_btn = QtWidgets.QToolButton()
        set_icon(self.image_btn, "fa5s.image", "…")
        set_icon(self.image_clear_btn, "fa5s.times", "✕")
        self.image_btn.setToolTip("Choose image")
        self.image_clear_btn.setToolTip("Clear image")
        self.image_label = QtWidgets.QLabel("(none)")
        self.image_label.setTextInteractionFlags(QtCore.Qt.TextInteractionFlag.TextSelectableByMouse)
        self.x_spin = self._dspin(0.0, 100.0, 1.0, 1, "%")
        self.y_spin = self._dspin(0.0, 100.0, 1.0, 1, "%")
        self.w_spin = self._dspin(0.0, 400.0, 1.0, 1, "%")
        self.h_spin = self._dspin(0.0, 400.0, 1.0, 1, "%")

        image_row = QtWidgets.QHBoxLayout()
        image_row.addWidget(self.image_btn)
        image_row.addWidget(self.image_clear_btn)
        image_row.addWidget(self.image_label, 1)
        pos_row = QtWidgets.QHBoxLayout()
        for w in (self.x_spin, self.y_spin):
            pos_row.addWidget(w)
        size_row = QtWidgets.QHBoxLayout()
        for w in (self.w_spin, self.h_spin):
            size_row.addWidget(w)

        self.form = QtWidgets.QFormLayout()
        self.form.addRow("Label", self.label_edit)
        self.form.addRow("", self.visible_check)
        self.form.addRow("Depth", self.depth_spin)
        self.form.addRow("Color", self.color_btn)
        self.form.addRow("Image", image_row)
        self.form.addRow("Center x / y", pos_row)
        self.form.addRow("Size w / h", size_row)
        self.props = QtWidgets.QWidget()
        self.props.setLayout(self.form)

        # Keyframes
        self.kf_table = QtWidgets.QTableWidget(0, len(KF_COLUMNS))
        self.kf_table.setHorizontalHeaderLabels(KF_COLUMNS)
        self.kf_table.verticalHeader().setVisible(False)
        self.kf_table.setSelectionBehavior(QtWidgets.QAbstractItemView.SelectionBehavior.SelectRows)
        self.kf_table.setSelectionMode(QtWidgets.QAbstractItemView.SelectionMode.SingleSelection)
        hdr = self.kf_table.horizontalHeader()
        hdr.setSectionResizeMode(QtWidgets.QHeaderView.ResizeMode.ResizeToContents)
        hdr.setSectionResizeMode(4, QtWidgets.QHeaderView.ResizeMode.Stretch)
        self.add_kf_btn = QtWidgets.QPushButton("Add keyframe at playhead")

        root = QtWidgets.QVBoxLayout(self)
        root.setContentsMargins(8, 8, 8, 8)
        root.addWidget(self.list)
        root.addLayout(btns)
        root.addWidget(self.props)
        root.addWidget(QtWidgets.QLabel("Keyframes"))
        root.addWidget(self.kf_table, 1)
        root.addWidget(self.add_kf_btn)

        # Wiring
        self.list.currentRowChanged.connect(self._on_row_changed)
        self.add_btn.clicked.connect(self._add_layer)
        self.del_btn.clicked.connect(self._remove_layer)
        self.up_btn.clicked.connect(lambda: self._move_layer(-1))
        self.down_btn.clicked.connect(lambda: self._move_layer(1))
        self.label_edit.editingFinished.connect(lambda: self._patch(label=self.label_edit.text().strip() or "Layer"))
        self.visible_check.toggled.connect(lambda on: self._patch(visible=bool(on)))
        self.depth_spin.valueChanged.connect(lambda v: self._patch(depth=float(v)))
        self.color_btn.clicked.connect(self._pick_color)
        self.image_btn.clicked.connect(self._pick_image)
        self.image_clear_btn.clicked.connect(lambda: self._patch(image=None))
        self.x_spin.valueChanged.connect(self._on_position)
        self.y_spin.valueChanged.connect(self._on_position)
        self.w_spin.valueChanged.connect(lambda v: self._patch(w=float(v)))
        self.h_spin.valueChanged.connect(lambda v: self._patch(h=float(v)))
        self.add_kf_btn.clicked.connect(self._add_keyframe)

        document.changed.connect(self.refresh)
        self.refresh()

    @staticmethod
    def _dspin(lo: float, hi: float, step: float, decimals: int, suffix: str = "") -> QtWidgets.QDoubleSpinBox:
        s = QtWidgets.QDoubleSpinBox()
        s.setRange(lo, hi)
        s.setSingleStep(step)
        s.setDecimals(decimals)
        s.setKeyboardTracking(False)
        if suffix:
            s.setSuffix(suffix)
        return s

    # ──────────────────────────────────────────────────────────────────────────
    # Public API
    # ──────────────────────────────────────────────────────────────────────────
    @property
    def current_layer(self) -> Optional[Layer]:
        return self.document.find_layer(self._layer_id) if self._layer_id else None

    def select_layer(self, layer_id: Optional[str]) -> None:
        if layer_id == self._layer_id:
            return
        row = self._layer_ids.index(layer_id) if layer_id in self._layer_ids else -1
        self.list.setCurrentRow(row)

    def select_keyframe(self, layer_id: str, keyframe_id: str) -> None:
        self.select_layer(layer_id)
        if keyframe_id in self._kf_ids:
            self.kf_table.blockSignals(True)
            self.kf_table.selectRow(self._kf_ids.index(keyframe_id))
            self.kf_table.blockSignals(False)

    def refresh(self) -> None:
        ids = [l.id for l in self.document.layers]
        if ids != self._layer_ids or any(
                self.list.item(i).text() != l.label for i, l in enumerate(self.document.layers)):
            self._rebuild_list(ids)
        self._fill_properties()
        self._fill_keyframes()

    # ──────────────────────────────────────────────────────────────────────────
    # Layer list
    # ──────────────────────────────────────────────────────────────────────────
    def _rebuild_list(self, ids: List[str]) -> None:
        keep = self._layer_id if self._layer_id in ids else (ids[0] if ids else None)
        self.list.blockSignals(True)
        self.list.clear()
        for layer in self.document.layers:
            self.list.addItem(layer.label)
        self._layer_ids = ids
        self.list.setCurrentRow(ids.index(keep) if keep else -1)
        self.list.blockSignals(False)
        if keep != self._layer_id:
            self._layer_id = keep
            self.layerSelected.emit(keep)

    def _on_row_changed(self, row: int) -> None:
        self._layer_id = self._layer_ids[row] if 0 <= row < len(self._layer_ids) else None
        self._kf_ids = []
        self._fill_properties()
        self._fill_keyframes()
        self.layerSelected.emit(self._layer_id)

    def _add_layer(self) -> None:
        layer = self.document.add_layer(label=f"Layer {len(self.document.layers) + 1}")
        self.select_layer(layer.id)
        self.message.emit(f"Layer added: {layer.label}")

    def _remove_layer(self) -> None:
        layer = self.current_layer
        if layer is None:
            return
        self.document.remove_layer(layer.id)
        self.message.emit(f"Layer removed: {layer.label}")

    def _move_layer(self, delta: int) -> None:
        if self._layer_id in self._layer_ids:
            self.document.move_layer(self._layer_id, self._layer_ids.index(self._layer_id) + delta)

    # ──────────────────────────────────────────────────────────────────────────
    # Properties
    # ──────────────────────────────────────────────────────────────────────────
    def _patch(self, **patch) -> None:
        if self._layer_id:
            self.document.update_layer(self._layer_id, **patch)

    def _on_position(self, _v: float) -> None:
        if self._layer_id:
            self.document.set_layer_position(self._layer_id, self.x_spin.value(), self.y_spin.value())

    def _fill_properties(self) -> None:
        layer = self.current_layer
        self.props.setEnabled(layer is not None)
        self.add_kf_btn.setEnabled(layer is not None)
        self.del_btn.setEnabled(layer is not None)
        if layer is None:
            return
        widgets = (self.label_edit, self.visible_check, self.depth_spin, self.x_spin,
                   self.y_spin, self.w_spin, self.h_spin)
        for w in widgets:
            w.blockSignals(True)
        if not self.label_edit.hasFocus():
            self.label_edit.setText(layer.label)
        self.visible_check.setChecked(layer.visible)
        self.depth_spin.setValue(layer.depth)
        self.x_spin.setValue(layer.x)
        self.y_spin.setValue(layer.y)
        self.w_spin.setValue(layer.w)
        self.h_spin.setValue(layer.h)
        for w in widgets:
            w.blockSignals(False)
        self.color_btn.setText(layer.color)
        self.color_btn.setStyleSheet(f"background-color: {layer.color};")
        if layer.image and layer.image.startswith("data:"):
            self.image_label.setText("(embedded)")
        else:
            self.image_label.setText(QtCore.QFileInfo(layer.image).fileName() if layer.image else "(none)")
        self.image_clear_btn.setEnabled(bool(layer.image))

    def _pick_color(self) -> None:
        layer = self.current_layer
        if layer is None:
            return
        c = QtWidgets.QColorDialog.getColor(QtGui.QColor(layer.color), self, "Layer color")
        if c.isValid():
            self._patch(color=c.name(QtGui.QColor.NameFormat.HexRgb))

    def _pick_image(self) -> None:
        exts = " ".join(f"*{e}" for e in sorted(IMAGE_EXTS))
        path, _ = QtWidgets.QFileDialog.getOpenFileName(self, "Layer image", "", f"Images ({exts})")
        if path:
            self._patch(image=path)

    # ──────────────────────────────────────────────────────────────────────────
    # Keyframes
    # ──────────────────────────────────────────────────────────────────────────
    def _fill_keyframes(self) -> None:
        layer = self.current_layer
        kfs = layer.keyframes if layer else []
        ids = [k.id for k in kfs]
        if ids != self._kf_ids:
            self._build_kf_rows(kfs)
            self._kf_ids = ids
        for row, kf in enumerate(kfs):
            self._set_row_values(row, kf)

    def _build_kf_rows(self, kfs: List[Keyframe]) -> None:
        t = self.kf_table
        t.setRowCount(0)
        t.setRowCount(len(kfs))
        for row, kf in enumerate(kfs):
            kid = kf.id
            time_spin = QtWidgets.QSpinBox()
            time_spin.setRange(0, 600_000)
            time_spin.setSuffix(" ms")
            time_spin.setKeyboardTracking(False)
            time_spin.valueChanged.connect(lambda v, k=kid: self._set_kf(k, time=v))
            tr_spin = self._dspin(-10_000.0, 10_000.0, 1.0, 1, " px")
            tr_spin.valueChanged.connect(lambda v, k=kid: self._set_kf(k, translate=v))
            op_spin = self._dspin(0.0, 1.0, 0.05, 2)
            op_spin.valueChanged.connect(lambda v, k=kid: self._set_kf(k, opacity=v))
            easing = QtWidgets.QComboBox()
            easing.addItems(EASING_NAMES)
            easing.currentTextChanged.connect(lambda name, k=kid: self._set_kf(k, easing=name))
            bezier = QtWidgets.QLineEdit()
            bezier.setPlaceholderText("x1, y1, x2, y2")
            bezier.editingFinished.connect(lambda k=kid, w=bezier: self._set_kf(k, bezier=parse_bezier(w.text())))
            rm = QtWidgets.QToolButton()
            set_icon(rm, "fa5s.trash", "✕")
            rm.setToolTip("Delete keyframe")
            rm.clicked.connect(lambda _=False, k=kid: self._remove_kf(k))
            for col, w in enumerate((time_spin, tr_spin, op_spin, easing, bezier, rm)):
                t.setCellWidget(row, col, w)

    def _set_row_values(self, row: int, kf: Keyframe) -> None:
        t = self.kf_table
        cells = [t.cellWidget(row, c) for c in range(5)]
        for w in cells:
            w.blockSignals(True)
        cells[0].setValue(kf.time)
        cells[1].setValue(kf.translate)
        cells[2].setValue(kf.opacity)
        cells[3].setCurrentText(kf.easing)
        if not cells[4].hasFocus():
            cells[4].setText(format_bezier(kf.bezier))
        for w in cells:
            w.blockSignals(False)

    def _set_kf(self, kf_id: str, **patch) -> None:
        if self._layer_id:
            self.document.update_keyframe(self._layer_id, kf_id, **patch)

    def _remove_kf(self, kf_id: str) -> None:
        if self._layer_id:
            self.document.remove_keyframe(self._layer_id, kf_id)
            self.message.emit("Keyframe deleted")

    def _add_keyframe(self) -> None:
        if not self._layer_id:
            return
        kf = self.document.add_keyframe(self._layer_id, time=round(self.document.current_time))
        if kf is not None:
            self.message.emit(f"Keyframe added @ {kf.time}ms")
