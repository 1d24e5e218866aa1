from __future__ import annotations
import sys
import os
import time
import logging
from typing import Dict, Any, Optional, Tuple
from PySide6 import QtCore, QtGui, QtWidgets
from PIL import Image

from color_field import ColorField
from color_ops import Color
from errors import ImageLoadError, RenderCancelled, install_global_exception_hooks, safe_slot
from io_utils import load_image, downscale_for_preview, save_png, export_path
from logconf import setup_logging
from palettes import (
    NOIR_DEFAULT, VIBGYOR, MAX_CUSTOM_COLORS, POPART_SCHEMES,
    active_palette, add_color, next_scheme, remove_color, set_color,
)
from pixel_engine import render_image
from render_config import CONTROLS, Bool, Choice, Float, Int, RenderConfig, Shape, StyleFilter


APP_TITLE = "PixelArt Pro"
RENDER_DEBOUNCE_MS = 50
BLINK_INTERVAL_MS = 500
PAN_STEP = 0.1
SLIDER_KEYS = ("grid_size", "brightness", "saturation", "zoom", "shape")

def pil_to_qpixmap(img: Image.Image) -> QtGui.QPixmap:
    if img.mode not in ("RGB", "RGBA"):
        img = img.convert("RGBA")
    buf = img.tobytes("raw", img.mode)
    w, h = img.size
    if img.mode == "RGBA":
        qimg = QtGui.QImage(buf, w, h, QtGui.QImage.Format_RGBA8888)
    else:
        qimg = QtGui.QImage(buf, w, h, 3 * w, QtGui.QImage.Format_RGB888)
    return QtGui.QPixmap.fromImage(qimg.copy())


class ControlsPanel(QtWidgets.QWidget):
    """Sliders / pickers built from the CONTROLS descriptors."""
    optionsChanged = QtCore.Signal(dict)
    def __init__(self, keys=SLIDER_KEYS):
        super().__init__()
        self._layout = QtWidgets.QFormLayout(self)
        self._controls: Dict[str, Tuple[QtWidgets.QWidget, Any]] = {}
        for key in keys:
            opt = CONTROLS[key]
            if isinstance(opt, Bool):
                w = QtWidgets.QCheckBox(); w.setChecked(bool(opt.default)); w.stateChanged.connect(lambda _=None: self.emit())
            elif isinstance(opt, Int):
                w = QtWidgets.QSlider(QtCore.Qt.Horizontal); w.setRange(opt.min, opt.max); w.setSingleStep(opt.step); w.setValue(int(opt.default))
                w.valueChanged.connect(lambda _=None: self.emit())
            elif isinstance(opt, Float):
                # sliders are integer; scale by the step
                w = QtWidgets.QSlider(QtCore.Qt.Horizontal)
                w.setRange(round(opt.min / opt.step), round(opt.max / opt.step)); w.setValue(round(opt.default / opt.step))
                w.valueChanged.connect(lambda _=None: self.emit())
            elif isinstance(opt, Choice):
                w = QtWidgets.QComboBox(); w.addItems(opt.choices); w.setCurrentText(opt.default); w.currentTextChanged.connect(lambda _=None: self.emit())
            else:
                w = QtWidgets.QLabel("Unsupported option type")
            label = QtWidgets.QLabel()
            self._controls[key] = (w, opt)
            self._layout.addRow(label, w)
        self._refresh_labels()
    def values(self) -> Dict[str, Any]:
        vals: Dict[str, Any] = {}
        for key, (w, opt) in self._controls.items():
            if isinstance(w, QtWidgets.QCheckBox): vals[key] = w.isChecked()
            elif isinstance(w, QtWidgets.QSlider) and isinstance(opt, Float): vals[key] = round(w.value() * opt.step, 4)
            elif isinstance(w, QtWidgets.QSlider): vals[key] = w.value()
            elif isinstance(w, QtWidgets.QComboBox): vals[key] = w.currentText()
        return vals
    def _refresh_labels(self):
        vals = self.values()
        for key, (w, opt) in self._controls.items():
            lbl = self._layout.labelForField(w)
            v = vals.get(key)
            text = key.replace("_", " ").title()
            if isinstance(opt, Int): text += f": {v}x"
            elif isinstance(opt, Float): text += f": {v:.2f}x"
            lbl.setText(text)
    def emit(self):
        self._refresh_labels()
        self.optionsChanged.emit(self.values())


class PaletteEditor(QtWidgets.QGroupBox):
    """Custom pop-art swatches (click to remove, add via colour field) and the two noir colours."""
    customChanged = QtCore.Signal(tuple)
    noirChanged = QtCore.Signal(tuple)
    def __init__(self):
        super().__init__("Palette")
        self._custom: Tuple[Color, ...] = VIBGYOR
        self._noir: Tuple[Color, ...] = NOIR_DEFAULT
        lay = QtWidgets.QVBoxLayout(self)
        self._title = QtWidgets.QLabel()
        lay.addWidget(self._title)
        self._swatches = QtWidgets.QWidget(); self._grid = QtWidgets.QGridLayout(self._swatches)
        self._grid.setContentsMargins(0,0,0,0)
        lay.addWidget(self._swatches)
        self._add = ColorField((255, 255, 255), button_text="+")
        self._add.changed.connect(self._on_add)
        lay.addWidget(self._add)
        self._noir_fields = []
        for i, c in enumerate(self._noir):
            f = ColorField(c)
            f.changed.connect(lambda col, idx=i: self._on_noir(idx, col))
            self._noir_fields.append(f); lay.addWidget(f)
        self._rebuild()
    def show_for(self, flt: StyleFilter, scheme: int):
        editable_custom = flt is StyleFilter.POPART and scheme == 0
        self.setVisible(flt in (StyleFilter.NOIR, StyleFilter.POPART))
        self._swatches.setVisible(editable_custom)
        self._add.setVisible(editable_custom and len(self._custom) < MAX_CUSTOM_COLORS)
        for f in self._noir_fields: f.setVisible(flt is StyleFilter.NOIR)
        if flt is StyleFilter.NOIR:
            self._title.setText("Noir Duotone")
        elif editable_custom:
            self._title.setText(f"Palette ({len(self._custom)}/{MAX_CUSTOM_COLORS})")
        else:
            self._title.setText(f"{POPART_SCHEMES[scheme][0]} Palette")
    def custom(self) -> Tuple[Color, ...]: return self._custom
    def noir(self) -> Tuple[Color, ...]: return self._noir
    def _rebuild(self):
        while self._grid.count():
            itm = self._grid.takeAt(0)
            w = itm.widget()
            if w: w.deleteLater()
        for i, c in enumerate(self._custom):
            b = QtWidgets.QPushButton(); b.setFixedSize(24, 24); b.setToolTip("Click to remove")
            b.setStyleSheet(f"background: rgb{tuple(c)}; border: 1px solid #666;")
            b.clicked.connect(lambda _=None, idx=i: self._on_remove(idx))
            self._grid.addWidget(b, i // 10, i % 10)
    def _on_add(self, color: Color):
        self._custom = add_color(self._custom, color); self._rebuild(); self.customChanged.emit(self._custom)
    def _on_remove(self, idx: int):
        self._custom = remove_color(self._custom, idx); self._rebuild(); self.customChanged.emit(self._custom)
    def _on_noir(self, idx: int, color: Color):
        self._noir = set_color(self._noir, idx, color); self.noirChanged.emit(self._noir)


class ABPreviewWidget(QtWidgets.QWidget):
    fileDropped = QtCore.Signal(str)
    def __init__(self):
        super().__init__()
        self.setMinimumSize(400, 300)
        self.setAcceptDrops(True)
        self._pix_orig: Optional[QtGui.QPixmap] = None
        self._pix_proc: Optional[QtGui.QPixmap] = None
        self._split = 0.0
        self._busy = False
        self.setMouseTracking(True)
        self._logger = logging.getLogger("Preview")

    def set_original(self, img: Optional[Image.Image]):
        self._pix_orig = pil_to_qpixmap(img) if img is not None else None
        self.update()
    def set_mosaic(self, img: Optional[Image.Image]):
        self._logger.debug("set_mosaic(): %s", img.size if img is not None else None)
        self._pix_proc = pil_to_qpixmap(img) if img is not None else None
        self._busy = False; self.update()
    def set_busy(self, busy: bool):
        self._busy = busy; self.update()
    def dragEnterEvent(self, e: QtGui.QDragEnterEvent) -> None:
        e.acceptProposedAction() if e.mimeData().hasUrls() else e.ignore()
    def dropEvent(self, e: QtGui.QDropEvent) -> None:
        paths = [u.toLocalFile() for u in e.mimeData().urls() if u.isLocalFile()]
        paths = [p for p in paths if p and os.path.isfile(p)]
        if paths: self.fileDropped.emit(paths[0])
    def mousePressEvent(self, e: QtGui.QMouseEvent): self._update_split(e.position().x())
    def mouseMoveEvent(self, e: QtGui.QMouseEvent):
        if e.buttons() & QtCore.Qt.LeftButton: self._update_split(e.position().x())
    def _update_split(self, x: float):
        r = self.rect()
        if r.width() > 0: self._split = max(0.0, min(1.0, (x - r.x()) / r.width())); self.update()

    def paintEvent(self, _):
        p = QtGui.QPainter(self)
        p.fillRect(self.rect(), QtGui.QColor("#0f172a"))

        base_pix = self._pix_proc or self._pix_orig
        if not base_pix:
            p.setPen(QtGui.QPen(QtGui.QColor("#94a3b8")))
            p.drawText(self.rect(), QtCore.Qt.AlignCenter, "Open or drop a photo")
            return

        # fit-to-window
        r = self.rect()
        pw, ph = base_pix.width(), base_pix.height()
        scale = min(r.width() / pw, r.height() / ph)
        w = int(pw * scale)
        h = int(ph * scale)
        x = r.x() + (r.width() - w) // 2
        y = r.y() + (r.height() - h) // 2
        dst = QtCore.QRect(x, y, w, h)

        # left of the handle = original, right = mosaic
        split_px = int(w * max(0.0, min(1.0, self._split)))
        left_rect  = QtCore.QRect(x, y, split_px, h)
        right_rect = QtCore.QRect(x + split_px, y, w - split_px, h)

        if self._pix_orig and self._pix_proc:
            if left_rect.width() > 0:
                p.save(); p.setClipRect(left_rect); p.drawPixmap(dst, self._pix_orig); p.restore()
            if right_rect.width() > 0:
                p.save(); p.setClipRect(right_rect); p.drawPixmap(dst, self._pix_proc); p.restore()
            p.setPen(QtGui.QPen(QtGui.QColor("#FFFFFF"), 2))
            p.drawLine(x + split_px, y, x + split_px, y + h)
        else:
            p.drawPixmap(dst, base_pix)

        if self._busy:
            p.fillRect(self.rect(), QtGui.QColor(15, 23, 42, 128))
            p.setPen(QtGui.QPen(QtGui.QColor("#FFFFFF")))
            font = p.font()
            font.setPointSize(font.pointSize() + 2)
            p.setFont(font)
            p.drawText(self.rect(), QtCore.Qt.AlignCenter, "Processing…")


class Worker(QtCore.QRunnable):
    def __init__(self, fn, *args, **kwargs):
        super().__init__(); self.fn = fn; self.args = args; self.kwargs = kwargs
        self.signals = WorkerSignals(); self._logger = logging.getLogger("Worker")
    @QtCore.Slot()
    def run(self):
        try:
            self._logger.debug("Run start")
            result = self.fn(*self.args, **self.kwargs)
        except RenderCancelled as e:
            self._logger.debug("Cancelled: %s", e)
        except Exception as e:
            logging.exception("Worker error")
            self.signals.error.emit(str(e))
        else:
            self.signals.result.emit(result)
        finally:
            self._logger.debug("Run finished")
            self.signals.finished.emit()


class WorkerSignals(QtCore.QObject):
    finished = QtCore.Signal()
    error = QtCore.Signal(str)
    result = QtCore.Signal(object)


class MainWindow(QtWidgets.QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle(APP_TITLE)
        self.resize(1400, 880)
        self.logger = logging.getLogger("GUI")

        # --- state ---
        self.source: Optional[Image.Image] = None
        self.mosaic: Optional[Image.Image] = None
        self.options: Dict[str, Any] = {}
        self.filter = StyleFilter.NONE
        self.scheme = 0
        self.seed = 0
        self.pan = (0.0, 0.0)
        self.desaturate = False
        self.blinking = False
        self.blink_phase = False

        # Render infra: one thread so renders never overlap; newer tokens cancel older runs
        self._render_token = 0
        self.threadpool = QtCore.QThreadPool(self)
        self.threadpool.setMaxThreadCount(1)
        self._debounce_timer = QtCore.QTimer(self); self._debounce_timer.setSingleShot(True)
        self._debounce_timer.timeout.connect(self._kick_render_worker)
        self._blink_timer = QtCore.QTimer(self); self._blink_timer.setInterval(BLINK_INTERVAL_MS)
        self._blink_timer.timeout.connect(self._on_blink_tick)

        # --- UI ---
        self.preview = ABPreviewWidget()
        self.preview.fileDropped.connect(self.open_path)

        self.btn_open = QtWidgets.QPushButton("Choose Photo")
        self.btn_open.clicked.connect(self._browse_image)

        self.controls = ControlsPanel()
        self.controls.optionsChanged.connect(self.on_options_changed)
        self.options = self.controls.values()

        pan_box = QtWidgets.QWidget(); pan_l = QtWidgets.QGridLayout(pan_box)
        for text, (r, c), (dx, dy) in (("↑", (0, 1), (0, -1)), ("←", (1, 0), (-1, 0)),
                                       ("→", (1, 2), (1, 0)), ("↓", (2, 1), (0, 1))):
            b = QtWidgets.QPushButton(text); b.setFixedWidth(40)
            b.clicked.connect(lambda _=None, dx=dx, dy=dy: self._nudge_pan(dx, dy))
            pan_l.addWidget(b, r, c)
        b_center = QtWidgets.QPushButton("•"); b_center.setFixedWidth(40)
        b_center.clicked.connect(self._reset_pan)
        pan_l.addWidget(b_center, 1, 1)

        self.btn_none = QtWidgets.QPushButton("Standard")
        self.btn_noir = QtWidgets.QPushButton("Noir")
        self.btn_pop = QtWidgets.QPushButton("Pop Art")
        self.btn_rainbow = QtWidgets.QPushButton("Rainbow")
        for b in (self.btn_none, self.btn_noir, self.btn_pop, self.btn_rainbow): b.setCheckable(True)
        self.btn_none.clicked.connect(lambda: self._set_filter(StyleFilter.NONE))
        self.btn_noir.clicked.connect(lambda: self._set_filter(StyleFilter.NOIR))
        self.btn_pop.clicked.connect(self._on_popart_clicked)
        self.btn_rainbow.clicked.connect(self._on_rainbow_clicked)
        flt_box = QtWidgets.QWidget(); flt_l = QtWidgets.QHBoxLayout(flt_box); flt_l.setContentsMargins(0,0,0,0)
        for b in (self.btn_none, self.btn_noir, self.btn_pop, self.btn_rainbow): flt_l.addWidget(b)

        self.btn_random = QtWidgets.QPushButton("Uniform"); self.btn_random.setCheckable(True)
        self.btn_random.clicked.connect(self._toggle_random)
        self.btn_desat = QtWidgets.QPushButton("Full Palette"); self.btn_desat.setCheckable(True)
        self.btn_desat.clicked.connect(self._toggle_desaturate)
        self.btn_blink = QtWidgets.QPushButton("10th Row/Col Blink"); self.btn_blink.setCheckable(True)
        self.btn_blink.clicked.connect(self._toggle_blink)
        ref_box = QtWidgets.QWidget(); ref_l = QtWidgets.QHBoxLayout(ref_box); ref_l.setContentsMargins(0,0,0,0)
        for b in (self.btn_random, self.btn_desat, self.btn_blink): ref_l.addWidget(b)

        self.palette_editor = PaletteEditor()
        self.palette_editor.customChanged.connect(lambda _: self._schedule_render())
        self.palette_editor.noirChanged.connect(lambda _: self._schedule_render())

        self.btn_export = QtWidgets.QPushButton("Export Art"); self.btn_export.setEnabled(False)
        self.btn_export.clicked.connect(self._export)

        # Layout
        center = QtWidgets.QWidget(); cv = QtWidgets.QVBoxLayout(center)
        cv.addWidget(self.preview, 1); cv.addWidget(self.btn_open)

        right = QtWidgets.QWidget(); rlay = QtWidgets.QVBoxLayout(right)
        rlay.addWidget(self.controls)
        rlay.addWidget(QtWidgets.QLabel("Image Panning")); rlay.addWidget(pan_box)
        rlay.addWidget(QtWidgets.QLabel("Style Filter")); rlay.addWidget(flt_box)
        rlay.addWidget(QtWidgets.QLabel("Filters & Refinement")); rlay.addWidget(ref_box)
        rlay.addWidget(self.palette_editor)
        rlay.addStretch(1)
        rlay.addWidget(self.btn_export)

        central = QtWidgets.QWidget(); hlay = QtWidgets.QHBoxLayout(central)
        hlay.addWidget(center, 5); hlay.addWidget(right, 2)
        self.setCentralWidget(central)

        self._sync_filter_buttons()
        self.statusBar().showMessage("Ready")
        self.logger.debug("MainWindow initialized")

    # ---------- config ----------
    def current_config(self) -> RenderConfig:
        o = self.options
        palette = active_palette(self.filter, self.scheme, self.palette_editor.custom(), self.palette_editor.noir())
        return RenderConfig(
            grid_size=int(o["grid_size"]),
            shape=Shape(o["shape"]),
            filter=self.filter,
            palette=palette,
            seed=self.seed,
            zoom=float(o["zoom"]),
            offset_x=self.pan[0],
            offset_y=self.pan[1],
            desaturate=self.desaturate,
            brightness=float(o["brightness"]),
            saturation=float(o["saturation"]),
            blink=self.blink_phase,
        )

    def on_options_changed(self, values: Dict[str, Any]):
        self.options = values
        self._schedule_render()

    def _nudge_pan(self, dx: int, dy: int):
        lo, hi = CONTROLS["offset_x"].min, CONTROLS["offset_x"].max
        x = round(max(lo, min(hi, self.pan[0] + dx * PAN_STEP)), 2)
        y = round(max(lo, min(hi, self.pan[1] + dy * PAN_STEP)), 2)
        self.pan = (x, y); self._schedule_render()

    def _reset_pan(self):
        self.pan = (0.0, 0.0); self._schedule_render()

    def _set_filter(self, flt: StyleFilter):
        self.filter = flt; self._sync_filter_buttons(); self._schedule_render()

    def _on_popart_clicked(self):
        # pressing Pop Art again cycles the colour schemes
        if self.filter is StyleFilter.POPART:
            self.scheme = next_scheme(self.scheme)
        self._set_filter(StyleFilter.POPART)

    def _on_rainbow_clicked(self):
        self._set_filter(StyleFilter.NONE if self.filter is StyleFilter.RAINBOW else StyleFilter.RAINBOW)

    def _sync_filter_buttons(self):
        self.btn_none.setChecked(self.filter is StyleFilter.NONE)
        self.btn_noir.setChecked(self.filter is StyleFilter.NOIR)
        self.btn_pop.setChecked(self.filter is StyleFilter.POPART)
        self.btn_rainbow.setChecked(self.filter is StyleFilter.RAINBOW)
        self.btn_pop.setText(f"Pop Art ({POPART_SCHEMES[self.scheme][0]})" if self.filter is StyleFilter.POPART else "Pop Art")
        self.palette_editor.show_for(self.filter, self.scheme)

    def _toggle_random(self):
        self.seed = 0 if self.seed > 0 else int(time.time() * 1000)
        self.btn_random.setChecked(self.seed > 0)
        self.btn_random.setText("Randomized" if self.seed > 0 else "Uniform")
        self._schedule_render()

    def _toggle_desaturate(self):
        self.desaturate = not self.desaturate
        self.btn_desat.setChecked(self.desaturate)
        self.btn_desat.setText("7-Colors Only" if self.desaturate else "Full Palette")
        self._schedule_render()

    def _toggle_blink(self):
        self.blinking = not self.blinking
        self.btn_blink.setChecked(self.blinking)
        self.btn_blink.setText("Stop Blinking" if self.blinking else "10th Row/Col Blink")
        if self.blinking:
            self._blink_timer.start()
        else:
            self._blink_timer.stop()
            self.blink_phase = False
            self._schedule_render()

    def _on_blink_tick(self):
        self.blink_phase = not self.blink_phase
        self._schedule_render()

    # ---------- files ----------
    def _browse_image(self):
        fn, _ = QtWidgets.QFileDialog.getOpenFileName(self, "Choose Photo", os.getcwd(), "Images (*.png *.jpg *.jpeg *.bmp *.gif *.webp *.tif *.tiff)")
        if fn: self.open_path(fn)

    @safe_slot
    def open_path(self, path: str):
        try:
            img = load_image(path)
        except ImageLoadError as e:
            self.logger.error("%s", e)
            QtWidgets.QMessageBox.warning(self, "Open", "Failed to load the image.")
            return
        self.source = img
        self.mosaic = None
        self.preview.set_original(downscale_for_preview(img))
        self.preview.set_mosaic(None)
        self.btn_export.setEnabled(False)
        self.statusBar().showMessage(f"Loaded {os.path.basename(path)} ({img.width}x{img.height})", 3000)
        self._schedule_render()

    @safe_slot
    def _export(self):
        if self.mosaic is None: return
        default = export_path(os.getcwd(), int(time.time() * 1000))
        fn, _ = QtWidgets.QFileDialog.getSaveFileName(self, "Export Art", default, "PNG (*.png)")
        if not fn: return
        save_png(self.mosaic, fn, overwrite=True)
        self.statusBar().showMessage(f"Exported: {fn}", 4000)

    # ---------- render ----------
    def _schedule_render(self):
        if self.source is None:
            return
        self._render_token += 1
        self.preview.set_busy(True)
        self._debounce_timer.start(RENDER_DEBOUNCE_MS)

    def _kick_render_worker(self):
        if self.source is None:
            return
        token = self._render_token
        src = self.source
        cfg = self.current_config()

        def render(): return render_image(src, cfg, cancelled=lambda: token != self._render_token)

        def on_result(img, tok=token):
            if tok != self._render_token: return
            self.mosaic = img
            self.preview.set_mosaic(img)
            self.btn_export.setEnabled(True)

        def on_error(msg: str, tok=token):
            if tok != self._render_token: return
            self.preview.set_busy(False)
            self.statusBar().showMessage(f"Render error: {msg}", 5000)

        def on_finished(tok=token):
            if tok != self._render_token: return
            self.preview.set_busy(False)

        worker = Worker(render)
        worker.signals.result.connect(on_result)
        worker.signals.error.connect(on_error)
        worker.signals.finished.connect(on_finished)
        self.threadpool.start(worker)


def main():
    setup_logging()
    install_global_exception_hooks()
    app = QtWidgets.QApplication(sys.argv)
    w = MainWindow(); w.show()
    if len(sys.argv) > 1:
        w.open_path(sys.argv[1])
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
