from __future__ import annotations
from PySide6 import QtWidgets, QtGui, QtCore

from color_ops import Color, parse_color, rgb_to_hex


class ColorField(QtWidgets.QWidget):
    """Palette colour input with:
       - standard QColorDialog picker
       - line edit accepting #RRGGBB / #RGB / R,G,B / rgb(r,g,b)
       - swatch button reflecting current colour
    """
    changed = QtCore.Signal(tuple)  # emits (r, g, b)

    def __init__(self, initial: Color = (255, 255, 255), parent=None, button_text: str = ""):
        super().__init__(parent)
        self._color: Color = tuple(initial)  # type: ignore[assignment]

        self._layout = QtWidgets.QHBoxLayout(self)
        self._layout.setContentsMargins(0,0,0,0)

        self._edit = QtWidgets.QLineEdit(rgb_to_hex(self._color))
        self._edit.setPlaceholderText("#RRGGBB or r,g,b")
        self._edit.editingFinished.connect(self._on_edit_finished)

        self._btn = QtWidgets.QPushButton(button_text)
        if not button_text:
            self._btn.setFixedWidth(28)
        self._btn.clicked.connect(self._pick)
        self._update_swatch()

        self._layout.addWidget(self._edit, 1)
        self._layout.addWidget(self._btn)

    def _update_swatch(self):
        pix = QtGui.QPixmap(18, 18)
        pix.fill(QtGui.QColor(*self._color))
        self._btn.setIcon(QtGui.QIcon(pix))
        self._btn.setIconSize(QtCore.QSize(18,18))

    def _on_edit_finished(self):
        try:
            c = parse_color(self._edit.text())
        except ValueError:
            # revert to current colour on invalid input
            self._edit.setText(rgb_to_hex(self._color))
            return
        self.set_value(c)
        self.changed.emit(self.value())

    def _pick(self):
        c = QtWidgets.QColorDialog.getColor(QtGui.QColor(*self._color), self, "Pick Colour")
        if c.isValid():
            self.set_value((c.red(), c.green(), c.blue()))
            self.changed.emit(self.value())

    def set_value(self, color: Color) -> None:
        self._color = tuple(color)  # type: ignore[assignment]
        self._edit.setText(rgb_to_hex(self._color))
        self._update_swatch()

    def value(self) -> Color:
        return self._color
