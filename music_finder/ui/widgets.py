from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QColor, QFont
from PySide6.QtWidgets import QListWidget, QListWidgetItem, QPushButton, QSlider

TRACK_ID_ROLE = Qt.UserRole + 1
CURRENT_ROW_BG = QColor(255, 255, 255, 36)


class ClickableSlider(QSlider):
    """Horizontal slider that jumps to the clicked position and reports it."""

    def mousePressEvent(self, event):
        if event.button() == Qt.LeftButton and self.width() > 0:
            pos_ratio = event.position().x() / self.width()
            if self.invertedAppearance():
                pos_ratio = 1.0 - pos_ratio
            pos_ratio = min(1.0, max(0.0, pos_ratio))
            val_range = self.maximum() - self.minimum()
            self.setValue(int(round(self.minimum() + val_range * pos_ratio)))
            self.sliderMoved.emit(self.value())

        super().mousePressEvent(event)

    def fraction(self) -> float:
        val_range = self.maximum() - self.minimum()
        if val_range <= 0:
            return 0.0
        return (self.value() - self.minimum()) / val_range


class GlyphButton(QPushButton):
    def __init__(self, glyph: str, tooltip=None, parent=None, checkable=False):
        super().__init__(glyph, parent)
        self.setFocusPolicy(Qt.NoFocus)
        if tooltip:
            self.setToolTip(tooltip)
        if checkable:
            self.setCheckable(True)

    def set_active(self, active: bool):
        self.setProperty("active", bool(active))
        # Re-polish so the [active="true"] selector applies.
        self.style().unpolish(self)
        self.style().polish(self)


class TrackListWidget(QListWidget):
    """List of {title, id} rows; clicking a row reports its index."""

    trackActivated = Signal(int)

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setFocusPolicy(Qt.NoFocus)
        self.setUniformItemSizes(True)
        self.itemClicked.connect(lambda item: self.trackActivated.emit(self.row(item)))

    def set_tracks(self, tracks, current_row: int = -1):
        self.clear()
        for track in tracks:
            item = QListWidgetItem(track.title or track.video_id)
            item.setData(TRACK_ID_ROLE, track.video_id)
            item.setToolTip(track.title)
            self.addItem(item)
        self.set_current_row(current_row)

    def set_current_row(self, row: int):
        for i in range(self.count()):
            item = self.item(i)
            font = QFont(item.font())
            font.setBold(i == row)
            item.setFont(font)
            item.setBackground(CURRENT_ROW_BG if i == row else QColor(0, 0, 0, 0))
        if 0 <= row < self.count():
            self.scrollToItem(self.item(row))
