COMMON_BUTTON_STYLE = """
QPushButton {
  background: transparent;
  border: 0px;
  color: rgba(255,255,255,230);
  border-radius: 8px;
  font-size: 18px;
  padding: 7px;
  min-width: 36px;
  min-height: 36px;
}
QPushButton:hover {
  background: rgba(255,255,255,20);
}
QPushButton:pressed {
  background: rgba(255,255,255,10);
}
QPushButton:checked, QPushButton[active="true"] {
  background: rgba(255,255,255,28);
  border: 1px solid rgba(255,255,255,20);
}
"""

WINDOW_STYLE = COMMON_BUTTON_STYLE + """
QMainWindow, QWidget#CentralPanel {
  background: #121212;
}

QLabel {
  color: rgba(255,255,255,175);
  font-family: "Segoe UI";
  font-size: 14px;
}

QLabel#NowPlayingTitle {
  color: rgba(255,255,255,245);
  font-size: 16px;
  font-weight: 600;
}

QLabel#SectionTitle {
  color: rgba(255,255,255,120);
  font-size: 12px;
  font-weight: 600;
}

QLineEdit {
  background-color: rgba(255, 255, 255, 0.04);
  border: 1px solid rgba(255, 255, 255, 0.08);
  border-radius: 6px;
  padding: 6px 10px;
  color: white;
}

QSlider::groove:horizontal {
  background: rgba(255,255,255,22);
  height: 4px;
  border-radius: 2px;
}
QSlider::sub-page:horizontal {
  background: rgba(235,235,235,180);
  height: 4px;
  border-radius: 2px;
}
QSlider::add-page:horizontal {
  background: rgba(255,255,255,12);
  height: 4px;
  border-radius: 2px;
}
QSlider::handle:horizontal {
  background: rgba(255,255,255,230);
  width: 10px;
  height: 10px;
  border-radius: 5px;
  margin: -3px 0px;
}

QListWidget {
  background: transparent;
  border: none;
  color: rgba(255,255,255,255);
  font-family: "Segoe UI";
  font-size: 14px;
  outline: none;
  padding-right: 4px;
}

QListWidget::item {
  background: rgba(255,255,255,6);
  border-radius: 8px;
  margin-bottom: 2px;
  padding: 6px;
}

QListWidget::item:selected {
  background: rgba(255,255,255,20);
  border: 1px solid rgba(255,255,255,30);
}

QListWidget::item:hover {
  background: rgba(255,255,255,12);
}

QScrollBar:vertical {
  background: transparent;
  width: 8px;
  margin: 0px;
  border-radius: 4px;
}

QScrollBar::handle:vertical {
  background: rgba(255, 255, 255, 40);
  min-height: 30px;
  border-radius: 4px;
  margin: 0px 2px;
}

QScrollBar::add-line:vertical, QScrollBar::sub-line:vertical {
  background: none;
  height: 0px;
}
"""

VIDEO_PANEL_STYLE = """
QWidget#VideoPanel {
  background-color: black;
  border-radius: 8px;
}
"""
