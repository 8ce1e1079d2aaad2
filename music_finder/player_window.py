import logging
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from PySide6.QtCore import Qt, QThread, Signal
from PySide6.QtGui import QPixmap
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QSplitter,
    QVBoxLayout,
    QWidget,
)

from .controller import PlaybackController
from .engine import EngineOptions
from .history import Track
from .i18n import tr
from .media_keys import MediaControls
from .mpv_engine import MpvEngine
from .search import SearchWorker
from .settings import (
    load_engine_origin,
    load_navigation_settings,
    load_search_settings,
    load_session_settings,
    load_tick_interval,
    load_volume,
    save_volume,
)
from .ui.styles import VIDEO_PANEL_STYLE, WINDOW_STYLE
from .ui.widgets import ClickableSlider, GlyphButton, TrackListWidget
from .utils import REPEAT_GLYPHS, REPEAT_ALL, REPEAT_OFF, REPEAT_ONE

SEEK_STEPS = 1000
THUMBNAIL_SIZE = (160, 90)
THUMBNAIL_TIMEOUT_SEC = 10


class ThumbnailWorker(QThread):
    finished_image = Signal(str, bytes)

    def __init__(self, url: str, parent=None):
        super().__init__(parent)
        self.url = url

    def run(self):
        data = b""
        try:
            req = Request(self.url, headers={"User-Agent": "MusicFinder"})
            with urlopen(req, timeout=THUMBNAIL_TIMEOUT_SEC) as resp:
                data = resp.read()
        except (HTTPError, URLError, TimeoutError, OSError) as e:
            logging.info("Thumbnail fetch failed: url=%s err=%s", self.url, e)
        self.finished_image.emit(self.url, data)


class MusicFinderWindow(QMainWindow):
    def __init__(self, engine=None):
        super().__init__()
        logging.info("MusicFinderWindow init")
        self.setWindowTitle(tr("Music Finder"))
        self.setMinimumSize(720, 520)
        self.resize(960, 680)
        self.setStyleSheet(WINDOW_STYLE)

        self.video_mode = False
        self._is_shutting_down = False
        self._results: list[Track] = []
        self._last_query = ""
        self._artwork_url = ""
        self._workers: list[QThread] = []
        self._seek_dragging = False
        self._session_config = load_session_settings()
        self._search_config = load_search_settings()

        self.setup_ui()

        if engine is None:
            engine = MpvEngine(
                wid=self.video_container.winId(),
                options=EngineOptions(origin=load_engine_origin()),
                parent=self,
            )
        nav = load_navigation_settings()
        self.controller = PlaybackController(
            engine,
            dedup_policy=nav["dedup_policy"],
            wrap_policy=nav["wrap_policy"],
            unload_policy=self._session_config["unload_policy"],
            tick_ms=load_tick_interval(),
            parent=self,
        )
        self.media_controls = MediaControls(self, self.controller)
        self.connect_controller()

        volume = load_volume()
        self.volume_slider.setValue(volume)
        self.controller.set_volume(volume)
        self.controller.publish_state()

    # layout
    def setup_ui(self):
        central = QWidget()
        central.setObjectName("CentralPanel")
        self.setCentralWidget(central)
        root = QVBoxLayout(central)
        root.setContentsMargins(14, 14, 14, 14)
        root.setSpacing(10)

        search_row = QHBoxLayout()
        self.search_input = QLineEdit()
        self.search_input.setPlaceholderText(tr("Search YouTube..."))
        self.search_input.returnPressed.connect(self.start_search)
        self.search_btn = GlyphButton("🔍", tr("Search"))
        self.search_btn.clicked.connect(self.start_search)
        self.search_status = QLabel("")
        search_row.addWidget(self.search_input, 1)
        search_row.addWidget(self.search_btn)
        search_row.addWidget(self.search_status)
        root.addLayout(search_row)

        self.video_panel = QWidget()
        self.video_panel.setObjectName("VideoPanel")
        self.video_panel.setStyleSheet(VIDEO_PANEL_STYLE)
        video_layout = QVBoxLayout(self.video_panel)
        video_layout.setContentsMargins(0, 0, 0, 0)
        close_row = QHBoxLayout()
        close_row.addStretch(1)
        self.close_video_btn = GlyphButton("✕", tr("Close video"))
        self.close_video_btn.clicked.connect(lambda: self.toggle_video_mode(False))
        close_row.addWidget(self.close_video_btn)
        video_layout.addLayout(close_row)
        self.video_container = QWidget(self.video_panel)
        self.video_container.setAttribute(Qt.WA_NativeWindow)
        self.video_container.setStyleSheet("background-color: black;")
        self.video_container.setMinimumHeight(240)
        video_layout.addWidget(self.video_container, 1)
        self.video_panel.hide()
        root.addWidget(self.video_panel, 2)

        lists = QSplitter(Qt.Horizontal)
        self.results_list = TrackListWidget()
        self.results_list.trackActivated.connect(self.on_result_activated)
        self.history_list = TrackListWidget()
        lists.addWidget(self._titled(tr("Results"), self.results_list))
        lists.addWidget(self._titled(tr("History"), self.history_list))
        root.addWidget(lists, 3)

        now_row = QHBoxLayout()
        self.thumbnail = QLabel()
        self.thumbnail.setFixedSize(*THUMBNAIL_SIZE)
        self.thumbnail.setAlignment(Qt.AlignCenter)
        self.current_title = QLabel(tr("Nothing playing"))
        self.current_title.setObjectName("NowPlayingTitle")
        self.current_title.setWordWrap(True)
        now_row.addWidget(self.thumbnail)
        now_row.addWidget(self.current_title, 1)
        root.addLayout(now_row)

        seek_row = QHBoxLayout()
        self.current_time_label = QLabel("0:00")
        self.seek_slider = ClickableSlider(Qt.Horizontal)
        self.seek_slider.setRange(0, SEEK_STEPS)
        self.seek_slider.setToolTip(tr("Seek"))
        self.seek_slider.sliderPressed.connect(self._on_seek_pressed)
        self.seek_slider.sliderMoved.connect(self._on_seek_moved)
        self.seek_slider.sliderReleased.connect(self._on_seek_released)
        self.duration_label = QLabel("0:00")
        seek_row.addWidget(self.current_time_label)
        seek_row.addWidget(self.seek_slider, 1)
        seek_row.addWidget(self.duration_label)
        root.addLayout(seek_row)

        controls = QHBoxLayout()
        self.shuffle_btn = GlyphButton("🔀", tr("Shuffle"))
        self.prev_btn = GlyphButton("⏮", tr("Previous"))
        self.play_btn = GlyphButton("▶️", tr("Play / Pause"))
        self.next_btn = GlyphButton("⏭", tr("Next"))
        self.repeat_btn = GlyphButton(REPEAT_GLYPHS[REPEAT_OFF], tr("Repeat Off"))
        self.mode_switch_btn = GlyphButton("🎥", tr("Show video"))
        self.volume_slider = ClickableSlider(Qt.Horizontal)
        self.volume_slider.setRange(0, 100)
        self.volume_slider.setFixedWidth(120)
        self.volume_slider.setToolTip(tr("Volume"))
        controls.addStretch(1)
        for btn in (self.shuffle_btn, self.prev_btn, self.play_btn, self.next_btn, self.repeat_btn):
            controls.addWidget(btn)
        controls.addStretch(1)
        controls.addWidget(self.mode_switch_btn)
        controls.addWidget(self.volume_slider)
        root.addLayout(controls)

        self.mode_switch_btn.clicked.connect(lambda: self.toggle_video_mode(not self.video_mode))

    def _titled(self, title: str, widget: QWidget) -> QWidget:
        box = QWidget()
        layout = QVBoxLayout(box)
        layout.setContentsMargins(0, 0, 0, 0)
        label = QLabel(title)
        label.setObjectName("SectionTitle")
        layout.addWidget(label)
        layout.addWidget(widget, 1)
        return box

    def connect_controller(self):
        c = self.controller
        c.historyChanged.connect(self.history_list.set_tracks)
        c.nowPlayingChanged.connect(self.update_now_playing)
        c.progressChanged.connect(self.update_progress)
        c.playStateChanged.connect(self.update_transport_icons)
        c.modesChanged.connect(self.update_mode_buttons)

        self.history_list.trackActivated.connect(c.select_history)
        self.play_btn.clicked.connect(c.toggle_play)
        self.prev_btn.clicked.connect(c.prev_track)
        self.next_btn.clicked.connect(c.next_track)
        self.shuffle_btn.clicked.connect(c.toggle_shuffle)
        self.repeat_btn.clicked.connect(c.cycle_repeat)
        self.volume_slider.valueChanged.connect(self.on_volume_changed)

    # search
    def start_search(self):
        query = self.search_input.text().strip()
        if not query:
            return
        self._last_query = query
        self.search_status.setText(tr("Searching..."))
        worker = SearchWorker(
            query,
            limit=self._search_config["limit"],
            endpoint=self._search_config["endpoint"],
            parent=self,
        )
        worker.finished_results.connect(self.on_search_finished)
        self._track_worker(worker)
        worker.start()

    def on_search_finished(self, query: str, results: list):
        if self._is_shutting_down or query != self._last_query:
            return
        self._results = [Track.from_result(item) for item in results]
        self.results_list.set_tracks(self._results)
        self.search_status.setText(tr("{} results", len(self._results)) if self._results else tr("No results"))

    def on_result_activated(self, row: int):
        if 0 <= row < len(self._results):
            self.controller.play_selected(self._results[row])

    def _track_worker(self, worker: QThread):
        self._workers.append(worker)

        def _cleanup():
            if worker in self._workers:
                self._workers.remove(worker)
            worker.deleteLater()

        worker.finished.connect(_cleanup)

    # rendering
    def update_now_playing(self, title: str, artwork_url: str):
        self.current_title.setText(title or tr("Nothing playing"))
        self._artwork_url = artwork_url
        if not artwork_url:
            self.thumbnail.clear()
            return
        worker = ThumbnailWorker(artwork_url, parent=self)
        worker.finished_image.connect(self._on_thumbnail_loaded)
        self._track_worker(worker)
        worker.start()

    def _on_thumbnail_loaded(self, url: str, data: bytes):
        if self._is_shutting_down or url != self._artwork_url:
            return
        pixmap = QPixmap()
        if data and pixmap.loadFromData(data):
            self.thumbnail.setPixmap(
                pixmap.scaled(*THUMBNAIL_SIZE, Qt.KeepAspectRatio, Qt.SmoothTransformation)
            )
        else:
            self.thumbnail.clear()

    def update_progress(self, elapsed: str, total: str, fraction: float):
        self.current_time_label.setText(elapsed)
        self.duration_label.setText(total)
        if not self._seek_dragging:
            self.seek_slider.blockSignals(True)
            self.seek_slider.setValue(int(round(fraction * SEEK_STEPS)))
            self.seek_slider.blockSignals(False)

    def update_transport_icons(self, playing: bool):
        if self._is_shutting_down:
            return
        self.play_btn.setText("⏸" if playing else "▶️")

    def update_mode_buttons(self, shuffle: bool, repeat: int):
        self.shuffle_btn.set_active(shuffle)
        repeat_tip = {
            REPEAT_OFF: tr("Repeat Off"),
            REPEAT_ALL: tr("Repeat All"),
            REPEAT_ONE: tr("Repeat One"),
        }.get(repeat, tr("Repeat Off"))
        self.repeat_btn.setText(REPEAT_GLYPHS.get(repeat, REPEAT_GLYPHS[REPEAT_OFF]))
        self.repeat_btn.setToolTip(repeat_tip)
        self.repeat_btn.set_active(repeat != REPEAT_OFF)

    def toggle_video_mode(self, enabled: bool):
        self.video_mode = bool(enabled)
        self.video_panel.setVisible(self.video_mode)
        self.mode_switch_btn.setText("🎧" if self.video_mode else "🎥")
        self.mode_switch_btn.setToolTip(tr("Audio only") if self.video_mode else tr("Show video"))

    # transport widgets
    def _on_seek_pressed(self):
        self._seek_dragging = True

    def _on_seek_moved(self, _value: int):
        self.controller.seek(self.seek_slider.fraction())

    def _on_seek_released(self):
        self._seek_dragging = False
        self.controller.seek(self.seek_slider.fraction())

    def on_volume_changed(self, value: int):
        self.controller.set_volume(value)
        save_volume(value)

    # unload guard
    def closeEvent(self, event):
        if self._is_shutting_down:
            event.accept()
            return
        if self._session_config["prevent_close"] and self.controller.should_confirm_close():
            answer = QMessageBox.question(
                self,
                tr("Leave Music Finder?"),
                tr("Playback is in progress. Close the player anyway?"),
                QMessageBox.Yes | QMessageBox.No,
                QMessageBox.No,
            )
            if answer != QMessageBox.Yes:
                event.ignore()
                return
        self._is_shutting_down = True

        for worker in list(self._workers):
            worker.requestInterruption()
            worker.quit()
            worker.wait(500)
        self._workers.clear()

        try:
            self.controller.shutdown()
        except Exception as e:
            logging.debug("Engine shutdown skipped: %s", e)
        event.accept()
