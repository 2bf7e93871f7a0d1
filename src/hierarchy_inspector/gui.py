"""
Main GUI Module.

This module implements the MainWindow class, the inspector's central hub:
- Screenshot canvas with element overlays (QGraphicsView)
- Hierarchy tree (QTreeWidget) synchronized with the canvas selection
- Element properties and generated selectors
- Appium session selection and refresh controls
"""
import logging
import time
from typing import Dict, Optional

from PySide6.QtCore import QLineF, QObject, QRectF, Qt, QUrl, Signal
from PySide6.QtGui import (
    QAction, QBrush, QColor, QDesktopServices, QGuiApplication, QImage, QPainter, QPen, QPixmap
)
from PySide6.QtWidgets import (
    QAbstractItemView, QCheckBox, QComboBox, QDockWidget, QFrame, QGraphicsRectItem, QGraphicsScene,
    QGraphicsSimpleTextItem, QGraphicsView, QHBoxLayout, QHeaderView, QLabel, QMainWindow,
    QMessageBox, QPushButton, QSpinBox, QTableWidget, QTableWidgetItem, QTabWidget, QTextEdit,
    QToolBar, QTreeWidget, QTreeWidgetItem, QVBoxLayout, QWidget
)

from hierarchy_inspector.appium_client import AppiumClient, AppiumError, AppiumSession
from hierarchy_inspector.config import InspectorSettings, ServerHistory, load_known_devices
from hierarchy_inspector.coordinate_reconciler import (
    IDENTITY, DeviceFrame, DeviceMetadata, ScaleTransform, fit_render_size, overlay_boxes,
    resolve_device_frame
)
from hierarchy_inspector.element_tree import ElementNode, count_nodes, display_name, type_tag
from hierarchy_inspector.hierarchy_parser import HierarchyParser
from hierarchy_inspector.hit_tester import hit_test
from hierarchy_inspector.live_session import LiveSnapshot, SnapshotThread
from hierarchy_inspector.selection import SelectionState
from hierarchy_inspector.selector_synthesizer import (
    CODE_FORMATS, best_selector, format_selector, synthesize
)
from hierarchy_inspector.theme import Theme

logger = logging.getLogger(__name__)

APPIUM_DOCS_URL = "https://appium.io/docs/en/latest/"
AUTO_EXPAND_DEPTH = 2
LABEL_MAX_CHARS = 25


def _fmt(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:.1f}"


class LogBridge(QObject):
    message = Signal(str)


class QtLogHandler(logging.Handler):
    """Forwards log records to the System Log dock (thread-safe through a queued signal)."""

    def __init__(self, bridge: LogBridge):
        super().__init__(level=logging.INFO)
        self.bridge = bridge

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.bridge.message.emit(self.format(record))
        except RuntimeError:
            # Bridge already destroyed while the app shuts down.
            pass


class InspectorView(QGraphicsView):
    mouse_moved = Signal(float, float)
    canvas_clicked = Signal(float, float)

    def __init__(self, scene, parent=None):
        super().__init__(scene, parent)
        self.setMouseTracking(True)
        self.setDragMode(QGraphicsView.NoDrag)
        self.setRenderHint(QPainter.Antialiasing)
        self.setFrameShape(QFrame.NoFrame)
        self.setBackgroundBrush(QBrush(QColor(Theme.BG_CANVAS)))
        self.crosshair_pos = None  # Scene coordinates
        self._press_pos = None

    def wheelEvent(self, event):
        if event.modifiers() & Qt.ControlModifier:
            if event.angleDelta().y() > 0: self.scale(1.1, 1.1)
            else: self.scale(0.9, 0.9)
            event.accept()
        else:
            super().wheelEvent(event)

    def mousePressEvent(self, event):
        if event.button() == Qt.LeftButton:
            self._press_pos = self.mapToScene(event.pos())
        super().mousePressEvent(event)

    def mouseReleaseEvent(self, event):
        if event.button() == Qt.LeftButton and self._press_pos is not None:
            end = self.mapToScene(event.pos())
            dx = end.x() - self._press_pos.x()
            dy = end.y() - self._press_pos.y()
            # A drag is not a click.
            if (dx**2 + dy**2)**0.5 < 10:
                self.canvas_clicked.emit(end.x(), end.y())
            self._press_pos = None
        super().mouseReleaseEvent(event)

    def mouseMoveEvent(self, event):
        scene_pos = self.mapToScene(event.pos())
        self.crosshair_pos = scene_pos
        self.mouse_moved.emit(scene_pos.x(), scene_pos.y())
        self.viewport().update()
        super().mouseMoveEvent(event)

    def leaveEvent(self, event):
        self.crosshair_pos = None
        self.viewport().update()
        super().leaveEvent(event)

    def drawForeground(self, painter, rect):
        if self.crosshair_pos is not None:
            painter.setPen(QPen(QColor(Theme.CROSSHAIR), 0, Qt.DashLine))
            x = self.crosshair_pos.x()
            y = self.crosshair_pos.y()
            scene_rect = self.sceneRect()
            painter.drawLine(QLineF(x, scene_rect.top(), x, scene_rect.bottom()))
            painter.drawLine(QLineF(scene_rect.left(), y, scene_rect.right(), y))
        super().drawForeground(painter, rect)


class MainWindow(QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("Hierarchy Inspector")
        self.resize(1500, 1000)

        self.settings = InspectorSettings.load()
        self.known_devices = load_known_devices()
        self.client = AppiumClient(self.settings.server_url, self.settings.request_timeout)

        self.sessions: Dict[str, AppiumSession] = {}
        self.session_id: Optional[str] = None
        self.root_node: Optional[ElementNode] = None
        self.platform: Optional[str] = None
        self.metadata: Optional[DeviceMetadata] = None
        self.screenshot: Optional[QImage] = None
        self.frame: Optional[DeviceFrame] = None
        self.transform: ScaleTransform = IDENTITY
        self.selection = SelectionState()
        self.fetch_thread: Optional[SnapshotThread] = None
        self.current_suggestions = []

        self.item_to_node: Dict[int, ElementNode] = {}
        self.node_to_item: Dict[int, QTreeWidgetItem] = {}
        self.pixmap_item = None
        self.highlight_item = None
        self.highlight_label = None
        self.auto_fit = True

        self.log_bridge = LogBridge()
        self.log_bridge.message.connect(self.log_sys)
        self.log_handler = QtLogHandler(self.log_bridge)
        self.log_handler.setFormatter(logging.Formatter("%(message)s"))
        logging.getLogger("hierarchy_inspector").addHandler(self.log_handler)

        self.setup_ui()
        self.refresh_sessions()

    def setup_ui(self):
        central = QWidget(); central_lay = QVBoxLayout(central); central_lay.setContentsMargins(0, 0, 0, 0)

        self.setup_menu()
        self.setup_toolbar()

        self.lbl_error = QLabel(""); self.lbl_error.setObjectName("errorLabel"); self.lbl_error.hide()
        central_lay.addWidget(self.lbl_error)

        self.scene = QGraphicsScene()
        self.view = InspectorView(self.scene)
        self.view.mouse_moved.connect(self.on_mouse_hover)
        self.view.canvas_clicked.connect(self.on_canvas_click)
        central_lay.addWidget(self.view)

        self.lbl_device = QLabel("No session"); self.lbl_device.setObjectName("infoLabel")
        central_lay.addWidget(self.lbl_device)
        self.setCentralWidget(central)

        self.setup_tree_dock()
        self.setup_inspector_dock()
        self.setup_syslog_dock()
        self.statusBar().showMessage("Ready")

    def setup_menu(self):
        menu_file = self.menuBar().addMenu("File")
        act_about = QAction("About Hierarchy Inspector", self); act_about.triggered.connect(self.show_about)
        act_quit = QAction("Quit", self); act_quit.setShortcut("Ctrl+Q"); act_quit.triggered.connect(self.close)
        menu_file.addAction(act_about); menu_file.addSeparator(); menu_file.addAction(act_quit)

        menu_view = self.menuBar().addMenu("View")
        act_fit = QAction("Fit Screen", self); act_fit.triggered.connect(self.enable_fit)
        act_11 = QAction("1:1 Pixel", self); act_11.triggered.connect(self.disable_fit)
        act_in = QAction("Zoom In", self); act_in.setShortcut("Ctrl++"); act_in.triggered.connect(lambda: self.view.scale(1.2, 1.2))
        act_out = QAction("Zoom Out", self); act_out.setShortcut("Ctrl+-"); act_out.triggered.connect(lambda: self.view.scale(1 / 1.2, 1 / 1.2))
        for act in (act_fit, act_11, act_in, act_out):
            menu_view.addAction(act)

        menu_help = self.menuBar().addMenu("Help")
        act_docs = QAction("Appium Documentation", self)
        act_docs.triggered.connect(lambda: QDesktopServices.openUrl(QUrl(APPIUM_DOCS_URL)))
        menu_help.addAction(act_docs)

    def setup_toolbar(self):
        tb = QToolBar("Session"); tb.setMovable(False)
        self.addToolBar(tb)

        self.combo_server = QComboBox(); self.combo_server.setEditable(True); self.combo_server.setMinimumWidth(220)
        self.combo_server.addItems([self.settings.server_url] + [
            u for u in ServerHistory.load() if u != self.settings.server_url
        ])
        self.combo_server.setToolTip("Appium server URL.")

        self.combo_sessions = QComboBox(); self.combo_sessions.setMinimumWidth(260)
        self.combo_sessions.setToolTip("Active sessions on the Appium server.")
        btn_sessions = QPushButton("Refresh Sessions"); btn_sessions.clicked.connect(self.refresh_sessions)

        self.btn_connect = QPushButton("Connect"); self.btn_connect.setProperty("class", "primary")
        self.btn_connect.clicked.connect(self.connect_session)
        self.btn_refresh_source = QPushButton("Refresh Source"); self.btn_refresh_source.setProperty("class", "success")
        self.btn_refresh_source.clicked.connect(self.refresh_source)
        self.btn_refresh_screen = QPushButton("Refresh Screenshot")
        self.btn_refresh_screen.clicked.connect(self.refresh_screenshot)

        self.spin_depth = QSpinBox(); self.spin_depth.setRange(1, 500); self.spin_depth.setValue(self.settings.max_depth)
        self.spin_depth.setPrefix("Depth "); self.spin_depth.setToolTip("snapshotMaxDepth used when fetching the source.")
        self.chk_optimize = QCheckBox("Optimize"); self.chk_optimize.setChecked(self.settings.optimize_source)
        self.chk_optimize.setToolTip("Use 'mobile: source' and skip slow attributes (visible, accessible).")

        self.lbl_coords = QLabel("X: -, Y: -"); self.lbl_coords.setStyleSheet(f"font-family: {Theme.FONT_MONO};")

        tb.addWidget(QLabel("Server")); tb.addWidget(self.combo_server)
        tb.addWidget(self.combo_sessions); tb.addWidget(btn_sessions); tb.addWidget(self.btn_connect)
        tb.addSeparator()
        tb.addWidget(self.btn_refresh_source); tb.addWidget(self.btn_refresh_screen)
        tb.addWidget(self.spin_depth); tb.addWidget(self.chk_optimize)
        tb.addSeparator()
        btn_fit = QPushButton("Fit"); btn_fit.clicked.connect(self.enable_fit)
        btn_11 = QPushButton("1:1"); btn_11.clicked.connect(self.disable_fit)
        tb.addWidget(btn_fit); tb.addWidget(btn_11); tb.addWidget(self.lbl_coords)
        self.set_session_controls(False)

    def setup_tree_dock(self):
        d = QDockWidget("Element Tree", self)
        self.tree = QTreeWidget(); self.tree.setColumnCount(2)
        self.tree.setHeaderLabels(["Element", "Bounds"])
        self.tree.header().setSectionResizeMode(0, QHeaderView.Stretch)
        self.tree.itemClicked.connect(self.on_tree_click)
        self.tree.currentItemChanged.connect(self.on_tree_current_changed)
        self.lbl_tree_count = QLabel("Elements: 0"); self.lbl_tree_count.setObjectName("infoLabel")
        w = QWidget(); l = QVBoxLayout(w); l.setContentsMargins(0, 0, 0, 0)
        l.addWidget(self.lbl_tree_count); l.addWidget(self.tree)
        d.setWidget(w); self.addDockWidget(Qt.RightDockWidgetArea, d)

    def setup_inspector_dock(self):
        d = QDockWidget("Element Properties", self); tabs = QTabWidget()

        self.tbl_props = QTableWidget(); self.tbl_props.setColumnCount(2)
        self.tbl_props.setHorizontalHeaderLabels(["Property", "Value"])
        self.tbl_props.horizontalHeader().setSectionResizeMode(QHeaderView.Stretch)
        self.tbl_props.verticalHeader().setVisible(False)
        tabs.addTab(self.tbl_props, "Properties")

        w_sel = QWidget(); l_sel = QVBoxLayout(w_sel)
        self.tbl_selectors = QTableWidget(); self.tbl_selectors.setColumnCount(4)
        self.tbl_selectors.setHorizontalHeaderLabels(["Selector", "Value", "Description", ""])
        self.tbl_selectors.horizontalHeader().setSectionResizeMode(1, QHeaderView.Stretch)
        self.tbl_selectors.verticalHeader().setVisible(False)
        l_sel.addWidget(self.tbl_selectors)
        tabs.addTab(w_sel, "Selectors")

        w_code = QWidget(); l_code = QVBoxLayout(w_code)
        row = QHBoxLayout()
        self.combo_fmt = QComboBox(); self.combo_fmt.addItems(list(CODE_FORMATS))
        self.combo_fmt.currentIndexChanged.connect(self.update_locators_text)
        btn_copy_best = QPushButton("Copy Best"); btn_copy_best.clicked.connect(self.copy_best_selector)
        row.addWidget(self.combo_fmt); row.addWidget(btn_copy_best)
        self.txt_loc = QTextEdit(); self.txt_loc.setReadOnly(True)
        l_code.addLayout(row); l_code.addWidget(self.txt_loc)
        tabs.addTab(w_code, "Code")

        d.setWidget(tabs); self.addDockWidget(Qt.RightDockWidgetArea, d)

    def setup_syslog_dock(self):
        d = QDockWidget("System Log", self)
        self.txt_sys = QTextEdit(); self.txt_sys.setReadOnly(True)
        d.setWidget(self.txt_sys); self.addDockWidget(Qt.BottomDockWidgetArea, d)

    # --- Core Logic ---

    def log_sys(self, message: str) -> None:
        if not hasattr(self, "txt_sys"):
            return
        ts = time.strftime("%H:%M:%S")
        self.txt_sys.append(f"[{ts}] {message}")

    def show_error(self, message: str) -> None:
        self.lbl_error.setText(message); self.lbl_error.show()
        self.statusBar().showMessage(message, 8000)

    def clear_error(self) -> None:
        self.lbl_error.hide(); self.lbl_error.setText("")

    def show_about(self) -> None:
        QMessageBox.information(
            self, "About",
            "Hierarchy Inspector\n\nDesktop inspector for mobile app UI elements "
            "(iOS XCUITest and Android UiAutomator) served by Appium.",
        )

    def set_session_controls(self, enabled: bool) -> None:
        self.btn_refresh_source.setEnabled(enabled)
        self.btn_refresh_screen.setEnabled(enabled)

    def apply_server_url(self) -> None:
        url = self.combo_server.currentText().strip().rstrip("/")
        if url and url != self.client.base_url:
            self.client = AppiumClient(url, self.settings.request_timeout)
            self.settings.server_url = url
            logger.info("Appium server set to %s", url)

    def refresh_sessions(self) -> None:
        self.apply_server_url()
        self.combo_sessions.clear(); self.sessions = {}
        try:
            sessions = self.client.get_sessions()
        except AppiumError as e:
            logger.warning("Session list failed: %s", e)
            self.show_error(f"Could not list sessions. Is the Appium server running at {self.client.base_url}?")
            return
        self.clear_error()
        ServerHistory.record(self.client.base_url)
        for s in sessions:
            self.sessions[s.id] = s
            self.combo_sessions.addItem(s.label, s.id)
        logger.info("Sessions refreshed: %d found", len(sessions))

    def connect_session(self) -> None:
        session_id = self.combo_sessions.currentData()
        if not session_id:
            self.show_error("Select a session first.")
            return
        self.session_id = session_id
        self.settings.max_depth = self.spin_depth.value()
        self.settings.optimize_source = self.chk_optimize.isChecked()
        self.start_fetch(screenshot_only=False)

    def refresh_source(self) -> None:
        self.start_fetch(screenshot_only=False)

    def refresh_screenshot(self) -> None:
        self.start_fetch(screenshot_only=True)

    def start_fetch(self, screenshot_only: bool) -> None:
        if not self.session_id:
            return
        if self.fetch_thread and self.fetch_thread.isRunning():
            logger.info("Refresh already in progress; request ignored")
            return
        self.statusBar().showMessage("Loading...")
        self.fetch_thread = SnapshotThread(
            self.client, self.session_id, self.spin_depth.value(),
            optimize=self.chk_optimize.isChecked(), screenshot_only=screenshot_only,
        )
        self.fetch_thread.snapshot_ready.connect(self.on_snapshot)
        self.fetch_thread.fetch_error.connect(self.on_fetch_error)
        self.fetch_thread.start()

    def on_fetch_error(self, message: str) -> None:
        if self.root_node is None:
            self.show_error(f"Could not connect to the session. Check that it is active. ({message})")
        else:
            self.show_error(f"Refresh failed: {message}")

    def on_snapshot(self, snapshot: LiveSnapshot) -> None:
        self.clear_error()
        image = QImage.fromData(snapshot.screenshot)
        if image.isNull():
            logger.warning("Screenshot could not be decoded")
            self.screenshot = None
        else:
            self.screenshot = image

        if snapshot.page_source is not None:
            self.metadata = snapshot.metadata
            root, doc_platform = HierarchyParser.parse_xml(snapshot.page_source)
            # Old node references die with the old tree.
            self.selection.replace_tree(root)
            self.root_node = root
            session_platform = self.metadata.platform_name if self.metadata else ""
            self.platform = session_platform or doc_platform
            self.populate_tree()
            self.clear_inspector()
            self.set_session_controls(True)
            if root is None:
                self.show_error("Page source has no element with readable bounds.")

        self.redraw_canvas()
        self.statusBar().showMessage(f"Session {snapshot.session_id} updated", 4000)

    # --- Canvas ---

    def redraw_canvas(self) -> None:
        self.scene.clear()
        self.pixmap_item = None
        self.highlight_item = None
        self.highlight_label = None

        if self.screenshot is not None:
            pixel_size = (self.screenshot.width(), self.screenshot.height())
            render_size = fit_render_size(pixel_size, self.settings.canvas_max_size)
            pixmap = QPixmap.fromImage(self.screenshot).scaled(
                int(render_size[0]), int(render_size[1]), Qt.IgnoreAspectRatio, Qt.SmoothTransformation)
            self.pixmap_item = self.scene.addPixmap(pixmap)
            self.frame = resolve_device_frame(pixel_size, self.metadata, self.known_devices)
            self.transform = ScaleTransform.for_render_target(self.frame, render_size)
            self.scene.setSceneRect(QRectF(0, 0, render_size[0], render_size[1]))
        else:
            # No screenshot: draw the boxes in logical units.
            self.frame = None
            self.transform = IDENTITY
            if self.root_node is not None:
                b = self.root_node.bounds
                self.scene.setSceneRect(QRectF(b.x, b.y, b.width, b.height))

        outline = QPen(QColor(*Theme.BOX_OUTLINE), 0)
        for _node, box in overlay_boxes(self.root_node, self.transform, self.settings.min_box_size):
            self.scene.addRect(QRectF(box.x, box.y, box.width, box.height), outline)

        self.highlight_item = QGraphicsRectItem()
        pen = QPen(QColor(Theme.BOX_SELECTED), 2, Qt.DashLine); pen.setCosmetic(True)
        self.highlight_item.setPen(pen)
        self.highlight_item.setBrush(QBrush(QColor(*Theme.BOX_SELECTED_FILL)))
        self.highlight_item.setZValue(99); self.highlight_item.hide()
        self.scene.addItem(self.highlight_item)
        self.highlight_label = QGraphicsSimpleTextItem()
        self.highlight_label.setBrush(QBrush(QColor(Theme.BOX_SELECTED)))
        self.highlight_label.setZValue(100); self.highlight_label.hide()
        self.scene.addItem(self.highlight_label)

        self.update_highlight()
        self.update_device_label()
        self.handle_resize()

    def update_highlight(self) -> None:
        if self.highlight_item is None:
            return
        node = self.selection.current
        if node is None:
            self.highlight_item.hide(); self.highlight_label.hide()
            return
        box = self.transform.box_to_pixels(node.bounds)
        self.highlight_item.setRect(QRectF(box.x, box.y, box.width, box.height)); self.highlight_item.show()
        if node.name and box.width > 40 and box.height > 20:
            text = node.name if len(node.name) <= LABEL_MAX_CHARS else node.name[:LABEL_MAX_CHARS] + "..."
            self.highlight_label.setText(text)
            label_y = box.y - 16 if box.y > 16 else box.y + 2
            self.highlight_label.setPos(box.x + 2, label_y); self.highlight_label.show()
        else:
            self.highlight_label.hide()

    def update_device_label(self) -> None:
        count = count_nodes(self.root_node)
        if self.frame is None:
            self.lbl_device.setText(f"No screenshot | Elements: {count}")
            return
        lw, lh = self.frame.device_logical_size
        pw, ph = self.frame.screenshot_pixel_size
        self.lbl_device.setText(
            f"Platform: {self.platform or '?'} | Size source: {self.frame.source} | "
            f"Logical {_fmt(lw)}x{_fmt(lh)} | Screenshot {_fmt(pw)}x{_fmt(ph)} | "
            f"Pixel ratio {self.frame.device_pixel_ratio:.2f} | "
            f"Scale {self.transform.scale_x:.3f}/{self.transform.scale_y:.3f} | Elements: {count}"
        )

    def on_mouse_hover(self, x: float, y: float) -> None:
        lx, ly = self.transform.to_logical((x, y))
        self.lbl_coords.setText(f"X: {_fmt(round(lx, 1))}, Y: {_fmt(round(ly, 1))}")

    def on_canvas_click(self, x: float, y: float) -> None:
        if self.root_node is None:
            return
        node = hit_test(self.root_node, (x, y), self.transform)
        if node is None:
            logger.info("No elements found at click position")
            return
        self.select_node(node, scroll=True)

    # --- Tree & Inspector ---

    def populate_tree(self) -> None:
        self.tree.clear(); self.item_to_node = {}; self.node_to_item = {}
        if self.root_node is None:
            placeholder = QTreeWidgetItem(self.tree); placeholder.setText(0, "No elements")
            self.lbl_tree_count.setText("Elements: 0")
            return
        # Explicit stack so very deep hierarchies stay off the recursion limit.
        stack = [(self.root_node, self.tree, 0)]
        expand = []
        while stack:
            node, parent, depth = stack.pop()
            item = self._add_tree_item(node, parent)
            if node.children and depth < AUTO_EXPAND_DEPTH:
                expand.append(item)
            stack.extend((child, item, depth + 1) for child in reversed(node.children))
        for item in expand:
            item.setExpanded(True)
        count = count_nodes(self.root_node)
        self.lbl_tree_count.setText(f"Elements: {count}")
        logger.info("Element tree updated: %d nodes (%s)", count, self.platform or "unknown platform")

    def _add_tree_item(self, node: ElementNode, parent) -> QTreeWidgetItem:
        item = QTreeWidgetItem(parent)
        item.setText(0, f"[{type_tag(node.element_type)}] {display_name(node)}")
        b = node.bounds
        item.setText(1, f"({_fmt(b.x)}, {_fmt(b.y)}) {_fmt(b.width)} × {_fmt(b.height)}")
        item.setForeground(0, QBrush(QColor(Theme.type_color(node.element_type))))
        if node.children:
            item.setToolTip(0, f"{len(node.children)} children")
        self.item_to_node[id(item)] = node; self.node_to_item[id(node)] = item
        return item

    def expand_to_item(self, item: QTreeWidgetItem) -> None:
        cur = item.parent()
        while cur:
            cur.setExpanded(True)
            cur = cur.parent()

    def on_tree_click(self, item, col) -> None:
        node = self.item_to_node.get(id(item))
        if node:
            self.select_node(node, scroll=False)

    def on_tree_current_changed(self, current, previous) -> None:
        if not current:
            return
        node = self.item_to_node.get(id(current))
        if node and not self.selection.is_selected(node):
            self.select_node(node, scroll=False)

    def select_node(self, node: ElementNode, scroll: bool = True) -> None:
        if self.selection.select(node) is None:
            return
        self.update_highlight()
        self.show_properties(node)
        self.generate_selectors(node)

        if scroll:
            item = self.node_to_item.get(id(node))
            if item:
                self.expand_to_item(item)
                self.tree.blockSignals(True)
                self.tree.setCurrentItem(item)
                self.tree.scrollToItem(item, QAbstractItemView.PositionAtCenter)
                self.tree.blockSignals(False)

    def clear_inspector(self) -> None:
        self.tbl_props.setRowCount(0)
        self.tbl_selectors.setRowCount(0)
        self.current_suggestions = []
        self.txt_loc.setText("Select an element in the tree or on the screenshot.")

    def show_properties(self, node: ElementNode) -> None:
        b = node.bounds
        data = [
            ("Element", display_name(node)), ("Type", node.element_type), ("Name", node.name or "N/A"),
            ("Position", f"({_fmt(b.x)}, {_fmt(b.y)})"), ("Size", f"{_fmt(b.width)} × {_fmt(b.height)}"),
            ("Area", f"{_fmt(b.area)}"), ("Children", str(len(node.children))),
        ]
        data += [(f"@{k}", v) for k, v in node.attributes]

        self.tbl_props.setRowCount(0)
        for i, (k, v) in enumerate(data):
            self.tbl_props.insertRow(i)
            self.tbl_props.setItem(i, 0, QTableWidgetItem(k))
            self.tbl_props.setItem(i, 1, QTableWidgetItem(v))

    def generate_selectors(self, node: ElementNode) -> None:
        self.current_suggestions = synthesize(node, self.platform)
        self.tbl_selectors.setRowCount(0)
        for i, s in enumerate(self.current_suggestions):
            self.tbl_selectors.insertRow(i)
            self.tbl_selectors.setItem(i, 0, QTableWidgetItem(s.label))
            self.tbl_selectors.setItem(i, 1, QTableWidgetItem(s.value))
            self.tbl_selectors.setItem(i, 2, QTableWidgetItem(s.description))
            btn = QPushButton("Copy")
            btn.clicked.connect(lambda _checked=False, value=s.value, label=s.label: self.copy_text(value, label))
            self.tbl_selectors.setCellWidget(i, 3, btn)
        self.update_locators_text()

    def update_locators_text(self) -> None:
        if not self.current_suggestions:
            return
        fmt = self.combo_fmt.currentText()
        out = ""
        for i, s in enumerate(self.current_suggestions):
            prefix = "BEST" if i == 0 else "ALT"
            out += f"[{prefix}] {s.label}\n{format_selector(s, fmt)}\n\n"
        self.txt_loc.setText(out)

    def copy_best_selector(self) -> None:
        best = best_selector(self.current_suggestions)
        if best:
            self.copy_text(format_selector(best, self.combo_fmt.currentText()), best.label)

    def copy_text(self, text: str, label: str) -> None:
        QGuiApplication.clipboard().setText(text)
        self.statusBar().showMessage(f"Copied: {label}", 2000)
        logger.info("Copied %s to clipboard", label)

    # --- View ---

    def enable_fit(self): self.auto_fit = True; self.handle_resize()
    def disable_fit(self): self.auto_fit = False; self.view.resetTransform()

    def handle_resize(self):
        if self.auto_fit and not self.scene.sceneRect().isEmpty():
            self.view.fitInView(self.scene.sceneRect(), Qt.KeepAspectRatio)

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self.handle_resize()

    def closeEvent(self, event):
        if self.fetch_thread and self.fetch_thread.isRunning():
            self.fetch_thread.wait(2000)
        self.settings.max_depth = self.spin_depth.value()
        self.settings.optimize_source = self.chk_optimize.isChecked()
        try:
            self.settings.save()
        except OSError as e:
            logger.warning("Settings not saved: %s", e)
        logging.getLogger("hierarchy_inspector").removeHandler(self.log_handler)
        super().closeEvent(event)
