import pytest
from PySide6.QtCore import QEvent, QPoint, QPointF, QThreadPool, Qt
from PySide6.QtGui import QImage, QMouseEvent, QWheelEvent

from fontmap.app.search import SearchController
from fontmap.app.state import Store
from fontmap.app.sync import SyncController
from fontmap.app.ui.canvas import FontMapCanvas
from fontmap.app.ui.colors import UNCLUSTERED_COLOR, cluster_color
from fontmap.app.ui.main_window import MainWindow
from fontmap.app.ui.results_list import KEY_ROLE, ResultsList
from fontmap.app.ui.weight_selector import WeightSelector
from fontmap.app.ui.zoom_controls import ZoomControls
from fontmap.model.fonts import SessionConfig
from fontmap.model.viewport import INITIAL_VIEW_RECT


@pytest.fixture
def store(qapp, make_font):
    store = Store()
    store.apply_fonts({
        # logical (0, 0) and (600, 600); on a 700px square at the initial view
        # they sit at screen (50, 50) and (650, 650)
        "regular": make_font("regular", "Inter Regular", family_name="Inter", vector=(0.0, 0.0), cluster_id=1),
        "bold": make_font("bold", "Inter Bold", family_name="Inter", vector=(10.0, 10.0), weight=700),
        "mono": make_font("mono", "Mono", vector=(0.0, 10.0)),
    })
    return store


@pytest.fixture
def canvas(store):
    canvas = FontMapCanvas(store)
    canvas.resize(700, 700)
    return canvas


def test_click_selects_point_under_pointer(canvas, store):
    assert canvas.select_at(QPointF(58.0, 44.0)) == "regular"
    assert store.selected_key == "regular"


def test_miss_keeps_selection(canvas, store):
    canvas.select_at(QPointF(50.0, 50.0))
    assert canvas.select_at(QPointF(350.0, 350.0)) is None
    assert store.selected_key == "regular"


def test_only_active_weights_are_selectable(canvas, store):
    assert canvas.select_at(QPointF(650.0, 650.0)) is None
    store.set_selected_weights([400, 700])
    assert canvas.select_at(QPointF(650.0, 650.0)) == "bold"


def test_filtered_out_points_are_not_selectable(canvas, store):
    store.commit_search_query("mono")
    assert store.selected_key == "mono"
    assert canvas.select_at(QPointF(50.0, 50.0)) is None
    assert {v.key for v in canvas.selectable_visuals()} == {"mono"}


def test_modifier_click_requests_copy(canvas):
    copied = []
    canvas.copy_requested.connect(copied.append)
    canvas.select_at(QPointF(50.0, 50.0), Qt.KeyboardModifier.ControlModifier)
    canvas.select_at(QPointF(50.0, 50.0), Qt.KeyboardModifier.ShiftModifier)
    canvas.select_at(QPointF(50.0, 50.0))
    assert copied == ["Inter Regular", "Inter"]


LEFT = Qt.MouseButton.LeftButton
RIGHT = Qt.MouseButton.RightButton
NO_BUTTON = Qt.MouseButton.NoButton


def mouse(kind, x, y, button, buttons):
    pos = QPointF(x, y)
    return QMouseEvent(kind, pos, pos, button, buttons, Qt.KeyboardModifier.NoModifier)


def press(canvas, x, y, button, buttons):
    canvas.mousePressEvent(mouse(QEvent.Type.MouseButtonPress, x, y, button, buttons))


def move(canvas, x, y, buttons):
    canvas.mouseMoveEvent(mouse(QEvent.Type.MouseMove, x, y, NO_BUTTON, buttons))


def release(canvas, x, y, button, buttons):
    canvas.mouseReleaseEvent(mouse(QEvent.Type.MouseButtonRelease, x, y, button, buttons))


def test_left_press_selects(canvas, store):
    press(canvas, 58.0, 44.0, LEFT, LEFT)
    assert store.selected_key == "regular"


def test_left_press_while_panning_does_not_select(canvas, store):
    press(canvas, 300.0, 300.0, RIGHT, RIGHT)
    press(canvas, 50.0, 50.0, LEFT, RIGHT | LEFT)
    assert store.selected_key is None

    release(canvas, 50.0, 50.0, RIGHT, LEFT)
    press(canvas, 50.0, 50.0, LEFT, LEFT)
    assert store.selected_key == "regular"


def test_motion_without_buttons_is_ignored(canvas, store):
    move(canvas, 50.0, 50.0, NO_BUTTON)
    assert store.selected_key is None
    assert canvas.viewport.rect == INITIAL_VIEW_RECT


def test_right_drag_pans_and_never_selects(canvas, store):
    changes = []
    canvas.view_changed.connect(changes.append)

    press(canvas, 300.0, 300.0, RIGHT, RIGHT)
    move(canvas, 50.0, 50.0, RIGHT)
    move(canvas, 50.0, 650.0, RIGHT | LEFT)
    release(canvas, 50.0, 650.0, RIGHT, NO_BUTTON)

    assert store.selected_key is None
    rect = canvas.viewport.rect
    # 1 logical unit per pixel on a 700px surface at the initial view
    assert rect.x == pytest.approx(INITIAL_VIEW_RECT.x + 250.0)
    assert rect.y == pytest.approx(INITIAL_VIEW_RECT.y - 350.0)
    assert rect.width == pytest.approx(INITIAL_VIEW_RECT.width)
    assert len(changes) == 2

    # released: motion without buttons no longer pans
    move(canvas, 300.0, 300.0, NO_BUTTON)
    assert canvas.viewport.rect == rect


def test_left_drag_selects_along_the_way(canvas, store):
    press(canvas, 300.0, 300.0, LEFT, LEFT)
    assert store.selected_key is None
    move(canvas, 52.0, 648.0, LEFT)
    assert store.selected_key == "mono"


def wheel(canvas, x, y, delta):
    pos = QPointF(x, y)
    event = QWheelEvent(
        pos, pos, QPoint(0, 0), QPoint(0, delta), NO_BUTTON, Qt.KeyboardModifier.NoModifier,
        Qt.ScrollPhase.NoScrollPhase, False,
    )
    canvas.wheelEvent(event)


def test_wheel_zooms_about_the_pointer(canvas):
    surface = canvas.surface()
    anchor = canvas.viewport.screen_to_logical(200.0, 100.0, surface)

    wheel(canvas, 200.0, 100.0, 120)
    assert canvas.viewport.rect.width == pytest.approx(INITIAL_VIEW_RECT.width / 1.1)
    assert canvas.viewport.screen_to_logical(200.0, 100.0, surface) == pytest.approx(anchor)

    wheel(canvas, 200.0, 100.0, -120)
    wheel(canvas, 200.0, 100.0, -120)
    assert canvas.viewport.rect.width == pytest.approx(INITIAL_VIEW_RECT.width * 1.1)
    assert canvas.viewport.screen_to_logical(200.0, 100.0, surface) == pytest.approx(anchor)


def test_zoom_buttons_drive_the_canvas(canvas):
    controls = ZoomControls(canvas, canvas)
    controls.zoom_in_button.click()
    assert canvas.viewport.rect.width == pytest.approx(INITIAL_VIEW_RECT.width / 1.1 ** 3)
    controls.zoom_out_button.click()
    assert canvas.viewport.rect.width == pytest.approx(INITIAL_VIEW_RECT.width)
    controls.zoom_in_button.click()
    controls.reset_button.click()
    assert canvas.viewport.rect == INITIAL_VIEW_RECT

def test_session_change_resets_view(canvas, store):
    canvas.zoom_in()
    assert canvas.viewport.rect != INITIAL_VIEW_RECT
    store.set_session_id("other")
    assert canvas.viewport.rect == INITIAL_VIEW_RECT


def test_paint_with_and_without_samples(canvas, store):
    store.select("regular")
    assert not canvas.grab().isNull()
    store.apply_fonts({})
    assert not canvas.grab().isNull()


def test_cluster_colors():
    assert cluster_color(-1) == UNCLUSTERED_COLOR
    assert cluster_color(3) == cluster_color(3)
    assert cluster_color(1) != cluster_color(2)


def test_weight_selector_follows_session(store):
    selector = WeightSelector(store)
    assert set(selector.buttons) == {400}

    store.apply_session_config(SessionConfig("s", weights=(400, 700)))
    assert set(selector.buttons) == {400, 700}
    assert all(b.isChecked() for b in selector.buttons.values())

    selector.buttons[700].setChecked(False)
    assert store.selected_weights == (400,)

    # the last checked weight cannot be unchecked
    selector.buttons[400].setChecked(False)
    assert store.selected_weights == (400,)
    assert selector.buttons[400].isChecked()


class NullBackend:
    def get_latest_session_id(self):
        return None

    def get_session_info(self, session_id):
        return None

    def get_compressed_vectors(self, session_id):
        return None

    def get_session_directory(self, session_id):
        return session_id

    def get_available_sessions(self):
        return []

    def delete_session(self, session_id):
        return False


def test_main_window_shows_state(store):
    pool = QThreadPool()
    sync = SyncController(store, NullBackend(), pool=pool)
    window = MainWindow(store, sync, SearchController(store))

    store.select("mono")
    assert "Mono" in window.selection_label.text()
    assert window.results_list.list.currentItem().data(KEY_ROLE) == "mono"

    store.set_processing(True)
    store.set_progress_denominator(3)
    store.decrease_progress_denominator(4)
    assert window.progress_label.text() == "0 / -1"
    assert not window.act_run.isEnabled()
    assert window.act_stop.isEnabled()

    assert "3 samples" in window.session_label.text()
    pool.waitForDone()


def test_results_list_order_follows_query(store):
    results = ResultsList(store)
    # clustered first by cluster id, then family name and weight
    assert results.keys() == ["bold", "mono", "regular"]
    assert results.title.text() == "3 samples"

    store.commit_search_query("mono")
    assert results.keys()[0] == "mono"
    assert "regular" not in results.keys()
    assert results.list.currentItem().data(KEY_ROLE) == "mono"

    store.commit_search_query("")
    assert results.keys() == ["bold", "mono", "regular"]


def test_results_list_row_selects_and_follows_map(store):
    results = ResultsList(store)
    results.list.setCurrentRow(results.keys().index("regular"))
    assert store.selected_key == "regular"

    store.select("mono")
    assert results.list.currentItem().data(KEY_ROLE) == "mono"

    store.select(None)
    assert results.list.currentItem() is None


def test_results_list_previews_toggle(store, tmp_path):
    sample_dir = tmp_path / "mono"
    sample_dir.mkdir()
    image = QImage(16, 8, QImage.Format.Format_RGB32)
    image.fill(Qt.GlobalColor.black)
    assert image.save(str(sample_dir / "sample.png"))

    results = ResultsList(store)
    def icons():
        return {key: not results.list.item(row).icon().isNull() for row, key in enumerate(results.keys())}

    assert not any(icons().values())

    store.set_session_directory(tmp_path)
    assert icons() == {"bold": False, "mono": True, "regular": False}

    results.images_button.setChecked(False)
    assert not results.show_images
    assert not any(icons().values())

    results.images_button.setChecked(True)
    assert icons()["mono"]
