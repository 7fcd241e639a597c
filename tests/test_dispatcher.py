import logging

import pytest

from application.dispatcher import ActionQueue, Dispatcher
from application.keymap import KeybindingMatcher, build_keymaps
from core import actions as act
from core.actions import ComponentId, Mode
from core.errors import StorageError
from core.interface.components import Component
from core.models import AddTask, AddWorkspace, UpdateTask
from infrastructure.yaml_store import YamlRecordStore

BINDINGS = {
    "Global": {"<q>": "Quit"},
    "Navigation": {"<j>": "GoDown", "<g><g>": "GoToTop"},
}


class RecordingComponent(Component):
    def __init__(self, component_id):
        super().__init__()
        self.component_id = component_id
        self.received = []
        self.focus_calls = []
        self.initialized = False

    def init(self):
        self.initialized = True

    def update(self, action):
        self.received.append(action)

    def focus(self, focused):
        super().focus(focused)
        self.focus_calls.append(focused)

    def variants(self):
        return [a.variant for a in self.received]


def _dispatcher(store=None, ids=(ComponentId.WORKSPACES, ComponentId.TASKS, ComponentId.SORT_MENU), **kwargs):
    components = {cid: RecordingComponent(cid) for cid in ids}
    dispatcher = Dispatcher(
        store if store is not None else YamlRecordStore(),
        components,
        KeybindingMatcher(build_keymaps(BINDINGS)),
        **kwargs,
    )
    dispatcher.start()
    return dispatcher, components


def test_queue_is_fifo():
    queue = ActionQueue()
    queue.send(act.GoUp())
    queue.send(act.GoDown())
    assert queue.try_recv() == act.GoUp()
    assert queue.try_recv() == act.GoDown()
    assert queue.try_recv() is None
    assert queue.empty()


def test_start_registers_and_focuses_workspaces():
    dispatcher, components = _dispatcher()
    assert all(c.initialized and c.action_queue is dispatcher.queue for c in components.values())
    assert dispatcher.focused is ComponentId.WORKSPACES
    assert components[ComponentId.WORKSPACES].is_focused


def test_broadcast_reaches_every_component():
    dispatcher, components = _dispatcher()
    dispatcher.dispatch(act.Tick())
    assert all(c.variants() == ["Tick"] for c in components.values())


def test_focused_action_goes_to_focused_only():
    dispatcher, components = _dispatcher()
    dispatcher.dispatch(act.GoDown())
    assert components[ComponentId.WORKSPACES].variants() == ["GoDown"]
    assert components[ComponentId.TASKS].received == []


def test_focus_change_notifies_both_sides():
    dispatcher, components = _dispatcher()
    dispatcher.dispatch(act.SelectWorkspace(1))
    dispatcher.dispatch(act.FocusOnTasks())
    assert dispatcher.focused is ComponentId.TASKS
    assert components[ComponentId.WORKSPACES].focus_calls == [True, False]
    assert components[ComponentId.TASKS].focus_calls == [True]


def test_focus_on_tasks_needs_a_workspace():
    dispatcher, _ = _dispatcher()
    dispatcher.dispatch(act.FocusOnTasks())
    assert dispatcher.focused is ComponentId.WORKSPACES


def test_unselect_moves_focus_back_to_workspaces():
    dispatcher, _ = _dispatcher()
    dispatcher.dispatch(act.SelectWorkspace(1))
    dispatcher.dispatch(act.FocusOnTasks())
    dispatcher.dispatch(act.UnselectWorkspace())
    assert dispatcher.selected_workspace is None
    assert dispatcher.focused is ComponentId.WORKSPACES


def test_sort_menu_open_and_exit():
    dispatcher, components = _dispatcher()
    dispatcher.send(act.OpenSortMenu())
    dispatcher.drain()
    assert dispatcher.focused is ComponentId.SORT_MENU
    assert act.SetupSortMenu(ComponentId.WORKSPACES) in components[ComponentId.SORT_MENU].received

    dispatcher.dispatch(act.ExitSortMenu(ComponentId.WORKSPACES))
    assert dispatcher.focused is ComponentId.WORKSPACES


def test_workspace_write_triggers_refetch():
    store = YamlRecordStore()
    dispatcher, components = _dispatcher(store)
    dispatcher.send(act.AddWorkspace(AddWorkspace("Home")))
    dispatcher.drain()

    arrivals = [a for a in components[ComponentId.WORKSPACES].received if isinstance(a, act.NewWorkspacesData)]
    assert [w.name for w in arrivals[-1].workspaces] == ["Home"]


def test_task_write_refetches_selected_workspace():
    store = YamlRecordStore()
    ws = store.add_workspace(AddWorkspace("Home"))
    dispatcher, components = _dispatcher(store)
    dispatcher.dispatch(act.SelectWorkspace(ws))

    dispatcher.send(act.AddTask(AddTask("a", ws)))
    dispatcher.drain()

    [arrival] = [a for a in components[ComponentId.TASKS].received if isinstance(a, act.NewTasksData)]
    assert arrival.workspace_id == ws
    assert [t.name for t in arrival.tasks] == ["a"]


def test_duplicate_name_becomes_highlight():
    store = YamlRecordStore()
    ws = store.add_workspace(AddWorkspace("Home"))
    store.add_task(AddTask("a", ws))
    dispatcher, components = _dispatcher(store)
    dispatcher.dispatch(act.SelectWorkspace(ws))

    dispatcher.send(act.AddTask(AddTask("a", ws)))
    dispatcher.send(act.AddWorkspace(AddWorkspace("Home")))
    dispatcher.drain()

    assert act.HighlightTask("a") in components[ComponentId.TASKS].received
    assert act.HighlightWorkspace("Home") in components[ComponentId.WORKSPACES].received
    assert len(store.list_tasks(ws)) == 1


def test_stale_id_is_logged_and_ignored(caplog):
    caplog.set_level(logging.WARNING, logger="dome.dispatch")
    dispatcher, _ = _dispatcher()
    dispatcher.send(act.UpdateTask(UpdateTask(id=404, completed=True)))
    dispatcher.drain()
    assert "Ignoring UpdateTask" in caplog.text


def test_routing_gap_is_logged(caplog):
    caplog.set_level(logging.ERROR, logger="dome.dispatch")
    dispatcher, _ = _dispatcher(ids=(ComponentId.WORKSPACES, ComponentId.TASKS))
    dispatcher.dispatch(act.ToggleSortDirection())
    assert "Component not found" in caplog.text


def test_storage_error_is_fatal():
    class BrokenStore(YamlRecordStore):
        def add_workspace(self, info):
            raise StorageError("disk gone")

    dispatcher, _ = _dispatcher(BrokenStore())
    dispatcher.send(act.AddWorkspace(AddWorkspace("x")))
    with pytest.raises(StorageError):
        dispatcher.drain()


def test_keys_resolve_through_matcher():
    dispatcher, components = _dispatcher()
    dispatcher.handle_key("g")
    dispatcher.handle_key("g")
    dispatcher.drain()
    assert components[ComponentId.WORKSPACES].variants() == ["GoToTop"]


def test_insert_mode_forwards_raw_keys():
    dispatcher, components = _dispatcher()
    dispatcher.dispatch(act.EnterInsertMode())
    assert dispatcher.mode is Mode.INSERT
    dispatcher.handle_key("q", "q")
    dispatcher.drain()
    assert act.SendKeyEvent("q", "q") in components[ComponentId.WORKSPACES].received
    assert not dispatcher.should_quit


def test_leaving_insert_mode_cancels_pending_chord():
    dispatcher, _ = _dispatcher()
    dispatcher.handle_key("g")
    dispatcher.dispatch(act.LeaveInsertMode())
    assert dispatcher.matcher.pending == ()
    assert dispatcher.mode is Mode.NAVIGATION


def test_tick_advances_chord_deadline():
    dispatcher, components = _dispatcher()
    dispatcher.handle_key("g")
    for _ in range(4):
        dispatcher.dispatch(act.Tick())
    dispatcher.handle_key("g")
    dispatcher.drain()
    assert "GoToTop" not in components[ComponentId.WORKSPACES].variants()


def test_lifecycle_flags_and_callbacks():
    rendered = []
    cleared = []
    dispatcher, _ = _dispatcher(on_render=lambda: rendered.append(1), on_clear=lambda: cleared.append(1))
    dispatcher.dispatch(act.Render())
    dispatcher.dispatch(act.ClearScreen())
    dispatcher.dispatch(act.Resize(120, 40))
    dispatcher.dispatch(act.Suspend())
    assert dispatcher.should_suspend
    dispatcher.dispatch(act.Resume())
    dispatcher.dispatch(act.Quit())
    assert rendered == [1] and cleared == [1]
    assert dispatcher.size == (120, 40)
    assert not dispatcher.should_suspend
    assert dispatcher.should_quit
