import pytest
from prompt_toolkit.keys import Keys

from core import actions as act
from core.errors import StorageError
from core.interface.tui_app import DomeTUI, format_keys, key_name
from core.models import AddTask, AddWorkspace
from infrastructure.yaml_store import YamlRecordStore


def _text(formatted):
    return "".join(fragment[1] for fragment in formatted)


def _bindings_for(tui, key):
    return [b for b in tui.app.key_bindings.bindings if b.keys == (key,)]


def test_key_name_normalizes_prompt_toolkit_keys():
    assert key_name(Keys.ControlM) == "c-m"
    assert key_name(Keys.Escape) == "escape"
    assert key_name("j") == "j"


def test_format_keys():
    assert format_keys(("g", "g")) == "gg"
    assert format_keys((" ", "c-m")) == "spaceenter"


def test_every_key_is_routed_eagerly():
    tui = DomeTUI(YamlRecordStore())
    assert tui.app.key_bindings.timeout == 0
    for key in (Keys.Any, Keys.Escape, Keys.ControlC, Keys.Up):
        bindings = _bindings_for(tui, key)
        assert bindings, f"no binding for {key}"
        assert all(b.eager() for b in bindings)
    assert not _bindings_for(tui, Keys.CPRResponse)


def test_start_loads_data_and_renders():
    store = YamlRecordStore()
    ws = store.add_workspace(AddWorkspace("Home"))
    store.add_task(AddTask("Buy milk", ws))
    tui = DomeTUI(store)

    tui.start()

    assert "Home" in _text(tui.workspaces.render())
    assert "Buy milk" in _text(tui.tasks.render())
    assert "NAVIGATION" in _text(tui._status_text())
    assert "GoDown" in _text(tui._help_text())


def test_pump_applies_quit_flag_outside_a_running_app():
    tui = DomeTUI(YamlRecordStore())
    tui.start()
    tui.dispatcher.send(act.Quit())
    tui.pump()
    assert tui.dispatcher.should_quit


def test_fatal_error_propagates_when_not_running():
    class BrokenStore(YamlRecordStore):
        def list_workspaces(self):
            raise StorageError("unreadable")

    tui = DomeTUI(BrokenStore())
    with pytest.raises(StorageError):
        tui.start()
