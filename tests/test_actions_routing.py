from dataclasses import dataclass

import pytest

from core import actions as act
from core.actions import ROUTING_TABLE, ComponentId, action_from_name, action_variants, route
from core.errors import ConfigError, RoutingError


def test_every_variant_has_a_route():
    variants = [cls for cls in action_variants() if cls.__module__ == "core.actions"]
    missing = [cls.__name__ for cls in variants if cls not in ROUTING_TABLE]
    assert len(variants) == len(ROUTING_TABLE)
    assert missing == []


def test_unmapped_variant_raises_routing_error():
    @dataclass(frozen=True)
    class Unrouted(act.Action):
        pass

    with pytest.raises(RoutingError):
        route(Unrouted())


@pytest.mark.parametrize(
    "action, target",
    [
        (act.AddTask(None), ComponentId.DATABASE_SET_TASKS),
        (act.RemoveWorkspace(1), ComponentId.DATABASE_SET_WORKSPACES),
        (act.RequestTasksData(1), ComponentId.DATABASE_GET),
        (act.RequestWorkspacesData(), ComponentId.DATABASE_GET),
        (act.NewTasksData((), 1), ComponentId.TASKS),
        (act.HighlightWorkspace("x"), ComponentId.WORKSPACES),
        (act.SortTasks(None), ComponentId.TASKS),
        (act.ToggleSortDirection(), ComponentId.SORT_MENU),
        (act.GoDown(), ComponentId.FOCUSED),
        (act.SendKeyEvent("a"), ComponentId.FOCUSED),
        (act.Cancel(), ComponentId.FOCUSED),
        (act.Tick(), ComponentId.ALL),
        (act.SelectWorkspace(3), ComponentId.ALL),
        (act.OpenSortMenu(), ComponentId.ALL),
        (act.ExitSortMenu(ComponentId.TASKS), ComponentId.ALL),
        (act.Help(), ComponentId.ALL),
    ],
)
def test_route_targets(action, target):
    assert route(action) is target
    assert action.target is target


def test_action_from_name_builds_fieldless_variants():
    assert action_from_name("GoDown") == act.GoDown()
    assert action_from_name(" Quit ").variant == "Quit"


@pytest.mark.parametrize("name", ["Nope", "SelectWorkspace", ""])
def test_action_from_name_rejects_unknown_or_parametrized(name):
    with pytest.raises(ConfigError):
        action_from_name(name)
