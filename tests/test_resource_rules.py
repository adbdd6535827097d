from __future__ import annotations

from typing import Any

import pytest

from lockdesk.resources.model import Resource
from lockdesk.resources.rules import ResourceStateRules
from lockdesk.security.permissions import Capability, PermissionSession


def rules_for(**raw: Any) -> ResourceStateRules:
    session = PermissionSession()
    session.load(raw)
    return ResourceStateRules(session)


def test_free_resource_with_reserve_permission() -> None:
    rules = rules_for(RESERVE=True)
    resource = Resource.from_snapshot(
        {
            "resourceName": "printer",
            "isLocked": False,
            "isReserved": False,
            "isQueued": False,
            "isEphemeral": False,
            "isReservedByCurrentUser": False,
        }
    )
    assert rules.can_reserve(resource)
    assert not rules.can_unlock(resource)
    assert not rules.can_steal(resource)
    assert rules.allowed_actions(resource) == [Capability.RESERVE]


def test_admin_may_unreserve_and_reassign_foreign_reservation() -> None:
    rules = rules_for(ADMINISTER=True)
    resource = Resource("board", is_reserved=True, is_reserved_by_current_user=False)
    assert rules.can_unreserve(resource)
    assert rules.can_reassign(resource)


@pytest.mark.parametrize("by_me", [False, True])
def test_admin_unreserve_depends_only_on_reserved(by_me: bool) -> None:
    rules = rules_for(ADMINISTER=True)
    free = Resource("x", is_reserved_by_current_user=by_me)
    assert not rules.can_unreserve(free)
    reserved = Resource("x", is_reserved=True, is_reserved_by_current_user=by_me)
    assert rules.can_unreserve(reserved)


@pytest.mark.parametrize("raw", [{"STEAL": True}, {"ADMINISTER": True}])
def test_ephemeral_resources_cannot_be_stolen(raw: dict) -> None:
    rules = rules_for(**raw)
    assert rules.can_steal(Resource("vm", is_locked=True))
    assert not rules.can_steal(Resource("vm", is_locked=True, is_ephemeral=True))


@pytest.mark.parametrize(
    "flags",
    [
        {"is_locked": True},
        {"is_reserved": True},
        {"is_queued": True},
        {"is_locked": True, "is_reserved": True},
    ],
)
def test_busy_resources_cannot_be_reserved(flags: dict) -> None:
    rules = rules_for(ADMINISTER=True)
    assert not rules.can_reserve(Resource("r", **flags))


def test_unreserve_own_reservation_requires_reserve_grant() -> None:
    mine = Resource("r", is_reserved=True, is_reserved_by_current_user=True)
    theirs = Resource("r", is_reserved=True)
    assert rules_for(RESERVE=True).can_unreserve(mine)
    assert not rules_for(RESERVE=True).can_unreserve(theirs)
    assert not rules_for(UNLOCK=True).can_unreserve(mine)


def test_reassign_rules() -> None:
    mine = Resource("r", is_reserved=True, is_reserved_by_current_user=True)
    # needs both UNRESERVE (from RESERVE) and REASSIGN (from STEAL)
    assert not rules_for(RESERVE=True).can_reassign(mine)
    assert not rules_for(STEAL=True).can_reassign(mine)
    assert rules_for(RESERVE=True, STEAL=True).can_reassign(mine)

    locked = Resource("r", is_locked=True)
    assert not rules_for(RESERVE=True, STEAL=True, UNLOCK=True).can_reassign(locked)
    assert rules_for(ADMINISTER=True).can_reassign(locked)
    assert not rules_for(ADMINISTER=True).can_reassign(Resource("r"))


def test_unlock_covers_locked_and_reserved() -> None:
    rules = rules_for(UNLOCK=True)
    assert rules.can_unlock(Resource("r", is_locked=True))
    assert rules.can_unlock(Resource("r", is_reserved=True))
    assert rules.can_unlock(Resource("r", is_locked=True, is_reserved=True))
    assert not rules.can_unlock(Resource("r", is_queued=True))


def test_reset_rules() -> None:
    unlock = rules_for(UNLOCK=True)
    assert unlock.can_reset(Resource("r", is_locked=True))
    assert unlock.can_reset(Resource("r", is_queued=True))
    assert not unlock.can_reset(Resource("r"))
    # RESET comes from UNLOCK only
    assert not rules_for(RESERVE=True).can_reset(
        Resource("r", is_reserved=True, is_reserved_by_current_user=True)
    )


def test_edit_note_visibility() -> None:
    assert rules_for(STEAL=True).can_edit_note()
    assert not rules_for().can_edit_note()


def test_allows_rejects_non_row_actions() -> None:
    with pytest.raises(KeyError):
        rules_for(ADMINISTER=True).allows(Capability.EDIT, Resource("r"))


def test_rules_follow_reloaded_permissions() -> None:
    session = PermissionSession()
    rules = ResourceStateRules(session)
    resource = Resource("r")
    assert not rules.can_reserve(resource)
    session.load({"RESERVE": True})
    assert rules.can_reserve(resource)
