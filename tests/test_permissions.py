from itertools import product

import pytest

from lockdesk.security.permissions import (
    ROW_ACTIONS,
    Capability,
    PermissionSession,
    PermissionTable,
)

RAW_KEYS = ("UNLOCK", "STEAL", "RESERVE", "ADMINISTER")


@pytest.mark.parametrize("flags", list(product([False, True], repeat=3)))
def test_administer_grants_every_capability(flags: tuple[bool, bool, bool]) -> None:
    raw = dict(zip(("UNLOCK", "STEAL", "RESERVE"), flags), ADMINISTER=True)
    effective = PermissionTable.derive(raw)
    assert all(effective.allows(capability) for capability in Capability)


def test_empty_grant_set_allows_nothing() -> None:
    effective = PermissionTable.derive({})
    assert not any(effective.allows(capability) for capability in Capability)
    assert PermissionTable.derive(None).to_dict() == effective.to_dict()


def test_pairwise_implications() -> None:
    unlock = PermissionTable.derive({"UNLOCK": True})
    assert unlock.allows(Capability.UNLOCK) and unlock.allows(Capability.RESET)
    assert unlock.allows(Capability.EDIT)
    assert not unlock.allows(Capability.STEAL)

    steal = PermissionTable.derive({"STEAL": True})
    assert steal.allows(Capability.STEAL) and steal.allows(Capability.REASSIGN)
    assert steal.allows(Capability.EDIT)
    assert not steal.allows(Capability.RESERVE)

    reserve = PermissionTable.derive({"RESERVE": True})
    assert reserve.allows(Capability.RESERVE) and reserve.allows(Capability.UNRESERVE)
    assert reserve.allows(Capability.EDIT)
    assert not reserve.allows(Capability.ADMINISTER)


def test_keys_are_case_insensitive_and_unknown_keys_ignored() -> None:
    effective = PermissionTable.derive({"unlock": 1, "VIEW": True, Capability.STEAL: "yes"})
    assert effective.allows(Capability.UNLOCK)
    assert effective.allows(Capability.STEAL)
    assert not effective.allows(Capability.ADMINISTER)


def test_derived_capabilities_are_not_raw_grants() -> None:
    # UNRESERVE/REASSIGN/RESET/EDIT given directly grant nothing on their own.
    effective = PermissionTable.derive({"UNRESERVE": True, "REASSIGN": True, "RESET": True, "EDIT": True})
    assert not any(effective.allows(capability) for capability in Capability)


def test_session_load_and_reset() -> None:
    session = PermissionSession()
    assert not session.has(Capability.RESERVE)
    session.load({"RESERVE": True})
    assert session.has(Capability.RESERVE)
    session.load({"STEAL": True})
    assert not session.has(Capability.RESERVE)
    session.reset()
    assert not session.has(Capability.STEAL)


def test_capability_identifiers() -> None:
    assert Capability.REASSIGN.button_id == "resource_action_reassign"
    assert Capability.UNRESERVE.endpoint == "unreserve"
    assert [c.endpoint for c in ROW_ACTIONS] == [
        "unlock",
        "steal",
        "reserve",
        "unreserve",
        "reassign",
        "reset",
    ]
    assert not Capability.EDIT.is_row_action
    with pytest.raises(ValueError):
        Capability.coerce("delete")
