"""Tests for the pure per-unit progress transitions."""

from datetime import datetime

import pytest

from app.models.mission import SubmittedFile, UnitMissionProgress
from app.services.unit_progress import (
    FileAttached,
    FileCleared,
    StatusChange,
    apply_unit_event,
    initial_unit_progress,
    reconcile_unit_progress,
    with_unit_entry,
)

T0 = datetime(2025, 3, 3, 9, 0)
T1 = datetime(2025, 3, 3, 10, 0)
T2 = datetime(2025, 3, 3, 11, 0)


@pytest.fixture
def report_file():
    return SubmittedFile(
        name="relatorio.pdf",
        type="application/pdf",
        size=2048,
        uploaded_by_id="user1",
        uploaded_by_name="Ana",
        uploaded_at=T1,
    )


def test_initial_progress_is_pending_per_unit():
    progress = initial_unit_progress(["u1", "u2"], "admin1", "Admin", T0)

    assert [p.unit_id for p in progress] == ["u1", "u2"]
    assert all(p.status == "Pendente" for p in progress)
    assert all(p.submitted_file is None for p in progress)
    assert all(p.last_updated_by_id == "admin1" and p.updated_at == T0 for p in progress)


def test_only_matching_entry_is_replaced():
    u1 = UnitMissionProgress(unit_id="u1")
    u2 = UnitMissionProgress(unit_id="u2")

    result = apply_unit_event([u1, u2], "u1", StatusChange(status="Atrasada"), "admin1", "Admin", T1)

    assert result[0].status == "Atrasada"
    assert result[0] is not u1
    assert result[1] is u2
    assert u1.status == "Pendente"


def test_status_change_stamps_updater():
    result = apply_unit_event(
        [UnitMissionProgress(unit_id="u1")], "u1", StatusChange(status="Não Cumprida"), "admin1", "Admin", T1
    )

    assert result[0].last_updated_by_id == "admin1"
    assert result[0].last_updated_by_name == "Admin"
    assert result[0].updated_at == T1
    assert result[0].submitted_at is None


def test_first_fulfillment_sets_submitted_at_once():
    progress = [UnitMissionProgress(unit_id="u1")]

    first = apply_unit_event(progress, "u1", StatusChange(status="Cumprida"), "u", "U", T1)
    second = apply_unit_event(first, "u1", StatusChange(status="Cumprida"), "u", "U", T2)

    assert first[0].submitted_at == T1
    assert second[0].submitted_at == T1
    assert second[0].updated_at == T2


def test_leaving_fulfilled_keeps_submitted_at():
    progress = [UnitMissionProgress(unit_id="u1", status="Cumprida", submitted_at=T0)]

    result = apply_unit_event(progress, "u1", StatusChange(status="Pendente"), "u", "U", T1)

    assert result[0].status == "Pendente"
    assert result[0].submitted_at == T0


@pytest.mark.parametrize("prior_status", ["Pendente", "Cumprida", "Não Cumprida", "Atrasada"])
def test_file_attached_forces_fulfilled(prior_status, report_file):
    progress = [UnitMissionProgress(unit_id="u1", status=prior_status, submitted_at=T0)]

    result = apply_unit_event(progress, "u1", FileAttached(file=report_file), "user1", "Ana", T2)

    assert result[0].status == "Cumprida"
    assert result[0].submitted_file == report_file
    # Uploads overwrite submitted_at even when it was already set
    assert result[0].submitted_at == T2


def test_file_cleared_resets_to_pending(report_file):
    progress = [
        UnitMissionProgress(unit_id="u1", status="Cumprida", submitted_file=report_file, submitted_at=T1)
    ]

    result = apply_unit_event(progress, "u1", FileCleared(), "user1", "Ana", T2)

    assert result[0].status == "Pendente"
    assert result[0].submitted_file is None
    assert result[0].submitted_at == T1


def test_unknown_unit_leaves_progress_unchanged():
    u1 = UnitMissionProgress(unit_id="u1")

    result = apply_unit_event([u1], "u9", StatusChange(status="Cumprida"), "u", "U", T1)

    assert result == [u1]
    assert result[0] is u1


def test_reconcile_adds_new_units_and_drops_removed():
    u1 = UnitMissionProgress(unit_id="u1", status="Cumprida", submitted_at=T0)
    u2 = UnitMissionProgress(unit_id="u2")

    result = reconcile_unit_progress([u1, u2], ["u1", "u3"], "admin1", "Admin", T1)

    assert [p.unit_id for p in result] == ["u1", "u3"]
    assert result[0] is u1
    assert result[1].status == "Pendente"
    assert result[1].updated_at == T1
    assert result[1].last_updated_by_id == "admin1"
    assert result[1].last_updated_by_name == "Admin"


def test_reconcile_with_same_targets_is_identity():
    u1 = UnitMissionProgress(unit_id="u1")

    result = reconcile_unit_progress([u1], ["u1"], "admin1", "Admin", T1)

    assert result == [u1]
    assert result[0] is u1


def test_with_unit_entry_appends_pending_entry_for_new_unit():
    shared = UnitMissionProgress(unit_id="ALL")

    result = with_unit_entry([shared], "u1", "user1", "Ana", T1)

    assert [p.unit_id for p in result] == ["ALL", "u1"]
    assert result[0] is shared
    assert result[1].status == "Pendente"
    assert result[1].last_updated_by_id == "user1"


def test_with_unit_entry_keeps_existing_entry():
    progress = [UnitMissionProgress(unit_id="u1", status="Cumprida")]

    assert with_unit_entry(progress, "u1", "user1", "Ana", T1) is progress
