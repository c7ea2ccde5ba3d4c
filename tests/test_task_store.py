# tests/test_task_store.py

from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from backlist.errors import ConfigurationError, InvariantViolation
from backlist.tasks.task_api import add_deadline_task, add_recurring_task
from backlist.tasks.task_models import Priority
from backlist.tasks.task_store import TARGET_ALLOWANCE_KEY, TaskStore

from .fakes import DAY, NOW


def test_add_and_get_task(task_store: TaskStore) -> None:
    task_id = task_store.add_task(
        summary="  Wash dishes ",
        description="Use soap",
        priority=Priority.P2,
        now_ts=NOW,
    )
    assert task_id > 0

    task = task_store.get_task(task_id)
    assert task is not None
    assert task.summary == "Wash dishes"
    assert task.description == "Use soap"
    assert task.priority is Priority.P2
    assert task.from_date == NOW
    assert (task.times_shown, task.times_selected, task.archived) == (0, 0, False)
    assert task_store.count_tasks() == 1


def test_priority_is_stored_as_text_tag(task_store: TaskStore, settings) -> None:
    task_id = task_store.add_task(summary="Tagged", priority=Priority.P3)

    conn = sqlite3.connect(str(settings.db_path))
    try:
        (raw,) = conn.execute("SELECT priority FROM tasks WHERE id = ?", (task_id,)).fetchone()
        assert raw == "P3"
        # legacy integer rows are still readable
        conn.execute("UPDATE tasks SET priority = '0' WHERE id = ?", (task_id,))
        conn.commit()
    finally:
        conn.close()

    task = task_store.get_task(task_id)
    assert task is not None and task.priority is Priority.P0


def test_add_task_validation(task_store: TaskStore) -> None:
    with pytest.raises(ValueError):
        task_store.add_task(summary="   ")
    with pytest.raises(ValueError):
        task_store.add_task(summary="Lost", folder_id=42)
    with pytest.raises(InvariantViolation):
        task_store.add_task(summary="No lead", due_date=NOW + DAY)
    with pytest.raises(InvariantViolation):
        task_store.add_task(summary="Both", due_date=NOW + DAY, lead_days=1, repeat_interval=3)
    assert task_store.count_tasks() == 0


def test_counters_archive_and_reschedule(task_store: TaskStore) -> None:
    task_id = task_store.add_task(summary="Counter", now_ts=NOW)

    task_store.record_shown(task_id)
    task_store.record_shown(task_id)
    task_store.record_selected(task_id)
    task_store.reschedule_task(task_id, NOW + DAY)

    task = task_store.get_task(task_id)
    assert task is not None
    assert (task.times_shown, task.times_selected, task.from_date) == (2, 1, NOW + DAY)

    task_store.archive_task(task_id)
    assert task_store.list_open_tasks() == []

    with pytest.raises(ValueError):
        task_store.record_shown(999)


def test_active_tasks_skip_cooling_down_repeating_tasks(task_store: TaskStore) -> None:
    cooling = task_store.add_task(summary="Cooling", repeat_interval=7, now_ts=NOW - 3 * DAY)
    ready = task_store.add_task(summary="Ready", repeat_interval=7, now_ts=NOW - 8 * DAY)
    one_off = task_store.add_task(summary="Once", now_ts=NOW - 30 * DAY)

    active = [t.id for t in task_store.list_active_tasks(now_ts=NOW)]
    open_ = [t.id for t in task_store.list_open_tasks()]

    assert active == [ready, one_off]
    assert open_ == [cooling, ready, one_off]


def test_task_api_helpers(task_store: TaskStore) -> None:
    rec = add_recurring_task(task_store, summary="Laundry", repeat_interval=3)
    due = add_deadline_task(task_store, summary="Taxes", days_until_due=10, lead_days=3, now_ts=NOW)

    task = task_store.get_task(due)
    assert task is not None
    assert task.due_date == NOW + 10 * DAY
    assert task.lead_days == 3
    assert task_store.get_task(rec).repeat_interval == 3

    with pytest.raises(ValueError):
        add_recurring_task(task_store, summary="Never", repeat_interval=0)
    with pytest.raises(ValueError):
        add_deadline_task(task_store, summary="Late", days_until_due=-1, lead_days=1)
    with pytest.raises(ValueError):
        add_deadline_task(task_store, summary="Rushed", days_until_due=3, lead_days=0)


def test_settings_are_seeded_and_updatable(task_store: TaskStore) -> None:
    s = task_store.get_settings()
    assert (s.target_monthly_allowance, s.maximum_monthly_allowance) == (400.0, 600.0)

    task_store.set_setting(TARGET_ALLOWANCE_KEY, 450)
    assert task_store.get_settings().target_monthly_allowance == 450.0

    with pytest.raises(ValueError):
        task_store.set_setting("favourite_colour", 1)


def test_seeded_settings_are_not_overwritten(tmp_path: Path) -> None:
    db = tmp_path / "seed.sqlite3"
    TaskStore(db).set_setting(TARGET_ALLOWANCE_KEY, 123)

    reopened = TaskStore(db, default_target_allowance=999)
    assert reopened.get_settings().target_monthly_allowance == 123.0


def test_missing_setting_is_a_configuration_error(task_store: TaskStore, settings) -> None:
    conn = sqlite3.connect(str(settings.db_path))
    try:
        conn.execute("DELETE FROM settings WHERE key = 'maximum_monthly_allowance'")
        conn.commit()
    finally:
        conn.close()

    with pytest.raises(ConfigurationError):
        task_store.get_settings()


def test_folders(task_store: TaskStore) -> None:
    chores = task_store.add_folder(name="Chores")
    kitchen = task_store.add_folder(name="Kitchen", parent_id=chores)
    work = task_store.add_folder(name="Work", parent_id=None)

    paths = task_store.list_folder_paths()
    assert paths == [
        (1, "General"),
        (chores, "General::Chores"),
        (kitchen, "General::Chores::Kitchen"),
        (work, "Work"),
    ]

    task_id = task_store.add_task(summary="Descale kettle", folder_id=kitchen)
    assert task_store.get_task(task_id).folder_id == kitchen

    with pytest.raises(ValueError):
        task_store.add_folder(name="Orphan", parent_id=99)
    with pytest.raises(ValueError):
        task_store.add_folder(name="a::b")


def test_settings_must_be_finite(task_store: TaskStore, settings) -> None:
    for bad in (float("nan"), float("inf")):
        with pytest.raises(ValueError):
            task_store.set_setting(TARGET_ALLOWANCE_KEY, bad)
    assert task_store.get_settings().target_monthly_allowance == 400.0

    conn = sqlite3.connect(str(settings.db_path))
    try:
        conn.execute("UPDATE settings SET value = 'inf' WHERE key = 'target_monthly_allowance'")
        conn.commit()
    finally:
        conn.close()

    with pytest.raises(ConfigurationError):
        task_store.get_settings()


def test_unknown_stored_priority_falls_back_to_p1_with_warning(
    task_store: TaskStore, settings, caplog: pytest.LogCaptureFixture
) -> None:
    task_id = task_store.add_task(summary="Odd", priority=Priority.P2)

    conn = sqlite3.connect(str(settings.db_path))
    try:
        conn.execute("UPDATE tasks SET priority = 'P9' WHERE id = ?", (task_id,))
        conn.commit()
    finally:
        conn.close()

    with caplog.at_level("WARNING", logger="backlist.tasks.task_models"):
        task = task_store.get_task(task_id)

    assert task is not None and task.priority is Priority.P1
    assert "'P9'" in caplog.text
