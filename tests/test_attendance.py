from datetime import date, datetime

from roster_checkin.attendance import AttendanceLog, AttendanceRecorder, date_key
from roster_checkin.db import Database


def test_date_key_uses_local_calendar_day():
    assert date_key(datetime(2026, 10, 17, 23, 59)) == "2026-10-17"
    assert date_key(datetime(2026, 10, 18, 0, 1)) == "2026-10-18"


def test_record_visit_is_idempotent_per_day():
    recorder = AttendanceRecorder(AttendanceLog())

    assert recorder.record_visit("2026-10-17", "12") is True
    assert recorder.count_for_date("2026-10-17") == 1
    assert recorder.record_visit("2026-10-17", "12") is False
    assert recorder.count_for_date("2026-10-17") == 1


def test_days_are_independent():
    recorder = AttendanceRecorder(AttendanceLog())
    recorder.record_visit("2026-10-16", "12")
    recorder.record_visit("2026-10-17", "12")
    recorder.record_visit("2026-10-17", "3")

    assert recorder.count_for_date("2026-10-16") == 1
    assert recorder.members_for_date("2026-10-17") == ["12", "3"]
    assert recorder.count_for_date("2026-10-18") == 0


def test_save_persists_and_reload_restores_order(tmp_path):
    database = Database(tmp_path / "attendance.db")
    log = AttendanceLog.open(database)
    recorder = AttendanceRecorder(log)
    recorder.record_visit("2026-10-17", "7")
    recorder.record_visit("2026-10-17", "2")

    assert AttendanceLog.open(database).count("2026-10-17") == 0
    assert log.save() == 1
    assert log.save() == 0

    reloaded = AttendanceLog.open(database)
    assert reloaded.members("2026-10-17") == ["7", "2"]


def test_saving_twice_after_more_visits_does_not_duplicate(tmp_path):
    database = Database(tmp_path / "attendance.db")
    log = AttendanceLog.open(database)
    log.add("2026-10-17", "7")
    log.save()
    log.add("2026-10-17", "9")
    log.save()

    assert AttendanceLog.open(database).members("2026-10-17") == ["7", "9"]
    assert database.get_daily_counts(date(2026, 10, 1), date(2026, 10, 31)) == [
        {"date": "2026-10-17", "total": 2}
    ]


def test_log_without_database_does_not_save():
    log = AttendanceLog()
    log.add("2026-10-17", "1")
    assert log.save() == 0
