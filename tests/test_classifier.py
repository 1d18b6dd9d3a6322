"""
Tests for reading the portal's response page into an outcome.
"""

import json

import pytest

from autocheckin.services.classifier import (DEFAULT_RULES, UNRECOGNIZED,
                                             classify, load_rules)


@pytest.mark.parametrize(
    "content,kind,success",
    [
        ("<div class='alert'>Absensi berhasil disimpan</div>", "success", True),
        ("<h4>Data Absensi Pegawai</h4>", "success", True),
        ("<p>Anda sudah absen hari ini</p>", "already_done", True),
        ("<p>NIP atau password salah</p>", "invalid_credentials", False),
        ("<p>Maaf, belum waktunya absen</p>", "too_early", False),
        ("<p>Anda tidak dalam jam absen</p>", "too_early", False),
        ("<p>Posisi lokasi anda tidak berada di area kantor</p>", "location_issue", False),
    ],
)
def test_each_rule_group(content, kind, success):
    outcome = classify(content)
    assert outcome.kind == kind
    assert outcome.success is success


def test_success_wins_over_later_rules():
    """A page with both a success marker and an error word counts as success."""
    outcome = classify("Check-in berhasil. Password salah? Hubungi admin.")
    assert outcome.kind == "success"


def test_invalid_credentials_wins_over_location():
    outcome = classify("Password salah, lokasi tidak dicek")
    assert outcome.kind == "invalid_credentials"


def test_dashboard_url_counts_as_success():
    outcome = classify("<html></html>", url="https://skemaraja.kemenhub.go.id/home")
    assert outcome.success is True
    assert outcome.kind == "success"


def test_success_message_carries_time():
    outcome = classify("Berhasil", checkin_time="07:15:00")
    assert outcome.message == "Check-in berhasil! (07:15:00)"
    assert outcome.checkin_time == "07:15:00"


def test_already_done_message_with_and_without_time():
    assert classify("Sudah Absen", checkin_time="07:01:02").message == "Sudah check-in (07:01:02)"
    assert classify("Sudah Absen").message == "Sudah check-in sebelumnya"


def test_failure_drops_checkin_time():
    outcome = classify("NIP salah", checkin_time="07:15:00")
    assert outcome.checkin_time is None
    assert outcome.message == "NIP atau Password salah"


def test_unrecognized_page_reports_title():
    outcome = classify("<html><body>Maintenance</body></html>", title="Server Error")
    assert outcome.kind == UNRECOGNIZED
    assert outcome.success is False
    assert outcome.message == "Response tidak dikenali: Server Error"


def test_load_rules_from_json(tmp_path):
    path = tmp_path / "rules.json"
    path.write_text(
        json.dumps(
            [
                {"kind": "success", "success": True, "message": "OK", "any_of": ["Tersimpan"]},
                {"kind": "closed", "success": False, "message": "Portal tutup", "all_of": ["portal", "tutup"]},
            ]
        ),
        encoding="utf-8",
    )
    rules = load_rules(path)
    assert [r.kind for r in rules] == ["success", "closed"]
    assert classify("Data Tersimpan", rules=rules).message == "OK"
    assert classify("portal sedang tutup", rules=rules).kind == "closed"
    # default markers no longer apply
    assert classify("Berhasil", rules=rules).kind == UNRECOGNIZED


def test_default_rule_order():
    assert [r.kind for r in DEFAULT_RULES] == [
        "success",
        "already_done",
        "invalid_credentials",
        "too_early",
        "location_issue",
    ]
