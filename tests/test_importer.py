import io
from datetime import date, datetime, time

import openpyxl
import pytest

from callboard.extensions import db
from callboard.models import Show
from callboard.modules.shows.importer import normalize_show_date, normalize_show_time, read_rows
from callboard.errors import ImportFormatError


@pytest.mark.parametrize("raw, expected", [
    ("matinee", "14:00"),
    ("Evening", "19:00"),
    ("NOON", "12:00"),
    ("midnight", "00:00"),
    (0.5, "12:00"),
    (45658.8125, "19:30"),
    ("19:30", "19:30"),
    ("9:05:59", "09:05"),
    ("2:00 PM", "14:00"),
    ("12:15 am", "00:15"),
    ("12:00pm", "12:00"),
    ("11:45 AM", "11:45"),
    (time(20, 0), "20:00"),
    (datetime(1899, 12, 30, 14, 30), "14:30"),
])
def test_normalize_show_time(raw, expected):
    assert normalize_show_time(raw) == expected


@pytest.mark.parametrize("raw", [
    None, "", "  ", "tomorrow", "25:00", "13:00 pm", "7pm", True, "0.25", "19.30", "7.30", float("inf"),
])
def test_normalize_show_time_rejects(raw):
    assert normalize_show_time(raw) is None


def test_normalize_show_date():
    assert normalize_show_date("2025-03-01") == date(2025, 3, 1)
    assert normalize_show_date(datetime(2025, 3, 1, 0, 0)) == date(2025, 3, 1)
    assert normalize_show_date("2025-02-30") is None
    assert normalize_show_date("03/01/2025") is None


def test_read_rows_csv_aliases_and_bad_rows():
    content = (
        "Date,Show Time,Time\n"
        "2025-03-01,,2:00 PM\n"
        "2025-03-01,,matinee\n"
        "not-a-date,,19:00\n"
        "2025-03-02,,whenever\n"
        ",,\n"
    ).encode("utf-8-sig")
    assert read_rows("calendar.CSV", content) == [
        {"date": date(2025, 3, 1), "showTime": "14:00"},
        {"date": date(2025, 3, 1), "showTime": "14:00"},
    ]


def test_read_rows_drops_decimal_text_times():
    content = b"date,time\n2031-03-01,19.30\n2031-03-02,19:30\n"
    assert read_rows("cal.csv", content) == [{"date": date(2031, 3, 2), "showTime": "19:30"}]


def test_read_rows_rejects_non_utf8_csv():
    content = "date,time\n2031-03-01,Matin\xe9e\n".encode("cp1252")
    with pytest.raises(ImportFormatError):
        read_rows("cal.csv", content)


def test_read_rows_semicolon_csv():
    content = b"date;showTime\n2025-04-05;19:30\n"
    assert read_rows("cal.csv", content) == [{"date": date(2025, 4, 5), "showTime": "19:30"}]


def test_read_rows_xlsx():
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.append(["date", "label"])
    ws.append([datetime(2025, 5, 1), 0.8125])
    ws.append(["2025-05-02", "Evening"])
    ws.append(["2025-05-03", None])
    buf = io.BytesIO()
    wb.save(buf)

    assert read_rows("season.xlsx", buf.getvalue()) == [
        {"date": date(2025, 5, 1), "showTime": "19:30"},
        {"date": date(2025, 5, 2), "showTime": "19:00"},
    ]


def test_read_rows_rejects_unknown_container():
    with pytest.raises(ImportFormatError):
        read_rows("calendar.pdf", b"%PDF")
    with pytest.raises(ImportFormatError):
        read_rows("calendar.xlsx", b"definitely not a zip")


def _upload(client, content: bytes, name="calendar.csv", skip=None):
    data = {"file": (io.BytesIO(content), name)}
    if skip is not None:
        data["skipDuplicates"] = skip
    return client.post("/shows/import", data=data, content_type="multipart/form-data")


def test_import_round_trip_and_duplicates(app, seed, admin_client):
    content = b"date,showTime\n2025-03-01,2:00 PM\n"

    first = _upload(admin_client, content).get_json()
    assert first["createdCount"] == 1 and first["skippedCount"] == 0
    assert first["createdShows"] == [{"date": "2025-03-01", "showTime": "14:00"}]

    with app.app_context():
        stored = db.session.query(Show).filter_by(organization_id=seed.org_id).one()
        assert (stored.date, stored.show_time) == (date(2025, 3, 1), "14:00")

    again = _upload(admin_client, content, skip="true").get_json()
    assert again["createdCount"] == 0
    assert again["skippedCount"] == 1

    no_skip = _upload(admin_client, content, skip="false").get_json()
    assert no_skip["createdCount"] == 0
    assert no_skip["skippedCount"] == 0
    assert no_skip["unchangedCount"] == 1
    assert no_skip["unchangedShows"] == [{"date": "2025-03-01", "showTime": "14:00"}]


def test_import_duplicate_rows_within_one_file(admin_client):
    content = b"date,time\n2025-06-01,19:00\n2025-06-01,7:00 pm\n"
    body = _upload(admin_client, content).get_json()
    assert body["createdCount"] == 1
    assert body["skippedCount"] == 1


def test_import_errors(admin_client, alice_client):
    assert admin_client.post("/shows/import", data={}, content_type="multipart/form-data").status_code == 400
    res = _upload(admin_client, b"x", name="calendar.xls")
    assert res.status_code == 400
    assert "Unsupported format" in res.get_json()["error"]
    assert _upload(alice_client, b"date,time\n").status_code == 403


# --- weekday template ---

def _generate(client, **overrides):
    body = {
        "startDate": "2030-01-05",
        "endDate": "2030-01-05",
        "weekdayTimes": {"6": ["19:00", "14:00", "19:00:00"]},
    }
    body.update(overrides)
    return client.post("/shows/bulk-generate", json=body)


def test_bulk_generate_single_day(admin_client):
    # 2030-01-05 is a Saturday
    body = _generate(admin_client).get_json()
    assert body["createdCount"] == 2
    assert body["createdShows"] == [
        {"date": "2030-01-05", "showTime": "14:00"},
        {"date": "2030-01-05", "showTime": "19:00"},
    ]

    again = _generate(admin_client).get_json()
    assert again["createdCount"] == 0 and again["skippedCount"] == 2


def test_bulk_generate_single_day_minus_existing(admin_client, make_show):
    make_show(date(2030, 1, 5), "14:00")
    body = _generate(admin_client).get_json()
    assert body["createdCount"] == 1
    assert body["skippedCount"] == 1


def test_bulk_generate_maps_sunday_to_zero(admin_client):
    body = _generate(
        admin_client,
        startDate="2029-12-30",
        endDate="2030-01-12",
        weekdayTimes={"0": ["14:00"], "3": ["19:30"]},
    ).get_json()
    assert [s["date"] for s in body["createdShows"]] == [
        "2029-12-30", "2030-01-02", "2030-01-06", "2030-01-09",
    ]
    assert {date.fromisoformat(s["date"]).weekday() for s in body["createdShows"]} == {6, 2}


def test_bulk_generate_without_skipping_duplicates(admin_client, make_show):
    make_show(date(2030, 1, 5), "19:00")
    body = _generate(admin_client, skipDuplicates=False).get_json()
    assert body["createdCount"] == 1
    assert body["skippedCount"] == 0
    assert body["unchangedCount"] == 1


@pytest.mark.parametrize("overrides, message", [
    ({"startDate": "2030-01-06", "endDate": "2030-01-05"}, "on or before"),
    ({"startDate": "2030-01-01", "endDate": "2031-01-02"}, "exceed 1 year"),
    ({"weekdayTimes": {"7": ["19:00"]}}, "0-6"),
    ({"weekdayTimes": {"6": ["7pm"]}}, "HH:mm"),
    ({"startDate": "Jan 5"}, "YYYY-MM-DD"),
])
def test_bulk_generate_validation(admin_client, overrides, message):
    res = _generate(admin_client, **overrides)
    assert res.status_code == 400
    assert message in res.get_json()["error"]


def test_bulk_generate_allows_a_full_leap_year(admin_client):
    res = _generate(admin_client, startDate="2028-01-01", endDate="2028-12-31", weekdayTimes={})
    assert res.status_code == 200
    assert res.get_json()["createdCount"] == 0
