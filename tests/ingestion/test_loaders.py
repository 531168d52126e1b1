import io
import time

import pandas as pd
import pytest

from list_distributor.errors import (
    IngestionTimeoutError,
    ParseError,
    StreamReadError,
    UnsupportedFormatError,
)
from list_distributor.ingestion.loaders import (
    CSV_FORMAT,
    EXCEL_FORMAT,
    detect_format,
    parse_contacts,
    parse_csv,
    parse_excel,
)
from list_distributor.models import ContactRecord


@pytest.fixture()
def sample_dataframe():
    return pd.DataFrame(
        [
            {"FirstName": "Ada", "Phone": "555-1111", "Notes": "VIP", "Email": "ada@example.com"},
            {"FirstName": "Grace", "Phone": "", "Notes": "no phone", "Email": "grace@example.com"},
            {"FirstName": "Linus", "Phone": "555-3333", "Notes": "", "Email": ""},
        ]
    )


class FailingStream(io.BytesIO):
    """Yields the header and then fails like a dropped connection."""

    def __init__(self) -> None:
        super().__init__(b"FirstName,Phone\n")
        self._served = False

    def read1(self, size=-1):
        if self._served:
            raise OSError("connection reset")
        self._served = True
        return super().read1(size)

    read = read1


@pytest.mark.parametrize(
    "filename, expected",
    [
        ("contacts.csv", CSV_FORMAT),
        ("CONTACTS.CSV", CSV_FORMAT),
        ("contacts.xlsx", EXCEL_FORMAT),
        ("contacts.XLS", EXCEL_FORMAT),
    ],
)
def test_detect_format(filename, expected):
    assert detect_format(filename) == expected


@pytest.mark.parametrize("filename", ["contacts.json", "contacts.txt", "contacts"])
def test_detect_format_rejects_other_extensions(filename):
    with pytest.raises(UnsupportedFormatError):
        detect_format(filename)


def test_parse_csv_keeps_row_order_and_drops_invalid_rows():
    stream = io.BytesIO(
        "\ufeffFirstName,Phone,Notes\n"
        "Ada,555-1111,VIP\n"
        "Grace,,no phone\n"
        "\n"
        "Linus,555-3333\n".encode("utf-8")
    )

    contacts = parse_csv(stream)

    assert contacts == [
        ContactRecord(name="Ada", phone="555-1111", notes="VIP"),
        ContactRecord(name="Linus", phone="555-3333", notes=""),
    ]
    assert not stream.closed


def test_parse_csv_with_only_header_returns_empty_list():
    assert parse_csv(io.BytesIO(b"FirstName,Phone,Notes\n")) == []
    assert parse_csv(io.BytesIO(b"")) == []


def test_parse_csv_without_name_or_phone_columns_yields_nothing():
    stream = io.BytesIO(b"Comments,Email\nhello,a@example.com\nbye,b@example.com\n")

    assert parse_csv(stream) == []


def test_parse_csv_read_failure_raises_stream_read_error():
    with pytest.raises(StreamReadError):
        parse_csv(FailingStream())


def test_parse_csv_replaces_undecodable_bytes():
    stream = io.BytesIO("FirstName,Phone,Notes\nJosé,5551,ok\nAnn,5552,\n".encode("cp1252"))

    contacts = parse_csv(stream)

    assert contacts == [
        ContactRecord(name="Jos\ufffd", phone="5551", notes="ok"),
        ContactRecord(name="Ann", phone="5552", notes=""),
    ]


def test_parse_csv_past_deadline_raises_timeout():
    stream = io.BytesIO(b"FirstName,Phone\nAda,1\n")

    with pytest.raises(IngestionTimeoutError):
        parse_csv(stream, deadline=time.monotonic() - 1)


def test_parse_excel_reads_first_sheet_only(sample_dataframe, tmp_path):
    excel_path = tmp_path / "contacts.xlsx"
    with pd.ExcelWriter(excel_path, engine="openpyxl") as writer:
        sample_dataframe.to_excel(writer, sheet_name="Leads", index=False)
        pd.DataFrame([{"FirstName": "Other", "Phone": "999"}]).to_excel(writer, sheet_name="Second", index=False)

    with excel_path.open("rb") as handle:
        contacts = parse_contacts(handle, EXCEL_FORMAT, filename=excel_path.name)

    assert contacts == [
        ContactRecord(name="Ada", phone="555-1111", notes="VIP"),
        ContactRecord(name="Linus", phone="555-3333", notes=""),
    ]


def test_parse_excel_renders_numeric_phones_without_decimals(tmp_path):
    excel_path = tmp_path / "numbers.xlsx"
    pd.DataFrame(
        [
            {"First Name": "Ada", "Mobile": 5551111},
            {"First Name": "Bob", "Mobile": None},
        ]
    ).to_excel(excel_path, index=False)

    with excel_path.open("rb") as handle:
        contacts = parse_excel(handle, engine="openpyxl")

    assert contacts == [ContactRecord(name="Ada", phone="5551111")]


def test_parse_excel_rejects_corrupt_workbook():
    with pytest.raises(ParseError):
        parse_excel(io.BytesIO(b"definitely not a workbook"), engine="openpyxl")


@pytest.mark.parametrize(
    "payload",
    [
        b"",
        b"definitely not a workbook",
        b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1" + b"\x00" * 100,
    ],
    ids=["empty", "text", "truncated-ole"],
)
def test_parse_excel_rejects_corrupt_legacy_workbook(payload):
    with pytest.raises(ParseError):
        parse_excel(io.BytesIO(payload), engine="xlrd")


def test_parse_contacts_dispatches_csv():
    contacts = parse_contacts(io.BytesIO(b"first_name,mobile\nAda,1\n"), CSV_FORMAT, filename="x.csv")

    assert contacts == [ContactRecord(name="Ada", phone="1")]
