from __future__ import annotations

import pytest

from formulation_intake.ingestion.errors import DecodeFailure, EmptyInput, MissingRequiredColumn
from formulation_intake.models.config_models import FormulationRules, UploadLimits
from formulation_intake.models.submission import FormulationSubmission
from formulation_intake.models.upload_file import UploadStatus
from formulation_intake.services.upload import (
    UploadRejected,
    check_submission,
    check_upload,
    rejection_message,
    review_upload,
)


def _submission(payload: bytes, file_name: str = "serum.xlsx", name: str = "Serum", product_type: str = "skincare"):
    return FormulationSubmission(name=name, product_type=product_type, file_name=file_name, payload=payload)


@pytest.mark.parametrize("file_name", ["a.xlsx", "B.XLSX", "legacy.xls"])
def test_check_upload_accepts_excel(file_name):
    check_upload(file_name, 1024)


@pytest.mark.parametrize("file_name", ["a.csv", "a.pdf", "xlsx", "a.xlsx.txt"])
def test_check_upload_rejects_foreign_types(file_name):
    with pytest.raises(UploadRejected) as exc:
        check_upload(file_name, 10)
    assert str(exc.value) == "Invalid file type. Please upload an Excel file (.xlsx or .xls)"


def test_check_upload_size_limit():
    check_upload("a.xlsx", 10 * 1024 * 1024)
    with pytest.raises(UploadRejected, match="File size exceeds 10MB limit"):
        check_upload("a.xlsx", 10 * 1024 * 1024 + 1)


def test_check_upload_custom_limits():
    limits = UploadLimits(allowed_extensions=(".xlsx",), max_file_size_bytes=2 * 1024 * 1024)
    with pytest.raises(UploadRejected, match=r"\(\.xlsx\)"):
        check_upload("a.xls", 10, limits)
    with pytest.raises(UploadRejected, match="File size exceeds 2MB limit"):
        check_upload("a.xlsx", 3 * 1024 * 1024, limits)


@pytest.mark.parametrize(
    "kwargs",
    [{"name": "  "}, {"product_type": ""}, {"file_name": ""}],
)
def test_check_submission_required_fields(kwargs):
    with pytest.raises(UploadRejected, match="Missing required fields"):
        check_submission(_submission(b"x", **kwargs))


@pytest.mark.parametrize(
    "error,expected",
    [
        (EmptyInput(), "Excel file is empty or has invalid format"),
        (MissingRequiredColumn("inci_name"), "Could not find INCI Name column in Excel file"),
        (MissingRequiredColumn("concentration"), "Could not find Concentration column in Excel file"),
        (DecodeFailure("bad zip"), "Failed to parse Excel file: bad zip"),
    ],
)
def test_rejection_messages(error, expected):
    assert rejection_message(error) == expected


def test_review_accepts_well_formed(make_workbook, well_formed_rows):
    outcome = review_upload(_submission(make_workbook(well_formed_rows)))
    assert outcome.accepted
    assert outcome.status is UploadStatus.ACCEPTED
    assert outcome.message == "Formulation uploaded successfully (2 ingredients)"
    assert outcome.warnings == []
    assert outcome.error_type is None


def test_review_accepts_with_warnings(make_workbook):
    payload = make_workbook([["INCI Name", "Concentration"], ["Water", 50], ["", 10]])
    outcome = review_upload(_submission(payload))
    assert outcome.accepted
    assert outcome.warnings == [
        "Row 3: Missing INCI Name",
        "Total concentration (50.00%) is not approximately 100%. Please check your formulation.",
    ]


def test_review_rejects_before_decoding():
    outcome = review_upload(_submission(b"not decoded", file_name="notes.txt"))
    assert not outcome.accepted
    assert outcome.error_type == "UPLOAD_REJECTED"
    assert outcome.result is None


def test_review_rejects_missing_column(make_workbook):
    payload = make_workbook([["Name", "Concentration"], ["Water", 100]])
    outcome = review_upload(_submission(payload))
    assert outcome.status is UploadStatus.REJECTED
    assert outcome.message == "Could not find INCI Name column in Excel file"
    assert outcome.error_type == "MISSING_REQUIRED_COLUMN"


def test_review_rejects_corrupt_workbook():
    outcome = review_upload(_submission(b"\x00garbage"))
    assert outcome.error_type == "DECODE_FAILURE"
    assert outcome.message.startswith("Failed to parse Excel file: ")


def test_review_rejects_empty_workbook(make_workbook):
    outcome = review_upload(_submission(make_workbook([[None]])))
    assert outcome.error_type == "EMPTY_INPUT"
    assert outcome.message == "Excel file is empty or has invalid format"


def test_review_rejects_formulation_without_ingredients(make_workbook):
    outcome = review_upload(_submission(make_workbook([["INCI Name", "Concentration"], ["", 5]])))
    assert outcome.error_type == "NO_INGREDIENTS"
    assert outcome.message == "No ingredients found in the formulation"
    assert outcome.result is not None
    assert outcome.warnings[0] == "Row 2: Missing INCI Name"


def test_review_uses_rules(make_workbook):
    payload = make_workbook([["INCI Name", "Concentration"], ["Water", 100]])
    rules = FormulationRules(max_concentration=50.0)
    outcome = review_upload(_submission(payload), rules=rules)
    assert outcome.accepted
    assert outcome.warnings == ["Ingredient 1 (Water): Concentration must be between 0 and 50%"]
