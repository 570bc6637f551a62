"""
Report Generation Tests

Chart, run table, PDF report and Word calculation sheet.
"""

import io
import zipfile

import pytest

from duct_engine import (
    FITTING_LABELS,
    MODE_FROM_CFM,
    SHAPE_RECT,
    DuctInputs,
    RunInputs,
    calculate_duct,
    calculate_run,
    friction_curve,
)
from duct_reports import (
    duct_summary,
    generate_calc_sheet,
    generate_friction_chart,
    generate_pdf_report,
    run_summary,
    run_table,
)


@pytest.fixture
def duct():
    return calculate_duct(DuctInputs(shape=SHAPE_RECT, material="galv", target_fpm=700,
                                     rect_w_in=10, rect_h_in=8))


@pytest.fixture
def run(duct):
    return calculate_run(RunInputs.from_fields("50", {"elbow90": "2", "boot": "1"}), duct.friction_rate)


def test_run_table_rows(run):
    df = run_table(run)
    assert list(df.columns) == ["Item", "Qty", "Eq ft each", "Eq ft total"]
    assert len(df) == 1 + len(FITTING_LABELS)
    assert df.iloc[0]["Item"] == "Straight Duct"
    assert df["Eq ft total"].sum() == pytest.approx(run.total_eq_ft)


def test_duct_summary_rect_rows(duct):
    params = dict(duct_summary(duct, "galv"))
    assert params["Equivalent Round"].endswith(" in")
    assert "Ideal Round Diameter" not in params
    assert params["Friction Rate"].startswith(f"{duct.friction_rate:.3f}")


def test_duct_summary_inverse_mode_rows():
    result = calculate_duct(DuctInputs(mode=MODE_FROM_CFM, target_fpm=700, round_dia_in=10, cfm=800))
    params = dict(duct_summary(result, "pvc"))
    assert params["Ideal Round Diameter"] == "14.48 in"
    assert "Equivalent Round" not in params
    assert params["Mode"] == "Airflow to size"


def test_run_summary(run):
    params = dict(run_summary(run))
    assert params["Total Equivalent Length"] == "120 ft"
    assert params["Total Run Pressure Drop"] == f"{run.total_drop:.3f} in. w.g."


def test_friction_chart_is_png(duct):
    png = generate_friction_chart(duct, friction_curve(duct))
    assert png[:8] == b"\x89PNG\r\n\x1a\n"


def test_pdf_report(duct, run):
    png = generate_friction_chart(duct, friction_curve(duct))
    pdf = generate_pdf_report(duct, run, "galv", png, project_name="Test House")
    assert pdf.startswith(b"%PDF")


def test_pdf_report_without_chart(duct, run):
    assert generate_pdf_report(duct, run, "flex").startswith(b"%PDF")


def test_calc_sheet_docx(duct, run):
    data = generate_calc_sheet(duct, run, "galv", project_name="Test House")
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        xml = zf.read("word/document.xml").decode("utf-8")
    assert "DUCT SIZING CALCULATION SHEET" in xml
    assert "Test House" in xml
    assert "Boot / Register" in xml
