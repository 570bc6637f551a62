"""
Ductulator downloads — friction chart, run-loss table, PDF report and
Word calculation sheet.
"""

import io
import logging
from datetime import date
from typing import List, Tuple

import pandas as pd

from duct_engine import (
    MATERIALS,
    MODE_FROM_CFM,
    MODE_FROM_SIZE,
    SHAPE_RECT,
    SHAPES,
    DuctResult,
    RunResult,
)

logger = logging.getLogger("ductulator.reports")

NAVY  = '#2a3853'
BLUE  = '#234699'
RED   = '#b11f33'
GRAY  = '#97999b'

# Built-in PDF fonts have no arrow glyph
REPORT_MODES = {
    MODE_FROM_SIZE: 'Size to airflow',
    MODE_FROM_CFM:  'Airflow to size',
}

DISCLAIMER = (
    'Friction per Darcy-Weisbach with the Swamee-Jain approximation of Colebrook. '
    'Fitting equivalent lengths are typical starting values, not published data. '
    'This report is for estimation purposes; verify against manufacturer charts.'
)


def material_label(result: DuctResult, material: str) -> str:
    label = MATERIALS.get(material, MATERIALS["flex"])[0]
    return f'{label}, roughness {result.roughness_m:g} m'


def duct_summary(result: DuctResult, material: str) -> List[Tuple[str, str]]:
    """(parameter, value) rows for the duct / friction results."""
    if result.shape == SHAPE_RECT:
        size = f'Hydraulic diameter {result.dh_in:.2f}"'
    else:
        size = f'{result.dh_in:g}" Round'
    rows = [
        ('Mode', REPORT_MODES.get(result.mode, result.mode)),
        ('Shape', SHAPES.get(result.shape, result.shape)),
        ('Duct', size),
        ('Material', material_label(result, material)),
        ('Area', f'{result.area_ft2:.3f} ft² ({result.area_in2:.1f} in²)'),
        ('Velocity', f'{result.velocity_fpm:,.0f} FPM'),
        ('Airflow', f'{result.cfm:,.0f} CFM'),
    ]
    if result.shape == SHAPE_RECT:
        rows.append(('Equivalent Round', f'{result.eq_round_in:.2f} in'))
    if result.mode == MODE_FROM_CFM:
        rows.append(('Ideal Round Diameter', f'{result.ideal_round_in:.2f} in'))
    rows += [
        ('Reynolds Number', f'{result.reynolds:,.0f}'),
        ('Friction Factor (Darcy)', f'{result.friction_factor:.4f}'),
        ('Friction Rate', f'{result.friction_rate:.3f} in. w.g. / 100 ft'),
    ]
    return rows


def run_table(run: RunResult) -> pd.DataFrame:
    """One row per fitting kind, preceded by the straight duct."""
    rows = [{
        "Item": "Straight Duct",
        "Qty": 1,
        "Eq ft each": run.straight_ft,
        "Eq ft total": run.straight_ft,
    }]
    for it in run.items:
        rows.append({
            "Item": it.label,
            "Qty": it.quantity,
            "Eq ft each": it.eq_length_ft,
            "Eq ft total": it.eq_total_ft,
        })
    return pd.DataFrame(rows, columns=["Item", "Qty", "Eq ft each", "Eq ft total"])


def run_summary(run: RunResult) -> List[Tuple[str, str]]:
    return [
        ('Total Fittings Eq Length', f'{run.fittings_eq_ft:,.0f} ft'),
        ('Total Equivalent Length', f'{run.total_eq_ft:,.0f} ft'),
        ('Friction Rate', f'{run.friction_rate:.3f} in. w.g. / 100 ft'),
        ('Total Run Pressure Drop', f'{run.total_drop:.3f} in. w.g.'),
    ]


def generate_friction_chart(result: DuctResult, curve: list) -> bytes:
    """Generate friction rate vs airflow chart as PNG bytes using matplotlib."""
    import matplotlib
    matplotlib.use('Agg')
    import matplotlib.pyplot as plt

    fig, ax = plt.subplots(figsize=(10, 6))
    fig.patch.set_facecolor('#fafafa')

    cfms = [p[0] for p in curve]
    rates = [p[1] for p in curve]
    ax.plot(cfms, rates, '-', color=BLUE, linewidth=2, label='Friction Rate', zorder=3)

    if result.cfm > 0:
        ax.plot(result.cfm, result.friction_rate, '*', color=RED, markersize=18,
                label=f'Operating Point ({result.cfm:,.0f} CFM, {result.friction_rate:.3f}" w.g./100 ft)',
                zorder=5, markeredgecolor='#101820', markeredgewidth=0.5)

    ax.set_xlabel('Airflow (CFM)', fontsize=12, fontweight='bold', color=NAVY)
    ax.set_ylabel('Friction Rate (in. w.g. / 100 ft)', fontsize=12, fontweight='bold', color=NAVY)
    ax.set_title(f'Friction Rate vs Airflow — {result.area_in2:.1f} in² {SHAPES.get(result.shape, "")}',
                 fontsize=14, fontweight='bold', color='#101820')
    ax.legend(loc='upper left', fontsize=10)
    ax.grid(True, alpha=0.2, color=GRAY)
    ax.set_xlim(left=0)
    ax.set_ylim(bottom=0)
    ax.set_facecolor('#fafafa')

    plt.tight_layout()
    buf = io.BytesIO()
    fig.savefig(buf, format='png', dpi=150, bbox_inches='tight')
    plt.close(fig)
    buf.seek(0)
    return buf.read()


def _table_style(header_color: str):
    from reportlab.lib import colors
    from reportlab.platypus import TableStyle

    return TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor(header_color)),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 9),
        ('ALIGN', (0, 0), (-1, -1), 'LEFT'),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.HexColor('#cccccc')),
        ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor('#f5f5f5')]),
        ('TOPPADDING', (0, 0), (-1, -1), 4),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 4),
    ])


def generate_pdf_report(duct: DuctResult, run: RunResult, material: str,
                        chart_png_bytes: bytes = None, project_name: str = "") -> bytes:
    """Generate a PDF duct sizing report using reportlab."""
    from reportlab.lib.pagesizes import letter
    from reportlab.lib.units import inch
    from reportlab.lib import colors
    from reportlab.platypus import (SimpleDocTemplate, Paragraph, Spacer,
                                    Table as RLTable, Image)
    from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle

    buf = io.BytesIO()
    doc = SimpleDocTemplate(buf, pagesize=letter,
                            topMargin=0.75*inch, bottomMargin=0.75*inch,
                            leftMargin=0.75*inch, rightMargin=0.75*inch)
    styles = getSampleStyleSheet()
    story = []

    title_style = ParagraphStyle('CustomTitle', parent=styles['Title'],
                                 fontSize=20, spaceAfter=6, textColor=colors.HexColor(NAVY))
    subtitle_style = ParagraphStyle('Subtitle', parent=styles['Normal'],
                                    fontSize=11, textColor=colors.HexColor(RED), spaceAfter=12)
    h2_style = ParagraphStyle('H2', parent=styles['Heading2'],
                              fontSize=14, textColor=colors.HexColor(NAVY), spaceBefore=16, spaceAfter=8)
    small = ParagraphStyle('Small', parent=styles['Normal'], fontSize=8, textColor=colors.gray)

    story.append(Paragraph('Duct Sizing &amp; Run Loss Report', title_style))
    subtitle = project_name.strip() or 'Ductulator'
    story.append(Paragraph(f'{subtitle} — {date.today().isoformat()}', subtitle_style))

    story.append(Paragraph('Duct / Friction', h2_style))
    t = RLTable([['Parameter', 'Value']] + [list(r) for r in duct_summary(duct, material)],
                colWidths=[3*inch, 4*inch])
    t.setStyle(_table_style(NAVY))
    story.append(t)

    story.append(Paragraph('Run Loss (Length + Fittings)', h2_style))
    df = run_table(run)
    fit_data = [list(df.columns)]
    for row in df.itertuples(index=False):
        fit_data.append([row[0], f'{row[1]:g}', f'{row[2]:g}', f'{row[3]:,.0f}'])
    t2 = RLTable(fit_data, colWidths=[2.5*inch, 1.2*inch, 1.6*inch, 1.7*inch])
    t2.setStyle(_table_style(NAVY))
    story.append(t2)
    story.append(Spacer(1, 12))

    t3 = RLTable([['Total', 'Value']] + [list(r) for r in run_summary(run)],
                 colWidths=[3*inch, 4*inch])
    t3.setStyle(_table_style(RED))
    story.append(t3)

    if chart_png_bytes:
        story.append(Paragraph('Friction Rate vs Airflow', h2_style))
        story.append(Image(io.BytesIO(chart_png_bytes), width=6.5*inch, height=3.9*inch))

    story.append(Spacer(1, 16))
    story.append(Paragraph(DISCLAIMER, small))

    doc.build(story)
    logger.info("PDF report generated (%s)", subtitle)
    buf.seek(0)
    return buf.read()


def generate_calc_sheet(duct: DuctResult, run: RunResult, material: str, project_name: str = "") -> bytes:
    """Generate the duct calculation sheet as a .docx file."""
    from docx import Document
    from docx.shared import Pt, RGBColor

    doc = Document()

    style = doc.styles['Normal']
    style.font.name = 'Arial'
    style.font.size = Pt(10)

    def add_heading_text(text, level=1):
        h = doc.add_heading(text, level=level)
        for r in h.runs:
            r.font.color.rgb = RGBColor(0x2a, 0x38, 0x53)
        return h

    def add_table(header, rows):
        table = doc.add_table(rows=1, cols=len(header))
        table.style = 'Table Grid'
        for cell, text in zip(table.rows[0].cells, header):
            cell.text = str(text)
            for p in cell.paragraphs:
                for r in p.runs:
                    r.bold = True
        for row in rows:
            cells = table.add_row().cells
            for cell, text in zip(cells, row):
                cell.text = str(text)
        return table

    add_heading_text('DUCT SIZING CALCULATION SHEET', level=1)
    doc.add_paragraph(f'{project_name.strip() or "Ductulator"} — {date.today().isoformat()}')

    add_heading_text('Duct / Friction', level=2)
    add_table(['Parameter', 'Value'], duct_summary(duct, material))

    add_heading_text('Run Loss (Length + Fittings)', level=2)
    df = run_table(run)
    add_table(list(df.columns),
              [(r[0], f'{r[1]:g}', f'{r[2]:g}', f'{r[3]:,.0f}') for r in df.itertuples(index=False)])
    doc.add_paragraph('')
    add_table(['Total', 'Value'], run_summary(run))

    p = doc.add_paragraph(DISCLAIMER)
    for r in p.runs:
        r.font.size = Pt(8)

    buf = io.BytesIO()
    doc.save(buf)
    logger.info("Calculation sheet generated (%s)", project_name.strip() or "Ductulator")
    buf.seek(0)
    return buf.read()
