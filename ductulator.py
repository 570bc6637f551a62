"""
Ductulator — Duct Sizing, Friction Rate & Run Loss Calculator (Streamlit)
==========================================================================
Sizes round and rectangular duct from a target velocity, either from a
typed duct size (→ CFM) or from a typed airflow (→ size), and estimates the
friction rate per 100 ft and the pressure drop of a duct run with fittings.

Engineering Basis:
  - Darcy-Weisbach friction loss, Swamee-Jain approximation of Colebrook
  - Huebscher equivalent diameter for rectangular ducts
  - Fitting losses as editable equivalent lengths of straight duct

Deploy:   pip install -e .
          streamlit run ductulator.py
"""

import logging

import streamlit as st

from duct_engine import (
    AIR_DENSITY,
    AIR_VISCOSITY,
    DEFAULT_EQ_LEN_FT,
    FITTING_KEYS,
    FITTING_LABELS,
    MATERIALS,
    MODE_FROM_CFM,
    MODE_FROM_SIZE,
    MODES,
    SHAPE_RECT,
    SHAPE_ROUND,
    SHAPES,
    DuctInputs,
    RunInputs,
    calculate_duct,
    calculate_run,
    friction_curve,
)
from duct_logging import setup_logging
from duct_reports import (
    generate_calc_sheet,
    generate_friction_chart,
    generate_pdf_report,
    run_table,
)

APP_VERSION = "1.0.0"

logger = logging.getLogger("ductulator.app")

# ─────────────────────────────────────────────
# SESSION STATE
# ─────────────────────────────────────────────
DEFAULTS = {
    "mode":               MODE_FROM_SIZE,
    "shape":              SHAPE_ROUND,
    "material":           "galv",
    "target_fpm":         "700",
    "round_dia":          "10",
    "rect_w":             "10",
    "rect_h":             "8",
    "cfm":                "800",
    "roughness_override": "",
    "straight_ft":        "50",
    "project_name":       "",
}

DEFAULT_COUNTS = {k: "0" for k in FITTING_KEYS}
DEFAULT_COUNTS.update({"elbow90": "2", "boot": "1"})


def count_key(kind: str) -> str:
    return f"count_{kind}"


def eqlen_key(kind: str) -> str:
    return f"eqlen_{kind}"


def init_state():
    """Initialize session state with the page defaults."""
    defaults = dict(DEFAULTS)
    for k in FITTING_KEYS:
        defaults[count_key(k)] = DEFAULT_COUNTS[k]
        defaults[eqlen_key(k)] = f"{DEFAULT_EQ_LEN_FT[k]:g}"
    for k, v in defaults.items():
        if k not in st.session_state:
            st.session_state[k] = v


def input_key(key: str) -> str:
    return f"{key}_input"


def _store(key: str):
    st.session_state[key] = st.session_state[input_key(key)]


def kept_text_input(label: str, key: str, **kwargs):
    """
    Text input for a field that is not drawn on every run. Streamlit drops the
    state of a widget that is not drawn, so the value lives under `key` and
    the widget under `key`_input is reseeded from it each time.
    """
    st.session_state[input_key(key)] = st.session_state[key]
    return st.text_input(label, key=input_key(key), on_change=_store, args=(key,), **kwargs)


def reset():
    for k in list(st.session_state.keys()):
        del st.session_state[k]
    init_state()


def snapshot(ss) -> tuple:
    """Freeze the current fields into (DuctInputs, RunInputs)."""
    duct = DuctInputs.from_fields(
        mode=ss.mode,
        shape=ss.shape,
        material=ss.material,
        target_fpm=ss.target_fpm,
        round_dia=ss.round_dia,
        rect_w=ss.rect_w,
        rect_h=ss.rect_h,
        cfm=ss.cfm,
        roughness_override=ss.roughness_override,
    )
    run = RunInputs.from_fields(
        ss.straight_ft,
        counts={k: ss[count_key(k)] for k in FITTING_KEYS},
        eq_lengths={k: ss[eqlen_key(k)] for k in FITTING_KEYS},
    )
    return duct, run


# ─────────────────────────────────────────────
# INPUTS
# ─────────────────────────────────────────────
def render_duct_inputs():
    st.markdown("#### 🌀 Air + Duct Inputs")

    st.radio("Mode", list(MODES), format_func=MODES.get, key="mode", horizontal=True)
    st.selectbox("Material", list(MATERIALS), format_func=lambda k: MATERIALS[k][0], key="material")
    st.radio("Shape", list(SHAPES), format_func=SHAPES.get, key="shape", horizontal=True)

    st.text_input("Target / Actual Velocity (FPM)", key="target_fpm")

    if st.session_state.mode == MODE_FROM_CFM:
        kept_text_input("CFM", "cfm")

    if st.session_state.shape == SHAPE_ROUND:
        kept_text_input("Round Diameter (in)", "round_dia")
    else:
        col_w, col_h = st.columns(2)
        with col_w:
            kept_text_input("Rect Width (in)", "rect_w")
        with col_h:
            kept_text_input("Rect Height (in)", "rect_h")

    with st.expander("⚙️ Assumptions"):
        st.text_input(
            "Roughness override (m)",
            key="roughness_override",
            help="Leave blank to use the material default. Adjust to match company charts.",
        )
        label, eps = MATERIALS[st.session_state.material]
        st.caption(
            f"{label}: ε = {eps:g} m  \n"
            f"Air density ρ = {AIR_DENSITY} kg/m³  \n"
            f"Air dynamic viscosity μ = {AIR_VISCOSITY:g} Pa·s"
        )


# ─────────────────────────────────────────────
# RENDER RESULTS
# ─────────────────────────────────────────────
def render_duct_results(result, chart_png=None):
    """Duct / friction results."""
    st.markdown("#### 📐 Results")

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Area (ft²)", f"{result.area_ft2:.3f}")
    col2.metric("Area (in²)", f"{result.area_in2:.1f}")
    col3.metric("Velocity (FPM)", f"{result.velocity_fpm:.0f}")
    col4.metric("CFM", f"{result.cfm:.0f}")

    if result.shape == SHAPE_RECT:
        st.metric("Equivalent Round (in)", f"{result.eq_round_in:.2f}")

    if result.mode == MODE_FROM_CFM:
        st.metric("Ideal Round Diameter (in)", f"{result.ideal_round_in:.2f}",
                  help="Diameter of a round duct with the same area")

    st.metric("Friction Rate (in. w.g. / 100 ft)", f"{result.friction_rate:.3f}")

    if chart_png:
        with st.expander("📈 Friction Rate vs Airflow"):
            st.image(chart_png)


def render_run(run_inputs, result):
    """Run loss: straight length plus fittings."""
    st.markdown("#### 🧮 Run Loss")

    st.text_input("Straight Duct Length (ft)", key="straight_ft")
    st.caption("Add fittings (equivalent length). Defaults are editable.")

    for k in FITTING_KEYS:
        c_label, c_qty, c_eq, c_total = st.columns([1.3, 0.6, 0.8, 0.8])
        c_label.markdown(f"**{FITTING_LABELS[k]}**")
        with c_qty:
            st.text_input("Qty", key=count_key(k))
        with c_eq:
            st.text_input("Eq ft each", key=eqlen_key(k))
        entry = run_inputs.entry(k)
        c_total.markdown(f"Eq ft total: **{entry.eq_total_ft:.0f}**")

    run = calculate_run(run_inputs, result.friction_rate)

    st.markdown("---")
    st.markdown(f"Total fittings eq length: **{run.fittings_eq_ft:.0f}** ft")
    st.markdown(f"Total equivalent length: **{run.total_eq_ft:.0f}** ft")
    st.markdown(f"Friction rate: **{run.friction_rate:.3f}** in. w.g. / 100 ft")
    st.metric("Total Run Pressure Drop (in. w.g.)", f"{run.total_drop:.3f}")

    st.caption(
        "Tip: Equivalent lengths vary by fitting style (radius, stamped vs smooth, flex conditions). "
        "Adjust the “Eq ft each” numbers to match your company charts/field experience."
    )
    return run


def render_downloads(result, run, chart_png=None):
    st.markdown("---")
    st.markdown("#### 📥 Downloads")

    st.text_input("Project name (for reports)", key="project_name")
    project = st.session_state.project_name
    slug = project.strip().replace(' ', '_') or 'Ductulator'
    material = st.session_state.material

    col_csv, col_pdf, col_doc = st.columns(3)

    with col_csv:
        st.download_button(
            label="🧾 Download Run Table (CSV)",
            data=run_table(run).to_csv(index=False).encode("utf-8"),
            file_name=f"Run_Loss_{slug}.csv",
            mime="text/csv",
        )

    # PDF and Word are built on request and kept until any input changes
    signature = repr((result, run, material, project))
    with col_pdf:
        if st.button("🛠️ Prepare PDF & Word Reports", key="prepare_reports"):
            st.session_state.reports = build_reports(result, run, material, chart_png, project, signature)

    reports = st.session_state.get("reports")
    if not reports:
        return
    if reports["signature"] != signature:
        col_doc.caption("Inputs changed since the reports were prepared.")
        return

    if "pdf" in reports:
        col_pdf.download_button(
            label="📄 Download PDF Report",
            data=reports["pdf"],
            file_name=f"Duct_Sizing_{slug}.pdf",
            mime="application/pdf",
        )
    if "docx" in reports:
        col_doc.download_button(
            label="📋 Download Calc Sheet (DOCX)",
            data=reports["docx"],
            file_name=f"Duct_Calc_{slug}.docx",
            mime="application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        )


def build_reports(result, run, material, chart_png, project, signature):
    reports = {"signature": signature}
    try:
        reports["pdf"] = generate_pdf_report(result, run, material, chart_png, project)
    except Exception as e:
        logger.exception("PDF generation failed")
        st.error(f"PDF generation error: {e}")
    try:
        reports["docx"] = generate_calc_sheet(result, run, material, project)
    except Exception as e:
        logger.exception("Calculation sheet generation failed")
        st.error(f"Calc sheet generation error: {e}")
    return reports


def render_notes():
    with st.expander("📝 Engineering Notes & Methodology"):
        st.markdown("""
**Calculation Methodology:**
- **Area:** round `π·(d/2)²`, rectangular `w·h`
- **Airflow / Size:** `CFM = A(ft²)·FPM`, or `A(ft²) = CFM / FPM` with ideal round `d = √(4A/π)`
- **Hydraulic Diameter:** round = stated diameter, rectangular `Dh = 2wh/(w+h)`
- **Rectangular Equivalence:** Huebscher `De = 1.30·(w·h)^0.625 / (w+h)^0.25`
- **Friction Factor:** laminar `f = 64/Re` (Re < 2300); turbulent Swamee-Jain
  `f = 0.25 / log10(ε/(3.7D) + 5.74/Re^0.9)²`
- **Friction Rate:** Darcy-Weisbach `Δp = f·(L/D)·ρV²/2` over 100 ft, ÷ 249.0889 Pa per in. w.g.
- **Run Loss:** `ΔP = friction rate × (straight + Σ qty·eq length) / 100`

**Notes:**
- Friction uses the hydraulic diameter of the size typed in, also in CFM → Size mode
- Blank or invalid numbers count as 0; results never show errors, only zeros
- Equivalent lengths and flex roughness are typical values, not published data
        """)


# ─────────────────────────────────────────────
# MAIN APP
# ─────────────────────────────────────────────
def main():
    st.set_page_config(
        page_title="Ductulator — Duct Sizing & Friction",
        page_icon="🌀",
        layout="wide",
    )
    setup_logging()

    st.markdown("""
    <style>
    .duct-header {
        background: linear-gradient(135deg, #2a3853 0%, #101820 100%);
        padding: 18px 26px;
        border-radius: 8px;
        margin-bottom: 18px;
        border-bottom: 4px solid #b11f33;
    }
    .duct-header h1 {
        color: white;
        margin: 0;
        font-size: 22px;
        font-weight: 900;
    }
    .duct-header p {
        color: #c8c9c7;
        margin: 4px 0 0 0;
        font-size: 13px;
    }
    </style>
    <div class="duct-header">
        <h1>Ductulator (with Friction + Run Loss)</h1>
        <p>Round &amp; rectangular duct sizing &nbsp;|&nbsp; Darcy-Weisbach friction &nbsp;|&nbsp; Equivalent-length run loss</p>
    </div>
    """, unsafe_allow_html=True)

    init_state()

    render_duct_inputs()

    duct_inputs, run_inputs = snapshot(st.session_state)
    result = calculate_duct(duct_inputs)
    logger.debug("Inputs %s -> %.1f CFM, %.4f in. w.g./100 ft", duct_inputs, result.cfm, result.friction_rate)
    curve = friction_curve(result)
    chart_png = generate_friction_chart(result, curve) if curve else None

    tab_duct, tab_run = st.tabs(["Duct / Friction", "Run Loss (Length + Fittings)"])
    with tab_duct:
        render_duct_results(result, chart_png)
    with tab_run:
        run = render_run(run_inputs, result)

    render_downloads(result, run, chart_png)
    render_notes()

    with st.sidebar:
        st.markdown("### 🌀 Ductulator")
        st.markdown(
            "Quick duct sizing for supply and return runs.\n\n"
            "**Modes:**\n"
            "- Type Size → Get CFM\n"
            "- Type CFM → Get Size\n\n"
            "**Materials:**\n"
            + "".join(f"- {label} (ε = {eps:g} m)\n" for label, eps in MATERIALS.values())
            + "\n**Typical targets:**\n"
            "- Residential supply: 600-900 FPM\n"
            "- Friction rate: ~0.08-0.10 in. w.g./100 ft\n"
        )
        st.markdown("---")
        st.button("🔄 Reset to defaults", on_click=reset)
        st.markdown("---")
        st.caption(f"v{APP_VERSION} — Darcy-Weisbach / Swamee-Jain friction")


if __name__ == "__main__":
    main()
