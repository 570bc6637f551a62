"""
Ductulator Engine — duct sizing, friction rate and run loss
============================================================
Pure calculation core behind the Ductulator Streamlit app.

Engineering Basis:
  - Darcy-Weisbach friction loss: Δp = f*(L/D)*ρV²/2, L = 100 ft
  - Swamee-Jain explicit approximation of Colebrook for turbulent flow
  - f = 64/Re for laminar flow (Re < 2300)
  - Huebscher equivalent diameter for rectangular ducts
  - Hydraulic diameter Dh = 2ab/(a+b) for rectangular ducts
  - Fitting losses as equivalent length of straight duct

Every input arrives as free text from the page. Anything that does not parse
is treated as zero and every denominator is guarded, so a calculation always
returns finite numbers.
"""

import logging
import math
import re
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple

logger = logging.getLogger("ductulator.engine")

# Unsigned 0x / 0o / 0b integer literals; digit separators are not numbers
_RADIX_LITERAL = re.compile(r"0([xob])([0-9a-f]+)", re.IGNORECASE)
_RADIX_BASES = {"x": 16, "o": 8, "b": 2}

# ─────────────────────────────────────────────
# CONSTANTS
# ─────────────────────────────────────────────
AIR_DENSITY   = 1.2          # kg/m³
AIR_VISCOSITY = 1.81e-5      # Pa·s, dynamic

IN_TO_M         = 0.0254
FT_TO_M         = 0.3048
PA_PER_IN_WG    = 249.0889
M3S_PER_CFM     = 0.00047194745
SQIN_PER_SQFT   = 144.0
LAMINAR_RE      = 2300.0
RUN_LENGTH_FT   = 100.0       # friction rate reference length

MODE_FROM_SIZE = "from_size"
MODE_FROM_CFM  = "from_cfm"
MODES = {
    MODE_FROM_SIZE: "Type Size → Get CFM",
    MODE_FROM_CFM:  "Type CFM → Get Size",
}

SHAPE_ROUND = "round"
SHAPE_RECT  = "rect"
SHAPES = {
    SHAPE_ROUND: "Round",
    SHAPE_RECT:  "Rect",
}

# Absolute roughness (m). Flex is a rough approximation; adjust to
# company charts through the roughness override.
MATERIALS = {
    "galv": ("Galvanized Steel", 0.00015),
    "pvc":  ("PVC (smooth)", 0.0000015),
    "flex": ("Flex Duct (rough)", 0.0003),
}
DEFAULT_MATERIAL = "galv"

FITTING_KEYS = (
    "elbow90",
    "elbow45",
    "teeThru",
    "teeBranch",
    "wye45",
    "boot",
    "transition",
)

FITTING_LABELS = {
    "elbow90":    "90° Elbow",
    "elbow45":    "45° Elbow",
    "teeThru":    "Tee (Through)",
    "teeBranch":  "Tee (Branch)",
    "wye45":      "Wye 45°",
    "boot":       "Boot / Register",
    "transition": "Transition",
}

# Typical starting points (ft). Real values vary with radius, fitting style
# and size; the page lets every one of them be overridden.
DEFAULT_EQ_LEN_FT = {
    "elbow90":    25.0,
    "elbow45":    15.0,
    "teeThru":    20.0,
    "teeBranch":  60.0,
    "wye45":      30.0,
    "boot":       20.0,
    "transition": 15.0,
}


# ─────────────────────────────────────────────
# INPUT PARSING
# ─────────────────────────────────────────────
def to_num(value) -> float:
    """
    Parse a user-entered value. Anything that is not a finite number is 0.
    Accepts decimals, exponents and unsigned 0x/0o/0b integers; "1_000" is 0.
    """
    if value is None:
        return 0.0
    if isinstance(value, str):
        value = value.strip()
        if not value or "_" in value:
            return 0.0
        m = _RADIX_LITERAL.fullmatch(value)
        if m:
            try:
                return finite(float(int(m.group(2), _RADIX_BASES[m.group(1).lower()])))
            except (ValueError, OverflowError):
                return 0.0
    try:
        n = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    return finite(n)


def finite(x: float) -> float:
    """x, or 0 when x is NaN or infinite."""
    return x if math.isfinite(x) else 0.0


# ─────────────────────────────────────────────
# UNIT CONVERSIONS
# ─────────────────────────────────────────────
def in_to_m(inches: float) -> float:
    return inches * IN_TO_M


def ft_to_m(ft: float) -> float:
    return ft * FT_TO_M


def pa_to_in_wg(pa: float) -> float:
    return pa / PA_PER_IN_WG


def cfm_to_m3s(cfm: float) -> float:
    return cfm * M3S_PER_CFM


# ─────────────────────────────────────────────
# ENGINEERING FUNCTIONS
# ─────────────────────────────────────────────
def round_area_in2(d_in: float) -> float:
    """Cross-sectional area of round duct in sq. inches."""
    r = d_in / 2.0
    return math.pi * r * r


def equivalent_round_in(a_in: float, b_in: float) -> float:
    """Circular equivalent diameter for a rectangular duct (Huebscher)."""
    if a_in <= 0 or b_in <= 0:
        return 0.0
    return 1.30 * (a_in * b_in) ** 0.625 / (a_in + b_in) ** 0.25


def hydraulic_diameter_rect(a_in: float, b_in: float) -> float:
    """Hydraulic diameter Dh = 4A/P = 2ab/(a+b) for rectangular duct."""
    if a_in <= 0 or b_in <= 0:
        return 0.0
    return 2.0 * a_in * b_in / (a_in + b_in)


def ideal_round_in(area_in2: float) -> float:
    """Diameter of the circle with the given area."""
    if area_in2 <= 0:
        return 0.0
    return 2.0 * math.sqrt(area_in2 / math.pi)


def reynolds_number(rho: float, v_ms: float, d_m: float, mu: float) -> float:
    if mu <= 0:
        return 0.0
    return rho * v_ms * d_m / mu


def friction_factor_darcy(re: float, eps_m: float, d_m: float) -> float:
    """
    Darcy friction factor.
    Laminar: f = 64/Re. Turbulent: Swamee-Jain
        f = 0.25 / log10(ε/(3.7D) + 5.74/Re^0.9)²
    """
    if re <= 0 or d_m <= 0:
        return 0.0
    if re < LAMINAR_RE:
        return 64.0 / re
    term = eps_m / (3.7 * d_m) + 5.74 / re ** 0.9
    if not 0 < term < math.inf or term == 1.0:
        return 0.0
    log_term = math.log10(term)
    return 0.25 / (log_term * log_term)


def friction_rate_per_100ft(cfm: float, area_in2: float, dh_in: float, eps_m: float,
                            rho: float = AIR_DENSITY, mu: float = AIR_VISCOSITY) -> float:
    """Friction loss over 100 ft of straight duct, in. w.g."""
    rate, _, _ = _friction(cfm, area_in2, dh_in, eps_m, rho, mu)
    return rate


def _friction(cfm, area_in2, dh_in, eps_m, rho, mu) -> Tuple[float, float, float]:
    """
    Returns (friction rate in. w.g./100 ft, Reynolds number, friction factor).
    Intermediates that overflow collapse to 0 instead of propagating inf/NaN.
    """
    q = finite(cfm_to_m3s(cfm))
    a = finite(area_in2 * IN_TO_M * IN_TO_M) if area_in2 > 0 else 0.0
    v = finite(q / a) if a > 0 else 0.0

    d = finite(in_to_m(dh_in))
    re = finite(reynolds_number(rho, v, d, mu))
    f = finite(friction_factor_darcy(re, eps_m, d))

    length = ft_to_m(RUN_LENGTH_FT)
    dp_pa = f * (length / d) * (rho * v * v / 2.0) if d > 0 else 0.0
    return finite(pa_to_in_wg(dp_pa)), re, f


# ─────────────────────────────────────────────
# SIZING ENGINE
# ─────────────────────────────────────────────
@dataclass(frozen=True)
class DuctInputs:
    """Snapshot of every duct/air input at one moment."""
    mode: str = MODE_FROM_SIZE
    shape: str = SHAPE_ROUND
    material: str = DEFAULT_MATERIAL
    target_fpm: float = 0.0
    round_dia_in: float = 0.0
    rect_w_in: float = 0.0
    rect_h_in: float = 0.0
    cfm: float = 0.0
    roughness_override_m: float = 0.0
    air_density: float = AIR_DENSITY
    air_viscosity: float = AIR_VISCOSITY

    @classmethod
    def from_fields(cls, mode: str, shape: str, material: str, target_fpm, round_dia,
                    rect_w, rect_h, cfm, roughness_override=None) -> "DuctInputs":
        """Build a snapshot from raw text fields."""
        return cls(
            mode=mode,
            shape=shape,
            material=material,
            target_fpm=to_num(target_fpm),
            round_dia_in=to_num(round_dia),
            rect_w_in=to_num(rect_w),
            rect_h_in=to_num(rect_h),
            cfm=to_num(cfm),
            roughness_override_m=to_num(roughness_override),
        )

    @property
    def roughness_m(self) -> float:
        if self.roughness_override_m > 0:
            return self.roughness_override_m
        return material_roughness(self.material)


@dataclass(frozen=True)
class DuctResult:
    mode: str
    shape: str
    cfm: float
    area_in2: float
    area_ft2: float
    velocity_fpm: float
    dh_in: float
    eq_round_in: float
    ideal_round_in: float
    roughness_m: float
    reynolds: float
    friction_factor: float
    friction_rate: float          # in. w.g. / 100 ft
    air_density: float = AIR_DENSITY
    air_viscosity: float = AIR_VISCOSITY


def material_roughness(material: str) -> float:
    """Absolute roughness (m); unknown keys fall back to flex."""
    return MATERIALS.get(material, MATERIALS["flex"])[1]


def _size_area_in2(inputs: DuctInputs) -> float:
    if inputs.shape == SHAPE_ROUND:
        d = inputs.round_dia_in
        return round_area_in2(d) if d > 0 else 0.0
    w, h = inputs.rect_w_in, inputs.rect_h_in
    return w * h if w > 0 and h > 0 else 0.0


def calculate_duct(inputs: DuctInputs) -> DuctResult:
    """
    Main sizing calculation.
    from_size: area from the stated size, CFM = area × velocity.
    from_cfm:  area = CFM / velocity, sized back to an ideal round diameter.
    Friction always uses the hydraulic diameter of the stated size.
    """
    fpm = finite(inputs.target_fpm)

    # Sizes large enough to overflow a float are degenerate: they size to zero
    if inputs.mode == MODE_FROM_CFM:
        cfm = finite(inputs.cfm) if inputs.cfm > 0 else 0.0
        area_ft2 = finite(cfm / fpm) if fpm > 0 else 0.0
        area_in2 = finite(area_ft2 * SQIN_PER_SQFT)
    else:
        area_in2 = finite(_size_area_in2(inputs))
        area_ft2 = area_in2 / SQIN_PER_SQFT
        cfm = finite(area_ft2 * fpm) if area_ft2 > 0 and fpm > 0 else 0.0
    area_ft2 = area_in2 / SQIN_PER_SQFT

    if inputs.shape == SHAPE_ROUND:
        dh_in = finite(inputs.round_dia_in)
        eq_round = 0.0
    else:
        dh_in = finite(hydraulic_diameter_rect(inputs.rect_w_in, inputs.rect_h_in))
        eq_round = finite(equivalent_round_in(inputs.rect_w_in, inputs.rect_h_in))

    velocity = finite(cfm / area_ft2) if area_ft2 > 0 else 0.0

    eps = inputs.roughness_m
    rate, re, f = _friction(cfm, area_in2, dh_in, eps, inputs.air_density, inputs.air_viscosity)

    if area_in2 <= 0:
        logger.debug("Degenerate duct input (mode=%s, shape=%s): zero area", inputs.mode, inputs.shape)

    return DuctResult(
        mode=inputs.mode,
        shape=inputs.shape,
        cfm=cfm,
        area_in2=area_in2,
        area_ft2=area_ft2,
        velocity_fpm=velocity,
        dh_in=dh_in,
        eq_round_in=eq_round,
        ideal_round_in=ideal_round_in(area_in2),
        roughness_m=eps,
        reynolds=re,
        friction_factor=f,
        friction_rate=rate,
        air_density=inputs.air_density,
        air_viscosity=inputs.air_viscosity,
    )


def friction_curve(result: DuctResult, n_points: int = 20, max_frac: float = 1.5) -> List[Tuple[float, float]]:
    """
    Friction rate vs airflow for the current duct, 0 to max_frac × CFM.
    Area and hydraulic diameter are held at the current values.
    Returns list of (cfm, in. w.g./100 ft) tuples.
    """
    if result.cfm <= 0 or result.area_in2 <= 0 or n_points < 1:
        return []
    points = []
    for i in range(n_points + 1):
        cfm = finite(result.cfm * max_frac * i / n_points)
        rate = friction_rate_per_100ft(cfm, result.area_in2, result.dh_in, result.roughness_m,
                                       result.air_density, result.air_viscosity)
        points.append((cfm, rate))
    return points


# ─────────────────────────────────────────────
# RUN LOSS ENGINE
# ─────────────────────────────────────────────
@dataclass(frozen=True)
class FittingEntry:
    kind: str
    quantity: float = 0.0
    eq_length_ft: float = 0.0

    @property
    def label(self) -> str:
        return FITTING_LABELS[self.kind]

    @property
    def eq_total_ft(self) -> float:
        return finite(self.quantity * self.eq_length_ft)


def default_fittings() -> Dict[str, FittingEntry]:
    return {k: FittingEntry(k, 0.0, DEFAULT_EQ_LEN_FT[k]) for k in FITTING_KEYS}


@dataclass(frozen=True)
class RunInputs:
    """Straight length plus one entry for every fitting kind."""
    straight_ft: float = 0.0
    fittings: Mapping[str, FittingEntry] = field(default_factory=default_fittings)

    @classmethod
    def from_fields(cls, straight, counts: Optional[Mapping] = None,
                    eq_lengths: Optional[Mapping] = None) -> "RunInputs":
        """Build a snapshot from raw text fields keyed by fitting kind."""
        counts = counts or {}
        eq_lengths = eq_lengths or {}
        fittings = {}
        for k in FITTING_KEYS:
            eq = eq_lengths[k] if k in eq_lengths else DEFAULT_EQ_LEN_FT[k]
            fittings[k] = FittingEntry(k, to_num(counts.get(k)), to_num(eq))
        return cls(straight_ft=to_num(straight), fittings=fittings)

    def entry(self, kind: str) -> FittingEntry:
        return self.fittings.get(kind) or FittingEntry(kind, 0.0, DEFAULT_EQ_LEN_FT[kind])


@dataclass(frozen=True)
class RunResult:
    items: List[FittingEntry]
    straight_ft: float
    fittings_eq_ft: float
    total_eq_ft: float
    friction_rate: float
    total_drop: float             # in. w.g.


def calculate_run(run: RunInputs, friction_rate: float) -> RunResult:
    """Total equivalent length and pressure drop of a duct run."""
    items = [run.entry(k) for k in FITTING_KEYS]
    straight = finite(run.straight_ft)
    fittings_eq = finite(sum(it.eq_total_ft for it in items))
    total_eq = finite(straight + fittings_eq)
    total_drop = finite(friction_rate * (total_eq / RUN_LENGTH_FT))
    return RunResult(
        items=items,
        straight_ft=straight,
        fittings_eq_ft=fittings_eq,
        total_eq_ft=total_eq,
        friction_rate=friction_rate,
        total_drop=total_drop,
    )
