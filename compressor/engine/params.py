"""Parameter schema for the compressor.

This is the shared contract between the CLI, presets and scripts. All
parameter sources produce a dict in this format:

    {"threshold": dB, "knee": dB, "ratio": x:1,
     "attack": s, "release": s, "makeup": 0/1}

The defaults are a no-op compressor (ratio 1:1, threshold at 0 dB).
"""

from shared.params import ParamType as T, ParamDef, ParamSchema

# ── Schema ────────────────────────────────────────────────────────────

_PARAMS = [
    # --- Static curve ---
    ParamDef("threshold", T.FLOAT, section="curve", label="Threshold",
             default=0.0, unit=" dB", range=(-100.0, 0.0), step=1.0),

    ParamDef("knee", T.FLOAT, section="curve", label="Knee",
             default=0.0, unit=" dB", range=(0.0, 40.0), step=1.0),

    ParamDef("ratio", T.FLOAT, section="curve", label="Ratio",
             default=1.0, unit=":1", range=(1.0, 20.0), step=0.5),

    # --- Detector ---
    ParamDef("attack", T.FLOAT, section="detector", label="Attack",
             default=0.003, unit=" s", range=(0.0, 1.0), step=0.001),

    ParamDef("release", T.FLOAT, section="detector", label="Release",
             default=0.01, unit=" s", range=(0.0, 1.0), step=0.01),

    # --- Output ---
    # 1 = reference path with automatic makeup gain + peak normalization
    ParamDef("makeup", T.BOOL, section="output", label="Makeup Gain",
             default=0, bypass=0),
]

SCHEMA = ParamSchema(_PARAMS)

PARAM_RANGES = SCHEMA.param_ranges()
PARAM_SECTIONS = SCHEMA.param_sections()


def default_params():
    return SCHEMA.default_params()


def bypass_params():
    """All params at their no-effect position (same as the defaults)."""
    return SCHEMA.bypass_params()


def validate_params(raw):
    """Clean a raw dict: drop unknown keys, clamp, fill gaps from defaults."""
    params = default_params()
    params.update(SCHEMA.validate_and_clamp(raw))
    return params


def describe(params):
    """One-line human-readable summary, e.g. for CLI output."""
    parts = []
    for p in SCHEMA:
        v = params.get(p.key, p.default)
        if p.type == T.BOOL:
            parts.append(f"{p.label}: {'on' if v else 'off'}")
        else:
            parts.append(f"{p.label}: {v:g}{p.unit}")
    return ", ".join(parts)
