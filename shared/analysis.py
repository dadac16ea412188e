"""Level metrics for before/after comparison.

analyze() reports peak, RMS and crest factor of one buffer; compare()
adds how much a processing pass changed them. Levels are dBFS rounded
to 0.1 dB, None for silence.
"""

import numpy as np


def analyze(buffer):
    """Level metrics for an AudioBuffer (all channels mixed to mono).

    Returns dict with keys: peak_db, rms_db, crest_factor, duration,
    n_channels, sample_rate. Empty dict for an empty buffer.
    """
    if buffer is None or buffer.length == 0:
        return {}
    mono = _to_mono(buffer)
    rms = float(np.sqrt(np.mean(mono ** 2)))
    peak = float(np.max(np.abs(buffer.data)))
    return {
        "peak_db": round(20.0 * np.log10(peak), 1) if peak > 1e-12 else None,
        "rms_db": round(20.0 * np.log10(rms), 1) if rms > 1e-12 else None,
        "crest_factor": _crest_factor(mono),
        "duration": round(buffer.duration, 3),
        "n_channels": buffer.n_channels,
        "sample_rate": buffer.sample_rate,
    }


def compare(original, processed):
    """Metrics of processed plus deltas against original.

    Extra keys: peak_change_db, rms_change_db, crest_change_db,
    max_reduction_db (largest per-sample level drop).
    """
    result = analyze(processed)
    ref = analyze(original)
    if not result or not ref:
        return result
    for key, delta in (("peak_db", "peak_change_db"), ("rms_db", "rms_change_db"),
                       ("crest_factor", "crest_change_db")):
        if result[key] is not None and ref[key] is not None:
            result[delta] = round(result[key] - ref[key], 1)
        else:
            result[delta] = None
    result["max_reduction_db"] = _max_reduction(original.data, processed.data)
    return result


def _to_mono(buffer):
    """Convert to 1-D mono float64."""
    return buffer.data.mean(axis=0)


def _crest_factor(mono):
    """Peak-to-RMS ratio in dB."""
    rms = np.sqrt(np.mean(mono ** 2))
    peak = np.max(np.abs(mono))
    if rms < 1e-12:
        return None
    return round(20.0 * np.log10(peak / rms), 2)


def _max_reduction(dry, wet):
    """Largest level drop in dB over samples where the input is audible."""
    if dry.shape != wet.shape:
        return None
    mask = np.abs(dry) > 1e-6
    if not np.any(mask):
        return 0.0
    ratio = np.abs(wet[mask]) / np.abs(dry[mask])
    ratio = np.maximum(ratio, 1e-12)
    return round(float(-20.0 * np.log10(np.min(ratio))), 1)
