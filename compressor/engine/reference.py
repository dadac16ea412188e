"""Reference path — compression with automatic makeup gain.

Models a stock dynamics processor that raises its output to make up for
the reduction its curve applies at full scale:

    full_range_gain = curve output for a 0 dBFS input
    makeup          = (1 / full_range_gain) ^ 0.6

Makeup can push peaks past full scale, so the result goes through
normalize_peak afterwards.
"""

import logging

from compressor.engine.compressor import compress
from primitives.gain_curve import db_to_amp, gain_reduction_db
from shared.streaming import normalize_peak

log = logging.getLogger(__name__)

MAKEUP_EXPONENT = 0.6


def makeup_gain_db(params):
    """Automatic makeup gain in dB (>= 0) for a params dict."""
    full_range_gr = gain_reduction_db(0.0, float(params["threshold"]),
                                      float(params["knee"]), float(params["ratio"]))
    return MAKEUP_EXPONENT * full_range_gr


def render_reference(buffer, params):
    """compress() + makeup gain + peak normalization. Input untouched."""
    out = compress(buffer, params)
    if out is None or out.length == 0:
        return out
    makeup_db = makeup_gain_db(params)
    if makeup_db > 0.0:
        out.data *= db_to_amp(makeup_db)
        log.debug("makeup gain %+.1f dB", makeup_db)
    normalize_peak(out)
    return out


def process(buffer, params):
    """Run whichever path params["makeup"] selects."""
    if params.get("makeup"):
        return render_reference(buffer, params)
    return compress(buffer, params)
