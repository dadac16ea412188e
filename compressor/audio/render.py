"""Offline WAV rendering for the compressor.

Usage:
    python -m compressor.audio.render input.wav output.wav [--preset preset.json]
        [--threshold -20] [--knee 6] [--ratio 4] [--attack 0.003] [--release 0.01]
        [--makeup | --no-makeup] [--series series.json --width 800]
"""

import argparse
import json
import logging
import sys

from compressor.engine.params import default_params, describe, validate_params
from compressor.engine.reference import process
from compressor.engine.visualize import sample_visualization, waveform_columns
from primitives.gain_curve import amp_to_db, curve_zone
from shared.analysis import compare
from shared.audio import load_wav, save_wav
from shared.streaming import safety_check

log = logging.getLogger(__name__)

_OVERRIDES = ["threshold", "knee", "ratio", "attack", "release"]


def load_preset(path):
    with open(path) as f:
        return json.load(f)


def build_params(args):
    """Defaults <- preset file <- command-line overrides, then clamped."""
    params = default_params()
    if args.preset:
        params.update(load_preset(args.preset))
    for key in _OVERRIDES:
        value = getattr(args, key)
        if value is not None:
            params[key] = value
    if args.makeup is not None:
        params["makeup"] = 1 if args.makeup else 0
    return validate_params(params)


def _columns(buffer, width):
    lo, hi = waveform_columns(buffer.channel(0), width)
    return {"min": lo.tolist(), "max": hi.tolist()}


def save_series(path, buffer, output, params, width):
    """Write the visualization series as JSON for an external plotter.

    Waveform traces are channel 0, one min/max pair per column. "zone"
    tags each envelope column with the part of the curve it sits in.
    """
    envelope, gain_reduction = sample_visualization(buffer, params, width)
    zones = [curve_zone(amp_to_db(e), params["threshold"], params["knee"])
             for e in envelope]
    payload = {
        "width": width,
        "sample_rate": buffer.sample_rate,
        "params": params,
        "envelope": envelope.tolist(),
        "gain_reduction": gain_reduction.tolist(),
        "zone": zones,
        "waveform_original": _columns(buffer, width),
        "waveform_processed": _columns(output, width),
    }
    with open(path, "w") as f:
        json.dump(payload, f, indent=2)


def build_parser():
    parser = argparse.ArgumentParser(description="Compressor offline renderer")
    parser.add_argument("input", help="Input WAV file")
    parser.add_argument("output", help="Output WAV file")
    parser.add_argument("--preset", help="Preset JSON file")
    parser.add_argument("--threshold", type=float, help="dB, -100..0")
    parser.add_argument("--knee", type=float, help="dB, 0..40")
    parser.add_argument("--ratio", type=float, help="1..20")
    parser.add_argument("--attack", type=float, help="seconds, 0..1")
    parser.add_argument("--release", type=float, help="seconds, 0..1")
    parser.add_argument("--makeup", action=argparse.BooleanOptionalAction,
                        help="Automatic makeup gain + peak normalization")
    parser.add_argument("--series", help="Also write envelope/gain-reduction series (JSON)")
    parser.add_argument("--width", type=int, default=800,
                        help="Series length in pixels (default 800)")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(name)s %(levelname)s: %(message)s")

    params = build_params(args)
    buffer = load_wav(args.input)
    ch = "stereo" if buffer.n_channels == 2 else f"{buffer.n_channels} ch"
    print(f"Loaded {args.input}: {buffer.length} samples, {buffer.sample_rate} Hz, {ch}")
    print(describe(params))

    output = process(buffer, params)
    ok, err = safety_check(output)
    if not ok:
        log.error(err)
        return 1
    save_wav(args.output, output)
    print(f"Saved {args.output}")

    metrics = compare(buffer, output)
    log.info("peak %s dB (%+.1f), rms %s dB (%+.1f), max reduction %s dB",
             metrics.get("peak_db"), metrics.get("peak_change_db") or 0.0,
             metrics.get("rms_db"), metrics.get("rms_change_db") or 0.0,
             metrics.get("max_reduction_db"))

    if args.series:
        save_series(args.series, buffer, output, params, args.width)
        print(f"Saved {args.series}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
