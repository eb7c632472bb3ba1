"""Extract amplitude and CFD timing features from a stack of digitized pulses.

Input is a ``.npy`` array of shape ``(n_pulses, n_samples)`` (a single 1D
pulse is accepted too).  Output is one CSV row per pulse.
"""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import numpy as np

from wfd_analysis.analysis.pipeline import analyze_pulses, summarize_features
from wfd_analysis.models.profile import AnalysisProfile


def _profile_from_args(ns) -> AnalysisProfile:
    overrides: Dict[str, Any] = {}
    for key in (
        "sampling_frequency_ghz",
        "scale",
        "baseline_begin",
        "baseline_end",
        "cfd_constant",
        "cfd_delay_samples",
        "amplitude_half_window",
    ):
        v = getattr(ns, key)
        if v is not None:
            overrides[key] = v

    if ns.profile:
        return AnalysisProfile.load(ns.profile, **overrides)
    if "sampling_frequency_ghz" not in overrides:
        raise SystemExit("error: --sampling-frequency-ghz is required when no --profile is given")
    return AnalysisProfile.from_dict(overrides)


def main(argv: Optional[Sequence[str]] = None) -> int:
    import argparse
    import textwrap

    p = argparse.ArgumentParser(
        prog="python -m wfd_analysis.scripts.extract_features",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description=textwrap.dedent(
            """\
            Calibrate digitized pulses and extract their amplitude and CFD crossing time.

            Settings come from --profile (JSON, see AnalysisProfile.to_dict) and/or the
            individual options below; options override the profile.
            """
        ),
    )

    p.add_argument("waveforms", help="Input .npy file, shape (n_pulses, n_samples)")
    p.add_argument("--profile", default=None, help="JSON analysis profile")
    p.add_argument("--sampling-frequency-ghz", type=float, default=None, help="Sampling frequency in GHz")
    p.add_argument("--scale", type=float, default=None, help="Calibration scale (negative flips polarity)")
    p.add_argument("--baseline-begin", type=int, default=None, help="First baseline sample (inclusive)")
    p.add_argument("--baseline-end", type=int, default=None, help="Last baseline sample (inclusive)")
    p.add_argument("--cfd-constant", type=float, default=None, help="CFD attenuation constant")
    p.add_argument("--cfd-delay-samples", type=int, default=None, help="CFD delay in samples")
    p.add_argument("--amplitude-half-window", type=int, default=None, help="Half-width of the amplitude fit")
    p.add_argument("--out", default=None, help="Output CSV (default: <waveforms>_features.csv)")
    p.add_argument("--save-profile", default=None, help="Also write the effective profile as JSON")
    p.add_argument("-v", "--verbose", action="count", default=0, help="-v for info, -vv for debug logging")

    ns = p.parse_args(list(argv) if argv is not None else None)

    level = logging.WARNING
    if ns.verbose == 1:
        level = logging.INFO
    elif ns.verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    profile = _profile_from_args(ns)

    src = Path(ns.waveforms)
    waveforms = np.load(src)
    print(f"[info] loaded {src.name}: shape={waveforms.shape}")

    df = analyze_pulses(waveforms, profile)

    out = Path(ns.out) if ns.out else src.with_name(src.stem + "_features.csv")
    df.to_csv(out, index=False)
    print(f"[info] wrote: {out}")

    if ns.save_profile:
        saved = profile.save(ns.save_profile)
        print(f"[info] profile: {saved}")

    s = summarize_features(df)
    print(f"  pulses: {s['N']} (ok: {s['N_ok']})")
    print(f"  amplitude: mean={s['amplitude_mean']:.6g} std={s['amplitude_std']:.6g}")
    print(f"  crossing time [ns]: mean={s['crossing_time_mean']:.6g} std={s['crossing_time_std']:.6g}")
    for label, counts in (("amplitude", s["amplitude_failures"]), ("timing", s["timing_failures"])):
        for kind, n in sorted(counts.items()):
            print(f"[warn] {label}: {n} pulse(s) failed with {kind}")

    if ns.verbose:
        print(f"  profile: {dataclasses.asdict(profile)}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
