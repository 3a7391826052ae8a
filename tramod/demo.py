"""Demonstration run of the trajectory modifier on a stepped and sinusoidal
reference, writing the samples to a data file and reporting violations."""

from __future__ import annotations

import argparse
import math
from dataclasses import astuple, dataclass
from typing import Iterator

from tramod.modifier import TrajectoryModifier


@dataclass(frozen=True)
class Sample:
    """One time step of the reference and of the modified trajectory."""

    t: float
    x: float
    mod_x: float
    dx: float
    mod_dx: float
    ddx: float
    mod_ddx: float


@dataclass(frozen=True)
class Violation:
    """A modified quantity found outside its limits."""

    t: float
    quantity: str
    value: float
    lower: float
    upper: float

    @property
    def message(self) -> str:
        unit = {"position": "m", "velocity": "m/s",
                "acceleration": "m/s^2"}[self.quantity]
        return (f"{self.t:.3g}s error, reference {self.quantity} failed to "
                f"satisfy the constraints as{self.lower:.3g} {unit} <="
                f"{self.value:.3g} {unit} <= {self.upper:.3g} {unit}")


def _round_half_away(value: float) -> int:
    magnitude = math.floor(abs(value) + 0.5)
    return int(magnitude if value >= 0 else -magnitude)


def _micro(value: float) -> int:
    return _round_half_away(1000000 * value)


def reference_position(t):
    """The test reference: three steps followed by a sinusoid."""
    if t < 0.5:
        return -0.5
    if t < 2.5:
        return 1.5
    if t < 5:
        return 0.5
    return 0.5 * math.sin(2 * t)


def simulate(tend=10.0, T=0.0005, x_max=1.0, x_min=-2.0, dx_max=1.5,
             dx_min=-1.5, ddx_max=10.0, ddx_min=-10.0, w1=700.0, w2=700.0,
             epth=1e-8, kth=10) -> Iterator[Sample]:
    """Yield a :class:`Sample` for every step from 0 to ``tend``."""
    modifier = TrajectoryModifier(reference_position(0.0), w1, w2, x_max,
                                  x_min, dx_max, dx_min, ddx_max, ddx_min,
                                  epth, kth, T)
    last_step = _round_half_away(tend / T)
    t = 0.0
    prev_x = prev_mod_x = None
    prev_dx = prev_mod_dx = 0.0
    while _round_half_away(t / T) <= last_step:
        x = reference_position(t)
        mod_x = modifier.modify(x)
        if prev_x is None:
            prev_x, prev_mod_x = x, mod_x
        dx = (x - prev_x) / T
        ddx = (dx - prev_dx) / T
        mod_dx = (mod_x - prev_mod_x) / T
        mod_ddx = (mod_dx - prev_mod_dx) / T
        prev_x, prev_dx = x, dx
        prev_mod_x, prev_mod_dx = mod_x, mod_dx
        yield Sample(t, x, mod_x, dx, mod_dx, ddx, mod_ddx)
        t += T


def check_sample(sample, x_max, x_min, dx_max, dx_min, ddx_max, ddx_min):
    """Return the violations of the limits found in ``sample``, at micro
    resolution. Position is not checked when both position limits are zero."""
    checks = [
        ("velocity", sample.mod_dx, dx_min, dx_max),
        ("acceleration", sample.mod_ddx, ddx_min, ddx_max),
    ]
    if not (_micro(x_min) == 0 and _micro(x_max) == 0):
        checks.insert(0, ("position", sample.mod_x, x_min, x_max))
    return [
        Violation(sample.t, name, value, lower, upper)
        for name, value, lower, upper in checks
        if _micro(value) < _micro(lower) or _micro(upper) < _micro(value)
    ]


def format_sample(sample):
    """Format a sample as one whitespace-separated data line."""
    return " ".join(f"{value:g}" for value in astuple(sample))


def _format_status(sample: Sample) -> str:
    return (f"Time: {sample.t:.3g} s, Pos.: {sample.mod_x:.3g} m, "
            f"Vel.: {sample.mod_dx:.3g} m/s, Acc.: {sample.mod_ddx:.3g} m/s^2")


def main(argv=None):
    """Run the demonstration and write the samples to a data file."""
    parser = argparse.ArgumentParser(
        description="Run the trajectory modification demonstration.")
    parser.add_argument("--tend", type=float, default=10.0,
                        help="duration of the run in seconds")
    parser.add_argument("--period", type=float, default=0.0005,
                        help="sampling period in seconds")
    parser.add_argument("--output", default="DATA.dat",
                        help="file the samples are written to")
    args = parser.parse_args(argv)

    limits = dict(x_max=1.0, x_min=-2.0, dx_max=1.5, dx_min=-1.5,
                  ddx_max=10.0, ddx_min=-10.0)
    T = args.period
    status_every = _round_half_away(0.5 / T)

    print("=====================================")
    print("       Trajectory Modification       ")
    print("=====================================")
    with open(args.output, "w", encoding="utf-8") as out:
        for sample in simulate(tend=args.tend, T=T, **limits):
            for violation in check_sample(sample, **limits):
                print()
                print(violation.message)
            out.write(format_sample(sample) + "\n")
            if _round_half_away(sample.t / T) % status_every == 0:
                print(_format_status(sample))
    print("=============== Finish ==============")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())