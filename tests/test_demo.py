import math

import pytest

from tramod.demo import (Sample, Violation, check_sample, format_sample,
                         main, reference_position, simulate)

LIMITS = dict(x_max=1.0, x_min=-2.0, dx_max=1.5, dx_min=-1.5,
              ddx_max=10.0, ddx_min=-10.0)


def test_reference_position_steps():
    assert reference_position(0.0) == -0.5
    assert reference_position(1.0) == 1.5
    assert reference_position(3.0) == 0.5


def test_reference_position_sinusoid_is_periodic_and_bounded():
    assert reference_position(6.0) == pytest.approx(
        reference_position(6.0 + math.pi))
    assert abs(reference_position(7.3)) <= 0.5


def test_simulate_sample_count_matches_duration():
    samples = list(simulate(tend=0.01, T=0.0005))
    assert len(samples) == round(0.01 / 0.0005) + 1
    assert samples[0].t == 0.0


def test_simulate_first_sample_has_zero_derivatives():
    first = next(iter(simulate(tend=0.01)))
    assert (first.dx, first.ddx, first.mod_dx, first.mod_ddx) == (0, 0, 0, 0)
    assert first.x == reference_position(0.0)


def test_simulated_run_satisfies_limits():
    violations = [v for sample in simulate(tend=1.0, **LIMITS)
                  for v in check_sample(sample, **LIMITS)]
    assert violations == []


def test_check_sample_reports_velocity_violation():
    sample = Sample(0.5, 0.0, 0.0, 0.0, 2.0, 0.0, 0.0)
    violations = check_sample(sample, **LIMITS)
    assert [v.quantity for v in violations] == ["velocity"]
    assert violations[0].value == 2.0
    assert "reference velocity failed" in violations[0].message


def test_check_sample_accepts_sample_inside_limits():
    sample = Sample(0.5, 0.0, 0.5, 0.0, 1.0, 0.0, -5.0)
    assert check_sample(sample, **LIMITS) == []


def test_check_sample_skips_position_when_limits_are_zero():
    sample = Sample(0.0, 0.0, 5.0, 0.0, 0.0, 0.0, 0.0)
    limits = dict(LIMITS, x_max=0.0, x_min=0.0)
    assert check_sample(sample, **limits) == []
    assert [v.quantity for v in check_sample(sample, **LIMITS)] == ["position"]


def test_violation_message_names_units():
    violation = Violation(1.0, "acceleration", 12.0, -10.0, 10.0)
    assert "m/s^2" in violation.message
    assert violation.message.startswith("1s error")


def test_format_sample_uses_general_format():
    sample = Sample(0.5, -0.5, 1.5, 0.0, 0.0, 0.0, 0.0)
    assert format_sample(sample) == "0.5 -0.5 1.5 0 0 0 0"


def test_main_writes_data_file(tmp_path, capsys):
    output = tmp_path / "data.dat"
    assert main(["--tend", "0.01", "--output", str(output)]) == 0
    lines = output.read_text(encoding="utf-8").splitlines()
    samples = list(simulate(tend=0.01))
    assert len(lines) == len(samples)
    assert lines[0] == format_sample(samples[0])
    printed = capsys.readouterr().out
    assert "Finish" in printed
    assert "Time: 0 s" in printed