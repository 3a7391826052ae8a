# tramod

`tramod` takes a position reference trajectory one sample at a time and
modifies it so that it stays within limits on position, velocity and
acceleration.

For each new sample, a small quadratic program finds the smallest correction
that keeps velocity and acceleration inside their bounds. The program is
solved with a primal-dual interior-point method. After that, a look-ahead
braking test changes the trajectory so that its predicted stopping point stays
inside the position limits.

## Installation

```
pip install .
```

Running the tests needs the `test` extra:

```
pip install ".[test]"
pytest
```

## Usage

```python
from tramod.modifier import TrajectoryModifier

T = 0.0005  # sampling period [s]
modifier = TrajectoryModifier(
    x_k=-0.5,                   # initial position
    w1=700, w2=700,             # QP weights
    x_max=1, x_min=-2,          # position limits
    dx_max=1.5, dx_min=-1.5,    # velocity limits
    ddx_max=10, ddx_min=-10,    # acceleration limits
    epth=1e-8, kth=10,          # interior-point tolerance and iteration cap
    T=T,
)

for reference in (-0.5, 1.5, 1.5, 1.5):
    position = modifier.modify(reference)
    print(position)
```

The output runs two samples behind the input. The value that
`modify` returns is the corrected reference of two calls earlier.

If both `x_max` and `x_min` are `0`, the position limits are off and only the
velocity and acceleration limits apply.

Sometimes the starting point of the quadratic program already breaks the
constraints. When that happens, the modifier holds the previous corrected
position and logs a warning on the `tramod.modifier` logger.

You can change the limits, weights and sampling period while running with
`TrajectoryModifier.set_parameters(w1, w2, x_max, x_min, dx_max, dx_min,
ddx_max, ddx_min, T)`. The position step clamps values with
`tramod.modifier.saturate(value, lower, upper)`.

## Demonstration

```
tramod-demo
```

This command runs a step-and-sine reference through the modifier. By default
the run lasts ten seconds at a 0.5 ms period. As it runs, the command:

- writes one line per sample to `DATA.dat`: time, then the input and modified position, velocity and acceleration;
- prints a progress line every half second;
- reports every sample that breaks a limit.

Options:

- `--tend SECONDS`: duration of the run (default `10.0`)
- `--period SECONDS`: sampling period (default `0.0005`)
- `--output PATH`: file the samples are written to (default `DATA.dat`)

`tramod.demo` also provides the individual pieces:

- `reference_position(t)` gives the test input.
- `simulate(...)` yields `Sample` records.
- `check_sample(...)` returns a list of `Violation` records for one sample. Each record has a `message` property.
- `format_sample(sample)` gives the sample's data-file line.

The package writes only the plain data file. It does not plot the results.