"""Online position trajectory modification under position, velocity and
acceleration constraints.

Each incoming reference sample is buffered for two steps; a small quadratic
programme is solved with a primal-dual interior-point method to find the
smallest correction that keeps velocity and acceleration within bounds. A
look-ahead braking test then keeps the position inside its limits.
"""

from __future__ import annotations

import logging
import math
from collections import deque

import numpy as np

logger = logging.getLogger(__name__)

_SIGMA = 0.1  # centring parameter of the interior-point step
_GAMMA = 0.99  # fraction of the step to the boundary that is taken
_ALPHA_MAX = 10.0  # largest step length tried
_N = 3  # decision variables: corrections e_{k+2}, e_{k+1}, e_k
_L = 12  # inequality constraints
_LAMBDA_FLOOR = 1e-10


def saturate(value, lower, upper):
    """Clamp ``value`` to the closed interval ``[lower, upper]``."""
    if value >= upper:
        return upper
    if value <= lower:
        return lower
    return value


def _round_half_away(value: float) -> int:
    magnitude = math.floor(abs(value) + 0.5)
    return int(magnitude if value >= 0 else -magnitude)


class TrajectoryModifier:
    """Modifies a position reference so that it satisfies the given limits.

    The output lags the input by two samples: the value returned by
    :meth:`modify` is the corrected reference of two calls earlier.
    Setting both ``x_max`` and ``x_min`` to zero disables the position limits.
    """

    def __init__(self, x_k, w1, w2, x_max, x_min, dx_max, dx_min,
                 ddx_max, ddx_min, epth, kth, T):
        self.epth = epth
        self.kth = kth
        # Oldest first: x_{k-2}, x_{k-1}, x_k, x_{k+1}, x_{k+2}.
        self._history = deque([float(x_k)] * 5, maxlen=5)
        self._e_km1 = 0.0
        self._e_km2 = 0.0
        self._ep = 0.0
        self.set_parameters(w1, w2, x_max, x_min, dx_max, dx_min,
                            ddx_max, ddx_min, T)
        self._x = np.zeros(_N)
        self._c = np.zeros(_N)
        self._r = np.zeros(_L)
        self._lam = np.ones(_L)
        self._z = np.concatenate((self._x, self._lam))
        self._s = self._r - self._D @ self._x

    def set_parameters(self, w1, w2, x_max, x_min, dx_max, dx_min,
                       ddx_max, ddx_min, T):
        """Replace the weights, limits and sampling period."""
        self.x_max = x_max
        self.x_min = x_min
        self.dx_max = dx_max
        self.dx_min = dx_min
        self.ddx_max = ddx_max
        self.ddx_min = ddx_min
        self.T = T
        self._V = np.array([
            [w2, -w2, 0.0],
            [-w2, w1 + w2, -w1],
            [0.0, -w1, 1.0 + w1],
        ], dtype=float)
        it, it2 = 1.0 / T, 1.0 / T / T
        a2 = [[it, -it, 0.0], [it2, -2.0 * it2, it2]]
        a1 = [[0.0, it, -it], [0.0, it2, -2.0 * it2]]
        a0 = [[0.0, 0.0, it], [0.0, 0.0, it2]]
        A = np.array(a2 + a1 + a0, dtype=float)
        self._D = np.vstack((A, -A))
        self._DtD_inv = np.linalg.inv(self._D.T @ self._D)

    @property
    def _position_limits_enabled(self) -> bool:
        return not (_round_half_away(100000 * self.x_min) == 0
                    and _round_half_away(100000 * self.x_max) == 0)

    def modify(self, x_k):
        """Feed one reference sample and return the corrected, delayed one."""
        self._history.append(float(x_k))
        x_km2, x_km1, x_cur, x_kp1, x_kp2 = self._history
        T = self.T
        it, it2 = 1.0 / T, 1.0 / T / T
        e1, e2 = self._e_km1, self._e_km2

        b0 = (-it * e1 + it * (x_cur - x_km1),
              -it2 * (2 * e1 - e2) + it2 * (x_cur - 2 * x_km1 + x_km2))
        b1 = (it * (x_kp1 - x_cur),
              it2 * e1 + it2 * (x_kp1 - 2 * x_cur + x_km1))
        b2 = (it * (x_kp2 - x_kp1),
              it2 * (x_kp2 - 2 * x_kp1 + x_cur))
        B = np.array(b2 + b1 + b0)
        phi_max = np.tile([self.dx_max, self.ddx_max], 3)
        phi_min = np.tile([self.dx_min, self.ddx_min], 3)
        self._r = np.concatenate((phi_max - B, -phi_min + B))

        # Start from the corrections that zero the accelerations.
        x2 = -T * T * b0[1]
        x1 = 2 * x2 - T * T * b1[1]
        x0 = 2 * x1 - x2 - T * T * b2[1]
        self._x = np.array([x0, x1, x2])
        lam = -self._D @ self._DtD_inv @ self._V @ self._x
        lam[lam < 0] = _LAMBDA_FLOOR
        self._lam = lam

        if np.max(self._D @ self._x - self._r) > 0:
            logger.warning("Tra. Mod. has an initial state error.")
            e_k = x_km1 - x_cur
        else:
            self._z = np.concatenate((self._x, self._lam))
            self._s = self._r - self._D @ self._x
            iterations = 0
            while True:
                ep = self._update()
                iterations += 1
                if not (ep > self.epth and iterations < self.kth):
                    break
            e_k = float(self._x[2])

        if self._position_limits_enabled:
            e_k = self._position_constraint(x_cur + e_k, x_km1 + e1,
                                            x_km2 + e2, x_cur)

        self._e_km2 = e1
        self._e_km1 = e_k
        return x_cur + e_k

    def _update(self) -> float:
        """Take one primal-dual interior-point step and return the gap."""
        V, D = self._V, self._D
        x, lam, s = self._x, self._lam, self._s
        M = np.block([
            [V, D.T],
            [-lam[:, None] * D, np.diag(s)],
        ])
        v1 = -V @ x - self._c - D.T @ lam
        v2 = _SIGMA * self._ep * np.ones(_L) - s * lam
        v = np.concatenate((v1, v2))
        try:
            delta = np.linalg.solve(M, v)
        except np.linalg.LinAlgError:
            delta = np.linalg.lstsq(M, v, rcond=None)[0]

        delta_x = delta[:_N]
        delta_lam = delta[_N:]
        delta_s = -D @ delta_x

        alpha = _ALPHA_MAX
        neg_s = delta_s < 0
        if neg_s.any():
            alpha = min(alpha, float(np.min(-s[neg_s] / delta_s[neg_s])))
        neg_lam = delta_lam < 0
        if neg_lam.any():
            alpha = min(alpha, float(np.min(-lam[neg_lam] / delta_lam[neg_lam])))
        alpha *= _GAMMA

        self._z = self._z + alpha * delta
        self._x = self._z[:_N].copy()
        self._lam = self._z[_N:].copy()
        self._s = self._r - D @ self._x
        self._ep = float(self._s @ self._lam) / _L
        return self._ep

    def _position_constraint(self, phi_k, phi_km1, phi_km2, x_cur):
        """Brake early enough that the predicted stop stays inside the limits."""
        T = self.T
        dphi_k = (phi_k - phi_km1) / T

        steps = 0
        brake = coast = 0.0
        if dphi_k > 0:
            steps = math.ceil(-(dphi_k + T * self.ddx_max - T * self.ddx_min)
                              / (T * self.ddx_min))
            brake, coast = self.ddx_max, self.ddx_min
        elif dphi_k < 0:
            steps = math.ceil(-(dphi_k + T * self.ddx_min - T * self.ddx_max)
                              / (T * self.ddx_max))
            brake, coast = self.ddx_min, self.ddx_max

        # Position predicted by the double-integrator model after `steps`
        # samples: one sample at `brake`, the rest at `coast`.
        if steps == 0:
            predicted = phi_k
        elif steps == 1:
            predicted = phi_k + T * dphi_k
        else:
            power = max(steps, 1)
            power_less = max(steps - 1, 1)
            coast_terms = sum(range(max(steps - 1, 0)))
            predicted = (phi_k + power * T * dphi_k
                         + power_less * T * T * brake
                         + coast_terms * T * T * coast)

        if self.x_min <= predicted <= self.x_max:
            return phi_k - x_cur
        velocity = (phi_km1 - phi_km2) / T
        return (2 * phi_km1 - phi_km2
                + T * T * saturate(-velocity / T, self.ddx_min, self.ddx_max)
                - x_cur)