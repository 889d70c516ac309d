"""Single-axis PID controller used to smooth drivetrain velocity."""

from __future__ import annotations


INTEGRAL_LIMIT = 100.0


class PIDController:
    """Closed-loop controller for one axis.

    ``update`` returns 0 for a non-positive dt instead of raising. Callers
    that feed repeated zero-dt frames will starve the controller, so the
    tick loop skips integration entirely when dt clamps to 0.
    """

    def __init__(self, kp: float, ki: float, kd: float) -> None:
        self.kp = kp
        self.ki = ki
        self.kd = kd

        self.target = 0.0
        self._error_sum = 0.0
        self._last_error = 0.0

    def set_gains(self, kp: float, ki: float, kd: float) -> None:
        self.kp = kp
        self.ki = ki
        self.kd = kd

    def set_target(self, target: float) -> None:
        self.target = target

    def update(self, current: float, dt: float) -> float:
        """Control output for the current measurement."""
        if dt <= 0:
            return 0.0

        error = self.target - current
        self._error_sum += error * dt
        # Anti-windup
        self._error_sum = max(-INTEGRAL_LIMIT, min(INTEGRAL_LIMIT, self._error_sum))

        error_deriv = (error - self._last_error) / dt
        self._last_error = error

        return self.kp * error + self.ki * self._error_sum + self.kd * error_deriv

    def reset(self) -> None:
        """Clear integral and derivative history. Gains are kept."""
        self._error_sum = 0.0
        self._last_error = 0.0

    @property
    def integral(self) -> float:
        return self._error_sum

    @property
    def last_error(self) -> float:
        return self._last_error

    @property
    def is_at_rest(self) -> bool:
        return self._error_sum == 0.0 and self._last_error == 0.0

    def __repr__(self) -> str:
        return f"PIDController(kp={self.kp}, ki={self.ki}, kd={self.kd}, target={self.target:.2f})"
