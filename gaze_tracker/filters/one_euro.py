"""One Euro filter for smoothing noisy scalar signals with low lag."""

from typing import Optional
import math


def smoothing_factor(cutoff: float, dt: float) -> float:
    """Exponential smoothing coefficient for a cutoff frequency (Hz) and dt (s)."""
    tau = 1.0 / (2 * math.pi * cutoff)
    return 1.0 / (1.0 + tau / dt)


class OneEuroFilter:
    """
    Speed-adaptive low-pass filter.

    Based on: Casiez, G., Roussel, N., & Vogel, D. (2012). 1 Euro Filter:
    A Simple Speed-based Low-pass Filter for Noisy Input in Interactive Systems.

    The cutoff rises with the estimated speed of the signal, so slow
    movements are smoothed heavily (low jitter) while fast movements pass
    with little lag.
    """

    def __init__(self,
                 min_cutoff: float = 1.0,
                 beta: float = 0.0,
                 d_cutoff: float = 1.0):
        """
        Initialize the filter.

        Args:
            min_cutoff: Minimum cutoff frequency in Hz (jitter floor)
            beta: Speed coefficient; higher values reduce lag on fast motion
            d_cutoff: Cutoff frequency for the derivative estimate in Hz
        """
        self.d_cutoff = d_cutoff
        self.set_parameters(min_cutoff, beta)

        self.x_prev: Optional[float] = None
        self.dx_prev: float = 0.0
        self.t_prev: Optional[float] = None

    def set_parameters(self, min_cutoff: Optional[float] = None, beta: Optional[float] = None) -> None:
        """Retune the filter; takes effect on the next sample."""
        if min_cutoff is not None:
            if not min_cutoff > 0:
                raise ValueError(f"min_cutoff must be > 0, got {min_cutoff}")
            self.min_cutoff = min_cutoff
        if beta is not None:
            if not beta >= 0:
                raise ValueError(f"beta must be >= 0, got {beta}")
            self.beta = beta

    def filter(self, x: float, timestamp: float) -> float:
        """
        Filter one sample.

        Args:
            x: Raw value
            timestamp: Sample time in seconds

        Returns:
            Smoothed value
        """
        if self.t_prev is None or self.x_prev is None:
            self.x_prev = x
            self.dx_prev = 0.0
            self.t_prev = timestamp
            return x

        dt = timestamp - self.t_prev
        # Duplicate or out-of-order sample
        if dt <= 0:
            return self.x_prev
        self.t_prev = timestamp

        dx = (x - self.x_prev) / dt
        dx_smoothed = self._exponential_smoothing(dx, self.dx_prev, smoothing_factor(self.d_cutoff, dt))

        cutoff = self.min_cutoff + self.beta * abs(dx_smoothed)
        x_smoothed = self._exponential_smoothing(x, self.x_prev, smoothing_factor(cutoff, dt))

        self.x_prev = x_smoothed
        self.dx_prev = dx_smoothed
        return x_smoothed

    @staticmethod
    def _exponential_smoothing(x: float, x_prev: float, alpha: float) -> float:
        return alpha * x + (1 - alpha) * x_prev

    def reset(self):
        """Reset filter state; the next sample re-seeds it."""
        self.x_prev = None
        self.dx_prev = 0.0
        self.t_prev = None
