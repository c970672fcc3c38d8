"""
Technical Indicator Calculations

Pure Python/NumPy implementations of technical indicators.
All math is deterministic. Missing values are NaN inside arrays and
become None only at the display boundary (see to_optional_list).
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Union

import numpy as np

PriceInput = Union[Sequence[float], np.ndarray]

# Default windows used by the chart overlays
SMA_SHORT_PERIOD = 20
SMA_LONG_PERIOD = 50
EMA_FAST_PERIOD = 12
EMA_SLOW_PERIOD = 26
MACD_SIGNAL_PERIOD = 9
RSI_PERIOD = 14


def _as_array(data: PriceInput) -> np.ndarray:
    """Copy input into a float array so callers' data is never mutated."""
    return np.array(data, dtype=float)


# =============================================================================
# MOVING AVERAGES
# =============================================================================


def sma(data: PriceInput, period: int) -> np.ndarray:
    """Simple Moving Average."""
    data = _as_array(data)
    result = np.full(len(data), np.nan)
    if period <= 0 or len(data) < period:
        return result

    for i in range(period - 1, len(data)):
        result[i] = np.mean(data[i - period + 1 : i + 1])
    return result


def ema(data: PriceInput, period: int) -> np.ndarray:
    """
    Exponential Moving Average.

    Seeded with the SMA of the first `period` values (same slice as sma()),
    so ema(p, w)[w - 1] == sma(p, w)[w - 1] exactly.
    """
    data = _as_array(data)
    result = np.full(len(data), np.nan)
    if period <= 0 or len(data) < period:
        return result

    multiplier = 2 / (period + 1)

    # Start with SMA
    result[period - 1] = np.mean(data[:period])

    for i in range(period, len(data)):
        result[i] = (data[i] - result[i - 1]) * multiplier + result[i - 1]

    return result


# =============================================================================
# MACD
# =============================================================================


@dataclass
class DenseSeries:
    """
    Gap-free view of a sparse series.

    values[j] sits at original index positions[j].
    """

    values: np.ndarray
    positions: np.ndarray

    @classmethod
    def from_sparse(cls, sparse: np.ndarray) -> "DenseSeries":
        mask = ~np.isnan(sparse)
        return cls(values=sparse[mask], positions=np.flatnonzero(mask))

    def original_index(self, dense_index: int) -> int:
        return int(self.positions[dense_index])

    def with_values(self, values: np.ndarray) -> "DenseSeries":
        """Same positions, new values (must be the same length)."""
        if len(values) != len(self.positions):
            raise ValueError("values must align with positions")
        return DenseSeries(values=values, positions=self.positions)

    def to_sparse(self, length: int) -> np.ndarray:
        result = np.full(length, np.nan)
        result[self.positions] = self.values
        return result


@dataclass
class MACDResult:
    """MACD line, signal line and histogram, each aligned with the input."""

    macd: np.ndarray
    signal: np.ndarray
    histogram: np.ndarray


def macd(
    closes: PriceInput,
    fast_period: int = EMA_FAST_PERIOD,
    slow_period: int = EMA_SLOW_PERIOD,
    signal_period: int = MACD_SIGNAL_PERIOD,
) -> MACDResult:
    """
    MACD (Moving Average Convergence Divergence).

    The signal line is the EMA of the defined MACD values only, so its
    warm-up starts at the first defined MACD value. It is computed on a
    DenseSeries and mapped back onto the original positions.
    """
    closes = _as_array(closes)
    length = len(closes)

    fast_ema = ema(closes, fast_period)
    slow_ema = ema(closes, slow_period)

    both = ~np.isnan(fast_ema) & ~np.isnan(slow_ema)
    macd_line = np.full(length, np.nan)
    macd_line[both] = fast_ema[both] - slow_ema[both]

    dense_macd = DenseSeries.from_sparse(macd_line)
    dense_signal = dense_macd.with_values(ema(dense_macd.values, signal_period))
    signal_line = dense_signal.to_sparse(length)

    defined = ~np.isnan(macd_line) & ~np.isnan(signal_line)
    histogram = np.full(length, np.nan)
    histogram[defined] = macd_line[defined] - signal_line[defined]

    return MACDResult(macd=macd_line, signal=signal_line, histogram=histogram)


# =============================================================================
# MOMENTUM INDICATORS
# =============================================================================


def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    # No losses saturates at 100 instead of dividing by zero
    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return 100 - (100 / (1 + rs))


def rsi(closes: PriceInput, period: int = RSI_PERIOD) -> np.ndarray:
    """
    Relative Strength Index.

    Works on day-over-day changes, so the output is one shorter than the
    input: result[j] describes the change closes[j] -> closes[j + 1].
    The first `period` entries are NaN.
    """
    closes = _as_array(closes)
    length = max(len(closes) - 1, 0)
    result = np.full(length, np.nan)
    if period <= 0 or length <= period:
        return result

    deltas = np.diff(closes)
    gains = np.where(deltas > 0, deltas, 0.0)
    losses = np.where(deltas < 0, -deltas, 0.0)

    # Seed averages
    avg_gain = np.sum(gains[:period]) / period
    avg_loss = np.sum(losses[:period]) / period

    # Wilder smoothing
    for i in range(period, length):
        avg_gain = (avg_gain * (period - 1) + gains[i]) / period
        avg_loss = (avg_loss * (period - 1) + losses[i]) / period
        result[i] = _rsi_value(avg_gain, avg_loss)

    return result


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def to_optional_list(arr: np.ndarray) -> list[Optional[float]]:
    """Convert a NaN-marked array into floats with None for missing values."""
    return [None if np.isnan(v) else float(v) for v in arr]
