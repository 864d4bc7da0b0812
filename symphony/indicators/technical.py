"""
Vectorized indicator calculations over a full close series.

Computes the same statistics as the incremental indicators in one pandas
pass per kind. Values are NaN wherever the incremental indicator would
still be warming up. Used for indicator inspection tables and as a
reference for the bar-by-bar engine.
"""
import pandas as pd
import numpy as np
from typing import Dict, Iterable, Optional

from ..shared.types import IndicatorKind
from .symbol_state import indicator_label, validate_periods


class TechnicalIndicators:
    """Calculates symphony indicators from a daily close series."""

    def calculate_returns(self, closes: pd.Series) -> pd.Series:
        """Per-bar rate of change; a zero previous close yields 0.0."""
        previous = closes.shift(1)
        returns = (closes - previous) / previous
        return returns.where(previous != 0, 0.0).where(previous.notna())

    def calculate_cumulative_return(self, closes: pd.Series, period: int) -> pd.Series:
        """
        Compounded product of adjacent close ratios across `period` closes, minus 1.

        Defined from the (period + 1)-th close onwards.
        """
        if period == 1:
            result = pd.Series(0.0, index=closes.index)
        else:
            ratios = closes / closes.shift(1)
            result = ratios.rolling(period - 1).apply(np.prod, raw=True) - 1.0
        result.iloc[:period] = np.nan
        return result

    def calculate_sma(self, values: pd.Series, period: int) -> pd.Series:
        """Calculate Simple Moving Average."""
        return values.rolling(period, min_periods=period).mean()

    def calculate_ema(self, prices: pd.Series, period: int) -> pd.Series:
        """Calculate Exponential Moving Average seeded with the first close."""
        return prices.ewm(span=period, adjust=False, min_periods=period).mean()

    def calculate_std(self, values: pd.Series, period: int) -> pd.Series:
        """Calculate population standard deviation over a rolling window."""
        return values.rolling(period, min_periods=period).std(ddof=0)

    def calculate_rsi(self, prices: pd.Series, period: int) -> pd.Series:
        """
        Calculate Relative Strength Index (RSI).

        RSI = 100 - (100 / (1 + RS))
        RS = Average Gain / Average Loss, Wilder averages seeded with the
        mean of the first period - 1 changes (one change for period 1)
        """
        delta = prices.diff().to_numpy(dtype=float)
        gains = np.clip(delta, 0.0, None)
        losses = np.clip(-delta, 0.0, None)

        seed = max(period - 1, 1)
        avg_gain = np.full(len(prices), np.nan)
        avg_loss = np.full(len(prices), np.nan)
        if len(prices) > seed:
            avg_gain[seed] = gains[1:seed + 1].mean()
            avg_loss[seed] = losses[1:seed + 1].mean()
            for i in range(seed + 1, len(prices)):
                avg_gain[i] = (avg_gain[i - 1] * (period - 1) + gains[i]) / period
                avg_loss[i] = (avg_loss[i - 1] * (period - 1) + losses[i]) / period

        avg_gain = pd.Series(avg_gain, index=prices.index)
        avg_loss = pd.Series(avg_loss, index=prices.index)
        with np.errstate(divide='ignore', invalid='ignore'):
            rsi = 100 - (100 / (1 + avg_gain / avg_loss))
        no_loss = avg_loss == 0
        rsi[no_loss & (avg_gain > 0)] = 100.0
        rsi[no_loss & (avg_gain == 0)] = 50.0
        return rsi

    def calculate_max_drawdown(self, prices: pd.Series, period: int) -> pd.Series:
        """(min - max) / max over a rolling window of `period` closes."""
        peak = prices.rolling(period, min_periods=period).max()
        trough = prices.rolling(period, min_periods=period).min()
        return (trough - peak) / peak

    def calculate(self, kind: IndicatorKind, closes: pd.Series, period: int) -> pd.Series:
        """
        Calculate one indicator kind over a close series.

        Args:
            kind: Indicator kind (member or name)
            closes: Daily closes in chronological order
            period: Lookback period (ignored for the current price)

        Returns:
            Series aligned with `closes`, NaN where not warmed up
        """
        kind = IndicatorKind.coerce(kind)
        closes = closes.astype(float)
        if kind is IndicatorKind.CURRENT_PRICE:
            return closes.copy()
        if kind is IndicatorKind.CUMULATIVE_RETURN:
            return self.calculate_cumulative_return(closes, period)
        if kind is IndicatorKind.MOV_AVG_OF_PRICE:
            return self.calculate_sma(closes, period)
        if kind is IndicatorKind.EXP_MOV_AVG_OF_PRICE:
            return self.calculate_ema(closes, period)
        if kind is IndicatorKind.STD_DEV_OF_PRICE:
            return self.calculate_std(closes, period)
        if kind is IndicatorKind.MOV_AVG_OF_RETURN:
            return self.calculate_sma(self.calculate_returns(closes), period)
        if kind is IndicatorKind.STD_DEV_OF_RETURN:
            return self.calculate_std(self.calculate_returns(closes), period)
        if kind is IndicatorKind.RSI:
            return self.calculate_rsi(closes, period)
        return self.calculate_max_drawdown(closes, period)

    def calculate_all(
        self,
        closes: pd.Series,
        periods: Iterable[int],
        kinds: Optional[Iterable[IndicatorKind]] = None,
    ) -> pd.DataFrame:
        """
        Calculate every kind for every period.

        Returns:
            DataFrame indexed like `closes`, one column per indicator label
        """
        kinds = [IndicatorKind.coerce(k) for k in kinds] if kinds is not None else list(IndicatorKind)
        columns: Dict[str, pd.Series] = {}
        if IndicatorKind.CURRENT_PRICE in kinds:
            columns[indicator_label(IndicatorKind.CURRENT_PRICE)] = closes.astype(float)
        for period in validate_periods(periods):
            for kind in kinds:
                if kind is IndicatorKind.CURRENT_PRICE:
                    continue
                columns[indicator_label(kind, period)] = self.calculate(kind, closes, period)
        return pd.DataFrame(columns, index=closes.index)

    def latest_values(self, closes: pd.Series, periods: Iterable[int]) -> Dict[str, Optional[float]]:
        """Last row of calculate_all() as a dict (None where not warmed up)."""
        if closes.empty:
            return {}
        row = self.calculate_all(closes, periods).iloc[-1]
        return {label: (None if pd.isna(v) else float(v)) for label, v in row.items()}
