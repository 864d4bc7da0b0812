"""
Backtest host running a strategy over a price feed.

SymphonyAlgorithm wires the pieces together in one synchronous loop:
raw prices from every subscription are merged by time, each SymbolState
consolidates its own prices into daily bars, and the scheduler fires the
strategy on every evaluation date at the execution time. Evaluations see
every bar whose consolidation boundary lies at or before the fire time.
"""
import logging
from typing import Dict, Iterator, List, Optional

import pandas as pd

from .allocation import AllocationSink, SimulatedPortfolio
from .results import BacktestResult, Evaluation
from .. import __version__
from ..data.feed import PriceFeed, merge_streams
from ..indicators.symbol_state import SymbolState
from ..scheduling.scheduler import Scheduler
from ..scheduling.trading_calendar import TradingCalendar
from ..shared.defaults import WARMUP_EXTRA_DAYS
from ..shared.errors import ConfigurationError
from ..shared.types import PricePoint, TargetWeight
from ..strategy.base import Strategy, WEIGHT_TOLERANCE
from ..strategy.config import AlgorithmConfig


logger = logging.getLogger(__name__)


class SymphonyAlgorithm:
    """
    Runs one strategy from its warm-up through the backtest window.

    Example:
        >>> algorithm = SymphonyAlgorithm(SampleStrategy(), config, CsvPriceFeed())
        >>> result = algorithm.run()
        >>> result.summary()['total_return']
    """

    def __init__(
        self,
        strategy: Strategy,
        config: AlgorithmConfig,
        feed: PriceFeed,
        calendar: Optional[TradingCalendar] = None,
        sink: Optional[AllocationSink] = None,
        scheduler: Optional[Scheduler] = None,
    ):
        """
        Initialize algorithm.

        Args:
            strategy: Strategy to evaluate
            config: Algorithm configuration
            feed: Source of raw prices
            calendar: Trading calendar (default: config.exchange)
            sink: Allocation sink (default: SimulatedPortfolio with config.initial_capital)
            scheduler: Scheduler (default: one in config.timezone)
        """
        self.strategy = strategy
        self.config = config
        self.feed = feed
        self.calendar = calendar if calendar is not None else TradingCalendar(config.exchange)
        self.sink = sink if sink is not None else SimulatedPortfolio(config.initial_capital)
        self.scheduler = scheduler if scheduler is not None else Scheduler(config.timezone)

        self.states: Dict[str, SymbolState] = {}
        self.evaluations: List[Evaluation] = []
        self._subscribed: List[str] = []
        self._equity: Dict[pd.Timestamp, float] = {}
        self._benchmark: Dict[pd.Timestamp, float] = {}
        self._start: Optional[pd.Timestamp] = None

    def resolve_window(self):
        """
        Backtest start and end dates.

        Start is the configured override or the strategy's declared start;
        end is the configured end or today.

        Raises:
            ConfigurationError: If no start date is available or end < start
        """
        start = self.config.backtest_start_date
        if start is None:
            start = self.strategy.backtest_start_date
        if start is None:
            raise ConfigurationError("No backtest start date configured or declared by the strategy")
        start = pd.Timestamp(start).normalize()

        end = self.config.backtest_end_date
        if end is None:
            end = self.scheduler.today()
        end = pd.Timestamp(end).normalize()
        if end < start:
            raise ConfigurationError(f"Backtest end ({end.date()}) is before start ({start.date()})")
        return start, end

    def warmup_start(self, start: pd.Timestamp) -> pd.Timestamp:
        """First date of the subscriptions: enough trading days for the largest period."""
        periods = self.strategy.periods
        if not periods:
            raise ConfigurationError("Strategy declares no lookback periods")
        return self.calendar.previous_trading_days(start, max(periods) + WARMUP_EXTRA_DAYS)

    def run(self) -> BacktestResult:
        """
        Run the backtest.

        Returns:
            BacktestResult with evaluations, equity curve and benchmark curve
        """
        logger.info(f"Symphony v{__version__}")
        start, end = self.resolve_window()
        self._start = start
        warmup_start = self.warmup_start(start)
        execution_time = self.config.execution_time
        consolidation_time = self.config.consolidation_time
        name = getattr(self.strategy, 'name', type(self.strategy).__name__)

        logger.info(
            f"Backtesting '{name}' from {start.date()} to {end.date()} "
            f"(warm-up from {warmup_start.date()}, execution {execution_time}, "
            f"consolidation {consolidation_time})"
        )

        try:
            streams: Dict[str, Iterator[PricePoint]] = {}
            for ticker in self.strategy.tickers:
                self.states[ticker] = self.strategy.add_symbol_data(ticker, consolidation_time)
            for symbol in dict.fromkeys(list(self.strategy.tickers) + [self.config.benchmark_ticker]):
                streams[symbol] = self.feed.subscribe(symbol, warmup_start, end)
                self._subscribed.append(symbol)

            rule = self.strategy.evaluation_rule(self.calendar)
            first_day = self.calendar.next_trading_day(start)
            if first_day is not None and first_day <= end:
                # Initial evaluation; merged with the rule's event on the same date
                self.scheduler.on([first_day], execution_time, self._evaluate)
            scheduled = self.scheduler.on_rule(rule, start, end, execution_time, self._evaluate)
            logger.info(f"Scheduled {scheduled} {rule.name} evaluations")

            for point in merge_streams(streams):
                self.scheduler.advance(point.timestamp)
                self._ingest(point)
            self.scheduler.flush(until=end + pd.Timedelta(days=1))
        finally:
            self._teardown()

        result = BacktestResult(
            strategy_name=name,
            start_date=start,
            end_date=end,
            initial_capital=self.config.initial_capital,
            evaluations=list(self.evaluations),
            equity=self._series(self._equity),
            benchmark=self._scaled_benchmark(),
            benchmark_ticker=self.config.benchmark_ticker,
        )
        summary = result.summary()
        logger.info(
            f"Finished: {len(self.evaluations)} evaluations, "
            f"return {summary['total_return']:.2%} "
            f"(benchmark {summary['benchmark_return']:.2%}), "
            f"max drawdown {summary['max_drawdown']:.2%}"
        )
        return result

    def _ingest(self, point: PricePoint) -> None:
        state = self.states.get(point.symbol)
        if state is not None:
            state.push(point)
        self.sink.update_price(point.symbol, point.price)
        if point.timestamp >= self._start:
            day = point.timestamp.normalize()
            if point.symbol == self.config.benchmark_ticker:
                self._benchmark[day] = point.price
            self._record(day)

    def _record(self, day: pd.Timestamp) -> None:
        value = self.sink.total_value
        if value is not None:
            self._equity[day] = value

    def _evaluate(self, fire_time: pd.Timestamp) -> None:
        for state in self.states.values():
            state.scan(fire_time)

        targets = self.strategy.evaluate()
        self._check_targets(targets)
        target_symbols = {target.ticker for target in targets}
        liquidate = any(symbol not in target_symbols for symbol in self.sink.invested)

        logger.info(
            f"{fire_time.date()}: "
            + ", ".join(f"{t.ticker} {t.weight:.1%}" for t in targets)
            + (" (liquidating)" if liquidate else "")
        )
        self.sink.set_holdings(targets, liquidate, fire_time)
        self.evaluations.append(Evaluation(fire_time, list(targets), liquidate))
        self._record(fire_time.normalize())

    @staticmethod
    def _check_targets(targets: List[TargetWeight]) -> None:
        if not targets:
            raise ConfigurationError("Strategy returned no targets")
        seen = set()
        for target in targets:
            if target.ticker in seen:
                raise ConfigurationError(f"Strategy returned {target.ticker} more than once")
            seen.add(target.ticker)
        total = sum(target.weight for target in targets)
        if total > 1.0 + WEIGHT_TOLERANCE:
            raise ConfigurationError(f"Target weights sum to {total:.4f}, more than 1.0")

    def _teardown(self) -> None:
        for symbol in self._subscribed:
            self.feed.unsubscribe(symbol)
        self._subscribed.clear()
        self.strategy.dispose()
        for state in self.states.values():
            if not state.disposed:
                state.dispose()
        logger.debug("Released all subscriptions and symbol data")

    @staticmethod
    def _series(values: Dict[pd.Timestamp, float]) -> pd.Series:
        if not values:
            return pd.Series(dtype=float)
        return pd.Series(values, dtype=float).sort_index()

    def _scaled_benchmark(self) -> pd.Series:
        benchmark = self._series(self._benchmark)
        if benchmark.empty:
            return benchmark
        return benchmark / benchmark.iloc[0] * self.config.initial_capital
