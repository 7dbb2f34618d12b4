"""Run state machine for zone isolation profiling.

Design by Contract (P1 - MANDATORY):
- sample_count MUST be positive, warmup_runs MUST be non-negative
- Slice deltas MUST be non-negative (crash if negative)
- The zone set MUST stay the same once the first sample of a run is recorded
- configure() MUST NOT be called while a run is in progress
- Protocol no-ops (start() outside READY, slice() while idle) are not errors

All public methods use beartype for runtime type enforcement.
"""

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from beartype import beartype
from loguru import logger

from zone_profiling._clock import Clock, MonotonicClock, ms_between, process_memory_gb
from zone_profiling._format import AGGREGATE_LABEL, TimeUnit, render_report
from zone_profiling._stats import Results, evaluate_zones


class Status(Enum):
    GATHERING_ZONES = "gathering_zones"
    READY = "ready"
    STARTING = "starting"
    MEASURING = "measuring"


class OutputMode(Enum):
    EVALUATE_ONLY = "evaluate_only"
    CONSOLE_PRINT = "console_print"


DoneCallback = Callable[[Results], None]

_TRANSITIONS: dict[Status, frozenset[Status]] = {
    Status.GATHERING_ZONES: frozenset({Status.READY}),
    Status.READY: frozenset({Status.STARTING}),
    Status.STARTING: frozenset({Status.MEASURING}),
    Status.MEASURING: frozenset({Status.READY}),
}


@beartype
@dataclass(frozen=True)
class ProfilerConfig:
    """Measurement settings for one ZoneProfiler.

    Args:
        sample_count: Recorded samples per zone pass (MUST be > 0)
        warmup_runs: Discarded ticks before each zone pass (MUST be >= 0)
        output_mode: CONSOLE_PRINT logs the report when a run completes
        time_unit: Report unit for median/mean/worst
        done_callback: Called once with the results of every completed run
        gather_zones: Start in GATHERING_ZONES; the first repeated zone name
            ends discovery
        track_memory: Snapshot process RSS (psutil) at run start and end
    """

    sample_count: int = 100
    warmup_runs: int = 10
    output_mode: OutputMode = OutputMode.CONSOLE_PRINT
    time_unit: TimeUnit = TimeUnit.MILLISECONDS
    done_callback: DoneCallback | None = None
    gather_zones: bool = False
    track_memory: bool = False

    def __post_init__(self) -> None:
        assert self.sample_count > 0, f"Sample count must be positive: {self.sample_count}"
        assert self.warmup_runs >= 0, f"Warmup runs must be non-negative: {self.warmup_runs}"

    @property
    def initial_status(self) -> Status:
        return Status.GATHERING_ZONES if self.gather_zones else Status.READY


@dataclass
class Zone:
    name: str
    samples: list[float] = field(default_factory=list)


@dataclass
class RunState:
    """Mutable run bookkeeping. zones[0] is the aggregate "all" zone."""

    status: Status = Status.READY
    zones: list[Zone] = field(default_factory=list)
    target_zone: int = 0
    recorded_slices: int = 0
    recorded_total: int = 0
    warmup_left: int = 0
    clock_anchor: float | None = None

    def zone_index(self, name: str) -> int | None:
        # index 0 is synthetic and never matched by name
        for i in range(1, len(self.zones)):
            if self.zones[i].name == name:
                return i
        return None

    def reset(self, warmup_runs: int) -> None:
        """Clear counters and sample buffers; zone identity, status and anchor stay."""
        self.target_zone = 0
        self.recorded_slices = 0
        self.recorded_total = 0
        self.warmup_left = warmup_runs
        for zone in self.zones:
            zone.samples.clear()

    def ensure_aggregate(self) -> None:
        if not self.zones:
            self.zones.append(Zone(AGGREGATE_LABEL))

    def all_zones_done(self) -> bool:
        return self.target_zone >= len(self.zones)


class ZoneProfiler:
    """Measures each zone's cost by skipping it in turn inside a caller's loop.

    A run first records ``sample_count`` ticks with every zone running (the
    aggregate "all" pass), then one pass per zone where only that zone is
    skipped. Each pass is preceded by ``warmup_runs`` discarded ticks.

    Usage:
        profiler = ZoneProfiler(ProfilerConfig(sample_count=50, warmup_runs=5))
        profiler.start()
        while running:
            if profiler.zone("draw background"):
                draw_background()
            if profiler.zone("draw shadows"):
                draw_shadows()
            profiler.slice()

    Design by Contract:
        - The same ordered set of zone names is queried every tick of a run
        - New zone names are only accepted before the first recorded sample
        - The done callback fires exactly once per completed run
    """

    @beartype
    def __init__(self, config: ProfilerConfig | None = None, clock: Clock | None = None) -> None:
        self._config = config if config is not None else ProfilerConfig()
        self._clock = clock if clock is not None else MonotonicClock()
        self._state = RunState(status=self._config.initial_status)
        self._results: Results = ()
        self._report: str = ""
        self._memory_before: float = 0.0
        self._memory_delta: float = 0.0

    @property
    def config(self) -> ProfilerConfig:
        return self._config

    @property
    def status(self) -> Status:
        return self._state.status

    @property
    def zone_names(self) -> tuple[str, ...]:
        """Registered zone names in first-seen order, aggregate first."""
        return tuple(zone.name for zone in self._state.zones)

    @property
    def target_zone(self) -> int:
        return self._state.target_zone

    @property
    def results(self) -> Results:
        return self._results

    @property
    def report(self) -> str:
        return self._report

    @property
    def memory_delta(self) -> float:
        """Process RSS change over the last completed run in GB (0.0 unless tracked)."""
        return self._memory_delta

    @beartype
    def configure(self, **changes: Any) -> ProfilerConfig:
        """Replace config fields (see ProfilerConfig) between runs.

        Returns:
            The new, validated config.
        """
        assert self._state.status not in (Status.STARTING, Status.MEASURING), (
            f"Cannot reconfigure while a run is in progress (status={self._state.status.value})"
        )
        self._config = replace(self._config, **changes)
        if not self._state.zones:
            self._state.status = self._config.initial_status
        logger.debug(f"Profiler configured: {self._config}")
        return self._config

    def _transition(self, status: Status) -> None:
        current = self._state.status
        assert status in _TRANSITIONS[current], (
            f"Invalid status transition: {current.value} -> {status.value}"
        )
        logger.debug(f"Profiler status {current.value} -> {status.value}")
        self._state.status = status

    @beartype
    def zone(self, name: str) -> bool:
        """Register ``name`` if unseen and tell the caller whether to run it.

        Returns:
            False only while measuring the isolation pass of this zone,
            True otherwise.
        """
        state = self._state
        state.ensure_aggregate()

        index = state.zone_index(name)
        if index is None:
            assert not (state.status is Status.MEASURING and state.recorded_total > 0), (
                f"Zone '{name}' first seen after sampling started. "
                f"The zone set must not change during a run."
            )
            state.zones.append(Zone(name))
            index = len(state.zones) - 1
            logger.debug(f"Registered zone #{index}: {name}")
        elif state.status is Status.GATHERING_ZONES:
            logger.debug(f"Zone discovery complete: {len(state.zones) - 1} zones")
            self._transition(Status.READY)

        if state.status is Status.MEASURING and state.target_zone > 0:
            return index != state.target_zone
        return True

    @beartype
    def start(self) -> bool:
        """Arm the next tick as run start.

        Returns:
            True if a run was armed, False if the call was ignored (not READY).
        """
        if self._state.status is not Status.READY:
            logger.debug(f"start() ignored in status {self._state.status.value}")
            return False
        self._transition(Status.STARTING)
        return True

    @beartype
    def slice(self, delta_ms: float | None = None) -> bool:
        """Advance the state machine by one measured interval.

        Args:
            delta_ms: Duration of the interval that just ended (MUST be >= 0).
                When omitted the interval is measured with the clock since the
                previous slice() (or since the STARTING tick).

        Returns:
            True on the tick that completed a run, False otherwise.
        """
        if delta_ms is None:
            delta_ms = self._clock_delta()
        assert delta_ms >= 0, f"Slice delta must be non-negative: {delta_ms}"

        state = self._state
        if state.status is Status.STARTING:
            self._begin_run()
            return False
        if state.status is not Status.MEASURING:
            return False

        if state.warmup_left > 0:
            state.warmup_left -= 1
            return False

        state.zones[state.target_zone].samples.append(delta_ms)
        state.recorded_slices += 1
        state.recorded_total += 1
        if state.recorded_slices < self._config.sample_count:
            return False

        state.target_zone += 1
        state.recorded_slices = 0
        state.warmup_left = self._config.warmup_runs
        if not state.all_zones_done():
            logger.debug(f"Isolating zone #{state.target_zone}: {state.zones[state.target_zone].name}")
            return False

        self._complete_run()
        return True

    def _clock_delta(self) -> float:
        state = self._state
        if state.status is Status.STARTING:
            state.clock_anchor = self._clock.now_ms()
            return 0.0
        if state.status is Status.MEASURING:
            now = self._clock.now_ms()
            anchor = state.clock_anchor if state.clock_anchor is not None else now
            state.clock_anchor = now
            return ms_between(now, anchor)
        return 0.0

    def _begin_run(self) -> None:
        self._state.ensure_aggregate()
        self._state.reset(self._config.warmup_runs)
        if self._config.track_memory:
            self._memory_before = process_memory_gb()
        self._transition(Status.MEASURING)

    def _complete_run(self) -> None:
        state = self._state
        self._results = evaluate_zones([(zone.name, zone.samples) for zone in state.zones])
        self._report = render_report(self._results, self._config.time_unit)
        if self._config.track_memory:
            self._memory_delta = process_memory_gb() - self._memory_before
        self._transition(Status.READY)

        line = (
            f"Zone run complete: {len(state.zones) - 1} zones, "
            f"{state.recorded_total} samples"
        )
        if self._config.track_memory:
            sign = "+" if self._memory_delta >= 0 else ""
            line += f", Δ={sign}{self._memory_delta:.2f}GB"
        logger.info(line)

        if self._config.output_mode is OutputMode.CONSOLE_PRINT:
            for report_line in self._report.splitlines():
                logger.info(report_line)
        if self._config.done_callback is not None:
            self._config.done_callback(self._results)

    @beartype
    def are_results_ready(self) -> bool:
        return self._state.status is Status.READY and self._state.recorded_total > 0

    @beartype
    def clear_results(self) -> None:
        """Drop cached results and report text; run state is untouched."""
        self._results = ()
        self._report = ""

    @beartype
    def factory_reset(self) -> None:
        """Forget all zones and return to the initial status."""
        self._state = RunState(status=self._config.initial_status)
        self._memory_before = 0.0
        self._memory_delta = 0.0
        self.clear_results()
        logger.debug(f"Profiler factory reset (status={self._state.status.value})")
