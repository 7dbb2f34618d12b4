"""zone-profiling: Per-zone cost isolation for loops (render frames, ticks, batches).

Provides:
- ZoneProfiler: Run state machine that skips one zone per pass so each zone's
  cost can be read off as a difference against the "all zones" pass
- ProfilerConfig: Sample count, warmup, output mode, time unit, done callback
- Statistics helpers: median, mean, worst, Bessel-corrected std dev
- render_report / format_number: Fixed-column comparison table

Usage:
    from zone_profiling import OutputMode, ProfilerConfig, ZoneProfiler

    profiler = ZoneProfiler(ProfilerConfig(sample_count=10, warmup_runs=3,
                                           output_mode=OutputMode.EVALUATE_ONLY))
    profiler.start()
    for frame in frames:
        if profiler.zone("draw shadows"):
            draw_shadows(frame)
        if profiler.zone("draw bunnies"):
            draw_bunnies(frame)
        profiler.slice()

    print(profiler.report)
"""

from zone_profiling._clock import Clock, MonotonicClock
from zone_profiling._core import (
    DoneCallback,
    OutputMode,
    ProfilerConfig,
    RunState,
    Status,
    Zone,
    ZoneProfiler,
)
from zone_profiling._format import (
    TimeUnit,
    digits_before_point,
    format_number,
    fractional_string,
    render_report,
)
from zone_profiling._stats import (
    Results,
    ZoneResult,
    evaluate_zones,
    mean,
    median,
    sort_samples,
    std_dev,
    worst,
)

__all__ = [
    "Clock",
    "DoneCallback",
    "MonotonicClock",
    "OutputMode",
    "ProfilerConfig",
    "Results",
    "RunState",
    "Status",
    "TimeUnit",
    "Zone",
    "ZoneProfiler",
    "ZoneResult",
    "digits_before_point",
    "evaluate_zones",
    "format_number",
    "fractional_string",
    "mean",
    "median",
    "render_report",
    "sort_samples",
    "std_dev",
    "worst",
]

__version__ = "0.1.0"
