"""
Output gating: whether a screen header, screen row or history row is due.

All decisions are pure functions of the run context and the counters of
the current iteration; nothing is cached between calls.
"""

from __future__ import annotations

from dataclasses import dataclass

from .context import IterationCounters, OutputContext

# Linear analyses repeat the screen header every (write_conv_freq * 40) outer iterations
HEADER_PERIOD_FACTOR = 40


@dataclass(frozen=True)
class OutputDecision:
    """Gate decisions for one iteration."""
    screen_header: bool
    screen_output: bool
    history_output: bool


def write_screen_header(ctx: OutputContext, counters: IterationCounters) -> bool:
    """
    Decide whether the screen header is printed this iteration.

    Nonlinear analyses print it at the first inner iteration of every outer
    or time step. Linear analyses use the coarser outer-iteration cadence.
    Multizone runs print it only with ``write_zone_conv`` set.
    """
    if ctx.nonlinear:
        write_header = counters.inner_iter == 0
    else:
        period = ctx.write_conv_freq * HEADER_PERIOD_FACTOR
        write_header = counters.outer_iter % period == 0

    if ctx.multizone:
        write_header = write_header and ctx.write_zone_conv

    return write_header


def write_screen_output(ctx: OutputContext) -> bool:
    """Screen rows are always printed, unless multizone without opt-in."""
    if ctx.multizone:
        return ctx.write_zone_conv
    return True


def write_history_output(ctx: OutputContext) -> bool:
    """Every iteration requests a history row; writers handle cadence."""
    return True


def evaluate_gates(ctx: OutputContext, counters: IterationCounters) -> OutputDecision:
    """Evaluate the three gates independently for the current iteration."""
    return OutputDecision(
        screen_header=write_screen_header(ctx, counters),
        screen_output=write_screen_output(ctx),
        history_output=write_history_output(ctx),
    )
