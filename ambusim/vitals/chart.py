"""Charts and summaries for live-monitoring history.

Works on the frames produced by ``LiveMonitor.to_frame``: a timestamp index
with ``elapsed``, ``heart_rate`` and ``oxygen_saturation`` columns.
"""

import matplotlib.pyplot as plt
import pandas as pd

from .snapshot import METRICS

# Normal ranges drawn on the live chart. Wider than the fleet walk bands
# because the live stream is allowed to spike.
LIVE_NORMAL_RANGES: dict[str, tuple[float, float]] = {
    "heart_rate": (60, 100),
    "oxygen_saturation": (95, 100),
}


def summarize_readings(frame: pd.DataFrame, freq: str = "1min") -> pd.DataFrame | None:
    """Bin readings by ``freq`` and compute mean, std and count per metric.

    Returns:
        pandas.DataFrame: One row per non-empty bin, or None for an empty frame.
    """
    if frame.empty:
        return None

    metrics = [name for name in LIVE_NORMAL_RANGES if name in frame.columns]
    stats = frame[metrics].astype(float).resample(freq).agg(["mean", "std", "count"])
    first = metrics[0]
    return stats.loc[stats[(first, "count")] > 0].copy()


def plot_readings(
    frame: pd.DataFrame,
    metric: str,
    ax: plt.Axes | None = None,
    band: tuple[float, float] | None = None,
    title: str | None = None,
) -> plt.Axes:
    """Plot one metric of a live-monitoring frame against time.

    The normal range is drawn as two dashed horizontal lines. ``band``
    overrides the default range for ``metric``.

    Args:
        frame: Frame from ``LiveMonitor.to_frame``.
        metric: Column to plot, ``"heart_rate"`` or ``"oxygen_saturation"``.
        ax: Axes to draw into; a new figure is created when omitted.
        band: ``(low, high)`` normal range.
        title: Axes title, defaults to the metric label.

    Returns:
        matplotlib.axes.Axes: The axes drawn into.

    Raises:
        KeyError: If ``metric`` is not a column of ``frame``.
    """
    if metric not in frame.columns:
        msg = f"No column {metric!r} in readings"
        raise KeyError(msg)

    spec = METRICS.get(metric)
    label = spec.label if spec else metric
    unit = spec.unit if spec else ""
    band = band or LIVE_NORMAL_RANGES.get(metric)

    if ax is None:
        _, ax = plt.subplots(figsize=(10, 4))

    ax.plot(frame.index, frame[metric], marker="o", linewidth=1.5, label=label)
    if band is not None:
        low, high = band
        ax.axhline(low, color="tab:red", linestyle="--", linewidth=1, label="Normal range")
        ax.axhline(high, color="tab:red", linestyle="--", linewidth=1)

    ax.set_title(title or label)
    ax.set_xlabel("Time")
    ax.set_ylabel(f"{label} ({unit})" if unit else label)
    ax.grid(True, alpha=0.3)
    ax.legend(loc="upper left")
    return ax
