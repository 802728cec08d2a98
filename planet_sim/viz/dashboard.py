"""Post-hoc matplotlib reports of a finished game."""

from __future__ import annotations

import os

import matplotlib
matplotlib.use("Agg")  # Non-interactive backend, files only
import matplotlib.pyplot as plt
import numpy as np

from planet_sim.core.config import (
    DEFEAT_POLLUTION,
    DEFEAT_TEMPERATURE,
    ENERGY_SOURCES,
    POLLUTION_RANGE,
    POPULARITY_RANGE,
)


def comprehensive_report(metrics: "MetricsCollector", output_dir: str) -> list[str]:  # noqa: F821
    """Generate all plots and save them to output_dir. Returns the written paths."""
    os.makedirs(output_dir, exist_ok=True)

    snapshots = metrics.snapshots
    if not snapshots:
        return []

    turns = [s.turn for s in snapshots]
    written: list[str] = []

    def _save(fig, name: str) -> None:
        path = os.path.join(output_dir, name)
        fig.savefig(path, dpi=150)
        plt.close(fig)
        written.append(path)

    # Energy balance
    fig, ax = plt.subplots(figsize=(10, 5))
    ax.plot(turns, [s.production for s in snapshots], "g-", label="Production")
    ax.plot(turns, [s.consumption for s in snapshots], "r--", label="Consumption")
    ax.plot(turns, [s.storage for s in snapshots], "b:", label="Storage")
    ax.set_title("Energy Over Time")
    ax.set_xlabel("Turn")
    ax.set_ylabel("MW")
    ax.legend(fontsize=8)
    ax.grid(True, alpha=0.3)
    _save(fig, "energy.png")

    # Installed capacity mix
    fig, ax = plt.subplots(figsize=(10, 5))
    mix = np.vstack([[s.capacity.get(src, 0) for s in snapshots] for src in ENERGY_SOURCES])
    ax.stackplot(turns, mix, labels=ENERGY_SOURCES, alpha=0.8)
    ax.set_title("Installed Capacity by Source")
    ax.set_xlabel("Turn")
    ax.set_ylabel("MW")
    ax.legend(fontsize=8, loc="upper left")
    ax.grid(True, alpha=0.3)
    _save(fig, "capacity_mix.png")

    # Environment
    fig, ax1 = plt.subplots(figsize=(10, 5))
    ax1.plot(turns, [s.pollution for s in snapshots], "brown", label="Pollution")
    ax1.axhline(y=DEFEAT_POLLUTION, color="brown", linestyle="--", alpha=0.4)
    ax1.set_ylim(*POLLUTION_RANGE)
    ax1.set_xlabel("Turn")
    ax1.set_ylabel("Pollution")
    ax2 = ax1.twinx()
    ax2.plot(turns, [s.temperature for s in snapshots], "r-", label="Temperature")
    ax2.axhline(y=DEFEAT_TEMPERATURE, color="r", linestyle="--", alpha=0.4)
    ax2.set_ylabel("Temperature (C)")
    ax1.set_title("Pollution and Temperature")
    ax1.grid(True, alpha=0.3)
    _save(fig, "environment.png")

    # Popularity
    fig, ax = plt.subplots(figsize=(10, 5))
    ax.plot(turns, [s.poor for s in snapshots], label="Poor")
    ax.plot(turns, [s.middle for s in snapshots], label="Middle")
    ax.plot(turns, [s.rich for s in snapshots], label="Rich")
    ax.plot(turns, [s.avg_popularity for s in snapshots], "k--", linewidth=1.5, label="Average")
    ax.set_title("Popularity by Class")
    ax.set_xlabel("Turn")
    ax.set_ylabel("Popularity (0-100)")
    ax.set_ylim(*POPULARITY_RANGE)
    ax.legend(fontsize=8)
    ax.grid(True, alpha=0.3)
    _save(fig, "popularity.png")

    # Credits
    fig, ax = plt.subplots(figsize=(10, 5))
    ax.plot(turns, [s.credits for s in snapshots], "c-")
    ax.set_title("Treasury Over Time")
    ax.set_xlabel("Turn")
    ax.set_ylabel("Credits")
    ax.grid(True, alpha=0.3)
    _save(fig, "credits.png")

    print(f"Reports saved to {output_dir}/")
    return written
