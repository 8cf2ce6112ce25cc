from typing import Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np


def format_route(tour: Sequence[int]) -> str:
    """Route as 'a -> b -> ... -> a', closing the cycle back to the first city."""
    tour = [int(city) for city in tour]
    if not tour:
        return ""
    return " -> ".join(str(city) for city in tour + [tour[0]])


def print_best_route(tour: Sequence[int], cost: float):
    print(f"Best Route: {format_route(tour)}")
    print(f"Best Cost: {cost:.4f}")


def plot_tour(coordinates: np.ndarray, tour: Sequence[int], title: str = "Best Tour", ax=None):
    """
    Plot the closed tour over the cities.

    Args:
        coordinates (np.ndarray): City coordinates, shape (n, 2).
        tour (Sequence[int]): Permutation of city indices.
        title (str): Plot title.
        ax: Matplotlib axes to draw on; a new figure is created when omitted.
    """
    coordinates = np.asarray(coordinates, dtype=float)
    if ax is None:
        _, ax = plt.subplots(figsize=(7, 7))

    closed = np.append(np.asarray(tour, dtype=int), tour[0])
    ax.plot(coordinates[closed, 0], coordinates[closed, 1], '-', color='tab:blue', linewidth=1.5, zorder=1)
    ax.scatter(coordinates[:, 0], coordinates[:, 1], color='tab:red', s=30, zorder=2)
    for idx, (x, y) in enumerate(coordinates):
        ax.annotate(str(idx), (x, y), textcoords='offset points', xytext=(4, 4), fontsize=8)
    # Mark the start of the route
    ax.scatter(*coordinates[tour[0]], color='black', marker='s', s=50, zorder=3)

    ax.set_xlabel("x")
    ax.set_ylabel("y")
    ax.set_aspect('equal', adjustable='datalim')
    ax.set_title(title)
    return ax


def plot_convergence(history: Sequence[float], ax=None, title: Optional[str] = None):
    """Global best cost per iteration."""
    if ax is None:
        _, ax = plt.subplots(figsize=(8, 4))
    ax.plot(np.arange(1, len(history) + 1), history, color='tab:green')
    ax.set_xlabel("Iteration")
    ax.set_ylabel("Best cost")
    if title is None:
        title = f"Convergence (final {history[-1]:.2f})" if len(history) else "Convergence"
    ax.set_title(title)
    ax.grid(True, alpha=0.3)
    return ax


def save_report_figure(coordinates: np.ndarray, tour: Sequence[int], cost: float,
                       history: Sequence[float], path: str):
    """Tour and convergence side by side, written to `path`."""
    fig, (ax_tour, ax_hist) = plt.subplots(1, 2, figsize=(14, 6))
    plot_tour(coordinates, tour, title=f"Best Tour - Cost: {cost:.2f}", ax=ax_tour)
    if len(history):
        plot_convergence(history, ax=ax_hist)
    fig.tight_layout()
    fig.savefig(path)
    plt.close(fig)
    return path
