from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .geometry import tour_cost


def random_tour(n_cities: int, rng: np.random.Generator) -> np.ndarray:
    """Identity permutation shuffled uniformly."""
    tour = np.arange(n_cities, dtype=np.int64)
    rng.shuffle(tour)
    return tour


@dataclass(eq=False)
class Particle:
    position: np.ndarray
    best_position: np.ndarray
    cost: float
    best_cost: float
    reseeds: int = 0

    @classmethod
    def random(cls, n_cities: int, distance_matrix: np.ndarray, rng: np.random.Generator) -> 'Particle':
        position = random_tour(n_cities, rng)
        cost = tour_cost(position, distance_matrix)
        return cls(position=position, best_position=position.copy(), cost=cost, best_cost=cost)

    def reseed(self, distance_matrix: np.ndarray, rng: np.random.Generator):
        """Replace the particle in place by a fresh random one, forgetting its personal best."""
        self.position = random_tour(len(self.position), rng)
        self.cost = tour_cost(self.position, distance_matrix)
        self.best_position = self.position.copy()
        self.best_cost = self.cost
        self.reseeds += 1

    def remember(self) -> bool:
        """Store the current tour as personal best if it is strictly better."""
        if self.cost < self.best_cost:
            self.best_cost = self.cost
            self.best_position = self.position.copy()
            return True
        return False


class GlobalBest:
    """
    Best tour found by any particle of a run.

    Tour and cost live in a single tuple that is swapped as a whole, so a
    reader never observes a tour paired with another tour's cost.
    """

    def __init__(self):
        self._best: Tuple[np.ndarray, float] = (np.empty(0, dtype=np.int64), float('inf'))

    @property
    def tour(self) -> np.ndarray:
        return self._best[0]

    @property
    def cost(self) -> float:
        return self._best[1]

    def snapshot(self) -> Tuple[np.ndarray, float]:
        tour, cost = self._best
        return tour.copy(), cost

    def offer(self, tour: np.ndarray, cost: float) -> bool:
        if cost < self._best[1]:
            self._best = (tour.copy(), float(cost))
            return True
        return False

    def __repr__(self):
        return f"GlobalBest(cost={self.cost!r}, tour={self.tour.tolist()!r})"
