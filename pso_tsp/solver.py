import logging
import time
from typing import List, Optional

import numpy as np
from tqdm import tqdm

from .config import PSOConfig
from .geometry import as_coordinates, euclidean_distance_matrix
from .particle import GlobalBest
from .swarm import Swarm

logger = logging.getLogger(__name__)


class TSPSolver:
    """
    Solves the Traveling Salesman Problem (TSP) with a hybrid particle swarm.

    Each iteration every particle is reshuffled, pulled toward its personal
    best and the global best by position-indexed swaps, mutated and perturbed
    by Gaussian-probability swaps. The worst fraction of the swarm is then
    reseeded with random tours.
    """

    def __init__(self, coordinates: np.ndarray, distance_matrix: Optional[np.ndarray] = None,
                 config: Optional[PSOConfig] = None, seed=None, rng: Optional[np.random.Generator] = None,
                 progress: bool = True):
        """
        Initialize the TSP solver.

        Args:
            coordinates: Numpy array of shape (n, 2) containing the (x, y) coordinates of each city.
            distance_matrix: Numpy array of shape (n, n) containing pairwise distances between cities.
                Computed from the coordinates when omitted.
            config: Hyperparameters; `config.n_cities` is ignored in favour of the coordinates.
            seed: Seed for a fresh numpy Generator. Ignored when `rng` is given.
            rng: Random source shared by every operator of this run.
            progress: Show a tqdm progress bar while solving.
        """
        self.coordinates = as_coordinates(coordinates)
        self.n_cities = len(self.coordinates)
        if distance_matrix is None:
            distance_matrix = euclidean_distance_matrix(self.coordinates)
        else:
            distance_matrix = np.asarray(distance_matrix, dtype=np.float64)
            if distance_matrix.shape != (self.n_cities, self.n_cities):
                raise ValueError(f"distance_matrix must have shape {(self.n_cities, self.n_cities)}, "
                                 f"got {distance_matrix.shape}")
        self.distance_matrix = distance_matrix

        config = config if config is not None else PSOConfig()
        self.config = config.replace(n_cities=self.n_cities)
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.progress = progress

        self.global_best = GlobalBest()
        self.swarm = Swarm(self.distance_matrix, self.config, self.rng, self.global_best)

        self.inertia_weight: Optional[float] = None
        self.inertia_history: List[float] = []
        self.history: List[float] = []

    @property
    def best_tour(self) -> np.ndarray:
        return self.global_best.tour

    @property
    def best_cost(self) -> float:
        return self.global_best.cost

    def solve(self) -> np.ndarray:
        """
        Run the optimization for `max_iterations` generations.

        Returns:
            A numpy array of shape (n,) containing a permutation of integers
            [0, 1, ..., n-1] representing the order in which the cities are visited.
            The tour is closed implicitly from the last city back to the first.

        Every call starts a fresh run on the same random stream: the global best
        and the histories are reset.
        """
        cfg = self.config
        start_time = time.time()

        self.global_best = GlobalBest()
        self.swarm.global_best = self.global_best
        self.inertia_weight = None
        self.inertia_history = []
        self.history = []

        self.swarm.initialize()
        logger.debug("Initial best distance: %.4f", self.best_cost)

        bar = tqdm(range(cfg.max_iterations), desc="PSO", disable=not self.progress, leave=False)
        for iteration in bar:
            # Decayed inertia is kept available for the update rule but the swap rule does not consume it
            self.inertia_weight = cfg.inertia_weight(iteration)
            self.inertia_history.append(self.inertia_weight)

            previous = self.best_cost
            self.swarm.step()
            self.history.append(self.best_cost)

            if self.best_cost < previous:
                logger.debug("Iteration %d: new best distance %.4f", iteration + 1, self.best_cost)
                bar.set_postfix(best=f"{self.best_cost:.2f}")

        elapsed = time.time() - start_time
        logger.info("Finished %d iterations with %d particles in %.2fs, best distance %.4f",
                    cfg.max_iterations, cfg.population_size, elapsed, self.best_cost)
        return self.best_tour.copy()
