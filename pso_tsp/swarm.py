import logging
from operator import attrgetter
from typing import List, Optional

import numpy as np

from .config import PSOConfig
from .geometry import check_permutation, tour_cost
from .operators import follow_bests, gaussian_perturb, mutate, reshuffle
from .particle import GlobalBest, Particle

logger = logging.getLogger(__name__)


class Swarm:
    """
    Fixed-size population of permutation particles.

    The global best is owned by the caller and handed in, so several swarms
    never share one by accident.
    """

    def __init__(self, distance_matrix: np.ndarray, config: PSOConfig, rng: np.random.Generator,
                 global_best: Optional[GlobalBest] = None):
        self.distance_matrix = distance_matrix
        self.n_cities = len(distance_matrix)
        self.config = config
        self.rng = rng
        self.global_best = global_best if global_best is not None else GlobalBest()
        self.particles: List[Particle] = []

    def __len__(self):
        return len(self.particles)

    def __iter__(self):
        return iter(self.particles)

    def _check(self, tour: np.ndarray):
        if self.config.validate_tours:
            check_permutation(tour, self.n_cities)

    def initialize(self):
        self.particles = []
        for _ in range(self.config.population_size):
            particle = Particle.random(self.n_cities, self.distance_matrix, self.rng)
            self._check(particle.position)
            self.particles.append(particle)
            self.global_best.offer(particle.position, particle.cost)
        logger.debug("Initialized %d particles, best initial cost %.4f",
                     len(self.particles), self.global_best.cost)

    def update_particle(self, particle: Particle) -> bool:
        """
        Move one particle, re-evaluate it and fold it into the bests.
        Returns True when the particle improved the global best.
        """
        cfg = self.config
        position = particle.position

        # Shuffle starting positions to encourage exploration
        reshuffle(position, self.rng)
        follow_bests(position, particle.best_position, self.global_best.tour,
                     cfg.cognitive, cfg.social, self.rng)
        self._check(position)

        mutate(position, cfg.mutation_rate, self.rng)
        self._check(position)
        gaussian_perturb(position, cfg.gaussian_stddev, self.rng)
        self._check(position)

        particle.cost = tour_cost(position, self.distance_matrix)
        particle.remember()
        return self.global_best.offer(position, particle.cost)

    def prune(self) -> int:
        """
        Reseed the worst `prune_percentage` of the swarm with random tours.

        The swarm ends up sorted by ascending cost; the surviving head is left
        untouched. Returns the number of reseeded particles.
        """
        self.particles.sort(key=attrgetter('cost'))
        prune_count = len(self.particles) * self.config.prune_percentage // 100
        for particle in self.particles[len(self.particles) - prune_count:]:
            particle.reseed(self.distance_matrix, self.rng)
            self._check(particle.position)
        return prune_count

    def step(self) -> int:
        """One generation: update every particle, then prune. Returns the number of global-best improvements."""
        improvements = 0
        for particle in self.particles:
            if self.update_particle(particle):
                improvements += 1
        self.prune()
        return improvements
