from .config import PSOConfig
from .geometry import (InvalidTourError, check_permutation, euclidean_distance_matrix, generate_cities,
                       is_permutation, tour_cost)
from .particle import GlobalBest, Particle
from .solver import TSPSolver
from .swarm import Swarm

__all__ = ['PSOConfig', 'InvalidTourError', 'check_permutation', 'euclidean_distance_matrix',
           'generate_cities', 'is_permutation', 'tour_cost', 'GlobalBest', 'Particle', 'TSPSolver', 'Swarm']

__version__ = '0.1.0'
