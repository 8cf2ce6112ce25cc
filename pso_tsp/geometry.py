import numpy as np
from numba import njit


class InvalidTourError(ValueError):
    """Raised when a tour is not a permutation of the city indices."""


# ==============================================================================
# Numba-accelerated standalone functions
# They take the distance matrix as an explicit argument.
# ==============================================================================

@njit(cache=True)
def _numba_tour_length(tour: np.ndarray, dist_matrix: np.ndarray) -> float:
    """Total length of the closed tour, including the edge back to the start."""
    n = len(tour)
    total = 0.0
    for i in range(n):
        total += dist_matrix[tour[i], tour[(i + 1) % n]]
    return total


def generate_cities(n_cities: int, rng: np.random.Generator, bound: int = 100) -> np.ndarray:
    """Uniform random integer cities in [0, bound) x [0, bound), shape (n, 2)."""
    return rng.integers(0, bound, size=(n_cities, 2), dtype=np.int64)


def as_coordinates(coordinates) -> np.ndarray:
    coords = np.asarray(coordinates, dtype=np.float64)
    if coords.ndim != 2 or coords.shape[1] != 2:
        raise ValueError(f"coordinates must have shape (n, 2), got {coords.shape}")
    if len(coords) < 2:
        raise ValueError(f"at least 2 cities are required, got {len(coords)}")
    return coords


def euclidean_distance_matrix(coordinates) -> np.ndarray:
    """Pairwise Euclidean distances between cities, shape (n, n)."""
    coords = as_coordinates(coordinates)
    diff = coords[:, np.newaxis, :] - coords[np.newaxis, :, :]
    return np.sqrt(np.sum(diff * diff, axis=-1))


def is_permutation(tour, n_cities: int) -> bool:
    tour = np.asarray(tour)
    if tour.ndim != 1 or len(tour) != n_cities:
        return False
    return np.array_equal(np.sort(tour), np.arange(n_cities))


def check_permutation(tour, n_cities: int):
    if not is_permutation(tour, n_cities):
        raise InvalidTourError(f"tour is not a permutation of 0..{n_cities - 1}: {list(np.asarray(tour))}")


def tour_cost(tour, distance_matrix: np.ndarray) -> float:
    """
    Calculates the total Euclidean length of a closed tour.

    Args:
        tour: permutation of all city indices, length >= 2.
        distance_matrix: Numpy array of shape (n, n) with pairwise distances.
    """
    tour = np.asarray(tour, dtype=np.int64)
    if len(tour) < 2:
        raise InvalidTourError(f"a tour needs at least 2 cities, got {len(tour)}")
    # The kernel does not bounds-check
    if tour.min() < 0 or tour.max() >= len(distance_matrix):
        raise InvalidTourError(f"tour indices must lie in 0..{len(distance_matrix) - 1}: {tour.tolist()}")
    return float(_numba_tour_length(tour, distance_matrix))
