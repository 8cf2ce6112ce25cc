import numpy as np
from numba import njit


# --- Numba JIT Compiled Functions ---
# Random numbers are drawn by the caller from its numpy Generator and passed
# in as arrays, so the kernels stay deterministic for a given stream.

@njit(cache=True)
def _numba_follow_bests(position: np.ndarray, best_position: np.ndarray, global_best_position: np.ndarray,
                        draws: np.ndarray, cognitive: float, social: float) -> np.ndarray:
    """
    Position-indexed swaps toward the personal and the global best.
    The value of a best tour at i is used as an index into the current tour.
    """
    n = len(position)
    for i in range(n):
        if draws[i, 0] < cognitive:
            j = best_position[i]
            tmp = position[i]
            position[i] = position[j]
            position[j] = tmp
        if draws[i, 1] < social:
            j = global_best_position[i]
            tmp = position[i]
            position[i] = position[j]
            position[j] = tmp
    return position


@njit(cache=True)
def _numba_apply_swaps(position: np.ndarray, sources: np.ndarray, targets: np.ndarray) -> np.ndarray:
    """Swaps position[sources[k]] with position[targets[k]], in order."""
    for k in range(len(sources)):
        i = sources[k]
        j = targets[k]
        tmp = position[i]
        position[i] = position[j]
        position[j] = tmp
    return position


def reshuffle(position: np.ndarray, rng: np.random.Generator) -> np.ndarray:
    rng.shuffle(position)
    return position


def follow_bests(position: np.ndarray, best_position: np.ndarray, global_best_position: np.ndarray,
                 cognitive: float, social: float, rng: np.random.Generator) -> np.ndarray:
    """
    PSO update adapted to permutations.

    For every index one uniform draw decides the cognitive swap and a second one
    the social swap. With the usual coefficients (~1.49) both probabilities
    saturate and the swaps always happen.
    """
    draws = rng.random((len(position), 2))
    return _numba_follow_bests(position, best_position, global_best_position, draws, cognitive, social)


def mutate(position: np.ndarray, mutation_rate: float, rng: np.random.Generator) -> np.ndarray:
    """Swap two uniformly chosen positions (possibly the same one) with probability `mutation_rate`."""
    if rng.random() < mutation_rate:
        n = len(position)
        i, j = rng.integers(0, n, size=2)
        position[i], position[j] = position[j], position[i]
    return position


def gaussian_perturb(position: np.ndarray, stddev: float, rng: np.random.Generator) -> np.ndarray:
    """
    Swap each position with a random one with probability |g|, g ~ N(0, stddev).
    """
    n = len(position)
    draws = rng.random(n)
    noise = np.abs(rng.normal(0.0, stddev, size=n))
    targets = rng.integers(0, n, size=n)
    sources = np.flatnonzero(draws < noise)
    return _numba_apply_swaps(position, sources, targets[sources])
