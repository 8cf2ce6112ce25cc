import json
from dataclasses import dataclass, asdict, fields, replace as _replace
from typing import Any, Dict


@dataclass(frozen=True)
class PSOConfig:
    """
    Hyperparameters of one optimization run.

    The cognitive/social constants are used directly as swap probabilities by
    the update rule. Values above 1.0 make the swaps unconditional.
    """
    n_cities: int = 20
    population_size: int = 500
    max_iterations: int = 2000

    initial_inertia: float = 0.9
    final_inertia: float = 0.4
    cognitive: float = 1.49445  # Cognitive component
    social: float = 1.49445  # Social component

    mutation_rate: float = 0.1
    gaussian_stddev: float = 0.1  # Standard deviation for Gaussian perturbations
    prune_percentage: int = 10  # Percentage of particles reseeded each iteration

    # Check the permutation invariant after every step (slow, used by tests)
    validate_tours: bool = False

    def __post_init__(self):
        self.validate()

    def validate(self):
        if self.n_cities < 2:
            raise ValueError(f"n_cities must be at least 2, got {self.n_cities}")
        if self.population_size < 1:
            raise ValueError(f"population_size must be positive, got {self.population_size}")
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be positive, got {self.max_iterations}")
        if not 0 <= self.prune_percentage <= 100:
            raise ValueError(f"prune_percentage must be in [0, 100], got {self.prune_percentage}")
        for name in ('cognitive', 'social', 'mutation_rate', 'gaussian_stddev'):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative, got {getattr(self, name)}")

    @property
    def prune_count(self) -> int:
        return self.population_size * self.prune_percentage // 100

    def inertia_weight(self, iteration: int) -> float:
        """Linearly decayed inertia weight for the given iteration."""
        span = self.initial_inertia - self.final_inertia
        return self.initial_inertia - span * iteration / self.max_iterations

    def replace(self, **overrides) -> 'PSOConfig':
        return _replace(self, **overrides)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PSOConfig':
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {unknown}")
        return cls(**data)

    @classmethod
    def from_json(cls, path: str) -> 'PSOConfig':
        with open(path, 'r') as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Configuration file {path} must hold a JSON object")
        return cls.from_dict(data)
