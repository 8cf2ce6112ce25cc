import concurrent.futures
import csv
import logging
import time
from typing import Any, Dict, List, Optional

import numpy as np
from tqdm import tqdm

from .baseline import ReferenceSolver
from .config import PSOConfig
from .geometry import euclidean_distance_matrix, generate_cities, is_permutation, tour_cost
from .solver import TSPSolver

logger = logging.getLogger(__name__)

__all__ = ['SwarmEvaluation']

CSV_FIELDS = ['run', 'seed_entropy', 'spawn_key', 'n_cities', 'status', 'cost',
              'reference_cost', 'gap', 'solve_time']


class SwarmEvaluation:
    """
    Runs the swarm solver on independently seeded random instances, in parallel,
    and writes one CSV row per run.

    Every run gets its own child stream spawned from one SeedSequence, which
    makes the results independent of thread scheduling.
    """

    def __init__(self,
                 config: Optional[PSOConfig] = None,
                 runs: int = 8,
                 seed: Optional[int] = None,
                 num_threads: int = 4,
                 output_csv_path: Optional[str] = 'pso_results.csv',
                 reference: bool = False,
                 reference_time_limit: int = 5,
                 progress: bool = True):
        """
        Args:
            config (PSOConfig): Hyperparameters shared by every run; `n_cities` sets the instance size.
            runs (int): Number of independent runs.
            seed (int): Root seed. None draws fresh entropy from the OS.
            num_threads (int): The number of threads to use for parallel evaluation.
            output_csv_path (str): Path to write the results CSV file, or None to skip writing.
            reference (bool): Solve every instance with OR-Tools and report the gap to it.
            reference_time_limit (int): OR-Tools time limit per instance in seconds.
            progress (bool): Show a tqdm progress bar over completed runs.
        """
        if runs < 1:
            raise ValueError(f"runs must be positive, got {runs}")
        if num_threads < 1:
            raise ValueError(f"num_threads must be positive, got {num_threads}")
        self.config = config if config is not None else PSOConfig()
        self.runs = runs
        self.seed_sequence = np.random.SeedSequence(seed)
        self.num_threads = num_threads
        self.output_csv_path = output_csv_path
        self.reference = reference
        self.reference_time_limit = reference_time_limit
        self.progress = progress

    def _run_single_solve(self, run: int, seed_seq: np.random.SeedSequence) -> Dict[str, Any]:
        """Worker function: one instance, one solver run. Executed by each thread."""
        result = {
            'run': run,
            'seed_entropy': seed_seq.entropy,
            'spawn_key': '/'.join(str(k) for k in seed_seq.spawn_key),
            'n_cities': self.config.n_cities,
            'status': 'ok',
            'cost': None,
            'reference_cost': None,
            'gap': None,
            'solve_time': 0.0,
        }
        try:
            rng = np.random.default_rng(seed_seq)
            coordinates = generate_cities(self.config.n_cities, rng)
            distance_matrix = euclidean_distance_matrix(coordinates)

            solver = TSPSolver(coordinates, distance_matrix, config=self.config, rng=rng, progress=False)
            solve_start_time = time.time()
            tour = solver.solve()
            result['solve_time'] = time.time() - solve_start_time

            if not is_permutation(tour, self.config.n_cities):
                result['status'] = 'infeasible'
                return result
            result['cost'] = tour_cost(tour, distance_matrix)

            if self.reference:
                reference_tour = ReferenceSolver(coordinates, distance_matrix,
                                                 time_limit_seconds=self.reference_time_limit).solve()
                reference_cost = tour_cost(reference_tour, distance_matrix)
                result['reference_cost'] = reference_cost
                result['gap'] = (result['cost'] - reference_cost) / reference_cost if reference_cost > 0 else float('inf')

            logger.debug("run=%d cost=%.4f gap=%s solve_time=%.2fs",
                         run, result['cost'], result['gap'], result['solve_time'])
        except Exception:
            logger.exception("Runtime error in run %d", run)
            result['status'] = 'runtime_error'
        return result

    def evaluate(self) -> List[Dict[str, Any]]:
        """Evaluates all runs in parallel. Results are returned in run order."""
        start_time = time.time()
        child_seeds = self.seed_sequence.spawn(self.runs)

        results = []
        with concurrent.futures.ThreadPoolExecutor(max_workers=self.num_threads) as executor:
            futures = [executor.submit(self._run_single_solve, run, seq) for run, seq in enumerate(child_seeds)]
            logger.info("Submitted %d runs to the thread pool (%d threads)", len(futures), self.num_threads)

            bar = tqdm(concurrent.futures.as_completed(futures), total=len(futures),
                       desc="Evaluating runs", disable=not self.progress)
            best = float('inf')
            for future in bar:
                result = future.result()
                results.append(result)
                if result['cost'] is not None and result['cost'] < best:
                    best = result['cost']
                    bar.set_postfix(best=f"{best:.2f}")

        results.sort(key=lambda r: r['run'])
        if self.output_csv_path:
            self.write_results_to_csv(results)

        failed = sum(1 for r in results if r['status'] != 'ok')
        logger.info("Evaluation finished in %.2f seconds (%d runs, %d failed)",
                    time.time() - start_time, len(results), failed)
        return results

    def write_results_to_csv(self, results_data: List[Dict[str, Any]]):
        if not results_data:
            logger.warning("No results to write.")
            return
        with open(self.output_csv_path, 'w', newline='') as csvfile:
            writer = csv.DictWriter(csvfile, fieldnames=CSV_FIELDS, restval='N/A')
            writer.writeheader()
            writer.writerows(results_data)
        logger.info("Wrote results to '%s'", self.output_csv_path)

    @staticmethod
    def summarize(results: List[Dict[str, Any]]) -> Dict[str, Any]:
        costs = [r['cost'] for r in results if r['status'] == 'ok']
        gaps = [r['gap'] for r in results if r['gap'] is not None]
        summary = {'runs': len(results), 'ok': len(costs)}
        if costs:
            summary.update(best=min(costs), mean=float(np.mean(costs)), std=float(np.std(costs)))
        if gaps:
            summary['mean_gap'] = float(np.mean(gaps))
        return summary
