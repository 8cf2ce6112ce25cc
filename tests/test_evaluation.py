import csv
import os
import tempfile
import unittest
from unittest import mock

import numpy as np

from pso_tsp.baseline import ReferenceSolver
from pso_tsp.config import PSOConfig
from pso_tsp.evaluation import SwarmEvaluation
from pso_tsp.geometry import euclidean_distance_matrix, is_permutation, tour_cost
from pso_tsp.solver import TSPSolver

SMALL = PSOConfig(n_cities=8, population_size=20, max_iterations=15)


class TestSwarmEvaluation(unittest.TestCase):
    def test_runs_are_written_in_order(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'results.csv')
            evaluation = SwarmEvaluation(config=SMALL, runs=4, seed=123, num_threads=2,
                                         output_csv_path=path, progress=False)
            results = evaluation.evaluate()
            with open(path, newline='') as f:
                rows = list(csv.DictReader(f))

        self.assertEqual([r['run'] for r in results], [0, 1, 2, 3])
        self.assertTrue(all(r['status'] == 'ok' for r in results))
        self.assertTrue(all(r['cost'] > 0 for r in results))
        self.assertEqual([row['run'] for row in rows], ['0', '1', '2', '3'])
        self.assertEqual(float(rows[2]['cost']), results[2]['cost'])

    def test_results_do_not_depend_on_thread_count(self):
        one = SwarmEvaluation(config=SMALL, runs=3, seed=5, num_threads=1, output_csv_path=None,
                              progress=False).evaluate()
        three = SwarmEvaluation(config=SMALL, runs=3, seed=5, num_threads=3, output_csv_path=None,
                                progress=False).evaluate()
        self.assertEqual([r['cost'] for r in one], [r['cost'] for r in three])

    def test_runs_use_independent_streams(self):
        results = SwarmEvaluation(config=SMALL, runs=3, seed=5, num_threads=2, output_csv_path=None,
                                  progress=False).evaluate()
        self.assertEqual(len({r['spawn_key'] for r in results}), 3)

    def test_summarize(self):
        results = [
            {'status': 'ok', 'cost': 10.0, 'gap': 0.1},
            {'status': 'ok', 'cost': 20.0, 'gap': None},
            {'status': 'runtime_error', 'cost': None, 'gap': None},
        ]
        summary = SwarmEvaluation.summarize(results)
        self.assertEqual(summary['runs'], 3)
        self.assertEqual(summary['ok'], 2)
        self.assertEqual(summary['best'], 10.0)
        self.assertEqual(summary['mean'], 15.0)
        self.assertAlmostEqual(summary['mean_gap'], 0.1)

    def test_failing_run_is_recorded_as_runtime_error(self):
        evaluation = SwarmEvaluation(config=SMALL, runs=2, seed=1, num_threads=1, output_csv_path=None,
                                     progress=False)
        with mock.patch.object(TSPSolver, 'solve', side_effect=RuntimeError("solver crashed")):
            with self.assertLogs('pso_tsp.evaluation', level='ERROR') as logs:
                results = evaluation.evaluate()
        self.assertEqual([r['status'] for r in results], ['runtime_error', 'runtime_error'])
        self.assertTrue(all(r['cost'] is None for r in results))
        self.assertIn("solver crashed", "\n".join(logs.output))
        summary = SwarmEvaluation.summarize(results)
        self.assertEqual(summary['runs'], 2)
        self.assertEqual(summary['ok'], 0)
        self.assertNotIn('best', summary)

    def test_non_permutation_is_recorded_as_infeasible(self):
        evaluation = SwarmEvaluation(config=SMALL, runs=1, seed=1, num_threads=1, output_csv_path=None,
                                     progress=False)
        duplicate = np.zeros(SMALL.n_cities, dtype=np.int64)
        with mock.patch.object(TSPSolver, 'solve', return_value=duplicate):
            result = evaluation.evaluate()[0]
        self.assertEqual(result['status'], 'infeasible')
        self.assertIsNone(result['cost'])
        self.assertEqual(SwarmEvaluation.summarize([result])['ok'], 0)

    def test_invalid_arguments(self):
        with self.assertRaises(ValueError):
            SwarmEvaluation(config=SMALL, runs=0)
        with self.assertRaises(ValueError):
            SwarmEvaluation(config=SMALL, num_threads=0)


class TestReferenceSolver(unittest.TestCase):
    def test_square_optimum(self):
        coords = np.array([[0, 0], [10, 10], [0, 10], [10, 0]])
        tour = ReferenceSolver(coords, time_limit_seconds=1).solve()
        self.assertTrue(is_permutation(tour, 4))
        self.assertAlmostEqual(tour_cost(tour, euclidean_distance_matrix(coords)), 40.0)

    def test_reference_gap_is_reported(self):
        evaluation = SwarmEvaluation(config=SMALL, runs=1, seed=9, num_threads=1, output_csv_path=None,
                                     reference=True, reference_time_limit=1, progress=False)
        result = evaluation.evaluate()[0]
        self.assertEqual(result['status'], 'ok')
        self.assertGreater(result['reference_cost'], 0)
        # allow tiny rounding from the integer-scaled OR-Tools model
        self.assertGreater(result['gap'], -1e-3)


if __name__ == '__main__':
    unittest.main()
