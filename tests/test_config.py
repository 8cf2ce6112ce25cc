import json
import os
import tempfile
import unittest

from pso_tsp.config import PSOConfig


class TestPSOConfig(unittest.TestCase):
    def test_defaults(self):
        cfg = PSOConfig()
        self.assertEqual(cfg.n_cities, 20)
        self.assertEqual(cfg.population_size, 500)
        self.assertEqual(cfg.max_iterations, 2000)
        self.assertEqual(cfg.cognitive, 1.49445)
        self.assertEqual(cfg.social, 1.49445)
        self.assertEqual(cfg.prune_count, 50)
        self.assertFalse(cfg.validate_tours)

    def test_inertia_weight(self):
        cfg = PSOConfig(max_iterations=100)
        self.assertAlmostEqual(cfg.inertia_weight(0), 0.9)
        self.assertAlmostEqual(cfg.inertia_weight(50), 0.65)
        self.assertAlmostEqual(cfg.inertia_weight(100), 0.4)

    def test_invalid_values(self):
        for overrides in ({'n_cities': 1}, {'population_size': 0}, {'max_iterations': 0},
                          {'prune_percentage': 101}, {'prune_percentage': -1},
                          {'mutation_rate': -0.1}, {'gaussian_stddev': -1.0}, {'cognitive': -1.0}):
            with self.subTest(overrides=overrides):
                with self.assertRaises(ValueError):
                    PSOConfig(**overrides)

    def test_replace_validates(self):
        cfg = PSOConfig().replace(population_size=10)
        self.assertEqual(cfg.population_size, 10)
        with self.assertRaises(ValueError):
            cfg.replace(max_iterations=-5)

    def test_from_dict_rejects_unknown_keys(self):
        with self.assertRaises(ValueError):
            PSOConfig.from_dict({'swarm': 10})
        self.assertEqual(PSOConfig.from_dict({'max_iterations': 7}).max_iterations, 7)

    def test_from_json(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'cfg.json')
            with open(path, 'w') as f:
                json.dump({'population_size': 12, 'mutation_rate': 0.2}, f)
            cfg = PSOConfig.from_json(path)
        self.assertEqual(cfg.population_size, 12)
        self.assertEqual(cfg.mutation_rate, 0.2)
        self.assertEqual(PSOConfig.from_dict(cfg.to_dict()), cfg)

    def test_from_json_requires_object(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'cfg.json')
            with open(path, 'w') as f:
                json.dump([1, 2], f)
            with self.assertRaises(ValueError):
                PSOConfig.from_json(path)


if __name__ == '__main__':
    unittest.main()
