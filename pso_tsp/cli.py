import argparse
import logging
import sys

import numpy as np

from .config import PSOConfig
from .evaluation import SwarmEvaluation
from .geometry import generate_cities
from .reporting import print_best_route, save_report_figure
from .solver import TSPSolver

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='pso-tsp',
                                     description='Hybrid particle swarm optimizer for the Euclidean TSP')
    parser.add_argument('--log-level', default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'], help='Logging verbosity')
    subparsers = parser.add_subparsers(dest='command', required=True)

    def add_common(sub):
        sub.add_argument('--config', help='JSON file with PSOConfig overrides')
        sub.add_argument('--cities', type=int, help='Number of random cities')
        sub.add_argument('--particles', type=int, help='Swarm size')
        sub.add_argument('--iterations', type=int, help='Number of iterations')
        sub.add_argument('--seed', type=int, default=None, help='Random seed')
        sub.add_argument('--no-progress', action='store_true', help='Hide the progress bar')

    solve = subparsers.add_parser('solve', help='Solve one random instance')
    add_common(solve)
    solve.add_argument('--plot', help='Write the best tour and convergence plot to this image file')

    evaluate = subparsers.add_parser('evaluate', help='Evaluate several independently seeded runs')
    add_common(evaluate)
    evaluate.add_argument('--runs', type=int, default=8, help='Number of runs')
    evaluate.add_argument('--workers', type=int, default=4, help='Number of threads')
    evaluate.add_argument('--output', default='pso_results.csv', help='Results CSV path')
    evaluate.add_argument('--reference', action='store_true', help='Report the gap to an OR-Tools tour')
    evaluate.add_argument('--reference-time-limit', type=int, default=5,
                          help='OR-Tools time limit per instance in seconds')
    return parser


def load_config(args) -> PSOConfig:
    config = PSOConfig.from_json(args.config) if args.config else PSOConfig()
    overrides = {}
    if args.cities is not None:
        overrides['n_cities'] = args.cities
    if args.particles is not None:
        overrides['population_size'] = args.particles
    if args.iterations is not None:
        overrides['max_iterations'] = args.iterations
    return config.replace(**overrides) if overrides else config


def run_solve(args, config: PSOConfig) -> int:
    rng = np.random.default_rng(args.seed)
    coordinates = generate_cities(config.n_cities, rng)
    solver = TSPSolver(coordinates, config=config, rng=rng, progress=not args.no_progress)
    tour = solver.solve()
    print_best_route(tour, solver.best_cost)
    if args.plot:
        save_report_figure(coordinates, tour, solver.best_cost, solver.history, args.plot)
        logger.info("Saved plot to %s", args.plot)
    return 0


def build_evaluation(args, config: PSOConfig) -> SwarmEvaluation:
    return SwarmEvaluation(config=config, runs=args.runs, seed=args.seed, num_threads=args.workers,
                           output_csv_path=args.output, reference=args.reference,
                           reference_time_limit=args.reference_time_limit,
                           progress=not args.no_progress)


def run_evaluate(evaluation: SwarmEvaluation) -> int:
    results = evaluation.evaluate()
    summary = SwarmEvaluation.summarize(results)
    print(", ".join(f"{key}={value:.4f}" if isinstance(value, float) else f"{key}={value}"
                    for key, value in summary.items()))
    return 0 if summary['ok'] == summary['runs'] else 1


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    try:
        config = load_config(args)
        evaluation = build_evaluation(args, config) if args.command == 'evaluate' else None
    except (OSError, ValueError) as e:
        parser.error(str(e))

    if args.command == 'solve':
        return run_solve(args, config)
    return run_evaluate(evaluation)


if __name__ == '__main__':
    sys.exit(main())
