import logging

import numpy as np
from ortools.constraint_solver import pywrapcp
from ortools.constraint_solver import routing_enums_pb2

from .geometry import as_coordinates, euclidean_distance_matrix

logger = logging.getLogger(__name__)


class ReferenceSolver:
    """
    OR-Tools guided local search, used as the reference tour when measuring
    the gap of the swarm.
    """

    def __init__(self, coordinates: np.ndarray, distance_matrix: np.ndarray = None,
                 time_limit_seconds: int = 5, scaling_factor: int = 1000):
        self.coordinates = as_coordinates(coordinates)
        self.distance_matrix = (distance_matrix if distance_matrix is not None
                                else euclidean_distance_matrix(self.coordinates))
        self.num_locations = len(self.coordinates)
        self.time_limit_seconds = time_limit_seconds
        self.scaling_factor = scaling_factor

    def _create_data_model(self) -> dict:
        """Creates the data model for the routing problem."""
        # OR-Tools works on integer arc costs
        int_distance_matrix = np.rint(self.distance_matrix * self.scaling_factor).astype(np.int64)
        return {
            'distance_matrix': int_distance_matrix.tolist(),
            'num_vehicles': 1,
            'depot': 0,
        }

    def solve(self) -> np.ndarray:
        """
        Returns:
            A numpy array of shape (n,) containing a permutation of integers
            [0, 1, ..., n-1]. Falls back to the identity tour if OR-Tools finds no solution.
        """
        data = self._create_data_model()
        manager = pywrapcp.RoutingIndexManager(self.num_locations, data['num_vehicles'], data['depot'])
        routing = pywrapcp.RoutingModel(manager)

        def distance_callback(from_index, to_index):
            """Returns the distance between the two nodes."""
            from_node = manager.IndexToNode(from_index)
            to_node = manager.IndexToNode(to_index)
            return data['distance_matrix'][from_node][to_node]

        transit_callback_index = routing.RegisterTransitCallback(distance_callback)
        routing.SetArcCostEvaluatorOfAllVehicles(transit_callback_index)

        search_parameters = pywrapcp.DefaultRoutingSearchParameters()
        search_parameters.first_solution_strategy = (
            routing_enums_pb2.FirstSolutionStrategy.PATH_CHEAPEST_ARC)
        search_parameters.local_search_metaheuristic = (
            routing_enums_pb2.LocalSearchMetaheuristic.GUIDED_LOCAL_SEARCH)
        search_parameters.time_limit.seconds = self.time_limit_seconds
        search_parameters.log_search = False

        solution = routing.SolveWithParameters(search_parameters)
        if solution:
            return self._get_tour_from_solution(manager, routing, solution)

        logger.warning("OR-Tools found no solution for %d cities, using the identity tour", self.num_locations)
        return np.arange(self.num_locations)

    def _get_tour_from_solution(self, manager, routing, solution) -> np.ndarray:
        tour = []
        index = routing.Start(0)
        while not routing.IsEnd(index):
            tour.append(manager.IndexToNode(index))
            index = solution.Value(routing.NextVar(index))
        return np.array(tour, dtype=np.int64)
