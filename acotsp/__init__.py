from .errors import InvalidArgument, InvariantError
from .tsp import City, Layout, TSPInstance, score_tour, tour_length
from .heuristic import COINCIDENT_ETA, build_heuristic
from .pheromone import PheromoneMatrix
from .construction import TourConstructor
from .colony import ACOConfig, ACOResult, AntColony, SearchState
from .experiments import run_parameter_sweep, run_repeated_trials
