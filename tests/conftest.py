import pytest

from acotsp import TSPInstance


class FixedRandom:
    """Random source returning the same draw every time."""

    def __init__(self, value):
        self.value = value

    def random(self):
        return self.value

    def randrange(self, n):
        return 0


@pytest.fixture
def unit_square():
    return TSPInstance.from_coords([(0, 0), (1, 0), (1, 1), (0, 1)], name="unit_square")


@pytest.fixture
def small_instance():
    return TSPInstance.generate(12, "random", seed=7, square_size=10.0)


@pytest.fixture
def fixed_random():
    return FixedRandom
