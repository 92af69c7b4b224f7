"""
Pheromone deposit and evaporation
"""

import itertools
import random

import numpy as np
import pytest

from acotsp import InvalidArgument, PheromoneMatrix


class TestPheromoneMatrix:

    def test_initialized_to_one(self):
        tau = PheromoneMatrix.initialize(5)
        assert tau.n == 5
        assert np.all(tau.tau == 1.0)

    def test_too_small(self):
        with pytest.raises(InvalidArgument):
            PheromoneMatrix.initialize(1)

    def test_deposit_is_directed(self):
        tau = PheromoneMatrix.initialize(3)
        tau.deposit(0, 2, 0.5)
        assert tau[0, 2] == pytest.approx(1.5)
        assert tau[2, 0] == pytest.approx(1.0)

    def test_negative_deposit_rejected(self):
        tau = PheromoneMatrix.initialize(3)
        with pytest.raises(InvalidArgument):
            tau.deposit(0, 1, -0.1)

    def test_deposit_tour_covers_closing_edge(self):
        tau = PheromoneMatrix.initialize(4)
        tau.deposit_tour([2, 0, 3, 1], 0.25)
        expected = np.ones((4, 4))
        for i, j in [(2, 0), (0, 3), (3, 1), (1, 2)]:
            expected[i, j] += 0.25
        assert np.allclose(tau.tau, expected)

    def test_symmetric_deposit(self):
        tau = PheromoneMatrix.initialize(3)
        tau.deposit_tour([0, 1, 2], 1.0, symmetric=True)
        assert np.allclose(tau.tau, tau.tau.T)
        assert tau[0, 1] == pytest.approx(2.0)

    def test_two_city_tour_deposits_both_directions(self):
        tau = PheromoneMatrix.initialize(2)
        tau.deposit_tour([0, 1], 1.0)
        assert tau[0, 1] == pytest.approx(2.0)
        assert tau[1, 0] == pytest.approx(2.0)

    def test_evaporation_decay_law(self):
        tau = PheromoneMatrix.initialize(4)
        tau.deposit(1, 2, 3.0)
        before = tau.tau.copy()
        rho, k = 0.3, 7
        for _ in range(k):
            tau.evaporate(rho)
        assert np.allclose(tau.tau, before * (1 - rho) ** k)

    @pytest.mark.parametrize("rho", [-0.1, 1.0, 1.5])
    def test_evaporate_rejects_bad_rho(self, rho):
        tau = PheromoneMatrix.initialize(3)
        with pytest.raises(InvalidArgument):
            tau.evaporate(rho)

    def test_rho_zero_is_identity(self):
        tau = PheromoneMatrix.initialize(3)
        tau.evaporate(0.0)
        assert np.all(tau.tau == 1.0)

    def test_stays_non_negative(self):
        rng = random.Random(5)
        tau = PheromoneMatrix.initialize(6)
        for _ in range(200):
            if rng.random() < 0.5:
                tau.deposit(rng.randrange(6), rng.randrange(6), rng.random())
            else:
                tau.evaporate(rng.uniform(0.0, 0.999))
        assert np.all(tau.tau >= 0.0)

    def test_deposit_order_does_not_matter(self):
        deposits = [(0, 1, 0.3), (1, 2, 0.1), (0, 1, 0.7), (2, 0, 0.25)]
        results = []
        for order in itertools.permutations(deposits):
            tau = PheromoneMatrix.initialize(3)
            for i, j, amount in order:
                tau.deposit(i, j, amount)
            results.append(tau.tau)
        for r in results[1:]:
            assert np.allclose(r, results[0])

    def test_staged_merge_equals_direct(self):
        tours = [[0, 1, 2, 3], [3, 1, 0, 2]]
        direct = PheromoneMatrix.initialize(4)
        staged = PheromoneMatrix.initialize(4)
        buf = staged.staging()
        for t in tours:
            direct.deposit_tour(t, 0.2)
            PheromoneMatrix.stage_tour(buf, t, 0.2)
        assert np.all(staged.tau == 1.0)
        staged.merge(buf)
        assert np.allclose(staged.tau, direct.tau)
