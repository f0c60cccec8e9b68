"""Tests for supply bound functions."""

import unittest

from rtakit.supply import (
    BlockingReduced,
    Constrained,
    Dedicated,
    FunctionSupply,
    Periodic,
    as_supply,
)
from rtakit.time import InvalidInputError


class TestDedicated(unittest.TestCase):

    def test_identity(self):
        supply = Dedicated()
        self.assertEqual(supply(7), 7)
        self.assertEqual(supply.service_time(7), 7)

    def test_limit(self):
        self.assertIsNone(Dedicated().service_time(5, limit=4))
        self.assertEqual(Dedicated().service_time(4, limit=4), 4)


class TestPeriodicResource(unittest.TestCase):

    def test_supply_values(self):
        supply = Periodic(3, 5)
        self.assertEqual(
            [supply(d) for d in range(14)],
            [0, 0, 0, 0, 0, 1, 2, 3, 3, 3, 4, 5, 6, 6],
        )

    def test_service_time(self):
        supply = Periodic(3, 5)
        self.assertEqual([supply.service_time(s) for s in range(7)], [0, 5, 6, 7, 10, 11, 12])

    def test_service_time_is_least_interval(self):
        supply = Periodic(3, 5)
        for demand in range(1, 20):
            t = supply.service_time(demand)
            self.assertGreaterEqual(supply(t), demand)
            self.assertLess(supply(t - 1), demand)

    def test_generic_inversion_agrees(self):
        supply = Periodic(3, 5)
        generic = FunctionSupply(supply.supply)
        for demand in range(20):
            self.assertEqual(generic.service_time(demand), supply.service_time(demand))

    def test_limit(self):
        self.assertIsNone(Periodic(3, 5).service_time(6, limit=11))
        self.assertIsNone(FunctionSupply(Periodic(3, 5)).service_time(6, limit=11))

    def test_invalid_parameters(self):
        with self.assertRaises(InvalidInputError):
            Periodic(6, 5)
        with self.assertRaises(InvalidInputError):
            Periodic(0, 5)


class TestConstrainedResource(unittest.TestCase):

    def test_supply_values(self):
        supply = Constrained(2, 5, 11)
        self.assertEqual([supply(d) for d in (8, 12, 13, 14, 15, 20, 24, 25)], [0, 0, 1, 2, 2, 2, 3, 4])

    def test_service_time(self):
        supply = Constrained(2, 5, 11)
        self.assertEqual([supply.service_time(s) for s in range(4)], [0, 13, 14, 24])

    def test_deadline_equal_to_period_is_periodic(self):
        constrained = Constrained(3, 5, 5)
        periodic = Periodic(3, 5)
        for delta in range(50):
            self.assertEqual(constrained(delta), periodic(delta))
        for demand in range(20):
            self.assertEqual(constrained.service_time(demand), periodic.service_time(demand))

    def test_invalid_parameters(self):
        with self.assertRaises(InvalidInputError):
            Constrained(3, 2, 5)
        with self.assertRaises(InvalidInputError):
            Constrained(2, 6, 5)


class TestBlockingReduced(unittest.TestCase):

    def test_blocking_removed(self):
        supply = BlockingReduced(Dedicated(), 3)
        self.assertEqual(supply(2), 0)
        self.assertEqual(supply(5), 2)
        self.assertEqual(supply.service_time(2), 5)
        self.assertEqual(supply.service_time(0), 0)

    def test_callable_base(self):
        supply = BlockingReduced(lambda t: t, 1)
        self.assertEqual(supply.service_time(4), 5)


class TestSupplyProperties(unittest.TestCase):

    def test_zero_at_zero_and_monotone(self):
        supplies = [
            Dedicated(),
            Periodic(3, 5),
            Periodic(1, 7),
            Constrained(2, 5, 11),
            BlockingReduced(Periodic(3, 5), 2),
        ]
        for supply in supplies:
            values = [supply(d) for d in range(100)]
            self.assertEqual(values[0], 0, repr(supply))
            self.assertEqual(values, sorted(values), repr(supply))


class TestAsSupply(unittest.TestCase):

    def test_passthrough(self):
        supply = Dedicated()
        self.assertIs(as_supply(supply), supply)

    def test_callable(self):
        self.assertIsInstance(as_supply(lambda t: t // 2), FunctionSupply)

    def test_rejects_other(self):
        with self.assertRaises(InvalidInputError):
            as_supply(42)


class TestGenericServiceTime(unittest.TestCase):

    def test_levelled_off_supply_gives_up(self):
        supply = FunctionSupply(lambda t: min(t, 5))
        self.assertEqual(supply.service_time(5), 5)
        self.assertIsNone(supply.service_time(105, limit=1000))
        self.assertIsNone(supply.service_time(105))

    def test_invalid_supply_value(self):
        supply = FunctionSupply(lambda t: t * 0.5)
        with self.assertRaises(InvalidInputError):
            supply.supply(4)
        with self.assertRaises(InvalidInputError):
            supply.service_time(2)


if __name__ == "__main__":
    unittest.main()
