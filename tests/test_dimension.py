import math
import unittest

from grouptable.dimension import RecordSet


def make_records():
    return [
        {"id": 1, "region": "east", "amount": 10},
        {"id": 2, "region": "west", "amount": 40},
        {"id": 3, "region": "east", "amount": 30},
        {"id": 4, "region": "north", "amount": 20},
    ]


class TestDimension(unittest.TestCase):
    def test_top_orders_descending_and_caps(self):
        records = RecordSet(make_records())
        amount = records.dimension("amount")
        self.assertEqual([row["id"] for row in amount.top(2)], [2, 3])
        self.assertEqual([row["id"] for row in amount.top(math.inf)], [2, 3, 4, 1])
        self.assertEqual([row["id"] for row in amount.bottom(1)], [1])

    def test_filters_on_other_dimensions_apply_to_top(self):
        records = RecordSet(make_records())
        amount = records.dimension("amount")
        region = records.dimension(lambda row: row["region"])
        region.filter("east")
        self.assertTrue(region.has_filter())
        self.assertEqual([row["id"] for row in amount.top(math.inf)], [3, 1])
        region.filter(None)
        self.assertEqual(len(amount.top(math.inf)), 4)

    def test_range_and_function_filters(self):
        records = RecordSet(make_records())
        amount = records.dimension("amount")
        amount.filter((20, 40))
        self.assertEqual(sorted(row["id"] for row in records.all_filtered()), [3, 4])
        amount.filter(lambda value: value > 25)
        self.assertEqual(sorted(row["id"] for row in records.all_filtered()), [2, 3])
        records.filter_all()
        self.assertFalse(amount.has_filter())
        self.assertEqual(records.size(), 4)

    def test_top_with_zero_returns_nothing(self):
        self.assertEqual(RecordSet(make_records()).dimension("amount").top(0), [])


if __name__ == "__main__":
    unittest.main()
