import unittest

from sqlalchemy.sql.elements import True_

from autocare.filters import (
    VehicleFilter,
    by_customer_email,
    by_customer_id,
    by_customer_name,
    by_make,
    by_model,
    by_vin,
    by_year_range,
    vehicle_predicates,
)


def render(predicate) -> str:
    return str(predicate.compile(compile_kwargs={"literal_binds": True})).lower()


class TestVehicleFilter(unittest.TestCase):

    def test_default_filter_is_empty(self):
        self.assertTrue(VehicleFilter().is_empty())

    def test_blank_strings_count_as_absent(self):
        self.assertTrue(VehicleFilter(make="  ", customer_name="").is_empty())

    def test_for_customer(self):
        vehicle_filter = VehicleFilter.for_customer(5)
        self.assertEqual(vehicle_filter.customer_id, 5)
        self.assertFalse(vehicle_filter.is_empty())


class TestPredicateBuilders(unittest.TestCase):
    """Absent criteria become ``true``; present ones touch their column."""

    def test_absent_criteria_yield_true(self):
        for predicate in (
            by_customer_id(None),
            by_vin(None),
            by_vin("   "),
            by_make(None),
            by_model(""),
            by_year_range(None, None),
            by_customer_email(None),
            by_customer_name(" "),
        ):
            self.assertIsInstance(predicate, True_)

    def test_empty_filter_yields_only_true_predicates(self):
        predicates = vehicle_predicates(VehicleFilter())
        self.assertEqual(len(predicates), 7)
        self.assertTrue(all(isinstance(p, True_) for p in predicates))

    def test_customer_id(self):
        self.assertEqual(render(by_customer_id(3)), "vehicles.customer_id = 3")

    def test_vin_is_normalized(self):
        rendered = render(by_vin(" 1hgcm82633a004352 "))
        self.assertIn("vehicles.vin", rendered)
        self.assertIn("'1hgcm82633a004352'", rendered)

    def test_make_and_model_use_their_columns(self):
        self.assertIn("vehicles.make", render(by_make("hon")))
        self.assertIn("vehicles.model", render(by_model("acc")))

    def test_year_range_bounds(self):
        self.assertIn("between 2018 and 2022", render(by_year_range(2018, 2022)))
        self.assertEqual(render(by_year_range(2018, None)), "vehicles.year >= 2018")
        self.assertEqual(render(by_year_range(None, 2022)), "vehicles.year <= 2022")

    def test_customer_name_matches_first_or_last_name(self):
        rendered = render(by_customer_name("doe"))
        self.assertIn("customers.first_name", rendered)
        self.assertIn("customers.last_name", rendered)
        self.assertIn(" or ", rendered)

    def test_customer_email(self):
        self.assertIn("customers.email", render(by_customer_email("example.com")))


if __name__ == "__main__":
    unittest.main()
