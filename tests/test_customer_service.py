import unittest
from datetime import date, timedelta

from pydantic import ValidationError
from sqlalchemy import func, select

from autocare import schemas
from autocare.exceptions import AlreadyExistsError, BadRequestError, NotFoundError, OptimisticLockError
from autocare.models import ContactMethod, CustomerProfile, Vehicle
from autocare.pagination import PaginationParams
from autocare.services import customer_service
from tests.helpers import DatabaseTestCase


class TestCustomerService(DatabaseTestCase):

    async def test_create_update_and_stale_update(self):
        """Create at version 0, update to 1, then a replay of version 0 conflicts."""
        created = await self.create_customer(email="a@x.com", first_name="A")
        self.assertEqual(created.version, 0)

        updated = await customer_service.update_customer(
            self.db, created.id, schemas.CustomerUpdate(version=0, first_name="B")
        )
        self.assertEqual(updated.version, 1)
        self.assertEqual(updated.first_name, "B")

        with self.assertRaises(OptimisticLockError):
            await customer_service.update_customer(
                self.db, created.id, schemas.CustomerUpdate(version=0, first_name="C")
            )

    async def test_update_without_version_is_rejected(self):
        created = await self.create_customer()

        with self.assertRaises(BadRequestError):
            await customer_service.update_customer(self.db, created.id, schemas.CustomerUpdate(first_name="X"))

        stored = await customer_service.get_customer(self.db, created.id)
        self.assertEqual(stored.first_name, "John")
        self.assertEqual(stored.version, 0)

    async def test_update_of_missing_customer_is_not_found_before_version_check(self):
        with self.assertRaises(NotFoundError) as ctx:
            await customer_service.update_customer(self.db, 999, schemas.CustomerUpdate(first_name="X"))
        self.assertEqual(ctx.exception.message, "Customer not found with ID: 999")
        self.assertEqual(ctx.exception.error_code, "CUSTOMER_NOT_FOUND")

    async def test_duplicate_email_on_create(self):
        await self.create_customer(email="dup@example.com")

        with self.assertRaises(AlreadyExistsError) as ctx:
            await self.create_customer(email="dup@example.com", first_name="Other")
        self.assertEqual(ctx.exception.status_code, 409)

    async def test_duplicate_email_on_update(self):
        await self.create_customer(email="taken@example.com")
        other = await self.create_customer(email="free@example.com")

        with self.assertRaises(AlreadyExistsError):
            await customer_service.update_customer(
                self.db, other.id, schemas.CustomerUpdate(version=0, email="taken@example.com")
            )

    async def test_keeping_own_email_is_not_a_duplicate(self):
        created = await self.create_customer(email="same@example.com")

        updated = await customer_service.update_customer(
            self.db, created.id, schemas.CustomerUpdate(version=0, email="same@example.com", last_name="Smith")
        )
        self.assertEqual(updated.last_name, "Smith")

    async def test_profile_is_created_with_customer(self):
        created = await self.create_customer(
            address="1 Main St",
            date_of_birth=date(1990, 5, 15),
            preferred_contact_method=ContactMethod.SMS,
        )

        stored = await customer_service.get_customer(self.db, created.id)
        self.assertEqual(stored.address, "1 Main St")
        self.assertEqual(stored.date_of_birth, date(1990, 5, 15))
        self.assertEqual(stored.preferred_contact_method, ContactMethod.SMS)

    async def test_customer_without_profile_data_has_no_profile(self):
        created = await self.create_customer()

        self.assertIsNone(created.address)
        self.assertIsNone(created.preferred_contact_method)
        count = (await self.db.execute(select(func.count(CustomerProfile.id)))).scalar_one()
        self.assertEqual(count, 0)

    async def test_profile_only_update_bumps_version(self):
        created = await self.create_customer()

        updated = await customer_service.update_customer(
            self.db, created.id, schemas.CustomerUpdate(version=0, address="22 Side Rd")
        )
        self.assertEqual(updated.version, 1)
        self.assertEqual(updated.address, "22 Side Rd")
        self.assertEqual(updated.preferred_contact_method, ContactMethod.EMAIL)

    async def test_clearing_profile_deletes_it(self):
        created = await self.create_customer(address="1 Main St")

        updated = await customer_service.update_customer(
            self.db, created.id, schemas.CustomerUpdate(version=0, clear_profile=True)
        )
        self.assertIsNone(updated.address)
        count = (await self.db.execute(select(func.count(CustomerProfile.id)))).scalar_one()
        self.assertEqual(count, 0)

    async def test_future_date_of_birth_is_rejected(self):
        with self.assertRaises(ValidationError):
            schemas.CustomerCreate(
                first_name="John",
                last_name="Doe",
                email="john@example.com",
                date_of_birth=date.today() + timedelta(days=1),
            )

    async def test_markup_in_names_is_rejected(self):
        with self.assertRaises(ValidationError):
            schemas.CustomerCreate(first_name="<script>", last_name="Doe", email="john@example.com")

    async def test_blank_names_are_rejected(self):
        with self.assertRaises(ValidationError):
            schemas.CustomerCreate(first_name="   ", last_name="  ", email="john@example.com")
        with self.assertRaises(ValidationError):
            schemas.CustomerUpdate(version=0, last_name="\t ")

    async def test_names_are_trimmed(self):
        created = await self.create_customer(first_name="  John ", last_name=" Doe")

        self.assertEqual((created.first_name, created.last_name), ("John", "Doe"))

    async def test_writes_record_the_auditor(self):
        created = await customer_service.create_customer(
            self.db,
            schemas.CustomerCreate(first_name="John", last_name="Doe", email="audit@example.com"),
            "admin",
        )
        self.assertEqual((created.created_by, created.updated_by), ("admin", "admin"))

        updated = await customer_service.update_customer(
            self.db, created.id, schemas.CustomerUpdate(version=0, phone="+1 555 0100"), "clerk"
        )

        self.assertEqual((updated.created_by, updated.updated_by), ("admin", "clerk"))

    async def test_list_customers_is_paginated(self):
        for i in range(5):
            await self.create_customer(email=f"c{i}@example.com")

        page = await customer_service.list_customers(self.db, PaginationParams(page=2, per_page=2))

        self.assertEqual(page.total, 5)
        self.assertEqual(page.pages, 3)
        self.assertEqual([c.email for c in page.items], ["c2@example.com", "c3@example.com"])

    async def test_delete_removes_profile_and_vehicles(self):
        created = await self.create_customer(address="1 Main St")
        await self.create_vehicle(created.id)

        await customer_service.delete_customer(self.db, created.id)

        self.assertFalse(await customer_service.customer_exists(self.db, created.id))
        vehicles = (await self.db.execute(select(func.count(Vehicle.id)))).scalar_one()
        profiles = (await self.db.execute(select(func.count(CustomerProfile.id)))).scalar_one()
        self.assertEqual(vehicles, 0)
        self.assertEqual(profiles, 0)

    async def test_delete_missing_customer(self):
        with self.assertRaises(NotFoundError):
            await customer_service.delete_customer(self.db, 12345)


if __name__ == "__main__":
    unittest.main()
