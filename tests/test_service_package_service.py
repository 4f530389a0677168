import unittest
from decimal import Decimal

from pydantic import ValidationError

from autocare import schemas
from autocare.database import SYSTEM_AUDITOR
from autocare.exceptions import AlreadyExistsError, BadRequestError, NotFoundError
from autocare.mappers import full_name
from autocare.models import PackageStatus, ServicePackage
from autocare.pagination import PaginationParams
from autocare.services import customer_service, service_package_service
from tests.helpers import DatabaseTestCase

FIRST_PAGE = PaginationParams(page=1, per_page=20)


class TestServicePackageModel(unittest.TestCase):

    def test_equality_is_by_name(self):
        self.assertEqual(ServicePackage(name="Basic"), ServicePackage(name="Basic"))
        self.assertNotEqual(ServicePackage(name="Basic"), ServicePackage(name="Premium"))
        self.assertEqual(len({ServicePackage(name="Basic"), ServicePackage(name="Basic")}), 1)

    def test_blank_name_is_rejected(self):
        with self.assertRaises(ValidationError):
            schemas.ServicePackageCreate(name="   ", monthly_price=Decimal("9.99"))
        with self.assertRaises(ValidationError):
            schemas.ServicePackageUpdate(name=" ")

    def test_activate_and_deactivate(self):
        package = ServicePackage(name="Basic", status=PackageStatus.ACTIVE)
        package.deactivate()
        self.assertFalse(package.is_active)
        package.activate()
        self.assertTrue(package.is_active)


class TestFullName(unittest.TestCase):

    def test_full_name(self):
        self.assertEqual(full_name("John", "Doe"), "John Doe")
        self.assertEqual(full_name("John", None), "John")
        self.assertEqual(full_name(" ", "Doe"), "Doe")
        self.assertEqual(full_name(None, ""), "Unknown")


class TestServicePackageService(DatabaseTestCase):

    async def test_create_service_package(self):
        package = await self.create_service_package(name="Basic", monthly_price="19.99", description="Oil change")

        self.assertEqual(package.version, 0)
        self.assertEqual(package.status, PackageStatus.ACTIVE)
        self.assertTrue(package.active)
        self.assertEqual(package.subscriber_count, 0)
        self.assertEqual(package.monthly_price, Decimal("19.99"))

    async def test_duplicate_name(self):
        await self.create_service_package(name="Basic")

        with self.assertRaises(AlreadyExistsError) as ctx:
            await self.create_service_package(name="Basic")
        self.assertEqual(ctx.exception.error_code, "SERVICE_PACKAGE_ALREADY_EXISTS")

    async def test_rename_onto_existing_name(self):
        await self.create_service_package(name="Basic")
        premium = await self.create_service_package(name="Premium")

        with self.assertRaises(BadRequestError) as ctx:
            await service_package_service.update_service_package(
                self.db, premium.id, schemas.ServicePackageUpdate(name="Basic")
            )
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(ctx.exception.message, "Service package with name 'Basic' already exists")

    async def test_rename_to_its_own_name_is_allowed(self):
        package = await self.create_service_package(name="Basic")

        updated = await service_package_service.update_service_package(
            self.db, package.id, schemas.ServicePackageUpdate(name="Basic", description="Same name")
        )

        self.assertEqual(updated.name, "Basic")
        self.assertEqual(updated.description, "Same name")

    async def test_update_without_version(self):
        package = await self.create_service_package(name="Basic", monthly_price="19.99")

        updated = await service_package_service.update_service_package(
            self.db, package.id, schemas.ServicePackageUpdate(monthly_price=Decimal("24.50"))
        )

        self.assertEqual(updated.monthly_price, Decimal("24.50"))
        self.assertEqual(updated.name, "Basic")
        self.assertEqual(updated.version, 1)

    async def test_deactivate_and_filter_listing(self):
        basic = await self.create_service_package(name="Basic")
        await self.create_service_package(name="Premium")

        deactivated = await service_package_service.update_service_package_status(self.db, basic.id, False)
        self.assertEqual(deactivated.status, PackageStatus.INACTIVE)
        self.assertEqual(deactivated.version, 1)

        active = await service_package_service.list_service_packages(self.db, FIRST_PAGE, active=True)
        inactive = await service_package_service.list_service_packages(self.db, FIRST_PAGE, active=False)
        every = await service_package_service.list_service_packages(self.db, FIRST_PAGE)
        self.assertEqual([p.name for p in active.items], ["Premium"])
        self.assertEqual([p.name for p in inactive.items], ["Basic"])
        self.assertEqual(every.total, 2)

    async def test_status_change_to_same_state_is_a_noop(self):
        package = await self.create_service_package()

        unchanged = await service_package_service.update_service_package_status(self.db, package.id, True)

        self.assertEqual(unchanged.version, 0)
        self.assertTrue(unchanged.active)

    async def test_subscribe_updates_both_sides(self):
        customer = await self.create_customer()
        package = await self.create_service_package()

        await service_package_service.subscribe(self.db, package.id, customer.id)

        async with self.sessionmaker() as fresh:
            stored_customer = await service_package_service.load_customer_with_packages(fresh, customer.id)
            stored_package = await service_package_service.load_service_package(fresh, package.id)
            self.assertEqual([p.id for p in stored_customer.service_packages], [package.id])
            self.assertEqual([c.id for c in stored_package.subscribers], [customer.id])

        response = await service_package_service.get_service_package(self.db, package.id)
        self.assertEqual(response.subscriber_count, 1)

    async def test_subscribe_twice_is_rejected(self):
        customer = await self.create_customer()
        package = await self.create_service_package()
        await service_package_service.subscribe(self.db, package.id, customer.id)

        with self.assertRaises(BadRequestError) as ctx:
            await service_package_service.subscribe(self.db, package.id, customer.id)
        self.assertIn("already subscribed", ctx.exception.message)

    async def test_subscribe_to_inactive_package_is_rejected(self):
        customer = await self.create_customer()
        package = await self.create_service_package()
        await service_package_service.update_service_package_status(self.db, package.id, False)

        with self.assertRaises(BadRequestError):
            await service_package_service.subscribe(self.db, package.id, customer.id)

    async def test_subscribe_unknown_ids(self):
        customer = await self.create_customer()
        package = await self.create_service_package()

        with self.assertRaises(NotFoundError):
            await service_package_service.subscribe(self.db, package.id, 999)
        with self.assertRaises(NotFoundError):
            await service_package_service.subscribe(self.db, 999, customer.id)

    async def test_unsubscribe(self):
        customer = await self.create_customer()
        package = await self.create_service_package()
        await service_package_service.subscribe(self.db, package.id, customer.id)

        await service_package_service.unsubscribe(self.db, package.id, customer.id)

        subscribers = await service_package_service.list_subscribers(self.db, package.id)
        self.assertEqual(subscribers.total_count, 0)
        with self.assertRaises(BadRequestError):
            await service_package_service.unsubscribe(self.db, package.id, customer.id)

    async def test_list_subscribers(self):
        john = await self.create_customer(email="john@example.com", first_name="John", last_name="Doe")
        jane = await self.create_customer(email="jane@example.com", first_name="Jane", last_name="Roe")
        package = await self.create_service_package()
        await service_package_service.subscribe(self.db, package.id, jane.id)
        await service_package_service.subscribe(self.db, package.id, john.id)

        subscribers = await service_package_service.list_subscribers(self.db, package.id)

        self.assertEqual(subscribers.total_count, 2)
        self.assertEqual([s.id for s in subscribers.subscribers], [john.id, jane.id])
        self.assertEqual(subscribers.subscribers[0].name, "John Doe")
        self.assertEqual(subscribers.subscribers[1].email, "jane@example.com")

    async def test_renaming_a_package_keeps_its_subscriptions(self):
        customer = await self.create_customer()
        package = await self.create_service_package(name="Basic")
        await service_package_service.subscribe(self.db, package.id, customer.id)

        await service_package_service.update_service_package(
            self.db, package.id, schemas.ServicePackageUpdate(name="Basic Plus")
        )

        with self.assertRaises(BadRequestError):
            await service_package_service.subscribe(self.db, package.id, customer.id)
        await service_package_service.unsubscribe(self.db, package.id, customer.id)
        subscribers = await service_package_service.list_subscribers(self.db, package.id)
        self.assertEqual(subscribers.total_count, 0)

    async def test_writes_record_the_auditor(self):
        package = await service_package_service.create_service_package(
            self.db,
            schemas.ServicePackageCreate(name="Fleet", monthly_price=Decimal("99.00")),
            "admin",
        )
        self.assertEqual(package.created_by, "admin")
        self.assertEqual(package.updated_by, "admin")

        updated = await service_package_service.update_service_package_status(self.db, package.id, False, "ops")

        self.assertEqual(updated.created_by, "admin")
        self.assertEqual(updated.updated_by, "ops")

    async def test_writes_without_an_auditor_are_attributed_to_system(self):
        package = await self.create_service_package()

        self.assertEqual(package.created_by, SYSTEM_AUDITOR)
        self.assertEqual(package.updated_by, SYSTEM_AUDITOR)

    async def test_deleting_customer_drops_subscriptions(self):
        customer = await self.create_customer()
        package = await self.create_service_package()
        await service_package_service.subscribe(self.db, package.id, customer.id)

        await customer_service.delete_customer(self.db, customer.id)

        async with self.sessionmaker() as fresh:
            subscribers = await service_package_service.list_subscribers(fresh, package.id)
        self.assertEqual(subscribers.total_count, 0)


if __name__ == "__main__":
    unittest.main()
