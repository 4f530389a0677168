"""
Shared fixtures for the async test cases.
"""
import tempfile
import unittest
from decimal import Decimal
from pathlib import Path

from autocare import schemas
from autocare.database import build_engine, build_sessionmaker, init_db
from autocare.services import customer_service, service_package_service, vehicle_service


class DatabaseTestCase(unittest.IsolatedAsyncioTestCase):
    """
    Gives every test a fresh SQLite file and an open session on it.

    A file rather than ``:memory:`` so that ``self.sessionmaker()`` can open
    further sessions that see the same data.
    """

    async def asyncSetUp(self):
        self._tmpdir = tempfile.TemporaryDirectory()
        db_path = Path(self._tmpdir.name) / "autocare-test.db"
        self.engine = build_engine(f"sqlite+aiosqlite:///{db_path}")
        await init_db(self.engine)
        self.sessionmaker = build_sessionmaker(self.engine)
        self.db = self.sessionmaker()

    async def asyncTearDown(self):
        await self.db.close()
        await self.engine.dispose()
        self._tmpdir.cleanup()

    async def create_customer(self, email="john.doe@example.com", first_name="John", last_name="Doe", **extra):
        request = schemas.CustomerCreate(first_name=first_name, last_name=last_name, email=email, **extra)
        return await customer_service.create_customer(self.db, request)

    async def create_vehicle(self, customer_id, vin="1HGCM82633A004352", make="Honda", model="Accord", year=2020):
        request = schemas.VehicleCreate(customer_id=customer_id, vin=vin, make=make, model=model, year=year)
        return await vehicle_service.create_vehicle(self.db, request)

    async def create_service_package(self, name="Premium Care", monthly_price="49.99", description=None):
        request = schemas.ServicePackageCreate(
            name=name,
            description=description,
            monthly_price=Decimal(monthly_price),
        )
        return await service_package_service.create_service_package(self.db, request)
