"""Database fixtures for GraftQL tests (shared)."""

import pytest
from datetime import date
from decimal import Decimal
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Department, Employee, Position


async def create_sample_data(session: AsyncSession):
    """Create and commit departments, employees and positions used across SQL tests."""
    engineering = Department(name="Engineering")
    management = Department(name="Management")
    session.add_all([engineering, management])
    await session.flush()

    jane = Employee(first_name="Jane", last_name="Doe", age=30, active=True,
                    salary=Decimal("5000.00"), hired_on=date(2019, 3, 1), settings={"theme": "dark"})
    john = Employee(first_name="John", last_name="Smith", age=45, active=False,
                    salary=Decimal("7000.00"), hired_on=date(2015, 6, 15))
    alice = Employee(first_name="Alice", last_name="Jones", age=25, active=True,
                     salary=Decimal("4000.00"), hired_on=date(2022, 9, 1))
    session.add_all([jane, john, alice])
    await session.flush()

    session.add_all([
        Position(title="Engineer", rank=1, employee_id=jane.id, department_id=engineering.id),
        Position(title="Manager", rank=2, employee_id=jane.id, department_id=management.id),
        Position(title="Designer", rank=1, employee_id=john.id, department_id=engineering.id),
    ])
    await session.flush()
    await session.commit()
    return {'departments': [engineering, management], 'employees': [jane, john, alice]}


@pytest.fixture(scope="function")
async def populated_db(db_session: AsyncSession):
    return await create_sample_data(db_session)
