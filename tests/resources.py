"""Resources shared by the GraftQL tests.

PORO resources serve plain Python objects from ``DB``; SQL resources serve the
SQLAlchemy models in ``tests.models``.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from graftql import (
    MemoryAdapter,
    Resource,
    SQLAlchemyAdapter,
    attribute,
    belongs_to,
    extra_attribute,
    filter_field,
    has_many,
)
from tests import models


@dataclass
class Employee:
    id: int
    first_name: str
    last_name: str
    age: Optional[int] = None
    settings: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Position:
    id: int
    title: str
    rank: int
    employee_id: int
    department_id: Optional[int] = None


@dataclass
class Department:
    id: int
    name: str


DB: Dict[str, List[Any]] = {}


def reset_db() -> None:
    DB['employees'] = [
        Employee(1, 'Jane', 'Doe', 30, {'theme': 'dark'}),
        Employee(2, 'John', 'Smith', 45),
        Employee(3, 'Alice', 'Jones', 25),
    ]
    DB['positions'] = [
        Position(1, 'Engineer', 1, employee_id=1, department_id=1),
        Position(2, 'Manager', 2, employee_id=1, department_id=2),
        Position(3, 'Designer', 1, employee_id=2, department_id=1),
    ]
    DB['departments'] = [
        Department(1, 'Engineering'),
        Department(2, 'Management'),
    ]


reset_db()


class POROApplicationResource(Resource):
    abstract = True
    namespace = 'PORO'


class EmployeeResource(POROApplicationResource):
    type = 'employees'
    graphql_entrypoint = 'employees'
    adapter = MemoryAdapter(lambda: DB['employees'])

    first_name = attribute('string')
    last_name = attribute('string')
    age = attribute('integer')
    settings = attribute('hash', only=['readable'])
    full_name = extra_attribute('string', resolve=lambda e: f"{e.first_name} {e.last_name}")
    positions = has_many('PositionResource')
    classifications = has_many(remote='http://test.com/classifications')


class PositionResource(POROApplicationResource):
    type = 'positions'
    graphql_entrypoint = 'positions'
    adapter = MemoryAdapter(lambda: DB['positions'])

    title = attribute('string')
    rank = attribute('integer')
    employee_id = attribute('integer', only=['filterable'])
    department_id = attribute('integer', only=['filterable'])
    employee = belongs_to('EmployeeResource')
    department = belongs_to('DepartmentResource')


class DepartmentResource(POROApplicationResource):
    type = 'departments'
    graphql_entrypoint = 'departments'
    adapter = MemoryAdapter(lambda: DB['departments'])

    name = attribute('string')


PORO_RESOURCES = [EmployeeResource, PositionResource, DepartmentResource]


def _senior(scope, operator, values, context):
    wanted = bool(values[0])
    scope.records = [r for r in scope.records if (r.age is not None and r.age >= 40) == wanted]
    return scope


class SQLEmployeeResource(Resource):
    type = 'employees'
    graphql_entrypoint = 'sqlEmployees'
    graphql_name = 'SQLEmployee'
    model = models.Employee
    adapter = SQLAlchemyAdapter()

    first_name = attribute()
    last_name = attribute()
    age = attribute()
    active = attribute()
    salary = attribute()
    hired_on = attribute()
    settings = attribute()
    positions = has_many('SQLPositionResource')


class SQLPositionResource(Resource):
    type = 'positions'
    graphql_entrypoint = 'sqlPositions'
    graphql_name = 'SQLPosition'
    model = models.Position
    adapter = SQLAlchemyAdapter()

    title = attribute()
    rank = attribute()
    employee_id = attribute(only=['filterable'])
    employee = belongs_to('SQLEmployeeResource')
    department = belongs_to('SQLDepartmentResource')


class SQLDepartmentResource(Resource):
    type = 'departments'
    graphql_name = 'SQLDepartment'
    model = models.Department
    adapter = SQLAlchemyAdapter()

    name = attribute()


SQL_RESOURCES = [SQLEmployeeResource, SQLPositionResource]


class SeniorEmployeeResource(POROApplicationResource):
    """PORO employees with a custom filter that is not backed by an attribute."""

    type = 'employees'
    graphql_entrypoint = 'seniorEmployees'
    graphql_name = 'POROSeniorEmployee'
    adapter = MemoryAdapter(lambda: DB['employees'])

    first_name = attribute('string', only=['readable'])
    senior = filter_field('boolean', apply=_senior, description='Employees aged 40 or more')
