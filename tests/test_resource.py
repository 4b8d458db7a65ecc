import pytest

from graftql import MemoryAdapter, Resource, attribute, belongs_to, has_many
from graftql.exceptions import MalformedResourceError
from graftql.resource import resolve_resource
from tests.resources import DB, EmployeeResource, PositionResource, SQLEmployeeResource


def test_implicit_id_and_declaration_order():
    names = list(EmployeeResource.__resource_fields__)
    assert names[0] == 'id'
    assert names[1:4] == ['first_name', 'last_name', 'age']
    assert EmployeeResource.attributes()['id'].semantic_type == 'integer_id'


def test_type_name_uses_namespace():
    assert EmployeeResource.type_name() == 'POROEmployee'
    assert SQLEmployeeResource.type_name() == 'SQLEmployee'


def test_only_and_exclude_capabilities():
    class CapsWidgetResource(Resource):
        adapter = MemoryAdapter([])
        secret = attribute('string', only=['filterable'])
        age = attribute('integer', exclude=['sortable'])

    secret = CapsWidgetResource.attributes()['secret']
    assert secret.flag('filterable') and not secret.flag('readable') and not secret.flag('sortable')
    assert 'secret' in CapsWidgetResource.filters()
    assert 'age' in CapsWidgetResource.filters()
    assert 'age' not in CapsWidgetResource.sorts()
    assert CapsWidgetResource.type == 'caps_widgets'

    with pytest.raises(ValueError):
        attribute('string', only=['visible'])


def test_inheritance_merges_and_overrides():
    class BaseThingResource(Resource):
        abstract = True
        name = attribute('string')
        code = attribute('string')

    class ChildThingResource(BaseThingResource):
        adapter = MemoryAdapter([])
        code = attribute('integer')
        extra = attribute('boolean')

    fields = ChildThingResource.attributes()
    assert list(fields) == ['id', 'name', 'code', 'extra']
    assert fields['code'].semantic_type == 'integer'


def test_semantic_types_inferred_from_model():
    attrs = SQLEmployeeResource.attributes()
    assert SQLEmployeeResource.semantic_type_of(attrs['first_name']) == 'string'
    assert SQLEmployeeResource.semantic_type_of(attrs['age']) == 'integer'
    assert SQLEmployeeResource.semantic_type_of(attrs['active']) == 'boolean'
    assert SQLEmployeeResource.semantic_type_of(attrs['salary']) == 'big_decimal'
    assert SQLEmployeeResource.semantic_type_of(attrs['hired_on']) == 'date'
    assert SQLEmployeeResource.semantic_type_of(attrs['settings']) == 'hash'


def test_default_relationship_keys():
    assert EmployeeResource.relationship_keys(EmployeeResource.relationships()['positions']) == ('employee_id', 'id')
    assert PositionResource.relationship_keys(PositionResource.relationships()['department']) == ('department_id', 'id')


def test_resolve_resource_by_name():
    assert resolve_resource('EmployeeResource') is EmployeeResource
    with pytest.raises(MalformedResourceError):
        resolve_resource('NoSuchResource', EmployeeResource)


@pytest.mark.asyncio
async def test_all_filters_sorts_and_paginates():
    resource = EmployeeResource()
    records, total = await resource.all(
        filter={'age': {'gte': 26}},
        sort=[('age', 'desc')],
        page={'size': 1, 'number': 2},
    )
    assert total == 2
    assert [r.first_name for r in records] == ['Jane']


@pytest.mark.asyncio
async def test_string_eq_is_case_insensitive_and_eql_is_not():
    resource = EmployeeResource()
    records, _ = await resource.all(filter={'first_name': {'eq': 'jane'}})
    assert [r.id for r in records] == [1]
    records, _ = await resource.all(filter={'first_name': {'eql': 'jane'}})
    assert records == []


@pytest.mark.asyncio
async def test_unknown_filter_and_operator_are_rejected():
    resource = EmployeeResource()
    with pytest.raises(ValueError):
        await resource.all(filter={'nope': {'eq': 1}})
    with pytest.raises(ValueError):
        await resource.all(filter={'age': {'prefix': '3'}})


@pytest.mark.asyncio
async def test_page_size_is_capped():
    class CappedEmployeeResource(Resource):
        type = 'employees'
        max_page_size = 2
        adapter = MemoryAdapter(lambda: DB['employees'])

    records, total = await CappedEmployeeResource().all(page={'size': 50})
    assert len(records) == 2
    assert total == 3


@pytest.mark.asyncio
async def test_related_records():
    employee = DB['employees'][0]
    listing = await EmployeeResource().related('positions', employee)
    assert [p.title for p in await listing.records()] == ['Engineer', 'Manager']
    assert await listing.count() == 2

    position = DB['positions'][2]
    assert (await PositionResource().related('employee', position)).first_name == 'John'
    assert (await PositionResource().related('department', position)).name == 'Engineering'


@pytest.mark.asyncio
async def test_custom_relationship_resolver():
    class MentorEmployeeResource(Resource):
        type = 'employees'
        adapter = MemoryAdapter(lambda: DB['employees'])
        mentees = has_many('EmployeeResource', resolve=lambda parent, ctx: [e for e in DB['employees'] if e.id != parent.id])
        boss = belongs_to('EmployeeResource', resolve=lambda parent, ctx: DB['employees'][1])

    parent = DB['employees'][0]
    listing = await MentorEmployeeResource().related('mentees', parent)
    assert await listing.count() == 2
    assert (await MentorEmployeeResource().related('boss', parent)).first_name == 'John'


def test_resource_without_adapter_cannot_be_instantiated():
    class NoAdapterResource(Resource):
        pass

    with pytest.raises(MalformedResourceError):
        NoAdapterResource()
