import pytest
from graphql import parse
from strawberry.extensions import AddValidationRules

from graftql import Runner, schemas
from graftql.depth import selection_depth
from tests.base_schema import make_base
from tests.resources import PORO_RESOURCES

DEEP_QUERY = '''
query {
  employees {
    nodes {
      positions {
        nodes {
          department {
            name
          }
        }
      }
    }
  }
}
'''


def test_selection_depth_counts_fields_only():
    doc = parse('{ a { b { c } d } }')
    assert selection_depth(doc.definitions[0].selection_set, None) == 3
    doc = parse('{ a { ... on T { b } } }')
    assert selection_depth(doc.definitions[0].selection_set, None) == 2
    doc = parse('{ __schema { types { name } } }')
    assert selection_depth(doc.definitions[0].selection_set, None) == 0


@pytest.mark.asyncio
async def test_depth_limit_rejects_deep_queries():
    schemas.build(resources=PORO_RESOURCES, base=make_base(max_depth=3))
    result = await Runner().execute(DEEP_QUERY)
    assert 'data' not in result
    assert len(result['errors']) == 1
    assert result['errors'][0]['message'] == "Query has depth of 6, which exceeds max depth of 3"


@pytest.mark.asyncio
async def test_depth_limit_allows_shallow_queries():
    schemas.build(resources=PORO_RESOURCES, base=make_base(max_depth=3))
    result = await Runner().execute('{ employees { nodes { firstName } } }')
    assert 'errors' not in result
    assert len(result['data']['employees']['nodes']) == 3


@pytest.mark.asyncio
async def test_fragments_do_not_add_depth():
    schemas.build(resources=PORO_RESOURCES, base=make_base(max_depth=3))
    query = '''
    query { employees { ...EmployeeNodes } }
    fragment EmployeeNodes on POROEmployeeConnection { nodes { firstName } }
    '''
    result = await Runner().execute(query)
    assert 'errors' not in result

    query = '''
    query { employees { ...EmployeeNodes } }
    fragment EmployeeNodes on POROEmployeeConnection { nodes { positions { nodes { title } } } }
    '''
    result = await Runner().execute(query)
    assert result['errors'][0]['message'] == "Query has depth of 5, which exceeds max depth of 3"


@pytest.mark.asyncio
async def test_no_limit_without_max_depth():
    schemas.build(resources=PORO_RESOURCES, base=make_base(max_depth=None))
    result = await Runner().execute(DEEP_QUERY)
    assert 'errors' not in result
    departments = [
        p['department']['name']
        for e in result['data']['employees']['nodes']
        for p in e['positions']['nodes']
    ]
    assert departments == ['Engineering', 'Management', 'Engineering']


@pytest.mark.asyncio
async def test_depth_limit_is_built_per_request():
    merged = schemas.build(resources=PORO_RESOURCES, base=make_base(max_depth=3))
    extension = list(merged.strawberry_schema.extensions)[-1]
    assert isinstance(extension, type)
    assert issubclass(extension, AddValidationRules)
    for _ in range(2):
        result = await Runner().execute(DEEP_QUERY)
        assert len(result['errors']) == 1
