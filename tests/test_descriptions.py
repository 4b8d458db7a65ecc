from pathlib import Path

import pytest

import graftql
from graftql import MemoryAdapter, Resource, YamlDescriptionResolver, attribute, extra_attribute, has_many, schemas
from tests.base_schema import make_base

LOCALE = Path(__file__).parent / 'locale' / 'documentation.yml'


def _build(*resources):
    return schemas.build(resources=list(resources), base=make_base())


@pytest.fixture(autouse=True)
def yaml_descriptions():
    graftql.config.description_resolver = YamlDescriptionResolver(LOCALE)


def _widget(**overrides):
    ns = {
        'type': 'documented_widgets',
        'graphql_entrypoint': 'documentedWidgets',
        'adapter': MemoryAdapter([]),
        'foo': attribute('string'),
        'bar': attribute('string'),
        'extra_foo': extra_attribute('string', resolve=lambda r: 'x'),
        'gadgets': has_many('DocumentedGadgetResource'),
    }
    ns.update(overrides)
    return type('DocumentedWidgetResource', (Resource,), ns)


class DocumentedGadgetResource(Resource):
    type = 'documented_gadgets'
    adapter = MemoryAdapter([])
    widget_id = attribute('integer')


def test_locale_descriptions():
    merged = _build(_widget())
    widget = merged.types['DocumentedWidget']
    assert widget.description == 'my YML d3scription'
    assert widget.fields['foo'].description == 'Description from yml'
    assert widget.fields['extraFoo'].description == 'Extra description from yml'
    assert widget.fields['gadgets'].description == 'gadget yml desc'
    assert merged.types['DocumentedWidgetFilter'].fields['foo'].description == 'Filter foo from yml'
    assert merged.types['DocumentedGadget'].description == 'Gadgets from yml'


def test_inline_descriptions_win():
    merged = _build(_widget(
        description='my d3scription',
        foo=attribute('string', description='my description'),
        extra_foo=extra_attribute('string', description='my extra description', resolve=lambda r: 'x'),
        gadgets=has_many('DocumentedGadgetResource', description='gadget inline desc'),
    ))
    widget = merged.types['DocumentedWidget']
    assert widget.description == 'my d3scription'
    assert widget.fields['foo'].description == 'my description'
    assert widget.fields['extraFoo'].description == 'my extra description'
    assert widget.fields['gadgets'].description == 'gadget inline desc'
    # Untouched fields still come from the locale file
    assert widget.fields['bar'].description == 'Bar from yml'


def test_missing_descriptions_are_absent():
    merged = _build(_widget())
    gadget = merged.types['DocumentedGadget']
    assert gadget.fields['widgetId'].description is None
    assert merged.types['DocumentedWidget'].fields['id'].description is None


def test_other_locale():
    graftql.config.description_resolver = YamlDescriptionResolver([LOCALE], locale='fr')
    merged = _build(_widget())
    widget = merged.types['DocumentedWidget']
    assert widget.description == 'ma d3scription'
    assert widget.fields['foo'].description is None


def test_missing_locale_file_is_reported(tmp_path):
    resolver = YamlDescriptionResolver(tmp_path / 'missing.yml')
    with pytest.raises(FileNotFoundError):
        resolver.resolve(('resources', 'x', 'description'))
