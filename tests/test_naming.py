import pytest
from strawberry.schema.config import StrawberryConfig

from graftql.core.naming import from_camel, graphql_name_for, pluralize, singularize, to_camel, to_pascal


@pytest.mark.parametrize("name", ["first_name", "id", "extra_foo", "hired_on", "remote_positions"])
def test_field_names_round_trip(name):
    assert from_camel(to_camel(name)) == name


def test_camel_and_pascal():
    assert to_camel("first_name") == "firstName"
    assert to_pascal("first_name") == "FirstName"
    assert from_camel("sqlEmployees") == "sql_employees"


def test_singular_and_plural():
    assert singularize("employees") == "employee"
    assert singularize("categories") == "category"
    assert singularize("boxes") == "box"
    assert singularize("staff") == "staff"
    assert pluralize("employee") == "employees"
    assert pluralize("category") == "categories"


def test_graphql_name_follows_strawberry_config():
    assert graphql_name_for("first_name") == "firstName"
    assert graphql_name_for("first_name", StrawberryConfig()) == "firstName"
    assert graphql_name_for("first_name", StrawberryConfig(auto_camel_case=False)) == "first_name"
