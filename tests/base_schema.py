"""A hand-written Strawberry schema the generated types are grafted onto."""

from typing import List

import strawberry
from strawberry.types import Info

from graftql import SchemaDefinition


@strawberry.type
class GQLCustomType:
    @strawberry.field
    def gql_specific(self, info: Info) -> str:
        ctx = info.context
        if ctx.get('user'):
            return ctx['user']
        obj = ctx.get('object')
        thing = getattr(obj, 'thing', None) if obj is not None else None
        return thing or "works!"


@strawberry.type(description="Reachable only as an orphan type")
class GQLOrphan:
    name: str = "orphan"


@strawberry.type
class MyQueryType:
    @strawberry.field
    def things(self) -> List[GQLCustomType]:
        return [GQLCustomType()]


def make_base(max_depth=3) -> SchemaDefinition:
    return SchemaDefinition(query=MyQueryType, types=[GQLOrphan], max_depth=max_depth)
