"""
Main GraphQL schema definition using Strawberry
"""

from typing import Any

import strawberry
from fastapi import Request
from graphql import GraphQLError, get_introspection_query, graphql_sync
from graphql import validate_schema as gql_validate_schema
from strawberry.extensions import MaskErrors
from strawberry.fastapi import GraphQLRouter

from ..config import settings
from ..errors import UserHubError
from ..logging import get_logger
from .context import build_context
from .mutations.root import Mutation
from .queries.root import Query

logger = get_logger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"


def should_mask_error(error: GraphQLError) -> bool:
    """Hide unexpected exceptions; their text can include SQL and bound parameters."""
    original = error.original_error
    return original is not None and not isinstance(original, (UserHubError, GraphQLError))


schema = strawberry.Schema(
    query=Query,
    mutation=Mutation,
    extensions=[
        MaskErrors(should_mask_error=should_mask_error, error_message=INTERNAL_ERROR_MESSAGE)
    ],
)


def validate_schema() -> None:
    """Validate the GraphQL schema at startup.

    Catches unresolved type references early so the server fails fast
    instead of erroring on the first request.

    Raises:
        Exception: If the schema is invalid or has unresolved types
    """
    try:
        graphql_schema = schema._schema

        errors = gql_validate_schema(graphql_schema)
        if errors:
            error_messages = [str(e) for e in errors]
            raise Exception(f"GraphQL schema validation failed: {'; '.join(error_messages)}")

        result = graphql_sync(graphql_schema, get_introspection_query())
        if result.errors:
            error_messages = [str(e) for e in result.errors]
            raise Exception(f"GraphQL introspection failed: {'; '.join(error_messages)}")

        logger.info("GraphQL schema validation successful")

    except Exception as e:
        logger.error("GraphQL schema validation failed", error=str(e))
        raise


def create_graphql_router() -> GraphQLRouter[dict[str, Any], None]:
    """Create a GraphQL router for FastAPI.

    Services are read from ``app.state.services`` on each request.
    """

    async def get_context(request: Request) -> dict[str, Any]:
        """Get the context for GraphQL resolvers."""
        return await build_context(
            request.app.state.services,
            request.headers.get("authorization"),
            request,
        )

    return GraphQLRouter(
        schema,
        path="/graphql",
        graphql_ide="graphiql" if settings.graphiql else None,
        context_getter=get_context,
    )
