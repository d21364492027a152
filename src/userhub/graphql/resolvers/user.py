from __future__ import annotations

import re
from typing import TYPE_CHECKING

import strawberry

from ...config import settings
from ...errors import NotFoundError, UserInputError
from ...logging import get_logger
from ...repository.base import (
    DEFAULT_SORT,
    ProfileChanges,
    Role,
    UserChanges,
    UserFilter,
    UserSort,
)
from ...validation import PageWindow, ProfileFields, validate_fields
from ..access_control import (
    SortOrder,
    ensure_not_self,
    get_auth_context_from_info,
    get_services,
    parse_user_id,
    require_authenticated,
    require_elevated,
)
from ..types.user import DeleteResponse, User, UserConnection, UserStats

if TYPE_CHECKING:
    from ..mutations.root import UpdateUserInput
    from ..queries.root import UserFilterInput, UserSortInput

logger = get_logger(__name__)

USER_NOT_FOUND = "User not found"

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def to_user_filter(filter: UserFilterInput | None) -> UserFilter | None:
    if filter is None:
        return None
    # Empty strings mean "no predicate", not "match the empty string"
    return UserFilter(
        username=filter.username or None,
        email=filter.email or None,
        role=filter.role,
        is_active=filter.is_active,
        age_min=filter.age_min,
        age_max=filter.age_max,
    )


def to_user_sort(sort: UserSortInput | None) -> UserSort:
    """Accept ``createdAt`` or ``created_at`` style field names."""
    if sort is None:
        return DEFAULT_SORT
    field = _CAMEL_BOUNDARY.sub("_", sort.field.strip()).lower()
    try:
        return UserSort(field=field, descending=sort.order is SortOrder.DESC)
    except ValueError:
        raise UserInputError(f"Cannot sort users by '{sort.field}'") from None


def to_profile_changes(input: UpdateUserInput) -> ProfileChanges:
    """Validate the self-service subset of an update; role and activation are not part of it."""
    fields = validate_fields(
        ProfileFields,
        username=input.username,
        email=input.email,
        first_name=input.first_name,
        last_name=input.last_name,
        age=input.age,
    )
    return ProfileChanges(**fields.model_dump())


def to_user_changes(input: UpdateUserInput) -> UserChanges:
    profile = to_profile_changes(input)
    return UserChanges(
        username=profile.username,
        email=profile.email,
        first_name=profile.first_name,
        last_name=profile.last_name,
        age=profile.age,
        role=input.role,
        is_active=input.is_active,
    )


# Query resolvers
async def resolve_users(
    info: strawberry.Info,
    filter: UserFilterInput | None,
    sort: UserSortInput | None,
    limit: int,
    offset: int,
) -> UserConnection:
    require_authenticated(get_auth_context_from_info(info))
    validate_fields(PageWindow, offset=offset, limit=limit)

    page = await get_services(info).repository.find(
        to_user_filter(filter), to_user_sort(sort), offset=offset, limit=limit
    )
    return UserConnection(
        users=[User.from_record(record) for record in page.users],
        total_count=page.total_count,
        has_next_page=page.has_next_page,
        has_previous_page=page.has_previous_page,
    )


async def resolve_user_by_id(info: strawberry.Info, id: str) -> User:
    require_authenticated(get_auth_context_from_info(info))

    user_id = parse_user_id(id)
    record = await get_services(info).repository.find_by_id(user_id) if user_id else None
    if record is None:
        raise NotFoundError(USER_NOT_FOUND)
    return User.from_record(record)


async def resolve_search_users(info: strawberry.Info, query: str) -> list[User]:
    require_authenticated(get_auth_context_from_info(info))

    records = await get_services(info).repository.search(query, settings.search_result_limit)
    return [User.from_record(record) for record in records]


async def resolve_user_stats(info: strawberry.Info) -> UserStats:
    require_elevated(get_auth_context_from_info(info))
    repository = get_services(info).repository

    return UserStats(
        total_users=await repository.count(),
        active_users=await repository.count(UserFilter(is_active=True)),
        inactive_users=await repository.count(UserFilter(is_active=False)),
        admin_users=await repository.count(UserFilter(role=Role.ADMIN)),
        moderator_users=await repository.count(UserFilter(role=Role.MODERATOR)),
        regular_users=await repository.count(UserFilter(role=Role.USER)),
    )


# Mutation resolvers
async def update_profile(info: strawberry.Info, input: UpdateUserInput) -> User:
    """Update the caller's own profile. Any role or isActive in the input is ignored."""
    caller = require_authenticated(get_auth_context_from_info(info))
    changes = to_profile_changes(input)

    updated = await get_services(info).repository.update_by_id(
        caller.id, changes.to_user_changes()
    )
    if updated is None:
        raise NotFoundError(USER_NOT_FOUND)

    logger.info("Profile updated", fields=sorted(changes.to_user_changes().as_dict()))
    return User.from_record(updated)


async def update_user(info: strawberry.Info, id: str, input: UpdateUserInput) -> User:
    require_elevated(get_auth_context_from_info(info))
    changes = to_user_changes(input)

    user_id = parse_user_id(id)
    updated = (
        await get_services(info).repository.update_by_id(user_id, changes) if user_id else None
    )
    if updated is None:
        raise NotFoundError(USER_NOT_FOUND)

    logger.info("User updated", target_id=str(user_id), fields=sorted(changes.as_dict()))
    return User.from_record(updated)


async def delete_user(info: strawberry.Info, id: str) -> DeleteResponse:
    caller = require_elevated(get_auth_context_from_info(info))
    user_id = parse_user_id(id)
    ensure_not_self(caller, user_id, "You cannot delete your own account")

    deleted = await get_services(info).repository.delete_by_id(user_id) if user_id else False
    if not deleted:
        raise NotFoundError(USER_NOT_FOUND)

    logger.info("User deleted", target_id=str(user_id))
    return DeleteResponse(success=True, message="User deleted successfully")


async def _apply_admin_change(
    info: strawberry.Info, id: str, changes: UserChanges, self_message: str | None
) -> User:
    caller = require_elevated(get_auth_context_from_info(info))
    user_id = parse_user_id(id)
    if self_message is not None:
        ensure_not_self(caller, user_id, self_message)

    updated = (
        await get_services(info).repository.update_by_id(user_id, changes) if user_id else None
    )
    if updated is None:
        raise NotFoundError(USER_NOT_FOUND)

    logger.info("User administered", target_id=str(user_id), fields=sorted(changes.as_dict()))
    return User.from_record(updated)


async def activate_user(info: strawberry.Info, id: str) -> User:
    return await _apply_admin_change(info, id, UserChanges(is_active=True), None)


async def deactivate_user(info: strawberry.Info, id: str) -> User:
    return await _apply_admin_change(
        info, id, UserChanges(is_active=False), "You cannot deactivate your own account"
    )


async def change_user_role(info: strawberry.Info, id: str, role: Role) -> User:
    return await _apply_admin_change(
        info, id, UserChanges(role=role), "You cannot change your own role"
    )
