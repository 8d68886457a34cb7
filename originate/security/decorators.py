from __future__ import annotations

import logging
from collections.abc import Callable
from functools import wraps
from typing import Any

from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request

from originate.errors import ProfileRequired, Unauthorized
from originate.security.actor import resolve_actor

logger = logging.getLogger(__name__)


def require_actor(*required_roles: str) -> Callable[..., Any]:
    """Verify the bearer token and pass the resolved ``actor`` into the view.

    With no roles given any profile is accepted; otherwise the profile role
    must be one of ``required_roles``.
    """
    required_set = set(required_roles)

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            verify_jwt_in_request()
            actor = resolve_actor(str(get_jwt_identity()))
            if actor is None:
                raise ProfileRequired()

            if required_set and actor.role not in required_set:
                logger.warning("Role %s denied for %s", actor.role, func.__name__)
                raise Unauthorized()

            return func(actor, *args, **kwargs)

        return wrapper

    return decorator
