"""License decorators for function protection.
"""

from __future__ import annotations

import logging
from functools import wraps
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

from tasklic.common.exceptions import LicenseRequiredError

logger = logging.getLogger(__name__)


def _resolve_manager(manager: Any, args: tuple[Any, ...]) -> Any:
    if isinstance(manager, str):
        # Attribute name - get from self
        if not args:
            msg = f"Cannot get manager attribute '{manager}' without self"
            raise ValueError(msg)
        return getattr(args[0], manager)
    if callable(manager) and not hasattr(manager, "validate_license"):
        return manager()
    return manager


def requires_valid_license(
    manager: Any | Callable[[], Any] | str,
    client_id: str,
    domain: str,
    error_message: str = "A valid license is required",
    *,
    raise_exception: bool = True,
) -> Callable:
    """Decorator that runs a coroutine function only while the license validates.

    Args:
        manager: LicenseManager instance, callable returning one, or the name
            of an attribute holding one on ``self``
        client_id: Licensee to validate
        domain: Domain the caller is served from
        error_message: Message used when the license is not valid
        raise_exception: Whether to raise LicenseRequiredError or return None

    Returns:
        Decorated coroutine function
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            license_manager = _resolve_manager(manager, args)
            result = await license_manager.validate_license(client_id, domain)
            if not result.valid:
                if raise_exception:
                    raise LicenseRequiredError(error_message)
                logger.warning(
                    "License check failed for %s: %s", client_id, result.message
                )
                return None
            return await func(*args, **kwargs)

        return wrapper

    return decorator
