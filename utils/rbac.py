import logging
from typing import Iterable

from django.contrib.auth import get_user_model
from django.core.exceptions import PermissionDenied

# Canonical role names
ROLE_USER = "user"
ROLE_SELLER = "seller"
ROLE_ADMIN = "admin"

ROLES = (ROLE_USER, ROLE_SELLER, ROLE_ADMIN)

logger = logging.getLogger(__name__)


def _fetch_user_from_db(user):
    """Load a fresh copy of the user with only the fields role checks need.

    Returns None for anonymous users or when the user no longer exists.
    """
    if not getattr(user, "is_authenticated", False):
        return None
    User = get_user_model()
    return User.objects.only("id", "role", "is_superuser", "is_active").filter(pk=getattr(user, "pk", None)).first()


def is_admin(user) -> bool:
    """Admin check verified against the database. Superusers are admins."""
    db_user = _fetch_user_from_db(user)
    if not db_user:
        return False
    return bool(db_user.is_superuser or db_user.role == ROLE_ADMIN)


def is_seller(user) -> bool:
    """Seller check verified against the database.

    Admins are considered sellers as well.
    """
    db_user = _fetch_user_from_db(user)
    if not db_user:
        return False
    return db_user.role == ROLE_SELLER or bool(db_user.is_superuser or db_user.role == ROLE_ADMIN)


def owns_store(user, store) -> bool:
    """True when the user is the owner of the given store."""
    if store is None or not getattr(user, "is_authenticated", False):
        return False
    return str(store.owner_id) == str(user.pk)


def has_role(user, role: str) -> bool:
    if role == ROLE_ADMIN:
        return is_admin(user)
    if role == ROLE_SELLER:
        return is_seller(user)
    db_user = _fetch_user_from_db(user)
    return db_user is not None and db_user.role == role


def has_any_role(user, roles: Iterable[str]) -> bool:
    return any(has_role(user, r) for r in roles)


def require_role(user, roles: Iterable[str]):
    """Raise PermissionDenied unless the user has one of the roles."""
    roles = list(roles)
    if not has_any_role(user, roles):
        logger.warning(f"RBAC denial: user_id={getattr(user, 'id', None)} required={roles}")
        raise PermissionDenied("Insufficient role to access this resource.")


def require_admin(user):
    require_role(user, [ROLE_ADMIN])
