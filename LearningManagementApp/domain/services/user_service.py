"""Account management: registration, login, admin edits and password resets.

Passwords are stored through Django's password hashers (``set_password`` /
``check_password``), never in plain text.
"""

import logging

from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email
from django.db import transaction
from django.db.models import Count, QuerySet
from rest_framework.exceptions import PermissionDenied

from LearningManagementApp.core.access import Capability, Viewer
from LearningManagementApp.core.choices import NotificationType, UserRole
from LearningManagementApp.core.exceptions import ValidationError, translate_store_errors
from LearningManagementApp.domain.services import notification_service
from LearningManagementApp.users.models import User

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("username", "email", "role", "first_name", "last_name")


def _clean_role(role: str) -> str:
    if role not in UserRole.values:
        raise ValidationError(f"Unknown role: {role}")
    return role


def _clean_email(email: str) -> str:
    email = (email or "").strip()
    try:
        validate_email(email)
    except DjangoValidationError as exc:
        raise ValidationError("Invalid email address") from exc
    return email


def _clean_password(password: str, user: User | None = None) -> str:
    if not password:
        raise ValidationError("Password is required")
    try:
        validate_password(password, user=user)
    except DjangoValidationError as exc:
        raise ValidationError(list(exc.messages)) from exc
    return password


def _ensure_unique(username: str, email: str, exclude_pk: int | None = None) -> None:
    qs = User.objects.all()
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    if qs.filter(username=username).exists():
        raise ValidationError("Username already exists")
    if qs.filter(email__iexact=email).exists():
        raise ValidationError("Email already exists")


@translate_store_errors
@transaction.atomic
def register_user(
    username: str,
    password: str,
    email: str,
    role: str = UserRole.STUDENT,
    actor: User | None = None,
) -> User:
    """Create an account.

    Self-registration yields students only; Instructor and Admin accounts
    require an admin ``actor``.

    Raises:
        ValidationError: bad input or duplicate username/email.
        PermissionDenied: privileged role requested without an admin actor.
    """
    role = _clean_role(role)
    if role != UserRole.STUDENT or actor is not None:
        if actor is None:
            raise PermissionDenied("Only admins can create instructor or admin accounts")
        Viewer.for_user(actor).require(Capability.MANAGE_USERS, "Admin role required")
    username = (username or "").strip()
    if not username:
        raise ValidationError("Username is required")
    email = _clean_email(email)
    _ensure_unique(username, email)
    _clean_password(password)

    user = User(username=username, email=email, role=role)
    user.set_password(password)
    user.save()

    if actor is not None:
        notification_service.log_activity(actor, f"Added user: {username}")
        notification_service.notify(actor, f"User added: {username}", NotificationType.USER)
    else:
        notification_service.log_activity(user, f"Registered as {role}")
    return user


def authenticate_user(username: str, password: str) -> User:
    """Return the matching active user or raise ``ValidationError("Invalid credentials")``."""
    user = User.objects.filter(username=username).first()
    if user is None or not user.is_active or not user.check_password(password):
        logger.warning("Failed login for username=%r", username)
        raise ValidationError("Invalid credentials")
    notification_service.log_activity(user, f"Logged in as {user.role}")
    return user


@translate_store_errors
@transaction.atomic
def update_user(admin: User, user: User, **fields) -> User:
    """Admin edit of username, email, names or role."""
    Viewer.for_user(admin).require(Capability.MANAGE_USERS, "Admin role required")
    unknown = set(fields) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown user fields: {', '.join(sorted(unknown))}")
    if "role" in fields:
        fields["role"] = _clean_role(fields["role"])
    if "email" in fields:
        fields["email"] = _clean_email(fields["email"])
    _ensure_unique(fields.get("username", user.username), fields.get("email", user.email), exclude_pk=user.pk)
    for name, value in fields.items():
        setattr(user, name, value)
    user.save()
    notification_service.log_activity(admin, f"Updated user: {user.username}")
    notification_service.notify(admin, f"User updated: {user.username}", NotificationType.USER)
    return user


@translate_store_errors
@transaction.atomic
def delete_user(admin: User, user: User) -> None:
    """Delete an account; courses it taught keep existing without an instructor."""
    Viewer.for_user(admin).require(Capability.MANAGE_USERS, "Admin role required")
    if admin.pk == user.pk:
        raise ValidationError("Admins cannot delete their own account")
    username = user.username
    user.delete()
    notification_service.log_activity(admin, f"Deleted user: {username}")
    notification_service.notify(admin, f"User deleted: {username}", NotificationType.USER)


@translate_store_errors
@transaction.atomic
def reset_password(admin: User, user: User, new_password: str) -> User:
    Viewer.for_user(admin).require(Capability.MANAGE_USERS, "Admin role required")
    _clean_password(new_password, user=user)
    user.set_password(new_password)
    user.save(update_fields=["password"])
    notification_service.log_activity(admin, f"Reset password for user: {user.username}")
    return user


def list_users(admin: User, role: str | None = None) -> QuerySet[User]:
    """All accounts for the admin user-management screen, optionally one role only."""
    Viewer.for_user(admin).require(Capability.MANAGE_USERS, "Admin role required")
    qs = User.objects.order_by("username")
    if role:
        qs = qs.filter(role=_clean_role(role))
    return qs


def users_by_role(admin: User) -> list[dict]:
    """Account count per role (user report)."""
    Viewer.for_user(admin).require(Capability.MANAGE_USERS, "Admin role required")
    return list(User.objects.values("role").annotate(count=Count("id")).order_by("role"))
