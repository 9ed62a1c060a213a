# apps/core/auth_service.py

"""
Authentication service - keeps sign-up and login rules out of the views
"""

import logging
from typing import Dict, Optional, Tuple

from django.conf import settings
from django.contrib.auth import authenticate, login, logout
from django.core.mail import send_mail
from django.db import IntegrityError, transaction
from django.utils.text import slugify

from .models import User

logger = logging.getLogger(__name__)


class AuthenticationService:
    """
    Sign-up, login and logout

    Public methods return (success, message[, user]) tuples so the views
    only translate results into messages and redirects.
    """

    def __init__(self):
        self._min_password_length = 8
        self._remember_me_seconds = 86400 * 30  # 30 days

    def register_user(self, data: Dict) -> Tuple[bool, str, Optional[User]]:
        """
        Creates a new account

        Args:
            data: dict with name, email, password

        Returns:
            Tuple[success, message, created_user]
        """
        valid, error = self._validate_registration(data)
        if not valid:
            return False, error, None

        email = data['email'].strip().lower()
        if User.objects.filter(email__iexact=email).exists():
            return False, "Email already registered", None

        try:
            with transaction.atomic():
                user = self._create_user(data['name'].strip(), email, data['password'])
        except IntegrityError:
            return False, "Email already registered", None

        logger.info(f"👤 New account created: {user.email}")
        self._send_welcome_email(user)

        return True, "Account created successfully!", user

    def log_in(self, request, identifier: str, password: str, remember_me: bool = False) -> Tuple[bool, str]:
        """
        Logs in by email (or username)

        Returns:
            Tuple[success, message]
        """
        user = self._authenticate(identifier, password)

        if user is None:
            logger.warning(f"⚠️ Failed login for: {identifier}")
            return False, "Invalid credentials"

        login(request, user)

        if remember_me:
            request.session.set_expiry(self._remember_me_seconds)

        return True, f"Welcome, {user.get_display_name()}!"

    def log_out(self, request) -> None:
        logout(request)

    # =================== PRIVATE METHODS ===================

    def _validate_registration(self, data: Dict) -> Tuple[bool, str]:
        for field in ['name', 'email', 'password']:
            if not (data.get(field) or '').strip():
                return False, f"Field {field} is required"

        email = data['email'].strip()
        if '@' not in email or '.' not in email.split('@')[-1]:
            return False, "Invalid email"

        if len(data['password']) < self._min_password_length:
            return False, f"Password must have at least {self._min_password_length} characters"

        return True, ""

    def _build_username(self, email: str) -> str:
        """Unique username derived from the email"""
        base = slugify(email.split('@')[0])[:140] or 'user'
        username = base
        suffix = 1
        while User.objects.filter(username=username).exists():
            suffix += 1
            username = f"{base}{suffix}"
        return username

    def _create_user(self, name: str, email: str, password: str) -> User:
        first_name, _, last_name = name.partition(' ')
        return User.objects.create_user(
            username=self._build_username(email),
            email=email,
            password=password,
            first_name=first_name[:150],
            last_name=last_name.strip()[:150],
            display_name=name[:150],
        )

    def _authenticate(self, identifier: str, password: str) -> Optional[User]:
        """Tries email first, then username"""
        identifier = (identifier or '').strip()

        user_obj = User.objects.filter(email__iexact=identifier, is_active=True).first()
        if user_obj:
            return authenticate(username=user_obj.username, password=password)

        return authenticate(username=identifier, password=password)

    def _send_welcome_email(self, user: User):
        """Welcome email - never fails the sign-up"""
        message = f"""
Hi {user.get_display_name()},

Your Taskboard account is ready.

Create your first board, add lists and cards, and invite your team
to collaborate in real time.

The Taskboard team
        """

        sent = send_mail(
            subject='Welcome to Taskboard',
            message=message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[user.email],
            fail_silently=True
        )
        if not sent:
            logger.warning(f"⚠️ Welcome email not sent to {user.email}")


# Global service instance
auth_service = AuthenticationService()
