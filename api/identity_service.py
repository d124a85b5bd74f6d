"""
Identity provider client: Firebase Authentication.

User management and token verification go through the Firebase Admin SDK.
Email/password sign-in has no Admin SDK equivalent, so it calls the Identity
Toolkit REST endpoint with the project's web API key.
"""
import logging
import os
from typing import Any, Dict, Optional

import requests
from django.conf import settings
from firebase_admin import auth

from .constants import (
    IDENTITY_TOOLKIT_HOST,
    SIGN_IN_TIMEOUT_SECONDS,
    SIGN_IN_WITH_PASSWORD_PATH,
)
from .firebase_service import get_firebase_app

logger = logging.getLogger("api")


class IdentityError(Exception):
    """Base class for identity provider failures."""


class IdentityNotConfiguredError(IdentityError):
    pass


class InvalidTokenError(IdentityError):
    pass


class InvalidCredentialsError(IdentityError):
    pass


class EmailAlreadyExistsError(IdentityError):
    pass


class IdentityService:
    """Thin wrapper around firebase_admin.auth and the sign-in REST API"""

    def _app(self):
        app = get_firebase_app()
        if app is None:
            raise IdentityNotConfiguredError("Firebase Authentication is not configured")
        return app

    def is_available(self) -> bool:
        return get_firebase_app() is not None

    # =========================================================================
    # User management
    # =========================================================================

    def get_user_by_email(self, email: str):
        """Return the auth UserRecord for ``email`` or None if there is none."""
        try:
            return auth.get_user_by_email(email, app=self._app())
        except auth.UserNotFoundError:
            return None

    def create_user(self, email: str, password: str, display_name: str = "") -> str:
        """
        Create an email/password user. Firebase hashes and stores the password.

        Returns:
            The new user's uid

        Raises:
            EmailAlreadyExistsError: the email is taken
            ValueError: the SDK rejected the email/password format
        """
        try:
            record = auth.create_user(
                email=email,
                password=password,
                display_name=display_name or None,
                app=self._app(),
            )
        except auth.EmailAlreadyExistsError as e:
            raise EmailAlreadyExistsError(str(e))
        logger.info(f"[IDENTITY] Created auth user uid={record.uid}")
        return record.uid

    def delete_user(self, uid: str) -> None:
        auth.delete_user(uid, app=self._app())
        logger.info(f"[IDENTITY] Deleted auth user uid={uid}")

    def generate_password_reset_link(self, email: str) -> str:
        return auth.generate_password_reset_link(email, app=self._app())

    # =========================================================================
    # Tokens
    # =========================================================================

    def verify_id_token(self, id_token: str) -> Dict[str, Any]:
        """
        Verify a Firebase ID token and return its decoded claims.

        Raises:
            InvalidTokenError: malformed, expired, revoked or otherwise rejected
        """
        app = self._app()
        try:
            return auth.verify_id_token(id_token, app=app)
        except (
            auth.InvalidIdTokenError,
            auth.UserDisabledError,
            auth.CertificateFetchError,
            ValueError,
        ) as e:
            raise InvalidTokenError(str(e))

    def sign_in_with_password(self, email: str, password: str) -> Dict[str, Any]:
        """
        Sign in through the Identity Toolkit REST API.

        Returns:
            The REST response body (idToken, localId, expiresIn, ...)

        Raises:
            IdentityNotConfiguredError: FIREBASE_API_KEY is not set
            InvalidCredentialsError: the provider refused the credentials
        """
        api_key = settings.FIREBASE_API_KEY
        if not api_key:
            logger.error("[IDENTITY] FIREBASE_API_KEY not defined")
            raise IdentityNotConfiguredError(
                "Server authentication not configured (FIREBASE_API_KEY missing)"
            )

        response = requests.post(
            self._sign_in_url(),
            params={"key": api_key},
            json={"email": email, "password": password, "returnSecureToken": True},
            timeout=SIGN_IN_TIMEOUT_SECONDS,
        )
        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if not response.ok:
            error_body = data.get("error")
            code = error_body.get("message", "") if isinstance(error_body, dict) else ""
            logger.warning(f"[IDENTITY] signInWithPassword failed: {response.status_code} {code}")
            raise InvalidCredentialsError(self._friendly_sign_in_error(code))

        return data

    @staticmethod
    def _sign_in_url() -> str:
        emulator_host = os.environ.get("FIREBASE_AUTH_EMULATOR_HOST")
        if emulator_host:
            return f"http://{emulator_host}/{IDENTITY_TOOLKIT_HOST}{SIGN_IN_WITH_PASSWORD_PATH}"
        return f"https://{IDENTITY_TOOLKIT_HOST}{SIGN_IN_WITH_PASSWORD_PATH}"

    @staticmethod
    def _friendly_sign_in_error(code: Optional[str]) -> str:
        # Codes may carry a suffix, e.g. "INVALID_PASSWORD : ..."
        code = (code or "").split(" ")[0]
        if code == "USER_DISABLED":
            return "User account disabled"
        return "Invalid email or password"


# Singleton instance
identity_service = IdentityService()
