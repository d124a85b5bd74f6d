"""
UserController - register, login (ID token or email/password), social login.

Notes:
- Passwords are handled by Firebase Authentication and never stored in Firestore.
- Email/password login goes through the Identity Toolkit REST endpoint and
  needs FIREBASE_API_KEY.
- For social login the client signs in with the provider (Google, Facebook...)
  through the Firebase client SDK and sends the resulting ID token here.
"""
import logging

from django.conf import settings
from django.http import HttpResponse, JsonResponse
from firebase_admin.exceptions import FirebaseError

from ..constants import DEFAULT_SOCIAL_PROVIDER, PASSWORD_PROVIDER
from ..dao import user_dao
from ..email_service import EmailDeliveryError, EmailNotConfiguredError, send_password_reset_email
from ..firebase_service import FirestoreUnavailableError
from ..http import error_response, json_body, store_unavailable
from ..identity_service import (
    EmailAlreadyExistsError,
    IdentityNotConfiguredError,
    InvalidCredentialsError,
    InvalidTokenError,
    identity_service,
)
from ..models import UserProfile
from ..utils import coerce_age, extract_oob_code, run_async, split_display_name
from .global_controller import GlobalController

logger = logging.getLogger("api")

PASSWORD_RESET_MESSAGE = "If the email is registered, a password reset link has been sent"


class UserController(GlobalController):
    def __init__(self):
        super().__init__(user_dao)

    def register(self, request) -> JsonResponse:
        """
        Register a new user:
        - creates the Firebase Auth user (email + password)
        - creates the Firestore profile keyed by the auth uid

        Body: { firstName, lastName, email, password, age?, photo? }
        """
        data, error = json_body(request)
        if error:
            return error

        first_name = data.get("firstName")
        last_name = data.get("lastName")
        email = data.get("email")
        password = data.get("password")
        if not all([first_name, last_name, email, password]):
            return error_response("missing_fields", "Missing required fields", 400)

        try:
            if identity_service.get_user_by_email(email) is not None:
                return error_response("email_exists", "Email already registered", 409)
        except IdentityNotConfiguredError as e:
            return error_response("auth_unavailable", str(e), 503)
        except ValueError as e:
            return error_response("invalid_fields", str(e), 400)
        except FirebaseError as e:
            logger.error(f"[USERS/REGISTER] Error checking user existence: {e}")
            return error_response("internal_error", "Internal error", 500)

        try:
            uid = identity_service.create_user(
                email=email,
                password=password,
                display_name=f"{first_name} {last_name}",
            )
        except EmailAlreadyExistsError:
            return error_response("email_exists", "Email already registered", 409)
        except ValueError as e:
            return error_response("invalid_fields", str(e), 400)
        except FirebaseError as e:
            logger.error(f"[USERS/REGISTER] Auth user creation failed: {e}")
            return error_response("registration_failed", str(e), 500)

        profile = UserProfile(
            id=uid,
            first_name=first_name,
            last_name=last_name,
            email=email,
            age=coerce_age(data.get("age")),
            photo=data.get("photo") or "",
        )
        try:
            self.dao.create_with_id(uid, profile.to_document())
        except Exception as e:
            logger.error(f"[USERS/REGISTER] Profile write failed for uid={uid}: {e}")
            self._rollback_auth_user(uid)
            if isinstance(e, FirestoreUnavailableError):
                return store_unavailable()
            return error_response("registration_failed", "Registration failed", 500)

        logger.info(f"[USERS/REGISTER] Registered uid={uid}")
        return JsonResponse({"message": "User registered", "user": profile.summary()}, status=201)

    def _rollback_auth_user(self, uid: str) -> None:
        """Remove the auth user created by a registration whose profile write failed."""
        try:
            identity_service.delete_user(uid)
            logger.info(f"[USERS/REGISTER] Rolled back auth user uid={uid}")
        except (FirebaseError, IdentityNotConfiguredError) as e:
            logger.error(f"[USERS/REGISTER] Rollback failed, orphaned auth user uid={uid}: {e}")

    def login(self, request) -> JsonResponse:
        """
        Login with a client-obtained ID token, or with email and password.

        Body: { idToken } or { email, password }
        """
        data, error = json_body(request)
        if error:
            return error

        id_token = data.get("idToken")
        if id_token and isinstance(id_token, str):
            return self._login_with_token(id_token)

        email = data.get("email")
        password = data.get("password")
        if not email or not password:
            return error_response("missing_credentials", "Provide idToken or email and password", 400)

        try:
            result = identity_service.sign_in_with_password(email, password)
        except IdentityNotConfiguredError as e:
            return error_response("auth_not_configured", str(e), 500)
        except InvalidCredentialsError as e:
            return error_response("invalid_credentials", str(e), 401)
        except Exception as e:
            logger.error(f"[USERS/LOGIN] Sign-in request failed: {e}")
            return error_response("login_failed", "An error occurred during authentication", 500)

        returned_token = result.get("idToken")
        uid = result.get("localId")
        if not returned_token or not isinstance(returned_token, str):
            logger.error("[USERS/LOGIN] No idToken returned from Firebase REST API")
            return error_response("no_token", "Authentication failed (no token returned)", 500)

        try:
            identity_service.verify_id_token(returned_token)
        except (InvalidTokenError, IdentityNotConfiguredError) as e:
            logger.error(f"[USERS/LOGIN] Token verification failed: {e}")
            return error_response("invalid_token", "Invalid authentication token", 401)

        try:
            profile = self.dao.get_by_id(uid) if uid else None
        except FirestoreUnavailableError:
            return store_unavailable()
        except Exception as e:
            logger.error(f"[USERS/LOGIN] Profile lookup failed: {e}")
            return error_response("login_failed", "An error occurred during authentication", 500)

        response = {
            "message": "Authentication successful",
            "user": profile or {"id": uid, "email": email},
            "token": returned_token,
        }
        expires_in = self._expires_in(result.get("expiresIn"))
        if expires_in:
            response["expiresIn"] = expires_in
        return JsonResponse(response)

    def _login_with_token(self, id_token: str) -> JsonResponse:
        try:
            decoded = identity_service.verify_id_token(id_token)
        except (InvalidTokenError, IdentityNotConfiguredError) as e:
            logger.warning(f"[USERS/LOGIN] verify_id_token failed: {e}")
            return error_response("invalid_token", "Invalid or expired token", 401)

        uid = decoded.get("uid")
        try:
            profile = self.dao.get_by_id(uid)
        except FirestoreUnavailableError:
            return store_unavailable()
        except Exception as e:
            logger.error(f"[USERS/LOGIN] Profile lookup failed: {e}")
            return error_response("login_failed", "An error occurred during authentication", 500)

        return JsonResponse({
            "message": "Authentication successful",
            "user": profile or {"id": uid, "email": decoded.get("email")},
            "token": id_token,
        })

    @staticmethod
    def _expires_in(value):
        try:
            return int(value)
        except (TypeError, ValueError):
            return None

    def social_login(self, request) -> JsonResponse:
        """
        Social login. The client signs in with Google/Facebook through the
        Firebase client SDK and sends the ID token.

        Body: { idToken }
        """
        data, error = json_body(request)
        if error:
            return error

        id_token = data.get("idToken")
        if not id_token:
            return error_response("missing_token", "idToken is required", 400)

        try:
            decoded = identity_service.verify_id_token(id_token)
        except (InvalidTokenError, IdentityNotConfiguredError) as e:
            logger.warning(f"[USERS/SOCIAL] verify_id_token failed: {e}")
            return error_response("invalid_token", "Invalid or expired token", 401)

        uid = decoded.get("uid")
        provider = (decoded.get("firebase") or {}).get("sign_in_provider") or DEFAULT_SOCIAL_PROVIDER
        oauth = [] if provider == PASSWORD_PROVIDER else [provider]

        try:
            profile = self.dao.get_by_id(uid)
            if profile is None:
                first_name, last_name = split_display_name(decoded.get("name"))
                new_profile = UserProfile(
                    id=uid,
                    first_name=first_name,
                    last_name=last_name,
                    email=decoded.get("email") or "",
                    photo=decoded.get("picture") or "",
                    oauth=oauth,
                )
                self.dao.create_with_id(uid, new_profile.to_document())
                logger.info(f"[USERS/SOCIAL] Created profile uid={uid} provider={provider}")
                profile = self.dao.get_by_id(uid)
            elif oauth and provider not in (profile.get("oauth") or []):
                self.dao.link_provider(uid, provider)
                logger.info(f"[USERS/SOCIAL] Linked provider={provider} to uid={uid}")
                profile = self.dao.get_by_id(uid)
        except FirestoreUnavailableError:
            return store_unavailable()
        except Exception as e:
            logger.error(f"[USERS/SOCIAL] Profile sync failed for uid={uid}: {e}")
            return error_response("social_login_failed", "Social login failed", 500)

        return JsonResponse({"message": "OK", "user": profile, "token": id_token})

    def me(self, request) -> JsonResponse:
        """Return the profile of the authenticated user."""
        uid = (getattr(request, "firebase_user", None) or {}).get("uid")
        if not uid:
            return error_response("unauthorized", "Unauthorized", 401)

        logger.debug(f"[USERS/ME] requested uid={uid}")
        try:
            profile = self.dao.get_by_id(uid)
        except FirestoreUnavailableError:
            return store_unavailable()
        except Exception as e:
            logger.error(f"[USERS/ME] {e}")
            return error_response("profile_failed", "Failed to get profile", 500)

        if not profile:
            return error_response("not_found", "Profile not found", 404)
        return JsonResponse(profile)

    def delete(self, request, doc_id: str) -> HttpResponse:
        """
        Delete a profile. When the requester deletes their own profile (or
        ALLOW_ADMIN_DELETE is on) the Firebase Auth user is removed too.
        If the id does not match a document, fall back to the profile found
        by the requester's email.
        """
        requester = getattr(request, "firebase_user", None) or {}
        logger.info(f"[USERS/DELETE] requested id={doc_id}")

        try:
            if self.dao.delete(doc_id):
                self._delete_auth_user(doc_id, requester.get("uid"))
                return HttpResponse(status=204)

            email = requester.get("email")
            if email:
                logger.info(f"[USERS/DELETE] fallback: searching by email={email}")
                found = self.dao.find_by_email(email)
                if found and found.get("id") and self.dao.delete(found["id"]):
                    return HttpResponse(status=204)
        except FirestoreUnavailableError:
            return store_unavailable()
        except Exception as e:
            logger.error(f"[USERS/DELETE] {doc_id}: {e}")
            return error_response("delete_failed", "Delete failed", 500)

        return error_response("not_found", "Not found", 404)

    def _delete_auth_user(self, uid: str, requester_uid) -> None:
        if requester_uid != uid and not settings.ALLOW_ADMIN_DELETE:
            logger.info(f"[USERS/DELETE] skipping auth user deletion uid={uid} requester={requester_uid}")
            return
        try:
            identity_service.delete_user(uid)
        except (FirebaseError, IdentityNotConfiguredError, ValueError) as e:
            # Profile is gone; the auth user stays behind
            logger.error(f"[USERS/DELETE] failed to delete auth user {uid}: {e}")

    def password_reset(self, request) -> JsonResponse:
        """
        Email a password reset link.

        Body: { email }
        """
        data, error = json_body(request)
        if error:
            return error

        email = data.get("email")
        if not email:
            return error_response("missing_email", "email is required", 400)

        try:
            auth_user = identity_service.get_user_by_email(email)
            if auth_user is None:
                logger.info("[USERS/PASSWORD_RESET] No auth user for requested email")
                return JsonResponse({"message": PASSWORD_RESET_MESSAGE})
            link = identity_service.generate_password_reset_link(email)
        except IdentityNotConfiguredError as e:
            return error_response("auth_unavailable", str(e), 503)
        except (FirebaseError, ValueError) as e:
            logger.error(f"[USERS/PASSWORD_RESET] Could not generate reset link: {e}")
            return error_response("password_reset_failed", "Could not start password reset", 500)

        reset_token = extract_oob_code(link)
        if not reset_token:
            logger.error("[USERS/PASSWORD_RESET] Reset link has no oobCode")
            return error_response("password_reset_failed", "Could not start password reset", 500)

        user_name = getattr(auth_user, "display_name", None) or email
        try:
            run_async(send_password_reset_email(email, reset_token, user_name))
        except EmailNotConfiguredError as e:
            logger.error(f"[USERS/PASSWORD_RESET] {e}")
            return error_response("email_unavailable", "Email delivery is not configured", 503)
        except EmailDeliveryError:
            return error_response("email_failed", "Failed to send password reset email", 500)

        return JsonResponse({"message": PASSWORD_RESET_MESSAGE})


user_controller = UserController()
