import asyncio
import json
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import httpx
from django.test import SimpleTestCase, override_settings
from firebase_admin import auth

from api import email_service
from api.email_service import EmailDeliveryError, EmailNotConfiguredError, send_password_reset_email
from api.identity_service import (
    EmailAlreadyExistsError,
    IdentityNotConfiguredError,
    IdentityService,
    InvalidCredentialsError,
    InvalidTokenError,
)

FAKE_APP = SimpleNamespace(name="[DEFAULT]")


def _response(status_code, body):
    response = MagicMock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.json.return_value = body
    return response


@override_settings(FIREBASE_API_KEY="web-key")
@patch("api.identity_service.get_firebase_app", return_value=FAKE_APP)
class IdentityServiceTests(SimpleTestCase):
    def setUp(self):
        self.service = IdentityService()

    @patch("api.identity_service.requests.post")
    def test_sign_in_posts_credentials(self, post, _):
        post.return_value = _response(200, {"idToken": "tok", "localId": "uid-1"})

        result = self.service.sign_in_with_password("ada@example.com", "pw")

        self.assertEqual(result["localId"], "uid-1")
        args, kwargs = post.call_args
        self.assertEqual(args[0], "https://identitytoolkit.googleapis.com/v1/accounts:signInWithPassword")
        self.assertEqual(kwargs["params"], {"key": "web-key"})
        self.assertEqual(kwargs["json"]["returnSecureToken"], True)

    @patch("api.identity_service.requests.post")
    def test_sign_in_maps_error_codes(self, post, _):
        cases = {
            "INVALID_LOGIN_CREDENTIALS": "Invalid email or password",
            "EMAIL_NOT_FOUND": "Invalid email or password",
            "USER_DISABLED": "User account disabled",
            "TOO_MANY_ATTEMPTS_TRY_LATER : Access disabled": "Invalid email or password",
        }
        for code, message in cases.items():
            with self.subTest(code=code):
                post.return_value = _response(400, {"error": {"message": code}})
                with self.assertRaisesMessage(InvalidCredentialsError, message):
                    self.service.sign_in_with_password("ada@example.com", "pw")

    @patch("api.identity_service.requests.post")
    def test_sign_in_tolerates_unexpected_error_bodies(self, post, _):
        for body in ([], {"error": "INVALID_PASSWORD"}, {"error": None}):
            with self.subTest(body=body):
                post.return_value = _response(400, body)
                with self.assertRaisesMessage(InvalidCredentialsError, "Invalid email or password"):
                    self.service.sign_in_with_password("ada@example.com", "pw")

    @patch.dict("os.environ", {"FIREBASE_AUTH_EMULATOR_HOST": "localhost:9099"})
    @patch("api.identity_service.requests.post")
    def test_sign_in_uses_auth_emulator(self, post, _):
        post.return_value = _response(200, {"idToken": "tok"})

        self.service.sign_in_with_password("ada@example.com", "pw")

        self.assertEqual(
            post.call_args[0][0],
            "http://localhost:9099/identitytoolkit.googleapis.com/v1/accounts:signInWithPassword",
        )

    @patch("api.identity_service.auth.get_user_by_email", side_effect=auth.UserNotFoundError("missing"))
    def test_get_user_by_email_missing(self, *_):
        self.assertIsNone(self.service.get_user_by_email("nobody@example.com"))

    @patch("api.identity_service.auth.create_user", side_effect=auth.EmailAlreadyExistsError("taken", None, None))
    def test_create_user_duplicate(self, *_):
        with self.assertRaises(EmailAlreadyExistsError):
            self.service.create_user("ada@example.com", "pw", "Ada")

    @patch("api.identity_service.auth.create_user", return_value=SimpleNamespace(uid="uid-7"))
    def test_create_user_returns_uid(self, create_user, _):
        self.assertEqual(self.service.create_user("ada@example.com", "pw", "Ada L"), "uid-7")
        create_user.assert_called_once_with(
            email="ada@example.com", password="pw", display_name="Ada L", app=FAKE_APP
        )

    @patch("api.identity_service.auth.verify_id_token", side_effect=auth.InvalidIdTokenError("bad"))
    def test_verify_wraps_sdk_errors(self, *_):
        with self.assertRaises(InvalidTokenError):
            self.service.verify_id_token("token")

    def test_not_configured(self, get_app):
        get_app.return_value = None

        with self.assertRaises(IdentityNotConfiguredError):
            self.service.verify_id_token("token")
        self.assertFalse(self.service.is_available())


@override_settings(
    SENDGRID_API_KEY="SG.test",
    EMAIL_FROM="noreply@synkmeet.test",
    EMAIL_BRAND_NAME="Synk Meet",
    FRONTEND_URL="https://meet.example.com/",
)
class EmailServiceTests(SimpleTestCase):
    def _patch_transport(self, handler):
        real_client = httpx.AsyncClient
        patcher = patch(
            "api.email_service.httpx.AsyncClient",
            lambda: real_client(transport=httpx.MockTransport(handler)),
        )
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_sends_rendered_templates_through_sendgrid(self):
        sent = []

        def handler(request):
            sent.append(request)
            return httpx.Response(202)

        self._patch_transport(handler)

        asyncio.run(send_password_reset_email("ada@example.com", "CODE123", "Ada"))

        self.assertEqual(len(sent), 1)
        request = sent[0]
        self.assertEqual(str(request.url), "https://api.sendgrid.com/v3/mail/send")
        self.assertEqual(request.headers["authorization"], "Bearer SG.test")
        body = json.loads(request.content)
        self.assertEqual(body["personalizations"][0]["to"], [{"email": "ada@example.com"}])
        self.assertEqual(body["from"], {"email": "noreply@synkmeet.test", "name": "Synk Meet"})
        text, html = (part["value"] for part in body["content"])
        reset_url = "https://meet.example.com/reset-password?token=CODE123"
        self.assertIn(reset_url, text)
        self.assertIn(reset_url, html)
        self.assertIn("Hi Ada,", html)

    def test_rejected_message_raises(self):
        self._patch_transport(lambda request: httpx.Response(401, json={"errors": []}))

        with self.assertRaises(EmailDeliveryError):
            asyncio.run(send_password_reset_email("ada@example.com", "CODE123", "Ada"))

    def test_transport_failure_raises(self):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        self._patch_transport(handler)

        with self.assertRaises(EmailDeliveryError):
            asyncio.run(send_password_reset_email("ada@example.com", "CODE123", "Ada"))

    def test_requires_arguments(self):
        with self.assertRaises(ValueError):
            asyncio.run(send_password_reset_email("", "CODE123", "Ada"))

    @override_settings(SENDGRID_API_KEY=None)
    def test_requires_api_key(self):
        self.assertFalse(email_service.is_configured())
        with self.assertRaises(EmailNotConfiguredError):
            asyncio.run(send_password_reset_email("ada@example.com", "CODE123", "Ada"))

    def test_reset_url_escapes_token(self):
        self.assertEqual(
            email_service.build_reset_url("a b&c"),
            "https://meet.example.com/reset-password?token=a+b%26c",
        )
