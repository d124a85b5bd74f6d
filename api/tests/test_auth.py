import json
from unittest.mock import patch

from django.http import JsonResponse
from django.test import RequestFactory, SimpleTestCase

from api.auth import authenticate, require_auth
from api.identity_service import IdentityNotConfiguredError, InvalidTokenError, identity_service

from .fakes import make_token


@require_auth
def whoami(request):
    return JsonResponse(request.firebase_user)


class AuthenticateTests(SimpleTestCase):
    def setUp(self):
        self.factory = RequestFactory()

    def _request(self, header=None):
        extra = {"HTTP_AUTHORIZATION": header} if header is not None else {}
        return self.factory.get("/whoami", **extra)

    def test_missing_header(self):
        user, error = authenticate(self._request())

        self.assertIsNone(user)
        self.assertEqual(error.status_code, 401)

    def test_header_without_bearer_prefix(self):
        _, error = authenticate(self._request(make_token()))

        self.assertEqual(error.status_code, 401)

    def test_malformed_token(self):
        _, error = authenticate(self._request("Bearer not-a-jwt"))

        self.assertEqual(error.status_code, 400)

    @patch.object(identity_service, "verify_id_token", side_effect=InvalidTokenError("expired"))
    def test_rejected_token(self, _):
        _, error = authenticate(self._request(f"Bearer {make_token()}"))

        self.assertEqual(error.status_code, 401)

    @patch.object(identity_service, "verify_id_token", side_effect=IdentityNotConfiguredError("no firebase"))
    def test_identity_provider_not_configured(self, _):
        _, error = authenticate(self._request(f"Bearer {make_token()}"))

        self.assertEqual(error.status_code, 503)

    @patch.object(identity_service, "verify_id_token")
    def test_quoted_token_is_unwrapped_and_user_attached(self, verify):
        token = make_token()
        verify.return_value = {"uid": "uid-1", "email": "ada@example.com"}
        request = self._request(f'Bearer "{token}"')

        user, error = authenticate(request)

        self.assertIsNone(error)
        verify.assert_called_once_with(token)
        self.assertEqual(user, {"uid": "uid-1", "email": "ada@example.com"})
        self.assertEqual(request.firebase_user, user)

    @patch.object(identity_service, "verify_id_token", return_value={"uid": "uid-2", "email": None})
    def test_require_auth_decorator(self, _):
        response = whoami(self._request(f"Bearer {make_token('uid-2')}"))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(json.loads(response.content)["uid"], "uid-2")

    def test_require_auth_blocks_anonymous(self):
        response = whoami(self._request())

        self.assertEqual(response.status_code, 401)
