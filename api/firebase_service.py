"""
Firebase Admin bootstrap shared by the identity and document-store clients.

Firestore Collections:
- users/{uid}: User profile keyed by the Firebase Auth uid (no password)
- meetings/{meetingId}: Meeting records with host, participants, capacity
- participants/{participantId}: Per-meeting participant state
"""
import json
import logging
import os

import firebase_admin
from django.conf import settings
from firebase_admin import credentials, firestore

logger = logging.getLogger("api")

# Firebase Admin initialization
_firebase_app = None
_firestore_client = None
_firebase_init_attempted = False


class FirestoreUnavailableError(RuntimeError):
    """Raised when Firebase is not configured and Firestore cannot be reached."""


def get_firebase_app():
    """Get or initialize Firebase Admin app"""
    global _firebase_app, _firebase_init_attempted

    if _firebase_app is not None:
        return _firebase_app

    if _firebase_init_attempted:
        # Already tried and failed
        return None

    _firebase_init_attempted = True

    use_emulator = settings.FIREBASE_USE_EMULATOR
    project_id = settings.FIREBASE_PROJECT_ID

    logger.info(f"Firebase init: use_emulator={use_emulator}, project_id={project_id}")

    if use_emulator:
        # The SDK reads the emulator hosts from the environment
        firestore_host = os.environ.get("FIRESTORE_EMULATOR_HOST", "localhost:8080")
        auth_host = os.environ.get("FIREBASE_AUTH_EMULATOR_HOST", "localhost:9099")
        os.environ["FIRESTORE_EMULATOR_HOST"] = firestore_host
        os.environ["FIREBASE_AUTH_EMULATOR_HOST"] = auth_host

        try:
            _firebase_app = firebase_admin.initialize_app(
                credential=None,
                options={"projectId": project_id or "demo-project"},
            )
            logger.info(
                f"Firebase Admin initialized with EMULATOR "
                f"(Firestore: {firestore_host}, Auth: {auth_host})"
            )
        except ValueError as e:
            # Already initialized
            try:
                _firebase_app = firebase_admin.get_app()
                logger.info("Firebase Admin already initialized")
            except ValueError:
                logger.error(f"Firebase init failed: {e}")
                return None
        return _firebase_app

    cred = None
    if settings.FIREBASE_SERVICE_ACCOUNT:
        try:
            cred = credentials.Certificate(json.loads(settings.FIREBASE_SERVICE_ACCOUNT))
            logger.info("Using FIREBASE_SERVICE_ACCOUNT env var")
        except (json.JSONDecodeError, ValueError) as e:
            logger.error(f"Invalid FIREBASE_SERVICE_ACCOUNT JSON: {e}")
    elif settings.FIREBASE_SERVICE_ACCOUNT_PATH and os.path.exists(settings.FIREBASE_SERVICE_ACCOUNT_PATH):
        cred = credentials.Certificate(settings.FIREBASE_SERVICE_ACCOUNT_PATH)
        logger.info(f"Using service account from {settings.FIREBASE_SERVICE_ACCOUNT_PATH}")

    if cred is None:
        logger.warning("Firebase credentials not found - Auth and Firestore operations will fail")
        return None

    options = {"projectId": project_id} if project_id else None
    try:
        _firebase_app = firebase_admin.initialize_app(cred, options=options)
        logger.info("Firebase Admin initialized (production)")
    except ValueError:
        try:
            _firebase_app = firebase_admin.get_app()
        except ValueError:
            return None

    return _firebase_app


def get_firestore():
    """Get Firestore client, or None when Firebase is not configured."""
    global _firestore_client

    if _firestore_client is not None:
        return _firestore_client

    app = get_firebase_app()
    if app is None:
        return None

    _firestore_client = firestore.client(app=app)
    return _firestore_client


def is_available() -> bool:
    """Check if Firestore is available"""
    return get_firestore() is not None
