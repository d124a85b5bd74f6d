# Firestore collections
USERS_COLLECTION = "users"
MEETINGS_COLLECTION = "meetings"
PARTICIPANTS_COLLECTION = "participants"

STATUS_OFFLINE = "offline"

ROLE_HOST = "host"
ROLE_GUEST = "guest"
PARTICIPANT_ROLES = {ROLE_HOST, ROLE_GUEST}

DEFAULT_SOCIAL_PROVIDER = "social"
# Email/password accounts; not an oauth provider
PASSWORD_PROVIDER = "password"

# Firebase Identity Toolkit REST API
IDENTITY_TOOLKIT_HOST = "identitytoolkit.googleapis.com"
SIGN_IN_WITH_PASSWORD_PATH = "/v1/accounts:signInWithPassword"
SIGN_IN_TIMEOUT_SECONDS = 15

SENDGRID_SEND_URL = "https://api.sendgrid.com/v3/mail/send"
EMAIL_TIMEOUT_SECONDS = 30.0
