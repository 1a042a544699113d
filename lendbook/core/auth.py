import logging
from typing import Optional
from itsdangerous import URLSafeTimedSerializer, BadSignature
from lendbook.configs import SEED, TOKEN_TTL
from lendbook.core.authz import Identity
from lendbook.core.exceptions import UnauthenticatedError

logger = logging.getLogger(__name__)


def make_serializer(seed=SEED):
    return URLSafeTimedSerializer(seed, salt="access-token")


class IdentityResolver:
    """Turns a bearer token into the Identity of the user it was issued to."""

    def __init__(self, store, serializer=None, ttl=TOKEN_TTL):
        self.store = store
        self.serializer = serializer or make_serializer()
        self.ttl = ttl

    def issue_token(self, user_id: str) -> str:
        """Returns a signed, timestamped access token for `user_id`."""
        return self.serializer.dumps(user_id)

    def verify_token(self, token) -> Optional[str]:
        """Returns the user id inside a valid token, None otherwise."""
        if not token:
            return None
        try:
            return self.serializer.loads(token, max_age=self.ttl)
        except BadSignature:
            # SignatureExpired is a BadSignature too
            return None

    def resolve(self, credential) -> Identity:
        user_id = self.verify_token(credential)
        if not user_id:
            raise UnauthenticatedError("Missing or invalid access token.")
        with self.store.reader() as session:
            user = self.store.get_user(session, user_id)
            if not user:
                logger.info(f"Token for unknown user {user_id}")
                raise UnauthenticatedError("Unknown user.")
            return Identity(id=user.id, name=user.name, role=user.role)
