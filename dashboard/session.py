import json
import logging

logger = logging.getLogger(__name__)

TOKEN_KEY = 'auth_token'
USER_KEY = 'auth_user'


class AuthSession:
    """The signed-in identity shared by every dashboard component.

    Create one per process, call ``hydrate()`` at startup and ``clear()`` on
    logout, and hand the same object to whatever needs the token.
    """

    def __init__(self, storage):
        self.storage = storage
        self.token = None
        self.user = None
        self.error = None

    @property
    def is_authenticated(self):
        return bool(self.token)

    def hydrate(self):
        self.token = self.storage.get_item(TOKEN_KEY)
        saved_user = self.storage.get_item(USER_KEY)
        self.user = None
        if saved_user:
            try:
                self.user = json.loads(saved_user)
            except ValueError as e:
                logger.error(f"Discarding unreadable saved user: {e}")
                self.storage.remove_item(USER_KEY)
        return self

    def persist(self, token, user):
        self.token = token
        self.user = user
        self.error = None
        self.storage.set_item(TOKEN_KEY, token)
        self.storage.set_item(USER_KEY, json.dumps(user))

    def clear(self):
        self.token = None
        self.user = None
        self.storage.remove_item(TOKEN_KEY)
        self.storage.remove_item(USER_KEY)

    def auth_headers(self):
        if not self.token:
            return {}
        return {'Authorization': f'Bearer {self.token}'}
