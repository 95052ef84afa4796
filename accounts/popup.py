"""
Client side of the login / sign up popup.

Holds the popup state (mode, form data, loading flag) and talks to the
`/api/user/login/` and `/api/user/register/` endpoints over HTTP.
"""
import logging

import requests

logger = logging.getLogger(__name__)

LOGIN = 'Login'
SIGN_UP = 'Sign Up'

NETWORK_ERROR_MESSAGE = "Something went wrong. Please try again."

ENDPOINTS = {
    LOGIN: 'login',
    SIGN_UP: 'register',
}


class LoginPopup:
    """
    Login / sign up popup.

    token_store: mapping the issued token is saved into under "token"
    alert: callable receiving messages that must be shown to the user
    on_close: called once the popup closes after a successful submit
    """

    def __init__(self, base_url, token_store=None, alert=None, on_close=None,
                 session=None, timeout=10):
        self.base_url = base_url.rstrip('/')
        self.token_store = token_store if token_store is not None else {}
        self.alert = alert or (lambda message: logger.warning("Popup alert: %s", message))
        self.on_close = on_close
        self.session = session or requests.Session()
        self.timeout = timeout

        self.mode = LOGIN
        self.data = {'name': '', 'email': '', 'password': ''}
        self.loading = False
        self.is_open = True
        self.token = None

    def set_mode(self, mode):
        if mode not in ENDPOINTS:
            raise ValueError(f"Unknown popup mode: {mode}")
        self.mode = mode

    def toggle_mode(self):
        self.set_mode(SIGN_UP if self.mode == LOGIN else LOGIN)

    def change(self, field, value):
        """Form input handler"""
        if field not in self.data:
            raise KeyError(field)
        self.data[field] = value

    @property
    def endpoint(self):
        return f"{self.base_url}/api/user/{ENDPOINTS[self.mode]}/"

    @property
    def submit_label(self):
        if self.loading:
            return "Processing..."
        return "Create Account" if self.mode == SIGN_UP else "Login"

    def payload(self):
        """Name is only part of the sign up form"""
        payload = {'email': self.data['email'], 'password': self.data['password']}
        if self.mode == SIGN_UP:
            payload['name'] = self.data['name']
        return payload

    def close(self):
        self.is_open = False
        if self.on_close:
            self.on_close()

    def submit(self):
        """
        Posts the form. Returns True when a token was issued.

        Server-side failures are surfaced with the server's own message;
        transport failures with a generic one.
        """
        self.loading = True
        try:
            response = self.session.post(self.endpoint, json=self.payload(), timeout=self.timeout)
            body = response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.error("Error during %s: %s", self.mode.lower(), exc)
            self.alert(NETWORK_ERROR_MESSAGE)
            return False
        finally:
            self.loading = False

        if body.get('success'):
            self.token = body.get('token')
            self.token_store['token'] = self.token
            self.close()
            return True

        self.alert(body.get('message') or NETWORK_ERROR_MESSAGE)
        return False
