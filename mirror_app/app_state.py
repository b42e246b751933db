"""In-memory app state for the signed-in user and their capture session."""


class AppState:
    """Global UI state: the authenticated identity and the session it owns."""

    def __init__(self):
        self.identity = None
        self.session = None

    @property
    def signed_in(self):
        return self.identity is not None

    def reset(self):
        self.identity = None
        self.session = None

app_state = AppState()
