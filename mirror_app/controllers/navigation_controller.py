import logging

from mirror_app.app_state import app_state


class NavigationController:
    """Switch between the login screen and the signed-in main screen."""

    def __init__(self, stack_layout, login_panel, session_factory, main_panel_factory):
        self.stack = stack_layout
        self.login_panel = login_panel
        self.session_factory = session_factory
        self.main_panel_factory = main_panel_factory
        self.main_panel = None

        self.stack.addWidget(self.login_panel)
        self.stack.setCurrentWidget(self.login_panel)

    def sign_in(self, identity):
        if app_state.signed_in:
            self.sign_out()

        app_state.identity = identity
        app_state.session = self.session_factory()
        self.main_panel = self.main_panel_factory(self, app_state.session)
        self.stack.addWidget(self.main_panel)
        self.stack.setCurrentWidget(self.main_panel)
        logging.info("[SESSION] main screen opened for %s", identity.email)

    def sign_out(self):
        panel, self.main_panel = self.main_panel, None
        if panel is not None:
            if hasattr(panel, "on_panel_close"):
                panel.on_panel_close()
            self.stack.removeWidget(panel)
            panel.deleteLater()

        session = app_state.session
        if session is not None:
            session.dispose()
        if app_state.identity is not None:
            logging.info("[SESSION] signed out %s", app_state.identity.email)
        app_state.reset()

        self.stack.setCurrentWidget(self.login_panel)
        if hasattr(self.login_panel, "refresh"):
            self.login_panel.refresh()

    def current(self):
        return "main" if self.main_panel is not None else "login"
