import logging

from mirror_app.app_state import app_state
from mirror_app.services.capture_state_machine import CaptureState


class SessionController:
    def __init__(self, session):
        self.session = session

    def start(self):
        if not app_state.identity:
            return "Sign in first"

        state = self.session.state
        if state == CaptureState.ACTIVE:
            return "Already sharing"
        if state == CaptureState.REQUESTING:
            self.session.start()
            return "Waiting for screen share prompt"

        self.session.start()
        return "Screen share requested"

    def stop(self):
        state = self.session.state
        if state == CaptureState.REQUESTING:
            self.session.stop()
            return "Stop requested"
        if state != CaptureState.ACTIVE:
            return "Not sharing"

        self.session.stop()
        logging.info("[SESSION] sharing stopped by user")
        return "Sharing stopped"

    def dismiss_error(self):
        if self.session.state != CaptureState.FAILED:
            return "No error to dismiss"
        self.session.dismiss_error()
        return "Error dismissed"
