"""UI behavior tests for sign-in, sharing controls and the preview surface."""
import base64
import json
import os
import subprocess
import sys
import time
import unittest
from unittest import mock


def _module_importable(module: str) -> bool:
    """Return True when module can be imported in a subprocess."""
    result = subprocess.run(
        [sys.executable, "-c", f"import {module}"],
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        check=False,
    )
    return result.returncode == 0


QT_AVAILABLE = _module_importable("PyQt6.QtWidgets") and _module_importable("cv2")


def make_token(claims):
    payload = base64.urlsafe_b64encode(json.dumps(claims).encode("utf-8")).rstrip(b"=").decode("ascii")
    return f"header.{payload}.signature"


class DummyNav:
    def __init__(self):
        self.signed_out = 0

    def sign_out(self):
        self.signed_out += 1


class QueueingRunner:
    def __init__(self):
        self.pending = []

    def submit(self, request, on_settled):
        self.pending.append((request, on_settled))

    def call_soon(self, callback):
        callback()

    def settle(self):
        request, on_settled = self.pending.pop(0)
        try:
            result = request()
        except Exception as exc:
            on_settled(None, exc)
            return
        on_settled(result, None)


@unittest.skipUnless(QT_AVAILABLE, "PyQt6 unavailable in test environment")
class UiBehaviorTests(unittest.TestCase):
    """Validate panel refresh logic against real capture sessions."""
    @classmethod
    def setUpClass(cls):
        os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
        from PyQt6.QtWidgets import QApplication

        cls._app = QApplication.instance() or QApplication([])
        cls._app.setOrganizationName("ScreenMirrorTests")
        cls._app.setApplicationName("Screen Mirror Tests")

    def setUp(self):
        from mirror_app.app_state import app_state
        from mirror_app.services.capture_errors import CapturePermissionError
        from mirror_app.services.capture_session import CaptureSession, ConnectionStatus
        from mirror_app.services.capture_state_machine import CaptureState
        from mirror_app.services.display_media import ScreenVideoTrack
        from mirror_app.services.ffmpeg_tools import ScreenCaptureConfig
        from mirror_app.services.frame_bus import FrameQueue
        from mirror_app.services.media_stream import MediaStream, MediaTrack, TrackKind
        from mirror_core.identity import AuthenticatedIdentity

        self.app_state = app_state
        self.CaptureSession = CaptureSession
        self.CaptureState = CaptureState
        self.ConnectionStatus = ConnectionStatus
        self.CapturePermissionError = CapturePermissionError
        self.MediaStream = MediaStream

        test = self

        class FakeSupervisor:
            def __init__(self):
                self.frame_queue = FrameQueue(maxlen=2)
                self.on_exit = None
                self.stopped = 0

            def stop(self):
                self.stopped += 1

        class StubProvider:
            def __init__(self):
                self.fail_next = False
                self.streams = []

            def is_supported(self):
                return True

            def request_stream(self, constraints):
                if self.fail_next:
                    raise test.CapturePermissionError("dismissed")
                video = ScreenVideoTrack("Main", FakeSupervisor(), ScreenCaptureConfig(4, 2, 15, "Main"))
                audio = MediaTrack(TrackKind.AUDIO, "System audio")
                stream = MediaStream([video, audio], label="Main")
                self.streams.append(stream)
                return stream

        self.StubProvider = StubProvider
        app_state.reset()
        app_state.identity = AuthenticatedIdentity("Ada Lovelace", "ada@example.com")
        self.addCleanup(app_state.reset)

    def _main_panel(self):
        from mirror_app.ui.panels.main_screen import MainScreenPanel

        self.runner = QueueingRunner()
        self.provider = self.StubProvider()
        self.session = self.CaptureSession(self.provider, runner=self.runner)
        self.addCleanup(self.session.dispose)
        return MainScreenPanel(DummyNav(), self.session)

    def test_status_indicator_labels(self):
        from mirror_app.ui.status_indicator import ConnectionStatusIndicator

        indicator = ConnectionStatusIndicator()
        self.assertEqual(indicator.text(), "Disconnected")
        expected = {
            self.ConnectionStatus.CONNECTING: "Connecting...",
            self.ConnectionStatus.CONNECTED: "Connected",
            self.ConnectionStatus.ERROR: "Error",
            self.ConnectionStatus.DISCONNECTED: "Disconnected",
        }
        for status, label in expected.items():
            indicator.set_status(status)
            self.assertEqual(indicator.text(), label)
        indicator.set_status("connected")
        self.assertEqual(indicator.text(), "Connected")

    def test_main_panel_idle_layout(self):
        panel = self._main_panel()
        self.assertEqual(panel.start_btn.text(), "Start Sharing")
        self.assertTrue(panel.start_btn.isEnabled())
        self.assertTrue(panel.stop_btn.isHidden())
        self.assertFalse(panel.empty_label.isHidden())
        self.assertTrue(panel.error_banner.isHidden())
        self.assertEqual(panel.name_label.text(), "Ada Lovelace")
        self.assertEqual(panel.email_label.text(), "ada@example.com")
        self.assertEqual(panel.avatar.text(), "AL")

    def test_start_shows_connecting_then_stop_sharing(self):
        panel = self._main_panel()
        panel.start_btn.click()

        self.assertEqual(panel.start_btn.text(), "Connecting...")
        self.assertFalse(panel.start_btn.isEnabled())
        self.assertEqual(panel.status_indicator.text(), "Connecting...")
        self.assertEqual(panel.message_label.text(), "Screen share requested")

        self.runner.settle()

        self.assertEqual(panel.status_indicator.text(), "Connected")
        self.assertTrue(panel.start_btn.isHidden())
        self.assertFalse(panel.stop_btn.isHidden())
        self.assertTrue(panel.empty_label.isHidden())
        self.assertTrue(panel.preview.is_attached)

        panel.stop_btn.click()
        self.assertEqual(self.session.state, self.CaptureState.IDLE)
        self.assertFalse(panel.preview.is_attached)
        self.assertEqual(panel.status_indicator.text(), "Disconnected")
        self.assertEqual(panel.message_label.text(), "Sharing stopped")

    def test_failure_shows_banner_and_notifies_once(self):
        from mirror_app.ui.panels import main_screen

        panel = self._main_panel()
        self.provider.fail_next = True
        with mock.patch.object(main_screen.notifier, "alert", return_value=True) as alert_mock:
            panel.start()
            self.runner.settle()
            panel.refresh()

        self.assertFalse(panel.error_banner.isHidden())
        self.assertIn("permission was denied", panel.error_text.text())
        self.assertEqual(panel.status_indicator.text(), "Error")
        alert_mock.assert_called_once()

        panel.dismiss_btn.click()
        self.assertTrue(panel.error_banner.isHidden())
        self.assertEqual(panel.status_indicator.text(), "Disconnected")

    def test_failure_notification_respects_config(self):
        from mirror_app.ui.panels import main_screen

        panel = self._main_panel()
        panel.notifications_enabled = False
        self.provider.fail_next = True
        with mock.patch.object(main_screen.notifier, "alert") as alert_mock:
            panel.start()
            self.runner.settle()
        alert_mock.assert_not_called()

    def test_panel_close_unbinds_preview(self):
        panel = self._main_panel()
        panel.start()
        self.runner.settle()
        panel.on_panel_close()
        self.assertFalse(panel.preview.is_attached)
        self.session.stop()
        self.assertEqual(panel.status_indicator.text(), "Connected")

    def test_preview_renders_latest_frame(self):
        from mirror_app.ui.preview_surface import PLACEHOLDER_TEXT

        panel = self._main_panel()
        panel.start()
        self.runner.settle()
        video = self.session.active_stream.get_video_tracks()[0]
        bgr = bytes([255, 0, 0] * 8)
        video.frame_queue.publish(bgr)

        panel.preview.update_preview()
        panel.preview.update_preview()

        self.assertEqual(panel.preview.frames_rendered, 1)
        self.assertFalse(panel.preview.pixmap().isNull())

        panel.preview.clear()
        self.assertTrue(panel.preview.pixmap().isNull())
        self.assertEqual(panel.preview.text(), PLACEHOLDER_TEXT)
        self.assertFalse(panel.preview.poll_timer.isActive())

    def test_preview_ignores_wrong_sized_payload(self):
        panel = self._main_panel()
        panel.start()
        self.runner.settle()
        video = self.session.active_stream.get_video_tracks()[0]
        video.frame_queue.publish(b"\x00" * 5)
        panel.preview.update_preview()
        self.assertEqual(panel.preview.frames_rendered, 0)

    def test_login_panel_placeholder_blocks_sign_in(self):
        from mirror_app.ui.panels.login import LoginPanel

        panel = LoginPanel("YOUR_GOOGLE_CLIENT_ID.apps.googleusercontent.com")
        self.assertFalse(panel.notice.isHidden())
        self.assertFalse(panel.sign_in_btn.isEnabled())

    def test_login_panel_emits_identity(self):
        from mirror_app.ui.panels.login import LoginPanel

        panel = LoginPanel("123.apps.googleusercontent.com")
        received = []
        panel.signedIn.connect(received.append)

        panel.token_input.setText("garbage")
        panel.sign_in()
        self.assertEqual(received, [])
        self.assertFalse(panel.error_label.isHidden())

        panel.token_input.setText(make_token({"email": "grace@example.com", "name": "Grace Hopper"}))
        panel.sign_in()
        self.assertEqual(len(received), 1)
        self.assertEqual(received[0].display_name, "Grace Hopper")
        self.assertTrue(panel.error_label.isHidden())
        self.assertEqual(panel.token_input.text(), "")

    def test_app_shell_sign_in_and_out_disposes_session(self):
        from mirror_app.ui.app_shell import AppShell
        from mirror_core.config import MirrorConfig
        from mirror_core.identity import AuthenticatedIdentity

        self.app_state.reset()
        runner = QueueingRunner()
        provider = self.StubProvider()
        shell = AppShell(
            MirrorConfig(client_id="123.apps.googleusercontent.com", notifications_enabled=False),
            provider_factory=lambda: provider,
            runner=runner,
        )
        self.assertEqual(shell.nav.current(), "login")

        shell.login_panel.signedIn.emit(AuthenticatedIdentity("Grace Hopper", "grace@example.com"))
        self.assertEqual(shell.nav.current(), "main")
        session = self.app_state.session
        self.assertIsNotNone(session)

        shell.nav.main_panel.start()
        shell.nav.main_panel.logout_btn.click()

        self.assertTrue(session.is_disposed)
        self.assertIsNone(self.app_state.session)
        self.assertEqual(shell.nav.current(), "login")

        runner.settle()
        late = provider.streams[-1]
        self.assertEqual(late.get_video_tracks()[0].supervisor.stopped, 1)
        self.assertIsNone(session.active_stream)
        shell.close()

    def test_app_shell_close_releases_active_stream(self):
        from mirror_app.ui.app_shell import AppShell
        from mirror_core.config import MirrorConfig
        from mirror_core.identity import AuthenticatedIdentity

        self.app_state.reset()
        runner = QueueingRunner()
        provider = self.StubProvider()
        shell = AppShell(
            MirrorConfig(client_id="123.apps.googleusercontent.com", notifications_enabled=False),
            provider_factory=lambda: provider,
            runner=runner,
        )
        shell.login_panel.signedIn.emit(AuthenticatedIdentity("Grace Hopper", "grace@example.com"))
        session = self.app_state.session
        session.start()
        runner.settle()
        stream = session.active_stream

        shell.show()
        shell.close()

        self.assertTrue(session.is_disposed)
        self.assertEqual(stream.get_video_tracks()[0].supervisor.stopped, 1)

    def test_source_picker_selection(self):
        from mirror_app.services.ffmpeg_tools import CaptureSource
        from mirror_app.ui.source_picker import SourcePickerDialog, list_capture_sources

        sources = [
            CaptureSource("screen:0", "Left", 0, 0, 1920, 1080, 0),
            CaptureSource("screen:1", "Right", 1920, 0, 1920, 1080, 1),
        ]
        dialog = SourcePickerDialog(sources)
        self.assertIs(dialog.selected_source(), sources[0])
        dialog.source_list.setCurrentRow(1)
        self.assertIs(dialog.selected_source(), sources[1])
        self.assertFalse(SourcePickerDialog([]).share_btn.isEnabled())

        for source in list_capture_sources():
            self.assertGreater(source.width, 0)
            self.assertTrue(source.id.startswith("screen:"))

    def test_source_prompt_returns_none_when_dismissed(self):
        from PyQt6.QtWidgets import QDialog
        from mirror_app.ui.source_picker import SourcePrompt

        class RejectingDialog:
            def __init__(self, sources, parent=None):
                self.sources = sources

            def exec(self):
                return QDialog.DialogCode.Rejected

            def selected_source(self):
                return self.sources[0]

            def deleteLater(self):
                return None

        prompt = SourcePrompt(dialog_factory=RejectingDialog)
        self.assertIsNone(prompt.select())

    def test_source_prompt_without_screens_raises_request_error(self):
        from mirror_app.services.capture_errors import CaptureRequestError
        from mirror_app.ui.source_picker import SourcePrompt

        def unexpected_dialog(sources, parent=None):
            raise AssertionError("picker shown with no screens")

        prompt = SourcePrompt(dialog_factory=unexpected_dialog, list_sources=list)
        with self.assertRaises(CaptureRequestError):
            prompt.select()
        prompt.list_sources = lambda: [object()]
        prompt.dialog_factory = lambda sources, parent=None: mock.Mock(
            exec=mock.Mock(return_value=0), selected_source=mock.Mock(return_value=None)
        )
        self.assertIsNone(prompt.select())

    def test_qt_runner_delivers_on_gui_thread(self):
        from PyQt6.QtCore import QThread
        from mirror_app.workers.stream_request_worker import QtRequestRunner

        runner = QtRequestRunner()
        outcomes = []
        threads = []

        def on_settled(result, error):
            threads.append(QThread.currentThread())
            outcomes.append((result, error))

        runner.submit(lambda: "stream", on_settled)
        deadline = time.time() + 5
        while not outcomes and time.time() < deadline:
            self._app.processEvents()
            time.sleep(0.01)

        self.assertEqual(outcomes, [("stream", None)])
        self.assertIs(threads[0], self._app.thread())
        self.assertEqual(runner.pending(), 0)

    def test_qt_runner_reports_errors(self):
        from mirror_app.workers.stream_request_worker import QtRequestRunner

        runner = QtRequestRunner()
        outcomes = []

        def request():
            raise self.CapturePermissionError("dismissed")

        runner.submit(request, lambda result, error: outcomes.append((result, error)))
        deadline = time.time() + 5
        while not outcomes and time.time() < deadline:
            self._app.processEvents()
            time.sleep(0.01)

        self.assertIsNone(outcomes[0][0])
        self.assertIsInstance(outcomes[0][1], self.CapturePermissionError)
        runner.shutdown()


if __name__ == "__main__":
    unittest.main()
