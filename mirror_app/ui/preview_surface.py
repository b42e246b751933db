"""Preview surface that paints the active stream's screen frames."""
import logging

import cv2
import numpy as np
from PyQt6.QtCore import QTimer
from PyQt6.QtGui import QImage, QPixmap
from PyQt6.QtWidgets import QLabel

from mirror_app.ui.widget_utils import configure_preview_label

PLACEHOLDER_TEXT = "Screen preview will appear here"


class PreviewSurface(QLabel):
    """QLabel bound to at most one stream; polls its latest frame every 100 ms."""

    POLL_INTERVAL_MS = 100

    def __init__(self, placeholder=PLACEHOLDER_TEXT):
        super().__init__(placeholder)
        configure_preview_label(self, 240, "screen_preview")
        self.placeholder = placeholder
        self.stream = None
        self._video_track = None
        self._last_sequence = 0
        self._size_mismatch_logged = False
        self.frames_rendered = 0

        self.poll_timer = QTimer(self)
        self.poll_timer.setInterval(self.POLL_INTERVAL_MS)
        self.poll_timer.timeout.connect(self.update_preview)

    # ---- presentation surface ----

    def attach_stream(self, stream):
        video_tracks = stream.get_video_tracks()
        if not video_tracks:
            logging.warning("[PREVIEW] stream %r has no video track", stream.label)
            self.clear()
            return
        self.stream = stream
        self._video_track = video_tracks[0]
        self._last_sequence = 0
        self._size_mismatch_logged = False
        self.setText("Waiting for first frame...")
        self.poll_timer.start()
        logging.info("[PREVIEW] attached stream label=%r", stream.label)

    def clear(self):
        self.poll_timer.stop()
        if self.stream is not None:
            logging.info("[PREVIEW] detached stream label=%r", self.stream.label)
        self.stream = None
        self._video_track = None
        self._last_sequence = 0
        self.setPixmap(QPixmap())
        self.setText(self.placeholder)

    @property
    def is_attached(self):
        return self.stream is not None

    # ---- rendering ----

    def update_preview(self):
        track = self._video_track
        if track is None:
            return
        packet = track.frame_queue.latest_after(self._last_sequence)
        if packet is None:
            return

        width, height = track.frame_size
        frame = self._to_rgb(packet.payload, width, height)
        if frame is None:
            return
        self._last_sequence = packet.sequence
        self.setPixmap(QPixmap.fromImage(self._to_image(self._fit(frame))))
        self.frames_rendered += 1

    def _to_rgb(self, payload, width, height):
        arr = np.frombuffer(payload, dtype=np.uint8)
        if arr.size != width * height * 3:
            if not self._size_mismatch_logged:
                logging.warning(
                    "[PREVIEW] frame payload size %s does not match %sx%s bgr24",
                    arr.size, width, height,
                )
                self._size_mismatch_logged = True
            return None
        bgr = arr.reshape((height, width, 3))
        return np.ascontiguousarray(bgr[:, :, ::-1])

    def _fit(self, frame):
        height, width = frame.shape[:2]
        target_w = max(1, self.contentsRect().width())
        target_h = max(1, self.contentsRect().height())
        scale = min(target_w / width, target_h / height, 1.0)
        if scale >= 1.0:
            return frame
        size = (max(1, int(width * scale)), max(1, int(height * scale)))
        return np.ascontiguousarray(cv2.resize(frame, size, interpolation=cv2.INTER_AREA))

    @staticmethod
    def _to_image(frame):
        height, width = frame.shape[:2]
        image = QImage(
            frame.data,
            width,
            height,
            int(frame.strides[0]),
            QImage.Format.Format_RGB888,
        )
        # QImage borrows the numpy buffer; keep a detached copy.
        return image.copy()
