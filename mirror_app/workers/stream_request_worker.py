"""Worker threads that run display-media requests off the UI thread."""
import logging

from PyQt6.QtCore import QObject, Qt, QThread, pyqtSignal, pyqtSlot


class StreamRequestWorker(QThread):
    """Run one blocking capture request and emit its outcome."""
    requestSettled = pyqtSignal(object, object)

    def __init__(self, request):
        super().__init__()
        self.request = request

    def run(self):
        """Emit (stream, None) on success or (None, error) on failure."""
        try:
            result = self.request()
        except Exception as exc:
            logging.info("Capture request failed on worker: %s", exc)
            self.requestSettled.emit(None, exc)
            return
        self.requestSettled.emit(result, None)


class QtRequestRunner(QObject):
    """RequestRunner that keeps every callback on the thread owning this object."""
    _callbackPosted = pyqtSignal(object)

    def __init__(self, parent=None):
        super().__init__(parent)
        self._workers = set()
        # Emitted from worker/reader threads, delivered queued to our thread.
        self._callbackPosted.connect(self._invoke)

    def submit(self, request, on_settled):
        worker = StreamRequestWorker(request)
        self._workers.add(worker)

        def settle(result, error):
            self.call_soon(lambda: self._finish(worker, on_settled, result, error))

        worker.requestSettled.connect(settle, type=Qt.ConnectionType.DirectConnection)
        worker.start()

    def call_soon(self, callback):
        self._callbackPosted.emit(callback)

    @pyqtSlot(object)
    def _invoke(self, callback):
        callback()

    def _finish(self, worker, on_settled, result, error):
        worker.wait()
        self._workers.discard(worker)
        on_settled(result, error)

    def pending(self):
        return len(self._workers)

    def shutdown(self, timeout_ms=5000):
        """Wait for outstanding workers; their results are still delivered if the loop runs."""
        for worker in list(self._workers):
            if not worker.wait(timeout_ms):
                logging.warning("Capture request worker did not finish within %s ms", timeout_ms)
