# -*- coding: utf-8 -*-
"""
Background workers for the wizard controller.

Each worker wraps one blocking call. ``work()`` does the job and may be
called inline; ``run()`` executes it on the worker thread and reports the
outcome through queued signals.
"""

from PyQt5.QtCore import QThread, pyqtSignal

from utils.logger import get_logger

logger = get_logger(__name__)


class _TaskWorker(QThread):
    """Runs ``work()`` off the GUI thread."""

    succeeded = pyqtSignal(object)
    failed = pyqtSignal(object)  # the raised exception

    def work(self):
        raise NotImplementedError

    def run(self):
        try:
            result = self.work()
        except Exception as e:
            logger.debug(f"{self.__class__.__name__} failed: {e}")
            self.failed.emit(e)
            return
        self.succeeded.emit(result)


class StageSubmitWorker(_TaskWorker):
    """Commits one wizard stage to the backend."""

    def __init__(self, submitter, step: int, application_id, payloads):
        super().__init__()
        self.submitter = submitter
        self.step = step
        self.application_id = application_id
        self.payloads = payloads

    def work(self):
        return self.submitter.submit(self.step, self.application_id, self.payloads)


class PrefillWorker(_TaskWorker):
    """Fetches the server record used to prefill a resumed draft."""

    def __init__(self, merger, api_client, application_id: str):
        super().__init__()
        self.merger = merger
        self.api_client = api_client
        self.application_id = application_id

    def work(self):
        return self.merger.fetch(self.api_client, self.application_id)
