# services/attendance_poller.py
"""
Fixed-interval refresh of a class attendance list.
The poller owns its timer thread; stop() ends it and drops any result that
arrives afterwards.
"""

import logging
import threading

logger = logging.getLogger('attendance_poller')


class AttendancePoller:
    """
    Poll `fetch()` every `interval` seconds and pass unseen records to `on_update`.

    Args:
        fetch: Callable returning the current attendance list
        on_update: Callable receiving a list of records not seen before
        interval: Seconds between polls
    """

    def __init__(self, fetch, on_update, interval=5):
        self.fetch = fetch
        self.on_update = on_update
        self.interval = interval

        self._seen_ids = set()
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread = None

    @property
    def running(self):
        return self._thread is not None and self._thread.is_alive() and not self._stop_event.is_set()

    def start(self, timeout=None):
        """
        Start polling in a background thread.

        A worker left over from a stop() that timed out is joined first, so at
        most one worker polls at a time.

        Raises:
            RuntimeError: The previous worker did not exit within `timeout`
        """
        if self.running:
            return self

        previous = self._thread
        if previous is not None and previous.is_alive():
            previous.join(timeout)
            if previous.is_alive():
                raise RuntimeError("Previous attendance poller is still stopping")

        # Each run gets its own event so a late worker never sees a cleared flag
        self._stop_event = threading.Event()
        self._thread = threading.Thread(target=self._run, args=(self._stop_event,),
                                        name='attendance-poller', daemon=True)
        self._thread.start()
        return self

    def stop(self, timeout=None):
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        if thread is not None and not thread.is_alive():
            self._thread = None

    def __enter__(self):
        return self.start()

    def __exit__(self, exc_type, exc, tb):
        self.stop()

    def poll_once(self):
        """
        Fetch once and deliver new records.

        Returns:
            list: Records delivered on this poll
        """
        return self._poll(self._stop_event)

    def _poll(self, stop_event):
        records = self.fetch() or []

        with self._lock:
            if stop_event.is_set():
                return []

            new_records = [record for record in records if self._record_id(record) not in self._seen_ids]
            if not new_records:
                return []

            self._seen_ids.update(self._record_id(record) for record in new_records)
            self.on_update(new_records)
            return new_records

    def _run(self, stop_event):
        while not stop_event.is_set():
            try:
                self._poll(stop_event)
            except Exception as e:
                logger.warning(f"Attendance poll failed: {str(e)}")
            if stop_event.wait(self.interval):
                break

    @staticmethod
    def _record_id(record):
        if isinstance(record, dict):
            return record.get('id')
        return record.id
