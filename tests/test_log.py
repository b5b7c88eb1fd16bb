import logging
import unittest as ut
from treestore.exc import NotFoundError, StorageError, TreeStoreError
from treestore.storage import StorageLog


class StorageLogTest(ut.TestCase):

    def test_callback_receives_label(self):
        events = []
        log = StorageLog("job", lambda label, msg: events.append((label, msg)))
        log.info("one")
        log.error("two")
        self.assertEqual(events, [("job", "one"), ("job", "two")])

    def test_debug_goes_to_logger(self):
        events = []
        log = StorageLog("job", lambda label, msg: events.append((label, msg)))
        with self.assertLogs("treestore.storage", logging.DEBUG) as logs:
            log.debug("quiet")
        self.assertEqual(events, [])
        self.assertEqual(logs.output, ["DEBUG:treestore.storage:job: quiet"])

    def test_callback_level(self):
        events = []
        log = StorageLog(None, lambda label, msg: events.append((label, msg)), callback_level=logging.DEBUG)
        log.debug("loud")
        self.assertEqual(events, [(None, "loud")])

    def test_without_callback(self):
        with self.assertLogs("treestore.storage", logging.INFO) as logs:
            StorageLog().info("plain")
            StorageLog("label").error("labelled")
        self.assertEqual(logs.output, ["INFO:treestore.storage:plain", "ERROR:treestore.storage:label: labelled"])


class ErrorTest(ut.TestCase):

    def test_codes(self):
        ex = NotFoundError("missing")
        self.assertIsInstance(ex, StorageError)
        self.assertIsInstance(ex, TreeStoreError)
        self.assertIn("STORAGE-1002", str(ex))
        self.assertFalse(ex.is_recoverable)

    def test_recoverable(self):
        ex = StorageError("busy", 2006, True)
        self.assertTrue(ex.is_recoverable)
        self.assertIn("STORAGE-2006", str(ex))
