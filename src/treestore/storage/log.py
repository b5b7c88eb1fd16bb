"""Logging collaborator shared by storage entries."""
import logging
import typing as t
import zrlog


LogCallback = t.Callable[[t.Optional[str], str], None]


class StorageLog:
    """Delivers (label, message) events either to a callback or to zrlog.

        Entries hold one of these rather than taking a sink on every call. When
        a callback is given it receives every event at or above callback_level
        (INFO by default); everything else goes to the `treestore.storage`
        logger with the label as a prefix.
    """

    def __init__(self,
                 label: t.Optional[str] = None,
                 callback: t.Optional[LogCallback] = None,
                 callback_level: int = logging.INFO,
                 logger_name: str = "treestore.storage"):
        self.label = label
        self._callback = callback
        self._callback_level = callback_level
        self._log = zrlog.get_logger(logger_name)

    def debug(self, message: str):
        self._emit(logging.DEBUG, message)

    def info(self, message: str):
        self._emit(logging.INFO, message)

    def error(self, message: str):
        self._emit(logging.ERROR, message)

    def _emit(self, level: int, message: str):
        if self._callback is not None and level >= self._callback_level:
            self._callback(self.label, message)
        elif self.label:
            self._log.log(level, f"{self.label}: {message}")
        else:
            self._log.log(level, message)
