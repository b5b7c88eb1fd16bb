class TreeStoreError(Exception):
    """Super-type of all errors raised by treestore code"""

    def __init__(self, msg: str, code_space: str = "GEN", code_number: int = None, is_recoverable: bool = False):
        self.internal_code = "" if code_number is None else f"{code_space}-{code_number}"
        super().__init__(f"{msg} [{self.internal_code}]")
        self.is_recoverable = is_recoverable


class StorageError(TreeStoreError):
    """Error class specifically for storage errors."""

    def __init__(self, msg, code, is_recoverable: bool = False):
        super().__init__(msg, "STORAGE", code, is_recoverable=is_recoverable)


class NotFoundError(StorageError):
    """The target of an operation does not exist."""

    def __init__(self, msg, code: int = 1002, is_recoverable: bool = False):
        super().__init__(msg, code, is_recoverable)


class AlreadyExistsError(StorageError):
    """A create or copy would collide with something that already exists."""

    def __init__(self, msg, code: int = 1006, is_recoverable: bool = False):
        super().__init__(msg, code, is_recoverable)


class NotEmptyError(StorageError):
    """A non-recursive delete was attempted on a directory with children."""

    def __init__(self, msg, code: int = 1007, is_recoverable: bool = False):
        super().__init__(msg, code, is_recoverable)


class BackendUnavailableError(StorageError):
    """No client has been configured for the backend."""

    def __init__(self, msg, code: int = 1008, is_recoverable: bool = False):
        super().__init__(msg, code, is_recoverable)


class UnsupportedPathError(StorageError):
    """The path could not be mapped onto a known backend or entry kind."""

    def __init__(self, msg, code: int = 1009, is_recoverable: bool = False):
        super().__init__(msg, code, is_recoverable)
