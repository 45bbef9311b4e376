from abc import ABC, abstractmethod


class LoggingPort(ABC):
    """Logging seam used by core code.

    Messages may carry %-style arguments, formatted lazily by the adapter.
    """

    @abstractmethod
    def info(self, msg: str, *args):
        pass

    @abstractmethod
    def warning(self, msg: str, *args):
        pass

    @abstractmethod
    def error(self, msg: str, *args):
        pass

    @abstractmethod
    def debug(self, msg: str, *args):
        pass
