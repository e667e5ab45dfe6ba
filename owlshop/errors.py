class OwlShopError(Exception):
    """Base class for all owlshop errors."""


class ConfigError(OwlShopError, ValueError):
    pass


class ChooserError(OwlShopError, ValueError):
    """Raised when a weighted action table cannot be built."""


class ServiceError(OwlShopError):
    """A producer could not be constructed or initialized."""


class DeadlineExceeded(OwlShopError, TimeoutError):
    pass


class StartupError(OwlShopError):
    """A named producer failed during the startup sequence."""

    def __init__(self, service: str, cause: BaseException):
        super().__init__(f"failed to initialize {service} service: {cause}")
        self.service = service
        self.cause = cause
