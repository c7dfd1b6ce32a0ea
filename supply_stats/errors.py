# supply_stats/errors.py


class StatsError(Exception):
    """Base class for everything a refresh cycle can fail with."""


class ConfigError(StatsError):
    pass


class NetworkError(StatsError):
    """Timeout or connection failure talking to the node."""


class ChainQueryError(StatsError):
    """The node answered, but with an error or something we can't parse."""

    def __init__(self, endpoint, message, status_code=None, code=None):
        self.endpoint = endpoint
        self.status_code = status_code
        self.code = code
        detail = f" (HTTP {status_code})" if status_code is not None else ""
        super().__init__(f"{endpoint}{detail}: {message}")


class AccountNotFound(StatsError):
    def __init__(self, address):
        self.address = address
        super().__init__(f"account {address} not found")


class DecodeError(StatsError):
    def __init__(self, message, address=None):
        self.address = address
        prefix = f"{address}: " if address else ""
        super().__init__(prefix + message)


class PersistenceError(StatsError):
    pass
