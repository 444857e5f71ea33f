class CurrencyException(Exception):
    pass


class InvalidCurrencyError(CurrencyException):
    pass


class CurrencyAlreadyExistsError(CurrencyException):
    pass


class ProviderError(CurrencyException):
    pass


class RateNotFoundError(CurrencyException):
    def __init__(self, base: str, target: str):
        self.base = base
        self.target = target
        super().__init__(f"Exchange rate not found for {base} -> {target}")


class InvalidPeriodError(CurrencyException):
    def __init__(self, period: str | None, reason: str | None = None):
        self.period = period
        message = reason or (
            f"Invalid period format: '{period}'. Expected format: <number><unit> "
            "where unit is H (hours), D (days), M (months) or Y (years). "
            "Examples: 12H, 7D, 3M, 1Y"
        )
        super().__init__(message)


class InsufficientDataError(CurrencyException):
    def __init__(self, base: str, target: str, period: str):
        self.base = base
        self.target = target
        self.period = period
        super().__init__(f"Insufficient historical data for {base} -> {target} over period {period}")


class RefreshError(CurrencyException):
    pass
