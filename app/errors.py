class QuoteComparisonError(Exception):
    """Base error for the quote comparison pipeline"""


class UnsupportedTokenError(QuoteComparisonError):
    def __init__(self, symbol: str):
        super().__init__("Unsupported token symbol")
        self.symbol = symbol


class UpstreamError(QuoteComparisonError):
    """An upstream HTTP service answered with an error or unusable payload"""

    def __init__(self, message: str, status_code: int = 0):
        super().__init__(message)
        self.status_code = status_code


class ReferencePriceError(QuoteComparisonError):
    """The gas-price-in-token-in reference could not be obtained"""
