"""finchat: an Indian personal-finance assistant with live market data tools."""

__version__ = "0.1.0"
