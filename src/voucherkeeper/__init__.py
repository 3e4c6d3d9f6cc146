"""voucherkeeper: SMS voucher classification and extraction."""

__version__ = "0.1.0"
