"""Core domain package for voucherkeeper.

Core contains lexicon matching, field extraction, sender normalization and
the decision tree without any SMS-platform or storage-specific code, keeping
the classification logic portable.
"""
