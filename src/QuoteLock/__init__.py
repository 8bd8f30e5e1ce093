"""QuoteLock: lockscreen quotes refreshed from pluggable remote providers."""

__version__ = "0.1.0"
