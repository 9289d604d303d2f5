"""SMS notification service: blacklist, HTTP API and queue worker over supplied clients."""

__version__ = "0.1.0"