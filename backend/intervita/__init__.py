"""Intervita AI session backend: credential issuance, connection brokering, resume cache."""

__version__ = "1.0.0"
