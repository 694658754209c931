"""Federated e-cash mint building blocks: encoding, amounts, batches, databases, module interfaces."""

__version__ = "0.1.0"