"""Clause handlers that turn a completion request into suggestions."""

from .chain import HANDLER_CHAIN, run_chain

__all__ = ["HANDLER_CHAIN", "run_chain"]
