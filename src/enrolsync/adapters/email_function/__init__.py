"""Outbound email via the hosted send-email function."""

from __future__ import annotations

from .client import SupabaseFunctionSender

__all__ = ["SupabaseFunctionSender"]
