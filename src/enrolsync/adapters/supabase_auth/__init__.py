"""Supabase GoTrue identity provider adapter."""

from __future__ import annotations

from .client import SupabaseIdentityProvider

__all__ = ["SupabaseIdentityProvider"]
