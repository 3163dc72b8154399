"""Adapters turning upload form submissions into import parameters."""

from __future__ import annotations

from .schema import ImportFormPayload, params_from_form

__all__ = ["ImportFormPayload", "params_from_form"]
