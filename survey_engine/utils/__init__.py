"""Utility functions for the survey insights engine"""
from .json_helpers import sanitize_for_json

__all__ = ["sanitize_for_json"]
