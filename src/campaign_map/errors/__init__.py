"""Custom exception hierarchy for the campaign map."""

from __future__ import annotations


class CampaignMapError(Exception):
    """Base class for all custom errors raised by the campaign map."""


# --- 2-layer hierarchy ---

class DomainError(CampaignMapError):
    """Base class for domain-level errors."""


class InfrastructureError(CampaignMapError):
    """Base class for infrastructure-level errors."""


# --- Domain errors ---

class WaypointNotFoundError(DomainError):
    """Raised when the requested waypoint cannot be located."""


class WaypointValidationError(DomainError):
    """Raised when a waypoint is confirmed with invalid fields."""


class MapNotFoundError(DomainError):
    """Raised when the requested map record cannot be located."""


# --- Infrastructure errors ---

class StorageError(InfrastructureError):
    """Raised when the key-value store cannot persist a value."""


class SettingsError(InfrastructureError):
    """Base class for settings related failures."""


class SettingsLoadError(SettingsError):
    """Raised when the settings file cannot be parsed or loaded."""


class SettingsValidationError(SettingsError):
    """Raised when settings data fails schema validation."""


__all__ = [
    "CampaignMapError",
    "DomainError",
    "InfrastructureError",
    "MapNotFoundError",
    "SettingsError",
    "SettingsLoadError",
    "SettingsValidationError",
    "StorageError",
    "WaypointNotFoundError",
    "WaypointValidationError",
]
