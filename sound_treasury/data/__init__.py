"""Bundled sector reference data."""

from sound_treasury.data.sectors import AGRICULTURE, CHEMICALS, DEFAULT_SECTOR, SECTOR_CONFIG, SectorConfig, get_sector

__all__ = [
    "AGRICULTURE",
    "CHEMICALS",
    "DEFAULT_SECTOR",
    "SECTOR_CONFIG",
    "SectorConfig",
    "get_sector",
]
