from .base import SeedData, SeedSource
from .http_api import HttpBeaconSeedSource, HttpBeaconSeedSourceConfig

__all__ = [
    "SeedData",
    "SeedSource",
    "HttpBeaconSeedSource",
    "HttpBeaconSeedSourceConfig",
]
