"""Shared configuration repository for the API process."""
from ..services.config_loader import ConfigRepository

repository = ConfigRepository()
