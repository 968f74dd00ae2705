"""
Controller Module - Black Box Interface

Purpose: Wire the management client, resolver, sync handler and change feed
Interface: ControllerFactory.build(config_provider) -> SecretController
Hidden: client construction, resolver selection, retry settings
"""

from .controller import SecretController
from .factory import ControllerFactory, load_management_client

__all__ = ["SecretController", "ControllerFactory", "load_management_client"]
