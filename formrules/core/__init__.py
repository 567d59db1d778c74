"""
FormRules Core
==============

Configuration and request input.
"""

from formrules.core.config import Config, get_config
from formrules.core.request import InputSource, Request

__all__ = ["Config", "get_config", "InputSource", "Request"]
