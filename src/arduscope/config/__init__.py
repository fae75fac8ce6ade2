"""Configuration objects and helpers for arduscope.

A single YAML file (passed with ``--config``) may override any field of
:class:`~arduscope.config.runtime.ScopeConfig`, either flat or grouped into
``acquisition``, ``demo``, ``trigger``, ``display`` and ``serial`` blocks::

    trigger:
      mode: normal
      level: 2.0
    demo:
      period: 50
"""

from .runtime import ScopeConfig, config_from_mapping, load_config

__all__ = ["ScopeConfig", "config_from_mapping", "load_config"]
