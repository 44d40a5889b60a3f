"""
evobrain Run Package

Modules:
    config:    Config class (programmatic defaults or INI file)
    evolution: Evolution class, driving one run of the evolutionary algorithm

Only Config is imported here, since every other package depends on it;
import Evolution from 'evobrain.run.evolution' or from 'evobrain'.
"""

from evobrain.run.config import Config

__all__ = ['Config']
