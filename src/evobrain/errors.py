"""
evobrain Errors Module

This module defines the exceptions raised by the evobrain package.

Classes:
    EvoBrainError:            Base class of all evobrain exceptions
    ConfigurationError:       Invalid configuration, detected before a population is created
    GenomeDecodeError:        A genome cannot be decoded into a legal network
    UnstableComputationError: An activation or a synapse strength became non-finite
    CouplingMismatchError:    Environment sensors/actuators do not match the network inputs/outputs
"""

class EvoBrainError(Exception):
    """Base class for all exceptions raised by evobrain."""

class ConfigurationError(EvoBrainError, ValueError):
    """Raised when configuration parameters are missing, out of range or inconsistent."""

class GenomeDecodeError(EvoBrainError, ValueError):
    """Raised when a genome violates its configuration bounds or lacks an input-output path."""

class UnstableComputationError(EvoBrainError, ArithmeticError):
    """Raised when a network step produces a NaN or infinite activation or strength."""

class CouplingMismatchError(EvoBrainError, ValueError):
    """Raised when an environment cannot be coupled to a network."""
