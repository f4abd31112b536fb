"""autobox: interprocedural side-effect inference for sandbox policies."""

__version__ = "0.1.0"
