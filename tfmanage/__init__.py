"""Terraform workspace manager: config loading, validation and terraform actions run by convention."""

__version__ = "0.1.0"
__all__ = ["__version__"]