"""stackgen — generated code management for Terraform stacks."""

__version__ = "0.1.0"
