"""Terraform configuration parsing."""

from terradep.parsing.hcl import (
    ParsedDeployment,
    RemoteStateReference,
    TerraformParser,
    is_ignored_file,
    is_override_file,
)

__all__ = [
    "ParsedDeployment",
    "RemoteStateReference",
    "TerraformParser",
    "is_ignored_file",
    "is_override_file",
]
