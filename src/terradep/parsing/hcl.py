"""Terraform configuration loading.

Reads the ``terraform { backend ... }`` declaration and every
``data "terraform_remote_state"`` block of a deployment directory. Partial
backend configuration (``-backend-config`` files) is not supported.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Iterator

import hcl2

from terradep.core.errors import ConfigurationParseError

logger = logging.getLogger(__name__)

REMOTE_STATE = "terraform_remote_state"
CONFIG_SUFFIXES = (".tf", ".tf.json")


@dataclass(frozen=True)
class RemoteStateReference:
    """A ``data "terraform_remote_state"`` block."""

    name: str
    backend_type: str
    config: Any
    filename: str


@dataclass
class ParsedDeployment:
    """Backend declaration and remote state references of one deployment."""

    path: str
    backend_type: str
    backend_config: Any
    references: list[RemoteStateReference] = field(default_factory=list)
    # Number of terraform_remote_state blocks seen, decodable or not
    declared_references: int = 0

    def references_by_file(self) -> dict[str, list[RemoteStateReference]]:
        grouped: dict[str, list[RemoteStateReference]] = {}
        for reference in self.references:
            grouped.setdefault(reference.filename, []).append(reference)
        return grouped


def is_ignored_file(name: str) -> bool:
    """Editor backups and hidden files are not configuration."""
    return (
        name.startswith(".")
        or name.endswith("~")
        # emacs autosave
        or (name.startswith("#") and name.endswith("#"))
    )


def is_override_file(name: str) -> bool:
    """``override.tf`` and ``*_override.tf`` (or their JSON variants)."""
    for suffix in CONFIG_SUFFIXES:
        if name.endswith(suffix):
            base = name[: -len(suffix)]
            return base == "override" or base.endswith("_override")
    return False


def config_files(path: str) -> list[str]:
    """
    Terraform configuration files directly inside ``path``.

    Primary files come first, then override files, each group sorted by name.
    """
    try:
        names = sorted(os.listdir(path))
    except OSError as e:
        raise ConfigurationParseError(f"listing directory: {e}", path=path) from e
    primary = []
    override = []
    for name in names:
        full = os.path.join(path, name)
        if not name.endswith(CONFIG_SUFFIXES) or is_ignored_file(name) or not os.path.isfile(full):
            continue
        if is_override_file(name):
            override.append(full)
        else:
            primary.append(full)
    return primary + override


def _unquote(value: Any) -> Any:
    if isinstance(value, str) and len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1]
    return value


def _normalize(value: Any) -> Any:
    """Strip quoting that some hcl2 releases keep on keys and strings."""
    if isinstance(value, dict):
        return {
            _unquote(k): _normalize(v)
            for k, v in value.items()
            if not (k.startswith("__") and k.endswith("__"))
        }
    if isinstance(value, list):
        return [_normalize(v) for v in value]
    return _unquote(value)


def _blocks(value: Any) -> Iterator[dict[str, Any]]:
    """Blocks come as a list of objects from hcl2 and as an object (or list) in JSON."""
    if isinstance(value, dict):
        yield value
    elif isinstance(value, list):
        for item in value:
            if isinstance(item, dict):
                yield item


class TerraformParser:
    """Loads deployments from directories of Terraform configuration."""

    def is_deployment_root(self, path: str) -> bool:
        """A directory holding Terraform configuration files is a deployment."""
        return bool(config_files(path))

    def load_deployment(self, path: str) -> ParsedDeployment:
        """
        Load a deployment directory.

        Every file is parsed once; all remote state blocks of a file are
        extracted from that single parse. A backend declared in an override
        file replaces the primary one, the last override file winning.

        Raises:
            ConfigurationParseError: A file is unreadable or malformed, or
                the primary files declare more than one backend, or no
                file declares any.
        """
        backends: list[tuple[str, str, Any]] = []
        overrides: list[tuple[str, str, Any]] = []
        references: list[RemoteStateReference] = []
        declared = 0

        for filename in config_files(path):
            document = self._parse_file(path, filename)
            found = [(filename, backend_type, body) for backend_type, body in self._backends(document)]
            if is_override_file(os.path.basename(filename)):
                overrides.extend(found)
            else:
                backends.extend(found)
            file_declared, file_references = self._remote_states(document, filename)
            declared += file_declared
            references.extend(file_references)

        if len(backends) > 1:
            files = ", ".join(sorted({os.path.basename(f) for f, _, _ in backends}))
            raise ConfigurationParseError(f"more than one backend declared in: {files}", path=path)
        if overrides:
            logger.debug("backend of %s overridden in %s", path, os.path.basename(overrides[-1][0]))
            backends = overrides[-1:]
        if not backends:
            raise ConfigurationParseError("no backend declared in terraform block", path=path)

        _, backend_type, backend_config = backends[0]
        logger.debug("deployment %s uses backend %s with %d remote states", path, backend_type, declared)
        return ParsedDeployment(
            path=path,
            backend_type=backend_type,
            backend_config=backend_config,
            references=references,
            declared_references=declared,
        )

    def _parse_file(self, path: str, filename: str) -> dict[str, Any]:
        logger.debug("parsing %s", filename)
        try:
            with open(filename, encoding="utf-8") as f:
                if filename.endswith(".json"):
                    document = json.load(f)
                else:
                    document = hcl2.load(f)
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigurationParseError(f"reading {os.path.basename(filename)}: {e}", path=path) from e
        except Exception as e:
            # hcl2 surfaces grammar errors as lark exceptions
            raise ConfigurationParseError(f"parsing {os.path.basename(filename)}: {e}", path=path) from e

        if not isinstance(document, dict):
            raise ConfigurationParseError(
                f"parsing {os.path.basename(filename)}: top level is not an object", path=path
            )
        return _normalize(document)

    def _backends(self, document: dict[str, Any]) -> Iterator[tuple[str, Any]]:
        for terraform in _blocks(document.get("terraform")):
            for backend in _blocks(terraform.get("backend")):
                for backend_type, body in backend.items():
                    for item in _blocks(body):
                        yield backend_type, item

    def _remote_states(
        self, document: dict[str, Any], filename: str
    ) -> tuple[int, list[RemoteStateReference]]:
        declared = 0
        references = []
        for data in _blocks(document.get("data")):
            for data_type, named in data.items():
                if data_type != REMOTE_STATE:
                    continue
                for names in _blocks(named):
                    for name, bodies in names.items():
                        for body in _blocks(bodies):
                            declared += 1
                            backend_type = body.get("backend")
                            if not isinstance(backend_type, str) or not backend_type:
                                logger.warning(
                                    "%s: %s %r has no backend attribute", filename, REMOTE_STATE, name
                                )
                                continue
                            references.append(
                                RemoteStateReference(
                                    name=name,
                                    backend_type=backend_type,
                                    config=body.get("config"),
                                    filename=filename,
                                )
                            )
        return declared, references
