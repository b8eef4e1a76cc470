"""Load collection bindings from a YAML file.

File format:

    collections:
      widgets:
        collection: widgets_v2        # store-side name, defaults to the key
        collectionFilters: {archived: false}
        collectionOptions: {fields: {secret: 0}}
        allowView: true
        allowInsert: isEditor         # registered predicate
        beforeInsert: stampCreated    # registered hook
"""

import logging
from dataclasses import dataclass
from pathlib import Path

import yaml

from ironrest.dispatch.registry import RestRegistry
from ironrest.endpoint import EndpointConfig
from ironrest.persistence.config import StoreFactory

logger = logging.getLogger(__name__)


class BindingsError(ValueError):
    """A bindings file is malformed or references unknown hooks."""


@dataclass
class BindingDefinition:
    """One ``collections`` entry of a bindings file."""

    name: str
    collection: str
    config: EndpointConfig


class BindingsLoader:
    """Loads binding definitions from YAML and attaches them to a registry."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self.definitions: list[BindingDefinition] = []

    def load(self) -> list[BindingDefinition]:
        """Parse and validate the file.

        Raises:
            BindingsError: If the file is missing, malformed, or an entry
                has invalid options
        """
        if not self.path.exists():
            raise BindingsError(f"Bindings file not found: {self.path}")

        with open(self.path) as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise BindingsError(f"{self.path}: invalid YAML: {e}") from e

        collections = data.get("collections") if isinstance(data, dict) else None
        if not isinstance(collections, dict):
            raise BindingsError(f"{self.path}: expected a 'collections' mapping")

        definitions = []
        for name, entry in collections.items():
            entry = dict(entry or {})
            collection = entry.pop("collection", None) or name
            try:
                config = EndpointConfig.from_dict(entry)
            except ValueError as e:
                raise BindingsError(f"{self.path}: collection '{name}': {e}") from e
            definitions.append(
                BindingDefinition(
                    name=str(name),
                    collection=str(collection),
                    config=config,
                )
            )

        self.definitions = definitions
        return definitions

    def attach_all(self, registry: RestRegistry, factory: StoreFactory) -> list[str]:
        """Create a store for each definition and attach it. Returns the names."""
        if not self.definitions:
            self.load()

        names = []
        for definition in self.definitions:
            store = factory.create(definition.collection)
            registry.attach(definition.name, store, definition.config)
            names.append(definition.name)

        logger.info("Attached %d collection(s) from %s", len(names), self.path)
        return names
