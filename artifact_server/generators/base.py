"""Base classes shared by all artifact generators."""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, ClassVar, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from artifact_server.storage.store import KIND_SPECS, ArtifactKind, KindSpec
from artifact_server.utils.exceptions import ValidationError


class CamelModel(BaseModel):
    """Request model accepting camelCase JSON keys (and snake_case names)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RenderConfig(CamelModel):
    """Immutable renderer configuration.

    Subclasses declare every option with its default.  ``legacy_aliases``
    maps extra accepted override keys onto field names.  When
    ``blank_keeps_default`` is false only ``None`` keeps a default, so
    ``0`` and ``""`` are applied as given.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    legacy_aliases: ClassVar[dict[str, str]] = {}
    blank_keeps_default: ClassVar[bool] = True


ConfigT = TypeVar("ConfigT", bound=RenderConfig)


def _is_unset(value: Any, blank_keeps_default: bool = True) -> bool:
    if value is None:
        return True
    if not blank_keeps_default:
        return False
    if value == "":
        return True
    # Numeric zero means "use the default"; bools are ints but never unset.
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value == 0


def merge_config(defaults: ConfigT, overrides: Mapping[str, Any] | None) -> ConfigT:
    """Return a new config with *overrides* applied on top of *defaults*.

    Neither argument is modified.  Unknown keys are ignored; ``None`` (and,
    unless the config opts out, empty strings and numeric zero) keeps the
    default value.

    Raises
    ------
    ValidationError
        When an override has the wrong type or an unsupported value.
    """
    cls = type(defaults)
    lookup: dict[str, str] = dict(cls.legacy_aliases)
    for name, info in cls.model_fields.items():
        lookup[name] = name
        if info.alias:
            lookup[info.alias] = name

    update = {
        lookup[key]: value
        for key, value in (overrides or {}).items()
        if key in lookup and not _is_unset(value, cls.blank_keeps_default)
    }
    try:
        return cls.model_validate({**defaults.model_dump(), **update})
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(p) for p in first["loc"])
        raise ValidationError(f"Invalid configuration '{field}': {first['msg']}") from exc


class BaseGenerator(ABC):
    """A render collaborator: turns a validated request into file bytes."""

    kind: ClassVar[ArtifactKind]
    request_model: ClassVar[type[CamelModel]]

    @property
    def spec(self) -> KindSpec:
        return KIND_SPECS[self.kind]

    @property
    def extension(self) -> str:
        return self.spec.extension

    @property
    def content_type(self) -> str:
        return self.spec.content_type

    def validate(self, payload: Any) -> None:
        """Shape checks beyond the request model.  Raises ``ValidationError``."""

    @abstractmethod
    def build(self, payload: Any) -> bytes:
        """Build the file synchronously.  Runs on a worker thread."""

    async def render(self, payload: Any) -> bytes:
        # Office libraries are CPU-bound; keep them off the event loop
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.build, payload)
