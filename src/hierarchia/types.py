"""Entity, Field, and Ref types for Hierarchia."""

from __future__ import annotations

import sys
import types
import typing
from dataclasses import dataclass
from typing import Any, ClassVar, ForwardRef, Generic, TypeVar, get_args, get_origin

from pydantic import BaseModel, create_model

T = TypeVar("T")
E = TypeVar("E")

_SENTINEL = object()


class Ref(Generic[E]):
    """Annotation marker for a field that references another entity.

    ``Field[Ref[Collection]]`` holds one target identifier,
    ``Field[list[Ref["Collection"]]]`` holds several. A string argument names
    the target entity type, which is how a type refers to itself.
    """


@dataclass(frozen=True)
class EntityRef:
    """A resolved reference value: target entity type and identifier."""

    entity_type_id: str
    target_id: str

    def __str__(self) -> str:
        return f"{self.entity_type_id}:{self.target_id}"


class Field(Generic[T]):
    """Field descriptor for Entity schemas."""

    def __init__(
        self,
        default: Any = _SENTINEL,
        *,
        default_factory: Any | None = None,
        primary_key: bool = False,
        label: str | None = None,
    ) -> None:
        self.default = default
        self.default_factory = default_factory
        self.primary_key = primary_key
        self.label = label
        self.name: str = ""
        self.annotation: Any = None

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, obj: Any, objtype: type | None = None) -> Any:
        if obj is None:
            return self
        return obj.__dict__.get(self.name, _SENTINEL)

    def __set__(self, obj: Any, value: Any) -> None:
        obj.__dict__[self.name] = value

    def has_default(self) -> bool:
        return self.default is not _SENTINEL or self.default_factory is not None

    def get_default(self) -> Any:
        if self.default_factory is not None:
            return self.default_factory()
        if self.default is not _SENTINEL:
            return self.default
        raise ValueError(f"Field '{self.name}' has no default")

    @property
    def display_label(self) -> str:
        return self.label or self.name.replace("_", " ").capitalize()


def _resolve_annotation(ann: Any, module_name: str) -> Any:
    """Resolve string annotations and extract the inner type from Field[T]."""
    if isinstance(ann, str):
        module = sys.modules.get(module_name, None)
        ns = dict(vars(module)) if module else {}
        ns.setdefault("Field", Field)
        ns.setdefault("Ref", Ref)
        try:
            ann = eval(ann, ns)  # noqa: S307
        except Exception:
            return Any

    if get_origin(ann) is Field:
        args = get_args(ann)
        return args[0] if args else Any
    return ann


def _is_union(origin: Any) -> bool:
    return origin is typing.Union or origin is types.UnionType


def ref_target_name(annotation: Any) -> str | None:
    """Return the entity type a (resolved) annotation references, if any."""
    origin = get_origin(annotation)
    if origin is Ref:
        (target,) = get_args(annotation)
        if isinstance(target, ForwardRef):
            return target.__forward_arg__
        if isinstance(target, str):
            return target
        return getattr(target, "__entity_name__", getattr(target, "__name__", str(target)))
    if origin is list:
        args = get_args(annotation)
        return ref_target_name(args[0]) if args else None
    if _is_union(origin):
        for member in get_args(annotation):
            if member is type(None):
                continue
            name = ref_target_name(member)
            if name is not None:
                return name
    return None


def _validation_annotation(annotation: Any) -> Any:
    """Replace Ref[T] with str so pydantic validates reference identifiers."""
    origin = get_origin(annotation)
    if origin is Ref:
        return str
    if origin is list:
        args = get_args(annotation)
        return list[_validation_annotation(args[0])] if args else list
    if _is_union(origin):
        members = tuple(_validation_annotation(a) for a in get_args(annotation))
        return typing.Union[members]  # noqa: UP007
    return annotation


def _collect_fields(cls: type) -> dict[str, Field[Any]]:
    """Collect Field descriptors from class annotations.

    Annotations are kept unresolved here; a type may reference itself, and its
    name is only bound once the class body has finished.
    """
    fields: dict[str, Field[Any]] = {}

    annotations = cls.__dict__.get("__annotations__", {})
    for name, ann in annotations.items():
        is_field_ann = get_origin(ann) is Field
        if isinstance(ann, str) and ann.startswith("Field"):
            is_field_ann = True
        if not is_field_ann:
            continue

        val = cls.__dict__.get(name, _SENTINEL)
        field_desc: Field[Any]
        if isinstance(val, Field):
            field_desc = val
        elif val is None:
            # `parent: Field[Ref["Node"] | None] = None` shorthand
            field_desc = Field(default=None)
        elif val is _SENTINEL:
            field_desc = Field()
        else:
            field_desc = Field(default=val)

        field_desc.name = name
        field_desc.annotation = ann
        fields[name] = field_desc

        if not isinstance(cls.__dict__.get(name), Field):
            setattr(cls, name, field_desc)

    return fields


def _build_pydantic_model(
    model_name: str, annotations: dict[str, Any], fields: dict[str, Field[Any]]
) -> type[BaseModel]:
    """Build a Pydantic model from Field definitions."""
    pydantic_fields: dict[str, Any] = {}
    for name, f in fields.items():
        ann = _validation_annotation(annotations[name])
        if f.default_factory is not None:
            from pydantic import Field as PydanticField

            pydantic_fields[name] = (ann, PydanticField(default_factory=f.default_factory))
        elif f.has_default():
            pydantic_fields[name] = (ann, f.default)
        else:
            pydantic_fields[name] = (ann, ...)

    return create_model(model_name, **pydantic_fields)  # type: ignore[call-overload]


class Entity:
    """Base class for typed entities with automatic validation."""

    __entity_name__: ClassVar[str]
    __entity_label__: ClassVar[str]
    __entity_fields__: ClassVar[tuple[str, ...]]
    _field_definitions: ClassVar[dict[str, Field[Any]]]
    _primary_key_field: ClassVar[str]

    def __init_subclass__(
        cls, name: str | None = None, label: str | None = None, **kwargs: Any
    ) -> None:
        super().__init_subclass__(**kwargs)

        cls.__entity_name__ = name or cls.__name__
        if "-" in cls.__entity_name__:
            # "-" separates the type from the property in relation option keys
            raise TypeError(f"Entity name '{cls.__entity_name__}' must not contain '-'")
        cls.__entity_label__ = label or cls.__entity_name__

        fields = _collect_fields(cls)
        cls._field_definitions = fields
        cls.__entity_fields__ = tuple(fields.keys())

        pk_fields = [n for n, f in fields.items() if f.primary_key]
        if len(pk_fields) == 0:
            raise TypeError(
                f"Entity '{cls.__entity_name__}' must define exactly one Field(primary_key=True)"
            )
        if len(pk_fields) > 1:
            raise TypeError(
                f"Entity '{cls.__entity_name__}' has multiple primary keys: {pk_fields}"
            )
        cls._primary_key_field = pk_fields[0]

    @classmethod
    def field_annotations(cls) -> dict[str, Any]:
        """Resolved value annotations per field, computed on first use."""
        cached = cls.__dict__.get("_resolved_annotations")
        if cached is None:
            cached = {
                name: _resolve_annotation(f.annotation, cls.__module__)
                for name, f in cls._field_definitions.items()
            }
            cls._resolved_annotations = cached
        return cached

    @classmethod
    def _model(cls) -> type[BaseModel]:
        model = cls.__dict__.get("_pydantic_model")
        if model is None:
            model = _build_pydantic_model(
                f"_{cls.__entity_name__}Model", cls.field_annotations(), cls._field_definitions
            )
            cls._pydantic_model = model
        return model

    def __init__(self, **data: Any) -> None:
        validated = self._model()(**data)
        for name in self.__entity_fields__:
            setattr(self, name, getattr(validated, name))

    @property
    def entity_id(self) -> str:
        return str(getattr(self, self._primary_key_field))

    @property
    def entity_type_id(self) -> str:
        return self.__entity_name__

    def ref(self) -> EntityRef:
        return EntityRef(self.__entity_name__, self.entity_id)

    def get(self, name: str) -> Any:
        """Raw value of a declared field."""
        if name not in self.__entity_fields__:
            raise KeyError(f"Entity '{self.__entity_name__}' has no field '{name}'")
        return getattr(self, name)

    def model_dump(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in self.__entity_fields__}

    @classmethod
    def model_validate(cls, data: dict[str, Any]) -> Any:
        return cls(**data)

    def __repr__(self) -> str:
        fields = ", ".join(f"{k}={getattr(self, k)!r}" for k in self.__entity_fields__)
        return f"{self.__class__.__name__}({fields})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, self.__class__):
            return NotImplemented
        return self.model_dump() == other.model_dump()

    def __hash__(self) -> int:
        return hash((self.__entity_name__, self.entity_id))
