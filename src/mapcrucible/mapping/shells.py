"""Allocation of empty target instances ("shells").

Cache-aware mappers register the target object before populating it, so they
need an instance that exists before any of its field values do. The helpers
here allocate such an instance without calling ``__init__`` or running
validation, and assign fields on it afterwards.

Supported target kinds:
    - SQLAlchemy mapped classes (instrumentation state is initialised)
    - pydantic models
    - dataclasses, attrs classes and plain classes
"""

from typing import Any, TypeVar, get_origin

import pydantic
import sqlalchemy
import sqlalchemy.orm

from mapcrucible.mapping.annotations import unwrap_annotation

_T = TypeVar("_T")


def new_shell(tp: type[_T]) -> _T:
    """Allocate an instance of ``tp`` without initialising its fields.

    Args:
        tp: The target class.

    Returns:
        An empty instance, ready to be registered and then populated.

    Raises:
        TypeError: If ``tp`` is not a class.
    """
    tp = unwrap_annotation(tp)
    if get_origin(tp) is not None or not isinstance(tp, type):
        raise TypeError(f"Cannot allocate a shell for non-class type {tp!r}")

    mapper = sqlalchemy.inspect(tp, raiseerr=False)
    if mapper is not None:
        # Attribute instrumentation is only installed once mappers are configured.
        if not mapper.configured:
            sqlalchemy.orm.configure_mappers()
        return mapper.class_manager.new_instance()

    if issubclass(tp, pydantic.BaseModel):
        return tp.model_construct()

    return tp.__new__(tp)


def set_field(instance: Any, name: str, value: Any) -> None:
    """Assign a field on a shell produced by :func:`new_shell`.

    Frozen dataclasses, frozen attrs classes and pydantic models reject normal
    assignment, so this goes through ``object.__setattr__``. Data descriptors
    (SQLAlchemy instrumented attributes, properties with setters) still run.
    """
    object.__setattr__(instance, name, value)
    if isinstance(instance, pydantic.BaseModel):
        instance.__pydantic_fields_set__.add(name)
