"""Binding of decoded payloads onto target values.

Targets are dataclass instances, plain objects with class annotations, or
mutable mappings. Each field can carry one tag per namespace (``form``,
``json``, ``xml``); a decoder only consults its own namespace and falls back
to the attribute name when no tag is set. A tag of ``"-"`` hides the field
from that namespace.

Values are checked against the field annotation with pydantic: form fields
and XML text are validated in lax mode (``"42"`` binds to ``int``), decoded
JSON values in strict JSON mode (``"42"`` does not).

Example:
    @dataclass
    class Login:
        username: str = field("", form="user", json="username")
        remember: bool = field(False, form="remember_me")
"""

from __future__ import annotations

import dataclasses
import inspect
import json
import logging
import sys
import typing
from collections.abc import Mapping, MutableMapping, Sequence
from dataclasses import dataclass
from functools import lru_cache
from types import UnionType
from typing import TYPE_CHECKING, Any, ClassVar, Union

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from bodydecode.exceptions import BindingError

if TYPE_CHECKING:
    from xml.etree.ElementTree import Element

NAMESPACES = ("form", "json", "xml")

logger = logging.getLogger(__name__)

_METADATA_KEY = "bodydecode"
_SKIP = object()


def field(
    default: Any = dataclasses.MISSING,
    *,
    default_factory: Any = dataclasses.MISSING,
    form: str | None = None,
    json: str | None = None,
    xml: str | None = None,
    required: bool = False,
    **kwargs: Any,
) -> Any:
    """Declare a dataclass field with per-namespace binding tags.

    Args:
        default: Default value, as for :func:`dataclasses.field`
        default_factory: Default factory, as for :func:`dataclasses.field`
        form: Key used by the urlencoded and multipart decoders
        json: Key used by the JSON decoder
        xml: Element name used by the XML decoder (``"@name"`` for attributes)
        required: Fail binding when the key is absent from the payload
        **kwargs: Passed through to :func:`dataclasses.field`

    Returns:
        A :class:`dataclasses.Field` carrying the tags in its metadata
    """
    tags = {
        namespace: tag
        for namespace, tag in (("form", form), ("json", json), ("xml", xml))
        if tag is not None
    }
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[_METADATA_KEY] = {"tags": tags, "required": required}
    return dataclasses.field(
        default=default, default_factory=default_factory, metadata=metadata, **kwargs
    )


@dataclass(frozen=True)
class FieldSpec:
    """How one attribute of a target type is reached in one namespace."""

    attr: str
    key: str
    annotation: Any
    required: bool = False


def type_hints(target_type: type) -> dict[str, Any]:
    """Resolve the annotations of ``target_type`` and its bases.

    When some names cannot be resolved (classes local to a function under
    postponed evaluation), each annotation is resolved on its own and only
    the unresolvable ones bind as ``Any``.
    """
    try:
        return typing.get_type_hints(target_type)
    except NameError:
        pass

    hints: dict[str, Any] = {}
    for klass in reversed(target_type.__mro__):
        module = sys.modules.get(klass.__module__)
        globalns = dict(vars(module)) if module is not None else {}
        localns = dict(vars(klass))
        for name, hint in inspect.get_annotations(klass).items():
            hints[name] = _evaluate(hint, globalns, localns)
    return hints


def _evaluate(hint: Any, globalns: dict[str, Any], localns: dict[str, Any]) -> Any:
    if not isinstance(hint, str):
        return hint
    try:
        return eval(hint, globalns, localns)  # noqa: S307
    except NameError as e:
        logger.debug(f"Binding annotation {hint!r} as Any: {e}")
        return Any


@lru_cache(maxsize=256)
def fields_of(target_type: type, namespace: str) -> dict[str, FieldSpec]:
    """Return the bindable fields of ``target_type`` keyed by their tag.

    Args:
        target_type: Dataclass or annotated class
        namespace: One of ``form``, ``json``, ``xml``

    Returns:
        Mapping from payload key to :class:`FieldSpec`
    """
    hints = type_hints(target_type)
    specs: dict[str, FieldSpec] = {}

    if dataclasses.is_dataclass(target_type):
        for f in dataclasses.fields(target_type):
            options = f.metadata.get(_METADATA_KEY, {})
            tag = options.get("tags", {}).get(namespace)
            if tag == "-":
                continue
            key = tag or f.name
            specs[key] = FieldSpec(
                attr=f.name,
                key=key,
                annotation=hints.get(f.name, Any),
                required=options.get("required", False),
            )
        return specs

    for name, hint in hints.items():
        if name.startswith("_") or typing.get_origin(hint) is ClassVar:
            continue
        specs[name] = FieldSpec(attr=name, key=name, annotation=hint)
    return specs


# ============================================================================
# Validation
# ============================================================================


@lru_cache(maxsize=512)
def type_adapter(annotation: Any) -> TypeAdapter:
    return TypeAdapter(annotation)


def validate_string_value(value: str | list[str], annotation: Any, path: str) -> Any:
    """Validate form or XML text against ``annotation`` in lax mode.

    Raises:
        BindingError: If the value does not validate, with ``field`` set to
            the path of the offending value
    """
    if annotation in (Any, object):
        return value
    try:
        return type_adapter(annotation).validate_python(value)
    except PydanticValidationError as e:
        raise _binding_error(e, path) from e


def validate_json_value(value: Any, annotation: Any, path: str) -> Any:
    """Validate a decoded JSON value against ``annotation`` in strict JSON mode.

    Raises:
        BindingError: If the value does not validate
    """
    if annotation in (Any, object):
        return value
    try:
        return type_adapter(annotation).validate_json(json.dumps(value), strict=True)
    except PydanticValidationError as e:
        raise _binding_error(e, path) from e


def _binding_error(error: PydanticValidationError, path: str) -> BindingError:
    detail = error.errors(include_url=False)[0]
    where = path + "".join(
        f"[{part}]" if isinstance(part, int) else f".{part}" for part in detail["loc"]
    )
    return BindingError(
        f"invalid value for field {where!r}: {detail['msg']}", field=where, cause=error
    )


@lru_cache(maxsize=512)
def _accepts_empty(annotation: Any) -> bool:
    try:
        validate_string_value("", annotation, "")
    except BindingError:
        return False
    return True


# ============================================================================
# Annotation shapes
# ============================================================================


def _strip_none(annotation: Any) -> Any:
    if typing.get_origin(annotation) in (Union, UnionType):
        args = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def _struct_type(annotation: Any) -> type | None:
    """The dataclass behind ``annotation`` (or ``Optional`` of it)."""
    tp = _strip_none(annotation)
    if isinstance(tp, type) and dataclasses.is_dataclass(tp):
        return tp
    return None


def _sequence_info(annotation: Any) -> tuple[type, Any] | None:
    """Return ``(container, item type)`` for sequence annotations."""
    tp = _strip_none(annotation)
    origin = typing.get_origin(tp) or tp
    if origin is Sequence:
        origin = list
    if origin not in (list, set, frozenset, tuple):
        return None
    args = [arg for arg in typing.get_args(tp) if arg is not Ellipsis]
    return origin, (args[0] if args else Any)


def _instantiate(annotation: type, path: str) -> Any:
    try:
        return annotation()
    except TypeError as e:
        msg = f"cannot create {annotation.__name__} for field {path!r}"
        raise BindingError(msg, field=path, cause=e) from e


def _check_required(
    specs: dict[str, FieldSpec], present: set[str], prefix: str
) -> None:
    for key, spec in specs.items():
        if spec.required and key not in present:
            path = prefix + key
            raise BindingError(f"missing required field {path!r}", field=path)


def convert_strings(values: Sequence[str], annotation: Any, path: str) -> Any:
    """Validate the string values of one key against ``annotation``.

    Sequence fields take every value, other fields the first one. Empty
    strings that ``annotation`` does not accept are dropped, so an empty
    value leaves a non-string field unchanged.
    """
    info = _sequence_info(annotation)
    if info is not None:
        _, item_type = info
        kept = [v for v in values if v != "" or _accepts_empty(item_type)]
        return validate_string_value(kept, annotation, path)
    if not values or (values[0] == "" and not _accepts_empty(annotation)):
        return _SKIP
    return validate_string_value(values[0], annotation, path)


# ============================================================================
# Multi-valued string mappings (forms)
# ============================================================================


def bind_values(
    target: Any,
    values: Mapping[str, Sequence[str]],
    namespace: str = "form",
    ignore_unknown: bool = True,
    _prefix: str = "",
) -> Any:
    """Bind a multi-valued string mapping onto ``target``.

    Scalar fields take the first value, sequence fields take all of them.
    Dotted keys (``address.city``) reach fields of nested dataclasses.

    Args:
        target: Object to populate in place
        values: Mapping from key to list of string values
        namespace: Tag namespace to consult
        ignore_unknown: Skip keys that match no field instead of failing

    Returns:
        The target

    Raises:
        BindingError: On conversion failure, missing required fields, or
            unknown keys when ``ignore_unknown`` is False
    """
    if isinstance(target, MutableMapping):
        for key, vals in values.items():
            target[key] = vals[0] if len(vals) == 1 else list(vals)
        return target

    specs = fields_of(type(target), namespace)
    nested: dict[str, dict[str, Sequence[str]]] = {}
    present: set[str] = set()

    for key, vals in values.items():
        spec = specs.get(key)
        if spec is not None:
            if any(v != "" for v in vals):
                present.add(key)
            value = convert_strings(vals, spec.annotation, _prefix + key)
            if value is not _SKIP:
                setattr(target, spec.attr, value)
            continue

        head, dot, tail = key.partition(".")
        spec = specs.get(head)
        if dot and spec is not None and _struct_type(spec.annotation) is not None:
            nested.setdefault(head, {})[tail] = vals
            continue

        if not ignore_unknown:
            path = _prefix + key
            raise BindingError(f"unknown field {path!r}", field=path)

    for head, sub_values in nested.items():
        spec = specs[head]
        path = _prefix + head
        child = getattr(target, spec.attr, None)
        if child is None:
            child = _instantiate(_struct_type(spec.annotation), path)
        bind_values(child, sub_values, namespace, ignore_unknown, f"{path}.")
        setattr(target, spec.attr, child)
        present.add(head)

    _check_required(specs, present, _prefix)
    return target


# ============================================================================
# Decoded objects (JSON)
# ============================================================================


def _type_error(value: Any, expected: str, path: str) -> BindingError:
    msg = f"cannot bind {type(value).__name__} to {expected} for field {path!r}"
    return BindingError(msg, field=path)


def _bind_json_value(value: Any, annotation: Any, path: str, namespace: str) -> Any:
    struct = _struct_type(annotation)
    if struct is not None:
        if not isinstance(value, Mapping):
            raise _type_error(value, struct.__name__, path)
        child = _instantiate(struct, path)
        return bind_object(child, value, namespace, _prefix=f"{path}.")

    info = _sequence_info(annotation)
    if info is not None and _struct_type(info[1]) is not None:
        container, item_type = info
        if not isinstance(value, list):
            raise _type_error(value, container.__name__, path)
        return container(
            _bind_json_value(item, item_type, f"{path}[{index}]", namespace)
            for index, item in enumerate(value)
        )

    return validate_json_value(value, annotation, path)


def bind_object(
    target: Any,
    data: Any,
    namespace: str = "json",
    ignore_unknown: bool = True,
    _prefix: str = "",
) -> Any:
    """Bind a decoded JSON object onto ``target``.

    ``null`` values leave fields unchanged. Unknown keys are ignored unless
    ``ignore_unknown`` is False. Nested dataclasses are bound field by field
    so their own tags apply.
    """
    if not isinstance(data, Mapping):
        msg = f"cannot bind {type(data).__name__} into {type(target).__name__}"
        raise BindingError(msg, field=_prefix.rstrip(".") or None)

    if isinstance(target, MutableMapping):
        target.update(data)
        return target

    specs = fields_of(type(target), namespace)
    present: set[str] = set()
    for key, value in data.items():
        spec = specs.get(key)
        if spec is None:
            if not ignore_unknown:
                path = _prefix + key
                raise BindingError(f"unknown field {path!r}", field=path)
            continue
        if value is None:
            continue
        present.add(key)
        setattr(
            target,
            spec.attr,
            _bind_json_value(value, spec.annotation, _prefix + key, namespace),
        )

    _check_required(specs, present, _prefix)
    return target


# ============================================================================
# XML elements
# ============================================================================


def local_name(tag: str) -> str:
    """Strip the ``{namespace}`` prefix ElementTree puts on qualified names."""
    return tag.rsplit("}", 1)[-1]


def element_text(element: Element) -> str:
    return "".join(element.itertext())


def bind_element(
    target: Any, element: Element, namespace: str = "xml", _prefix: str = ""
) -> Any:
    """Bind the children and attributes of ``element`` onto ``target``.

    The element's own name is not checked. Child elements bind by name,
    ``@name`` tags bind attributes, repeated children fill sequence fields
    and children with sub-elements fill nested dataclasses.
    """
    groups: dict[str, list[Element]] = {}
    for child in element:
        groups.setdefault(local_name(child.tag), []).append(child)

    if isinstance(target, MutableMapping):
        for name, value in element.attrib.items():
            target[f"@{local_name(name)}"] = value
        for name, children in groups.items():
            texts = [element_text(child) for child in children]
            target[name] = texts[0] if len(texts) == 1 else texts
        return target

    specs = fields_of(type(target), namespace)
    present: set[str] = set()
    for key, spec in specs.items():
        path = _prefix + key
        if key.startswith("@"):
            attr_value = _find_attribute(element, key[1:])
            if attr_value is None:
                continue
            present.add(key)
            value = convert_strings([attr_value], spec.annotation, path)
            if value is not _SKIP:
                setattr(target, spec.attr, value)
            continue

        children = groups.get(key)
        if not children:
            continue
        present.add(key)

        struct = _struct_type(spec.annotation)
        info = _sequence_info(spec.annotation)
        if struct is not None:
            child_obj = getattr(target, spec.attr, None)
            if child_obj is None:
                child_obj = _instantiate(struct, path)
            bind_element(child_obj, children[0], namespace, f"{path}.")
            setattr(target, spec.attr, child_obj)
        elif info is not None and _struct_type(info[1]) is not None:
            container, item_type = info
            items = []
            for child in children:
                item = _instantiate(_struct_type(item_type), path)
                items.append(bind_element(item, child, namespace, f"{path}."))
            setattr(target, spec.attr, container(items))
        else:
            value = convert_strings(
                [element_text(child) for child in children], spec.annotation, path
            )
            if value is not _SKIP:
                setattr(target, spec.attr, value)

    _check_required(specs, present, _prefix)
    return target


def _find_attribute(element: Element, name: str) -> str | None:
    if name in element.attrib:
        return element.attrib[name]
    for qualified, value in element.attrib.items():
        if local_name(qualified) == name:
            return value
    return None
