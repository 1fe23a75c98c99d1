# SPDX-FileCopyrightText: 2026 The Resmap Authors
# SPDX-License-Identifier: Apache-2.0

"""Sandboxed script engine for scripted resource mapping.

Operators write mapping logic in a small, deterministic subset of Python
(close to Starlark) and the engine compiles it once with RestrictedPython::

    def map_resource(attrs):
        return MonitoredResource(
            type="generic_task",
            labels={
                "location": attrs.get("cloud.region", "global"),
                "namespace": attrs.get("service.namespace", ""),
                "job": attrs.get("service.name", ""),
                "task_id": attrs.get("service.instance.id", ""),
            },
        )

Sandbox rules:

- No ``import``, ``while``, ``try``, ``with``, ``class``, ``global``,
  ``nonlocal``, generators or ``async``. Loops only run over finite values.
- Only safe builtins; no file, process or network access.
- Host names: ``MonitoredResource(type, labels)`` and ``fail(*args)``.
- Module-level values are frozen once the script has loaded, including
  values captured by closures and default arguments, so calls cannot leave
  state behind for later calls. Module-level iterators and bound mutating
  methods are rejected at load.
- Every load and call runs under a step budget (traced source lines) and a
  wall-clock deadline. Operations whose cost is not bounded by the line
  count (``**``, ``*`` repetition, ``<<``, ``%`` formatting, padding
  methods, ``pow``) check the size of their result before running.

Concurrency: calls share only frozen state and each call counts its steps
on its own thread, so one compiled script serves concurrent callers
without a lock.
"""

from __future__ import annotations

import ast
import builtins
import collections.abc
import inspect
import logging
import operator
import re
import sys
import time
import types
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, FrozenSet, Iterable, Iterator, Mapping, Sequence

from RestrictedPython import compile_restricted, limited_builtins, safe_builtins
from RestrictedPython.Eval import default_guarded_getitem, default_guarded_getiter
from RestrictedPython.Guards import (
    full_write_guard,
    guarded_iter_unpack_sequence,
    guarded_unpack_sequence,
    safer_getattr,
)
from RestrictedPython.PrintCollector import PrintCollector
from RestrictedPython.transformer import RestrictingNodeTransformer

from resmap.errors import ConfigurationError, ScriptBudgetExceeded, ScriptInvocationError
from resmap.models.identity import MonitoredResourceIdentity

logger = logging.getLogger(__name__)

MAP_FUNCTION_NAME = "map_resource"
CONSTRUCTOR_NAME = "MonitoredResource"
SCRIPT_FILENAME = "<map_resource script>"
DEFAULT_MAX_STEPS = 100_000
DEFAULT_MAX_SECONDS = 1.0

# Upper bounds for values a single expression may build.
MAX_INT_BITS = 1 << 16
MAX_SEQUENCE_LENGTH = 1_000_000


# =========================================================================
# Engine interface
# =========================================================================


@dataclass(frozen=True)
class CompiledScript:
    """A loaded script: its source and the ``map_resource`` function."""

    source: str
    function: Callable[[Dict[str, str]], Any] = field(repr=False)


class ScriptEngine(ABC):
    """Compile once, invoke per resource."""

    @abstractmethod
    def compile(self, source: str) -> CompiledScript:
        """Load *source*; raise :class:`ConfigurationError` if unusable."""

    @abstractmethod
    def invoke(self, program: CompiledScript, attributes: Mapping[str, str]) -> MonitoredResourceIdentity:
        """Run ``map_resource``; raise :class:`ScriptInvocationError` on failure."""


# =========================================================================
# Host builtins
# =========================================================================


def monitored_resource(type: Any, labels: Any) -> MonitoredResourceIdentity:  # noqa: A002
    """``MonitoredResource(type, labels)`` as seen by scripts."""
    resource_type = type
    if not isinstance(resource_type, str):
        raise ScriptInvocationError(
            f"{CONSTRUCTOR_NAME}: type must be a str, got {_type_name(resource_type)}"
        )
    if not isinstance(labels, Mapping):
        raise ScriptInvocationError(
            f"{CONSTRUCTOR_NAME}: labels must be a dict of str keys and values, got {_type_name(labels)}",
            resource_type=resource_type,
        )

    label_map: Dict[str, str] = {}
    for key, value in labels.items():
        if not isinstance(key, str) or not isinstance(value, str):
            raise ScriptInvocationError(
                f"{CONSTRUCTOR_NAME}: labels must be a dict of str keys and values",
                resource_type=resource_type,
                key=str(key),
            )
        label_map[key] = value

    if not resource_type:
        raise ScriptInvocationError(f"{CONSTRUCTOR_NAME}: type must not be empty")
    return MonitoredResourceIdentity(type=resource_type, labels=label_map)


def fail(*args: Any) -> None:
    """``fail(*args)``: abort the current call with a message."""
    raise ScriptInvocationError("fail: " + " ".join(str(arg) for arg in args))


def _type_name(value: Any) -> str:
    return value.__class__.__name__


# =========================================================================
# Size guards
# =========================================================================

_PRINTF_WIDTH = re.compile(r"%[-+ #0]*(\d*)(?:\.(\d*))?")


def _too_large(detail: str) -> ScriptBudgetExceeded:
    return ScriptBudgetExceeded(f"script exceeded its size budget: {detail}")


def _check_pow(base: Any, exponent: Any) -> None:
    if isinstance(base, int) and isinstance(exponent, int) and exponent > 0 and abs(base) > 1:
        if exponent * abs(base).bit_length() > MAX_INT_BITS:
            raise _too_large(f"exponent {exponent} is too large")


def _check_repeat(left: Any, right: Any) -> None:
    for sequence, count in ((left, right), (right, left)):
        if isinstance(sequence, (str, bytes, list, tuple)) and isinstance(count, int):
            if len(sequence) * count > MAX_SEQUENCE_LENGTH:
                raise _too_large(f"repeat count {count} is too large")
            return
    if isinstance(left, int) and isinstance(right, int):
        if left.bit_length() + right.bit_length() > MAX_INT_BITS:
            raise _too_large("integer product is too large")


def _check_lshift(value: Any, shift: Any) -> None:
    if isinstance(value, int) and isinstance(shift, int) and value and shift > 0:
        if value.bit_length() + shift > MAX_INT_BITS:
            raise _too_large(f"shift by {shift} is too large")


def _check_format(template: Any, args: Any) -> None:
    if not isinstance(template, str):
        return
    for width, precision in _PRINTF_WIDTH.findall(template):
        for number in (width, precision):
            if number and int(number) > MAX_SEQUENCE_LENGTH:
                raise _too_large(f"format width {number} is too large")
    if "*" in template:
        values = args if isinstance(args, tuple) else (args,)
        for value in values:
            if isinstance(value, int) and value > MAX_SEQUENCE_LENGTH:
                raise _too_large(f"format width {value} is too large")


_BINARY_OPERATORS: Dict[str, Callable[[Any, Any], Any]] = {
    "**": operator.pow,
    "*": operator.mul,
    "<<": operator.lshift,
    "%": operator.mod,
}

_SIZE_CHECKS: Dict[str, Callable[[Any, Any], None]] = {
    "**": _check_pow,
    "*": _check_repeat,
    "<<": _check_lshift,
    "%": _check_format,
}


def _binop(op: str, left: Any, right: Any) -> Any:
    _SIZE_CHECKS[op](left, right)
    return _BINARY_OPERATORS[op](left, right)


def _guarded_pow(base: Any, exponent: Any, modulus: Any = None) -> Any:
    if modulus is None:
        _check_pow(base, exponent)
        return pow(base, exponent)
    return pow(base, exponent, modulus)


_PADDING_METHODS: FrozenSet[str] = frozenset({"center", "expandtabs", "ljust", "rjust", "zfill"})


def _bounded_padding(value: Sequence[Any], name: str, method: Callable[..., Any]) -> Callable[..., Any]:
    def padded(*args: Any, **kwargs: Any) -> Any:
        width = args[0] if args else kwargs.get("width", kwargs.get("tabsize", 0))
        if isinstance(width, int):
            size = width * len(value) if name == "expandtabs" else width
            if size > MAX_SEQUENCE_LENGTH:
                raise _too_large(f"{name} width {width} is too large")
        return method(*args, **kwargs)

    return padded


class _SizeGuardingTransformer(RestrictingNodeTransformer):
    """RestrictedPython policy that routes size-sensitive operators through ``_binop_``."""

    _GUARDED = {ast.Pow: "**", ast.Mult: "*", ast.LShift: "<<", ast.Mod: "%"}

    def visit_BinOp(self, node: ast.BinOp) -> ast.AST:
        node = self.node_contents_visit(node)
        symbol = self._GUARDED.get(type(node.op))
        if symbol is None:
            return node
        call = ast.Call(
            func=ast.Name(id="_binop_", ctx=ast.Load()),
            args=[ast.Constant(value=symbol), node.left, node.right],
            keywords=[],
        )
        return ast.fix_missing_locations(ast.copy_location(call, node))


# =========================================================================
# Sandbox environment
# =========================================================================

_FORBIDDEN_NODES: Dict[type, str] = {
    ast.While: "while loops",
    ast.Try: "try statements",
    ast.With: "with statements",
    ast.ClassDef: "class definitions",
    ast.Global: "global statements",
    ast.Nonlocal: "nonlocal statements",
    ast.Import: "imports",
    ast.ImportFrom: "imports",
    ast.Yield: "generators",
    ast.YieldFrom: "generators",
    ast.AsyncFunctionDef: "async functions",
    ast.AsyncFor: "async loops",
    ast.AsyncWith: "async with statements",
    ast.Await: "await expressions",
}
if hasattr(ast, "TryStar"):
    _FORBIDDEN_NODES[ast.TryStar] = "try statements"

_EXTRA_BUILTINS = (
    "all",
    "any",
    "dict",
    "enumerate",
    "filter",
    "frozenset",
    "map",
    "max",
    "min",
    "reversed",
    "set",
    "sum",
)

_SCRIPT_BUILTINS: Dict[str, Any] = dict(safe_builtins)
_SCRIPT_BUILTINS.update(limited_builtins)
_SCRIPT_BUILTINS.update({name: getattr(builtins, name) for name in _EXTRA_BUILTINS})
_SCRIPT_BUILTINS["pow"] = _guarded_pow
for _name in ("setattr", "delattr", "__build_class__"):
    _SCRIPT_BUILTINS.pop(_name, None)

_MUTATING_METHODS: FrozenSet[str] = frozenset(
    {
        "add",
        "append",
        "clear",
        "difference_update",
        "discard",
        "extend",
        "insert",
        "intersection_update",
        "pop",
        "popitem",
        "remove",
        "reverse",
        "setdefault",
        "sort",
        "symmetric_difference_update",
        "update",
    }
)

# Augmented assignment rebinds; it never mutates the target in place.
_AUGMENTED_OPERATORS: Dict[str, Callable[[Any, Any], Any]] = {
    "+=": operator.add,
    "-=": operator.sub,
    "*=": operator.mul,
    "/=": operator.truediv,
    "//=": operator.floordiv,
    "%=": operator.mod,
    "**=": operator.pow,
    "<<=": operator.lshift,
    ">>=": operator.rshift,
    "&=": operator.and_,
    "|=": operator.or_,
    "^=": operator.xor,
}


def _apply(function: Any, *args: Any, **kwargs: Any) -> Any:
    return function(*args, **kwargs)


def _inplacevar(op: str, target: Any, value: Any) -> Any:
    try:
        fn = _AUGMENTED_OPERATORS[op]
    except KeyError:
        raise TypeError(f"unsupported augmented assignment {op}") from None
    check = _SIZE_CHECKS.get(op[:-1])
    if check is not None:
        check(target, value)
    return fn(target, value)


def _cell_values(cells: Iterable[Any]) -> Iterator[Any]:
    for cell in cells:
        try:
            yield cell.cell_contents
        except ValueError:
            # Empty cell: the captured name was never assigned.
            continue


class _FrozenValues:
    """Containers reachable from a loaded script's module globals."""

    def __init__(self) -> None:
        self._ids: FrozenSet[int] = frozenset()

    def freeze(self, values: Iterable[Any]) -> None:
        """Record every container reachable from *values*.

        Walks containers, identity labels, function defaults and closure
        cells. Raises :class:`ConfigurationError` for module-level state that
        cannot be frozen: iterators and methods bound to a container.
        """
        seen = set()
        stack = list(values)
        while stack:
            value = stack.pop()
            if isinstance(value, (dict, list, set)):
                if id(value) in seen:
                    continue
                seen.add(id(value))
                stack.extend(value.values() if isinstance(value, dict) else value)
            elif isinstance(value, tuple):
                stack.extend(value)
            elif isinstance(value, MonitoredResourceIdentity):
                stack.append(value.labels)
            elif isinstance(value, types.FunctionType):
                if id(value) in seen:
                    continue
                seen.add(id(value))
                stack.extend(value.__defaults__ or ())
                stack.extend((value.__kwdefaults__ or {}).values())
                stack.extend(_cell_values(value.__closure__ or ()))
            elif isinstance(value, types.BuiltinMethodType) and isinstance(
                getattr(value, "__self__", None), (dict, list, set)
            ):
                raise ConfigurationError(
                    f"mapping script keeps a bound {_type_name(value.__self__)}.{value.__name__} "
                    "method at module level"
                )
            elif isinstance(value, collections.abc.Iterator):
                raise ConfigurationError(
                    f"mapping script keeps a {_type_name(value)} iterator at module level"
                )
        self._ids = frozenset(seen)

    def _check(self, value: Any) -> None:
        if id(value) in self._ids:
            raise TypeError(f"cannot modify frozen {_type_name(value)}")

    def write(self, value: Any) -> Any:
        self._check(value)
        return full_write_guard(value)

    def getattr(self, value: Any, name: str, default: Any = None) -> Any:
        if name in _MUTATING_METHODS:
            if isinstance(value, type):
                raise TypeError(f"{value.__name__}.{name} is not available in mapping scripts")
            self._check(value)
        attribute = safer_getattr(value, name, default)
        if name in _PADDING_METHODS and isinstance(value, (str, bytes)):
            return _bounded_padding(value, name, attribute)
        return attribute


class _StepBudget:
    """Counts source lines executed in script frames on the current thread.

    Also enforces a wall-clock deadline, checked on every counted line.
    """

    __slots__ = ("limit", "steps", "max_seconds", "deadline")

    def __init__(self, limit: int, max_seconds: float) -> None:
        self.limit = limit
        self.steps = 0
        self.max_seconds = max_seconds
        self.deadline = time.monotonic() + max_seconds

    def trace_calls(self, frame: types.FrameType, event: str, arg: Any) -> Any:
        if frame.f_code.co_filename != SCRIPT_FILENAME:
            return None
        return self.trace_lines

    def trace_lines(self, frame: types.FrameType, event: str, arg: Any) -> Any:
        if event == "line":
            self.steps += 1
            if self.steps > self.limit:
                raise ScriptBudgetExceeded(f"script exceeded its budget of {self.limit} steps")
            if time.monotonic() > self.deadline:
                raise ScriptBudgetExceeded(f"script exceeded its time budget of {self.max_seconds}s")
        return self.trace_lines


@contextmanager
def _step_budget(limit: int, max_seconds: float) -> Iterator[_StepBudget]:
    budget = _StepBudget(limit, max_seconds)
    previous = sys.gettrace()
    sys.settrace(budget.trace_calls)
    try:
        yield budget
    finally:
        sys.settrace(previous)


def _check_dialect(tree: ast.AST) -> None:
    for node in ast.walk(tree):
        reason = _FORBIDDEN_NODES.get(type(node))
        if reason is not None:
            raise ConfigurationError(
                f"{reason} are not allowed in mapping scripts (line {getattr(node, 'lineno', '?')})"
            )
        if isinstance(node, ast.FormattedValue) and node.format_spec is not None:
            _check_format_spec(node)


def _check_format_spec(node: ast.FormattedValue) -> None:
    for part in ast.walk(node.format_spec):
        if isinstance(part, ast.FormattedValue):
            raise ConfigurationError(
                f"computed format specs are not allowed in mapping scripts (line {node.lineno})"
            )
        if isinstance(part, ast.Constant) and isinstance(part.value, str):
            for number in re.findall(r"\d+", part.value):
                if int(number) > MAX_SEQUENCE_LENGTH:
                    raise ConfigurationError(
                        f"format width {number} is too large in mapping scripts (line {node.lineno})"
                    )


def _takes_one_positional(function: types.FunctionType) -> bool:
    params = list(inspect.signature(function).parameters.values())
    return len(params) == 1 and params[0].kind in (
        inspect.Parameter.POSITIONAL_ONLY,
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
    )


def _validate_limits(max_steps: Any, max_seconds: Any) -> None:
    if isinstance(max_steps, bool) or not isinstance(max_steps, int) or max_steps <= 0:
        raise ConfigurationError(f"script step budget must be a positive integer, got {max_steps!r}")
    if isinstance(max_seconds, bool) or not isinstance(max_seconds, (int, float)) or max_seconds <= 0:
        raise ConfigurationError(f"script time budget must be a positive number of seconds, got {max_seconds!r}")


# =========================================================================
# RestrictedPython engine
# =========================================================================


class RestrictedPythonEngine(ScriptEngine):
    """Script engine backed by RestrictedPython."""

    def __init__(self, max_steps: int = DEFAULT_MAX_STEPS, max_seconds: float = DEFAULT_MAX_SECONDS) -> None:
        _validate_limits(max_steps, max_seconds)
        self.max_steps = max_steps
        self.max_seconds = max_seconds

    def compile(self, source: str) -> CompiledScript:
        if not isinstance(source, str) or not source.strip():
            raise ConfigurationError("mapping script is empty")

        try:
            tree = ast.parse(source, filename=SCRIPT_FILENAME)
        except SyntaxError as exc:
            raise ConfigurationError(f"mapping script does not parse: {exc}") from exc
        _check_dialect(tree)

        try:
            code = compile_restricted(source, filename=SCRIPT_FILENAME, mode="exec", policy=_SizeGuardingTransformer)
        except SyntaxError as exc:
            raise ConfigurationError(f"mapping script rejected by sandbox: {exc}") from exc

        frozen = _FrozenValues()
        host_names = {CONSTRUCTOR_NAME: monitored_resource, "fail": fail}
        env: Dict[str, Any] = {
            "__builtins__": _SCRIPT_BUILTINS,
            "__name__": "map_resource_script",
            "_getattr_": frozen.getattr,
            "_getitem_": default_guarded_getitem,
            "_getiter_": default_guarded_getiter,
            "_iter_unpack_sequence_": guarded_iter_unpack_sequence,
            "_unpack_sequence_": guarded_unpack_sequence,
            "_write_": frozen.write,
            "_inplacevar_": _inplacevar,
            "_apply_": _apply,
            "_binop_": _binop,
            "_print_": PrintCollector,
            **host_names,
        }
        reserved = set(env)

        try:
            with _step_budget(self.max_steps, self.max_seconds):
                exec(code, env)  # noqa: S102
        except Exception as exc:
            raise ConfigurationError(f"mapping script failed to load: {exc}") from exc

        function = env.get(MAP_FUNCTION_NAME)
        if not isinstance(function, types.FunctionType):
            raise ConfigurationError(f"mapping script did not declare a function named {MAP_FUNCTION_NAME}")
        if not _takes_one_positional(function):
            raise ConfigurationError(f"{MAP_FUNCTION_NAME} must take exactly one positional argument")

        frozen.freeze(value for name, value in env.items() if name not in reserved)
        logger.debug("Loaded mapping script (%d bytes)", len(source))
        return CompiledScript(source=source, function=function)

    def invoke(self, program: CompiledScript, attributes: Mapping[str, str]) -> MonitoredResourceIdentity:
        argument = dict(attributes)
        try:
            with _step_budget(self.max_steps, self.max_seconds):
                result = program.function(argument)
        except ScriptInvocationError:
            raise
        except Exception as exc:
            raise ScriptInvocationError(f"error evaluating {MAP_FUNCTION_NAME}: {exc}") from exc

        if not isinstance(result, MonitoredResourceIdentity):
            raise ScriptInvocationError(
                f"{MAP_FUNCTION_NAME} must return a {CONSTRUCTOR_NAME}(...) value, got {_type_name(result)}"
            )
        return result
