"""Builtin Registry: every native brew, keyed by its source-level name.

Natives are plain functions taking the runtime followed by the arguments.
They raise position-less spills; the evaluator stamps the call site.
"""
import math
from typing import Any, Dict, List

from brewco.runtime import adapters
from brewco.runtime.spills import out_of_range, type_mismatch
from brewco.runtime.values import (
    NativeFunction, debug_repr, display, is_callable, is_number, type_name,
)

REGISTRY: Dict[str, NativeFunction] = {}


def builtin(name: str, arity: int, category: str, signature: str, description: str):
    def register(fn):
        REGISTRY[name] = NativeFunction(name, arity, fn, category, signature, description)
        return fn
    return register


# ── argument checks ──────────────────────────────────────────────────────────

def _number(fname: str, value: Any) -> float:
    if not is_number(value):
        raise type_mismatch(f"{fname}() expects a number, got {type_name(value)}")
    return float(value)


def _whole(fname: str, value: Any) -> int:
    n = _number(fname, value)
    if not n.is_integer():
        raise type_mismatch(f"{fname}() expects a whole number, got {debug_repr(n)}")
    return int(n)


def _count(fname: str, value: Any, length: int) -> int:
    """A character count clamped to [0, length]."""
    n = _number(fname, value)
    if math.isnan(n):
        raise type_mismatch(f"{fname}() expects a number, got NaN")
    return int(max(0, min(n, length)))


def _string(fname: str, value: Any) -> str:
    if not isinstance(value, str):
        raise type_mismatch(f"{fname}() expects a string, got {type_name(value)}")
    return value


def _array(fname: str, value: Any) -> List[Any]:
    if not isinstance(value, list):
        raise type_mismatch(f"{fname}() expects an array, got {type_name(value)}")
    return value


# ── math ─────────────────────────────────────────────────────────────────────

@builtin('root_drip', 1, 'math', 'root_drip(n)', 'Square root')
def root_drip(rt, n):
    n = _number('root_drip', n)
    if n < 0:
        raise type_mismatch("root_drip() cannot take the root of a negative number")
    return math.sqrt(n)


@builtin('absolute_aroma', 1, 'math', 'absolute_aroma(n)', 'Absolute value')
def absolute_aroma(rt, n):
    return abs(_number('absolute_aroma', n))


@builtin('round_up_the_grounds', 1, 'math', 'round_up_the_grounds(n)', 'Round up (ceiling)')
def round_up_the_grounds(rt, n):
    n = _number('round_up_the_grounds', n)
    return float(math.ceil(n)) if math.isfinite(n) else n


@builtin('settle_the_grounds', 1, 'math', 'settle_the_grounds(n)', 'Round down (floor)')
def settle_the_grounds(rt, n):
    n = _number('settle_the_grounds', n)
    return float(math.floor(n)) if math.isfinite(n) else n


@builtin('perfect_temperature', 1, 'math', 'perfect_temperature(n)',
         'Round to the nearest whole number, halves away from zero')
def perfect_temperature(rt, n):
    n = _number('perfect_temperature', n)
    if not math.isfinite(n):
        return n
    return math.copysign(math.floor(abs(n) + 0.5), n)


@builtin('extra_shot', 2, 'math', 'extra_shot(base, exponent)', 'Raise base to a power')
def extra_shot(rt, base, exponent):
    base = _number('extra_shot', base)
    exponent = _number('extra_shot', exponent)
    try:
        return math.pow(base, exponent)
    except OverflowError:
        return math.inf
    except ValueError:
        raise type_mismatch(f"extra_shot() has no real result for {debug_repr(base)} "
                            f"to the power {debug_repr(exponent)}")


@builtin('brew_minimum', 2, 'math', 'brew_minimum(a, b)', 'Smaller of two numbers')
def brew_minimum(rt, a, b):
    return min(_number('brew_minimum', a), _number('brew_minimum', b))


@builtin('brew_maximum', 2, 'math', 'brew_maximum(a, b)', 'Larger of two numbers')
def brew_maximum(rt, a, b):
    return max(_number('brew_maximum', a), _number('brew_maximum', b))


@builtin('coffee_strength_check', 1, 'math', 'coffee_strength_check(n)',
         'Classify a strength as "weak", "medium" or "strong"')
def coffee_strength_check(rt, n):
    n = _number('coffee_strength_check', n)
    if n < 3:
        return 'weak'
    if n < 7:
        return 'medium'
    return 'strong'


# ── strings ──────────────────────────────────────────────────────────────────

@builtin('string_length', 1, 'string', 'string_length(s)', 'Number of characters in a string')
def string_length(rt, s):
    return float(len(_string('string_length', s)))


@builtin('brew_blend', 2, 'string', 'brew_blend(a, b)', 'Concatenate two strings')
def brew_blend(rt, a, b):
    return _string('brew_blend', a) + _string('brew_blend', b)


@builtin('foam_up', 1, 'string', 'foam_up(s)', 'Upper-case a string')
def foam_up(rt, s):
    return _string('foam_up', s).upper()


@builtin('settle_down', 1, 'string', 'settle_down(s)', 'Lower-case a string')
def settle_down(rt, s):
    return _string('settle_down', s).lower()


@builtin('grind_to_pieces', 2, 'string', 'grind_to_pieces(s, delimiter)',
         'Split a string on a delimiter')
def grind_to_pieces(rt, s, delimiter):
    s = _string('grind_to_pieces', s)
    delimiter = _string('grind_to_pieces', delimiter)
    if delimiter == '':
        return list(s)
    return s.split(delimiter)


@builtin('blend_pieces', 2, 'string', 'blend_pieces(pieces, separator)',
         'Join the display forms of an array with a separator')
def blend_pieces(rt, pieces, separator):
    pieces = _array('blend_pieces', pieces)
    return _string('blend_pieces', separator).join(display(p) for p in pieces)


@builtin('first_sip', 2, 'string', 'first_sip(s, n)', 'The first n characters of a string')
def first_sip(rt, s, n):
    s = _string('first_sip', s)
    n = _count('first_sip', n, len(s))
    return s[:n]


@builtin('filter_grounds', 2, 'string', 'filter_grounds(s, start)',
         'The rest of a string from a starting index')
def filter_grounds(rt, s, start):
    s = _string('filter_grounds', s)
    start = _count('filter_grounds', start, len(s))
    return s[start:]


# ── arrays ───────────────────────────────────────────────────────────────────

@builtin('cup_size', 1, 'array', 'cup_size(array)', 'Number of elements in an array')
def cup_size(rt, cup):
    return float(len(_array('cup_size', cup)))


@builtin('add_to_cup', 2, 'array', 'add_to_cup(array, value)',
         'Append a value in place and return the same array')
def add_to_cup(rt, cup, value):
    cup = _array('add_to_cup', cup)
    cup.append(value)
    return cup


@builtin('pour_together', 2, 'array', 'pour_together(a, b)', 'A new array holding a then b')
def pour_together(rt, a, b):
    return _array('pour_together', a) + _array('pour_together', b)


@builtin('extract_brew', 2, 'array', 'extract_brew(array, index)', 'Checked element access')
def extract_brew(rt, cup, index):
    cup = _array('extract_brew', cup)
    i = _whole('extract_brew', index)
    if i < 0 or i >= len(cup):
        raise out_of_range(f"extract_brew() index {i} is outside a cup of size {len(cup)}")
    return cup[i]


@builtin('reverse_pour', 1, 'array', 'reverse_pour(array)', 'A new array in reverse order')
def reverse_pour(rt, cup):
    return list(reversed(_array('reverse_pour', cup)))


# ── type checks ──────────────────────────────────────────────────────────────

@builtin('type_check', 1, 'type', 'type_check(value)', 'Name of the value\'s type')
def type_check(rt, value):
    return type_name(value)


@builtin('is_brew', 1, 'type', 'is_brew(value)', 'True for functions, methods and natives')
def is_brew(rt, value):
    return is_callable(value)


@builtin('is_number', 1, 'type', 'is_number(value)', 'True for numbers')
def is_number_(rt, value):
    return is_number(value)


@builtin('is_string', 1, 'type', 'is_string(value)', 'True for strings')
def is_string(rt, value):
    return isinstance(value, str)


@builtin('is_cup', 1, 'type', 'is_cup(value)', 'True for arrays')
def is_cup(rt, value):
    return isinstance(value, list)


@builtin('is_boolean_bean', 1, 'type', 'is_boolean_bean(value)', 'True for booleans')
def is_boolean_bean(rt, value):
    return isinstance(value, bool)


# ── file I/O ─────────────────────────────────────────────────────────────────

@builtin('sip_file', 1, 'io', 'sip_file(path)', 'Read a whole file as a string')
def sip_file(rt, path):
    return adapters.read_text(rt.resolve_path(_string('sip_file', path)))


@builtin('pour_to_file', 2, 'io', 'pour_to_file(path, content)',
         'Write a string to a file, replacing it; returns true')
def pour_to_file(rt, path, content):
    adapters.write_text(rt.resolve_path(_string('pour_to_file', path)),
                        _string('pour_to_file', content))
    return True


@builtin('recipe_exists', 1, 'io', 'recipe_exists(path)', 'True when the path exists')
def recipe_exists(rt, path):
    return adapters.exists(rt.resolve_path(_string('recipe_exists', path)))


@builtin('scan_pantry', 1, 'io', 'scan_pantry(directory)',
         'Sorted names of .brewco and .coffee files in a directory')
def scan_pantry(rt, directory):
    return adapters.scan(rt.resolve_path(_string('scan_pantry', directory)))


# ── utility ──────────────────────────────────────────────────────────────────

@builtin('print', 1, 'utility', 'print(value)', 'Print a value followed by a newline')
def print_(rt, value):
    rt.console.write_line(display(value))
    return None


@builtin('random_bean', 0, 'utility', 'random_bean()', 'A random number in [0, 1)')
def random_bean(rt):
    return adapters.random_unit()


@builtin('brewing_time', 0, 'utility', 'brewing_time()', 'Seconds since the Unix epoch')
def brewing_time(rt):
    return adapters.now()


@builtin('whats_the_gossip', 1, 'utility', 'whats_the_gossip(prompt)',
         'Show a prompt and read one trimmed line of input (null at end of input)')
def whats_the_gossip(rt, prompt):
    text = display(prompt)
    if text:
        rt.console.write(text)
    line = rt.console.readline()
    return None if line is None else line.strip()


@builtin('coffee_debug', 1, 'utility', 'coffee_debug(value)',
         'Print the debug form of a value and return the value')
def coffee_debug(rt, value):
    rt.console.write_line(f"[debug] {type_name(value)}: {debug_repr(value)}")
    return value


def install(env) -> None:
    """Bind every registry entry into ``env``."""
    for name, native in REGISTRY.items():
        env.define(name, native)


