"""Tests for the Builtin Registry."""
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import io
import math

import pytest
from brewco.runtime.builtins import REGISTRY
from brewco.runtime.interpreter import Runtime


def make_rt(**options):
    return Runtime(**options)


def value_of(src, **options):
    result = make_rt(**options).execute(src)
    assert result.ok, result
    return result.value


def kind_of(src, **options):
    result = make_rt(**options).execute(src)
    assert not result.ok
    return result.kind


class TestRegistry:
    def test_every_entry_has_metadata(self):
        for name, native in REGISTRY.items():
            assert native.name == name
            assert native.signature.startswith(name + "(")
            assert native.category in {"math", "string", "array", "type", "io", "utility"}

    def test_fixed_arity(self):
        assert kind_of("foam_up()") == "TypeMismatch"
        assert kind_of('foam_up("a", "b")') == "TypeMismatch"

    def test_natives_are_brews(self):
        assert value_of("type_check(print)") == "brew"


class TestMath:
    def test_root_drip(self):
        assert value_of("root_drip(16)") == 4

    def test_root_drip_negative(self):
        assert kind_of("root_drip(-4)") == "TypeMismatch"

    def test_rounding(self):
        assert value_of("[round_up_the_grounds(1.2), settle_the_grounds(1.8), perfect_temperature(2.5), perfect_temperature(-2.5)]") == [2, 1, 3, -3]

    def test_rounding_passes_infinity_through(self):
        src = "beans big <- extra_shot(10, 400)\n[round_up_the_grounds(big), settle_the_grounds(-big), perfect_temperature(big)]"
        assert value_of(src) == [math.inf, -math.inf, math.inf]

    def test_rounding_nan(self):
        assert math.isnan(value_of("beans big <- extra_shot(10, 400)\nsettle_the_grounds(big - big)"))

    def test_absolute_and_power(self):
        assert value_of("absolute_aroma(-3)") == 3
        assert value_of("extra_shot(2, 10)") == 1024

    def test_min_max(self):
        assert value_of("[brew_minimum(3, 9), brew_maximum(3, 9)]") == [3, 9]

    @pytest.mark.parametrize("n,expected", [(0, "weak"), (3, "medium"), (6.9, "medium"), (7, "strong")])
    def test_strength_check(self, n, expected):
        assert value_of(f"coffee_strength_check({n})") == expected

    def test_number_expected(self):
        assert kind_of('absolute_aroma("x")') == "TypeMismatch"


class TestStrings:
    def test_length_and_case(self):
        assert value_of('string_length("latte")') == 5
        assert value_of('foam_up("latte")') == "LATTE"
        assert value_of('settle_down("MOCHA")') == "mocha"

    def test_brew_blend(self):
        assert value_of('brew_blend("cara", "mel")') == "caramel"

    def test_brew_blend_needs_strings(self):
        assert kind_of('brew_blend("a", 1)') == "TypeMismatch"

    def test_split_and_join(self):
        assert value_of('grind_to_pieces("a,b,c", ",")') == ["a", "b", "c"]
        assert value_of('blend_pieces(["a", 1, true], "-")') == "a-1-true"

    def test_prefix_suffix(self):
        assert value_of('first_sip("espresso", 3)') == "esp"
        assert value_of('first_sip("esp", 10)') == "esp"
        assert value_of('filter_grounds("espresso", 3)') == "presso"
        assert value_of('filter_grounds("esp", 10)') == ""

    def test_infinite_counts_are_clamped(self):
        src = 'beans big <- extra_shot(10, 400)\n[first_sip("abc", big), filter_grounds("abc", big), first_sip("abc", -big)]'
        assert value_of(src) == ["abc", "", ""]

    def test_nan_count(self):
        src = 'beans big <- extra_shot(10, 400)\nfirst_sip("abc", big - big)'
        assert kind_of(src) == "TypeMismatch"


class TestArrays:
    def test_cup_size(self):
        assert value_of("cup_size([1, 2, 3])") == 3

    def test_add_to_cup_returns_same_array(self):
        assert value_of("beans a <- [1]\nadd_to_cup(a, 2) == a") is True
        assert value_of("beans a <- [1]\nadd_to_cup(a, 2)\na") == [1, 2]

    def test_pour_together_makes_new_array(self):
        assert value_of("beans a <- [1]\nbeans b <- pour_together(a, [2])\nadd_to_cup(b, 3)\na") == [1]

    def test_extract_brew(self):
        assert value_of("extract_brew([5, 6], 1)") == 6
        assert kind_of("extract_brew([5, 6], 2)") == "IndexOutOfRange"

    def test_reverse_pour(self):
        assert value_of("beans a <- [1, 2]\n[reverse_pour(a), a]") == [[2, 1], [1, 2]]


class TestTypes:
    @pytest.mark.parametrize("src,expected", [
        ("1", "number"), ('"s"', "string"), ("true", "boolean"), ("null", "null"),
        ("[]", "array"), ("{}", "object"), ("brew () { }", "brew"),
    ])
    def test_type_check(self, src, expected):
        assert value_of(f"type_check({src})") == expected

    def test_predicates(self):
        src = '[is_brew(print), is_number(1), is_string(1), is_cup([]), is_boolean_bean(false)]'
        assert value_of(src) == [True, True, False, True, True]


class TestFileIO:
    def test_write_then_read(self, tmp_path):
        src = 'pour_to_file("notes.txt", "crema")\nsip_file("notes.txt")'
        assert value_of(src, base_dir=str(tmp_path)) == "crema"
        assert (tmp_path / "notes.txt").read_text() == "crema"

    def test_missing_file(self, tmp_path):
        assert kind_of('sip_file("nope.txt")', base_dir=str(tmp_path)) == "FileNotFound"

    def test_read_directory_is_io_failure(self, tmp_path):
        (tmp_path / "sub").mkdir()
        assert kind_of('sip_file("sub")', base_dir=str(tmp_path)) == "IOFailure"

    def test_recipe_exists(self, tmp_path):
        (tmp_path / "a.brewco").write_text("")
        src = '[recipe_exists("a.brewco"), recipe_exists("b.brewco")]'
        assert value_of(src, base_dir=str(tmp_path)) == [True, False]

    def test_scan_pantry(self, tmp_path):
        for name in ("b.coffee", "a.brewco", "c.txt"):
            (tmp_path / name).write_text("")
        assert value_of('scan_pantry(".")', base_dir=str(tmp_path)) == ["a.brewco", "b.coffee"]

    def test_scan_missing_directory(self, tmp_path):
        assert kind_of('scan_pantry("nowhere")', base_dir=str(tmp_path)) == "FileNotFound"


class TestUtility:
    def test_print(self, capsys):
        make_rt().run("print(3.0)\nprint(0.5)")
        assert capsys.readouterr().out == "3\n0.5\n"

    def test_random_bean_range(self):
        n = value_of("random_bean()")
        assert 0 <= n < 1

    def test_brewing_time(self):
        assert value_of("brewing_time()") > 1_600_000_000

    def test_whats_the_gossip(self):
        out = io.StringIO()
        rt = make_rt(stdout=out, stdin=io.StringIO("  oat milk \n"))
        result = rt.execute('whats_the_gossip("milk? ")')
        assert result.value == "oat milk"
        assert out.getvalue() == "milk? "

    def test_whats_the_gossip_end_of_input(self):
        rt = make_rt(stdout=io.StringIO(), stdin=io.StringIO(""))
        assert rt.execute('whats_the_gossip("")').value is None

    def test_coffee_debug(self):
        out = io.StringIO()
        result = make_rt(stdout=out).execute('coffee_debug(["a", 1])')
        assert result.value == ["a", 1]
        assert out.getvalue() == '[debug] array: ["a", 1]\n'
