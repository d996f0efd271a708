#!/usr/bin/env python3

from __future__ import annotations

import plistlib
import sys
import unittest
from pathlib import Path

TESTS_DIR = Path(__file__).resolve().parent
TOOL_DIR = TESTS_DIR.parent
for path in (TOOL_DIR, TESTS_DIR):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from archive_fixtures import build_archive, sample_recipe  # noqa: E402
from basil_archive import (  # noqa: E402
    decode_archive,
    get_blob,
    get_bool,
    get_int,
    get_list,
    get_string,
    require_list,
)
from basil_errors import DecodeError, MalformedArchiveError  # noqa: E402


def _keyed_archive(objects: list[object], root: int = 1) -> bytes:
    return plistlib.dumps(
        {
            "$archiver": "NSKeyedArchiver",
            "$version": 100000,
            "$top": {"root": plistlib.UID(root)},
            "$objects": objects,
        },
        fmt=plistlib.FMT_BINARY,
    )


class DecodeArchiveTests(unittest.TestCase):
    def test_decodes_nested_recipe_graph(self) -> None:
        graph = decode_archive(build_archive(sample_recipe(photo=b"\x89PNG", empty=None)))

        self.assertEqual(graph["name"], "  Tomato Soup\n")
        self.assertEqual(graph["time"], 3661)
        self.assertEqual(graph["photo"], b"\x89PNG")
        self.assertIsNone(graph["empty"])
        self.assertEqual(
            [entry["text"] for entry in graph["Ingredient"]],
            ["1 onion, diced", "2 lb tomatoes", "Salt"],
        )

    def test_null_string_is_kept_outside_the_sentinel_slot(self) -> None:
        graph = decode_archive(build_archive(sample_recipe(notes="$null", empty=None)))
        self.assertEqual(graph["notes"], "$null")
        self.assertIsNone(graph["empty"])

    def test_decodes_xml_property_lists(self) -> None:
        graph = decode_archive(build_archive({"name": "Bread", "favorite": True}, fmt=plistlib.FMT_XML))
        self.assertEqual(graph, {"name": "Bread", "favorite": True})

    def test_decodes_wrapped_strings_and_data(self) -> None:
        string_class = {"$classname": "NSMutableString", "$classes": ["NSMutableString", "NSString", "NSObject"]}
        data_class = {"$classname": "NSMutableData", "$classes": ["NSMutableData", "NSData", "NSObject"]}
        dict_class = {"$classname": "NSDictionary", "$classes": ["NSDictionary", "NSObject"]}
        objects = [
            "$null",
            {
                "NS.keys": [plistlib.UID(2), plistlib.UID(3)],
                "NS.objects": [plistlib.UID(4), plistlib.UID(5)],
                "$class": plistlib.UID(8),
            },
            "notes",
            "Data",
            {"NS.string": "Serve warm.", "$class": plistlib.UID(6)},
            {"NS.data": b"\x00\x01", "$class": plistlib.UID(7)},
            string_class,
            data_class,
            dict_class,
        ]

        graph = decode_archive(_keyed_archive(objects))

        self.assertEqual(graph, {"notes": "Serve warm.", "Data": b"\x00\x01"})

    def test_rejects_bytes_that_are_not_a_property_list(self) -> None:
        with self.assertRaises(DecodeError):
            decode_archive(b"definitely not a plist")

    def test_rejects_property_list_without_archive_tables(self) -> None:
        with self.assertRaises(DecodeError):
            decode_archive(plistlib.dumps({"name": "Soup"}))

    def test_rejects_out_of_range_reference(self) -> None:
        with self.assertRaises(DecodeError):
            decode_archive(_keyed_archive(["$null"], root=7))

    def test_rejects_reference_cycles(self) -> None:
        objects = [
            "$null",
            {"NS.objects": [plistlib.UID(1)], "$class": plistlib.UID(2)},
            {"$classname": "NSArray", "$classes": ["NSArray", "NSObject"]},
        ]
        with self.assertRaises(DecodeError):
            decode_archive(_keyed_archive(objects))

    def test_rejects_root_that_is_not_a_dictionary(self) -> None:
        with self.assertRaises(DecodeError):
            decode_archive(_keyed_archive(["$null", "just a string"]))


class AccessorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.graph = {
            "name": "Soup",
            "time": 90,
            "favorite": True,
            "photo": b"\xff\xd8",
            "Ingredient": [{"displayOrder": 0, "text": "Salt"}],
            "mixed": [{"displayOrder": 0}, "loose string"],
        }

    def test_missing_keys_are_absent(self) -> None:
        self.assertIsNone(get_string(self.graph, "notes"))
        self.assertIsNone(get_int(self.graph, "notes"))
        self.assertIsNone(get_bool(self.graph, "notes"))
        self.assertIsNone(get_blob(self.graph, "notes"))
        self.assertIsNone(get_list(self.graph, "notes"))

    def test_type_mismatches_are_absent(self) -> None:
        self.assertIsNone(get_string(self.graph, "time"))
        self.assertIsNone(get_int(self.graph, "name"))
        self.assertIsNone(get_blob(self.graph, "name"))
        self.assertIsNone(get_bool(self.graph, "time"))
        self.assertIsNone(get_list(self.graph, "name"))

    def test_int_accessor_rejects_booleans(self) -> None:
        self.assertIsNone(get_int(self.graph, "favorite"))
        self.assertTrue(get_bool(self.graph, "favorite"))
        self.assertEqual(get_int(self.graph, "time"), 90)

    def test_list_accessor_requires_dictionary_entries(self) -> None:
        self.assertEqual(get_list(self.graph, "Ingredient"), [{"displayOrder": 0, "text": "Salt"}])
        self.assertIsNone(get_list(self.graph, "mixed"))

    def test_required_list_raises_when_missing_or_malformed(self) -> None:
        self.assertEqual(len(require_list(self.graph, "Ingredient")), 1)

        with self.assertRaises(MalformedArchiveError):
            require_list(self.graph, "Direction")
        with self.assertRaises(MalformedArchiveError):
            require_list(self.graph, "name")
        with self.assertRaises(MalformedArchiveError) as ctx:
            require_list(self.graph, "mixed")
        self.assertEqual(ctx.exception.details["index"], 1)


if __name__ == "__main__":
    unittest.main()
