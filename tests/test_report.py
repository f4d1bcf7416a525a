# Copyright (c) 2018 Yubico AB
# All rights reserved.
#
#   Redistribution and use in source and binary forms, with or
#   without modification, are permitted provided that the following
#   conditions are met:
#
#    1. Redistributions of source code must retain the above copyright
#       notice, this list of conditions and the following disclaimer.
#    2. Redistributions in binary form must reproduce the above
#       copyright notice, this list of conditions and the following
#       disclaimer in the documentation and/or other materials provided
#       with the distribution.
#
# THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS
# "AS IS" AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT
# LIMITED TO, THE IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS
# FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO EVENT SHALL THE
# COPYRIGHT HOLDER OR CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT,
# INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING,
# BUT NOT LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES;
# LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER
# CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN CONTRACT, STRICT
# LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN
# ANY WAY OUT OF THE USE OF THIS SOFTWARE, EVEN IF ADVISED OF THE
# POSSIBILITY OF SUCH DAMAGE.

from passkey_origin.report import format_results, normalize_json, side_by_side
from passkey_origin.validator import LabelCount, count_labels
import re
import unittest


def _result(*labels):
    return LabelCount(
        url="https://example.com/.well-known/webauthn",
        unique_labels=set(labels),
        count=len(labels),
        exceeds_limit=len(labels) > 5,
        labels_found=list(labels),
    )


class TestFormatResults(unittest.TestCase):
    def test_under_limit(self):
        output = format_results(_result("example", "test", "another"))
        self.assertEqual(
            output,
            "URL: https://example.com/.well-known/webauthn\n"
            "Unique labels found: 3\n"
            "Labels found:\n"
            "- example\n"
            "- test\n"
            "- another\n",
        )
        self.assertNotIn("WARNING", output)

    def test_over_limit(self):
        output = format_results(_result("one", "two", "three", "four", "five", "six"))
        self.assertIn("Unique labels found: 6", output)
        self.assertIn(
            "WARNING: The number of unique labels exceeds the maximum limit of 5!",
            output,
        )

    def test_error(self):
        result = LabelCount(
            url="https://example.com/.well-known/webauthn",
            error_message="HTTP request failed with status code: 404",
        )
        self.assertEqual(
            format_results(result),
            "Error: HTTP request failed with status code: 404\n"
            "URL: https://example.com/.well-known/webauthn",
        )

    def test_count_parsed_back(self):
        for labels in [(), ("a",), ("a", "b", "c", "d", "e", "f", "g")]:
            result = _result(*labels)
            match = re.search(r"Unique labels found: (\d+)", format_results(result))
            self.assertEqual(int(match.group(1)), result.count)


class TestSideBySide(unittest.TestCase):
    def test_normalize_json(self):
        self.assertEqual(
            normalize_json(b'{"origins":["https://example.com"]}'),
            '{\n    "origins": [\n        "https://example.com"\n    ]\n}',
        )

    def test_columns(self):
        data = b'{"origins": ["https://example.com", "https://example.org"]}'
        lines = side_by_side(data, count_labels(data, "doc.json")).split("\n")
        self.assertTrue(lines[0].startswith("WebAuthn Response"))
        self.assertTrue(lines[0].endswith("Label Analysis"))
        column = lines[0].index("Label Analysis")
        self.assertEqual(lines[2][column:], "URL: doc.json")
        self.assertEqual(lines[3][column:], "Unique labels found: 1")
        self.assertEqual(lines[2][:column].rstrip(), "{")

    def test_invalid_json(self):
        data = b'{"origins": [}'
        output = side_by_side(data, count_labels(data, "doc.json"))
        self.assertIn('{"origins": [}', output)
        self.assertIn("Error: failed to parse JSON", output)

    def test_deeply_nested(self):
        data = b"[" * 100000 + b"]" * 100000
        with self.assertRaises(ValueError):
            normalize_json(data)
        output = side_by_side(data, count_labels(data, "doc.json"))
        self.assertIn("Error: failed to parse JSON", output)
