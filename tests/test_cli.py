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

from passkey_origin import __version__
from passkey_origin.cli import main
from passkey_origin.config import Config, ConfigError
from passkey_origin.validator import LabelCount
from contextlib import redirect_stderr, redirect_stdout
from io import StringIO
from unittest import mock
import json
import os
import tempfile
import unittest


class TestCli(unittest.TestCase):
    def setUp(self):
        patcher = mock.patch("passkey_origin.cli.load_config", return_value=Config())
        self.load_config = patcher.start()
        self.addCleanup(patcher.stop)

        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.tmp = tmp.name

    def write(self, name, origins):
        path = os.path.join(self.tmp, name)
        with open(path, "w") as f:
            if isinstance(origins, str):
                f.write(origins)
            else:
                json.dump({"origins": origins}, f)
        return path

    def run_cli(self, *args):
        out, err = StringIO(), StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = main(list(args))
        return code, out.getvalue(), err.getvalue()

    def test_version(self):
        code, out, _ = self.run_cli("--version")
        self.assertEqual(code, 0)
        self.assertEqual(out.strip(), f"passkey-origin-validator version {__version__}")

    def test_help(self):
        code, out, _ = self.run_cli()
        self.assertEqual(code, 0)
        self.assertIn("usage:", out)

    def test_count_file(self):
        path = self.write(
            "doc.json",
            ["https://example.com", "https://test.example.org", "https://example.net"],
        )
        code, out, _ = self.run_cli("--file", path, "count")
        self.assertEqual(code, 0)
        self.assertIn(f"URL: {path}", out)
        self.assertIn("Unique labels found: 2", out)
        self.assertIn("- test.example", out)

    def test_count_exceeds_limit(self):
        path = self.write("doc.json", [f"https://{c}.com" for c in "abcdef"])
        code, out, _ = self.run_cli("--file", path, "count")
        self.assertEqual(code, 2)
        self.assertIn("WARNING", out)

    def test_count_domain(self):
        result = LabelCount(url="https://example.com/.well-known/webauthn", count=1)
        with mock.patch(
            "passkey_origin.cli.count_labels_from_url", return_value=result
        ) as fetch:
            code, out, _ = self.run_cli("count", "example.com")
        self.assertEqual(code, 0)
        fetch.assert_called_once_with("example.com", timeout=10.0)
        self.assertIn("Unique labels found: 1", out)

    def test_count_default_domain(self):
        self.load_config.return_value = Config(domain="example.org", timeout=3.0)
        result = LabelCount(url="https://example.org/.well-known/webauthn")
        with mock.patch(
            "passkey_origin.cli.count_labels_from_url", return_value=result
        ) as fetch:
            self.run_cli("count")
        fetch.assert_called_once_with("example.org", timeout=3.0)

    def test_count_missing_file(self):
        code, _, err = self.run_cli(
            "--file", os.path.join(self.tmp, "missing.json"), "count"
        )
        self.assertEqual(code, 1)
        self.assertIn("Error: failed to open file", err)

    def test_validate_success(self):
        path = self.write("doc.json", ["https://example.com", "https://example.org"])
        code, out, _ = self.run_cli(
            "--file", path, "validate", "--origin", "https://example.org"
        )
        self.assertEqual(code, 0)
        self.assertIn(
            f"Validating caller origin: https://example.org against domain: {path}",
            out,
        )
        self.assertIn("Status: SUCCESS", out)

    def test_validate_not_authorized(self):
        path = self.write("doc.json", ["https://example.com"])
        code, out, _ = self.run_cli(
            "--file", path, "validate", "--origin", "https://unknown.com"
        )
        self.assertEqual(code, 3)
        self.assertIn("Status: BAD_RELYING_PARTY_ID_NO_JSON_MATCH", out)

    def test_validate_hit_limits(self):
        origins = [f"https://{c}.com" for c in "abcdef"]
        path = self.write("doc.json", origins)
        code, out, _ = self.run_cli("--file", path, "validate", "--origin", origins[-1])
        self.assertEqual(code, 3)
        self.assertIn("Status: BAD_RELYING_PARTY_ID_NO_JSON_MATCH_HIT_LIMITS", out)

    def test_validate_invalid_json(self):
        path = self.write("doc.json", '{"origins": [')
        code, out, err = self.run_cli(
            "--file", path, "validate", "--origin", "https://example.com"
        )
        self.assertEqual(code, 1)
        self.assertIn("Error: failed to parse JSON", err)
        self.assertEqual(out, "")

    def test_validate_requires_origin(self):
        code, _, err = self.run_cli("validate", "example.com")
        self.assertEqual(code, 1)
        self.assertIn("--origin", err)

    def test_config_error(self):
        self.load_config.side_effect = ConfigError("Invalid config file")
        code, _, err = self.run_cli("--config", "/etc/missing.yaml", "count")
        self.assertEqual(code, 1)
        self.assertIn("Error: Invalid config file", err)
        self.load_config.assert_called_once_with("/etc/missing.yaml")

    def test_config_file_setting(self):
        path = self.write("doc.json", ["https://example.com"])
        self.load_config.return_value = Config(file=path)
        code, out, _ = self.run_cli("count")
        self.assertEqual(code, 0)
        self.assertIn(f"URL: {path}", out)

    def test_example(self):
        code, out, _ = self.run_cli("--example")
        self.assertEqual(code, 0)
        self.assertIn("WebAuthn Response", out)
        self.assertIn("Unique labels found: 6", out)
        self.assertIn("Test case 5: Validation (failure)", out)
        self.assertIn("Status: SUCCESS", out)
        self.assertIn("Status: BAD_RELYING_PARTY_ID_NO_JSON_MATCH", out)
