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

"""
Command line tool for checking the origins listed in .well-known/webauthn
documents against the limits enforced by browsers.

Exit codes: 0 on success, 1 if the document could not be read, 2 if the number of
labels exceeds the limit, 3 if a caller origin is not authorized.
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from typing import Optional, Sequence

from . import __version__
from .config import Config, ConfigError, load_config
from .report import format_results, side_by_side
from .sources import SourceError, count_labels_from_file, count_labels_from_url
from .validator import (
    MAX_LABELS,
    AuthenticatorStatus,
    LabelCount,
    count_labels,
    validate_well_known_json,
)

logger = logging.getLogger(__name__)


PROG = "passkey-origin-validator"

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_EXCEEDS_LIMIT = 2
EXIT_NOT_AUTHORIZED = 3

EXAMPLE_UNDER_LIMIT = b"""{
    "origins": [
        "https://example.com",
        "https://test.example.org",
        "https://another.example.net"
    ]
}"""

EXAMPLE_OVER_LIMIT = b"""{
    "origins": [
        "https://one.example.com",
        "https://two.example.org",
        "https://three.example.net",
        "https://four.example.io",
        "https://five.example.co",
        "https://six.example.dev"
    ]
}"""

EXAMPLE_CCTLDS = b"""{
    "origins": [
        "https://example.co.uk",
        "https://example.de",
        "https://example-rewards.com",
        "https://shop.example.fr",
        "https://blog.example.jp",
        "https://support.example.ca",
        "https://news.example.au"
    ]
}"""

EXAMPLE_URL = "https://mock-domain.com/.well-known/webauthn"


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Validate passkey/WebAuthn origin constraints in "
        ".well-known/webauthn endpoints, following the checks made by Chromium.",
    )
    parser.add_argument(
        "--config",
        help="config file (default is $HOME/.passkey-origin-validator.yaml)",
    )
    parser.add_argument("--debug", action="store_true", help="enable debug logging")
    parser.add_argument(
        "--file", help="use a local JSON file instead of fetching from a domain"
    )
    parser.add_argument(
        "--example", action="store_true", help="run with example data for testing"
    )
    parser.add_argument(
        "-v", "--version", action="store_true", help="print version and exit"
    )

    commands = parser.add_subparsers(dest="command")
    count = commands.add_parser(
        "count", help="count the unique labels in a .well-known/webauthn endpoint"
    )
    count.add_argument("domain", nargs="?", help="domain to check")
    validate = commands.add_parser(
        "validate",
        help="validate if a caller origin is authorized by a domain's "
        ".well-known/webauthn file",
    )
    validate.add_argument("domain", nargs="?", help="domain to check")
    validate.add_argument("--origin", help="the caller origin to validate (required)")
    return parser


def _load(config: Config, domain: Optional[str]) -> LabelCount:
    if config.file:
        logger.debug(f"Reading from file: {config.file}")
        return count_labels_from_file(config.file)
    domain = domain or config.domain
    logger.debug(f"Testing domain: {domain}")
    return count_labels_from_url(domain, timeout=config.timeout)


def _log_result(result: LabelCount) -> None:
    if not result.error_message:
        logger.debug(f"Found {result.count} unique labels")
        logger.debug(f"Labels: {result.labels_found}")
        logger.debug(f"Exceeds limit: {result.exceeds_limit}")


def run_count(config: Config, domain: Optional[str] = None) -> int:
    logger.debug(f"Max labels allowed: {MAX_LABELS}")
    result = _load(config, domain)
    _log_result(result)
    print(format_results(result))
    if result.exceeds_limit:
        return EXIT_EXCEEDS_LIMIT
    return EXIT_OK


def run_validate(config: Config, origin: str, domain: Optional[str] = None) -> int:
    logger.debug(f"Validating caller origin: {origin}")
    result = _load(config, domain)
    if result.error_message:
        print(f"Error: {result.error_message}", file=sys.stderr)
        return EXIT_ERROR

    status = validate_well_known_json(origin, result.raw_json.encode())
    print(f"Validating caller origin: {origin} against domain: {result.url}")
    print(f"Status: {status}")
    if status != AuthenticatorStatus.SUCCESS:
        return EXIT_NOT_AUTHORIZED
    return EXIT_OK


def run_example(config: Config) -> int:
    """Demonstrates label counting and validation using built-in documents."""
    print("Testing with example data...")

    cases = [
        ("Under the limit (3 labels)", EXAMPLE_UNDER_LIMIT),
        ("Over the limit (6 labels)", EXAMPLE_OVER_LIMIT),
        ("ccTLDs (country code top-level domains)", EXAMPLE_CCTLDS),
    ]
    for i, (title, data) in enumerate(cases, 1):
        print(f"\nTest case {i}: {title}")
        result = count_labels(data, EXAMPLE_URL)
        _log_result(result)
        print(side_by_side(data, result))

    validations = [
        ("Validation (success)", "https://example.com"),
        ("Validation (failure)", "https://unknown.com"),
    ]
    for i, (title, origin) in enumerate(validations, len(cases) + 1):
        print(f"\nTest case {i}: {title}")
        result = count_labels(EXAMPLE_UNDER_LIMIT, EXAMPLE_URL)
        print(side_by_side(EXAMPLE_UNDER_LIMIT, result))
        status = validate_well_known_json(origin, EXAMPLE_UNDER_LIMIT)
        print("\nValidation Results:")
        print(f"Validating caller origin: {origin}\nStatus: {status}")

    return EXIT_OK


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"{PROG} version {__version__}")
        return EXIT_OK

    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR
    if args.debug:
        config = replace(config, debug=True)
    if args.file:
        config = replace(config, file=args.file)

    logging.basicConfig(
        level=logging.DEBUG if config.debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.example:
        return run_example(config)

    try:
        if args.command == "count":
            return run_count(config, args.domain)
        if args.command == "validate":
            if not args.origin:
                print("Error: --origin flag is required", file=sys.stderr)
                return EXIT_ERROR
            return run_validate(config, args.origin, args.domain)
    except SourceError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    parser.print_help()
    return EXIT_OK
