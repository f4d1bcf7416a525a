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

"""Human readable rendering of label counts."""

from __future__ import annotations

import json
from typing import List

from .validator import MAX_LABELS, LabelCount, load_json


def format_results(result: LabelCount) -> str:
    """Formats a LabelCount for display.

    :param result: The result to format.
    :return: A multi-line report, or an error line followed by the URL.
    """
    if result.error_message:
        return f"Error: {result.error_message}\nURL: {result.url}"

    lines = [
        f"URL: {result.url}",
        f"Unique labels found: {result.count}",
    ]
    if result.exceeds_limit:
        lines.append(
            "WARNING: The number of unique labels exceeds the maximum limit of "
            f"{MAX_LABELS}!"
        )
    lines.append("Labels found:")
    lines.extend(f"- {label}" for label in result.labels_found)
    return "\n".join(lines) + "\n"


def normalize_json(data: bytes) -> str:
    """Re-indents a JSON document using 4 spaces.

    :raises ValueError: If data is not valid JSON.
    """
    return json.dumps(load_json(data), indent=4)


def side_by_side(data: bytes, result: LabelCount, gutter: int = 4) -> str:
    """Renders a document next to its label analysis, in two columns.

    Documents which aren't valid JSON are shown as-is.
    """
    try:
        document = normalize_json(data)
    except ValueError:
        document = data.decode("utf-8", errors="replace")

    left: List[str] = ["WebAuthn Response", "----------------"]
    left.extend(document.split("\n"))
    right: List[str] = ["Label Analysis", "-------------"]
    right.extend(format_results(result).split("\n"))

    width = max(len(line) for line in left) + gutter
    rows = max(len(left), len(right))
    left += [""] * (rows - len(left))
    right += [""] * (rows - len(right))
    return "\n".join(
        (a.ljust(width) + b).rstrip() for a, b in zip(left, right)
    )
