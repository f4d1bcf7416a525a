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
This example reads a .well-known/webauthn document, either from a file or from a
relying party's server, and checks whether a caller origin is authorized by it.

USAGE: python check_origin.py (webauthn.json | example.com) https://caller.origin
"""

import os
import sys

from passkey_origin.report import format_results
from passkey_origin.sources import count_labels_from_file, count_labels_from_url
from passkey_origin.validator import validate_well_known_json

if len(sys.argv) != 3:
    print("USAGE: python check_origin.py (webauthn.json | example.com) ORIGIN")
    sys.exit(1)

source, origin = sys.argv[1:]

# Read the document, and count the labels used by its origins
if os.path.isfile(source):
    result = count_labels_from_file(source)
else:
    result = count_labels_from_url(source)
print(format_results(result))
if result.error_message:
    sys.exit(1)

# Validate the caller origin the same way a browser does
status = validate_well_known_json(origin, result.raw_json.encode())
print(f"{origin}: {status}")
