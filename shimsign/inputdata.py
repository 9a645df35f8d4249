# SPDX-License-Identifier: Apache-2.0
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Bounded input files.

An InputData holds the complete contents of a file in a mutable buffer so
that key material can be wiped in place once it is no longer needed.
"""

import logging
import os.path

from intelhex import IntelHex, IntelHexError

INTEL_HEX_EXT = "hex"

logger = logging.getLogger(__name__)


class SizeOutOfRange(Exception):
    """Raised when an input file is smaller or larger than allowed."""

    def __init__(self, path, name, size, size_range):
        self.path = path
        self.name = name
        self.size = size
        self.size_range = size_range
        super().__init__(
            "Size of {} file {} is {} bytes, expected between {} and {}"
            .format(name, path, size, size_range[0], size_range[1]))


class InputData:
    """Contents of a file whose length must fall into an inclusive range.

    Files with a .hex extension are parsed as Intel HEX and the range is
    checked against the decoded binary.
    """

    def __init__(self, path, size_range, name):
        self.path = str(path)
        self.name = name
        self.size_range = size_range
        self._buf = self._read(self.path, name)

        size = len(self._buf)
        if not size_range[0] <= size <= size_range[1]:
            self.clear()
            logger.error("Size of %s file %s (%d) is out of range",
                         name, self.path, size)
            raise SizeOutOfRange(self.path, name, size, size_range)
        logger.debug("Read %d bytes of %s from %s", size, name, self.path)

    @staticmethod
    def _read(path, name):
        ext = os.path.splitext(path)[1][1:].lower()
        try:
            if ext == INTEL_HEX_EXT:
                return bytearray(IntelHex(path).tobinarray())
            with open(path, 'rb') as f:
                return bytearray(f.read())
        except OSError as e:
            logger.error("Can not read %s file %s: %s", name, path, e)
            raise IOError("Can not read {} file {}: {}".format(
                name, path, e.strerror or e)) from e
        except IntelHexError as e:
            logger.error("Invalid Intel HEX %s file %s: %s", name, path, e)
            raise IOError("Invalid Intel HEX {} file {}: {}".format(
                name, path, e)) from e

    def __len__(self):
        return len(self._buf)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.clear()

    def as_bytes(self):
        """Read-only view of the file contents."""
        return memoryview(self._buf).toreadonly()

    def clear(self):
        """Overwrite the buffer with zeros in place."""
        self._buf[:] = bytes(len(self._buf))
