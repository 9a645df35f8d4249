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
Output file with positioned writes and durable flush.
"""

import logging
import os

logger = logging.getLogger(__name__)


class OutputFile:
    """Destination file, created or truncated on open.

    A failed write leaves the file in an undefined state; callers should
    treat it as invalid until a later run succeeds.
    """

    def __init__(self, path):
        self.path = str(path)
        try:
            self.f = open(self.path, 'wb')
        except OSError as e:
            logger.error("Can not open output file %s: %s", self.path, e)
            raise IOError("Can not open output file {}: {}".format(
                self.path, e.strerror or e)) from e

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def seek_and_write(self, offset, data, name):
        try:
            self.f.seek(offset)
            self.f.write(data)
        except OSError as e:
            logger.error("Can not write %s to %s: %s", name, self.path, e)
            raise IOError("Can not write {} to {}: {}".format(
                name, self.path, e.strerror or e)) from e
        logger.debug("Wrote %d bytes of %s at offset 0x%x of %s",
                     len(data), name, offset, self.path)

    def flush(self):
        try:
            self.f.flush()
            os.fsync(self.f.fileno())
        except OSError as e:
            logger.error("Can not flush %s: %s", self.path, e)
            raise IOError("Can not flush {}: {}".format(
                self.path, e.strerror or e)) from e

    def close(self):
        if not self.f.closed:
            self.f.close()
