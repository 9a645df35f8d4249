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
Signed payload image parsing and verification.
"""

import logging
from enum import Enum

from cryptography.exceptions import InvalidSignature

from . import keys
from .header import HEADER_SIZE, InvalidHeader, VerifyHeader
from .signer import ImageLayoutError

logger = logging.getLogger(__name__)

VerifyResult = Enum('VerifyResult',
                    ['OK', 'INVALID_HEADER', 'INVALID_LAYOUT', 'INVALID_KEY',
                     'KEY_MISMATCH', 'INVALID_SIGNATURE'])


class Image:
    """A signed image split into its sections."""

    def __init__(self, header, payload, public_key, signature):
        self.header = header
        self.payload = payload
        self.public_key = public_key
        self.signature = signature

    def __repr__(self):
        return "<Image version={}, svn={}, algorithm={}, payloadlen=0x{:x}>" \
            .format(self.header.version, self.header.svn,
                    self.header.algorithm.name, len(self.payload))

    @classmethod
    def parse(cls, b):
        header = VerifyHeader.decode(b)
        if len(b) != header.image_size():
            raise ImageLayoutError(
                "Image is {} bytes, header declares {}".format(
                    len(b), header.image_size()))
        off = HEADER_SIZE
        payload = b[off:off + header.payload_length]
        off += header.payload_length
        public_key = b[off:off + header.public_key_length]
        off += header.public_key_length
        signature = b[off:off + header.signature_length]
        return cls(header, payload, public_key, signature)

    @classmethod
    def load(cls, path):
        with open(path, 'rb') as f:
            return cls.parse(f.read())

    def signed_region(self):
        return self.header.encode() + self.payload

    @staticmethod
    def verify(imgfile, key=None):
        """Check the image signature against its embedded public key.

        If key is given, the embedded public key must also be equal to it.
        Returns a (VerifyResult, header) pair; header is None when the
        image could not be parsed.
        """
        try:
            img = Image.load(imgfile)
        except InvalidHeader as e:
            logger.debug("Invalid header in %s: %s", imgfile, e)
            return VerifyResult.INVALID_HEADER, None
        except ImageLayoutError as e:
            logger.debug("Invalid layout of %s: %s", imgfile, e)
            return VerifyResult.INVALID_LAYOUT, None

        try:
            embedded = keys.load_public(img.public_key, img.header.algorithm)
        except keys.InvalidKey as e:
            logger.debug("Invalid embedded key in %s: %s", imgfile, e)
            return VerifyResult.INVALID_KEY, img.header

        if key is not None:
            if (key.algorithm != img.header.algorithm or
                    key.public_key_bytes() != img.public_key):
                return VerifyResult.KEY_MISMATCH, img.header

        try:
            embedded.verify(img.signature, img.signed_region())
        except (InvalidSignature, ValueError):
            return VerifyResult.INVALID_SIGNATURE, img.header
        return VerifyResult.OK, img.header
