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
Payload signing and image assembly.

The signed image is laid out as::

    +----------------+
    | verify header  |  \\
    +----------------+   > signed region
    | payload        |  /
    +----------------+
    | public key     |
    +----------------+
    | signature      |
    +----------------+
"""

import logging

from . import keys
from .header import HEADER_SIZE, build_header

logger = logging.getLogger(__name__)


class ImageLayoutError(Exception):
    """Header fields and image sections disagree."""
    pass


class PayloadSigner:
    """Sign a single payload with a single key.

    A signer is used once: build the header, then sign it.
    """

    def __init__(self, payload, key):
        self.payload = payload
        self.key = key
        self.signed = False

    def __repr__(self):
        return "<PayloadSigner algorithm={}, payloadlen=0x{:x}>".format(
            self.key.algorithm.name, len(self.payload))

    def build_header(self, version, svn):
        header = build_header(len(self.payload), version, svn, self.key)
        logger.debug("Verify header: version=%d svn=%d algorithm=%s "
                     "payload=%d pubkey=%d signature=%d",
                     header.version, header.svn, header.algorithm.name,
                     header.payload_length, header.public_key_length,
                     header.signature_length)
        return header

    def _check_header(self, header):
        if header.algorithm != self.key.algorithm:
            raise ImageLayoutError(
                "Header algorithm {} does not match key algorithm {}".format(
                    header.algorithm.name, self.key.algorithm.name))
        if header.payload_length != len(self.payload):
            raise ImageLayoutError(
                "Header payload length {} does not match payload length {}"
                .format(header.payload_length, len(self.payload)))

    def sign(self, header):
        """Sign header || payload and return the assembled image."""
        if self.signed:
            raise RuntimeError("PayloadSigner can only sign once")
        self.signed = True
        self._check_header(header)

        signed_region = header.encode() + bytes(self.payload)
        signature = self.key.sign(signed_region)
        public_key = self.key.public_key_bytes()

        if len(public_key) != header.public_key_length:
            raise ImageLayoutError(
                "Public key is {} bytes, header declares {}".format(
                    len(public_key), header.public_key_length))
        if len(signature) != header.signature_length:
            raise ImageLayoutError(
                "Signature is {} bytes, header declares {}".format(
                    len(signature), header.signature_length))

        image = signed_region + public_key + signature
        assert len(image) == header.image_size()
        assert len(signed_region) == HEADER_SIZE + len(self.payload)
        return image


def create_signed_image(payload, private, algorithm, version, svn):
    """Produce a signed image from loaded payload and private key files.

    payload and private are InputData. The private key buffer is wiped
    before returning, whether signing succeeded or not.
    """
    try:
        key = keys.load(private.as_bytes(), algorithm)
        signer = PayloadSigner(payload.as_bytes(), key)
        header = signer.build_header(version, svn)
        return signer.sign(header)
    finally:
        private.clear()
