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
Verify header of a signed payload image.

The header is a fixed-size little-endian record placed in front of the
payload. It is covered by the signature and tells the verifier where the
payload, public key and signature are located in the image.
"""

import struct
import uuid
from collections import namedtuple

from .keys import SigningAlgorithm

SIGNED_PAYLOAD_HEADER_GUID = uuid.UUID("{d47e6b7e-2b9a-4c3f-a2e6-3fd9c4b2f5a1}")
HEADER_STRUCT_VERSION = 1

# type_guid, struct_version, length, payload_version, payload_svn,
# signing_algorithm, payload_length, public_key_length, signature_length,
# reserved
HEADER_FORMAT = '<16sIIQQIIIIQ'
HEADER_SIZE = struct.calcsize(HEADER_FORMAT)

U32_MAX = 0xffffffff
U64_MAX = 0xffffffffffffffff


class InvalidHeader(Exception):
    pass


class VerifyHeader(namedtuple('VerifyHeader', ['version', 'svn', 'algorithm',
                                               'payload_length',
                                               'public_key_length',
                                               'signature_length'])):
    """Fixed-size metadata record that prefixes the signed region."""

    __slots__ = ()

    @property
    def length(self):
        """Length of the signed region, header plus payload."""
        return HEADER_SIZE + self.payload_length

    def image_size(self):
        return (HEADER_SIZE + self.payload_length + self.public_key_length +
                self.signature_length)

    def encode(self):
        return struct.pack(HEADER_FORMAT,
                           SIGNED_PAYLOAD_HEADER_GUID.bytes_le,
                           HEADER_STRUCT_VERSION,
                           self.length,
                           self.version,
                           self.svn,
                           int(self.algorithm),
                           self.payload_length,
                           self.public_key_length,
                           self.signature_length,
                           0)

    @classmethod
    def decode(cls, buf):
        if len(buf) < HEADER_SIZE:
            raise InvalidHeader("Image is shorter than the verify header "
                                "({} < {} bytes)".format(len(buf),
                                                         HEADER_SIZE))
        (guid, struct_version, length, version, svn, algorithm,
         payload_length, public_key_length, signature_length,
         _) = struct.unpack(HEADER_FORMAT, bytes(buf[:HEADER_SIZE]))
        if guid != SIGNED_PAYLOAD_HEADER_GUID.bytes_le:
            raise InvalidHeader("Invalid header GUID {}".format(
                uuid.UUID(bytes_le=guid)))
        if struct_version != HEADER_STRUCT_VERSION:
            raise InvalidHeader("Unsupported header version {}".format(
                struct_version))
        try:
            algorithm = SigningAlgorithm(algorithm)
        except ValueError:
            raise InvalidHeader("Unknown signing algorithm {}".format(
                algorithm)) from None
        header = cls(version, svn, algorithm, payload_length,
                     public_key_length, signature_length)
        if header.length != length:
            raise InvalidHeader("Header length {} does not match payload "
                                "length {}".format(length, payload_length))
        return header

    def to_dict(self):
        return {
            "type_guid": str(SIGNED_PAYLOAD_HEADER_GUID),
            "struct_version": HEADER_STRUCT_VERSION,
            "length": self.length,
            "payload_version": self.version,
            "payload_svn": self.svn,
            "signing_algorithm": self.algorithm.name,
            "payload_length": self.payload_length,
            "public_key_length": self.public_key_length,
            "signature_length": self.signature_length,
        }


def build_header(payload_length, version, svn, algorithm):
    """Build the verify header for a payload signed with algorithm.

    algorithm is a signing key; its tag and fixed public key and signature
    lengths are recorded in the header. The payload has already passed the
    size bound, so out of range fields are programming errors.
    """
    assert 0 <= version <= U64_MAX
    assert 0 <= svn <= U64_MAX
    assert 0 <= payload_length <= U32_MAX - HEADER_SIZE
    return VerifyHeader(version=version,
                        svn=svn,
                        algorithm=SigningAlgorithm(algorithm.algorithm),
                        payload_length=payload_length,
                        public_key_length=algorithm.public_key_length(),
                        signature_length=algorithm.signature_length())
