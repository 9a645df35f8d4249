"""
ECDSA P-384 key management
"""

# SPDX-License-Identifier: Apache-2.0

from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import (
    decode_dss_signature, encode_dss_signature)
from cryptography.hazmat.primitives.hashes import SHA384

from . import InvalidKey, SigningAlgorithm, SigningFailed

ECDSA_P384_COORD_LEN = 48


class ECDSA384P1Public():
    """
    Wrapper around an ECDSA (p384) public key.
    """
    algorithm = SigningAlgorithm.ECDSA_NIST_P384_SHA384
    key_desc = "ECDSA"

    def __init__(self, key):
        self.key = key

    @staticmethod
    def accepts(key):
        return (isinstance(key, ec.EllipticCurvePublicKey) and
                isinstance(key.curve, ec.SECP384R1))

    @classmethod
    def from_public_bytes(cls, data):
        if len(data) != 2 * ECDSA_P384_COORD_LEN:
            raise InvalidKey("ECDSA public key must be {} bytes, got {}"
                             .format(2 * ECDSA_P384_COORD_LEN, len(data)))
        # The image stores X || Y without the SEC1 uncompressed point tag.
        try:
            key = ec.EllipticCurvePublicKey.from_encoded_point(
                    ec.SECP384R1(), b'\x04' + bytes(data))
        except ValueError as e:
            raise InvalidKey("Invalid ECDSA public key: {}".format(e)) from None
        return cls(key)

    def _get_public(self):
        return self.key

    def public_key_bytes(self):
        numbers = self._get_public().public_numbers()
        return (numbers.x.to_bytes(ECDSA_P384_COORD_LEN, 'big') +
                numbers.y.to_bytes(ECDSA_P384_COORD_LEN, 'big'))

    def public_key_length(self):
        return 2 * ECDSA_P384_COORD_LEN

    def signature_length(self):
        # Fixed-length r || s, unlike the variable-length DER encoding.
        return 2 * ECDSA_P384_COORD_LEN

    def verify(self, signature, payload):
        """Raise InvalidSignature unless signature covers payload."""
        signature = bytes(signature)
        if len(signature) != self.signature_length():
            raise ValueError("ECDSA signature must be {} bytes".format(
                self.signature_length()))
        r = int.from_bytes(signature[:ECDSA_P384_COORD_LEN], 'big')
        s = int.from_bytes(signature[ECDSA_P384_COORD_LEN:], 'big')
        return self._get_public().verify(
                signature=encode_dss_signature(r, s),
                data=bytes(payload),
                signature_algorithm=ec.ECDSA(SHA384()))


class ECDSA384P1(ECDSA384P1Public):
    """
    Wrapper around an ECDSA (p384) private key.
    """

    @classmethod
    def from_private(cls, key):
        """key should be an instance of EllipticCurvePrivateKey"""
        if not isinstance(key, ec.EllipticCurvePrivateKey):
            raise InvalidKey("Not an ECDSA private key: {}".format(
                type(key).__name__))
        if not isinstance(key.curve, ec.SECP384R1):
            raise InvalidKey("Unsupported ECDSA curve: {}".format(
                key.curve.name))
        return cls(key)

    def _get_public(self):
        return self.key.public_key()

    def raw_sign(self, payload):
        """Return the DER encoded signature"""
        return self.key.sign(
                data=bytes(payload),
                signature_algorithm=ec.ECDSA(SHA384()))

    def sign(self, payload):
        try:
            r, s = decode_dss_signature(self.raw_sign(payload))
        except (ValueError, TypeError) as e:
            raise SigningFailed("ECDSA signing failed: {}".format(e)) from e
        return (r.to_bytes(ECDSA_P384_COORD_LEN, 'big') +
                s.to_bytes(ECDSA_P384_COORD_LEN, 'big'))
