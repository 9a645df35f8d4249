"""
RSA-PSS-3072-SHA384 key management
"""

# SPDX-License-Identifier: Apache-2.0

from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.hazmat.primitives.hashes import SHA384

from . import InvalidKey, SigningAlgorithm, SigningFailed

RSA_KEY_SIZE = 3072
RSA_MODULUS_LEN = RSA_KEY_SIZE // 8
RSA_EXPONENT_LEN = 8
# PSS salt is as long as the SHA-384 digest
RSA_PSS_SALT_LEN = 48


class RSA3072Public():
    """
    Wrapper around an RSA-3072 public key.

    The public key is embedded in the image as the modulus followed by the
    public exponent, both big-endian and zero-padded to fixed widths.
    """
    algorithm = SigningAlgorithm.RSAPSS_3072_SHA384
    key_desc = "RSA"

    def __init__(self, key):
        self.key = key

    @staticmethod
    def accepts(key):
        return (isinstance(key, rsa.RSAPublicKey) and
                key.key_size == RSA_KEY_SIZE)

    @classmethod
    def from_public_bytes(cls, data):
        if len(data) != RSA_MODULUS_LEN + RSA_EXPONENT_LEN:
            raise InvalidKey("RSA public key must be {} bytes, got {}".format(
                RSA_MODULUS_LEN + RSA_EXPONENT_LEN, len(data)))
        n = int.from_bytes(data[:RSA_MODULUS_LEN], 'big')
        e = int.from_bytes(data[RSA_MODULUS_LEN:], 'big')
        try:
            key = rsa.RSAPublicNumbers(e, n).public_key()
        except ValueError as err:
            raise InvalidKey("Invalid RSA public key: {}".format(err)) from None
        if key.key_size != RSA_KEY_SIZE:
            raise InvalidKey("Unsupported RSA key size: {}".format(
                key.key_size))
        return cls(key)

    def _get_public(self):
        return self.key

    def public_key_bytes(self):
        numbers = self._get_public().public_numbers()
        return (numbers.n.to_bytes(RSA_MODULUS_LEN, 'big') +
                numbers.e.to_bytes(RSA_EXPONENT_LEN, 'big'))

    def public_key_length(self):
        return RSA_MODULUS_LEN + RSA_EXPONENT_LEN

    def signature_length(self):
        return RSA_MODULUS_LEN

    def verify(self, signature, payload):
        """Raise InvalidSignature unless signature covers payload."""
        self._get_public().verify(
                signature=bytes(signature),
                data=bytes(payload),
                padding=padding.PSS(mgf=padding.MGF1(SHA384()),
                                    salt_length=RSA_PSS_SALT_LEN),
                algorithm=SHA384())


class RSA3072(RSA3072Public):
    """
    Wrapper around an RSA-3072 private key.
    """

    @classmethod
    def from_private(cls, key):
        if not isinstance(key, rsa.RSAPrivateKey):
            raise InvalidKey("Not an RSA private key: {}".format(
                type(key).__name__))
        if key.key_size != RSA_KEY_SIZE:
            raise InvalidKey("Unsupported RSA key size: {}".format(
                key.key_size))
        return cls(key)

    def _get_public(self):
        return self.key.public_key()

    def sign(self, payload):
        try:
            return self.key.sign(
                    data=bytes(payload),
                    padding=padding.PSS(mgf=padding.MGF1(SHA384()),
                                        salt_length=RSA_PSS_SALT_LEN),
                    algorithm=SHA384())
        except (ValueError, TypeError) as e:
            raise SigningFailed("RSA signing failed: {}".format(e)) from e
