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

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from tests.constants import (KEY_EXT, PEM_KEY_EXT, PUB_KEY_EXT, TRAD_KEY_EXT,
                             TRAD_PEM_KEY_EXT, tmp_name)


def _generate(key_type):
    if key_type == "rsa-3072":
        return rsa.generate_private_key(public_exponent=65537, key_size=3072)
    elif key_type == "rsa-2048":
        return rsa.generate_private_key(public_exponent=65537, key_size=2048)
    elif key_type == "ecdsa-p384":
        return ec.generate_private_key(ec.SECP384R1())
    elif key_type == "ecdsa-p256":
        return ec.generate_private_key(ec.SECP256R1())
    raise ValueError(key_type)


@pytest.fixture(scope="session")
def key_dir(tmp_path_factory):
    """Generate one key of each type, in PKCS#8 and traditional DER and PEM"""
    path = tmp_path_factory.mktemp("keys")
    for key_type in ("rsa-3072", "rsa-2048", "ecdsa-p384", "ecdsa-p256"):
        pk = _generate(key_type)
        for ext, encoding, format in (
                (KEY_EXT, serialization.Encoding.DER,
                 serialization.PrivateFormat.PKCS8),
                (PEM_KEY_EXT, serialization.Encoding.PEM,
                 serialization.PrivateFormat.PKCS8),
                (TRAD_KEY_EXT, serialization.Encoding.DER,
                 serialization.PrivateFormat.TraditionalOpenSSL),
                (TRAD_PEM_KEY_EXT, serialization.Encoding.PEM,
                 serialization.PrivateFormat.TraditionalOpenSSL)):
            tmp_name(path, key_type, ext).write_bytes(pk.private_bytes(
                encoding=encoding,
                format=format,
                encryption_algorithm=serialization.NoEncryption()))
        tmp_name(path, key_type, PUB_KEY_EXT).write_bytes(
            pk.public_key().public_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PublicFormat.SubjectPublicKeyInfo))
    return path


@pytest.fixture
def payload_file(tmp_path):
    path = tmp_path / "payload.bin"
    path.write_bytes(bytes(range(256)) * 4 + b"shim payload")
    return path
