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
from click.testing import CliRunner

from shimsign.header import HEADER_SIZE
from shimsign.main import shimsign
from tests.constants import (ALGORITHMS, KEY_TYPES, KEY_EXT, PUB_KEY_EXT,
                             tmp_name)

NO_MATCH_FOR_KEY = "Embedded public key does not match the given key"
INVALID_SIGNATURE = "Image has an invalid signature"


def assert_valid(result):
    assert result.exit_code == 0
    assert "Image was correctly validated" in result.output


class TestVerify:
    runner = CliRunner()

    @pytest.fixture(scope="class")
    def signed_images(self, key_dir, tmp_path_factory):
        """Sign one image per algorithm"""
        path = tmp_path_factory.mktemp("signed")
        payload = path / "payload.bin"
        payload.write_bytes(b"\x5a" * 1000)
        for algorithm in ALGORITHMS:
            result = self.runner.invoke(
                shimsign,
                [
                    "sign",
                    "-A", algorithm,
                    "-o", str(path / (algorithm + ".bin")),
                    str(tmp_name(key_dir, KEY_TYPES[algorithm], KEY_EXT)),
                    str(payload),
                    "3",
                    "1",
                ],
            )
            assert result.exit_code == 0
        return path

    @pytest.mark.parametrize("algorithm", ALGORITHMS)
    def test_verify_basic(self, signed_images, algorithm):
        result = self.runner.invoke(
            shimsign, ["verify", str(signed_images / (algorithm + ".bin"))]
        )
        assert_valid(result)
        assert "Image version: 3" in result.output
        assert "Image SVN: 1" in result.output
        assert algorithm in result.output

    @pytest.mark.parametrize("algorithm", ALGORITHMS)
    def test_verify_with_key(self, signed_images, key_dir, algorithm):
        result = self.runner.invoke(
            shimsign,
            [
                "verify",
                "--key",
                str(tmp_name(key_dir, KEY_TYPES[algorithm], PUB_KEY_EXT)),
                str(signed_images / (algorithm + ".bin")),
            ],
        )
        assert_valid(result)

    def test_verify_wrong_key(self, signed_images, key_dir):
        result = self.runner.invoke(
            shimsign,
            [
                "verify",
                "--key",
                str(tmp_name(key_dir, "rsa-3072", PUB_KEY_EXT)),
                str(signed_images / "ECDSA_NIST_P384_SHA384.bin"),
            ],
        )
        assert result.exit_code != 0
        assert NO_MATCH_FOR_KEY in result.output

    def test_verify_key_not_exists(self, signed_images):
        result = self.runner.invoke(
            shimsign,
            [
                "verify",
                "--key",
                "./invalidPath",
                str(signed_images / "ECDSA_NIST_P384_SHA384.bin"),
            ],
        )
        assert result.exit_code != 0
        assert "Key file not found" in result.output

    def test_verify_image_not_exists(self):
        result = self.runner.invoke(shimsign, ["verify", "./invalid"])
        assert result.exit_code != 0
        assert "Image file ./invalid not found" in result.output

    @pytest.mark.parametrize("algorithm", ALGORITHMS)
    def test_verify_tampered_payload(self, signed_images, tmp_path,
                                     algorithm):
        img = bytearray(
            (signed_images / (algorithm + ".bin")).read_bytes())
        img[HEADER_SIZE + 500] ^= 0x80
        tampered = tmp_path / "tampered.bin"
        tampered.write_bytes(img)

        result = self.runner.invoke(shimsign, ["verify", str(tampered)])
        assert result.exit_code == 1
        assert INVALID_SIGNATURE in result.output

    def test_verify_truncated(self, signed_images, tmp_path):
        img = (signed_images / "RSAPSS_3072_SHA384.bin").read_bytes()
        truncated = tmp_path / "truncated.bin"
        truncated.write_bytes(img[:-1])

        result = self.runner.invoke(shimsign, ["verify", str(truncated)])
        assert result.exit_code == 1
        assert "Image size does not match the verify header" in result.output

    def test_verify_image_is_directory(self, tmp_path):
        result = self.runner.invoke(shimsign, ["verify", str(tmp_path)])
        assert result.exit_code == 2
        assert "Can not read image file {}".format(tmp_path) in result.output

    def test_verify_key_is_directory(self, signed_images, tmp_path):
        result = self.runner.invoke(
            shimsign,
            [
                "verify",
                "--key",
                str(tmp_path),
                str(signed_images / "ECDSA_NIST_P384_SHA384.bin"),
            ],
        )
        assert result.exit_code == 2
        assert "Can not read key file {}".format(tmp_path) in result.output

    def test_verify_not_an_image(self, tmp_path):
        garbage = tmp_path / "garbage.bin"
        garbage.write_bytes(bytes(200))

        result = self.runner.invoke(shimsign, ["verify", str(garbage)])
        assert result.exit_code == 1
        assert "Invalid verify header" in result.output
