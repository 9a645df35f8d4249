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
from shimsign.main import shimsign
from shimsign import shimsign_version

# all available shimsign commands
COMMANDS = [
    "create",
    "dumpinfo",
    "sign",
    "verify",
    "version",
]


def test_new_command():
    """Check that no new commands had been added,
    so that tests would be updated in such case"""
    for cmd in shimsign.commands:
        assert cmd in COMMANDS


def test_help():
    """Simple test for the shimsign's help option,
    mostly just to see that it can be started"""
    runner = CliRunner()

    result_short = runner.invoke(shimsign, ["-h"])
    assert result_short.exit_code == 0

    result_long = runner.invoke(shimsign, ["--help"])
    assert result_long.exit_code == 0
    assert result_short.output == result_long.output


def test_version():
    """Check that some version info is produced"""
    runner = CliRunner()

    result = runner.invoke(shimsign, ["version"])
    assert result.exit_code == 0
    assert result.output == shimsign_version + "\n"

    result_help = runner.invoke(shimsign, ["version", "-h"])
    assert result_help.exit_code == 0
    assert result_help.output != result.output


def test_unknown():
    """Check that unknown command will be handled"""
    runner = CliRunner()

    result = runner.invoke(shimsign, ["unknown"])
    assert result.exit_code != 0


@pytest.mark.parametrize("command", COMMANDS)
def test_cmd_help(command):
    """Check that all commands have some help"""
    runner = CliRunner()

    result_short = runner.invoke(shimsign, [command, "-h"])
    assert result_short.exit_code == 0

    result_long = runner.invoke(shimsign, [command, "--help"])
    assert result_long.exit_code == 0

    assert result_short.output == result_long.output


def test_sign_help_lists_algorithms():
    runner = CliRunner()

    result = runner.invoke(shimsign, ["sign", "--help"])
    assert result.exit_code == 0
    assert "RSAPSS_3072_SHA384" in result.output
    assert "ECDSA_NIST_P384_SHA384" in result.output
