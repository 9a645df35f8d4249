#! /usr/bin/env python3
#
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

import logging
import os.path
import sys

import click

import shimsign.keys as keys
from shimsign import image, shimsign_version
from shimsign.dumpinfo import dump_imginfo
from shimsign.header import HEADER_SIZE, U32_MAX
from shimsign.inputdata import InputData, SizeOutOfRange
from shimsign.log import DEFAULT_LOG_LEVEL, LOG_LEVELS, setup_logging
from shimsign.output import OutputFile
from shimsign.signer import ImageLayoutError, create_signed_image

MIN_PYTHON_VERSION = (3, 8)
if sys.version_info < MIN_PYTHON_VERSION:
    sys.exit("Python %s.%s or newer is required by shimsign."
             % MIN_PYTHON_VERSION)

# Size of the payload region reserved by the shim layout
PAYLOAD_MAX_SIZE = 0xC2D000
KEY_MAX_SIZE = 1024 * 1024
SIGNED_PAYLOAD_NAME = "td-payload-signed"
U64_MAX = 0xffffffffffffffff
# Largest payload the header length field can describe
MAX_PAYLOAD_LIMIT = U32_MAX - HEADER_SIZE

logger = logging.getLogger(__name__)


class BasedIntParamType(click.ParamType):
    name = 'integer'

    def __init__(self, max_value=None):
        self.max_value = max_value

    def convert(self, value, param, ctx):
        if isinstance(value, int):
            result = value
        else:
            try:
                result = int(value, 0)
            except ValueError:
                self.fail('%s is not a valid integer. Please use code '
                          'literals prefixed with 0b/0B, 0o/0O, or 0x/0X as '
                          'necessary.' % value, param, ctx)
        if result < 0 or (self.max_value is not None and
                          result > self.max_value):
            self.fail('%s is out of range [0, %s]' % (value, self.max_value),
                      param, ctx)
        return result


def validate_algorithm(ctx, param, value):
    try:
        return keys.SigningAlgorithm.from_name(value)
    except keys.UnsupportedAlgorithm as e:
        raise click.BadParameter("{}".format(e))


def default_output_path(payload):
    return os.path.join(os.path.dirname(os.path.realpath(payload)),
                        SIGNED_PAYLOAD_NAME)


def load_public_key(keyfile):
    try:
        with open(keyfile, 'rb') as f:
            return keys.load_public_pem(f.read())
    except FileNotFoundError:
        raise click.UsageError("Key file not found ({})".format(keyfile))
    except OSError as e:
        raise click.UsageError("Can not read key file {}: {}".format(
            keyfile, e.strerror or e))
    except keys.InvalidKey as e:
        raise click.UsageError("{}: {}".format(keyfile, e))


@click.argument('svn', type=BasedIntParamType(U64_MAX))
@click.argument('ver', type=BasedIntParamType(U64_MAX))
@click.argument('payload')
@click.argument('key')
@click.option('-l', '--log-level', type=click.Choice([*LOG_LEVELS]),
              default=DEFAULT_LOG_LEVEL, help='Logging level.')
@click.option('--max-payload-size',
              type=BasedIntParamType(MAX_PAYLOAD_LIMIT),
              default=PAYLOAD_MAX_SIZE, show_default=True,
              help='Largest payload accepted, in bytes.')
@click.option('-o', '--output', metavar='filename', required=False,
              help='Output file for the signed payload. Defaults to {} '
                   'next to PAYLOAD.'.format(SIGNED_PAYLOAD_NAME))
@click.option('-A', '--algorithm', callback=validate_algorithm,
              default=keys.DEFAULT_ALGORITHM, show_default=True,
              help='Message signing algorithm: {}'.format(
                  ', '.join(keys.ALGORITHM_NAMES)))
@click.command(help='''Sign shim payload with given private key\n
               KEY is a PKCS#8 private key, VER the payload version and SVN
               the security version number.''')
def sign(key, payload, ver, svn, algorithm, output, max_payload_size,
         log_level):
    setup_logging(log_level)
    if output is None:
        output = default_output_path(payload)
    logger.debug("shimsign sign %s %d %d %s %s", payload, ver, svn,
                 algorithm.name, key)

    try:
        payload_data = InputData(payload, (0, max_payload_size), "payload")
        private = InputData(key, (0, KEY_MAX_SIZE), "private key")
        signed_image = create_signed_image(payload_data, private, algorithm,
                                           ver, svn)
    except keys.InvalidKey as e:
        logger.error("Can not load private key from %s: %s", key, e)
        raise click.ClickException("{}: {}".format(key, e))
    except (SizeOutOfRange, keys.SigningFailed, ImageLayoutError,
            OSError) as e:
        raise click.ClickException("{}".format(e))

    try:
        with OutputFile(output) as out:
            out.seek_and_write(0, signed_image, "signed payload")
            out.flush()
    except OSError as e:
        raise click.ClickException("{}".format(e))
    logger.info("Signed payload written to %s", output)


@click.argument('imgfile')
@click.option('-k', '--key', metavar='filename',
              help='Trusted public key (PEM); the embedded key must match it')
@click.command(help="Check that a signed image verifies with its embedded key")
def verify(key, imgfile):
    key = load_public_key(key) if key else None
    try:
        ret, header = image.Image.verify(imgfile, key)
    except FileNotFoundError:
        raise click.UsageError("Image file {} not found".format(imgfile))
    except OSError as e:
        raise click.UsageError("Can not read image file {}: {}".format(
            imgfile, e.strerror or e))
    if ret == image.VerifyResult.OK:
        print("Image was correctly validated")
        print("Image version: {}".format(header.version))
        print("Image SVN: {}".format(header.svn))
        print("Signing algorithm: {}".format(header.algorithm.name))
        return
    elif ret == image.VerifyResult.INVALID_HEADER:
        print("Invalid verify header; is this a signed payload image?")
    elif ret == image.VerifyResult.INVALID_LAYOUT:
        print("Image size does not match the verify header")
    elif ret == image.VerifyResult.INVALID_KEY:
        print("Embedded public key is malformed")
    elif ret == image.VerifyResult.KEY_MISMATCH:
        print("Embedded public key does not match the given key")
    elif ret == image.VerifyResult.INVALID_SIGNATURE:
        print("Image has an invalid signature")
    else:
        print("Unknown return code: {}".format(ret))
    sys.exit(1)


@click.argument('imgfile')
@click.option('-o', '--outfile', metavar='filename', required=False,
              help='Save image information to outfile in YAML format')
@click.option('-s', '--silent', default=False, is_flag=True,
              help='Do not print image information to output')
@click.command(help='Print verify header and section information '
                    'of a signed image')
def dumpinfo(imgfile, outfile, silent):
    dump_imginfo(imgfile, outfile, silent)
    if not silent:
        print("dumpinfo has run successfully")


class AliasesGroup(click.Group):

    _aliases = {
        "create": "sign",
    }

    def list_commands(self, ctx):
        cmds = [k for k in self.commands]
        aliases = [k for k in self._aliases]
        return sorted(cmds + aliases)

    def get_command(self, ctx, cmd_name):
        rv = click.Group.get_command(self, ctx, cmd_name)
        if rv is not None:
            return rv
        if cmd_name in self._aliases:
            return click.Group.get_command(self, ctx, self._aliases[cmd_name])
        return None


@click.command(help='Print shimsign version information')
def version():
    print(shimsign_version)


@click.command(cls=AliasesGroup,
               context_settings=dict(help_option_names=['-h', '--help']))
def shimsign():
    pass


shimsign.add_command(sign)
shimsign.add_command(verify)
shimsign.add_command(dumpinfo)
shimsign.add_command(version)


if __name__ == '__main__':
    shimsign()
