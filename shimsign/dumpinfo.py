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
Parse and print verify header and section information of a signed image.
"""

import click
import yaml

from shimsign import image
from shimsign.header import HEADER_SIZE, InvalidHeader
from shimsign.signer import ImageLayoutError

_LINE_LENGTH = 60


def print_in_frame(header_text, content):
    sepc = " "
    header = "#### " + header_text + sepc
    post_header = "#" * (_LINE_LENGTH - len(header))
    print(header + post_header)

    print("|", sepc * (_LINE_LENGTH - 2), "|", sep="")
    offset = (_LINE_LENGTH - len(content)) // 2
    pre = "|" + (sepc * (offset - 1))
    post = sepc * (_LINE_LENGTH - len(pre) - len(content) - 1) + "|"
    print(pre, content, post, sep="")
    print("|", sepc * (_LINE_LENGTH - 2), "|", sep="")
    print("#" * _LINE_LENGTH)


def print_in_row(row_text):
    row_text = "#### " + row_text + " "
    fill = "#" * (_LINE_LENGTH - len(row_text))
    print(row_text + fill)


def print_hex(data, indent=4):
    for i in range(0, len(data), 16):
        print(" " * indent + " ".join("{0:#04x}".format(b)
                                      for b in data[i:i + 16]))


def dump_imginfo(imgfile, outfile=None, silent=False):
    """Parse a signed image binary and print/save the available information."""
    try:
        img = image.Image.load(imgfile)
    except FileNotFoundError:
        raise click.UsageError("Image file not found ({})".format(imgfile))
    except OSError as e:
        raise click.UsageError("Can not read image file {}: {}".format(
            imgfile, e.strerror or e))
    except (InvalidHeader, ImageLayoutError) as e:
        raise click.UsageError("Invalid image {}: {}".format(imgfile, e))

    header = img.header.to_dict()
    sections = {
        "header": {"offset": 0, "size": HEADER_SIZE},
        "payload": {"offset": HEADER_SIZE, "size": len(img.payload)},
        "public_key": {"offset": HEADER_SIZE + len(img.payload),
                       "size": len(img.public_key)},
        "signature": {"offset": HEADER_SIZE + len(img.payload) +
                      len(img.public_key),
                      "size": len(img.signature)},
    }

    if outfile is not None:
        imgdata = {"header": header, "sections": sections,
                   "public_key": img.public_key.hex(),
                   "signature": img.signature.hex()}
        with open(outfile, "w") as f:
            yaml.dump(imgdata, f, sort_keys=False)

    if silent:
        return

    print("Printing content of signed image:", imgfile, "\n")

    print_in_row("Verify header (offset: 0x0)")
    for key, value in header.items():
        if isinstance(value, int) and key not in ("struct_version",):
            value = "{} ({})".format(hex(value), value)
        print("{:<18} {}".format(key + ":", value))
    print("#" * _LINE_LENGTH)

    print_in_frame("Payload (offset: {})".format(hex(HEADER_SIZE)),
                   "payload size: {}".format(hex(len(img.payload))))

    print_in_row("Public key (offset: {})".format(
        hex(sections["public_key"]["offset"])))
    print_hex(img.public_key)
    print_in_row("Signature (offset: {})".format(
        hex(sections["signature"]["offset"])))
    print_hex(img.signature)
    print("#" * _LINE_LENGTH)
