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
Console logging for shimsign, routed through click.
"""

import logging

import click

LOG_LEVELS = {
    'off':   logging.CRITICAL + 10,
    'error': logging.ERROR,
    'warn':  logging.WARNING,
    'info':  logging.INFO,
    'debug': logging.DEBUG,
    'trace': logging.DEBUG,
}
DEFAULT_LOG_LEVEL = 'info'

LEVEL_COLORS = {
    'ERROR':   'red',
    'WARNING': 'yellow',
    'DEBUG':   'cyan',
}


class ClickHandler(logging.Handler):
    """Emit log records with click.echo, colored by level.

    Errors and warnings go to stderr, everything else to stdout.
    """

    def __init__(self, levelcolor=None):
        super().__init__()
        self.levelcolor = LEVEL_COLORS if levelcolor is None else levelcolor

    def emit(self, record):
        try:
            msg = self.format(record)
            fg = self.levelcolor.get(record.levelname)
            click.echo(click.style(msg, fg=fg),
                       err=record.levelno >= logging.WARNING)
        except Exception:
            self.handleError(record)


def setup_logging(level=DEFAULT_LOG_LEVEL):
    """Install the click handler on the package logger."""
    logger = logging.getLogger('shimsign')
    for handler in list(logger.handlers):
        if isinstance(handler, ClickHandler):
            logger.removeHandler(handler)
    handler = ClickHandler()
    handler.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(LOG_LEVELS[level])
    logger.propagate = False
    return logger
