"""
Logging setup for the admin front end.

Streams to stdout and adds a RotatingFileHandler under logs/ that captures
the Flask app, Werkzeug and backend client loggers.

Usage:
    from logging_setup import setup_logging
    setup_logging(app)
"""
from __future__ import annotations
import logging
import os
import sys
from logging import Logger
from logging.handlers import RotatingFileHandler
from typing import Optional

from flask import got_request_exception


_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(message)s'


def _has_handler(logger: Logger, cls, filename: Optional[str] = None) -> bool:
    for h in logger.handlers:
        if not isinstance(h, cls):
            continue
        if filename is None:
            return True
        if getattr(h, 'baseFilename', '') == os.path.abspath(filename):
            return True
    return False


def setup_logging(app=None,
                  log_dir: Optional[str] = None,
                  log_file: str = 'pos-admin.log',
                  level: Optional[int] = None) -> Logger:
    """Configure root logging to stdout plus a rotating file.

    Idempotent: safe to call again from the debug reloader or from tests.
    """
    if app is not None:
        log_dir = log_dir or app.config.get('LOG_DIR', 'logs')
        if level is None:
            level = logging.getLevelName(app.config.get('LOG_LEVEL', 'INFO'))
    log_dir = log_dir or 'logs'
    if not isinstance(level, int):
        level = logging.INFO

    os.makedirs(log_dir, exist_ok=True)
    log_path = os.path.join(log_dir, log_file)

    root = logging.getLogger()
    root.setLevel(level)
    fmt = logging.Formatter(_FORMAT)

    # Console handler (stdout); pytest's capture handlers are not StreamHandlers to stdout
    if not any(isinstance(h, logging.StreamHandler) and getattr(h, 'stream', None) is sys.stdout
               for h in root.handlers):
        ch = logging.StreamHandler(sys.stdout)
        ch.setLevel(level)
        ch.setFormatter(fmt)
        root.addHandler(ch)

    if not _has_handler(root, RotatingFileHandler, filename=log_path):
        fh = RotatingFileHandler(log_path, maxBytes=5 * 1024 * 1024, backupCount=3, encoding='utf-8')
        fh.setLevel(level)
        fh.setFormatter(fmt)
        root.addHandler(fh)

    # Make werkzeug (Flask dev server) logs go through root as well
    werk = logging.getLogger('werkzeug')
    werk.setLevel(logging.INFO)
    werk.propagate = True

    if app is not None and not app.extensions.get('pos_admin_logging'):
        app.extensions['pos_admin_logging'] = True
        # Flask's own handler would duplicate every record that also reaches root
        app.logger.propagate = True

        @got_request_exception.connect_via(app)
        def _log_exception(sender, exception, **extra):
            from flask import request
            logging.getLogger('flask.app').error(
                'Request error: %s %s (remote=%s): %s',
                request.method, request.path, request.remote_addr, exception,
                exc_info=exception,
            )

    logging.getLogger(__name__).info('Logging initialized -> %s', log_path)
    return root
