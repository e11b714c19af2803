#!/usr/bin/env python3
"""
WSGI entry point: gunicorn wsgi:application
"""
from app import create_app

app = create_app()
application = app
