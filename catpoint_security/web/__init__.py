"""Web API for the catpoint security system."""

from .app import SecurityWebApp, EventLogListener, create_app, build_security_service

__all__ = ['SecurityWebApp', 'EventLogListener', 'create_app', 'build_security_service']
