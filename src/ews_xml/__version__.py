"""Version information for ews_xml."""

__version__ = "0.1.0"
__author__ = "ewsync contributors"
__description__ = "Streaming XML cursor and writer for EWS-style SOAP payloads"
