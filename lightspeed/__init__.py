"""
Lightspeed - chat assistant context engine for the cluster console.

Resolves the resource in view, manages context attachments and drives
multi-turn conversations with the OpenShift Lightspeed service.
"""

__version__ = "0.1.0"
__author__ = "Lightspeed Contributors"
