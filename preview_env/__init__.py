"""
Railway preview environments: clone, configure, rebind and redeploy an
environment per pull request.
"""

__version__ = "1.0.0"
