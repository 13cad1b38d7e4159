"""Keepmark — personal bookmarks API.

Users sign up, sign in, and keep a private list of bookmarks. Every
request after sign-in carries a signed access token, and every bookmark
operation is scoped to the token's owner.
"""

__version__ = "0.1.0"
