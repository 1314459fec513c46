"""Postboard: accounts, credentials and posts backend."""
