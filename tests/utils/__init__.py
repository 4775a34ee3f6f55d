"""
Test Utilities
==============

Fakes for the browser-backed renderer and the Cloudinary uploader.
"""
