"""Byte and limb helpers shared by every engine module."""
