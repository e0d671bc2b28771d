"""Version information for EDFView."""

VERSION = (0, 3, 1, 0)
VERSION_STRING = "0.3.1"
