"""Property tests (hypothesis) for codecs and cipher modes."""
