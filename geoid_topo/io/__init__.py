"""Grid readers, writers and geoid correction."""
