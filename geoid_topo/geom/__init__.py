"""Grid cell lookup and interpolation."""
