"""Rule compilation: read, validate, classify and assemble rule fragments."""
