"""Command-line interface for sonarscan."""
