"""sonarscan - SonarLint language server driven from the command line."""

__version__ = "0.1.0"
__logo__ = "🔎"
