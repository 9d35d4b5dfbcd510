"""Configuration schema using Pydantic."""

from pydantic import BaseModel, Field, ConfigDict
from pydantic_settings import BaseSettings

DEFAULT_DEPS_DIR = "./sonarlint-deps"


class ServerConfig(BaseModel):
    """How to launch the SonarLint language server."""
    java: str | None = None  # None: bundled JRE first, then PATH
    sonarlint_lsp: str = f"{DEFAULT_DEPS_DIR}/server/sonarlint-lsp.jar"
    analyzers: list[str] = Field(default_factory=lambda: [f"{DEFAULT_DEPS_DIR}/analyzers/sonarjs.jar"])
    deps_dir: str = DEFAULT_DEPS_DIR
    shutdown_grace_seconds: float = 0.1


class AnalysisConfig(BaseModel):
    """Per-run analysis options."""
    language_id: str = "javascript"
    enabled_rules: list[str] | None = None  # None = every rule on unless disabled
    disabled_rules: list[str] | None = None


class DebugConfig(BaseModel):
    """Raw protocol trace written next to the working directory."""
    enabled: bool = False
    log_file: str = "sonarlint-debug.log"


class Config(BaseSettings):
    """Root configuration for sonarscan."""
    server: ServerConfig = Field(default_factory=ServerConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    debug: DebugConfig = Field(default_factory=DebugConfig)

    def build_command(self) -> tuple[str, list[str]]:
        """Resolve the java binary and the language server arguments."""
        from sonarscan.config.runtime import resolve_java

        java = resolve_java(self.server.java, self.server.deps_dir)
        args = ["-jar", self.server.sonarlint_lsp, "-stdio", "-analyzers", *self.server.analyzers]
        return java, args

    model_config = ConfigDict(
        env_prefix="SONARSCAN_",
        env_nested_delimiter="__"
    )
