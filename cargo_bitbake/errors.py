"""Exceptions raised while turning a Cargo package into a BitBake recipe."""


class BitbakeError(RuntimeError):
    """Base class for every fatal recipe generation error."""


class ManifestError(BitbakeError):
    """Raised when Cargo.toml or Cargo.lock cannot be found or read."""


class ConfigError(BitbakeError):
    """Raised when cargo-bitbake.toml holds an invalid value."""


class ClassificationError(BitbakeError):
    """Raised when a resolved dependency carries malformed source data."""


class RevisionError(BitbakeError):
    """Raised when the project's VCS revision cannot be used for pinning."""


class TemplateError(BitbakeError):
    """Raised when a recipe template cannot be loaded or rendered."""


class MissingFieldError(TemplateError):
    """Raised when a template references placeholders with no bound value."""

    def __init__(self, template, missing):
        self.template = template
        self.missing = sorted(missing)
        names = ", ".join(f"{{{name}}}" for name in self.missing)
        super().__init__(f"Template '{template}' references unknown field(s): {names}")


class VcsError(BitbakeError):
    """Raised when the project checkout cannot be inspected."""
