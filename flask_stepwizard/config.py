"""
Flask-StepWizard configuration

Runtime knobs for the wizard state machine and the HTTP adapter. Values can be
given directly or read from a Flask application's config using the
``STEPWIZARD_*`` keys.
"""

from dataclasses import dataclass, fields
from typing import Any, Mapping


CONFIG_KEY_PREFIX = "STEPWIZARD_"


@dataclass(frozen=True)
class WizardConfig:
    """Wizard behavior configuration"""

    # Staging an edit drops that field's stale error right away.
    # When False the error stays visible until the next Next/Submit.
    clear_error_on_edit: bool = True

    # HTTP adapter
    url_prefix: str = "/api/v1/wizard"
    max_active_wizards: int = 1000
    # Wizards untouched for this long are dropped; 0 keeps them until dismissed
    idle_timeout_minutes: int = 30

    def __post_init__(self):
        if self.max_active_wizards < 1:
            raise ValueError("max_active_wizards must be at least 1")
        if self.idle_timeout_minutes < 0:
            raise ValueError("idle_timeout_minutes must not be negative")
        if not self.url_prefix.startswith("/"):
            raise ValueError(f"url_prefix must start with '/': {self.url_prefix!r}")

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "WizardConfig":
        """
        Build a configuration from ``STEPWIZARD_*`` keys

        Args:
            mapping: Any mapping, usually ``app.config``

        Returns:
            WizardConfig with defaults for the keys that are absent
        """
        kwargs = {}
        for item in fields(cls):
            key = CONFIG_KEY_PREFIX + item.name.upper()
            if key in mapping:
                kwargs[item.name] = mapping[key]
        # Short alias used in app configs
        if "STEPWIZARD_MAX_ACTIVE" in mapping and "max_active_wizards" not in kwargs:
            kwargs["max_active_wizards"] = mapping["STEPWIZARD_MAX_ACTIVE"]
        return cls(**kwargs)

    @classmethod
    def from_app(cls, app) -> "WizardConfig":
        """Build a configuration from a Flask application's config."""
        return cls.from_mapping(app.config)
