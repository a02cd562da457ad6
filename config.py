import os
import logging
import yaml
import keyring

APP_VERSION = "1.0.0"


class YamlConfig:
    """Load and save engine settings to a YAML file with optional encryption."""

    SENSITIVE_KEYS = {
        "api_token",
    }

    def __init__(self, path: str = "settings.yaml") -> None:
        self.path = path
        self.encrypt = os.environ.get("ENCRYPT_SETTINGS") == "1"
        self.service = "bodyweight-engine"

    def load(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if self.encrypt:
            for key in list(data.keys()):
                if key in self.SENSITIVE_KEYS:
                    secret = keyring.get_password(self.service, key)
                    if secret is not None:
                        data[key] = secret
                    else:
                        data.pop(key, None)
        return data

    def save(self, data: dict) -> None:
        out = dict(data)
        if self.encrypt:
            for key in self.SENSITIVE_KEYS:
                if key in out:
                    keyring.set_password(self.service, key, str(out[key]))
                    out[key] = True
        with open(self.path, "w", encoding="utf-8") as f:
            yaml.safe_dump(out, f)


def load_settings(path: str = "settings.yaml") -> dict:
    """Return validated settings merged over defaults.

    ``TRAINING_DB`` in the environment overrides ``db_path``.
    """
    from settings_schema import SettingsSchema, validate_settings

    data = YamlConfig(path).load()
    validate_settings(data)
    settings = SettingsSchema(**data).model_dump()
    env_db = os.environ.get("TRAINING_DB")
    if env_db:
        settings["db_path"] = env_db
    return settings


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
